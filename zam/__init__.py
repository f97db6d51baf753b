"""zam - Zsh Alias Manager"""

__version__ = "1.0.0"
