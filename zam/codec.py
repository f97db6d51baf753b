"""Reading and writing the managed alias file format"""

from typing import Dict, Optional

HEADER = "# Managed by Zsh Alias Manager (zam)"
PREFIX = "alias "

# close quote, escaped literal quote, reopen quote
ESCAPED_QUOTE = "'\\''"


def unquote_value(raw: str) -> str:
    """Strip one matching pair of outer quotes and unescape single quotes"""
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return value.replace(ESCAPED_QUOTE, "'")


def escape_command(command: str) -> str:
    """Escape single quotes so the command survives inside '...'"""
    return command.replace("'", ESCAPED_QUOTE)


def parse_aliases(text: str) -> Dict[str, str]:
    """Parse alias file text into a name -> command mapping.

    Malformed lines are skipped. A name defined twice keeps the last value.
    """
    aliases: Dict[str, str] = {}
    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        if not trimmed.startswith(PREFIX):
            continue

        eq_index = trimmed.find("=", len(PREFIX))
        if eq_index == -1:
            continue

        name = trimmed[len(PREFIX):eq_index].strip()
        if not name:
            continue
        aliases[name] = unquote_value(trimmed[eq_index + 1:])
    return aliases


def format_alias_line(name: str, command: str) -> str:
    return f"{PREFIX}{name}='{escape_command(command)}'"


def serialize_aliases(aliases: Dict[str, str]) -> str:
    """Render a mapping as sourceable alias file text, sorted by name"""
    lines = [HEADER]
    for name in sorted(aliases):
        lines.append(format_alias_line(name, aliases[name]))
    return "\n".join(lines) + "\n"


def validate_name(name: str) -> Optional[str]:
    """Return an error message if the name cannot be stored, else None"""
    if not name or not name.strip():
        return "Alias name cannot be empty"
    if "=" in name:
        return "Alias name cannot contain '='"
    if any(ch.isspace() for ch in name):
        return "Alias name cannot contain whitespace"
    return None


def validate_command(command: str) -> Optional[str]:
    if not command:
        return "Command cannot be empty"
    if "\n" in command:
        return "Command cannot span multiple lines"
    return None
