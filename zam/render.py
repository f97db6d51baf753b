"""Console presentation shared by the CLI and the interactive menu"""

from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from zam.config import Config
from zam.outcome import Outcome, Status
from zam.search import highlight_span


class Render:
    """Print outcomes and alias listings with the configured theme"""

    def __init__(self, console: Optional[Console] = None, theme: Optional[Dict[str, str]] = None):
        self.console = console or Console()
        self.theme = theme or Config.THEMES["default"]

    def outcome(self, outcome: Outcome, dry_run: bool = False) -> bool:
        """Print notices, previews and the final status line. Returns outcome.ok"""
        for notice in outcome.notices:
            self.console.print(Text(notice, style="yellow"))
        for preview in outcome.previews:
            self.console.print(Text(f"[Dry Run] {preview.title}", style="blue"))
            if preview.content:
                self.console.print(Text(preview.content.rstrip("\n"), style="dim"))

        if outcome.status is Status.OK:
            if dry_run:
                self.console.print(Text("[Dry Run] No files were changed.", style="blue"))
            else:
                self.console.print(Text.assemble(("✔ ", "green"), (outcome.message, "green")))
        elif outcome.status is Status.UNCHANGED:
            self.console.print(Text(outcome.message, style="yellow"))
        else:
            self.console.print(Text.assemble(("✗ ", "bold red"), (outcome.message, "red")))
        return outcome.ok

    def error(self, message: str) -> None:
        self.console.print(Text.assemble(("✗ ", "bold red"), (message, "red")))

    def hint(self, message: str) -> None:
        self.console.print(Text(message, style="dim"))

    def tag_suffix(self, tags: List[str]) -> Text:
        if not tags:
            return Text("")
        return Text(f" [{', '.join(tags)}]", style=self.theme["tag_color"])

    def _highlighted(self, value: str, query: Optional[str], style: str) -> Text:
        text = Text(value, style=style)
        span = highlight_span(value, query or "")
        if span:
            text.stylize(self.theme["highlight_color"], *span)
        return text

    def alias_line(self, name: str, command: str, tags: Iterable[str] = (), query: Optional[str] = None) -> Text:
        """Format 'name [tags] = command', highlighting query matches"""
        line = Text("  ")
        line.append_text(self._highlighted(name, query, self.theme["name_color"]))
        line.append_text(self.tag_suffix(list(tags)))
        line.append(" = ")
        line.append_text(self._highlighted(command, query, self.theme["command_color"]))
        return line

    def alias_table(self, title: str, rows: Iterable[tuple]) -> None:
        """Print (name, command, tags) rows as a table"""
        table = Table(title=title)
        table.add_column("Name", style=self.theme["name_color"], no_wrap=True)
        table.add_column("Command", style=self.theme["command_color"])
        table.add_column("Tags", style=self.theme["tag_color"])
        for name, command, tags in rows:
            table.add_row(Text(name), Text(command), Text(", ".join(tags) if tags else "—"))
        self.console.print(table)
