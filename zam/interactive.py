"""Menu-driven interactive mode.

The menu is a small state machine: each ``Screen`` offers a fixed list of
``Action`` values, and every action handler returns the next screen (or
``None`` to leave). Labels are display text only; dispatch never compares
them.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.prompt import Confirm, Prompt
from rich.rule import Rule
from rich.text import Text

from zam import handlers
from zam.codec import validate_command, validate_name
from zam.config import Config, RunOptions
from zam.handlers import TagMode
from zam.models import split_tags
from zam.render import Render
from zam.search import search_aliases
from zam.storage import AliasStorage


class Screen(Enum):
    EMPTY = "empty"
    MAIN = "main"
    BACKUPS = "backups"


class Action(Enum):
    SEARCH = "search"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    RENAME = "rename"
    TAGS = "tags"
    LIST = "list"
    IMPORT = "import"
    BACKUP_MENU = "backup_menu"
    CREATE_BACKUP = "create_backup"
    LIST_BACKUPS = "list_backups"
    RESTORE = "restore"
    BACK = "back"
    EXIT = "exit"


ACTION_LABELS: Dict[Action, str] = {
    Action.SEARCH: "Search/Filter",
    Action.ADD: "Add New",
    Action.EDIT: "Edit Alias",
    Action.DELETE: "Delete Alias",
    Action.RENAME: "Rename Alias",
    Action.TAGS: "Edit Tags",
    Action.LIST: "List All",
    Action.IMPORT: "Import from .zshrc",
    Action.BACKUP_MENU: "Backup/Restore",
    Action.CREATE_BACKUP: "Create Backup",
    Action.LIST_BACKUPS: "List Backups",
    Action.RESTORE: "Restore from Backup",
    Action.BACK: "Back",
    Action.EXIT: "Exit",
}

MENUS: Dict[Screen, List[Action]] = {
    Screen.EMPTY: [Action.ADD, Action.IMPORT, Action.RESTORE, Action.EXIT],
    Screen.MAIN: [
        Action.SEARCH,
        Action.ADD,
        Action.EDIT,
        Action.DELETE,
        Action.RENAME,
        Action.TAGS,
        Action.LIST,
        Action.IMPORT,
        Action.BACKUP_MENU,
        Action.EXIT,
    ],
    Screen.BACKUPS: [Action.CREATE_BACKUP, Action.LIST_BACKUPS, Action.RESTORE, Action.BACK],
}

AskFn = Callable[..., str]
ConfirmFn = Callable[[str], bool]


class InteractiveSession:
    """Run the interactive menu until the user exits"""

    def __init__(
        self,
        storage: AliasStorage,
        config: Config,
        options: RunOptions,
        render: Render,
        ask: Optional[AskFn] = None,
        confirm: Optional[ConfirmFn] = None,
    ):
        self.storage = storage
        self.config = config
        self.options = options
        self.render = render
        self.console = render.console
        self.ask = ask or self._prompt_ask
        self.confirm = confirm or self._prompt_confirm
        self.alias_count = 0
        self.actions: Dict[Action, Callable[[], Optional[Screen]]] = {
            Action.SEARCH: self.do_search,
            Action.ADD: self.do_add,
            Action.EDIT: self.do_edit,
            Action.DELETE: self.do_delete,
            Action.RENAME: self.do_rename,
            Action.TAGS: self.do_tags,
            Action.LIST: self.do_list,
            Action.IMPORT: self.do_import,
            Action.BACKUP_MENU: lambda: Screen.BACKUPS,
            Action.CREATE_BACKUP: self.do_create_backup,
            Action.LIST_BACKUPS: self.do_list_backups,
            Action.RESTORE: self.do_restore,
            Action.BACK: lambda: Screen.MAIN,
            Action.EXIT: lambda: None,
        }

    def _prompt_ask(self, message: str, choices: Optional[List[str]] = None, default: Optional[str] = None) -> str:
        return Prompt.ask(
            message,
            choices=choices,
            default=... if default is None else default,
            console=self.console,
            show_default=bool(default),
        )

    def _prompt_confirm(self, message: str) -> bool:
        return Confirm.ask(message, console=self.console)

    def run(self) -> int:
        """Loop over screens. Exit, Ctrl-C and end of input all end cleanly."""
        screen: Optional[Screen] = Screen.MAIN
        first = True
        try:
            while screen is not None:
                if not first:
                    self.console.print(Rule(style="dim"))
                first = False
                if screen is not Screen.BACKUPS:
                    screen = self.home_screen()
                action = self.choose(screen)
                try:
                    screen = self.actions[action]()
                except (OSError, UnicodeError) as e:
                    self.render.error(f"{ACTION_LABELS[action]} failed: {e}")
        except (KeyboardInterrupt, EOFError):
            pass
        self.console.print(Text("\nBye!", style="blue"))
        return 0

    def home_screen(self) -> Screen:
        """MAIN when aliases exist, EMPTY otherwise or when the file is unreadable"""
        try:
            self.alias_count = len(self.storage.load())
        except (OSError, UnicodeError) as e:
            self.render.error(f"Cannot read {self.storage.paths.aliases_file}: {e}")
            self.alias_count = 0
        return Screen.MAIN if self.alias_count else Screen.EMPTY

    def choose(self, screen: Screen) -> Action:
        actions = MENUS[screen]
        if screen is Screen.BACKUPS:
            self.console.print(Text("Backup/Restore", style="bold"))
        else:
            count = self.alias_count
            count_text = "1 alias" if count == 1 else f"{count} aliases"
            self.console.print(Text(f" Zsh Alias Manager ({count_text}) ", style=self.render.theme["header_color"]))
        for i, action in enumerate(actions, 1):
            self.console.print(Text.assemble((f"  {i}. ", "cyan"), ACTION_LABELS[action]))
        answer = self.ask("Choose an option", choices=[str(i) for i in range(1, len(actions) + 1)])
        return actions[int(answer) - 1]

    def _report(self, outcome) -> None:
        self.render.outcome(outcome, dry_run=self.options.dry_run)

    def _ask_name(self, message: str) -> Optional[str]:
        name = self.ask(message).strip()
        if not name:
            return None
        error = validate_name(name)
        if error:
            self.render.error(error)
            return None
        return name

    def _ask_command(self, message: str, default: str = "") -> Optional[str]:
        command = self.ask(message, default=default)
        if not command:
            return None
        error = validate_command(command)
        if error:
            self.render.error(error)
            return None
        return command

    def select_alias(self, verb: str) -> Optional[str]:
        """Let the user narrow down and pick one alias"""
        aliases = self.storage.load()
        term = self.ask(f"Search for alias to {verb} (empty lists all)", default="")
        results = search_aliases(
            aliases,
            self.storage.read_metadata(),
            term,
            fuzzy=True,
            threshold=self.config.get_int("fuzzy_threshold"),
        )
        if not results:
            self.console.print(Text("No matches found.", style="yellow"))
            return None

        self.console.print(Text("  0. Cancel", style="dim"))
        for i, result in enumerate(results, 1):
            line = Text(f"  {i}.", style="cyan")
            line.append_text(self.render.alias_line(result.name, result.command, result.tags))
            self.console.print(line)
        answer = self.ask("Select alias", choices=[str(i) for i in range(len(results) + 1)])
        if answer == "0":
            return None
        return results[int(answer) - 1].name

    def do_search(self) -> Screen:
        query = self.ask("Search")
        results = search_aliases(
            self.storage.load(),
            self.storage.read_metadata(),
            query,
            fuzzy=True,
            threshold=self.config.get_int("fuzzy_threshold"),
        )
        if not results:
            self.console.print(Text("No matches found.", style="yellow"))
            return Screen.MAIN

        self.console.print(Text(f"Found {len(results)} matches:", style="bold"))
        for result in results:
            self.console.print(self.render.alias_line(result.name, result.command, result.tags, query))
        return Screen.MAIN

    def do_add(self) -> Screen:
        name = self._ask_name("Alias name")
        if not name:
            return Screen.MAIN
        command = self._ask_command("Command")
        if not command:
            return Screen.MAIN
        tags = split_tags(self.ask("Tags (optional, comma-separated, e.g. git, docker)", default=""))
        self._report(handlers.add(self.storage, name, command, tags, self.options))
        return Screen.MAIN

    def do_edit(self) -> Screen:
        name = self.select_alias("edit")
        if not name:
            return Screen.MAIN
        current = self.storage.load().get(name, "")
        command = self._ask_command("New command", default=current)
        self._report(handlers.edit(self.storage, name, command, self.options))
        return Screen.MAIN

    def do_delete(self) -> Screen:
        name = self.select_alias("delete")
        if not name:
            return Screen.MAIN
        if self.confirm(f"Delete '{name}'?"):
            self._report(handlers.remove(self.storage, name, self.options))
        return Screen.MAIN

    def do_rename(self) -> Screen:
        name = self.select_alias("rename")
        if not name:
            return Screen.MAIN
        new_name = self._ask_name("New name")
        if new_name:
            self._report(handlers.rename(self.storage, name, new_name, self.options))
        return Screen.MAIN

    def do_tags(self) -> Screen:
        name = self.select_alias("tag")
        if not name:
            return Screen.MAIN
        self._report(handlers.set_tag_state(self.storage, name, TagMode.SHOW, options=self.options))

        mode = TagMode(self.ask("Change tags", choices=[m.value for m in TagMode], default=TagMode.SHOW.value))
        if mode is TagMode.SHOW:
            return Screen.MAIN
        tags: List[str] = []
        if mode is not TagMode.CLEAR:
            tags = split_tags(self.ask("Tags (comma-separated)"))
        self._report(handlers.set_tag_state(self.storage, name, mode, tags, self.options))
        return Screen.MAIN

    def do_list(self) -> Screen:
        aliases = self.storage.list_all()
        if not aliases:
            self.console.print(Text("No aliases found.", style="yellow"))
            return Screen.MAIN
        self.console.print(Text("All Aliases:", style="bold"))
        for alias in aliases:
            self.console.print(self.render.alias_line(alias.name, alias.command, alias.tags))
        return Screen.MAIN

    def do_import(self) -> Screen:
        self._report(handlers.import_aliases(self.storage, self.options))
        return Screen.MAIN

    def do_create_backup(self) -> Screen:
        self._report(handlers.backup(self.storage, self.options))
        return Screen.BACKUPS

    def do_list_backups(self) -> Screen:
        names = handlers.list_backups(self.storage)
        if not names:
            self.console.print(Text("No backups found.", style="yellow"))
            return Screen.BACKUPS
        self.console.print(Text("Available backups:", style="bold"))
        for i, name in enumerate(names, 1):
            self.console.print(Text.assemble((f"  {i}. ", "cyan"), name))
        return Screen.BACKUPS

    def do_restore(self) -> Screen:
        path = self.ask("Path to backup file").strip()
        if path:
            self._report(handlers.restore(self.storage, Path(path), self.options))
        return Screen.MAIN
