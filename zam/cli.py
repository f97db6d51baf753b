import json
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.text import Text

from zam import __version__
from zam import handlers
from zam.codec import validate_command, validate_name
from zam.config import Config, RunOptions
from zam.editor import edit_text
from zam.handlers import TagMode
from zam.models import split_tags
from zam.outcome import Outcome, Preview, Status
from zam.porter import dump, export_to_dict
from zam.render import Render
from zam.search import filter_by_tag, search_aliases
from zam.storage import AliasStorage, join_metadata

console = Console()

SOURCE_HINT = 'Run "source ~/.zshrc" (or open a new terminal) to apply.'


@dataclass
class CliState:
    """Everything a command needs, built once per invocation"""

    storage: AliasStorage
    config: Config
    options: RunOptions
    render: Render


def build_state(dry_run: bool = False) -> CliState:
    config = Config()
    storage = AliasStorage(paths=config.resolve_paths(), max_backups=config.get_int("max_backups"))
    return CliState(
        storage=storage,
        config=config,
        options=RunOptions(dry_run=dry_run),
        render=Render(console, config.get_theme()),
    )


def _finish(state: CliState, outcome: Outcome) -> None:
    """Print the outcome and exit non-zero when it failed"""
    if not state.render.outcome(outcome, dry_run=state.options.dry_run):
        sys.exit(1)


def _read(state: CliState, outcome: Outcome):
    """Data of a read-only outcome; a failed read is reported and exits"""
    if not outcome.ok:
        _finish(state, outcome)
    return outcome.data


def _ensure_setup(state: CliState) -> None:
    outcome = handlers.setup(state.storage, state.options)
    if outcome.notices or outcome.previews or not outcome.ok:
        for notice in outcome.notices:
            console.print(Text(notice, style="yellow"))
        for preview in outcome.previews:
            console.print(Text(f"[Dry Run] {preview.title}", style="blue"))
        if not outcome.ok:
            state.render.error(outcome.message)


def _require_valid(state: CliState, error) -> None:
    if error:
        state.render.error(error)
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--dry-run", "-d", is_flag=True, help="Simulate actions without writing to files")
@click.version_option(version=__version__, prog_name="zam")
@click.pass_context
def main(ctx, dry_run):
    """zam - Zsh Alias Manager

    Run without commands to launch the interactive menu.
    """
    ctx.obj = build_state(dry_run)
    if ctx.invoked_subcommand is None:
        from zam.interactive import InteractiveSession

        _ensure_setup(ctx.obj)
        session = InteractiveSession(ctx.obj.storage, ctx.obj.config, ctx.obj.options, ctx.obj.render)
        ctx.exit(session.run())


@main.command()
@click.argument("name")
@click.argument("command")
@click.option("--tag", "-t", "tags", multiple=True, help="Tag/category for the alias (repeatable, or comma-separated)")
@click.pass_obj
def add(state, name, command, tags):
    """Add a new alias"""
    _require_valid(state, validate_name(name) or validate_command(command))
    _ensure_setup(state)

    tag_list = split_tags(",".join(tags))
    outcome = handlers.add(state.storage, name, command, tag_list, state.options)
    if outcome.ok and outcome.data:
        outcome.message += f" [{', '.join(outcome.data)}]"
    _finish(state, outcome)
    if not state.options.dry_run:
        state.render.hint(SOURCE_HINT)


@main.command()
@click.argument("name")
@click.pass_obj
def remove(state, name):
    """Remove an existing alias"""
    _ensure_setup(state)
    _finish(state, handlers.remove(state.storage, name, state.options))
    if not state.options.dry_run:
        state.render.hint(SOURCE_HINT)


@main.command()
@click.argument("old_name")
@click.argument("new_name")
@click.pass_obj
def rename(state, old_name, new_name):
    """Rename an existing alias"""
    _require_valid(state, validate_name(new_name))
    _ensure_setup(state)
    _finish(state, handlers.rename(state.storage, old_name, new_name, state.options))


@main.command()
@click.argument("name")
@click.pass_obj
def edit(state, name):
    """Edit an alias's command in your default editor"""
    _ensure_setup(state)
    aliases, _ = _read(state, handlers.read_state(state.storage))
    if name not in aliases:
        _finish(state, Outcome.not_found(f"Alias '{name}' not found."))
        return

    editor = state.config.get_editor()
    if state.options.dry_run:
        outcome = Outcome.unchanged("No changes made.", previews=[Preview(f"Would open {editor} to edit alias '{name}'")])
        _finish(state, outcome)
        return

    new_command = edit_text(aliases[name], editor, name)
    if new_command is None:
        _finish(state, Outcome.unchanged("Editor exited with an error; alias left unchanged."))
        return
    _require_valid(state, validate_command(new_command))
    _finish(state, handlers.edit(state.storage, name, new_command, state.options))


@main.command(name="list")
@click.option("--tag", "-t", help="Filter by tag")
@click.pass_obj
def list_aliases(state, tag):
    """List all managed aliases"""
    _ensure_setup(state)
    aliases, metadata = _read(state, handlers.read_state(state.storage))
    if tag:
        aliases = filter_by_tag(aliases, metadata, tag)

    if not aliases:
        if tag:
            console.print(Text(f"No aliases found with tag '{tag}'.", style="yellow"))
        else:
            console.print("[yellow]No aliases found.[/] Add one with 'zam add'")
        return

    title = f"Managed Aliases ({len(aliases)} total)"
    if tag:
        title = f"Managed Aliases (tag: {tag})"
    state.render.alias_table(
        title,
        ((name, aliases[name], metadata[name].get_tags() if name in metadata else []) for name in sorted(aliases)),
    )


@main.command()
@click.argument("query")
@click.option("--tag", "-t", help="Filter by tag")
@click.option("--fuzzy", "-f", is_flag=True, help="Also include fuzzy matches")
@click.pass_obj
def search(state, query, tag, fuzzy):
    """Search for an alias by name or command"""
    _ensure_setup(state)
    aliases, metadata = _read(state, handlers.read_state(state.storage))
    results = search_aliases(
        aliases,
        metadata,
        query,
        tag=tag,
        fuzzy=fuzzy,
        threshold=state.config.get_int("fuzzy_threshold"),
    )
    if not results:
        console.print(Text(f"No aliases found matching '{query}'", style="yellow"))
        return

    console.print(f"[bold]Found {len(results)} matches:[/]")
    for result in results:
        console.print(state.render.alias_line(result.name, result.command, result.tags, query))


@main.command()
@click.argument("name")
@click.option("--set", "set_tags", multiple=True, help="Replace all tags")
@click.option("--add", "add_tags", multiple=True, help="Add tags")
@click.option("--remove", "remove_tags", multiple=True, help="Remove tags")
@click.option("--clear", is_flag=True, help="Remove every tag")
@click.pass_obj
def tag(state, name, set_tags, add_tags, remove_tags, clear):
    """Show or change the tags of an alias"""
    requested = [
        (mode, values)
        for mode, values in (
            (TagMode.REPLACE, set_tags),
            (TagMode.ADD, add_tags),
            (TagMode.REMOVE, remove_tags),
            (TagMode.CLEAR, clear),
        )
        if values
    ]
    if len(requested) > 1:
        raise click.UsageError("Use only one of --set, --add, --remove or --clear")

    mode, values = requested[0] if requested else (TagMode.SHOW, ())
    tag_list = [] if mode in (TagMode.CLEAR, TagMode.SHOW) else split_tags(",".join(values))
    _ensure_setup(state)
    _finish(state, handlers.set_tag_state(state.storage, name, mode, tag_list, state.options))


@main.command(name="import")
@click.pass_obj
def import_command(state):
    """Import existing aliases from .zshrc"""
    _ensure_setup(state)
    outcome = handlers.import_aliases(state.storage, state.options)
    for name in outcome.data or []:
        console.print(Text(f"Importing '{name}'...", style="cyan"))
    _finish(state, outcome)


@main.command()
@click.pass_obj
def backup(state):
    """Backup managed aliases to a file"""
    outcome = handlers.backup(state.storage, state.options)
    _finish(state, outcome)
    if outcome.ok and not state.options.dry_run:
        state.render.hint(f"Location: {outcome.data}")


@main.command()
@click.pass_obj
def backups(state):
    """List available backups"""
    names = _read(state, handlers.read_backups(state.storage))
    if not names:
        console.print("[yellow]No backups found.[/]")
        return

    console.print("[bold]Available backups:[/]")
    for i, name in enumerate(names, 1):
        console.print(Text.assemble((f"  {i}. ", "cyan"), name))
    state.render.hint(f"\nRestore with: zam restore {state.storage.paths.backups_dir}/<filename>")


@main.command()
@click.argument("file", type=click.Path())
@click.pass_obj
def restore(state, file):
    """Restore aliases from a backup file"""
    _finish(state, handlers.restore(state.storage, Path(file), state.options))
    if not state.options.dry_run:
        state.render.hint(SOURCE_HINT)


@main.command()
@click.pass_obj
def setup(state):
    """Create the managed file and source it from .zshrc"""
    _finish(state, handlers.setup(state.storage, state.options))


@main.command()
@click.option("--format", "fmt", type=click.Choice(["json", "yaml"]), default="json", help="Export format")
@click.option("--output", "-o", type=click.Path(), help="Write to a file instead of stdout")
@click.option("--tag", "-t", help="Only export aliases with this tag")
@click.pass_obj
def export(state, fmt, output, tag):
    """Export aliases and their tags as JSON or YAML"""
    aliases, metadata = _read(state, handlers.read_state(state.storage))
    data = export_to_dict(join_metadata(aliases, metadata), tag_filter=tag)
    content = dump(data, fmt)
    if not output:
        click.echo(content, nl=False)
        return

    target = Path(output)
    if state.options.dry_run:
        _finish(state, Outcome.success("", previews=[Preview(f"Would write {data['count']} aliases to {target}")]))
        return
    try:
        state.storage.fs.write_text(target, content)
    except OSError as e:
        _finish(state, Outcome(Status.IO_FAILURE, f"Export failed: {e}"))
        return
    _finish(state, Outcome.success(f"Exported {data['count']} aliases to {target.name}"))


@main.command(name="config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.pass_obj
def config_command(state, key, value):
    """Show or change zam settings"""
    config = state.config
    if key is None:
        for name, current in sorted(config.config.items()):
            console.print(Text.assemble((f"{name}", "cyan"), " = ", json.dumps(current)))
        return
    if key not in Config.DEFAULT_CONFIG:
        _require_valid(state, config.validate(key, value))
    if value is None:
        console.print(Text.assemble((key, "cyan"), " = ", json.dumps(config.config.get(key))))
        return

    try:
        parsed = json.loads(value)
    except ValueError:
        parsed = value
    _require_valid(state, config.validate(key, parsed))
    if state.options.dry_run:
        console.print(Text(f"[Dry Run] Would set {key} = {json.dumps(parsed)}", style="blue"))
        return
    try:
        config.set(key, parsed)
    except OSError as e:
        _finish(state, Outcome(Status.IO_FAILURE, f"Could not save settings: {e}"))
        return
    console.print(Text.assemble(("✔ ", "green"), f"Set {key} = {json.dumps(parsed)}"))


if __name__ == "__main__":
    main()
