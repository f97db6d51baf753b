"""Alias operations: each loads state, validates, then commits in one go.

Every handler returns an ``Outcome`` instead of raising for expected
failures, and takes the ``RunOptions`` of the current invocation. With
``dry_run`` set the same writes are computed but reported as previews.
"""

import functools
import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from zam.codec import HEADER, parse_aliases, unquote_value
from zam.config import RunOptions
from zam.models import AliasMetadata
from zam.outcome import Outcome, Preview, Status
from zam.storage import AliasStorage

DEFAULT_OPTIONS = RunOptions()

IMPORT_PATTERN = re.compile(r"^alias\s+([^=]+)=(.+)")
MOVED_MARKER = "# [Moved to zam]"
SETUP_MARKER = "# Added by Zsh Alias Manager (zam)"
BACKUP_PREFIX = "zam-backup-"
BACKUP_SUFFIX = ".bak"


class TagMode(Enum):
    """Ways of changing an alias's tags"""

    REPLACE = "replace"
    ADD = "add"
    REMOVE = "remove"
    CLEAR = "clear"
    SHOW = "show"


def reports_io_failure(label: str):
    """Turn filesystem errors into an IO_FAILURE outcome"""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (OSError, UnicodeError) as e:
                return Outcome(Status.IO_FAILURE, f"{label}: {e}")

        return wrapper

    return decorator


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _read_metadata(storage: AliasStorage, notices: List[str]) -> Dict[str, AliasMetadata]:
    metadata = storage.read_metadata()
    if storage.metadata.malformed:
        notices.append(
            f"Metadata file {storage.paths.metadata_file} is not valid JSON; treating it as empty"
        )
    return metadata


def _commit(
    storage: AliasStorage,
    options: RunOptions,
    outcome: Outcome,
    aliases: Optional[Dict[str, str]] = None,
    metadata: Optional[Dict[str, AliasMetadata]] = None,
) -> Outcome:
    """Write the staged alias and metadata state, or preview it"""
    if options.dry_run:
        if aliases is not None:
            outcome.previews.append(
                Preview(
                    f"Would write the following content to {storage.paths.aliases_file}:",
                    storage.aliases.render(aliases),
                )
            )
        if metadata is not None:
            outcome.previews.append(
                Preview(
                    f"Would write the following content to {storage.paths.metadata_file}:",
                    storage.metadata.render(metadata),
                )
            )
        return outcome

    if aliases is not None:
        storage.save(aliases)
    if metadata is not None:
        storage.write_metadata(metadata)
    return outcome


@reports_io_failure("Error adding alias")
def add(
    storage: AliasStorage,
    name: str,
    command: str,
    tags: Optional[Iterable[str]] = None,
    options: RunOptions = DEFAULT_OPTIONS,
) -> Outcome:
    """Add an alias, replacing any existing definition of the same name"""
    aliases = storage.load()
    notices: List[str] = []

    previous = aliases.get(name)
    if previous is not None:
        notices.append(f"Overwriting existing alias '{name}' (was: {previous})")
    aliases[name] = command

    metadata = _read_metadata(storage, notices)
    record = metadata.get(name, AliasMetadata()).copy()
    if not record.created:
        record.created = _timestamp()
    if tags:
        record.set_tags(tags)
    metadata[name] = record

    outcome = Outcome.success(
        f"Alias '{name}' added successfully!", notices=notices, data=record.get_tags()
    )
    return _commit(storage, options, outcome, aliases=aliases, metadata=metadata)


@reports_io_failure("Error removing alias")
def remove(storage: AliasStorage, name: str, options: RunOptions = DEFAULT_OPTIONS) -> Outcome:
    aliases = storage.load()
    if name not in aliases:
        return Outcome.not_found(f"Alias '{name}' not found.")

    del aliases[name]
    notices: List[str] = []
    metadata = _read_metadata(storage, notices)
    outcome = Outcome.success(f"Alias '{name}' removed successfully!", notices=notices)
    if metadata.pop(name, None) is None:
        return _commit(storage, options, outcome, aliases=aliases)
    return _commit(storage, options, outcome, aliases=aliases, metadata=metadata)


@reports_io_failure("Error renaming alias")
def rename(
    storage: AliasStorage, old_name: str, new_name: str, options: RunOptions = DEFAULT_OPTIONS
) -> Outcome:
    """Move an alias and its metadata to a new, unused name"""
    aliases = storage.load()
    if old_name not in aliases:
        return Outcome.not_found(f"Alias '{old_name}' not found.")
    if new_name == old_name:
        return Outcome.unchanged("No changes made.")
    if new_name in aliases:
        return Outcome.conflict(f"Alias '{new_name}' already exists.")

    aliases[new_name] = aliases.pop(old_name)
    notices: List[str] = []
    metadata = _read_metadata(storage, notices)
    outcome = Outcome.success(f"Alias '{old_name}' renamed to '{new_name}'.", notices=notices)
    if old_name not in metadata:
        return _commit(storage, options, outcome, aliases=aliases)
    metadata[new_name] = metadata.pop(old_name)
    return _commit(storage, options, outcome, aliases=aliases, metadata=metadata)


@reports_io_failure("Error editing alias")
def edit(
    storage: AliasStorage, name: str, new_command: Optional[str], options: RunOptions = DEFAULT_OPTIONS
) -> Outcome:
    """Replace an alias's command. ``None`` means the edit was cancelled."""
    aliases = storage.load()
    if name not in aliases:
        return Outcome.not_found(f"Alias '{name}' not found.")
    if not new_command or new_command == aliases[name]:
        return Outcome.unchanged("No changes made.")

    aliases[name] = new_command
    return _commit(storage, options, Outcome.success(f"Alias '{name}' updated."), aliases=aliases)


def _describe_tags(name: str, tags: List[str]) -> str:
    if not tags:
        return f"Alias '{name}' has no tags."
    return f"Tags for '{name}': {', '.join(tags)}"


@reports_io_failure("Error updating tags")
def set_tag_state(
    storage: AliasStorage,
    name: str,
    mode: TagMode,
    tags: Iterable[str] = (),
    options: RunOptions = DEFAULT_OPTIONS,
) -> Outcome:
    """Replace, extend, shrink, clear or just show an alias's tags"""
    aliases = storage.load()
    if name not in aliases:
        return Outcome.not_found(f"Alias '{name}' not found.")

    notices: List[str] = []
    metadata = _read_metadata(storage, notices)
    record = metadata.get(name, AliasMetadata()).copy()

    tags = list(tags)
    if mode is TagMode.REPLACE:
        record.set_tags(tags)
    elif mode is TagMode.ADD:
        record.merge_add(tags)
    elif mode is TagMode.REMOVE:
        record.merge_remove(tags)
    elif mode is TagMode.CLEAR:
        record.clear()

    after = record.get_tags()
    if mode is TagMode.SHOW:
        return Outcome.unchanged(_describe_tags(name, after), notices=notices, data=after)

    if record.is_empty():
        metadata.pop(name, None)
    else:
        metadata[name] = record
    outcome = Outcome.success(_describe_tags(name, after), notices=notices, data=after)
    return _commit(storage, options, outcome, metadata=metadata)


@reports_io_failure("Error importing aliases")
def import_aliases(storage: AliasStorage, options: RunOptions = DEFAULT_OPTIONS) -> Outcome:
    """Move unmanaged alias lines from the startup file into zam.

    Imported lines are commented out with a marker rather than deleted.
    Names that zam already manages are skipped and their lines left alone.
    """
    zshrc = storage.paths.zshrc_file
    if not storage.fs.exists(zshrc):
        return Outcome.not_found(f"{zshrc.name} not found.")

    managed = storage.load()
    imported: List[str] = []
    notices: List[str] = []
    new_lines: List[str] = []

    for line in storage.fs.read_text(zshrc).split("\n"):
        trimmed = line.strip()
        if not trimmed.startswith("alias") or trimmed.startswith("#"):
            new_lines.append(line)
            continue

        match = IMPORT_PATTERN.match(trimmed)
        if not match:
            new_lines.append(line)
            continue

        name = match.group(1).strip()
        if name in managed:
            notices.append(f"Skipping import of '{name}' (already managed).")
            new_lines.append(line)
            continue

        managed[name] = unquote_value(match.group(2))
        imported.append(name)
        new_lines.append(f"{MOVED_MARKER} {line}")

    if not imported:
        return Outcome.unchanged("No new aliases found to import.", notices=notices, data=[])

    outcome = Outcome.success(
        f"Successfully imported {len(imported)} aliases.", notices=notices, data=imported
    )
    if options.dry_run:
        outcome.previews.append(Preview(f"Would import {len(imported)} aliases."))
        outcome.previews.append(Preview(f"Would comment out imported aliases in {zshrc}"))
        return outcome

    storage.save(managed)
    storage.fs.write_text(zshrc, "\n".join(new_lines))
    outcome.notices.append(f"Original lines in {zshrc.name} have been commented out.")
    return outcome


@reports_io_failure("Error setting up zam")
def setup(storage: AliasStorage, options: RunOptions = DEFAULT_OPTIONS) -> Outcome:
    """Create the managed file and make the startup file source it"""
    aliases_file = storage.paths.aliases_file
    zshrc = storage.paths.zshrc_file
    outcome = Outcome.unchanged("zam is already set up.")

    if not storage.fs.exists(aliases_file):
        outcome.status = Status.OK
        if options.dry_run:
            outcome.previews.append(Preview(f"Would create managed aliases file at {aliases_file}"))
        else:
            storage.fs.write_text(aliases_file, HEADER + "\n")
            outcome.notices.append(f"Created managed aliases file at {aliases_file}")

    if not storage.fs.exists(zshrc):
        outcome.notices.append(
            f"Warning: {zshrc} not found. You might need to manually source {aliases_file}"
        )
        return outcome

    content = storage.fs.read_text(zshrc)
    source_line = f"source {aliases_file}"
    quoted_source_line = f'source "{aliases_file}"'
    if source_line in content or quoted_source_line in content:
        return outcome

    outcome.status = Status.OK
    if options.dry_run:
        outcome.previews.append(Preview(f"Would add source instruction to {zshrc}"))
    else:
        storage.fs.append_text(
            zshrc, f'\n{SETUP_MARKER}\n[ -f "{aliases_file}" ] && source "{aliases_file}"\n'
        )
        outcome.notices.append(f"Added source instruction to {zshrc}")
        outcome.notices.append(f'Please restart your shell or run "source {zshrc}" to apply changes.')
    return outcome


@reports_io_failure("Error reading aliases")
def read_state(storage: AliasStorage) -> Outcome:
    """Load aliases and metadata for commands that only display them"""
    notices: List[str] = []
    aliases = storage.load()
    metadata = _read_metadata(storage, notices)
    return Outcome.success("", notices=notices, data=(aliases, metadata))


def list_backups(storage: AliasStorage) -> List[str]:
    """Backup file names, most recent first"""
    names = storage.fs.list_dir(storage.paths.backups_dir)
    return sorted((n for n in names if n.endswith(BACKUP_SUFFIX)), reverse=True)


@reports_io_failure("Error reading backups")
def read_backups(storage: AliasStorage) -> Outcome:
    return Outcome.success("", data=list_backups(storage))


def _backup_path(storage: AliasStorage) -> Path:
    """Timestamped backup path, with a counter when the name is taken"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    path = storage.paths.backups_dir / f"{BACKUP_PREFIX}{timestamp}{BACKUP_SUFFIX}"
    counter = 1
    while storage.fs.exists(path):
        path = storage.paths.backups_dir / f"{BACKUP_PREFIX}{timestamp}_{counter}{BACKUP_SUFFIX}"
        counter += 1
    return path


@reports_io_failure("Error creating backup")
def backup(storage: AliasStorage, options: RunOptions = DEFAULT_OPTIONS) -> Outcome:
    """Copy the managed file into the backups directory"""
    aliases_file = storage.paths.aliases_file
    if not storage.fs.exists(aliases_file):
        return Outcome.not_found("No managed aliases file found to backup.")

    backup_path = _backup_path(storage)
    outcome = Outcome.success(f"Backup created: {backup_path.name}", data=backup_path)

    if options.dry_run:
        outcome.previews.append(Preview(f"Would copy {aliases_file} to {backup_path}"))
        return outcome

    storage.fs.copy(aliases_file, backup_path)

    # Keep only the newest max_backups
    if storage.max_backups > 0:
        for name in list_backups(storage)[storage.max_backups:]:
            storage.fs.remove(storage.paths.backups_dir / name)
            outcome.notices.append(f"Removed old backup {name}")
    return outcome


@reports_io_failure("Error restoring backup")
def restore(storage: AliasStorage, backup_file: Path, options: RunOptions = DEFAULT_OPTIONS) -> Outcome:
    """Overwrite the managed file with a backup and drop orphaned metadata"""
    backup_path = Path(backup_file).expanduser().absolute()
    if not storage.fs.exists(backup_path):
        return Outcome.not_found(f"Backup file not found: {backup_path}")

    restored = parse_aliases(storage.fs.read_text(backup_path))
    notices: List[str] = []
    metadata = _read_metadata(storage, notices)
    orphans = sorted(name for name in metadata if name not in restored)
    for name in orphans:
        del metadata[name]

    outcome = Outcome.success("Aliases restored successfully!", notices=notices, data=restored)
    aliases_file = storage.paths.aliases_file
    if options.dry_run:
        outcome.previews.append(Preview(f"Would overwrite {aliases_file} with content from {backup_path}"))
        if orphans:
            outcome.previews.append(Preview(f"Would drop metadata for: {', '.join(orphans)}"))
        return outcome

    storage.fs.copy(backup_path, aliases_file)
    if orphans:
        storage.write_metadata(metadata)
        outcome.notices.append(f"Dropped metadata for: {', '.join(orphans)}")
    return outcome
