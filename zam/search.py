"""Search and filter managed aliases"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from rapidfuzz import fuzz

from zam.models import AliasMetadata

EXACT_SCORE = 100.0


@dataclass
class SearchResult:
    name: str
    command: str
    tags: List[str] = field(default_factory=list)
    score: float = EXACT_SCORE


def _tags_for(metadata: Dict[str, AliasMetadata], name: str) -> List[str]:
    record = metadata.get(name)
    return record.get_tags() if record else []


def filter_by_tag(
    aliases: Dict[str, str], metadata: Dict[str, AliasMetadata], tag: str
) -> Dict[str, str]:
    """Aliases whose metadata carries the tag (case-insensitive)"""
    return {
        name: command
        for name, command in aliases.items()
        if name in metadata and metadata[name].has_tag(tag)
    }


def search_aliases(
    aliases: Dict[str, str],
    metadata: Dict[str, AliasMetadata],
    query: str,
    tag: Optional[str] = None,
    fuzzy: bool = False,
    threshold: int = 70,
) -> List[SearchResult]:
    """Match the query against names and commands.

    Substring matches score 100. With ``fuzzy`` on, names and commands are
    also scored with ``partial_ratio`` and kept at or above ``threshold``.
    """
    if tag:
        aliases = filter_by_tag(aliases, metadata, tag)

    needle = query.lower()
    results = []
    for name, command in aliases.items():
        if needle in name.lower() or needle in command.lower():
            score = EXACT_SCORE
        elif fuzzy and needle:
            score = max(
                fuzz.partial_ratio(needle, name.lower()),
                fuzz.partial_ratio(needle, command.lower()),
            )
            if score < threshold:
                continue
        else:
            continue
        results.append(SearchResult(name, command, _tags_for(metadata, name), score))

    results.sort(key=lambda r: (-r.score, r.name))
    return results


def highlight_span(text: str, query: str) -> Optional[Tuple[int, int]]:
    """Start and end of the first case-insensitive occurrence of query"""
    if not query:
        return None
    idx = text.lower().find(query.lower())
    if idx == -1:
        return None
    return idx, idx + len(query)
