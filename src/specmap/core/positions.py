"""Map canonical paths to source lines.

Entries come from the parser's own ranges whenever the document still carries
its raw tree. Without one (e.g. a document produced by a mutation) the line is
found by a forward text scan for ``<key>:`` starting after the parent's line.
The scan is bounded by the parent's range when that is known; otherwise it
runs to the end of the text and can pick up an identical key from a later
sibling branch.

A value reached through a YAML alias has its ranges at the anchor, above the
alias. Its entries get the line of the alias key instead.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from specmap.core.paths import is_unsafe_path, path_key, require_path, to_segment
from specmap.models import CanonicalPath, DocumentNode, NodeKind, PositionEntry, RawNode

logger = logging.getLogger(__name__)

PositionIndex = dict[str, PositionEntry]

# (anchor for the entry's position, raw node of the child's value)
_RawChild = tuple[RawNode, RawNode]


def _children(value: Any) -> Iterator[tuple[str, Any]]:
    if isinstance(value, dict):
        for key, child in value.items():
            yield to_segment(key), child
    elif isinstance(value, list):
        for i, child in enumerate(value):
            yield str(i), child


def _raw_children(raw: RawNode | None) -> dict[str, _RawChild]:
    if raw is None:
        return {}
    if raw.kind is NodeKind.MAPPING:
        return {to_segment(entry.key.value): (entry.key, entry.value) for entry in raw.entries or [] if not entry.merge}
    if raw.kind is NodeKind.SEQUENCE:
        return {str(i): (item, item) for i, item in enumerate(raw.items or [])}
    return {}


def _scan_for_key(lines: list[str], segment: str, start: int, end: int) -> int | None:
    yaml_form = f"{segment}:"
    json_form = f'{segment}":'
    for i in range(start, min(end, len(lines))):
        if yaml_form in lines[i] or json_form in lines[i]:
            return i + 1
    return None


def build_position_index(doc: DocumentNode, source_text: str) -> PositionIndex:
    """Build the path -> position table for ``doc``; never raises.

    Unsafe paths are skipped together with everything below them.
    """
    lines = source_text.split("\n")
    index: PositionIndex = {}
    scanned = 0

    def visit(value: Any, raw: RawNode | None, path: CanonicalPath, parent_line: int, scope_end: int) -> None:
        nonlocal scanned
        raw_children = _raw_children(raw)
        for segment, child in _children(value):
            child_path = (*path, segment)
            if is_unsafe_path(child_path):
                logger.debug("Skipping unsafe path segment at depth %d", len(child_path))
                continue

            anchor, child_raw = raw_children.get(segment, (None, None))
            child_scope_end = child_raw.end_point.row + 1 if child_raw is not None else scope_end
            if anchor is not None and anchor.start_point.row + 1 >= parent_line:
                line = anchor.start_point.row + 1
                column = anchor.start_point.column
            elif anchor is not None:
                # Reached through a YAML alias: the anchor sits above this branch.
                line = parent_line
                column = 0
                child_scope_end = scope_end
            else:
                scanned += 1
                found = _scan_for_key(lines, segment, parent_line, scope_end)
                line = found if found is not None else parent_line + 1
                column = 0

            index[path_key(child_path)] = PositionEntry(path=child_path, line=line, column=column)

            visit(child, child_raw, child_path, line, child_scope_end)

    root_scope_end = doc.raw.end_point.row + 1 if doc.raw is not None else len(lines)
    visit(doc.value, doc.raw, (), 0, root_scope_end)
    logger.debug("Indexed %d paths (%d located by text scan)", len(index), scanned)
    return index


def find_position(index: PositionIndex, path: Iterable[str]) -> PositionEntry | None:
    return index.get(path_key(require_path(path)))


def path_at_line(index: PositionIndex, line: int) -> CanonicalPath | None:
    """Return the path whose entry is closest above ``line`` (deepest on ties)."""
    best: PositionEntry | None = None
    for entry in index.values():
        if entry.line > line:
            continue
        if best is None or (entry.line, len(entry.path)) > (best.line, len(best.path)):
            best = entry
    return best.path if best is not None else None
