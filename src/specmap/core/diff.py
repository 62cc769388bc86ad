"""Line-level comparison of two text revisions, grouped into hunks.

The default ``positional`` strategy walks both revisions in lockstep and
pairs line ``i`` of one with line ``i`` of the other. It runs in
O(max(len(old), len(new))), but an insertion shifts every following line into
a remove/add pair. The ``lcs`` strategy aligns lines with
:class:`difflib.SequenceMatcher` instead and yields a minimal-looking diff at a
higher cost.
"""

import difflib
import logging
from collections.abc import Sequence

from specmap.config import DiffStrategy, get_settings
from specmap.models import (
    DiffLine,
    DiffResult,
    DiffStats,
    Hunk,
    HunkClassification,
    LineClassification,
    LineNumbers,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLAPSE_THRESHOLD = 3


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``; the empty text has no lines."""
    if not text:
        return []
    return text.split("\n")


def _context(content: str, old: int, new: int) -> DiffLine:
    return DiffLine(
        classification=LineClassification.CONTEXT,
        content=content,
        line_number=LineNumbers(old=old + 1, new=new + 1),
    )


def _removed(content: str, old: int) -> DiffLine:
    return DiffLine(classification=LineClassification.REMOVED, content=content, line_number=LineNumbers(old=old + 1))


def _added(content: str, new: int) -> DiffLine:
    return DiffLine(classification=LineClassification.ADDED, content=content, line_number=LineNumbers(new=new + 1))


def _positional(old_lines: Sequence[str], new_lines: Sequence[str]) -> list[DiffLine]:
    lines: list[DiffLine] = []
    old_idx = 0
    new_idx = 0
    while old_idx < len(old_lines) or new_idx < len(new_lines):
        if old_idx < len(old_lines) and new_idx < len(new_lines):
            if old_lines[old_idx] == new_lines[new_idx]:
                lines.append(_context(old_lines[old_idx], old_idx, new_idx))
            else:
                lines.append(_removed(old_lines[old_idx], old_idx))
                lines.append(_added(new_lines[new_idx], new_idx))
            old_idx += 1
            new_idx += 1
        elif old_idx < len(old_lines):
            lines.append(_removed(old_lines[old_idx], old_idx))
            old_idx += 1
        else:
            lines.append(_added(new_lines[new_idx], new_idx))
            new_idx += 1
    return lines


def _lcs(old_lines: Sequence[str], new_lines: Sequence[str]) -> list[DiffLine]:
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    lines: list[DiffLine] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            lines.extend(_context(old_lines[i], i, j) for i, j in zip(range(i1, i2), range(j1, j2), strict=True))
            continue
        # "replace" lists all removals before all additions.
        lines.extend(_removed(old_lines[i], i) for i in range(i1, i2))
        lines.extend(_added(new_lines[j], j) for j in range(j1, j2))
    return lines


def compute_diff(old_text: str, new_text: str, strategy: DiffStrategy = "positional") -> list[DiffLine]:
    """Classify every line of both revisions as context, added or removed.

    Each source line appears in exactly one ``DiffLine``.
    """
    old_lines = split_lines(old_text)
    new_lines = split_lines(new_text)
    if strategy == "positional":
        lines = _positional(old_lines, new_lines)
    elif strategy == "lcs":
        lines = _lcs(old_lines, new_lines)
    else:
        raise ValueError(f"Unknown diff strategy '{strategy}'. Supported: ['lcs', 'positional']")
    logger.debug("Diffed %d -> %d lines with %s strategy", len(old_lines), len(new_lines), strategy)
    return lines


def _make_hunk(classification: HunkClassification, lines: list[DiffLine], collapse: bool, threshold: int) -> Hunk:
    collapsed = collapse and classification is HunkClassification.UNCHANGED and len(lines) > threshold
    return Hunk(classification=classification, lines=lines, collapsed=collapsed)


def group_into_hunks(
    lines: Sequence[DiffLine],
    collapse_unchanged: bool = True,
    threshold: int = DEFAULT_COLLAPSE_THRESHOLD,
) -> list[Hunk]:
    """Partition ``lines`` into maximal runs of changed or unchanged lines.

    Unchanged hunks longer than ``threshold`` start collapsed when
    ``collapse_unchanged`` is set; the partition itself never depends on it.
    """
    hunks: list[Hunk] = []
    current: list[DiffLine] = []
    current_type = HunkClassification.UNCHANGED

    for line in lines:
        line_type = HunkClassification.CHANGED if line.is_change else HunkClassification.UNCHANGED
        if line_type is not current_type and current:
            hunks.append(_make_hunk(current_type, current, collapse_unchanged, threshold))
            current = []
        current_type = line_type
        current.append(line)

    if current:
        hunks.append(_make_hunk(current_type, current, collapse_unchanged, threshold))
    return hunks


def toggle_hunk(hunks: Sequence[Hunk], index: int) -> list[Hunk]:
    """Flip the collapsed state of one unchanged hunk; other hunks are shared."""
    target = hunks[index]
    if target.classification is not HunkClassification.UNCHANGED:
        raise ValueError(f"Hunk {index} is not an unchanged hunk")
    toggled = target.model_copy(update={"collapsed": not target.collapsed})
    return [toggled if i == index else hunk for i, hunk in enumerate(hunks)]


def diff_stats(lines: Sequence[DiffLine]) -> DiffStats:
    return DiffStats(
        additions=sum(1 for line in lines if line.classification is LineClassification.ADDED),
        deletions=sum(1 for line in lines if line.classification is LineClassification.REMOVED),
    )


def diff_texts(
    old_text: str,
    new_text: str,
    strategy: DiffStrategy | None = None,
    collapse_unchanged: bool = True,
    threshold: int | None = None,
) -> DiffResult:
    settings = get_settings()
    lines = compute_diff(old_text, new_text, strategy or settings.diff_strategy)
    hunks = group_into_hunks(
        lines,
        collapse_unchanged=collapse_unchanged,
        threshold=threshold if threshold is not None else settings.collapse_threshold,
    )
    return DiffResult(lines=lines, hunks=hunks, stats=diff_stats(lines))
