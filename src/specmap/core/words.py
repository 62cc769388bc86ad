"""Word-level highlight spans for changed diff lines."""

import difflib
import re

from specmap.models import DiffLine, LineClassification, WordSpan

_TOKEN_RE = re.compile(r"(\s+)")


def tokenize(content: str) -> list[WordSpan]:
    """Split ``content`` into alternating word and whitespace spans, none highlighted."""
    spans: list[WordSpan] = []
    offset = 0
    for token in _TOKEN_RE.split(content):
        if not token:
            continue
        spans.append(WordSpan(text=token, start=offset, end=offset + len(token)))
        offset += len(token)
    return spans


def highlight_words(line: DiffLine) -> list[WordSpan]:
    """Mark every non-whitespace token of an added or removed line as changed.

    Context lines come back as a single unhighlighted span.
    """
    if line.classification is LineClassification.CONTEXT:
        if not line.content:
            return []
        return [WordSpan(text=line.content, start=0, end=len(line.content))]
    return [
        span.model_copy(update={"changed": not span.text.isspace()}) for span in tokenize(line.content)
    ]


def highlight_pair(removed: DiffLine, added: DiffLine) -> tuple[list[WordSpan], list[WordSpan]]:
    """Highlight only the words that differ between a removed line and its replacement."""
    old_spans = tokenize(removed.content)
    new_spans = tokenize(added.content)
    old_changed = [not span.text.isspace() for span in old_spans]
    new_changed = [not span.text.isspace() for span in new_spans]

    matcher = difflib.SequenceMatcher(
        None, [span.text for span in old_spans], [span.text for span in new_spans], autojunk=False
    )
    for block in matcher.get_matching_blocks():
        for k in range(block.size):
            old_changed[block.a + k] = False
            new_changed[block.b + k] = False

    return (
        [span.model_copy(update={"changed": changed}) for span, changed in zip(old_spans, old_changed, strict=True)],
        [span.model_copy(update={"changed": changed}) for span, changed in zip(new_spans, new_changed, strict=True)],
    )
