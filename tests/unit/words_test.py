"""Unit tests for word-level highlighting."""

from specmap.core.words import highlight_pair, highlight_words, tokenize
from specmap.models import DiffLine, LineClassification, LineNumbers


def _line(classification: LineClassification, content: str) -> DiffLine:
    return DiffLine(classification=classification, content=content, line_number=LineNumbers(old=1, new=1))


def test_tokenize_keeps_whitespace_runs_with_offsets() -> None:
    spans = tokenize("  title:  A")

    assert [span.text for span in spans] == ["  ", "title:", "  ", "A"]
    assert [(span.start, span.end) for span in spans] == [(0, 2), (2, 8), (8, 10), (10, 11)]


def test_spans_reassemble_the_line() -> None:
    content = "summary: Get all\tusers "
    assert "".join(span.text for span in tokenize(content)) == content


def test_changed_line_highlights_words_only() -> None:
    spans = highlight_words(_line(LineClassification.ADDED, "title: New"))
    assert [(span.text, span.changed) for span in spans] == [("title:", True), (" ", False), ("New", True)]


def test_context_line_is_one_plain_span() -> None:
    spans = highlight_words(_line(LineClassification.CONTEXT, "a: 1"))

    assert len(spans) == 1
    assert spans[0].text == "a: 1"
    assert spans[0].changed is False


def test_empty_lines_have_no_spans() -> None:
    assert highlight_words(_line(LineClassification.CONTEXT, "")) == []
    assert highlight_words(_line(LineClassification.REMOVED, "")) == []


def test_pair_highlights_only_differing_words() -> None:
    removed = _line(LineClassification.REMOVED, "  title: Old API")
    added = _line(LineClassification.ADDED, "  title: New API")

    old_spans, new_spans = highlight_pair(removed, added)

    assert [span.text for span in old_spans if span.changed] == ["Old"]
    assert [span.text for span in new_spans if span.changed] == ["New"]
