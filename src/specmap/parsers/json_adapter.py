from __future__ import annotations

import json
import logging
from bisect import bisect_left, bisect_right
from itertools import accumulate
from typing import Any

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

from specmap.errors import ParseError
from specmap.models import NodeKind, Position, RawEntry, RawNode, RawTree

logger = logging.getLogger(__name__)

_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None}


class _SourceIndex:
    """Translate tree-sitter byte offsets into character offsets and points."""

    def __init__(self, text: str, source: bytes) -> None:
        self._text = text
        self._ascii = len(source) == len(text)
        self._char_starts: list[int] = []
        if not self._ascii:
            self._char_starts = list(accumulate((len(ch.encode("utf-8")) for ch in text), initial=0))
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]

    def char_offset(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return bisect_left(self._char_starts, byte_offset)

    def point(self, char_offset: int) -> Position:
        row = bisect_right(self._line_starts, char_offset) - 1
        return Position(row=row, column=char_offset - self._line_starts[row])

    def slice(self, node: Node) -> str:
        return self._text[self.char_offset(node.start_byte) : self.char_offset(node.end_byte)]


def _first_error(node: Node) -> Node:
    for child in node.children:
        if child.is_error or child.is_missing:
            return child
        if child.has_error:
            return _first_error(child)
    return node


def _value_children(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


class JsonTreeAdapter:
    """Parse JSON with the tree-sitter ``json`` grammar into a ``RawTree``.

    Every node, including array elements, carries an exact range. String and
    number tokens are decoded with :func:`json.loads` so escapes and numeric
    types follow the standard library's JSON rules.
    """

    format = "json"

    def __init__(self) -> None:
        self._parser = get_parser("json")

    def parse(self, text: str) -> RawTree:
        source = text.encode("utf-8")
        tree = self._parser.parse(source)
        index = _SourceIndex(text, source)
        document = tree.root_node

        if document.has_error:
            bad = _first_error(document)
            point = index.point(index.char_offset(bad.start_byte))
            problem = f"missing {bad.type}" if bad.is_missing else "unexpected input"
            raise ParseError(f"JSON parse error: {problem}", line=point.row + 1, column=point.column + 1)

        values = _value_children(document)
        if not values:
            return RawTree(format=self.format, text=text, root=None)
        if len(values) > 1:
            extra = index.point(index.char_offset(values[1].start_byte))
            raise ParseError(
                "JSON parse error: multiple top-level values", line=extra.row + 1, column=extra.column + 1
            )

        root = self._convert(values[0], index)
        logger.debug("Parsed JSON tree spanning %d chars", root.end)
        return RawTree(format=self.format, text=text, root=root)

    def _convert(self, node: Node, index: _SourceIndex) -> RawNode:
        start = index.char_offset(node.start_byte)
        end = index.char_offset(node.end_byte)
        common = {
            "start": start,
            "end": end,
            "start_point": index.point(start),
            "end_point": index.point(end),
            "tag": node.type,
        }

        if node.type == "object":
            entries = []
            for pair in _value_children(node):
                key_node = pair.child_by_field_name("key")
                value_node = pair.child_by_field_name("value")
                if pair.type != "pair" or key_node is None or value_node is None:
                    raise self._error("malformed object member", pair, index)
                if key_node.type != "string":
                    raise self._error("object keys must be strings", key_node, index)
                entries.append(RawEntry(key=self._convert(key_node, index), value=self._convert(value_node, index)))
            return RawNode(kind=NodeKind.MAPPING, entries=entries, **common)

        if node.type == "array":
            items = [self._convert(child, index) for child in _value_children(node)]
            return RawNode(kind=NodeKind.SEQUENCE, items=items, **common)

        if node.type in _LITERALS:
            return RawNode(kind=NodeKind.SCALAR, value=_LITERALS[node.type], **common)

        if node.type in ("string", "number"):
            try:
                value = json.loads(index.slice(node))
            except json.JSONDecodeError as exc:
                raise self._error(f"invalid {node.type} token", node, index) from exc
            return RawNode(kind=NodeKind.SCALAR, value=value, **common)

        raise self._error(f"unexpected node '{node.type}'", node, index)

    @staticmethod
    def _error(problem: str, node: Node, index: _SourceIndex) -> ParseError:
        point = index.point(index.char_offset(node.start_byte))
        return ParseError(f"JSON parse error: {problem}", line=point.row + 1, column=point.column + 1)
