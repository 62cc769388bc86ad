from __future__ import annotations

import logging

import yaml
from yaml.constructor import SafeConstructor

from specmap.errors import ParseError
from specmap.models import NodeKind, Position, RawEntry, RawNode, RawTree

logger = logging.getLogger(__name__)

MERGE_TAG = "tag:yaml.org,2002:merge"
VALUE_TAG = "tag:yaml.org,2002:value"


def _point(mark: yaml.Mark) -> Position:
    return Position(row=mark.line, column=mark.column)


def _parse_error(exc: yaml.YAMLError) -> ParseError:
    if isinstance(exc, yaml.MarkedYAMLError):
        mark = exc.problem_mark or exc.context_mark
        message = exc.problem or exc.context or "invalid YAML"
        if mark is not None:
            return ParseError(f"YAML parse error: {message}", line=mark.line + 1, column=mark.column + 1)
        return ParseError(f"YAML parse error: {message}")
    return ParseError(f"YAML parse error: {exc}")


class YamlTreeAdapter:
    """Compose YAML text with PyYAML and expose it as a ``RawTree``.

    Scalars are resolved with the safe constructor, so values match what
    ``yaml.safe_load`` would return. Marks give character offsets, lines and
    columns for every node, including sequence items.
    """

    format = "yaml"

    def parse(self, text: str) -> RawTree:
        try:
            node = yaml.compose(text, Loader=yaml.SafeLoader)
        except yaml.YAMLError as exc:
            raise _parse_error(exc) from exc

        if node is None:
            return RawTree(format=self.format, text=text, root=None)

        constructor = SafeConstructor()
        root = self._convert(node, constructor, set(), {})
        logger.debug("Composed YAML tree spanning %d chars", root.end)
        return RawTree(format=self.format, text=text, root=root)

    def _convert(
        self, node: yaml.Node, constructor: SafeConstructor, active: set[int], converted: dict[int, RawNode]
    ) -> RawNode:
        if id(node) in active:
            raise ParseError(
                "Recursive YAML aliases are not supported",
                line=node.start_mark.line + 1,
                column=node.start_mark.column + 1,
            )
        # Every alias of an anchor is the same composed node, so it is converted once and shared.
        if id(node) not in converted:
            converted[id(node)] = self._convert_node(node, constructor, active, converted)
        return converted[id(node)]

    def _convert_node(
        self, node: yaml.Node, constructor: SafeConstructor, active: set[int], converted: dict[int, RawNode]
    ) -> RawNode:
        common = {
            "start": node.start_mark.index,
            "end": node.end_mark.index,
            "start_point": _point(node.start_mark),
            "end_point": _point(node.end_mark),
            "tag": node.tag,
        }

        if isinstance(node, yaml.ScalarNode):
            # Merge and value keys have no constructor of their own.
            if node.tag in (MERGE_TAG, VALUE_TAG):
                return RawNode(kind=NodeKind.SCALAR, value=node.value, **common)
            try:
                value = constructor.construct_object(node, deep=True)
            except yaml.YAMLError as exc:
                raise _parse_error(exc) from exc
            return RawNode(kind=NodeKind.SCALAR, value=value, **common)

        active.add(id(node))
        try:
            if isinstance(node, yaml.MappingNode):
                entries = [
                    RawEntry(
                        key=self._convert(key_node, constructor, active, converted),
                        value=self._convert(value_node, constructor, active, converted),
                        merge=key_node.tag == MERGE_TAG,
                    )
                    for key_node, value_node in node.value
                ]
                return RawNode(kind=NodeKind.MAPPING, entries=entries, **common)
            if isinstance(node, yaml.SequenceNode):
                items = [self._convert(item, constructor, active, converted) for item in node.value]
                return RawNode(kind=NodeKind.SEQUENCE, items=items, **common)
        finally:
            active.discard(id(node))

        raise ParseError(f"Unsupported YAML node: {type(node).__name__}")
