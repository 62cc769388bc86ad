import logging
from collections.abc import Hashable
from typing import Any

from specmap.config import Settings, get_settings
from specmap.core.formats import resolve_format
from specmap.errors import ParseError
from specmap.models import DocumentNode, NodeKind, RawNode, RawTree
from specmap.parsers import get_adapter

logger = logging.getLogger(__name__)


def _error_at(message: str, node: RawNode) -> ParseError:
    return ParseError(message, line=node.start_point.row + 1, column=node.start_point.column + 1)


def _merge_sources(node: RawNode) -> list[RawNode]:
    if node.kind is NodeKind.SEQUENCE:
        return list(node.items or [])
    return [node]


def _materialize_mapping(node: RawNode, memo: dict[int, Any]) -> dict[Hashable, Any]:
    merged: dict[Hashable, Any] = {}
    own: dict[Hashable, Any] = {}
    for entry in node.entries or []:
        if entry.merge:
            for source in _merge_sources(entry.value):
                value = _materialize(source, memo)
                if not isinstance(value, dict):
                    raise _error_at("Merge key expects a mapping or a sequence of mappings", source)
                for key, item in value.items():
                    # The first source that defines a key wins.
                    merged.setdefault(key, item)
            continue

        key = _materialize(entry.key, memo)
        if not isinstance(key, Hashable):
            raise _error_at("Mapping keys must be scalars", entry.key)
        own[key] = _materialize(entry.value, memo)

    if not merged:
        return own
    merged.update(own)
    return merged


def _materialize(node: RawNode, memo: dict[int, Any]) -> Any:
    if id(node) in memo:
        return memo[id(node)]
    if node.kind is NodeKind.MAPPING:
        value: Any = _materialize_mapping(node, memo)
    elif node.kind is NodeKind.SEQUENCE:
        value = [_materialize(item, memo) for item in node.items or []]
    else:
        value = node.value
    memo[id(node)] = value
    return value


def materialize(node: RawNode | None) -> Any:
    """Turn a raw syntax node into plain dicts, lists and scalars.

    A raw node shared by several YAML aliases becomes one shared value.
    """
    if node is None:
        return None
    return _materialize(node, {})


def expanded_size(node: RawNode, sizes: dict[int, int] | None = None) -> int:
    """Count the nodes of ``node`` as they appear once every alias is expanded."""
    sizes = {} if sizes is None else sizes
    if id(node) not in sizes:
        size = 1
        for entry in node.entries or []:
            size += expanded_size(entry.key, sizes) + expanded_size(entry.value, sizes)
        for item in node.items or []:
            size += expanded_size(item, sizes)
        sizes[id(node)] = size
    return sizes[id(node)]


def build(raw_tree: RawTree, max_nodes: int | None = None) -> DocumentNode:
    """Build a ``DocumentNode`` from an adapter's raw tree; all-or-nothing.

    ``max_nodes`` bounds the alias-expanded size of the value tree.
    """
    if max_nodes is not None and raw_tree.root is not None:
        size = expanded_size(raw_tree.root)
        if size > max_nodes:
            raise ParseError(f"Document expands to {size} nodes, exceeding the limit of {max_nodes}")

    try:
        value = materialize(raw_tree.root)
    except TypeError as exc:
        raise ParseError(f"Failed to build document: {exc}") from exc

    logger.debug("Built %s document (%d chars)", raw_tree.format, len(raw_tree.text))
    return DocumentNode(
        kind=NodeKind.DOCUMENT,
        format=raw_tree.format,
        value=value,
        range=(0, len(raw_tree.text)),
        raw=raw_tree.root,
    )


def parse_document(text: str, format: str | None = None, settings: Settings | None = None) -> DocumentNode:
    """Parse YAML or JSON text into a ``DocumentNode``.

    Raises ``ParseError`` on malformed input; no partial document is returned.
    """
    settings = settings or get_settings()
    if settings.max_document_bytes is not None:
        size = len(text.encode("utf-8"))
        if size > settings.max_document_bytes:
            raise ParseError(f"Document is {size} bytes, exceeding the limit of {settings.max_document_bytes}")

    resolved_format = resolve_format(format, text=text)
    raw_tree = get_adapter(resolved_format).parse(text)
    return build(raw_tree, max_nodes=settings.max_expanded_nodes)
