import datetime
import json
import logging
import math
from typing import Any

import yaml

from specmap.config import get_settings
from specmap.core.formats import normalize_format
from specmap.errors import SerializeError
from specmap.models import DocumentNode

logger = logging.getLogger(__name__)

_JSON_SCALARS = (str, int, float, bool, type(None))
_YAML_SCALARS = (*_JSON_SCALARS, bytes, datetime.date, datetime.datetime)


class _CanonicalDumper(yaml.SafeDumper):
    """Safe dumper that writes repeated objects in full instead of as aliases."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _check_representable(value: Any, format: str) -> None:
    scalars = _JSON_SCALARS if format == "json" else _YAML_SCALARS
    active: set[int] = set()

    def visit(node: Any, depth: int) -> None:
        if isinstance(node, (dict, list)):
            if id(node) in active:
                raise SerializeError(f"Reference cycle detected at depth {depth}")
            active.add(id(node))
            try:
                if isinstance(node, dict):
                    for key, child in node.items():
                        if not isinstance(key, scalars) or (format == "json" and not isinstance(key, str)):
                            raise SerializeError(f"Unsupported mapping key type for {format}: {type(key).__name__}")
                        visit(child, depth + 1)
                else:
                    for child in node:
                        visit(child, depth + 1)
            finally:
                active.discard(id(node))
            return
        if not isinstance(node, scalars):
            raise SerializeError(f"Cannot serialize value of type {type(node).__name__} to {format}")
        if format == "json" and isinstance(node, float) and not math.isfinite(node):
            raise SerializeError(f"Cannot serialize non-finite number {node!r} to json")

    visit(value, 0)


def serialize_value(value: Any, format: str = "yaml", indent: int | None = None) -> str:
    resolved_format = normalize_format(format)
    indent = indent if indent is not None else get_settings().indent
    _check_representable(value, resolved_format)

    try:
        if resolved_format == "json":
            return json.dumps(value, indent=indent, ensure_ascii=False, allow_nan=False) + "\n"
        return yaml.dump(
            value,
            Dumper=_CanonicalDumper,
            indent=indent,
            width=math.inf,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except (yaml.YAMLError, TypeError, ValueError) as exc:
        raise SerializeError(f"Failed to serialize {resolved_format}: {exc}") from exc


def serialize(doc: DocumentNode, format: str | None = None, indent: int | None = None) -> str:
    """Render ``doc.value`` as canonical text in its own (or the given) format.

    Raises ``SerializeError`` on reference cycles or unrepresentable values.
    """
    text = serialize_value(doc.value, format or doc.format, indent)
    logger.debug("Serialized document to %d chars", len(text))
    return text
