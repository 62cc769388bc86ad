from specmap.core.formats import normalize_format
from specmap.core.ports.parser import RawTreeAdapter
from specmap.parsers.json_adapter import JsonTreeAdapter
from specmap.parsers.yaml_adapter import YamlTreeAdapter


def get_adapter(format: str) -> RawTreeAdapter:
    if normalize_format(format) == "json":
        return JsonTreeAdapter()
    return YamlTreeAdapter()


__all__ = [
    "JsonTreeAdapter",
    "RawTreeAdapter",
    "YamlTreeAdapter",
    "get_adapter",
]
