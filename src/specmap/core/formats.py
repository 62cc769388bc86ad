from pathlib import Path

from specmap.errors import UnsupportedFormatError

_FORMAT_ALIASES = {
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
}

_EXTENSION_FORMAT_MAP = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}

SUPPORTED_FORMATS = frozenset(_EXTENSION_FORMAT_MAP.values())


def normalize_format(format: str) -> str:
    normalized = format.strip().lower()
    resolved = _FORMAT_ALIASES.get(normalized, normalized)
    if resolved not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(f"Unsupported format '{format}'. Supported: {sorted(SUPPORTED_FORMATS)}")
    return resolved


def detect_format_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_FORMAT_MAP:
        return _EXTENSION_FORMAT_MAP[suffix]
    raise UnsupportedFormatError(f"Unsupported file extension: {suffix}")


def sniff_format(text: str) -> str:
    """Guess the format from content: JSON documents open with an object or array."""
    stripped = text.lstrip("\ufeff \t\r\n")
    if stripped[:1] in ("{", "["):
        return "json"
    return "yaml"


def resolve_format(format: str | None = None, file_path: Path | None = None, text: str | None = None) -> str:
    if format:
        return normalize_format(format)
    if file_path:
        return detect_format_from_path(file_path)
    if text is not None:
        return sniff_format(text)
    raise UnsupportedFormatError("Format must be provided when no file path or text is available.")
