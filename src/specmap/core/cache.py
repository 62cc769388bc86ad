import hashlib
import logging
from collections import OrderedDict

from specmap.core.builder import parse_document
from specmap.core.formats import resolve_format
from specmap.core.positions import PositionIndex, build_position_index
from specmap.models import DocumentNode

logger = logging.getLogger(__name__)


def _cache_key(text: str, format: str) -> str:
    h = hashlib.sha256()
    h.update(b"F|" + format.encode("utf-8"))
    h.update(b"|T|" + text.encode("utf-8"))
    return h.hexdigest()


class DocumentCache:
    """Bounded LRU of parsed documents and their position indexes.

    Owned by the caller; the default ``maxsize`` of 1 keeps only the last
    result. A failed parse is not cached, so the previous entry stays valid.
    """

    def __init__(self, maxsize: int = 1) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._entries: OrderedDict[str, tuple[DocumentNode, PositionIndex]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, text: str, format: str | None = None) -> tuple[DocumentNode, PositionIndex]:
        resolved_format = resolve_format(format, text=text)
        key = _cache_key(text, resolved_format)
        if key in self._entries:
            self.hits += 1
            self._entries.move_to_end(key)
            return self._entries[key]

        self.misses += 1
        doc = parse_document(text, resolved_format)
        entry = (doc, build_position_index(doc, text))
        self._entries[key] = entry
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        logger.debug("Document cache miss (%d entries)", len(self._entries))
        return entry

    def clear(self) -> None:
        self._entries.clear()
