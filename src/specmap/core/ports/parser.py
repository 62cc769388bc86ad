from typing import Protocol

from specmap.models import RawTree


class RawTreeAdapter(Protocol):
    format: str

    def parse(self, text: str) -> RawTree: ...
