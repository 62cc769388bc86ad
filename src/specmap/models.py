from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

CanonicalPath = tuple[str, ...]


class NodeKind(str, Enum):
    DOCUMENT = "document"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


class Position(BaseModel):
    row: int
    column: int


class RawNode(BaseModel):
    """A parser-agnostic syntax node with its source range.

    ``start``/``end`` are character offsets into the parsed text, ``start_point``
    and ``end_point`` are 0-based (row, column) pairs.
    """

    kind: NodeKind
    start: int
    end: int
    start_point: Position
    end_point: Position
    value: Any = None
    tag: str | None = None
    entries: list["RawEntry"] | None = None
    items: list["RawNode"] | None = None


class RawEntry(BaseModel):
    key: RawNode
    value: RawNode
    merge: bool = False


RawNode.model_rebuild()  # necessary for recursive types


class RawTree(BaseModel):
    format: str
    text: str
    root: RawNode | None = None


class DocumentNode(BaseModel):
    """A parsed document: the materialized value tree plus its source range.

    ``value`` is held by reference; models never copy it. ``raw`` keeps the
    syntax tree the value was built from and is ``None`` once the value no
    longer matches any source text (e.g. after a mutation).
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind = NodeKind.DOCUMENT
    format: str = "yaml"
    value: Any = None
    range: tuple[int, int] | None = None
    raw: RawNode | None = Field(default=None, exclude=True, repr=False)


class PositionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: CanonicalPath
    line: int
    column: int = 0

    @property
    def key(self) -> str:
        return ".".join(self.path)


class LineClassification(str, Enum):
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


class LineNumbers(BaseModel):
    old: int | None = None
    new: int | None = None


class DiffLine(BaseModel):
    classification: LineClassification
    content: str
    line_number: LineNumbers

    @property
    def is_change(self) -> bool:
        return self.classification is not LineClassification.CONTEXT


class HunkClassification(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class Hunk(BaseModel):
    classification: HunkClassification
    lines: list[DiffLine]
    collapsed: bool = False


class WordSpan(BaseModel):
    text: str
    start: int
    end: int
    changed: bool = False


class DiffStats(BaseModel):
    additions: int = 0
    deletions: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net(self) -> int:
        return self.additions - self.deletions


class DiffResult(BaseModel):
    lines: list[DiffLine]
    hunks: list[Hunk]
    stats: DiffStats


class FixOperation(BaseModel):
    type: Literal["add", "update", "remove"]
    path: CanonicalPath
    value: Any = None
    previous_value: Any = None
