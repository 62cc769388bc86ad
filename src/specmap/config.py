import os
from typing import Literal

from pydantic import BaseModel, Field

DiffStrategy = Literal["positional", "lcs"]


class Settings(BaseModel):
    indent: int = Field(default=2, ge=2, le=9)
    collapse_threshold: int = Field(default=3, ge=0)
    diff_strategy: DiffStrategy = "positional"
    # None disables the size check; callers embedding the library may set a cap.
    max_document_bytes: int | None = Field(default=None, ge=1)
    # Counts nodes after YAML alias expansion, so a tiny input cannot build a huge tree.
    max_expanded_nodes: int = Field(default=1_000_000, ge=1)


def get_settings() -> Settings:
    return Settings.model_validate(
        {
            "indent": os.getenv("SPECMAP_INDENT", "2"),
            "collapse_threshold": os.getenv("SPECMAP_COLLAPSE_THRESHOLD", "3"),
            "diff_strategy": os.getenv("SPECMAP_DIFF_STRATEGY", "positional"),
            "max_document_bytes": os.getenv("SPECMAP_MAX_DOCUMENT_BYTES") or None,
            "max_expanded_nodes": os.getenv("SPECMAP_MAX_EXPANDED_NODES", "1000000"),
        }
    )
