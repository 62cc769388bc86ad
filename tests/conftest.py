"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from specmap.core.builder import parse_document
from specmap.models import DocumentNode

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------

SAMPLE_YAML = """openapi: 3.1.0
info:
  title: Sample API
  version: 1.0.0
paths:
  /users:
    get:
      summary: Get users
      responses:
        '200':
          description: Success
tags:
  - name: users
  - name: posts
"""

SAMPLE_JSON = """{
  "openapi": "3.1.0",
  "info": {
    "title": "Sample API",
    "version": 1
  },
  "tags": [
    {"name": "users"},
    "x"
  ]
}
"""


@pytest.fixture
def sample_yaml() -> str:
    return SAMPLE_YAML


@pytest.fixture
def sample_json() -> str:
    return SAMPLE_JSON


@pytest.fixture
def yaml_doc() -> DocumentNode:
    """Return the parsed sample YAML document."""
    return parse_document(SAMPLE_YAML, "yaml")


@pytest.fixture
def json_doc() -> DocumentNode:
    """Return the parsed sample JSON document."""
    return parse_document(SAMPLE_JSON, "json")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SPECMAP_* settings from the environment."""
    for name in (
        "SPECMAP_INDENT",
        "SPECMAP_COLLAPSE_THRESHOLD",
        "SPECMAP_DIFF_STRATEGY",
        "SPECMAP_MAX_DOCUMENT_BYTES",
        "SPECMAP_MAX_EXPANDED_NODES",
    ):
        monkeypatch.delenv(name, raising=False)
