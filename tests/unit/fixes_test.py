"""Unit tests for fix operations applied to document text."""

import pytest

from specmap.core.builder import parse_document
from specmap.core.fixes import apply_fix, apply_fixes, current_value, plan_undo, sanitize_value, undo_operation
from specmap.core.resolver import NOT_FOUND, find
from specmap.errors import InvalidPathError
from specmap.models import FixOperation


def test_update_keeps_value_types(sample_yaml: str) -> None:
    text = apply_fix(sample_yaml, "yaml", FixOperation(type="update", path=("info", "version"), value=2))

    doc = parse_document(text, "yaml")
    assert find(doc, ["info", "version"]) == 2
    assert isinstance(find(doc, ["info", "version"]), int)


def test_add_creates_missing_parents(sample_yaml: str) -> None:
    operation = FixOperation(type="add", path=("info", "contact", "email"), value="api@example.com")

    text = apply_fix(sample_yaml, "yaml", operation)

    assert current_value(text, "yaml", ("info", "contact")) == {"email": "api@example.com"}


def test_remove_drops_the_path(sample_json: str) -> None:
    text = apply_fix(sample_json, "json", FixOperation(type="remove", path=("tags", "1")))

    assert current_value(text, "json", ("tags",)) == [{"name": "users"}]


def test_empty_path_is_rejected(sample_yaml: str) -> None:
    with pytest.raises(InvalidPathError, match="path is required"):
        apply_fix(sample_yaml, "yaml", FixOperation(type="update", path=(), value=1))


def test_unsafe_keys_in_values_are_dropped(sample_yaml: str) -> None:
    operation = FixOperation(
        type="update",
        path=("info", "x-meta"),
        value={"ok": 1, "__proto__": {"polluted": True}, "nested": [{"constructor": 1, "keep": 2}]},
    )

    text = apply_fix(sample_yaml, "yaml", operation)

    assert current_value(text, "yaml", ("info", "x-meta")) == {"ok": 1, "nested": [{"keep": 2}]}


def test_sanitize_value_leaves_scalars_and_non_string_keys() -> None:
    assert sanitize_value("constructor") == "constructor"
    assert sanitize_value({200: "ok"}) == {200: "ok"}


def test_apply_fixes_runs_in_order(sample_yaml: str) -> None:
    text = apply_fixes(
        sample_yaml,
        "yaml",
        [
            FixOperation(type="add", path=("tags", "2"), value={"name": "admin"}),
            FixOperation(type="remove", path=("tags", "0")),
        ],
    )

    assert current_value(text, "yaml", ("tags",)) == [{"name": "posts"}, {"name": "admin"}]


def test_remove_of_absent_path_is_a_no_op(sample_yaml: str) -> None:
    text = apply_fix(sample_yaml, "yaml", FixOperation(type="remove", path=("info", "license")))

    assert current_value(text, "yaml", ("info",)) == {"title": "Sample API", "version": "1.0.0"}


def test_apply_fixes_continues_past_stale_remove(sample_yaml: str) -> None:
    text = apply_fixes(
        sample_yaml,
        "yaml",
        [
            FixOperation(type="remove", path=("tags", "0")),
            FixOperation(type="remove", path=("tags", "5")),
            FixOperation(type="update", path=("info", "title"), value="Renamed"),
        ],
    )

    assert current_value(text, "yaml", ("tags",)) == [{"name": "posts"}]
    assert current_value(text, "yaml", ("info", "title")) == "Renamed"


def test_unsafe_remove_is_rejected_even_when_absent(sample_yaml: str) -> None:
    with pytest.raises(InvalidPathError, match="Invalid path key"):
        apply_fix(sample_yaml, "yaml", FixOperation(type="remove", path=("info", "__proto__")))


def test_current_value_of_missing_path(sample_yaml: str) -> None:
    assert current_value(sample_yaml, "yaml", ("info", "license")) is NOT_FOUND


class TestUndoOperation:
    def test_undo_of_update_restores_previous_value(self, sample_yaml: str) -> None:
        operation = FixOperation(type="update", path=("info", "title"), value="Renamed")
        before = current_value(sample_yaml, "yaml", operation.path)

        fixed = apply_fix(sample_yaml, "yaml", operation)
        restored = apply_fix(fixed, "yaml", undo_operation(operation, before))

        assert current_value(restored, "yaml", operation.path) == "Sample API"

    def test_undo_of_add_on_new_path_is_remove(self) -> None:
        operation = FixOperation(type="add", path=("info", "license"), value="MIT")

        undo = undo_operation(operation)

        assert undo.type == "remove"
        assert undo.path == ("info", "license")

    def test_undo_of_sequence_remove_reinserts_in_place(self, sample_yaml: str) -> None:
        operation = FixOperation(type="remove", path=("tags", "0"))
        before = current_value(sample_yaml, "yaml", operation.path)

        fixed = apply_fix(sample_yaml, "yaml", operation)
        restored = apply_fix(fixed, "yaml", undo_operation(operation, before))

        assert current_value(restored, "yaml", ("tags",)) == [{"name": "users"}, {"name": "posts"}]

    def test_undo_records_the_replaced_value(self) -> None:
        operation = FixOperation(type="update", path=("a",), value=2)

        undo = undo_operation(operation, 1)

        assert undo.value == 1
        assert undo.previous_value == 2

    def test_undo_of_sequence_add_removes_the_inserted_item(self, sample_yaml: str) -> None:
        operation = FixOperation(type="add", path=("tags", "0"), value={"name": "admin"})

        undo = plan_undo(sample_yaml, "yaml", operation)
        fixed = apply_fix(sample_yaml, "yaml", operation)
        restored = apply_fix(fixed, "yaml", undo)

        assert undo.type == "remove"
        assert current_value(restored, "yaml", ("tags",)) == [{"name": "users"}, {"name": "posts"}]

    def test_sequence_add_undo_ignores_the_shifted_item(self) -> None:
        operation = FixOperation(type="add", path=("tags", "1"), value="b")

        assert undo_operation(operation, "posts", in_sequence=True).type == "remove"
        assert undo_operation(operation, "posts").type == "update"

    def test_plan_undo_of_mapping_add_restores_previous_value(self, sample_yaml: str) -> None:
        operation = FixOperation(type="add", path=("info", "title"), value="Renamed")

        undo = plan_undo(sample_yaml, "yaml", operation)
        restored = apply_fix(apply_fix(sample_yaml, "yaml", operation), "yaml", undo)

        assert undo.type == "update"
        assert current_value(restored, "yaml", ("info", "title")) == "Sample API"

    def test_undo_of_no_op_remove_is_a_remove(self, sample_yaml: str) -> None:
        operation = FixOperation(type="remove", path=("info", "license"))

        undo = plan_undo(sample_yaml, "yaml", operation)

        assert undo.type == "remove"
        assert apply_fix(sample_yaml, "yaml", undo) == apply_fix(sample_yaml, "yaml", operation)
