"""Tests for collection patching."""

from dataclasses import dataclass

from catalog_module.catalog.patching import patch_collection


@dataclass
class Row:
    key: str
    value: int = 0


def copy_value(source: Row, target: Row) -> None:
    target.value = source.value


def by_key(row: Row) -> str:
    return row.key


def test_matched_items_are_patched_in_place() -> None:
    """Matching target items keep their identity and get the source values."""
    existing = Row("a", 1)
    target = [existing]

    result = patch_collection([Row("a", 5)], target, key=by_key, patch=copy_value)

    assert target == [Row("a", 5)]
    assert target[0] is existing
    assert len(result.updated) == 1
    assert result.added == [] and result.removed == []


def test_new_items_are_appended_and_stale_items_removed() -> None:
    target = [Row("a"), Row("b")]

    result = patch_collection([Row("b"), Row("c")], target, key=by_key, patch=copy_value)

    assert [row.key for row in target] == ["b", "c"]
    assert [row.key for row in result.added] == ["c"]
    assert [row.key for row in result.removed] == ["a"]
    assert result.changed


def test_empty_source_clears_target() -> None:
    target = [Row("a"), Row("b")]

    result = patch_collection([], target, key=by_key, patch=copy_value)

    assert target == []
    assert len(result.removed) == 2


def test_duplicate_source_keys_use_first_occurrence() -> None:
    target: list[Row] = []

    result = patch_collection([Row("a", 1), Row("a", 2)], target, key=by_key, patch=copy_value)

    assert target == [Row("a", 1)]
    assert len(result.added) == 1


def test_callbacks_replace_list_mutation() -> None:
    """With add/remove callbacks the target list itself is left alone."""
    target = [Row("a"), Row("b")]
    added: list[Row] = []
    removed: list[Row] = []

    patch_collection(
        [Row("b", 3), Row("c")],
        target,
        key=by_key,
        patch=copy_value,
        add=added.append,
        remove=removed.append,
    )

    assert [row.key for row in target] == ["a", "b"]
    assert target[1].value == 3
    assert [row.key for row in added] == ["c"]
    assert [row.key for row in removed] == ["a"]


def test_no_changes() -> None:
    result = patch_collection([], [], key=by_key, patch=copy_value)
    assert not result.changed


def test_duplicate_target_keys_are_removed() -> None:
    first, duplicate = Row("a", 1), Row("a", 1)
    target = [first, duplicate, Row("b", 2)]

    result = patch_collection([Row("a", 5), Row("b", 2)], target, key=by_key, patch=copy_value)

    assert result.removed == [duplicate]
    assert target[0] is first
    assert target == [Row("a", 5), Row("b", 2)]
