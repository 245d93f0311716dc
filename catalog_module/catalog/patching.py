"""Collection patching.

Brings a tracked target collection in line with a source collection:
matched items are patched in place, new items are added and items that
vanished from the source are removed. The ORM change tracker then turns
those mutations into INSERT/UPDATE/DELETE statements.
"""

from collections.abc import Callable, Hashable, Iterable, MutableSequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

S = TypeVar("S")
T = TypeVar("T")


@dataclass
class PatchResult(Generic[S, T]):
    """Summary of a collection patch.

    Attributes:
        added: Source items that had no counterpart in the target.
        updated: (source, target) pairs that were patched.
        removed: Target items that had no counterpart in the source.
    """

    added: list[S] = field(default_factory=list)
    updated: list[tuple[S, T]] = field(default_factory=list)
    removed: list[T] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated or self.removed)


def patch_collection(
    source: Iterable[S],
    target: MutableSequence[T],
    key: Callable[[S | T], Hashable],
    patch: Callable[[S, T], None],
    add: Callable[[S], None] | None = None,
    remove: Callable[[T], None] | None = None,
) -> PatchResult[S, T]:
    """Patch ``target`` so that it mirrors ``source``.

    Args:
        source: Desired items.
        target: Current items; mutated in place unless add/remove are given.
        key: Identity of an item, applied to both source and target items.
        patch: Copies a source item onto its matching target item.
        add: Called for new source items instead of appending to target.
        remove: Called for stale target items instead of removing from target.
            Target items repeating an earlier key count as stale.

    Returns:
        What was added, updated and removed.

    Example:
        patch_collection(
            new_images,
            entity.images,
            key=lambda image: (image.url, image.group),
            patch=copy_image,
        )
    """
    result: PatchResult[S, T] = PatchResult()
    target_by_key: dict[Hashable, T] = {}
    for item in target:
        target_by_key.setdefault(key(item), item)

    seen: set[Hashable] = set()
    for src in source:
        item_key = key(src)
        if item_key in seen:
            continue
        seen.add(item_key)

        existing = target_by_key.get(item_key)
        if existing is None:
            result.added.append(src)
        else:
            patch(src, existing)
            result.updated.append((src, existing))

    # Later target items sharing a key with an earlier one are duplicates
    result.removed = [
        item for item in target if key(item) not in seen or target_by_key[key(item)] is not item
    ]

    for item in result.removed:
        if remove is not None:
            remove(item)
        else:
            _remove_identical(target, item)

    for item in result.added:
        if add is not None:
            add(item)
        else:
            target.append(item)  # type: ignore[arg-type]

    return result


def _remove_identical(target: MutableSequence[T], item: T) -> None:
    for index, existing in enumerate(target):
        if existing is item:
            del target[index]
            return
