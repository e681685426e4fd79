"""Gap-free ordering engine.

Maintains compact 1-based ``index`` values for ordered siblings inside a
container: questions inside a survey, option links inside a question. The
engine is storage-agnostic: it talks to a :class:`SiblingStore`, which a
caller binds to an open transaction, so every operation here (both writes of
a swap included) commits or rolls back as one unit.

Only *active* siblings take part: stores exclude soft-deleted rows from every
read, so flagged items never count towards the maximum nor get renumbered.
"""

from __future__ import annotations

import logging
from typing import Hashable, Optional, Protocol, Tuple

from survey_api.logic.errors import InvalidDirection, NoAdjacentItem, NotFound, OutOfRange
from survey_api.models.kinds import Direction

logger = logging.getLogger(__name__)


class SiblingStore(Protocol):
    """Persistence seam for one kind of ordered sibling."""

    #: Code raised as NotFound when an item is not an active member
    missing_code: str

    def max_index(self, container_id: Hashable) -> int:
        """Highest active index in the container, 0 when empty."""

    def index_of(self, container_id: Hashable, item_id: Hashable) -> Optional[int]:
        """Current index of an active item, None if absent from the container."""

    def item_at(self, container_id: Hashable, index: int) -> Optional[Hashable]:
        """Active item holding ``index``, if any."""

    def set_index(self, item_id: Hashable, index: int) -> None:
        ...

    def remove(self, item_id: Hashable) -> None:
        """Take the item out of the active set (soft delete)."""

    def shift_after(self, container_id: Hashable, index: int) -> int:
        """Decrement every active index greater than ``index``; return rows touched."""


def normalize_direction(direction: object) -> str:
    value = str(direction or "").strip().upper()
    if value not in (Direction.UP, Direction.DOWN):
        raise InvalidDirection(f"Invalid direction {direction!r}; expected UP or DOWN")
    return value


def insert_at_end(store: SiblingStore, container_id: Hashable) -> int:
    """Return the index a new sibling must take: one past the current maximum."""
    return store.max_index(container_id) + 1


def swap(store: SiblingStore, container_id: Hashable, item_id: Hashable, direction: object) -> Tuple[int, int]:
    """Exchange an item's index with its neighbour above (UP) or below (DOWN).

    Returns ``(new_index_of_item, new_index_of_neighbour)``.

    The DOWN bound is the container-wide maximum index rather than the active
    count; callers rely on that boundary behaviour.
    """
    resolved = normalize_direction(direction)
    current = store.index_of(container_id, item_id)
    if current is None:
        raise NotFound("Item not found", code=store.missing_code)

    if resolved == Direction.UP:
        if current <= 0:
            raise OutOfRange("Item is already at the top")
        target = current - 1
    else:
        if current >= store.max_index(container_id):
            raise OutOfRange("Item is already at the bottom")
        target = current + 1

    neighbour = store.item_at(container_id, target)
    if neighbour is None:
        raise NoAdjacentItem(f"No item found at index {target}")

    store.set_index(item_id, target)
    store.set_index(neighbour, current)
    logger.info(
        "ordering_swap container=%s item=%s neighbour=%s from=%s to=%s",
        container_id,
        item_id,
        neighbour,
        current,
        target,
    )
    return target, current


def delete_and_compact(store: SiblingStore, container_id: Hashable, item_id: Hashable) -> int:
    """Remove an item and close the gap it leaves; return the removed index."""
    prior = store.index_of(container_id, item_id)
    if prior is None:
        raise NotFound("Item not found", code=store.missing_code)
    store.remove(item_id)
    shifted = store.shift_after(container_id, prior)
    logger.info(
        "ordering_compact container=%s item=%s prior_index=%s shifted=%s",
        container_id,
        item_id,
        prior,
        shifted,
    )
    return prior


__all__ = [
    "SiblingStore",
    "normalize_direction",
    "insert_at_end",
    "swap",
    "delete_and_compact",
]
