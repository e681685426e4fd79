"""Functional tests for the gap-free ordering engine.

The engine is exercised against an in-memory sibling store so index
arithmetic is checked without a database.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import pytest

from survey_api.logic import ordering
from survey_api.logic.errors import InvalidDirection, NoAdjacentItem, NotFound, OutOfRange


class InMemorySiblings:
    missing_code = "QUESTION_NOT_FOUND"

    def __init__(self) -> None:
        # item id -> (container id, index, deleted)
        self.rows: Dict[int, Tuple[int, int, bool]] = {}

    def add(self, container_id: int, item_id: int, index: int, deleted: bool = False) -> None:
        self.rows[item_id] = (container_id, index, deleted)

    def _active(self, container_id: int):
        return {i: r for i, r in self.rows.items() if r[0] == container_id and not r[2]}

    def max_index(self, container_id: int) -> int:
        return max((r[1] for r in self._active(container_id).values()), default=0)

    def index_of(self, container_id: int, item_id: int) -> Optional[int]:
        row = self._active(container_id).get(item_id)
        return row[1] if row else None

    def item_at(self, container_id: int, index: int) -> Optional[int]:
        for item_id, row in self._active(container_id).items():
            if row[1] == index:
                return item_id
        return None

    def set_index(self, item_id: int, index: int) -> None:
        container_id, _, deleted = self.rows[item_id]
        self.rows[item_id] = (container_id, index, deleted)

    def remove(self, item_id: int) -> None:
        container_id, index, _ = self.rows[item_id]
        self.rows[item_id] = (container_id, index, True)

    def shift_after(self, container_id: int, index: int) -> int:
        touched = 0
        for item_id, row in self._active(container_id).items():
            if row[1] > index:
                self.rows[item_id] = (row[0], row[1] - 1, row[2])
                touched += 1
        return touched

    def indices(self, container_id: int) -> Dict[int, int]:
        return {i: r[1] for i, r in self._active(container_id).items()}


@pytest.fixture
def store() -> InMemorySiblings:
    s = InMemorySiblings()
    for item_id, index in ((10, 1), (11, 2), (12, 3)):
        s.add(1, item_id, index)
    return s


def test_insert_at_end_on_empty_container_starts_at_one() -> None:
    assert ordering.insert_at_end(InMemorySiblings(), 99) == 1


def test_insert_at_end_ignores_deleted_siblings(store: InMemorySiblings) -> None:
    store.add(1, 13, 4, deleted=True)
    assert ordering.insert_at_end(store, 1) == 4


def test_swap_up_exchanges_with_neighbour(store: InMemorySiblings) -> None:
    assert ordering.swap(store, 1, 11, "UP") == (1, 2)
    assert store.indices(1) == {10: 2, 11: 1, 12: 3}


def test_swap_direction_is_case_insensitive(store: InMemorySiblings) -> None:
    ordering.swap(store, 1, 11, "down")
    assert store.indices(1) == {10: 1, 11: 3, 12: 2}


def test_swap_rejects_unknown_direction(store: InMemorySiblings) -> None:
    with pytest.raises(InvalidDirection) as exc:
        ordering.swap(store, 1, 11, "SIDEWAYS")
    assert exc.value.code == "ORDER_INVALID_DIRECTION"
    assert store.indices(1) == {10: 1, 11: 2, 12: 3}


def test_swap_down_from_last_is_out_of_range(store: InMemorySiblings) -> None:
    with pytest.raises(OutOfRange):
        ordering.swap(store, 1, 12, "DOWN")


def test_swap_up_from_first_finds_no_neighbour(store: InMemorySiblings) -> None:
    with pytest.raises(NoAdjacentItem) as exc:
        ordering.swap(store, 1, 10, "UP")
    assert exc.value.code == "ORDER_NO_ADJACENT_ITEM"


def test_swap_up_at_index_zero_is_out_of_range() -> None:
    s = InMemorySiblings()
    s.add(1, 5, 0)
    with pytest.raises(OutOfRange):
        ordering.swap(s, 1, 5, "UP")


def test_swap_down_bound_uses_container_maximum() -> None:
    # Indices 1 and 3 with a hole at 2: DOWN from 1 is within the maximum,
    # so the missing neighbour is reported rather than an out-of-range error
    s = InMemorySiblings()
    s.add(1, 20, 1)
    s.add(1, 21, 3)
    with pytest.raises(NoAdjacentItem):
        ordering.swap(s, 1, 20, "DOWN")


def test_swap_unknown_item_uses_store_missing_code(store: InMemorySiblings) -> None:
    with pytest.raises(NotFound) as exc:
        ordering.swap(store, 1, 404, "UP")
    assert exc.value.code == "QUESTION_NOT_FOUND"


def test_delete_and_compact_closes_gap(store: InMemorySiblings) -> None:
    assert ordering.delete_and_compact(store, 1, 11) == 2
    assert store.indices(1) == {10: 1, 12: 2}


def test_delete_and_compact_leaves_other_containers_alone(store: InMemorySiblings) -> None:
    store.add(2, 30, 2)
    ordering.delete_and_compact(store, 1, 10)
    assert store.indices(2) == {30: 2}
    assert store.indices(1) == {11: 1, 12: 2}


def test_delete_and_compact_of_deleted_item_is_not_found(store: InMemorySiblings) -> None:
    ordering.delete_and_compact(store, 1, 12)
    with pytest.raises(NotFound):
        ordering.delete_and_compact(store, 1, 12)
