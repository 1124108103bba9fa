"""Tests for openapi_enforcer.enforcer.array module."""

from datetime import date

import numpy as np
import pytest

from openapi_enforcer import enforce, unwrap
from openapi_enforcer.config import EnforcerConfig
from openapi_enforcer.enforcer import EnforcedList
from openapi_enforcer.errors import (
    FeatureUnsupportedError,
    LengthBoundError,
    TypeMismatchError,
    UniquenessError,
)

NUMBERS = {"type": "array", "items": {"type": "number"}}


class TestCreation:
    """Test wrapping arrays."""

    def test_wraps_in_place(self):
        """Test that the caller's list is the storage."""
        data = [1, 2]
        numbers = enforce(NUMBERS, data)
        assert isinstance(numbers, EnforcedList)
        numbers.push(3)
        assert data == [1, 2, 3]
        assert unwrap(numbers) is data

    def test_missing_value_starts_empty(self):
        """Test that a missing array starts out empty."""
        assert enforce(NUMBERS) == []

    def test_invalid_initial_value(self):
        """Test that the initial value is validated."""
        with pytest.raises(TypeMismatchError, match="/1: Expected a number"):
            enforce(NUMBERS, [1, "a"])

    def test_not_hashable(self):
        """Test that wrappers are unhashable like lists."""
        with pytest.raises(TypeError):
            hash(enforce(NUMBERS, []))

    def test_array_likes_are_unsupported(self):
        """Test that numpy arrays can not be wrapped live."""
        with pytest.raises(FeatureUnsupportedError) as exc_info:
            enforce(NUMBERS, np.array([1, 2]))
        assert exc_info.value.code == "ESEPROX"

        numbers = enforce({"type": "array"}, [])
        with pytest.raises(FeatureUnsupportedError):
            numbers.push(np.array([1]))


class TestMutations:
    """Test that every mutation is checked before it is committed."""

    def test_push_checks_items(self):
        """Test that pushed items are validated at their index."""
        numbers = enforce(NUMBERS, [1, 2])
        assert numbers.push(3, 4) == 4
        with pytest.raises(TypeMismatchError) as exc_info:
            numbers.push("a")
        assert exc_info.value.path == "/4"
        assert numbers == [1, 2, 3, 4]

    def test_push_is_atomic(self):
        """Test that one bad item rejects the whole push."""
        numbers = enforce(NUMBERS, [])
        with pytest.raises(TypeMismatchError):
            numbers.push(1, "b", 3)
        assert numbers == []

    def test_max_items(self):
        """Test that growing past maxItems is rejected."""
        items = enforce({"type": "array", "maxItems": 2}, [1])
        items.append(2)
        with pytest.raises(LengthBoundError):
            items.push(3)
        with pytest.raises(LengthBoundError):
            items.unshift(0)
        with pytest.raises(LengthBoundError):
            items.insert(0, 0)
        assert items == [1, 2]

    def test_min_items_off_by_default(self):
        """Test that shrinking below minItems is allowed unless enabled."""
        items = enforce({"type": "array", "minItems": 1}, [1])
        assert items.pop() == 1

        config = EnforcerConfig().with_overrides(enforce={"minItems": True})
        items = enforce({"type": "array", "minItems": 1}, [1], config=config)
        with pytest.raises(LengthBoundError):
            items.pop()
        with pytest.raises(LengthBoundError):
            items.shift()
        with pytest.raises(LengthBoundError):
            items.splice(0)
        assert items == [1]

    def test_unique_items(self):
        """Test that re-adding an existing value is rejected."""
        items = enforce({"type": "array", "uniqueItems": True}, [1, 2])
        with pytest.raises(UniquenessError):
            items.push(1)
        items.push(3)
        items.remove(1)
        items.push(1)
        assert items == [2, 3, 1]

    def test_index_assignment(self):
        """Test item assignment by index and slice."""
        numbers = enforce(NUMBERS, [1, 2, 3])
        numbers[0] = 10
        numbers[-1] = 30
        with pytest.raises(TypeMismatchError) as exc_info:
            numbers[1] = "x"
        assert exc_info.value.path == "/1"
        with pytest.raises(IndexError):
            numbers[3] = 4
        numbers[1:2] = [20, 21]
        assert numbers == [10, 20, 21, 30]

    def test_slice_assignment_respects_max_items(self):
        """Test that growth through a slice is bounded."""
        items = enforce({"type": "array", "maxItems": 2}, [1])
        with pytest.raises(LengthBoundError):
            items[1:] = [2, 3]
        items[1:] = [2]
        assert items == [1, 2]

    def test_delete(self):
        """Test deletion by index and slice."""
        numbers = enforce(NUMBERS, [1, 2, 3, 4])
        del numbers[0]
        del numbers[1:]
        assert numbers == [2]
        with pytest.raises(IndexError):
            del numbers[5]

    def test_insert_clamps_position(self):
        """Test that insert positions past either end are clamped."""
        numbers = enforce(NUMBERS, [2])
        numbers.insert(100, 3)
        numbers.insert(-100, 1)
        assert numbers == [1, 2, 3]

    def test_sort_and_reverse(self):
        """Test reordering."""
        numbers = enforce(NUMBERS, [3, 1, 2])
        numbers.sort()
        assert numbers == [1, 2, 3]
        numbers.reverse()
        assert numbers == [3, 2, 1]
        numbers.sort(key=lambda n: n % 3)
        assert numbers == [3, 1, 2]

    def test_clear(self):
        """Test clearing."""
        numbers = enforce(NUMBERS, [1, 2])
        numbers.clear()
        assert numbers == []

    def test_pop_empty(self):
        """Test popping an empty array."""
        with pytest.raises(IndexError):
            enforce(NUMBERS, []).pop()

    def test_unserializable_values(self):
        """Test that schemaless items must still be serializable."""
        items = enforce({"type": "array"}, [])
        items.push(None, True, 1.5, "x", date(2020, 1, 1), b"\x00", [1], {"a": 1})
        with pytest.raises(TypeMismatchError, match="Value is not serializable") as exc_info:
            items.push(lambda: 1)
        assert exc_info.value.path == "/8"
        with pytest.raises(TypeMismatchError):
            items.push({"nested": object()})
        assert len(items) == 8

    def test_auto_format(self):
        """Test that pushed values are coerced when autoFormat is on."""
        config = EnforcerConfig().with_overrides(populate={"autoFormat": True})
        integers = enforce({"type": "array", "items": {"type": "integer"}}, [], config=config)
        integers.push("5", "1.7")
        assert integers == [5, 1]

        dates = enforce(
            {"type": "array", "items": {"type": "string", "format": "date"}}, [], config=config
        )
        dates.push("2020-01-02")
        assert dates[0] == date(2020, 1, 2)


class TestNamedOperations:
    """Test the JavaScript-style array operations."""

    def test_unshift_and_shift(self):
        """Test prepend and remove-first."""
        numbers = enforce(NUMBERS, [3])
        assert numbers.unshift(1, 2) == 3
        assert numbers.shift() == 1
        assert numbers == [2, 3]

    def test_splice(self):
        """Test removing and inserting in one step."""
        numbers = enforce(NUMBERS, [1, 2, 3, 4])
        removed = numbers.splice(1, 2, 9)
        assert isinstance(removed, EnforcedList)
        assert removed == [2, 3]
        assert numbers == [1, 9, 4]
        assert numbers.splice(-1) == [4]
        assert numbers == [1, 9]

    def test_splice_is_atomic(self):
        """Test that a rejected splice leaves the array untouched."""
        items = enforce({"type": "array", "maxItems": 3}, [1, 2, 3])
        with pytest.raises(LengthBoundError):
            items.splice(0, 1, 7, 8)
        assert items == [1, 2, 3]

        numbers = enforce(NUMBERS, [1, 2])
        with pytest.raises(TypeMismatchError):
            numbers.splice(0, 1, "x")
        assert numbers == [1, 2]

    def test_fill(self):
        """Test filling a range."""
        numbers = enforce(NUMBERS, [1, 2, 3])
        assert numbers.fill(0, 1) is numbers
        assert numbers == [1, 0, 0]
        with pytest.raises(TypeMismatchError):
            numbers.fill("x")

    def test_copy_within(self):
        """Test copying a range over another range."""
        numbers = enforce(NUMBERS, [1, 2, 3, 4, 5])
        numbers.copy_within(0, 3)
        assert numbers == [4, 5, 3, 4, 5]

    def test_copy_within_respects_uniqueness(self):
        """Test that copy_within is validated like any other mutation."""
        items = enforce({"type": "array", "uniqueItems": True}, [1, 2, 3])
        with pytest.raises(UniquenessError):
            items.copy_within(0, 2)
        assert items == [1, 2, 3]

    def test_concat(self):
        """Test that concat builds a new array and flattens one level."""
        numbers = enforce(NUMBERS, [1])
        combined = numbers.concat([2, 3], 4)
        assert combined == [1, 2, 3, 4]
        assert numbers == [1]
        with pytest.raises(TypeMismatchError) as exc_info:
            numbers.concat("x")
        assert exc_info.value.path == "/1"

    def test_filter_and_map(self):
        """Test derived arrays keep the item schema."""
        numbers = enforce(NUMBERS, [1, 2, 3])
        assert numbers.filter(lambda n: n > 1) == [2, 3]
        assert numbers.map(lambda n: n * 2) == [2, 4, 6]
        with pytest.raises(TypeMismatchError):
            numbers.map(str)

    def test_slices_are_independent(self):
        """Test that slices are new arrays governed by the item schema."""
        numbers = enforce({"type": "array", "items": {"type": "number"}, "maxItems": 3}, [1, 2, 3])
        part = numbers[1:]
        assert part == [2, 3]
        part.push(4, 5)
        assert numbers == [1, 2, 3]
        assert numbers.slice(0, 1) == [1]
        with pytest.raises(TypeMismatchError):
            part.push("x")


class TestNesting:
    """Test lazily wrapped nested arrays."""

    def test_nested_arrays_are_enforced(self):
        """Test that mutations of nested arrays are checked at their path."""
        grid = enforce(
            {"type": "array", "items": {"type": "array", "items": {"type": "integer"}}}, [[1]]
        )
        row = grid[0]
        assert isinstance(row, EnforcedList)
        assert row.path == "/0"
        row.push(2)
        with pytest.raises(TypeMismatchError) as exc_info:
            row.push("x")
        assert exc_info.value.path == "/0/2"
        assert grid == [[1, 2]]

    def test_nested_writes_keep_parent_uniqueness(self):
        """Test that a write through a nested object cannot duplicate an item."""
        items = enforce(
            {"type": "array", "uniqueItems": True, "items": {"type": "object"}},
            [{"a": 1}, {"a": 2}],
        )
        with pytest.raises(UniquenessError):
            items[1]["a"] = 1
        assert items == [{"a": 1}, {"a": 2}]
        items[1]["a"] = 3
        assert items == [{"a": 1}, {"a": 3}]

    def test_nested_rows_follow_their_position(self):
        """Test that a nested array read before its index moved still checks the parent."""
        grid = enforce(
            {"type": "array", "uniqueItems": True, "items": {"type": "array"}},
            [[1], [1, 2]],
        )
        row = grid[0]
        with pytest.raises(UniquenessError):
            row.push(2)
        grid.unshift([5])
        with pytest.raises(UniquenessError):
            row.push(2)
        assert grid == [[5], [1], [1, 2]]
        row.push(3)
        assert grid == [[5], [1, 3], [1, 2]]

    def test_detached_rows_are_unconstrained_by_parent(self):
        """Test that a nested array removed from its parent no longer checks it."""
        grid = enforce(
            {"type": "array", "uniqueItems": True, "items": {"type": "array"}},
            [[1], [2]],
        )
        first = grid[0]
        grid.shift()
        first.clear()
        first.push(2)
        assert first == [2]
        assert grid == [[2]]

    def test_storing_wrapped_values(self):
        """Test that wrapped values are stored unwrapped."""
        grid = enforce({"type": "array", "items": {"type": "array"}}, [])
        inner = enforce({"type": "array"}, [1])
        grid.push(inner)
        assert type(unwrap(grid)[0]) is list

    def test_repr(self):
        """Test the representation."""
        assert repr(enforce(NUMBERS, [1])) == "EnforcedList([1])"
