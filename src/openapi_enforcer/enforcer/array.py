"""Live-enforced arrays."""

from __future__ import annotations

from collections.abc import Callable, Iterable, MutableSequence
from typing import TYPE_CHECKING, Any, overload

from openapi_enforcer.schema.types import resolve_ref

from .base import EnforcedValue, unwrap

if TYPE_CHECKING:
    from openapi_enforcer.schema.models import SchemaNode

    from .core import EnforcementContext


class EnforcedList(EnforcedValue, MutableSequence[Any]):
    """A list whose every mutation is checked against its array schema.

    Each mutation builds its candidate result, validates it, then commits it with
    one in-place replacement of the wrapped list, so a rejected mutation leaves
    the list exactly as it was. Besides the ``list`` API the JavaScript-style
    operations ``push``, ``unshift``, ``shift``, ``splice``, ``fill``,
    ``copy_within``, ``concat``, ``filter``, ``map`` and ``slice`` are offered.

    Index assignment follows list semantics: an index outside the list raises
    IndexError. Grow the list with ``push``/``append`` or slice assignment.

    Example:
        >>> from openapi_enforcer import enforce
        >>> numbers = enforce({"type": "array", "items": {"type": "number"}}, [1, 2, 3, 4])
        >>> numbers.copy_within(2, 0)
        EnforcedList([1, 2, 1, 2])
        >>> numbers.splice(1, 2)
        EnforcedList([2, 1])
        >>> numbers
        EnforcedList([1, 2])
    """

    def __init__(
        self,
        data: list[Any],
        schema: SchemaNode,
        context: EnforcementContext,
        path: str = "",
        parent: EnforcedValue | None = None,
        key: Any = None,
    ):
        super().__init__(data, schema, context, path, parent, key)
        self._items = _item_schema(schema, context)
        # array-level constraints only, items are checked as they are introduced
        self._shell = schema.model_copy(update={"items": None}) if schema.kind == "array" else schema

    # Internals

    def _prepare(self, value: Any, index: int) -> Any:
        return self._context.prepare(self._items, value, self._child_path(index))

    def _prepare_all(self, values: Iterable[Any], start: int) -> list[Any]:
        return [self._prepare(value, start + offset) for offset, value in enumerate(values)]

    def _commit(self, candidate: list[Any]) -> None:
        self._context.check(self._shell, candidate, self._path)
        self._check_ancestors(candidate)
        self._data[:] = candidate

    def _recheck(self, key: Any, candidate: Any) -> None:
        self._context.check(self._shell, candidate, self._path)

    def _index(self, index: int) -> int:
        length = len(self._data)
        position = index + length if index < 0 else index
        if not 0 <= position < length:
            raise IndexError("list index out of range")
        return position

    def _bounds(self, start: int | None, end: int | None) -> tuple[int, int]:
        begin, stop, _ = slice(start, end).indices(len(self._data))
        return begin, max(begin, stop)

    # Sequence protocol

    def __len__(self) -> int:
        return len(self._data)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> EnforcedList: ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return self._context.derive(self._items, self._data[index], self._path)
        position = self._index(index)
        return self._context.wrap(
            self._items, self._data[position], self._child_path(position), self, position
        )

    def __setitem__(self, index: int | slice, value: Any) -> None:
        candidate = list(self._data)
        if isinstance(index, slice):
            begin = self._bounds(index.start, index.stop)[0]
            candidate[index] = self._prepare_all(value, begin)
        else:
            position = self._index(index)
            candidate[position] = self._prepare(value, position)
        self._commit(candidate)

    def __delitem__(self, index: int | slice) -> None:
        candidate = list(self._data)
        if isinstance(index, slice):
            del candidate[index]
        else:
            del candidate[self._index(index)]
        self._commit(candidate)

    def insert(self, index: int, value: Any) -> None:
        length = len(self._data)
        position = min(length, index if index >= 0 else max(0, index + length))
        candidate = list(self._data)
        candidate.insert(position, self._prepare(value, position))
        self._commit(candidate)

    # Atomic overrides of the MutableSequence mixins

    def append(self, value: Any) -> None:
        self.push(value)

    def extend(self, values: Iterable[Any]) -> None:
        self.push(*values)

    def pop(self, index: int = -1) -> Any:
        if not self._data:
            raise IndexError("pop from empty list")
        candidate = list(self._data)
        value = candidate.pop(self._index(index))
        self._commit(candidate)
        return value

    def remove(self, value: Any) -> None:
        candidate = list(self._data)
        candidate.remove(unwrap(value))
        self._commit(candidate)

    def clear(self) -> None:
        self._commit([])

    def reverse(self) -> None:
        self._commit(self._data[::-1])

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        self._commit(sorted(self._data, key=key, reverse=reverse))  # type: ignore[type-var]

    # JavaScript-style operations

    def push(self, *values: Any) -> int:
        """Append ``values`` and return the new length."""
        added = self._prepare_all(values, len(self._data))
        self._commit(self._data + added)
        return len(self._data)

    def unshift(self, *values: Any) -> int:
        """Prepend ``values`` and return the new length."""
        added = self._prepare_all(values, 0)
        self._commit(added + self._data)
        return len(self._data)

    def shift(self) -> Any:
        """Remove and return the first item."""
        return self.pop(0)

    def splice(self, start: int, delete_count: int | None = None, *items: Any) -> EnforcedList:
        """Remove ``delete_count`` items at ``start``, insert ``items`` there and
        return the removed items as a new array."""
        begin = self._bounds(start, None)[0]
        available = len(self._data) - begin
        count = available if delete_count is None else max(0, min(delete_count, available))

        candidate = list(self._data)
        removed = candidate[begin : begin + count]
        candidate[begin : begin + count] = self._prepare_all(items, begin)
        self._commit(candidate)
        return self._context.derive(self._items, removed, self._path)

    def fill(self, value: Any, start: int = 0, end: int | None = None) -> EnforcedList:
        """Set every index in ``[start, end)`` to ``value``."""
        begin, stop = self._bounds(start, end)
        candidate = list(self._data)
        if stop > begin:
            filler = self._prepare(value, begin)
            candidate[begin:stop] = [filler] * (stop - begin)
        self._commit(candidate)
        return self

    def copy_within(self, target: int, start: int = 0, end: int | None = None) -> EnforcedList:
        """Copy the items in ``[start, end)`` over the items starting at ``target``."""
        length = len(self._data)
        to = self._bounds(target, None)[0]
        begin, stop = self._bounds(start, end)
        count = min(stop - begin, length - to)
        candidate = list(self._data)
        if count > 0:
            candidate[to : to + count] = self._data[begin : begin + count]
        self._commit(candidate)
        return self

    def concat(self, *values: Any) -> EnforcedList:
        """New array of these items followed by ``values``; list arguments are
        flattened one level."""
        combined = list(self._data)
        for value in values:
            value = unwrap(value)
            if isinstance(value, (list, tuple)):
                combined.extend(value)
            else:
                combined.append(value)
        return self._context.derive(self._items, combined, self._path)

    def filter(self, predicate: Callable[[Any], Any]) -> EnforcedList:
        return self._context.derive(self._items, [item for item in self if predicate(item)], self._path)

    def map(self, function: Callable[[Any], Any]) -> EnforcedList:
        return self._context.derive(self._items, [function(item) for item in self], self._path)

    def slice(self, start: int = 0, end: int | None = None) -> EnforcedList:
        return self._context.derive(self._items, self._data[start:end], self._path)


def _item_schema(schema: SchemaNode, context: EnforcementContext) -> SchemaNode | None:
    if schema.items is not None:
        return schema.items
    for member in schema.all_of or []:
        resolved = resolve_ref(member, context.definitions)
        if resolved is not None and resolved.items is not None:
            return resolved.items
    return None
