"""Shared pieces of the live-enforced containers."""

from __future__ import annotations

import numbers
from collections.abc import Mapping
from datetime import date, time
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from openapi_enforcer.models import MISSING

if TYPE_CHECKING:
    from openapi_enforcer.schema.models import SchemaNode

    from .core import EnforcementContext

ARRAY_LIKES = (np.ndarray, pd.Series, pd.DataFrame)


class EnforcedValue:
    """Base of the list and dict wrappers.

    The wrapped container is owned by the caller and is mutated in place; the
    wrapper only ever stores plain (unwrapped) values inside it. A wrapper read
    out of another one keeps a reference to that parent and the key it was read
    from, and every mutation is checked against each enclosing container before
    it is committed.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        data: Any,
        schema: SchemaNode,
        context: EnforcementContext,
        path: str = "",
        parent: EnforcedValue | None = None,
        key: Any = None,
    ):
        self._data = data
        self._schema = schema
        self._context = context
        self._path = path
        self._parent = parent
        self._key = key

    @property
    def schema(self) -> SchemaNode:
        """The governing schema node."""
        return self._schema

    @property
    def path(self) -> str:
        return self._path

    def _child_path(self, key: Any) -> str:
        return f"{self._path}/{key}"

    def _recheck(self, key: Any, candidate: Any) -> None:
        """Check ``candidate``, this container with the child at ``key`` changed.

        Raises:
            EnforcerError: If a rule of this container no longer holds
        """
        raise NotImplementedError

    def _locate(self, child: EnforcedValue) -> Any:
        """Key holding ``child``'s container, MISSING once it was removed."""
        key = child._key
        try:
            if self._data[key] is child._data:
                return key
        except (KeyError, IndexError, TypeError):
            pass
        pairs = self._data.items() if isinstance(self._data, dict) else enumerate(self._data)
        return next((k for k, item in pairs if item is child._data), MISSING)

    def _check_ancestors(self, candidate: Any) -> None:
        """Check every enclosing container as it would be with ``candidate``
        stored in place of this one."""
        child, value = self, candidate
        while child._parent is not None:
            parent = child._parent
            key = parent._locate(child)
            if key is MISSING:
                # detached from its parent, nothing above constrains it
                return
            container = dict(parent._data) if isinstance(parent._data, dict) else list(parent._data)
            container[key] = value
            parent._recheck(key, container)
            child, value = parent, container

    def __eq__(self, other: object) -> bool:
        return bool(self._data == unwrap(other))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


def unwrap(value: Any) -> Any:
    """Return the plain container behind an enforced value.

    Plain lists and dicts holding enforced values are rebuilt with their
    enforced members unwrapped; anything else is returned as-is.
    """
    if isinstance(value, EnforcedValue):
        return value._data
    if isinstance(value, list) and any(isinstance(item, EnforcedValue) for item in value):
        return [unwrap(item) for item in value]
    if isinstance(value, dict) and any(isinstance(item, EnforcedValue) for item in value.values()):
        return {key: unwrap(item) for key, item in value.items()}
    return value


def find_unserializable(value: Any, path: str = "") -> str | None:
    """Path of the first value that has no JSON-like representation, or None.

    Serializable values are None, booleans, numbers, strings, dates, bytes and
    lists/dicts of the same (numpy/pandas array-likes included).
    """
    if value is None or isinstance(value, (str, numbers.Number, date, time, bytes, bytearray)):
        return None
    if isinstance(value, (np.generic, *ARRAY_LIKES)):
        return None
    if isinstance(value, EnforcedValue):
        value = value._data
    if isinstance(value, Mapping):
        for key, item in value.items():
            found = find_unserializable(item, f"{path}/{key}")
            if found is not None:
                return found
        return None
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            found = find_unserializable(item, f"{path}/{index}")
            if found is not None:
                return found
        return None
    return path or "/"
