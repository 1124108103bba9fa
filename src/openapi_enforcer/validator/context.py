"""Validation context and error records."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from openapi_enforcer.config.models import ValidateRules
from openapi_enforcer.errors import TYPE_MISMATCH
from openapi_enforcer.schema.discriminator import DiscriminatorStrategy
from openapi_enforcer.schema.models import SchemaNode


@dataclass(frozen=True)
class ErrorRecord:
    """One validation failure.

    Attributes:
        path: Slash-delimited pointer from the validation root, e.g. ``/items/0/name``.
        message: Human readable description.
        code: Stable short error code.
    """

    path: str
    message: str
    code: str = TYPE_MISMATCH

    def __str__(self) -> str:
        return f"{self.path or '/'}: {self.message}"


@dataclass
class ValidationContext:
    """Ephemeral state of one top-level validation call."""

    rules: ValidateRules
    definitions: Mapping[str, SchemaNode]
    strategy: DiscriminatorStrategy
    max_depth: int
    errors: list[ErrorRecord] = field(default_factory=list)
    active: set[tuple[int, int]] = field(default_factory=set)

    def error(self, path: str, message: str, code: str = TYPE_MISMATCH) -> None:
        self.errors.append(ErrorRecord(path, message, code))

    @contextmanager
    def isolated(self) -> Iterator[list[ErrorRecord]]:
        """Collect errors into a fresh list, restoring the outer list afterwards."""
        outer = self.errors
        self.errors = []
        try:
            yield self.errors
        finally:
            self.errors = outer

    @contextmanager
    def visiting(self, node: SchemaNode, value: Any) -> Iterator[bool]:
        """Mark ``node`` as being checked against ``value``.

        Yields False when that same pair is already being checked further up,
        which happens only for schemas that reach themselves through a
        combinator.
        """
        key = (id(node), id(value))
        if key in self.active:
            yield False
            return
        self.active.add(key)
        try:
            yield True
        finally:
            self.active.discard(key)
