"""Live-enforced objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

from openapi_enforcer.errors import LengthBoundError, RequiredPropertyError, UnknownPropertyError
from openapi_enforcer.schema.discriminator import effective_schemas
from openapi_enforcer.schema.models import SchemaNode

from .base import EnforcedValue

if TYPE_CHECKING:
    from .core import EnforcementContext

logger = logging.getLogger(__name__)


class EnforcedDict(EnforcedValue, MutableMapping[str, Any]):
    """A dict whose every mutation is checked against its object schema.

    A written value is validated against the property's schema (the declared
    property, else ``additionalProperties``, else any serializable value) before
    it is stored. Writing the discriminator property revalidates the whole
    object against the subtype it selects. ``update`` and ``clear`` apply all or
    nothing.

    Example:
        >>> from openapi_enforcer import enforce
        >>> pet = enforce({"type": "object", "properties": {"age": {"type": "integer"}}})
        >>> pet["age"] = 3
        >>> pet["age"] = "three"
        Traceback (most recent call last):
        ...
        openapi_enforcer.errors.TypeMismatchError: /age: Expected an integer. Received: "three"
    """

    def __init__(
        self,
        data: dict[str, Any],
        schema: SchemaNode,
        context: EnforcementContext,
        path: str = "",
        parent: EnforcedValue | None = None,
        key: Any = None,
    ):
        super().__init__(data, schema, context, path, parent, key)

    # Internals

    def _schemas(self, value: Mapping[str, Any] | None = None) -> list[SchemaNode]:
        rules = self._context.validator.rules
        return effective_schemas(
            self._schema,
            self._data if value is None else value,
            self._context.definitions,
            self._context.strategy,
            follow_all_of=rules.all_of,
            follow_discriminator=rules.discriminator,
        )

    def _property_schema(self, key: str, schemas: list[SchemaNode], strict: bool = True) -> SchemaNode | None:
        """Schema governing ``key``; None for a schemaless value.

        Raises:
            UnknownPropertyError: If ``strict`` and no schema allows the key
        """
        declared = [schema.properties[key] for schema in schemas if schema.declares(key)]  # type: ignore[index]
        if len(declared) == 1:
            return declared[0]
        if declared:
            return SchemaNode(all_of=declared)
        for schema in schemas:
            if isinstance(schema.additional_properties, SchemaNode):
                return schema.additional_properties
        rules = self._context.validator.rules
        if strict and rules.additional_properties:
            if any(schema.additional_properties is False for schema in schemas):
                raise UnknownPropertyError("Property not allowed", path=self._child_path(key))
        return None

    def _needs_full_check(self, key: str, schemas: list[SchemaNode]) -> bool:
        if self._schema.kind in ("any_of", "one_of", "not"):
            return True
        for schema in schemas:
            if schema.kind in ("any_of", "one_of", "not") or schema.enum is not None:
                return True
            if schema.discriminator is not None and schema.discriminator.property_name == key:
                return True
        return False

    def _recheck(self, key: Any, candidate: Any) -> None:
        if self._needs_full_check(key, self._schemas(candidate)):
            self._context.check(self._schema, candidate, self._path)

    # Mapping protocol

    def __getitem__(self, key: str) -> Any:
        value = self._data[key]
        schema = self._property_schema(key, self._schemas(), strict=False)
        return self._context.wrap(schema, value, self._child_path(key), self, key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __setitem__(self, key: str, value: Any) -> None:
        rules = self._context.validator.rules
        schemas = self._schemas()
        path = self._child_path(key)
        prepared = self._context.prepare(self._property_schema(key, schemas), value, path)

        candidate = dict(self._data)
        candidate[key] = prepared
        if key not in self._data and rules.max_properties:
            count = len(candidate)
            for schema in schemas:
                if schema.max_properties is not None and count > schema.max_properties:
                    logger.debug(f"Rejected new property {path}: above maxProperties")
                    raise LengthBoundError(
                        f"Expected object property count to be less than or equal to "
                        f"{schema.max_properties}. Received: {count}",
                        path=self._path,
                    )
        if self._needs_full_check(key, schemas):
            self._context.check(self._schema, candidate, self._path)
        self._check_ancestors(candidate)
        self._data[key] = prepared

    def __delitem__(self, key: str) -> None:
        if key not in self._data:
            raise KeyError(key)
        rules = self._context.validator.rules
        schemas = self._schemas()
        path = self._child_path(key)

        if rules.required and any(key in schema.required_names() for schema in schemas):
            logger.debug(f"Rejected delete of required property {path}")
            raise RequiredPropertyError(f"Property is required: {key}", path=path)

        candidate = dict(self._data)
        del candidate[key]
        if rules.min_properties:
            count = len(candidate)
            for schema in schemas:
                if schema.min_properties is not None and count < schema.min_properties:
                    logger.debug(f"Rejected delete of {path}: below minProperties")
                    raise LengthBoundError(
                        f"Expected object property count to be greater than or equal to "
                        f"{schema.min_properties}. Received: {count}",
                        path=self._path,
                    )
        if self._needs_full_check(key, schemas):
            self._context.check(self._schema, candidate, self._path)
        self._check_ancestors(candidate)
        del self._data[key]

    # Atomic overrides of the MutableMapping mixins

    def update(self, other: Mapping[str, Any] | Iterable[tuple[str, Any]] = (), /, **kwargs: Any) -> None:
        incoming = dict(other)
        incoming.update(kwargs)
        merged = {**self._data, **incoming}
        schemas = self._schemas(merged)

        candidate = dict(self._data)
        for key, value in incoming.items():
            schema = self._property_schema(key, schemas)
            candidate[key] = self._context.prepare(schema, value, self._child_path(key))
        self._context.check(self._schema, candidate, self._path)
        self._check_ancestors(candidate)
        self._data.update(candidate)

    def clear(self) -> None:
        self._context.check(self._schema, {}, self._path)
        self._check_ancestors({})
        self._data.clear()
