"""Pydantic models for schema documents.

A :class:`SchemaNode` is one JSON-Schema/OpenAPI constraint fragment. Nodes are
parsed once, when the document is loaded, and the node's :attr:`SchemaNode.kind`
is fixed at that point so the Validator and the Materializer switch on an
explicit discriminant instead of probing keywords on every call.

``$ref`` nodes are kept as references. Named schemas live in a flat definitions
map (``name -> SchemaNode``) and references are resolved by name when they are
used, so self-referential schemas never become cyclic Python objects.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from .types import infer_kind

Definitions = dict[str, "SchemaNode"]


class Discriminator(BaseModel):
    """Polymorphic dispatch settings.

    Attributes:
        property_name: Name of the property whose value selects the subtype.
        mapping: Optional value to schema reference map (OpenAPI 3).
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    property_name: str = Field(alias="propertyName")
    mapping: dict[str, str] | None = None


class SchemaNode(BaseModel):
    """One schema fragment.

    Keywords use their document spelling as aliases (``minLength``,
    ``additionalProperties``, ``$ref``, ``x-variable`` ...). Keywords that have no
    bearing on validation are kept as extras.

    Example:
        >>> node = SchemaNode.coerce({"type": "string", "format": "date"})
        >>> node.kind
        'date'
        >>> SchemaNode.coerce({"allOf": [{"type": "object"}]}).kind
        'all_of'
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None

    # String constraints
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    pattern: str | None = None

    # Numeric (and date) constraints
    minimum: int | float | str | None = None
    maximum: int | float | str | None = None
    exclusive_minimum: bool | int | float | None = Field(default=None, alias="exclusiveMinimum")
    exclusive_maximum: bool | int | float | None = Field(default=None, alias="exclusiveMaximum")
    multiple_of: int | float | None = Field(default=None, alias="multipleOf")

    # Array constraints
    items: SchemaNode | None = None
    min_items: int | None = Field(default=None, alias="minItems")
    max_items: int | None = Field(default=None, alias="maxItems")
    unique_items: bool | None = Field(default=None, alias="uniqueItems")
    collection_format: str | None = Field(default=None, alias="collectionFormat")

    # Object constraints
    properties: dict[str, SchemaNode] | None = None
    additional_properties: bool | SchemaNode | None = Field(
        default=None, alias="additionalProperties"
    )
    required: list[str] | bool | None = None
    min_properties: int | None = Field(default=None, alias="minProperties")
    max_properties: int | None = Field(default=None, alias="maxProperties")
    discriminator: Discriminator | None = None

    # Combinators
    all_of: list[SchemaNode] | None = Field(default=None, alias="allOf")
    any_of: list[SchemaNode] | None = Field(default=None, alias="anyOf")
    one_of: list[SchemaNode] | None = Field(default=None, alias="oneOf")
    not_: SchemaNode | None = Field(default=None, alias="not")

    # Value constraints
    enum: list[Any] | None = None

    # Template-time keywords
    default: Any = None
    x_variable: str | None = Field(default=None, alias="x-variable")
    x_template: str | None = Field(default=None, alias="x-template")

    _kind: str = PrivateAttr(default="any")

    @model_validator(mode="before")
    @classmethod
    def normalize_discriminator(cls, values: Any) -> Any:
        """Accept the Swagger 2 string form of ``discriminator``."""
        if isinstance(values, dict) and isinstance(values.get("discriminator"), str):
            values = dict(values)
            values["discriminator"] = {"propertyName": values["discriminator"]}
        return values

    @model_validator(mode="after")
    def resolve_kind(self) -> SchemaNode:
        """Fix the node's dispatch kind once, at load time."""
        self._kind = infer_kind(self)
        return self

    @property
    def kind(self) -> str:
        """Dispatch discriminant: ``ref``, ``any_of``, ``one_of``, ``all_of``,
        ``not``, a primitive type, a string format kind or ``any``."""
        return self._kind

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    @property
    def is_required(self) -> bool:
        """Swagger 2 style property-level ``required: true``."""
        return self.required is True

    def required_names(self) -> set[str]:
        """Names required by this node, from the ``required`` list and from
        property-level ``required: true`` markers."""
        names = set(self.required) if isinstance(self.required, list) else set()
        for name, prop in (self.properties or {}).items():
            if prop.is_required:
                names.add(name)
        return names

    def declares(self, key: str) -> bool:
        return key in (self.properties or {})

    def without(self, *fields: str) -> SchemaNode:
        """Copy of this node with the named keywords removed.

        Nested nodes are shared with the original, never copied.
        """
        data: dict[str, Any] = {
            name: getattr(self, name) for name in self.model_fields_set if name not in fields
        }
        data.update({k: v for k, v in (self.model_extra or {}).items() if k not in fields})
        return type(self)(**data)

    @classmethod
    def coerce(cls, value: SchemaNode | Mapping[str, Any] | bool | None) -> SchemaNode:
        """Accept a node, a raw dictionary, ``True`` or ``None`` (both meaning
        "anything is allowed")."""
        if isinstance(value, SchemaNode):
            return value
        if value is None or value is True:
            return cls()
        if value is False:
            return cls(**{"not": {}})
        return cls.model_validate(dict(value))


def coerce_definitions(definitions: Mapping[str, Any] | None) -> Definitions:
    """Build a definitions arena from raw dictionaries or nodes."""
    if not definitions:
        return {}
    return {name: SchemaNode.coerce(node) for name, node in definitions.items()}


SchemaNode.model_rebuild()
