"""Type resolution for schema nodes.

Determines the effective primitive kind of a node from its declared ``type``,
its ``enum`` values, the keywords it carries and its combinators.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from .models import SchemaNode

SchemaType = Literal["boolean", "integer", "number", "string", "array", "object"]
FormatKind = Literal["binary", "byte", "date", "date-time"]

PRIMITIVE_TYPES = ("boolean", "integer", "number", "string", "array", "object")
FORMAT_KINDS = ("binary", "byte", "date", "date-time")

_OBJECT_KEYWORDS = (
    "properties",
    "additional_properties",
    "discriminator",
    "min_properties",
    "max_properties",
)
_STRING_KEYWORDS = ("format", "pattern", "min_length", "max_length")
_NUMBER_KEYWORDS = ("multiple_of",)


def ref_name(ref: str) -> str:
    """Definition name a ``$ref`` points at.

    >>> ref_name("#/components/schemas/Pet")
    'Pet'
    >>> ref_name("common.yaml#/definitions/Error")
    'Error'
    >>> ref_name("Error.yaml")
    'Error'
    """
    location, _, pointer = ref.partition("#")
    pointer = pointer.rstrip("/")
    if pointer:
        return pointer.rsplit("/", 1)[-1]
    return PurePosixPath(location).stem


def resolve_ref(node: SchemaNode, definitions: Mapping[str, SchemaNode]) -> SchemaNode | None:
    """Follow ``$ref`` links until a concrete node is reached.

    Returns None for an unresolvable or circular chain of references.
    """
    seen: set[int] = set()
    while node.ref is not None:
        if id(node) in seen:
            return None
        seen.add(id(node))
        target = definitions.get(ref_name(node.ref))
        if target is None:
            return None
        node = target
    return node


def enum_type(values: list[Any]) -> str | None:
    """Infer a primitive type from enumerated values."""
    if not values:
        return None
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "number"
    if all(isinstance(v, str) for v in values):
        return "string"
    if all(isinstance(v, list) for v in values):
        return "array"
    if all(isinstance(v, dict) for v in values):
        return "object"
    return None


def local_type(node: SchemaNode) -> str | None:
    """Primitive type implied by the node's own keywords, ignoring combinators."""
    if node.type is not None:
        return node.type
    if node.items is not None:
        return "array"
    if any(getattr(node, name) is not None for name in _OBJECT_KEYWORDS):
        return "object"
    if isinstance(node.required, list):
        return "object"
    if any(getattr(node, name) is not None for name in _STRING_KEYWORDS):
        return "string"
    if node.enum:
        return enum_type(node.enum)
    if any(getattr(node, name) is not None for name in _NUMBER_KEYWORDS):
        return "number"
    if isinstance(node.minimum, (int, float)) or isinstance(node.maximum, (int, float)):
        return "number"
    return None


def infer_kind(node: SchemaNode) -> str:
    """Dispatch kind of a node, computed once when the node is built."""
    if node.ref is not None:
        return "ref"
    if node.any_of is not None:
        return "any_of"
    if node.one_of is not None:
        return "one_of"
    if node.all_of is not None:
        return "all_of"
    if node.not_ is not None:
        return "not"

    schema_type = local_type(node)
    if schema_type == "string" and node.format in FORMAT_KINDS:
        return node.format
    if schema_type in PRIMITIVE_TYPES:
        return schema_type
    return "any"


def schema_type(
    node: SchemaNode | None,
    definitions: Mapping[str, SchemaNode] | None = None,
    _seen: set[int] | None = None,
) -> str | None:
    """Resolve the effective primitive type of a node.

    References are followed through ``definitions``; ``allOf`` takes the first
    member with a resolvable type; ``anyOf``/``oneOf`` resolve only when every
    branch agrees.

    Example:
        >>> from openapi_enforcer.schema import SchemaNode
        >>> schema_type(SchemaNode.coerce({"enum": [1, 2.5]}))
        'number'
        >>> schema_type(SchemaNode.coerce({"allOf": [{}, {"items": {}}]}))
        'array'
    """
    if node is None:
        return None
    definitions = definitions or {}
    seen = _seen if _seen is not None else set()
    if id(node) in seen:
        return None
    seen.add(id(node))

    if node.ref is not None:
        target = resolve_ref(node, definitions)
        return schema_type(target, definitions, seen) if target is not None else None

    declared = local_type(node)
    if declared is not None:
        return declared

    if node.all_of:
        for member in node.all_of:
            found = schema_type(member, definitions, seen)
            if found is not None:
                return found
        return None

    branches = node.any_of or node.one_of
    if branches:
        found_types = {schema_type(branch, definitions, set(seen)) for branch in branches}
        if len(found_types) == 1:
            return found_types.pop()
    return None
