"""Discriminator resolution.

Given a polymorphic schema and a concrete value, selects the subtype schema named
by the value's discriminator property. The lookup differs per dialect:

- Swagger 2: the property value is the definition name.
- OpenAPI 3: the property value is looked up in ``discriminator.mapping`` first
  and falls back to the definition name.

:func:`effective_schemas` flattens ``allOf`` chains and follows discriminators to
produce every schema that applies to an object. Resolution tracks the identity of
every node it visited during the call, so schemas that reference themselves
through ``allOf`` never recurse endlessly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .models import SchemaNode
from .types import ref_name, resolve_ref

logger = logging.getLogger(__name__)


class DiscriminatorStrategy:
    """Base strategy, shared key extraction."""

    version = ""

    def key(self, node: SchemaNode, value: Any) -> Any:
        """The discriminator value carried by ``value``, None when absent."""
        if node.discriminator is None or not isinstance(value, Mapping):
            return None
        return value.get(node.discriminator.property_name)

    def definition_name(self, node: SchemaNode, key: Any) -> str:
        return str(key)

    def lookup(
        self, node: SchemaNode, value: Any, definitions: Mapping[str, SchemaNode]
    ) -> SchemaNode | None:
        """The subtype schema selected by ``value``, None when it is undefined."""
        key = self.key(node, value)
        if key is None:
            return None
        target = definitions.get(self.definition_name(node, key))
        if target is None:
            return None
        return resolve_ref(target, definitions)


class SwaggerV2Discriminator(DiscriminatorStrategy):
    """The discriminator value is the name of a definition."""

    version = "2.0"


class OpenAPIV3Discriminator(DiscriminatorStrategy):
    """The discriminator value is mapped through ``discriminator.mapping``."""

    version = "3.0"

    def definition_name(self, node: SchemaNode, key: Any) -> str:
        mapping = node.discriminator.mapping if node.discriminator else None
        if mapping and str(key) in mapping:
            return ref_name(mapping[str(key)])
        return str(key)


_STRATEGIES: dict[str, DiscriminatorStrategy] = {
    "2": SwaggerV2Discriminator(),
    "3": OpenAPIV3Discriminator(),
}


def discriminator_strategy(version: str) -> DiscriminatorStrategy:
    """Pick the discriminator strategy for a document version (``2.0``, ``3.0.1`` ...)."""
    major = str(version).split(".", 1)[0]
    try:
        return _STRATEGIES[major]
    except KeyError:
        raise ValueError(f"Unsupported document version: {version}") from None


def effective_schemas(
    node: SchemaNode,
    value: Any,
    definitions: Mapping[str, SchemaNode],
    strategy: DiscriminatorStrategy,
    *,
    follow_all_of: bool = True,
    follow_discriminator: bool = True,
    on_undefined: Callable[[SchemaNode, Any], None] | None = None,
) -> list[SchemaNode]:
    """Every schema that applies to ``value`` when validated against ``node``.

    ``allOf`` members are flattened in declaration order and each discriminator is
    followed by the subtype it selects. ``on_undefined(node, key)`` is called
    when a discriminator value names a subtype that is not defined.

    Example:
        >>> from openapi_enforcer.schema import SchemaNode, coerce_definitions
        >>> defs = coerce_definitions({
        ...     "Pet": {"type": "object", "discriminator": "kind"},
        ...     "Cat": {"allOf": [{"$ref": "#/definitions/Pet"},
        ...                       {"properties": {"lives": {"type": "integer"}}}]},
        ... })
        >>> found = effective_schemas(defs["Pet"], {"kind": "Cat"}, defs,
        ...                           SwaggerV2Discriminator())
        >>> len(found)
        2
    """
    found: list[SchemaNode] = []
    visited: set[int] = set()

    def discriminate(current: SchemaNode) -> None:
        resolved = resolve_ref(current, definitions)
        if resolved is None:
            logger.debug(f"Skipping unresolvable schema reference: {current.ref}")
            return
        if id(resolved) in visited:
            return
        visited.add(id(resolved))

        if follow_all_of and resolved.all_of:
            for member in resolved.all_of:
                discriminate(member)
            return

        found.append(resolved)
        if follow_discriminator and resolved.discriminator is not None:
            # an absent discriminator value is left to the required check
            key = strategy.key(resolved, value)
            if key is None:
                return
            subtype = strategy.lookup(resolved, value, definitions)
            if subtype is not None:
                discriminate(subtype)
            else:
                logger.debug(f"Undefined discriminator schema: {key}")
                if on_undefined is not None:
                    on_undefined(resolved, key)

    discriminate(node)
    return found


def resolve_subtype(
    node: SchemaNode,
    value: Any,
    definitions: Mapping[str, SchemaNode],
    strategy: DiscriminatorStrategy,
) -> SchemaNode | None:
    """The concrete subtype named by ``value``, or None."""
    if node.discriminator is None:
        return None
    return strategy.lookup(node, value, definitions)
