"""Template and defaults materialization.

Builds a schema-conformant value top-down from ``x-variable`` bindings,
``x-template`` placeholders and ``default`` values. Materialization is best
effort: it never raises for a schema mismatch, it reports the node as "not
applied" and leaves the supplied (or missing) value alone.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from openapi_enforcer.config.models import PopulateOptions
from openapi_enforcer.converters import ValueConverter
from openapi_enforcer.models import MISSING
from openapi_enforcer.schema.discriminator import discriminator_strategy
from openapi_enforcer.schema.models import SchemaNode, coerce_definitions
from openapi_enforcer.schema.types import resolve_ref, schema_type

from .injectors import get_injector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializeResult:
    """Outcome of materializing one schema node.

    Attributes:
        applied: Whether a variable, template or default changed the value.
        value: The materialized value, or the supplied value when nothing was
            applied (``MISSING`` when no value was supplied).
    """

    applied: bool
    value: Any


class Materializer:
    """Produces values from templates, variables and defaults.

    Example:
        >>> materializer = Materializer(params={"name": "Ada"})
        >>> schema = {
        ...     "type": "object",
        ...     "properties": {
        ...         "greeting": {"type": "string", "x-template": "Hello, {name}"},
        ...         "count": {"type": "integer", "default": 1},
        ...     },
        ... }
        >>> materializer.apply(schema).value
        {'greeting': 'Hello, Ada', 'count': 1}
    """

    def __init__(
        self,
        definitions: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        options: PopulateOptions | None = None,
        version: str = "3.0",
        max_depth: int = 100,
    ):
        self.definitions = coerce_definitions(definitions)
        self.params = dict(params or {})
        self.options = options or PopulateOptions()
        self.strategy = discriminator_strategy(version)
        self.max_depth = max_depth
        self.injector = get_injector(self.options.replacement)

    def apply(self, schema: SchemaNode | Mapping[str, Any], value: Any = MISSING) -> MaterializeResult:
        """Materialize ``schema`` around an optional initial ``value``.

        The supplied value is never mutated.
        """
        options = self.options
        if not (options.defaults or options.templates or options.variables):
            return MaterializeResult(False, value)

        result = self._apply(SchemaNode.coerce(schema), value, 0)
        if options.copy_values and result.value is not MISSING:
            return MaterializeResult(result.applied, copy.deepcopy(result.value))
        return result

    def _apply(self, node: SchemaNode, value: Any, depth: int) -> MaterializeResult:
        resolved = resolve_ref(node, self.definitions)
        if resolved is None or depth > self.max_depth:
            return MaterializeResult(False, value)
        node = self._discriminate(resolved, value)
        options = self.options
        provided = value is not MISSING

        if node.all_of and options.all_of:
            return self._all_of(node, value, depth)

        if not provided:
            found = self._unbound(node, depth)
            if found is not None:
                return found

        kind = schema_type(node, self.definitions)
        if kind == "array":
            return self._array(node, value, depth)
        if kind == "object":
            return self._object(node, value, depth)
        return MaterializeResult(False, value)

    def _discriminate(self, node: SchemaNode, value: Any) -> SchemaNode:
        """Rewrite a discriminated node into an ``allOf`` of its subtype and the
        base schema once the value names a subtype."""
        if node.all_of is not None or node.discriminator is None:
            return node
        if self.strategy.key(node, value) is None:
            return node
        subtype = self.strategy.lookup(node, value, self.definitions)
        if subtype is None:
            logger.debug(f"Undefined discriminator schema: {self.strategy.key(node, value)}")
            return node

        members = [
            member
            for member in (subtype.all_of or [subtype])
            if resolve_ref(member, self.definitions) != node
        ]
        members.append(node.without("discriminator"))
        return SchemaNode(type="object", all_of=members)

    def _all_of(self, node: SchemaNode, value: Any, depth: int) -> MaterializeResult:
        start = {} if value is MISSING else value
        applications = []
        for member in node.all_of or []:
            data = self._apply(member, start, depth + 1)
            if data.applied:
                applications.append(data.value)

        if not applications:
            return MaterializeResult(False, value)
        if all(isinstance(item, Mapping) for item in applications):
            merged: dict[str, Any] = {}
            for item in applications:
                merged.update(item)
            return MaterializeResult(True, merged)
        return MaterializeResult(True, applications[-1])

    def _unbound(self, node: SchemaNode, depth: int) -> MaterializeResult | None:
        """Value for a node that was given none: variable, then template, then
        default."""
        options = self.options

        name = node.x_variable
        if options.variables and name is not None and self.params.get(name) is not None:
            return MaterializeResult(True, self._format(node, copy.deepcopy(self.params[name])))

        template = node.x_template
        if options.templates and template is not None:
            found = self.injector(template, self.params)
            if found != template:
                return MaterializeResult(True, found)

        if options.defaults and node.has_default:
            default = node.default
            if isinstance(default, Mapping):
                data = self._apply(node.without("default"), copy.deepcopy(default), depth + 1)
                return MaterializeResult(True, data.value)
            if isinstance(default, str) and options.defaults_use_params:
                return MaterializeResult(True, self._format(node, self.injector(default, self.params)))
            return MaterializeResult(True, self._format(node, copy.deepcopy(default)))

        return None

    def _array(self, node: SchemaNode, value: Any, depth: int) -> MaterializeResult:
        if not isinstance(value, (list, tuple)) or node.items is None:
            return MaterializeResult(False, value)

        applied = False
        items = []
        for item in value:
            data = self._apply(node.items, item, depth + 1)
            applied = applied or data.applied
            items.append(data.value)
        return MaterializeResult(applied, items if applied else value)

    def _object(self, node: SchemaNode, value: Any, depth: int) -> MaterializeResult:
        if value is not MISSING and not isinstance(value, Mapping):
            return MaterializeResult(False, value)

        options = self.options
        result: dict[str, Any] = {} if value is MISSING else dict(value)
        properties = node.properties or {}
        applied = False

        # an object default fills the keys a partial value left out
        default = node.default
        if options.defaults and value is not MISSING and isinstance(default, Mapping):
            for name, item in default.items():
                if name not in result:
                    result[name] = copy.deepcopy(item)
                    applied = True

        for name, prop in properties.items():
            target = resolve_ref(prop, self.definitions)
            if target is None:
                continue
            if not (
                (options.templates and target.x_template is not None)
                or (options.variables and target.x_variable is not None)
                or (options.defaults and target.has_default)
                or schema_type(target, self.definitions) in ("object", "array")
            ):
                continue
            data = self._apply(target, result.get(name, MISSING), depth + 1)
            if data.applied:
                result[name] = data.value
                applied = True

        additional = node.additional_properties
        if isinstance(additional, SchemaNode):
            for name in [key for key in result if key not in properties]:
                data = self._apply(additional, result[name], depth + 1)
                if data.applied:
                    result[name] = data.value
                    applied = True

        if applied and not options.ignore_missing_required:
            missing = [name for name in sorted(node.required_names()) if name not in result]
            if missing:
                logger.debug(f"Discarding materialized object, missing required: {', '.join(missing)}")
                applied = False

        return MaterializeResult(applied, result if applied else value)

    def _format(self, node: SchemaNode, value: Any) -> Any:
        if self.options.auto_format:
            return ValueConverter.auto_format(value, node, self.definitions)
        return value


def materialize(
    schema: SchemaNode | Mapping[str, Any],
    definitions: Mapping[str, Any] | None = None,
    params: Mapping[str, Any] | None = None,
    options: PopulateOptions | None = None,
    initial_value: Any = MISSING,
    version: str = "3.0",
) -> Any:
    """Materialize a value for ``schema``.

    Args:
        schema: Schema to build a value for
        definitions: Named schemas used by references and discriminators
        params: Values for ``x-variable`` names and template placeholders
        options: Materialization behavior
        initial_value: A partially supplied value to fill in

    Returns:
        The materialized value, ``initial_value`` when nothing applied, or None
        when there is neither
    """
    result = Materializer(definitions, params, options, version).apply(schema, initial_value)
    return None if result.value is MISSING else result.value
