"""Live enforcement entry points.

:func:`enforce` validates a value against a schema and, for arrays and objects,
returns a wrapper that checks every later mutation before committing it. Nested
arrays and objects are wrapped lazily, when they are read, and a change made
through them must also keep the rules of every container above them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from openapi_enforcer.config.models import EnforcerConfig
from openapi_enforcer.converters import ValueConverter
from openapi_enforcer.errors import FeatureUnsupportedError, TypeMismatchError, error_for
from openapi_enforcer.models import MISSING
from openapi_enforcer.schema.discriminator import DiscriminatorStrategy
from openapi_enforcer.schema.models import Definitions, SchemaNode, coerce_definitions
from openapi_enforcer.schema.types import resolve_ref, schema_type
from openapi_enforcer.templates.materializer import Materializer
from openapi_enforcer.validator.context import ErrorRecord
from openapi_enforcer.validator.core import Validator

from .array import EnforcedList
from .base import ARRAY_LIKES, EnforcedValue, find_unserializable, unwrap
from .object import EnforcedDict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnforcementContext:
    """Configuration and definitions captured by every enforced value.

    Both are immutable, so wrappers created from one context never observe a
    change of rules mid-operation.
    """

    config: EnforcerConfig
    definitions: Definitions
    validator: Validator = field(repr=False)

    @classmethod
    def create(
        cls,
        config: EnforcerConfig | None = None,
        definitions: Mapping[str, Any] | None = None,
    ) -> EnforcementContext:
        config = config or EnforcerConfig()
        arena = coerce_definitions(definitions)
        return cls(config, arena, Validator.from_config(config, arena, enforce=True))

    @property
    def strategy(self) -> DiscriminatorStrategy:
        return self.validator.strategy

    def resolve(self, schema: SchemaNode | None) -> SchemaNode | None:
        if schema is None:
            return None
        return resolve_ref(schema, self.definitions)

    def check(self, schema: SchemaNode | None, value: Any, path: str = "") -> None:
        """Validate ``value`` with the enforcement rules.

        Raises:
            EnforcerError: The subclass matching the first error found
        """
        if schema is not None:
            errors = self.validator.validate(schema, value)
            if errors:
                first = errors[0]
                logger.debug(f"Rejected value at {path or '/'}: {len(errors)} error(s)")
                raise error_for(ErrorRecord(path + first.path, first.message, first.code))

        bad = find_unserializable(value)
        if bad is not None:
            bad_path = path + bad if bad != "/" else path
            logger.debug(f"Rejected non-serializable value at {bad_path or '/'}")
            raise TypeMismatchError(f"Value is not serializable: {type(value).__name__}", path=bad_path)

    def prepare(self, schema: SchemaNode | None, value: Any, path: str = "") -> Any:
        """Unwrap, auto-format and check a value that is about to be stored."""
        value = unwrap(value)
        if isinstance(value, ARRAY_LIKES):
            raise FeatureUnsupportedError(
                f"Can not enforce {type(value).__name__} values, convert to a list first", path=path
            )
        if schema is not None and self.config.populate.auto_format:
            value = ValueConverter.auto_format(value, schema, self.definitions)
        self.check(schema, value, path)
        return value

    def wrap(
        self,
        schema: SchemaNode | None,
        value: Any,
        path: str = "",
        parent: EnforcedValue | None = None,
        key: Any = None,
    ) -> Any:
        """Wrap a stored container for live enforcement, leaving scalars as-is.

        Args:
            schema: Schema governing ``value``
            value: The stored value
            path: Pointer of ``value`` from the enforcement root
            parent: The wrapper ``value`` was read from, whose rules every
                mutation of the new wrapper must also keep
            key: Key or index of ``value`` inside ``parent``
        """
        if isinstance(value, EnforcedValue):
            value = value._data
        if isinstance(value, ARRAY_LIKES):
            raise FeatureUnsupportedError(
                f"Can not enforce {type(value).__name__} values, convert to a list first", path=path
            )
        node = self.resolve(schema) or SchemaNode()
        if isinstance(value, list):
            return EnforcedList(value, node, self, path, parent, key)
        if isinstance(value, dict):
            return EnforcedDict(value, node, self, path, parent, key)
        return value

    def derive(self, items: SchemaNode | None, values: Iterable[Any], path: str = "") -> EnforcedList:
        """A new, independent array governed only by ``items``."""
        data = [self.prepare(items, value, f"{path}/{index}") for index, value in enumerate(values)]
        return EnforcedList(data, SchemaNode(type="array", items=items), self, path)

    def enforce(self, schema: SchemaNode, value: Any = MISSING) -> Any:
        """Validate ``value`` and wrap it for live enforcement.

        A missing value is materialized from defaults and templates first;
        arrays and objects that are still missing start out empty.
        """
        if value is MISSING:
            config = self.config
            result = Materializer(
                self.definitions,
                options=config.populate,
                version=config.version,
                max_depth=config.max_depth,
            ).apply(schema)
            value = result.value
            if value is MISSING:
                kind = schema_type(schema, self.definitions)
                if kind == "array":
                    value = []
                elif kind == "object":
                    value = {}
                else:
                    return None

        value = self.prepare(schema, value)
        return self.wrap(schema, value)


def enforce(
    schema: SchemaNode | Mapping[str, Any],
    value: Any = MISSING,
    config: EnforcerConfig | None = None,
    definitions: Mapping[str, Any] | None = None,
) -> Any:
    """Validate ``value`` against ``schema`` and keep it valid from now on.

    Args:
        schema: Schema the value must satisfy
        value: Initial value; materialized from defaults when omitted
        config: Rules to enforce (``config.enforce``) and auto-format switch
            (``config.populate.autoFormat``)
        definitions: Named schemas used by references and discriminators

    Returns:
        An :class:`EnforcedList` or :class:`EnforcedDict` for arrays and
        objects, the (possibly auto-formatted) value otherwise

    Raises:
        EnforcerError: If the initial value violates an enabled rule
        FeatureUnsupportedError: If the value is a numpy/pandas container

    Example:
        >>> pets = enforce({"type": "array", "items": {"type": "string"}}, ["cat"])
        >>> pets.push("dog")
        2
        >>> pets
        EnforcedList(['cat', 'dog'])
    """
    context = EnforcementContext.create(config, definitions)
    return context.enforce(SchemaNode.coerce(schema), value)
