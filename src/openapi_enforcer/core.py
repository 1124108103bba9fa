"""The :class:`Enforcer` facade.

Binds one configuration and one definitions arena to the validator, the live
enforcer and the materializer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config.models import EnforcerConfig
from .enforcer.core import EnforcementContext
from .models import MISSING
from .schema.loader import load_document
from .schema.models import SchemaNode, coerce_definitions
from .templates.materializer import Materializer
from .validator.context import ErrorRecord
from .validator.core import Validator, raise_for_errors

logger = logging.getLogger(__name__)


class Enforcer:
    """Validation, enforcement and population under one configuration.

    Example:
        >>> enforcer = Enforcer()
        >>> enforcer.errors({"type": "string", "maxLength": 2}, "abc")[0].code
        'ESESMAX'
        >>> enforcer.populate({"type": "string", "x-template": "{a}-{b}"}, {"a": 1, "b": 2})
        '1-2'
    """

    def __init__(
        self,
        config: EnforcerConfig | None = None,
        definitions: Mapping[str, Any] | None = None,
    ):
        """Initialize the enforcer.

        Args:
            config: Rules and behavior switches, the defaults when omitted
            definitions: Named schemas used by references and discriminators
        """
        self.config = config or EnforcerConfig()
        self.definitions = coerce_definitions(definitions)
        self._context = EnforcementContext.create(self.config, self.definitions)
        # validateAll picks the full rule set, otherwise only what enforce checks
        self._validator = Validator.from_config(
            self.config, self.definitions, enforce=not self.config.validate_all
        )

    @classmethod
    def from_document(
        cls, source: dict[str, Any] | str | Path, config: EnforcerConfig | None = None
    ) -> Enforcer:
        """Build an enforcer over the definitions of a Swagger/OpenAPI document.

        The document's version selects the discriminator dialect.
        """
        document = load_document(source)
        config = (config or EnforcerConfig()).with_overrides(version=document.version)
        return cls(config, document.definitions)

    def enforce(self, schema: SchemaNode | Mapping[str, Any], value: Any = MISSING) -> Any:
        """Validate ``value`` and wrap it for live enforcement.

        Raises:
            EnforcerError: If the initial value violates an enabled rule
        """
        return self._context.enforce(SchemaNode.coerce(schema), value)

    def errors(self, schema: SchemaNode | Mapping[str, Any], value: Any) -> list[ErrorRecord]:
        """Every validation error for ``value``, empty when it is valid."""
        return self._validator.validate(schema, value)

    def validate(self, schema: SchemaNode | Mapping[str, Any], value: Any) -> None:
        """Validate ``value``.

        Raises:
            ValidationError: Carrying every error found
        """
        raise_for_errors(self.errors(schema, value))

    def populate(
        self,
        schema: SchemaNode | Mapping[str, Any],
        params: Mapping[str, Any] | None = None,
        value: Any = MISSING,
    ) -> Any:
        """Materialize a value from templates, variables and defaults.

        Returns:
            The materialized value, ``value`` when nothing applied, or None when
            there is neither
        """
        materializer = Materializer(
            self.definitions,
            params,
            self.config.populate,
            version=self.config.version,
            max_depth=self.config.max_depth,
        )
        result = materializer.apply(schema, value)
        logger.debug(f"Populate applied: {result.applied}")
        return None if result.value is MISSING else result.value
