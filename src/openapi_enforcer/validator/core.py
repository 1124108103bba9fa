"""Core validation logic for openapi-enforcer.

The Validator recursively checks a value against a schema node and accumulates
:class:`ErrorRecord` entries. It never raises for a schema mismatch; the caller
decides whether the accumulated errors become a failure (see
:func:`raise_for_errors`).
"""

from __future__ import annotations

import logging
import math
import numbers
import re
from collections.abc import Mapping, MutableSequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any

from openapi_enforcer import errors as codes
from openapi_enforcer.config.models import EnforcerConfig, ValidateRules
from openapi_enforcer.converters import ValueConverter
from openapi_enforcer.errors import ValidationError
from openapi_enforcer.formats import (
    DATE_RX,
    DATE_TIME_RX,
    date_exists,
    is_binary,
    is_byte,
    time_exists,
    to_instant,
)
from openapi_enforcer.schema.discriminator import discriminator_strategy, effective_schemas
from openapi_enforcer.schema.models import SchemaNode, coerce_definitions
from openapi_enforcer.schema.types import FORMAT_KINDS, PRIMITIVE_TYPES, resolve_ref, schema_type

from .context import ErrorRecord, ValidationContext
from .utils import same, smart

logger = logging.getLogger(__name__)

RFC3339_URL = "https://xml2rfc.tools.ietf.org/public/rfc/html/rfc3339.html#anchor14"


@dataclass
class _BranchResult:
    valid: int
    messages: list[str]
    failures: list[str]


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _indent(text: str, spaces: int = 2) -> str:
    pad = " " * spaces
    return "\n".join(pad + line for line in text.split("\n"))


class Validator:
    """Recursive schema validator.

    Example:
        >>> validator = Validator()
        >>> validator.validate({"type": "integer", "maximum": 10}, 15)[0].code
        'ESENMAX'
        >>> validator.validate({"type": "array", "items": {"type": "string"}}, ["a"])
        []
    """

    def __init__(
        self,
        rules: ValidateRules | None = None,
        definitions: Mapping[str, Any] | None = None,
        version: str = "3.0",
        max_depth: int = 100,
    ):
        """Initialize the validator.

        Args:
            rules: Which constraints to check (all of them by default)
            definitions: Named schemas used by references and discriminators
            version: Document version, selects the discriminator strategy
            max_depth: Nesting depth below which values are not validated
        """
        self.rules = rules or ValidateRules()
        self.definitions = coerce_definitions(definitions)
        self.strategy = discriminator_strategy(version)
        self.max_depth = max_depth

    @classmethod
    def from_config(
        cls,
        config: EnforcerConfig,
        definitions: Mapping[str, Any] | None = None,
        enforce: bool = False,
    ) -> Validator:
        """Build a validator from a complete configuration.

        Args:
            config: Configuration to take rules, version and depth from
            definitions: Named schemas
            enforce: Use the mutation-time ``enforce`` rules instead of the
                ``validate`` rules
        """
        rules = config.enforce.as_validate_rules() if enforce else config.validation
        return cls(rules, definitions, config.version, config.max_depth)

    def validate(self, schema: SchemaNode | Mapping[str, Any], value: Any) -> list[ErrorRecord]:
        """Validate ``value`` against ``schema``.

        Returns:
            Errors in discovery order, empty when the value is valid
        """
        ctx = ValidationContext(
            rules=self.rules,
            definitions=self.definitions,
            strategy=self.strategy,
            max_depth=self.max_depth,
        )
        self._validate(ctx, "", 0, SchemaNode.coerce(schema), value)
        return ctx.errors

    def is_valid(self, schema: SchemaNode | Mapping[str, Any], value: Any) -> bool:
        return not self.validate(schema, value)

    # Dispatch

    def _validate(self, ctx: ValidationContext, path: str, depth: int, node: SchemaNode, value: Any) -> None:
        resolved = resolve_ref(node, ctx.definitions)
        if resolved is None:
            ctx.error(path, f"Unresolved schema reference: {node.ref}")
            return
        node = resolved
        if node.kind not in ("any_of", "one_of", "all_of", "not"):
            self._validate_type(ctx, path, depth, node, value)
            return
        with ctx.visiting(node, value) as first:
            if first:
                self._combinator(ctx, path, depth, node, value)

    def _combinator(self, ctx: ValidationContext, path: str, depth: int, node: SchemaNode, value: Any) -> None:
        rules = ctx.rules
        kind = node.kind

        if kind == "any_of" and rules.any_of:
            result = self._branches(ctx, path, depth, node.any_of or [], value)
            if not result.valid:
                ctx.error(path, "Did not match any of the schemas:\n" + "\n".join(result.failures))
        elif kind == "one_of" and rules.one_of:
            result = self._branches(ctx, path, depth, node.one_of or [], value)
            if result.valid != 1:
                ctx.error(
                    path,
                    f"Did not match exactly one schema. Matched: {result.valid}\n"
                    + "\n".join(result.messages),
                )
        elif kind == "all_of" and rules.all_of:
            if isinstance(value, Mapping) and schema_type(node, ctx.definitions) == "object":
                # one pass, so a property declared by any member is known to all of them
                self._object(ctx, path, depth, node, value)
            else:
                for member in node.all_of or []:
                    self._validate(ctx, path, depth, member, value)
        elif kind == "not" and rules.not_:
            with ctx.isolated() as found:
                self._validate(ctx, path, depth, node.not_, value)  # type: ignore[arg-type]
            if not found:
                ctx.error(path, "Should not pass schema.")
        else:
            self._validate_type(ctx, path, depth, node, value)

    def _validate_type(self, ctx: ValidationContext, path: str, depth: int, node: SchemaNode, value: Any) -> None:
        kind = node.kind
        if kind not in PRIMITIVE_TYPES and kind not in FORMAT_KINDS:
            # combinator with its rule off, or nothing declared
            kind = schema_type(node, ctx.definitions) or "any"
            if kind == "string" and node.format in FORMAT_KINDS:
                kind = node.format

        if kind == "array":
            self._array(ctx, path, depth, node, value)
        elif kind == "object":
            self._object(ctx, path, depth, node, value)
        elif kind == "boolean":
            self._boolean(ctx, path, node, value)
        elif kind == "integer":
            self._integer(ctx, path, node, value)
        elif kind == "number":
            self._number(ctx, path, node, value)
        elif kind == "binary":
            self._binary(ctx, path, node, value)
        elif kind == "byte":
            self._byte(ctx, path, node, value)
        elif kind == "date":
            self._date(ctx, path, node, value)
        elif kind == "date-time":
            self._date_time(ctx, path, node, value)
        elif kind == "string":
            self._string(ctx, path, node, value)
        else:
            self._enum(ctx, path, node, value)

    def _branches(
        self, ctx: ValidationContext, path: str, depth: int, schemas: list[SchemaNode], value: Any
    ) -> _BranchResult:
        result = _BranchResult(valid=0, messages=[], failures=[])
        for index, schema in enumerate(schemas, start=1):
            with ctx.isolated() as found:
                self._validate(ctx, path, depth, schema, value)
            if not found:
                result.valid += 1
                result.messages.append(f"  Schema #{index}: Valid")
            else:
                details = _indent("\n".join(str(record) for record in found), 4)
                message = f"  Schema #{index}: Invalid\n{details}"
                result.messages.append(message)
                result.failures.append(message)
        return result

    # Types

    def _array(self, ctx: ValidationContext, path: str, depth: int, node: SchemaNode, value: Any) -> None:
        rules = ctx.rules
        if not rules.array:
            return
        value = ValueConverter.normalize_array(value)
        if not isinstance(value, (list, tuple, MutableSequence)):
            ctx.error(path, f"Expected an array. Received: {smart(value)}")
            return

        items = list(value)
        length = len(items)
        if rules.max_items and node.max_items is not None and length > node.max_items:
            ctx.error(
                path,
                f"Array length above maximum length of {node.max_items} with {length} items.",
                codes.LENGTH_BOUND,
            )
        if rules.min_items and node.min_items is not None and length < node.min_items:
            ctx.error(
                path,
                f"Array length below minimum length of {node.min_items} with {length} items.",
                codes.LENGTH_BOUND,
            )
        if rules.unique_items and node.unique_items:
            singles: list[Any] = []
            for index, item in enumerate(items):
                if any(same(item, single) for single in singles):
                    ctx.error(
                        path,
                        f"Array values must be unique. Value is not unique at index {index}: {smart(item)}",
                        codes.NOT_UNIQUE,
                    )
                else:
                    singles.append(item)
        if rules.items and node.items is not None and depth < ctx.max_depth:
            for index, item in enumerate(items):
                self._validate(ctx, f"{path}/{index}", depth + 1, node.items, item)
        self._enum(ctx, path, node, items)

    def _object(self, ctx: ValidationContext, path: str, depth: int, node: SchemaNode, value: Any) -> None:
        rules = ctx.rules
        if not rules.object:
            return
        if not isinstance(value, Mapping):
            ctx.error(path, f"Expected a non-null object. Received: {smart(value)}")
            return

        def undefined(schema: SchemaNode, key: Any) -> None:
            ctx.error(path, f"Undefined discriminator schema: {key}", codes.DISCRIMINATOR_UNRESOLVED)

        schemas = effective_schemas(
            node,
            value,
            ctx.definitions,
            ctx.strategy,
            follow_all_of=rules.all_of,
            follow_discriminator=rules.discriminator,
            on_undefined=undefined,
        )

        combinators = {"any_of": rules.any_of, "one_of": rules.one_of, "not": rules.not_}
        for schema in schemas:
            if combinators.get(schema.kind):
                self._validate(ctx, path, depth, schema, value)
            elif schema.kind != "object" and (schema.kind in PRIMITIVE_TYPES or schema.kind in FORMAT_KINDS):
                self._validate_type(ctx, path, depth, schema, value)

        keys = list(value.keys())
        declared = {key for schema in schemas for key in (schema.properties or {})}
        required: list[str] = []
        rejected: set[str] = set()

        for schema in schemas:
            properties = schema.properties or {}
            if depth < ctx.max_depth:
                for key in keys:
                    key_path = f"{path}/{key}"
                    if key in properties:
                        if rules.properties:
                            self._validate(ctx, key_path, depth + 1, properties[key], value[key])
                    elif key not in declared and rules.additional_properties:
                        additional = schema.additional_properties
                        if additional is False:
                            if key not in rejected:
                                rejected.add(key)
                                ctx.error(key_path, "Property not allowed", codes.UNKNOWN_PROPERTY)
                        elif isinstance(additional, SchemaNode):
                            self._validate(ctx, key_path, depth + 1, additional, value[key])

            if rules.required:
                for name in sorted(schema.required_names()):
                    if name not in required:
                        required.append(name)

            count = len(keys)
            if rules.max_properties and schema.max_properties is not None and count > schema.max_properties:
                ctx.error(
                    path,
                    f"Expected object property count to be less than or equal to {schema.max_properties}. Received: {count}",
                    codes.LENGTH_BOUND,
                )
            if rules.min_properties and schema.min_properties is not None and count < schema.min_properties:
                ctx.error(
                    path,
                    f"Expected object property count to be greater than or equal to {schema.min_properties}. Received: {count}",
                    codes.LENGTH_BOUND,
                )
            self._enum(ctx, path, schema, value)

        missing = [name for name in required if name not in value]
        if missing:
            ctx.error(
                path,
                "One or more required properties missing: " + ", ".join(missing),
                codes.REQUIRED_PROPERTY,
            )

    def _boolean(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.boolean:
            return
        if not isinstance(value, bool):
            ctx.error(path, f"Expected a boolean. Received: {smart(value)}")
        else:
            self._enum(ctx, path, node, value)

    def _integer(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.integer:
            return
        if not _is_number(value):
            ctx.error(path, f"Expected an integer. Received: {smart(value)}")
        elif not math.isfinite(value) or int(value) != value:
            ctx.error(path, f"Expected an integer. Received: {smart(value)}", codes.NOT_INTEGER)
        else:
            self._numerical(ctx, path, "integer", node, value)

    def _number(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.number:
            return
        if not _is_number(value) or math.isnan(value):
            ctx.error(path, f"Expected a number. Received: {smart(value)}")
        else:
            self._numerical(ctx, path, "number", node, value)

    def _numerical(self, ctx: ValidationContext, path: str, descriptor: str, node: SchemaNode, value: Any) -> None:
        maximum = node.maximum if _is_number(node.maximum) else None
        minimum = node.minimum if _is_number(node.minimum) else None
        self._max_min(ctx, path, node, descriptor, value, maximum, minimum, exclusives=True)

        if ctx.rules.multiple_of and node.multiple_of:
            try:
                remainder = Decimal(str(value)) % Decimal(str(node.multiple_of))
            except InvalidOperation:
                remainder = Decimal(1)
            if remainder != 0:
                ctx.error(
                    path,
                    f"Expected a multiple of {node.multiple_of}. Received: {smart(value)}",
                    codes.NUMBER_MULTIPLE_OF,
                )
        self._enum(ctx, path, node, value)

    def _string(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        rules = ctx.rules
        if not rules.string:
            return
        if not isinstance(value, str):
            ctx.error(path, f"Expected a string. Received: {smart(value)}")
            return

        length = len(value)
        if rules.max_length and node.max_length is not None and length > node.max_length:
            ctx.error(
                path,
                f"String length above maximum length of {node.max_length} with length of {length}: {smart(value)}",
                codes.STRING_MAX_LENGTH,
            )
        if rules.min_length and node.min_length is not None and length < node.min_length:
            ctx.error(
                path,
                f"String length below minimum length of {node.min_length} with length of {length}: {smart(value)}",
                codes.STRING_MIN_LENGTH,
            )
        if rules.pattern and node.pattern is not None:
            try:
                matched = _compile(node.pattern).search(value) is not None
            except re.error as e:
                ctx.error(path, f"Invalid pattern {node.pattern}: {e}", codes.PATTERN_MISMATCH)
            else:
                if not matched:
                    ctx.error(
                        path,
                        f"String does not match required pattern {node.pattern} with value: {smart(value)}",
                        codes.PATTERN_MISMATCH,
                    )
        self._enum(ctx, path, node, value)

    # String formats

    def _binary(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.binary:
            return
        if isinstance(value, (bytes, bytearray)):
            value = ValueConverter.serialize(value, "binary")
        if not isinstance(value, str):
            ctx.error(path, f"Expected a string. Received: {smart(value)}")
            return
        if not is_binary(value):
            ctx.error(path, f"Expected a binary string. Received: {smart(value)}")
        self._string(ctx, path, node, value)

    def _byte(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.byte:
            return
        if isinstance(value, (bytes, bytearray)):
            value = ValueConverter.serialize(value, "byte")
        if not isinstance(value, str):
            ctx.error(path, f"Expected a string. Received: {smart(value)}")
            return
        if not is_byte(value):
            ctx.error(path, f"Expected a base64 string. Received: {smart(value)}")
        self._string(ctx, path, node, value)

    def _date(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.date:
            return
        if isinstance(value, date) and not isinstance(value, datetime):
            value = value.isoformat()
        match = DATE_RX.match(value) if isinstance(value, str) else None
        if match is None:
            ctx.error(
                path,
                f"Expected a full-date string as described by RFC3339 at {RFC3339_URL}. Received: {smart(value)}",
            )
            return
        year, month, day = (int(part) for part in match.groups())
        self._calendar(ctx, path, "date", node, value, year, month, day)
        self._string(ctx, path, node, value)

    def _date_time(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if not ctx.rules.date_time:
            return
        if isinstance(value, datetime):
            value = ValueConverter.serialize(value)
        match = DATE_TIME_RX.match(value) if isinstance(value, str) else None
        if match is None:
            ctx.error(
                path,
                f"Expected a date-time as described by RFC3339 at {RFC3339_URL}. Received: {smart(value)}",
            )
            return
        year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
        if ctx.rules.time_exists and not time_exists(hour, minute, second):
            ctx.error(path, f"The specified time is invalid: {value[11:]}")
        self._calendar(ctx, path, "date-time", node, value, year, month, day)
        self._string(ctx, path, node, value)

    def _calendar(
        self,
        ctx: ValidationContext,
        path: str,
        descriptor: str,
        node: SchemaNode,
        value: str,
        year: int,
        month: int,
        day: int,
    ) -> None:
        if not date_exists(year, month, day):
            if ctx.rules.date_exists:
                ctx.error(path, f"The specified date does not exist: {value[:10]}")
            return

        moment = to_instant(value)
        if moment is None:
            return
        maximum = to_instant(node.maximum) if node.maximum is not None else None
        minimum = to_instant(node.minimum) if node.minimum is not None else None
        self._max_min(ctx, path, node, descriptor, moment, maximum, minimum, exclusives=False)

    # Shared checks

    def _max_min(
        self,
        ctx: ValidationContext,
        path: str,
        node: SchemaNode,
        descriptor: str,
        value: Any,
        maximum: Any,
        minimum: Any,
        exclusives: bool,
    ) -> None:
        shown = value if _is_number(value) else ValueConverter.serialize(value)
        if ctx.rules.maximum and maximum is not None:
            if exclusives and node.exclusive_maximum is True and value >= maximum:
                ctx.error(
                    path,
                    f"Expected {descriptor} to be less than {node.maximum}. Received: {smart(shown)}",
                    codes.NUMBER_MAXIMUM,
                )
            elif value > maximum:
                ctx.error(
                    path,
                    f"Expected {descriptor} to be less than or equal to {node.maximum}. Received: {smart(shown)}",
                    codes.NUMBER_MAXIMUM,
                )
        if ctx.rules.minimum and minimum is not None:
            if exclusives and node.exclusive_minimum is True and value <= minimum:
                ctx.error(
                    path,
                    f"Expected {descriptor} to be greater than {node.minimum}. Received: {smart(shown)}",
                    codes.NUMBER_MINIMUM,
                )
            elif value < minimum:
                ctx.error(
                    path,
                    f"Expected {descriptor} to be greater than or equal to {node.minimum}. Received: {smart(shown)}",
                    codes.NUMBER_MINIMUM,
                )

        # numeric exclusive bounds (JSON Schema draft 6 and later)
        if exclusives and ctx.rules.maximum and _is_number(node.exclusive_maximum):
            if value >= node.exclusive_maximum:  # type: ignore[operator]
                ctx.error(
                    path,
                    f"Expected {descriptor} to be less than {node.exclusive_maximum}. Received: {smart(shown)}",
                    codes.NUMBER_MAXIMUM,
                )
        if exclusives and ctx.rules.minimum and _is_number(node.exclusive_minimum):
            if value <= node.exclusive_minimum:  # type: ignore[operator]
                ctx.error(
                    path,
                    f"Expected {descriptor} to be greater than {node.exclusive_minimum}. Received: {smart(shown)}",
                    codes.NUMBER_MINIMUM,
                )

    def _enum(self, ctx: ValidationContext, path: str, node: SchemaNode, value: Any) -> None:
        if ctx.rules.enum and node.enum is not None:
            if not any(same(value, allowed) for allowed in node.enum):
                ctx.error(
                    path,
                    f"Value did not meet enum requirements: {smart(ValueConverter.serialize(value))}",
                    codes.ENUM_MISMATCH,
                )


def validate(
    schema: SchemaNode | Mapping[str, Any],
    value: Any,
    rules: ValidateRules | None = None,
    definitions: Mapping[str, Any] | None = None,
    version: str = "3.0",
    max_depth: int = 100,
) -> list[ErrorRecord]:
    """Validate ``value`` against ``schema`` and return every error found."""
    return Validator(rules, definitions, version, max_depth).validate(schema, value)


def raise_for_errors(errors: list[ErrorRecord], header: str = "One or more errors found") -> None:
    """Raise a :class:`ValidationError` carrying ``errors`` when there are any.

    Raises:
        ValidationError: If ``errors`` is not empty
    """
    if errors:
        logger.debug(f"{header}: {len(errors)} error(s)")
        raise ValidationError(errors, header)
