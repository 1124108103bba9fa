"""Request parameter mapping.

Maps the raw header, path, query and body parts of an HTTP request onto the
operation's declared parameters: raw strings are parsed with the auto-format
coercion table, then validated against the parameter schema.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from openapi_enforcer import errors as codes
from openapi_enforcer.config.models import EnforcerConfig
from openapi_enforcer.converters import ValueConverter
from openapi_enforcer.schema.models import SchemaNode, coerce_definitions
from openapi_enforcer.schema.types import resolve_ref, schema_type
from openapi_enforcer.validator.context import ErrorRecord
from openapi_enforcer.validator.core import Validator, raise_for_errors

from .models import Parameter

logger = logging.getLogger(__name__)

QueryInput = Mapping[str, str | list[str]] | Iterable[tuple[str, str]]


@dataclass
class MappedRequest:
    """Typed request parts plus every error found while mapping them."""

    header: dict[str, Any] = field(default_factory=dict)
    path: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    errors: list[ErrorRecord] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        """Raise a ValidationError when mapping found errors."""
        raise_for_errors(self.errors, "Request has one or more errors")


class ParameterMapper:
    """Maps raw request parts onto declared parameters.

    Example:
        >>> mapper = ParameterMapper([
        ...     {"name": "id", "in": "path", "type": "integer"},
        ...     {"name": "tags", "in": "query", "type": "array",
        ...      "items": {"type": "string"}, "collectionFormat": "csv"},
        ... ])
        >>> request = mapper.map_request(path={"id": "12"}, query={"tags": "a,b"})
        >>> request.path, request.query, request.errors
        ({'id': 12}, {'tags': ['a', 'b']}, [])
    """

    def __init__(
        self,
        parameters: Iterable[Parameter | Mapping[str, Any]],
        config: EnforcerConfig | None = None,
        definitions: Mapping[str, Any] | None = None,
    ):
        """Initialize the mapper.

        Args:
            parameters: Declared operation parameters
            config: Validation rules and the undeclared-data policy
            definitions: Named schemas used by parameter references
        """
        self.config = config or EnforcerConfig()
        self.definitions = coerce_definitions(definitions)
        self.validator = Validator.from_config(self.config, self.definitions)
        self.parameters = [p if isinstance(p, Parameter) else Parameter.model_validate(p) for p in parameters]

        self._by_location: dict[str, dict[str, Parameter]] = {
            "header": {},
            "path": {},
            "query": {},
            "formData": {},
        }
        self._body: Parameter | None = None
        for param in self.parameters:
            if param.location == "body":
                self._body = param
            elif param.location == "header":
                self._by_location["header"][param.name.lower()] = param
            else:
                self._by_location[param.location][param.name] = param

    def map_request(
        self,
        header: Mapping[str, str] | None = None,
        path: Mapping[str, str] | None = None,
        query: QueryInput | None = None,
        body: Any = None,
    ) -> MappedRequest:
        """Parse and validate every part of a request.

        Args:
            header: Raw header values; names match case-insensitively
            path: Raw path parameter values
            query: Raw query values, as a mapping (a list value for repeated
                keys) or as ``(name, value)`` pairs
            body: The request body, decoded or as JSON text; for form posts a
                mapping of raw form values

        Returns:
            The typed request parts and the errors found
        """
        result = MappedRequest()

        for name, value in (header or {}).items():
            param = self._by_location["header"].get(name.lower())
            if param is None:
                result.header[name] = value
            else:
                result.header[param.name] = self._parse(result, param, value)

        for name, value in (path or {}).items():
            param = self._by_location["path"].get(name)
            result.path[name] = value if param is None else self._parse(result, param, value)

        self._map_values(result, "query", _pairs(query), result.query)

        if self._body is not None:
            if body is not None:
                result.body = self._parse_body(result, self._body, body)
        elif self._by_location["formData"] and isinstance(body, Mapping):
            form: dict[str, Any] = {}
            self._map_values(result, "formData", _pairs(body), form)
            result.body = form
        else:
            result.body = body

        self._check_required(result, header or {}, path or {}, body)
        if result.errors:
            logger.debug(f"Request mapping found {len(result.errors)} error(s)")
        return result

    def _map_values(
        self, result: MappedRequest, location: str, pairs: list[tuple[str, Any]], target: dict[str, Any]
    ) -> None:
        """Map query or form values, applying the undeclared-data policy."""
        declared = self._by_location[location]
        policy = self.config.request
        grouped: dict[str, list[Any]] = {}
        for name, value in pairs:
            grouped.setdefault(name, []).append(value)

        for name, values in grouped.items():
            param = declared.get(name)
            if param is not None:
                target[name] = self._parse(result, param, values if len(values) > 1 else values[0])
            elif policy.strict:
                label = "Query parameter" if location == "query" else "Form field"
                result.errors.append(
                    ErrorRecord(f"/{name}", f"{label} not allowed: {name}", codes.UNKNOWN_PROPERTY)
                )
            elif not policy.purge:
                target[name] = values if len(values) > 1 else values[0]

    def _parse(self, result: MappedRequest, param: Parameter, raw: Any) -> Any:
        schema = param.schema_node()
        value = self._deserialize(param, schema, raw)
        self._record(result, param, schema, value)
        return value

    def _deserialize(self, param: Parameter, schema: SchemaNode, raw: Any) -> Any:
        node = resolve_ref(schema, self.definitions) or schema
        kind = schema_type(node, self.definitions)
        if kind == "array":
            separator = param.separator()
            if separator is None:
                items = raw if isinstance(raw, list) else [raw]
            else:
                text = raw[-1] if isinstance(raw, list) else raw
                items = text.split(separator) if isinstance(text, str) and text != "" else []
            item_schema = node.items or SchemaNode()
            return [self._scalar(item_schema, item) for item in items]
        if isinstance(raw, list):
            raw = raw[-1]
        return self._scalar(node, raw)

    def _scalar(self, schema: SchemaNode, raw: Any) -> Any:
        if not isinstance(raw, (str, bytes)):
            return raw
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return ValueConverter.auto_format(raw, schema, self.definitions)

    def _parse_body(self, result: MappedRequest, param: Parameter, raw: Any) -> Any:
        value = raw
        if isinstance(raw, (str, bytes)):
            try:
                value = json.loads(raw)
            except ValueError:
                value = raw
        self._record(result, param, param.schema_node(), value)
        return value

    def _record(self, result: MappedRequest, param: Parameter, schema: SchemaNode, value: Any) -> None:
        prefix = f"Error in {param.location} at /{param.name}"
        for record in self.validator.validate(schema, value):
            result.errors.append(
                ErrorRecord(
                    f"/{param.name}{record.path}",
                    f"{prefix}{record.path}: {record.message}",
                    record.code,
                )
            )

    def _check_required(
        self, result: MappedRequest, header: Mapping[str, Any], path: Mapping[str, Any], body: Any
    ) -> None:
        supplied = {
            "header": {name.lower() for name in header},
            "path": set(path),
            "query": set(result.query),
            "formData": set(body) if isinstance(body, Mapping) else set(),
        }
        for param in self.parameters:
            if not param.is_required:
                continue
            if param.location == "body":
                missing = body is None
            elif param.location == "header":
                missing = param.name.lower() not in supplied["header"]
            else:
                missing = param.name not in supplied[param.location]
            if missing:
                result.errors.append(
                    ErrorRecord(
                        f"/{param.name}",
                        f"Missing required {param.location} parameter: {param.name}",
                        codes.REQUIRED_PROPERTY,
                    )
                )


def _pairs(values: QueryInput | None) -> list[tuple[str, Any]]:
    if values is None:
        return []
    if isinstance(values, Mapping):
        pairs: list[tuple[str, Any]] = []
        for name, value in values.items():
            if isinstance(value, list):
                pairs.extend((name, item) for item in value)
            else:
                pairs.append((name, value))
        return pairs
    return list(values)
