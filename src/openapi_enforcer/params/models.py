"""Pydantic models for request parameter definitions."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from openapi_enforcer.schema.models import SchemaNode

ParameterLocation = Literal["header", "path", "query", "body", "formData"]

COLLECTION_SEPARATORS = {
    "csv": ",",
    "ssv": " ",
    "tsv": "\t",
    "pipes": "|",
}


class Parameter(BaseModel):
    """One declared operation parameter.

    Swagger 2 declares non-body parameter schemas inline (``type``, ``format``,
    ``items``, ``collectionFormat`` ...) next to ``name`` and ``in``; OpenAPI 3
    and Swagger 2 body parameters nest them under ``schema``. Both forms are
    accepted.

    Example:
        >>> param = Parameter.model_validate(
        ...     {"name": "tags", "in": "query", "type": "array",
        ...      "items": {"type": "string"}, "collectionFormat": "pipes"}
        ... )
        >>> param.schema_node().collection_format
        'pipes'
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    name: str
    location: ParameterLocation = Field(alias="in")
    required: bool = False
    description: str | None = None
    schema_: SchemaNode | None = Field(default=None, alias="schema")

    @property
    def is_required(self) -> bool:
        """Path parameters are always required."""
        return self.required or self.location == "path"

    def schema_node(self) -> SchemaNode:
        """The parameter's schema, nested or inline."""
        if self.schema_ is not None:
            return self.schema_
        return SchemaNode.coerce(dict(self.model_extra or {}))

    def separator(self) -> str | None:
        """Separator of a delimited array value, None for ``multi``."""
        node = self.schema_node()
        fmt = node.collection_format or self._extra("collectionFormat") or "csv"
        if fmt == "multi":
            return None
        return COLLECTION_SEPARATORS.get(fmt, ",")

    def _extra(self, key: str) -> Any:
        return (self.model_extra or {}).get(key)
