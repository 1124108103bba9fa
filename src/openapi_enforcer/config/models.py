"""Pydantic models for openapi-enforcer configuration.

The configuration is an explicit, immutable value that is threaded through every
call. There is no process-wide default: build an :class:`EnforcerConfig`, or
derive one with :meth:`EnforcerConfig.with_overrides`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, Field

from openapi_enforcer.models import EnforcerBaseModel


class EnforceRules(EnforcerBaseModel):
    """Constraints checked by the Enforcer at mutation time.

    ``minItems``, ``minProperties`` and ``required`` default to off because
    values are usually built up incrementally and start out below those bounds.
    """

    # numbers
    multiple_of: bool = Field(default=True, alias="multipleOf")
    maximum: bool = True
    minimum: bool = True

    # strings
    max_length: bool = Field(default=True, alias="maxLength")
    min_length: bool = Field(default=True, alias="minLength")
    pattern: bool = True

    # arrays
    max_items: bool = Field(default=True, alias="maxItems")
    min_items: bool = Field(default=False, alias="minItems")
    unique_items: bool = Field(default=True, alias="uniqueItems")

    # objects
    additional_properties: bool = Field(default=True, alias="additionalProperties")
    max_properties: bool = Field(default=True, alias="maxProperties")
    min_properties: bool = Field(default=False, alias="minProperties")
    required: bool = False

    # general
    enum: bool = True

    def as_validate_rules(self) -> ValidateRules:
        """Rule set the Validator runs with while enforcing.

        Type identity, format and structural checks are always on; the
        constraint toggles come from this rule set.
        """
        return ValidateRules.model_validate(self.model_dump())


class ValidateRules(EnforcerBaseModel):
    """Constraints checked by the Validator. Every rule is on by default."""

    boolean: bool = True

    # numbers
    integer: bool = True
    number: bool = True
    multiple_of: bool = Field(default=True, alias="multipleOf")
    maximum: bool = True
    minimum: bool = True

    # strings
    binary: bool = True
    byte: bool = True
    date: bool = True
    date_exists: bool = Field(default=True, alias="dateExists")
    date_time: bool = Field(default=True, alias="dateTime")
    max_length: bool = Field(default=True, alias="maxLength")
    min_length: bool = Field(default=True, alias="minLength")
    pattern: bool = True
    string: bool = True
    time_exists: bool = Field(default=True, alias="timeExists")

    # arrays
    array: bool = True
    items: bool = True
    max_items: bool = Field(default=True, alias="maxItems")
    min_items: bool = Field(default=True, alias="minItems")
    unique_items: bool = Field(default=True, alias="uniqueItems")

    # objects
    additional_properties: bool = Field(default=True, alias="additionalProperties")
    discriminator: bool = True
    max_properties: bool = Field(default=True, alias="maxProperties")
    min_properties: bool = Field(default=True, alias="minProperties")
    object: bool = True
    properties: bool = True
    required: bool = True

    # combinators
    all_of: bool = Field(default=True, alias="allOf")
    any_of: bool = Field(default=True, alias="anyOf")
    one_of: bool = Field(default=True, alias="oneOf")
    not_: bool = Field(default=True, alias="not")

    # general
    enum: bool = True


class PopulateOptions(EnforcerBaseModel):
    """Materialization behavior.

    Attributes:
        all_of: Materialize every ``allOf`` member and merge the results.
        auto_format: Coerce variables and defaults to the schema's type/format.
            Turning this on may hide errors since values are silently converted.
        copy_values: Deep copy untouched sub-values instead of sharing them with
            the supplied value.
        defaults: Honour ``default``.
        defaults_use_params: Pass string defaults through the injector.
        ignore_missing_required: When False, an object that is still missing a
            required property after materialization is reported as not applied.
        replacement: Injector name (``handlebar``, ``doubleHandlebar``,
            ``colon``) or a callable ``(template, params) -> value``.
        templates: Honour ``x-template``.
        variables: Honour ``x-variable``.
    """

    all_of: bool = Field(default=True, alias="allOf")
    auto_format: bool = Field(default=False, alias="autoFormat")
    copy_values: bool = Field(default=False, alias="copy")
    defaults: bool = True
    defaults_use_params: bool = Field(default=True, alias="defaultsUseParams")
    ignore_missing_required: bool = Field(default=True, alias="ignoreMissingRequired")
    replacement: str | Callable[[str, dict[str, Any]], Any] = "handlebar"
    templates: bool = True
    variables: bool = True


class RequestOptions(EnforcerBaseModel):
    """Handling of request data that the parameter definitions do not declare.

    Attributes:
        purge: Silently drop undeclared query/form values.
        strict: Report undeclared query/form values as errors. Takes precedence
            over ``purge``.
    """

    purge: bool = True
    strict: bool = True


class EnforcerConfig(EnforcerBaseModel):
    """Complete configuration for validation, enforcement and materialization.

    Example:
        >>> config = EnforcerConfig().with_overrides(enforce={"required": True})
        >>> config.enforce.required
        True
        >>> EnforcerConfig().enforce.required
        False
    """

    enforce: EnforceRules = Field(default_factory=EnforceRules)
    validation: ValidateRules = Field(default_factory=ValidateRules, alias="validate")
    populate: PopulateOptions = Field(default_factory=PopulateOptions)
    request: RequestOptions = Field(default_factory=RequestOptions)
    version: Literal["2.0", "3.0"] = "3.0"
    max_depth: int = Field(default=100, alias="maxDepth", ge=0)
    validate_all: bool = Field(default=True, alias="validateAll")

    def with_overrides(self, **overrides: Any) -> EnforcerConfig:
        """Return a new configuration with nested partial overrides applied.

        Keys may be given by alias (``maxItems``) or by attribute name
        (``max_items``) at any level.
        """
        data = _merge(type(self), self.model_dump(by_alias=True), overrides)
        return type(self).model_validate(data)


def _merge(model: type[BaseModel], base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    aliases = {name: (info.alias or name) for name, info in model.model_fields.items()}
    by_alias = {alias: name for name, alias in aliases.items()}

    for key, value in overrides.items():
        name = key if key in aliases else by_alias.get(key)
        if name is None:
            # let pydantic report the unknown field
            result[key] = value
            continue
        alias = aliases[name]
        annotation = model.model_fields[name].annotation
        if (
            isinstance(value, dict)
            and isinstance(annotation, type)
            and issubclass(annotation, BaseModel)
        ):
            result[alias] = _merge(annotation, result.get(alias) or {}, value)
        elif isinstance(value, BaseModel):
            result[alias] = value.model_dump(by_alias=True)
        else:
            result[alias] = value
    return result
