"""Error types for openapi-enforcer.

Every failure carries a stable short ``code`` plus a human readable message and
the slash-delimited path of the failing location. Callers should branch on the
code (or on the exception class), never on the message text.

Example:
    >>> from openapi_enforcer import enforce
    >>> from openapi_enforcer.errors import LengthBoundError
    >>> items = enforce({"type": "array", "maxItems": 1}, [])
    >>> items.push(1)
    1
    >>> try:
    ...     items.push(2)
    ... except LengthBoundError as e:
    ...     print(e.code)
    ESELEN
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validator.context import ErrorRecord

# Stable error codes
TYPE_MISMATCH = "ESETYPE"
NOT_INTEGER = "ESENINT"
LENGTH_BOUND = "ESELEN"
STRING_MAX_LENGTH = "ESESMAX"
STRING_MIN_LENGTH = "ESESMIN"
NOT_UNIQUE = "ESEUNIQ"
REQUIRED_PROPERTY = "ESEREQ"
UNKNOWN_PROPERTY = "ESENPER"
NUMBER_MAXIMUM = "ESENMAX"
NUMBER_MINIMUM = "ESENMIN"
NUMBER_MULTIPLE_OF = "ESENMULT"
PATTERN_MISMATCH = "ESESPAT"
ENUM_MISMATCH = "ESEENUM"
DISCRIMINATOR_UNRESOLVED = "ESEDISC"
FEATURE_UNSUPPORTED = "ESEPROX"


class EnforcerError(ValueError):
    """Base class for all validation and enforcement failures.

    Attributes:
        code: Stable short error code (for example ``ESETYPE``).
        path: Slash-delimited pointer to the failing location, ``""`` for the root.
        message: Human readable description of the failure.
    """

    default_code = TYPE_MISMATCH

    def __init__(self, message: str, path: str = "", code: str | None = None):
        self.message = message
        self.path = path
        self.code = code or self.default_code
        super().__init__(f"{path}: {message}" if path else message)


class TypeMismatchError(EnforcerError):
    """The value's runtime type or format disagrees with the schema."""

    default_code = TYPE_MISMATCH


class LengthBoundError(EnforcerError):
    """An array, string or object size is outside its declared bounds."""

    default_code = LENGTH_BOUND


class UniquenessError(EnforcerError):
    """A duplicate element where ``uniqueItems`` is required."""

    default_code = NOT_UNIQUE


class RequiredPropertyError(EnforcerError):
    """A required property is missing or is being removed."""

    default_code = REQUIRED_PROPERTY


class UnknownPropertyError(EnforcerError):
    """A property is not declared and additional properties are disallowed."""

    default_code = UNKNOWN_PROPERTY


class NumericBoundError(EnforcerError):
    """A number is outside its bounds or is not a multiple of the declared step."""

    default_code = NUMBER_MAXIMUM


class PatternError(EnforcerError):
    """A string does not match the declared regular expression."""

    default_code = PATTERN_MISMATCH


class EnumError(EnforcerError):
    """A value is not among the declared enumerated values."""

    default_code = ENUM_MISMATCH


class DiscriminatorError(EnforcerError):
    """A discriminator value names an undefined subtype."""

    default_code = DISCRIMINATOR_UNRESOLVED


class FeatureUnsupportedError(EnforcerError):
    """Live enforcement was requested for a value that can not be intercepted."""

    default_code = FEATURE_UNSUPPORTED


class ValidationError(EnforcerError):
    """One or more validation errors were accumulated.

    Attributes:
        errors: Every :class:`ErrorRecord` that was found, in discovery order.
    """

    def __init__(self, errors: list[ErrorRecord], header: str = "One or more errors found"):
        self.errors = list(errors)
        first = self.errors[0] if self.errors else None
        lines = [header + ":"]
        lines.extend(f"  {record}" for record in self.errors)
        super().__init__(
            "\n".join(lines),
            path=first.path if first else "",
            code=first.code if first else TYPE_MISMATCH,
        )


_ERROR_CLASSES: dict[str, type[EnforcerError]] = {
    TYPE_MISMATCH: TypeMismatchError,
    NOT_INTEGER: TypeMismatchError,
    LENGTH_BOUND: LengthBoundError,
    STRING_MAX_LENGTH: LengthBoundError,
    STRING_MIN_LENGTH: LengthBoundError,
    NOT_UNIQUE: UniquenessError,
    REQUIRED_PROPERTY: RequiredPropertyError,
    UNKNOWN_PROPERTY: UnknownPropertyError,
    NUMBER_MAXIMUM: NumericBoundError,
    NUMBER_MINIMUM: NumericBoundError,
    NUMBER_MULTIPLE_OF: NumericBoundError,
    PATTERN_MISMATCH: PatternError,
    ENUM_MISMATCH: EnumError,
    DISCRIMINATOR_UNRESOLVED: DiscriminatorError,
    FEATURE_UNSUPPORTED: FeatureUnsupportedError,
}


def error_for(record: ErrorRecord) -> EnforcerError:
    """Build the exception matching an error record's code."""
    cls = _ERROR_CLASSES.get(record.code, EnforcerError)
    return cls(record.message, path=record.path, code=record.code)
