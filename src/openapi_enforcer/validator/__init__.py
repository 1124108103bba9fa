"""Recursive schema validation.

- `Validator`: checks a value against a schema node and returns error records
- `ErrorRecord`: one failure, with its path, message and stable code
- `raise_for_errors`: turn accumulated records into a `ValidationError`
"""

from .context import ErrorRecord, ValidationContext
from .core import Validator, raise_for_errors, validate
from .utils import same, smart

__all__ = [
    "ErrorRecord",
    "ValidationContext",
    "Validator",
    "raise_for_errors",
    "same",
    "smart",
    "validate",
]
