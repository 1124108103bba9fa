"""Live enforcement of arrays and objects.

- `enforce`: validate a value and wrap it so every later mutation is checked
- `EnforcedList` / `EnforcedDict`: the wrappers
- `unwrap`: the plain container behind a wrapper
"""

from .array import EnforcedList
from .base import EnforcedValue, unwrap
from .core import EnforcementContext, enforce
from .object import EnforcedDict

__all__ = [
    "EnforcedDict",
    "EnforcedList",
    "EnforcedValue",
    "EnforcementContext",
    "enforce",
    "unwrap",
]
