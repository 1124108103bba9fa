"""Base Pydantic models for openapi-enforcer.

All configuration and schema models inherit from :class:`EnforcerBaseModel` so
they share one configuration:

- Strict field validation (no extra fields allowed)
- Immutable instances, so a configuration captured by an enforced value can not
  change underneath it
- Consistent serialization behavior

Example:
    >>> from openapi_enforcer.models import EnforcerBaseModel
    >>> from pydantic import Field
    >>>
    >>> class MyModel(EnforcerBaseModel):
    ...     name: str
    ...     count: int = Field(default=0, ge=0)
    >>>
    >>> MyModel(name="test").model_dump()
    {'name': 'test', 'count': 0}
"""

from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict


class EnforcerBaseModel(BaseModel):
    """Base model for all openapi-enforcer Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable
    - populate_by_name=True: Fields can be given by alias (``maxItems``) or by
      attribute name (``max_items``)
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class Missing(Enum):
    """Marker for "no value was supplied", distinct from ``None``."""

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = Missing.MISSING
