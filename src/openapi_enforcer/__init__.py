"""openapi-enforcer: validation and live enforcement of OpenAPI schema values.

## Key Components

- `Validator`: recursive schema validation that accumulates error records
- `enforce`: wrap arrays and objects so every mutation is checked before it
  is committed
- `materialize`: build values from ``x-variable``, ``x-template`` and
  ``default``
- `Enforcer`: all of the above bound to one configuration and one document

## Quick Example

```python
from openapi_enforcer import Enforcer

enforcer = Enforcer.from_document("api.yaml")
pet = enforcer.enforce({"$ref": "#/components/schemas/Pet"}, {"name": "Rex"})
pet["age"] = 3            # checked against Pet.properties.age
enforcer.validate({"$ref": "#/components/schemas/Pet"}, {"name": 7})
```
"""

from .config import EnforcerConfig, load_config
from .converters import ValueConverter
from .core import Enforcer
from .enforcer import EnforcedDict, EnforcedList, enforce, unwrap
from .errors import (
    DiscriminatorError,
    EnforcerError,
    EnumError,
    FeatureUnsupportedError,
    LengthBoundError,
    NumericBoundError,
    PatternError,
    RequiredPropertyError,
    TypeMismatchError,
    UniquenessError,
    UnknownPropertyError,
    ValidationError,
)
from .models import MISSING
from .params import MappedRequest, ParameterMapper
from .schema import LoadedDocument, SchemaNode, load_document
from .templates import MaterializeResult, Materializer, materialize
from .validator import ErrorRecord, Validator, raise_for_errors, validate

__all__ = [
    # Facade
    "Enforcer",
    "EnforcerConfig",
    "load_config",
    # Schema
    "LoadedDocument",
    "SchemaNode",
    "load_document",
    # Validation
    "ErrorRecord",
    "Validator",
    "raise_for_errors",
    "validate",
    # Enforcement
    "EnforcedDict",
    "EnforcedList",
    "MISSING",
    "enforce",
    "unwrap",
    # Materialization
    "MaterializeResult",
    "Materializer",
    "materialize",
    # Requests
    "MappedRequest",
    "ParameterMapper",
    # Conversion
    "ValueConverter",
    # Errors
    "DiscriminatorError",
    "EnforcerError",
    "EnumError",
    "FeatureUnsupportedError",
    "LengthBoundError",
    "NumericBoundError",
    "PatternError",
    "RequiredPropertyError",
    "TypeMismatchError",
    "UniquenessError",
    "UnknownPropertyError",
    "ValidationError",
]
