"""Configuration for openapi-enforcer.

- `EnforceRules`: constraints checked at mutation time
- `ValidateRules`: constraints checked by the Validator
- `PopulateOptions`: materialization behavior
- `RequestOptions`: handling of undeclared request data
- `EnforcerConfig`: the complete, immutable configuration
- `load_config`: read an `EnforcerConfig` from YAML
"""

from .loader import load_config
from .models import (
    EnforceRules,
    EnforcerConfig,
    PopulateOptions,
    RequestOptions,
    ValidateRules,
)

__all__ = [
    "EnforceRules",
    "EnforcerConfig",
    "PopulateOptions",
    "RequestOptions",
    "ValidateRules",
    "load_config",
]
