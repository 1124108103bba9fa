"""Materialization of values from templates, variables and defaults."""

from .injectors import INJECTORS, Injector, get_injector
from .materializer import MaterializeResult, Materializer, materialize

__all__ = [
    "INJECTORS",
    "Injector",
    "MaterializeResult",
    "Materializer",
    "get_injector",
    "materialize",
]
