"""Mapping of raw HTTP request parts onto declared operation parameters."""

from .mapper import MappedRequest, ParameterMapper
from .models import COLLECTION_SEPARATORS, Parameter, ParameterLocation

__all__ = [
    "COLLECTION_SEPARATORS",
    "MappedRequest",
    "Parameter",
    "ParameterLocation",
    "ParameterMapper",
]
