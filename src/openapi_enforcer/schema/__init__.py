"""Schema documents: nodes, type resolution, discriminators and loading.

- `SchemaNode`: one schema fragment, with its dispatch `kind` fixed at load time
- `schema_type`: effective primitive type of a node
- `effective_schemas`: allOf flattening and discriminator dispatch
- `load_document`: parse and normalize an OpenAPI/Swagger document
"""

from .discriminator import (
    DiscriminatorStrategy,
    OpenAPIV3Discriminator,
    SwaggerV2Discriminator,
    discriminator_strategy,
    effective_schemas,
    resolve_subtype,
)
from .loader import (
    LoadedDocument,
    load_document,
    load_schema,
    load_schema_from_file,
    validate_document_structure,
)
from .models import Definitions, Discriminator, SchemaNode, coerce_definitions
from .types import FormatKind, SchemaType, ref_name, resolve_ref, schema_type

__all__ = [
    # Models
    "Definitions",
    "Discriminator",
    "SchemaNode",
    "coerce_definitions",
    # Type resolution
    "FormatKind",
    "SchemaType",
    "ref_name",
    "resolve_ref",
    "schema_type",
    # Discriminators
    "DiscriminatorStrategy",
    "OpenAPIV3Discriminator",
    "SwaggerV2Discriminator",
    "discriminator_strategy",
    "effective_schemas",
    "resolve_subtype",
    # Loading
    "LoadedDocument",
    "load_document",
    "load_schema",
    "load_schema_from_file",
    "validate_document_structure",
]
