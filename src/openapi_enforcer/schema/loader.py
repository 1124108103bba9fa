"""Document loading for openapi-enforcer.

Parses YAML/JSON schema documents, checks their basic structure with
``jsonschema`` and builds the flat definitions map the core works against.
The core never parses documents itself; everything it needs comes out of a
:class:`LoadedDocument`.
"""

import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from openapi_enforcer.models import EnforcerBaseModel

from .models import Definitions, SchemaNode
from .types import ref_name

logger = logging.getLogger(__name__)

_DOCUMENT_SCHEMA_PATH = Path(__file__).parent / "schemas" / "document-schema-1.json"


class LoadedDocument(EnforcerBaseModel):
    """A parsed and normalized schema document.

    Attributes:
        version: ``"2.0"`` for Swagger documents, ``"3.0"`` for OpenAPI 3.x.
        definitions: Flat map of definition name to schema node.
        raw: The document as parsed.
    """

    version: str
    definitions: Definitions
    raw: dict[str, Any]

    def definition(self, name: str) -> SchemaNode:
        """Look up a named definition.

        Raises:
            KeyError: If the document does not define ``name``
        """
        try:
            return self.definitions[name]
        except KeyError:
            raise KeyError(f"Schema not defined in document: {name}") from None


_PARSERS: dict[str, Callable[[str], Any]] = {"yaml": yaml.safe_load, "json": json.loads}
_SUFFIX_FORMATS = {".yaml": "yaml", ".yml": "yaml", ".json": "json"}


def load_schema(content: str, format: str = "yaml") -> Any:
    """Parse YAML or JSON text.

    JSON text is also valid YAML, so the default format reads both. Bare
    scalars parse to themselves (``"3"`` to ``3``), which is how the CLI reads
    ``--param`` values.

    Raises:
        ValueError: If ``format`` is unknown or the text does not parse
    """
    parse = _PARSERS.get(format)
    if parse is None:
        raise ValueError(f"Unknown document format '{format}', expected one of: {', '.join(_PARSERS)}")
    try:
        return parse(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid {format.upper()} document: {e}") from e


def load_schema_from_file(path: str | Path) -> Any:
    """Parse a ``.yaml``, ``.yml`` or ``.json`` file, picking the parser by suffix.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the suffix is not recognised or the content does not parse
    """
    path = Path(path)
    format = _SUFFIX_FORMATS.get(path.suffix.lower())
    if format is None:
        raise ValueError(f"Can not tell the format of {path.name}, use a .yaml, .yml or .json file")
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"Document not found: {path}") from None
    try:
        return load_schema(content, format)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e


def validate_document_structure(document: dict[str, Any]) -> None:
    """Validate that a document has the expected top-level structure.

    Raises:
        ValueError: If the document structure is invalid
    """
    with open(_DOCUMENT_SCHEMA_PATH, encoding="utf-8") as f:
        document_schema = json.load(f)

    try:
        jsonschema.validate(instance=document, schema=document_schema)
    except jsonschema.ValidationError as e:
        if e.absolute_path:
            path = ".".join(str(p) for p in e.absolute_path)
            raise ValueError(f"Document structure error at '{path}': {e.message}") from e
        raise ValueError(f"Document structure error: {e.message}") from e
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid document schema: {e.message}") from e


def load_document(source: dict[str, Any] | str | Path) -> LoadedDocument:
    """Load, structurally validate and normalize an OpenAPI/Swagger document.

    Args:
        source: A parsed document, a path to a YAML/JSON file, or YAML/JSON text

    Returns:
        LoadedDocument with the definitions arena

    Raises:
        FileNotFoundError: If a referenced file doesn't exist
        ValueError: If the document can't be parsed or is structurally invalid
    """
    base_dir: Path | None = None
    if isinstance(source, dict):
        document = source
    elif isinstance(source, Path) or _looks_like_path(source):
        path = Path(source)
        document = load_schema_from_file(path)
        base_dir = path.parent
    else:
        document = load_schema(str(source))

    if not isinstance(document, dict):
        raise ValueError("Document must be a mapping")

    validate_document_structure(document)

    if "swagger" in document:
        version = "2.0"
        raw_definitions = document.get("definitions") or {}
    else:
        version = "3.0"
        raw_definitions = (document.get("components") or {}).get("schemas") or {}

    definitions: Definitions = {
        name: SchemaNode.coerce(node) for name, node in raw_definitions.items()
    }
    _load_external_definitions(document, base_dir, definitions, set())

    logger.debug(f"Loaded {version} document with {len(definitions)} definitions")
    return LoadedDocument(version=version, definitions=definitions, raw=document)


def _looks_like_path(source: str) -> bool:
    return "\n" not in source and Path(source).suffix.lower() in (".yaml", ".yml", ".json")


def _iter_refs(value: Any) -> Iterator[str]:
    if isinstance(value, dict):
        ref = value.get("$ref")
        if isinstance(ref, str):
            yield ref
        for item in value.values():
            yield from _iter_refs(item)
    elif isinstance(value, list):
        for item in value:
            yield from _iter_refs(item)


def _resolve_pointer(document: Any, pointer: str) -> Any:
    current = document
    for part in [p for p in pointer.split("/") if p]:
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(current, list):
            current = current[int(part)]
        else:
            current = current[part]
    return current


def _load_external_definitions(
    document: dict[str, Any],
    base_dir: Path | None,
    definitions: Definitions,
    loaded: set[str],
    external: bool = False,
) -> None:
    """Register the targets of file references (and, inside referenced files,
    of their local references) in the definitions arena."""
    for ref in _iter_refs(document):
        location, _, pointer = ref.partition("#")
        if not location and not external:
            continue
        if base_dir is None:
            raise ValueError(f"Can not resolve external reference without a document path: {ref}")

        path = (base_dir / location).resolve() if location else None
        key = f"{path or id(document)}#{pointer}"
        if key in loaded:
            continue
        loaded.add(key)

        target_document = load_schema_from_file(path) if path is not None else document
        try:
            target = _resolve_pointer(target_document, pointer)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Unresolvable reference {ref}") from e

        name = ref_name(ref)
        if name not in definitions:
            definitions[name] = SchemaNode.coerce(target)
            logger.debug(f"Registered external definition {name} from {path or base_dir}")
        if path is not None:
            _load_external_definitions(target_document, path.parent, definitions, loaded, True)
