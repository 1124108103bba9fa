"""Shared helpers for the openapi-enforcer command line."""

import json
import logging
import os
import traceback
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import click

from openapi_enforcer.converters import ValueConverter
from openapi_enforcer.errors import EnforcerError, ValidationError
from openapi_enforcer.schema.loader import load_schema, load_schema_from_file


def get_env_flag(env_var: str, default: bool = False) -> bool:
    """Get a boolean flag from an environment variable.

    Args:
        env_var: Name of the environment variable
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to "1", "true", or "yes" (case insensitive)
        False otherwise
    """
    value = os.environ.get(env_var, "").lower()
    return value in ("1", "true", "yes") if value else default


def configure_logging(debug: bool = False) -> None:
    """Configure logging for all modules.

    Args:
        debug: Whether to enable debug logging
    """
    if not debug:
        debug = get_env_flag("OPENAPI_ENFORCER_DEBUG")

    level = logging.DEBUG if debug else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicate messages
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
    root_logger.addHandler(handler)

    for logger_name in logging.root.manager.loggerDict:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


def read_value(path: str | Path) -> Any:
    """Read a YAML or JSON document of any shape (``-`` reads stdin as YAML)."""
    if str(path) == "-":
        return load_schema(click.get_text_stream("stdin").read())
    return load_schema_from_file(path)


def parse_params(pairs: Iterable[str]) -> dict[str, Any]:
    """Parse ``name=value`` options; values are read as YAML scalars.

    Raises:
        click.BadParameter: If an option has no ``=``
    """
    params: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected name=value, got: {pair}", param_hint="--param")
        params[name] = load_schema(raw) if raw else ""
    return params


def format_error(error: Exception, debug: bool = False) -> dict[str, Any]:
    """Format an error for output.

    Args:
        error: The exception that occurred
        debug: Whether to include debug information

    Returns:
        Dict containing error information
    """
    error_info: dict[str, Any] = {"error": str(error)}

    if isinstance(error, EnforcerError):
        error_info["code"] = error.code
        if error.path:
            error_info["path"] = error.path
    if isinstance(error, ValidationError):
        error_info["errors"] = [
            {"path": record.path or "/", "message": record.message, "code": record.code}
            for record in error.errors
        ]

    if debug:
        error_info["traceback"] = traceback.format_exc()
        error_info["type"] = error.__class__.__name__

    return error_info


def output_result(result: Any, json_output: bool = False, debug: bool = False) -> None:
    """Output a result in either JSON or human-readable format.

    Args:
        result: The result to output
        json_output: Whether to output in JSON format
        debug: Whether to include debug information
    """
    if json_output:
        payload = ValueConverter.serialize(result)
        print(json.dumps({"status": "ok", "result": payload}, indent=2, default=str))
    else:
        if isinstance(result, list):
            for row in result:
                click.echo(row)
        else:
            click.echo(result)


def output_error(error: Exception, json_output: bool = False, debug: bool = False) -> None:
    """Output an error in either JSON or human-readable format.

    Args:
        error: The exception that occurred
        json_output: Whether to output in JSON format
        debug: Whether to include debug information
    """
    error_info = format_error(error, debug)

    if json_output:
        print(json.dumps({"status": "error", **error_info}, indent=2))
    else:
        click.echo(f"Error: {error_info['error']}", err=True)
        if debug and "traceback" in error_info:
            click.echo("\nTraceback:", err=True)
            click.echo(error_info["traceback"], err=True)

    raise click.Abort()
