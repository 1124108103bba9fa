import sys

import click

from openapi_enforcer.cli.utils import configure_logging, output_error, output_result, read_value
from openapi_enforcer.config.loader import load_config
from openapi_enforcer.core import Enforcer
from openapi_enforcer.validator.context import ErrorRecord


def format_validation_errors(errors: list[ErrorRecord]) -> str:
    """Format validation errors for human-readable output"""
    if not errors:
        return f"{click.style('✓', fg='green')} Value is valid"

    output = [f"{click.style('✗', fg='red')} Found {len(errors)} error(s):"]
    for record in errors:
        lines = record.message.rstrip().split("\n")
        output.append(f"  {record.path or '/'} [{record.code}] {lines[0]}")
        output.extend(f"    {line}" for line in lines[1:] if line.strip())
    return "\n".join(output)


@click.command(name="validate")
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("value_file", type=click.Path(allow_dash=True, dir_okay=False))
@click.option("--definitions", "document", help="Swagger/OpenAPI document providing named schemas")
@click.option("--config", "config_path", help="Path to an enforcer.yml configuration file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def validate(
    schema_file: str,
    value_file: str,
    document: str | None,
    config_path: str | None,
    json_output: bool,
    debug: bool,
) -> None:
    """Validate a value against a schema.

    Exits with status 1 when the value is invalid.

    \b
    Examples:
        openapi-enforcer validate pet.yaml value.json
        openapi-enforcer validate pet.yaml value.json --definitions api.yaml
        cat value.json | openapi-enforcer validate pet.yaml -
    """
    configure_logging(debug)

    try:
        config = load_config(config_path)
        enforcer = (
            Enforcer.from_document(document, config) if document else Enforcer(config)
        )
        errors = enforcer.errors(read_value(schema_file), read_value(value_file))

        if json_output:
            output_result(
                {
                    "valid": not errors,
                    "errors": [
                        {"path": r.path or "/", "message": r.message, "code": r.code}
                        for r in errors
                    ],
                },
                json_output,
                debug,
            )
        else:
            click.echo(format_validation_errors(errors))
    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)
    else:
        if errors:
            sys.exit(1)
