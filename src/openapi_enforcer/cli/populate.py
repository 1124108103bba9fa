import click
import yaml

from openapi_enforcer.cli.utils import (
    configure_logging,
    output_error,
    output_result,
    parse_params,
    read_value,
)
from openapi_enforcer.config.loader import load_config
from openapi_enforcer.converters import ValueConverter
from openapi_enforcer.core import Enforcer


@click.command(name="populate")
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--param", "params", multiple=True, help="Parameter as name=value (multiple allowed)")
@click.option("--definitions", "document", help="Swagger/OpenAPI document providing named schemas")
@click.option("--config", "config_path", help="Path to an enforcer.yml configuration file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def populate(
    schema_file: str,
    params: tuple[str, ...],
    document: str | None,
    config_path: str | None,
    json_output: bool,
    debug: bool,
) -> None:
    """Build a value from a schema's defaults, templates and variables.

    \b
    Examples:
        openapi-enforcer populate pet.yaml
        openapi-enforcer populate pet.yaml --param name=Rex --param age=3
        openapi-enforcer populate pet.yaml --json-output
    """
    configure_logging(debug)

    try:
        config = load_config(config_path)
        enforcer = (
            Enforcer.from_document(document, config) if document else Enforcer(config)
        )
        value = enforcer.populate(read_value(schema_file), parse_params(params))
        if json_output:
            output_result(value, json_output, debug)
        else:
            text = yaml.safe_dump(ValueConverter.serialize(value), sort_keys=False)
            output_result(text.rstrip(), json_output, debug)
    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)
