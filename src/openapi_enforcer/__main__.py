import click

from openapi_enforcer.cli.populate import populate
from openapi_enforcer.cli.validate import validate


@click.group()
@click.version_option(package_name="openapi-enforcer")
def cli() -> None:
    """OpenAPI Enforcer CLI"""


cli.add_command(validate)
cli.add_command(populate)


if __name__ == "__main__":
    cli()
