"""
Config command group.

Commands:
    - config show [--field FIELD]    # Display configuration
    - config path                    # Print the config file location
    - config reset [--yes]           # Restore defaults (keeps a .bak backup)
"""

import click

from sysexctl.cli.context import CliContext, pass_cli_context, report_errors
from sysexctl.config import AppConfig


@click.group(name="config")
def config_group():
    """Show or reset sysexctl settings."""
    pass


@config_group.command(name="show")
@click.option("--field", "-f", "field_name", default=None, help="Show a single field")
@pass_cli_context
def show_config(cli_ctx: CliContext, field_name: str | None):
    """Display the current configuration."""
    with report_errors(cli_ctx):
        config = cli_ctx.config

    values = config.model_dump(mode="json")
    if field_name is not None:
        if field_name not in values:
            raise click.BadParameter(
                f"Unknown field '{field_name}'. Fields: {', '.join(values)}",
                param_hint="--field",
            )
        values = {field_name: values[field_name]}

    for name, value in values.items():
        description = AppConfig.model_fields[name].description
        click.echo(f"{name}: {value}")
        if description:
            click.echo(f"    {description}")


@config_group.command(name="path")
@pass_cli_context
def config_path(cli_ctx: CliContext):
    """Print the location of the config file."""
    click.echo(str(cli_ctx.config_path))


@config_group.command(name="reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@pass_cli_context
def reset_config(cli_ctx: CliContext, yes: bool):
    """Reset every setting to its default."""
    if not yes:
        click.confirm(f"Overwrite {cli_ctx.config_path} with defaults?", abort=True)

    with report_errors(cli_ctx):
        AppConfig().save(cli_ctx.config_path)
    click.echo(f"Configuration reset: {cli_ctx.config_path}")
