"""Commands that talk to a connected device."""

import click

from sysexctl.cli.context import CliContext, pass_cli_context, report_errors


@click.command(name="get")
@click.argument("device_name", metavar="DEVICE")
@click.argument("keys", nargs=-1)
@pass_cli_context
def get(cli_ctx: CliContext, device_name: str, keys: tuple[str, ...]):
    """
    Read parameters back from DEVICE.

    Without KEYS every parameter is read, including every index of
    indexed parameters. Parameters that do not answer within the reply
    window are left out.
    """
    with report_errors(cli_ctx):
        with cli_ctx.session(device_name) as session:
            results = session.get(keys)

    for key, values in results.items():
        click.echo(f"{key}: {','.join(values)}")

    missing = [key for key in keys if key not in results]
    for key in missing:
        click.echo(f"{key}: (no reply)", err=True)


@click.command(name="set")
@click.argument("device_name", metavar="DEVICE")
@click.argument("key")
@click.argument("values", nargs=-1, required=True)
@pass_cli_context
def set_command(cli_ctx: CliContext, device_name: str, key: str, values: tuple[str, ...]):
    """
    Write parameter KEY of DEVICE.

    \b
    Examples:
      sysexctl set MicroBrute NotePriority LowNote
      sysexctl set MicroBrute MidiRecvChan All
      sysexctl set MicroBrute Seq/3 C3 C3 _ D#3
      sysexctl set MicroBrute Seq/3 C3,C3,_,D#3
    """
    with report_errors(cli_ctx):
        with cli_ctx.session(device_name) as session:
            messages = session.set(key, values)
    click.echo(f"{key}: {' '.join(values)} ({len(messages)} message(s) sent)")


@click.command(name="reset")
@click.argument("device_name", metavar="DEVICE")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@pass_cli_context
def reset(cli_ctx: CliContext, device_name: str, yes: bool):
    """Set every plain parameter of DEVICE to its first value."""
    if not yes:
        click.confirm(f"Reset all parameters of {device_name}?", abort=True)

    with report_errors(cli_ctx):
        with cli_ctx.session(device_name) as session:
            written = session.reset()

    for key, value in written.items():
        click.echo(f"{key}: {value}")


@click.command(name="detect")
@click.argument("device_name", metavar="DEVICE")
@pass_cli_context
def detect(cli_ctx: CliContext, device_name: str):
    """Send a universal identity request to DEVICE and show the reply."""
    with report_errors(cli_ctx):
        with cli_ctx.session(device_name) as session:
            reply = session.detect()
        vendor = cli_ctx.registry.find_vendor_by_manufacturer(reply.manufacturer)

    click.echo(f"Vendor:       {vendor.name if vendor else 'unknown'} ({reply.manufacturer.hex(' ')})")
    click.echo(f"Family:       0x{reply.family:04x}")
    click.echo(f"Model:        0x{reply.model:04x}")
    click.echo(f"Firmware:     {reply.version_string}")
