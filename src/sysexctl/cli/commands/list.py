"""List command implementations."""

import click

from sysexctl.bounds import MidiNotesBound, RangeBound, ValuesBound
from sysexctl.cli.context import CliContext, pass_cli_context, report_errors
from sysexctl.exceptions import UnknownParameterError
from sysexctl.midi import list_ports


@click.group(name="list")
def list_group():
    """List MIDI ports, known devices and their parameters."""
    pass


@list_group.command(name="ports")
@pass_cli_context
def list_midi_ports(cli_ctx: CliContext):
    """List available MIDI ports and the device detected on each."""
    ports = list_ports()

    click.echo("MIDI Input Ports:\n")
    if not ports["input"]:
        click.echo("  No MIDI input ports found.")
    else:
        for i, port in enumerate(ports["input"]):
            click.echo(f"  [{i}] {port}")

    click.echo("\nMIDI Output Ports:\n")
    if not ports["output"]:
        click.echo("  No MIDI output ports found.")
        return

    with report_errors(cli_ctx):
        registry = cli_ctx.registry
    for i, port in enumerate(ports["output"]):
        device = registry.find_device_for_port(port)
        suffix = f"  ({device.name})" if device else ""
        click.echo(f"  [{i}] {port}{suffix}")


@list_group.command(name="devices")
@pass_cli_context
def list_devices(cli_ctx: CliContext):
    """List devices declared by the loaded schemas."""
    with report_errors(cli_ctx):
        registry = cli_ctx.registry
        for vendor in registry.vendors:
            for device in vendor.devices:
                click.echo(f"{device.name}  ({vendor.name})")


@list_group.command(name="controls")
@click.argument("device_name", metavar="DEVICE")
@pass_cli_context
def list_controls(cli_ctx: CliContext, device_name: str):
    """List the parameters of DEVICE."""
    with report_errors(cli_ctx):
        device = cli_ctx.device(device_name)
        for control in device.controls:
            click.echo(control.name)
        for control in device.indexed_controls:
            click.echo(f"{control.name}/[{control.range.lo}..{control.range.hi}]")


@list_group.command(name="bounds")
@click.argument("device_name", metavar="DEVICE")
@click.argument("control_name", metavar="CONTROL")
@pass_cli_context
def list_bounds(cli_ctx: CliContext, device_name: str, control_name: str):
    """
    List the values CONTROL of DEVICE accepts.

    Enumerations print one name per line, ranges print as [lo..hi].
    """
    with report_errors(cli_ctx):
        device = cli_ctx.device(device_name)
        control = device.get_control(control_name.split("/")[0].split(":")[0])
        if control is None:
            raise UnknownParameterError(control_name, device.name)

        for bound in control.bounds:
            _echo_bound(bound)
        for mode in control.modes:
            click.echo(f"{mode.name}:")
            for field in mode.fields:
                click.echo(f"  {field.name}=")
                for bound in field.bounds:
                    _echo_bound(bound, indent="    ")


def _echo_bound(bound, indent: str = "") -> None:
    if isinstance(bound, ValuesBound):
        for name in bound.names:
            click.echo(f"{indent}{name}")
    elif isinstance(bound, RangeBound):
        click.echo(f"{indent}[{bound.lo}..{bound.hi}]")
    elif isinstance(bound, MidiNotesBound):
        click.echo(f"{indent}{bound.describe()}")
