"""Offline codec commands: show the bytes of a command, or read captured bytes."""

import re
import sys

import click

from sysexctl.cli.context import CliContext, pass_cli_context, report_errors
from sysexctl.decoder import WireDecoder
from sysexctl.exceptions import DecodeError
from sysexctl.parser import TextCommandParser
from sysexctl.serializer import serialize
from sysexctl.tree import SYSEX_END, BlockNode, ValueNode, display_key

_HEX_SEPARATORS = re.compile(r"[\s,:]+")


def parse_hex(text: str) -> bytes:
    """
    Bytes from hex text such as ``"f0 00 20"``, ``"f0:00:20"`` or ``"f00020"``.

    Raises:
        click.BadParameter: Text is not hex
    """
    digits = _HEX_SEPARATORS.sub("", text)
    if digits.lower().startswith("0x"):
        digits = digits[2:]
    try:
        return bytes.fromhex(digits)
    except ValueError:
        raise click.BadParameter(f"'{text}' is not hex")


def split_frames(data: bytes) -> list[bytes]:
    """Split a byte stream into frames, each ending with ``F7``."""
    frames = []
    start = 0
    for i, byte in enumerate(data):
        if byte == SYSEX_END:
            frames.append(data[start:i + 1])
            start = i + 1
    if start < len(data):
        frames.append(data[start:])
    return frames


@click.command(name="encode")
@click.argument("device_name", metavar="DEVICE")
@click.argument("key")
@click.argument("values", nargs=-1)
@click.option("--query", "-q", is_flag=True, help="Encode a query for KEY instead of an update")
@click.option("--msg-id", type=click.IntRange(0, 0x7F), default=0, help="Message id byte (default: 0)")
@pass_cli_context
def encode(cli_ctx: CliContext, device_name: str, key: str, values: tuple[str, ...], query: bool, msg_id: int):
    """
    Print the SysEx messages for a command without sending them.

    \b
    Examples:
      sysexctl encode MicroBrute BendRange 12
      sysexctl encode MicroBrute Seq/1 C4 D4 _ E4
      sysexctl encode --query MicroBrute Seq/1
    """
    with report_errors(cli_ctx):
        parser = TextCommandParser(cli_ctx.registry)
        if query:
            if values:
                raise click.UsageError("--query takes no values")
            tree = parser.parse_query(device_name, [key], msg_id)
        else:
            tree = parser.parse_update(device_name, key, values, msg_id)

    for message in serialize(tree):
        click.echo(message.hex(" "))


@click.command(name="decode")
@click.argument("hex_text", metavar="HEX", nargs=-1, required=True)
@pass_cli_context
def decode(cli_ctx: CliContext, hex_text: tuple[str, ...]):
    """
    Decode received SysEx messages.

    HEX may hold several messages; each one ends at its F7 byte.

    \b
    Examples:
      sysexctl decode "f0 00 20 6b 05 01 00 01 2c 0b f7"
      sysexctl decode f0 00 20 6b 05 01 00 01 2e 01 f7
    """
    data = parse_hex(" ".join(hex_text))

    with report_errors(cli_ctx):
        decoder = WireDecoder(cli_ctx.registry)

    failed = 0
    for frame in split_frames(data):
        try:
            tree = decoder.decode(frame)
        except DecodeError as e:
            failed += 1
            click.echo(f"{frame.hex(' ')}: {e.get_full_message()}", err=True)
            continue
        for path in tree.paths():
            leaf = path[-1]
            key = display_key(path)
            if isinstance(leaf, BlockNode):
                start = leaf.block.offset
                click.echo(f"{key} [{start}..{start + leaf.block.length}]: {leaf.text}")
            elif isinstance(leaf, ValueNode):
                click.echo(f"{key}: {leaf.match.text}")

    if failed:
        sys.exit(1)
