"""Universal SysEx device inquiry.

Every SysEx capable device answers the universal non-realtime identity
request, which is how ``sysexctl detect`` confirms what is plugged in:

::

    request:  F0 7E 7F 06 01 F7
    reply:    F0 7E <channel> 06 02 <manufacturer> <family> <model> <version> F7

``manufacturer`` is one byte, or three bytes starting with ``00``;
``family`` and ``model`` are two bytes LSB first; ``version`` is four bytes.
"""

from dataclasses import dataclass

from .exceptions import EmptyMessageError, ShortReadError, UnexpectedByteError

UNIVERSAL_NON_REALTIME = 0x7E
ALL_CHANNELS = 0x7F
GENERAL_INFORMATION = 0x06
IDENTITY_REQUEST = 0x01
IDENTITY_REPLY = 0x02


@dataclass(frozen=True, slots=True)
class IdentityReply:
    """Parsed identity reply."""

    channel: int
    manufacturer: bytes
    family: int
    model: int
    version: bytes

    @property
    def version_string(self) -> str:
        return ".".join(str(b) for b in self.version)

    def __str__(self) -> str:
        return (
            f"manufacturer {self.manufacturer.hex(' ')}, family 0x{self.family:04x}, "
            f"model 0x{self.model:04x}, firmware {self.version_string}"
        )


def identity_request(channel: int = ALL_CHANNELS) -> bytes:
    """Identity request addressed to one device channel, or all of them."""
    return bytes([0xF0, UNIVERSAL_NON_REALTIME, channel & 0x7F, GENERAL_INFORMATION, IDENTITY_REQUEST, 0xF7])


IDENTITY_REQUEST_MESSAGE = identity_request()


def is_identity_reply(message) -> bool:
    data = bytes(message)
    return (
        len(data) >= 5
        and data[0] == 0xF0
        and data[1] == UNIVERSAL_NON_REALTIME
        and data[3] == GENERAL_INFORMATION
        and data[4] == IDENTITY_REPLY
    )


def parse_identity_reply(message) -> IdentityReply:
    """
    Parse an identity reply frame.

    Raises:
        DecodeError: The frame is not a complete identity reply
    """
    data = bytes(message)
    if not data:
        raise EmptyMessageError()
    if not is_identity_reply(data):
        raise UnexpectedByteError(0, IDENTITY_REQUEST_MESSAGE[:2], data[:2])

    pos = 5
    manufacturer_len = 3 if data[pos:pos + 1] == b"\x00" else 1
    needed = pos + manufacturer_len + 2 + 2 + 4 + 1
    if len(data) < needed:
        raise ShortReadError(len(data), needed - len(data))

    manufacturer = data[pos:pos + manufacturer_len]
    pos += manufacturer_len
    family = data[pos] | (data[pos + 1] << 7)
    model = data[pos + 2] | (data[pos + 3] << 7)
    version = data[pos + 4:pos + 8]
    pos += 8
    if data[pos] != 0xF7:
        raise UnexpectedByteError(pos, b"\xf7", data[pos:pos + 1])

    return IdentityReply(data[2], manufacturer, family, model, version)
