"""sysexctl: edit hidden synth parameters over MIDI SysEx."""

__version__ = "0.1.0"

# Codec
from .decoder import WireDecoder
from .parser import TextCommandParser
from .serializer import serialize

# Device exchange
from .session import DeviceSession

__all__ = [
    "DeviceSession",
    "TextCommandParser",
    "WireDecoder",
    "serialize",
]
