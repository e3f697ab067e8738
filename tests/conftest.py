"""Pytest fixtures for tests."""

from collections.abc import Callable
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Optional

import pytest

from sysexctl.decoder import WireDecoder
from sysexctl.exceptions import MidiSendError
from sysexctl.parser import TextCommandParser
from sysexctl.schema import SchemaRegistry, Vendor, reset_registry

MICROBRUTE_HEADER = bytes([0xF0, 0x00, 0x20, 0x6B, 0x05, 0x01])


class FakePort:
    """
    In-memory transport standing in for a MIDI port.

    ``responder`` maps each sent frame to the frames the "device" answers
    with; answers are delivered synchronously to the subscribed callback.
    """

    def __init__(
        self,
        responder: Optional[Callable[[bytes], list[bytes]]] = None,
        fail_on: Optional[int] = None,
    ):
        self.responder = responder
        self.fail_on = fail_on
        self.sent: list[bytes] = []
        self.callback = None

    def subscribe(self, callback) -> None:
        self.callback = callback

    def send(self, data: bytes) -> None:
        if self.fail_on is not None and len(self.sent) == self.fail_on:
            raise MidiSendError("FakePort", original_error="cable pulled")
        self.sent.append(bytes(data))
        if self.responder and self.callback:
            for reply in self.responder(bytes(data)):
                self.callback(0.0, reply)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.callback = None


def microbrute_reply(msg_id: int, *body: int) -> bytes:
    """A MicroBrute frame: header, message id, body bytes, F7."""
    return MICROBRUTE_HEADER + bytes([msg_id, *body, 0xF7])


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry():
    """Registry with only the bundled schemas."""
    return SchemaRegistry()


@pytest.fixture
def microbrute(registry):
    return registry.resolve_device("MicroBrute")


@pytest.fixture
def parser(registry):
    return TextCommandParser(registry)


@pytest.fixture
def decoder(registry):
    return WireDecoder(registry)


@pytest.fixture
def fresh_registry():
    """Drop the process-wide registry before and after a test."""
    reset_registry()
    yield
    reset_registry()


ACME_SCHEMA = {
    "name": "Acme",
    "sysex": ["0x7d"],
    "devices": [
        {
            "name": "Box",
            "sysex": ["0x01"],
            "port_prefix": "Acme Box",
            "contexts": {
                "plain": {"default": ["0x10"], "query": ["0x11"]},
                "indexed": {"default": ["0x20"], "query": ["0x21"]},
            },
            "controls": [
                {
                    "name": "Volume",
                    "sysex": ["0x01"],
                    "bounds": [{"type": "range", "lo": 0, "hi": 127}],
                },
                {
                    "name": "Arp",
                    "sysex": {"default": ["0x02"], "query": ["0x03"]},
                    "modes": [
                        {
                            "name": "Up",
                            "sysex": ["0x01"],
                            "fields": [
                                {"name": "Rate", "sysex": ["0x10"],
                                 "bounds": [{"type": "range", "lo": 1, "hi": 4}]},
                                {"name": "Gate", "sysex": ["0x11"],
                                 "bounds": [{"type": "values", "values": [
                                     {"name": "Short", "sysex": 0}, {"name": "Long", "sysex": 1}]}]},
                            ],
                        },
                        {
                            "name": "Down",
                            "sysex": ["0x02"],
                            "fields": [
                                {"name": "Rate", "sysex": ["0x10"],
                                 "bounds": [{"type": "range", "lo": 1, "hi": 4}]},
                            ],
                        },
                    ],
                },
            ],
        }
    ],
}


@pytest.fixture
def acme_vendor():
    """A second vendor with a modal control."""
    return Vendor.model_validate(ACME_SCHEMA)


@pytest.fixture
def acme_registry(acme_vendor):
    """Bundled schemas plus the Acme vendor."""
    return SchemaRegistry(vendors=[acme_vendor])
