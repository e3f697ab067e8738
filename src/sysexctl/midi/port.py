"""MIDI transport for SysEx exchanges.

A thin layer over mido (rtmidi backend): list the ports, find the one a
device lives on from its schema port prefix, send raw SysEx frames and
deliver every received SysEx frame as ``(timestamp, bytes)``.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Optional

import mido

from ..exceptions import ErrorContext, NoConnectedDeviceError, wrap_midi_error
from ..schema import Device

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float, bytes], None]


def list_ports() -> dict[str, list[str]]:
    """Names of all MIDI input and output ports."""
    return {"input": mido.get_input_names(), "output": mido.get_output_names()}


def locate_port(device: Device, port_names: Optional[list[str]] = None) -> str:
    """
    Find the output port of a device by its declared port prefix.

    Args:
        device: Device whose ``port_prefix`` is searched for
        port_names: Candidate names, defaults to the current output ports

    Raises:
        NoConnectedDeviceError: No port name starts with the prefix
    """
    if port_names is None:
        port_names = mido.get_output_names()
    for name in port_names:
        if name.startswith(device.port_prefix):
            logger.debug(f"Found {device.name} on port: {name}")
            return name
    raise NoConnectedDeviceError(device.name, device.port_prefix)


def _matching_input(output_name: str, prefix: str) -> Optional[str]:
    """Input port paired with an output: same name first, else same prefix."""
    inputs = mido.get_input_names()
    if output_name in inputs:
        return output_name
    return next((name for name in inputs if name.startswith(prefix)), None)


class DevicePort:
    """
    Output and input port of one connected device.

    Example:
        ```python
        with DevicePort.for_device(device) as port:
            port.subscribe(lambda ts, data: print(data.hex(" ")))
            port.send(bytes([0xF0, 0x7E, 0x7F, 0x06, 0x01, 0xF7]))
        ```
    """

    def __init__(self, output_name: str, input_name: Optional[str] = None, client_name: str = "sysexctl"):
        """
        Initialize a device port; nothing is opened until ``open``.

        Args:
            output_name: MIDI output port name
            input_name: MIDI input port name, None for send-only use
            client_name: Client name shown to other MIDI applications
        """
        self.output_name = output_name
        self.input_name = input_name
        self.client_name = client_name
        self._output: Optional[mido.ports.BaseOutput] = None
        self._input: Optional[mido.ports.BaseInput] = None
        self._callback: Optional[FrameCallback] = None
        self._port_lock = threading.Lock()

    @classmethod
    def for_device(cls, device: Device, client_name: str = "sysexctl") -> "DevicePort":
        """Locate and open the ports of a connected device."""
        output_name = locate_port(device)
        port = cls(output_name, _matching_input(output_name, device.port_prefix), client_name)
        port.open()
        return port

    def open(self) -> None:
        with ErrorContext(f"open MIDI port {self.output_name}", logger_instance=logger):
            try:
                self._output = mido.open_output(self.output_name, client_name=self.client_name)
                if self.input_name:
                    self._input = mido.open_input(
                        self.input_name, client_name=self.client_name, callback=self._on_message
                    )
            except Exception as e:
                self.close()
                raise wrap_midi_error(e, self.output_name) from e
        logger.info(f"Connected to {self.output_name}")

    def close(self) -> None:
        with self._port_lock:
            for port in (self._input, self._output):
                if port is not None:
                    try:
                        port.close()
                    except Exception as e:
                        logger.error(f"Error closing MIDI port {port.name}: {e}")
            self._input = None
            self._output = None

    @property
    def is_open(self) -> bool:
        return self._output is not None

    def subscribe(self, callback: Optional[FrameCallback]) -> None:
        """
        Deliver every received SysEx frame to ``callback``.

        The callback runs on mido's I/O thread - keep it fast!
        """
        self._callback = callback

    def send(self, data: bytes) -> None:
        """
        Send one complete SysEx frame.

        Raises:
            MidiSendError: Port closed or the backend refused the frame
        """
        with self._port_lock:
            if self._output is None:
                raise wrap_midi_error(OSError("port is not open"), self.output_name, sending=True)
            try:
                self._output.send(mido.Message.from_bytes(list(data)))
            except Exception as e:
                logger.error(f"Error sending SysEx to {self.output_name}: {e}")
                raise wrap_midi_error(e, self.output_name, sending=True) from e
        logger.debug(f"Sent {bytes(data).hex(' ')}")

    def _on_message(self, msg: mido.Message) -> None:
        if msg.type != "sysex":
            return
        data = bytes(msg.bytes())
        logger.debug(f"Received {data.hex(' ')}")
        try:
            if self._callback:
                self._callback(time.monotonic(), data)
        except Exception as e:
            logger.error(f"Error in SysEx callback: {e}")

    def __enter__(self):
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
