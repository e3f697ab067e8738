"""MIDI device and transport exceptions.

- DeviceError: Base class for device errors
- NoConnectedDeviceError: No MIDI port matches the device's port prefix
- MidiPortError: A port could not be opened
- MidiSendError: A message could not be sent
- NoReplyError: The device did not answer within the collection window
"""

from typing import Optional

from .base import SysexCtlError


class DeviceError(SysexCtlError):
    """MIDI device operation failed."""

    def __init__(self, user_message: str, device_name: Optional[str] = None, **kwargs):
        super().__init__(user_message, **kwargs)
        self.device_name = device_name


class NoConnectedDeviceError(DeviceError):
    """No MIDI port matches the device's declared port prefix."""

    def __init__(self, device_name: str, port_prefix: str):
        super().__init__(
            user_message=f"No connected {device_name} found",
            technical_message=f"No MIDI port name starts with '{port_prefix}'",
            device_name=device_name,
            recoverable=True,
            recovery_hint=(
                f"Check that the {device_name} is plugged in and powered on. "
                "Run 'sysexctl list ports' to see available MIDI ports."
            ),
        )
        self.port_prefix = port_prefix


class MidiPortError(DeviceError):
    """A MIDI port could not be opened."""

    def __init__(self, port_name: str, original_error: Optional[str] = None):
        tech_msg = f"Could not open MIDI port '{port_name}'"
        if original_error:
            tech_msg += f"\nOriginal error: {original_error}"
        super().__init__(
            user_message=f"Could not open MIDI port '{port_name}'",
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint="It may be in use by another application (e.g. the vendor's editor).",
        )
        self.port_name = port_name


class MidiSendError(DeviceError):
    """A message could not be sent to the device."""

    def __init__(self, port_name: Optional[str], original_error: Optional[str] = None):
        tech_msg = f"Send failed on '{port_name}'"
        if original_error:
            tech_msg += f": {original_error}"
        super().__init__(
            user_message="Could not send to the MIDI device",
            technical_message=tech_msg,
            recoverable=False,
        )
        self.port_name = port_name


class NoReplyError(DeviceError):
    """The device did not answer within the collection window."""

    def __init__(self, device_name: str, timeout_ms: int):
        super().__init__(
            user_message=f"No reply from {device_name}",
            technical_message=f"No reply from {device_name} within {timeout_ms} ms",
            device_name=device_name,
            recoverable=True,
            recovery_hint="Increase the timeout with 'sysexctl --timeout' or check the MIDI cable.",
        )
        self.timeout_ms = timeout_ms
