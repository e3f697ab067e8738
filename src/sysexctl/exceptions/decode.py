"""Errors raised while decoding a received SysEx frame.

Decode errors are never fatal: the listener logs them, drops the frame and
keeps going with the next one.
"""

from typing import Optional

from .base import SysexCtlError


class DecodeError(SysexCtlError):
    """A received frame does not match any schema entry."""

    def __init__(self, user_message: str, position: Optional[int] = None, **kwargs):
        kwargs.setdefault("recoverable", True)
        if position is not None:
            kwargs.setdefault("technical_message", f"{user_message} (at byte {position})")
        super().__init__(user_message, **kwargs)
        self.position = position


class EmptyMessageError(DecodeError):
    """Frame has no bytes at all."""

    def __init__(self):
        super().__init__("Empty message", position=0)


class ShortReadError(DecodeError):
    """Frame ended before a required field."""

    def __init__(self, position: int, wanted: int = 1):
        super().__init__(f"Message too short, {wanted} more byte(s) expected", position=position)
        self.wanted = wanted


class UnexpectedByteError(DecodeError):
    """A fixed byte (start, sub id, end) had the wrong value."""

    def __init__(self, position: int, expected: bytes, found: bytes):
        super().__init__(
            f"Expected {expected.hex(' ')} but found {found.hex(' ') or 'nothing'}",
            position=position,
        )
        self.expected = expected
        self.found = found


class UnknownVendorError(DecodeError):
    """No vendor prefix matches."""

    def __init__(self, position: int):
        super().__init__("Unknown vendor", position=position)


class UnknownDeviceCodeError(DecodeError):
    """No device of the vendor matches the device id."""

    def __init__(self, vendor_name: str, position: int):
        super().__init__(f"Unknown {vendor_name} device", position=position)
        self.vendor_name = vendor_name


class UnknownControlCodeError(DecodeError):
    """No control of the device matches the control code."""

    def __init__(self, device_name: str, position: int):
        super().__init__(f"Unknown {device_name} control", position=position)
        self.device_name = device_name


class UnmatchedValueError(DecodeError):
    """No bound of the control structurally matches the value bytes."""

    def __init__(self, control_name: str, position: int):
        super().__init__(f"No bounds of '{control_name}' match the value", position=position)
        self.control_name = control_name
