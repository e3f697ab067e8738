"""Errors raised while turning user text into a command.

These are always surfaced to the caller as the command's terminal failure.
Every class keeps the offending text so the CLI can point at it:

- UnknownDeviceError: device name not in any loaded schema
- UnknownParameterError: control name not declared by the device
- BadControlIndexError: index missing, unexpected or outside the control range
- BadModeParameterError: mode missing, unexpected or not declared
- EmptyParameterError: empty key text
- BadControlSyntaxError: key does not follow Name[/Index][:Mode]
- BadFieldError / NoBoundsError: field lookup on a modal key failed
- UnknownValueError: value text matches none of the declared names
- ValueOutOfBoundError: numeric value outside its range
- MissingValueError / TooManyValuesError: wrong number of value tokens
- NoMatchingBoundsError: no bound of the control accepted the value
- BadNoteSyntaxError: note token is not <Letter>[#]<Octave>
"""

from typing import Optional

from .base import SysexCtlError


class ParseError(SysexCtlError):
    """A text command could not be turned into wire messages."""

    def __init__(self, user_message: str, text: Optional[str] = None, **kwargs):
        kwargs.setdefault("recoverable", True)
        super().__init__(user_message, **kwargs)
        self.text = text


class UnknownDeviceError(ParseError):
    """Device name is not declared by any loaded schema."""

    def __init__(self, device_name: str):
        super().__init__(
            f"Unknown device '{device_name}'",
            text=device_name,
            recovery_hint="Run 'sysexctl list devices' for known device names",
        )
        self.device_name = device_name


class UnknownParameterError(ParseError):
    """Control name is not declared by the device."""

    def __init__(self, param_name: str, device_name: Optional[str] = None):
        hint = None
        if device_name:
            hint = f"Run 'sysexctl list controls {device_name}' for known control names"
        super().__init__(
            f"Unknown parameter '{param_name}'", text=param_name, recovery_hint=hint
        )
        self.param_name = param_name


class BadControlIndexError(ParseError):
    """Index is missing, unexpected, not a number or outside the control range."""

    def __init__(self, param_name: str, reason: str):
        super().__init__(
            f"Bad index in '{param_name}': {reason}",
            text=param_name,
            recovery_hint="Indexed controls are addressed as Name/Index, e.g. Seq/1",
        )
        self.param_name = param_name


class BadModeParameterError(ParseError):
    """Mode is missing, unexpected or not declared for the control."""

    def __init__(self, param_name: str, reason: str):
        super().__init__(
            f"Bad mode in '{param_name}': {reason}",
            text=param_name,
            recovery_hint="Modal controls are addressed as Name:Mode or Name/Index:Mode",
        )
        self.param_name = param_name


class EmptyParameterError(ParseError):
    """Parameter key is empty."""

    def __init__(self):
        super().__init__("Empty parameter name", text="")


class BadControlSyntaxError(ParseError):
    """Key text does not follow Name, Name/Index, Name:Mode or Name/Index:Mode."""

    def __init__(self, param_name: str):
        super().__init__(
            f"Bad parameter syntax '{param_name}'",
            text=param_name,
            recovery_hint="Expected Name, Name/Index, Name:Mode or Name/Index:Mode",
        )
        self.param_name = param_name


class BadFieldError(ParseError):
    """Field name is not declared by the selected mode."""

    def __init__(self, field_name: str, mode_name: Optional[str] = None):
        where = f" in mode '{mode_name}'" if mode_name else ""
        super().__init__(f"Unknown field '{field_name}'{where}", text=field_name)
        self.field_name = field_name


class NoBoundsError(ParseError):
    """Key has no bounds for the requested value shape."""

    def __init__(self, param_name: str):
        super().__init__(
            f"'{param_name}' has no value bounds for this value",
            text=param_name,
            recovery_hint="Use Field=Value for modal parameters, a bare value otherwise",
        )
        self.param_name = param_name


class UnknownValueError(ParseError):
    """Value text matches none of the declared value names."""

    def __init__(self, value_name: str, expected: Optional[list[str]] = None):
        hint = f"Expected one of: {', '.join(expected)}" if expected else None
        super().__init__(f"Unknown value '{value_name}'", text=value_name, recovery_hint=hint)
        self.value_name = value_name


class ValueOutOfBoundError(ParseError):
    """Numeric value lies outside the declared range."""

    def __init__(self, value_name: str, lo: Optional[int] = None, hi: Optional[int] = None):
        hint = f"Expected a value between {lo} and {hi}" if lo is not None else None
        super().__init__(
            f"Value '{value_name}' is out of bounds", text=value_name, recovery_hint=hint
        )
        self.value_name = value_name


class MissingValueError(ParseError):
    """No value given where one is required."""

    def __init__(self, param_name: str):
        super().__init__(f"Missing value for '{param_name}'", text=param_name)
        self.param_name = param_name


class TooManyValuesError(ParseError):
    """More value tokens than the control accepts."""

    def __init__(self, param_name: str, count: int, maximum: int):
        super().__init__(
            f"Too many values for '{param_name}': got {count}, at most {maximum}",
            text=param_name,
        )
        self.param_name = param_name
        self.count = count
        self.maximum = maximum


class NoMatchingBoundsError(ParseError):
    """None of the control's bounds accepted the value."""

    def __init__(self, value_name: str, causes: Optional[list[ParseError]] = None):
        self.causes = causes or []
        hint = "; ".join(c.get_full_message().replace("\n\nSuggestion: ", " ") for c in self.causes)
        super().__init__(
            f"Value '{value_name}' matches no bounds", text=value_name, recovery_hint=hint or None
        )
        self.value_name = value_name


class BadNoteSyntaxError(ParseError):
    """Note token is not <Letter>[#]<Octave>."""

    def __init__(self, note: str):
        super().__init__(
            f"Bad note '{note}'",
            text=note,
            recovery_hint="Notes are written C4, C#4 ... B9; use _ for a rest",
        )
        self.note = note
