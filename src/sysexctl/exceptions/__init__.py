"""
Custom exception hierarchy for sysexctl.

## Exception Hierarchy

```
SysexCtlError (base)
├── ParseError                      user text could not be encoded
│   ├── UnknownDeviceError
│   ├── UnknownParameterError
│   ├── BadControlIndexError
│   ├── BadModeParameterError
│   ├── EmptyParameterError
│   ├── BadControlSyntaxError
│   ├── BadFieldError
│   ├── NoBoundsError
│   ├── UnknownValueError
│   ├── ValueOutOfBoundError
│   ├── MissingValueError
│   ├── TooManyValuesError
│   ├── NoMatchingBoundsError
│   └── BadNoteSyntaxError
├── DecodeError                     received frame could not be decoded
│   ├── EmptyMessageError
│   ├── ShortReadError
│   ├── UnexpectedByteError
│   ├── UnknownVendorError
│   ├── UnknownDeviceCodeError
│   ├── UnknownControlCodeError
│   └── UnmatchedValueError
├── DeviceError                     MIDI transport
│   ├── NoConnectedDeviceError
│   ├── MidiPortError
│   ├── MidiSendError
│   └── NoReplyError
└── ConfigurationError
    ├── ConfigFileInvalidError
    ├── ConfigValidationError
    └── SchemaLoadError
```

## Usage

All custom exceptions inherit from `SysexCtlError`, which provides:

- `user_message`: Human-friendly message for display to users
- `technical_message`: Detailed message for logging
- `recoverable`: Whether the error can be recovered from
- `recovery_hint`: Optional suggestion for how to fix the issue

### Example: Bad value

```python
from sysexctl.exceptions import UnknownValueError

raise UnknownValueError("Loud", expected=["Hold", "NoteOn"])

# User sees: "Unknown value 'Loud'"
# Recovery hint: "Expected one of: Hold, NoteOn"
```

See `sysexctl.exceptions.handlers` for utilities to handle these exceptions systematically.
"""

from .base import SysexCtlError
from .config import (
    ConfigFileInvalidError,
    ConfigurationError,
    ConfigValidationError,
    SchemaLoadError,
)
from .decode import (
    DecodeError,
    EmptyMessageError,
    ShortReadError,
    UnexpectedByteError,
    UnknownControlCodeError,
    UnknownDeviceCodeError,
    UnknownVendorError,
    UnmatchedValueError,
)
from .device import (
    DeviceError,
    MidiPortError,
    MidiSendError,
    NoConnectedDeviceError,
    NoReplyError,
)
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    wrap_midi_error,
    wrap_pydantic_error,
)
from .parse import (
    BadControlIndexError,
    BadControlSyntaxError,
    BadFieldError,
    BadModeParameterError,
    BadNoteSyntaxError,
    EmptyParameterError,
    MissingValueError,
    NoBoundsError,
    NoMatchingBoundsError,
    ParseError,
    TooManyValuesError,
    UnknownDeviceError,
    UnknownParameterError,
    UnknownValueError,
    ValueOutOfBoundError,
)

__all__ = [
    # Base
    "SysexCtlError",
    # Parse
    "BadControlIndexError",
    "BadControlSyntaxError",
    "BadFieldError",
    "BadModeParameterError",
    "BadNoteSyntaxError",
    "EmptyParameterError",
    "MissingValueError",
    "NoBoundsError",
    "NoMatchingBoundsError",
    "ParseError",
    "TooManyValuesError",
    "UnknownDeviceError",
    "UnknownParameterError",
    "UnknownValueError",
    "ValueOutOfBoundError",
    # Decode
    "DecodeError",
    "EmptyMessageError",
    "ShortReadError",
    "UnexpectedByteError",
    "UnknownControlCodeError",
    "UnknownDeviceCodeError",
    "UnknownVendorError",
    "UnmatchedValueError",
    # Device
    "DeviceError",
    "MidiPortError",
    "MidiSendError",
    "NoConnectedDeviceError",
    "NoReplyError",
    # Config
    "ConfigFileInvalidError",
    "ConfigurationError",
    "ConfigValidationError",
    "SchemaLoadError",
    # Handlers
    "ErrorCollector",
    "ErrorContext",
    "collect_errors",
    "format_error_for_display",
    "wrap_midi_error",
    "wrap_pydantic_error",
]
