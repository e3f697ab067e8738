"""
Centralized error handling utilities.

The codec has two error surfaces with different policies:

1. **Parse errors** come from user text. They end the command and are shown
   to the user with their recovery hint.
2. **Decode errors** come from the wire. They are logged and the frame is
   dropped; the next frame decodes as if nothing happened.

Transport errors from mido/rtmidi are translated into `DeviceError`
subclasses at the port boundary with `wrap_midi_error`, and pydantic
validation errors from config or schema files with `wrap_pydantic_error`.

## Handling Patterns

| Pattern | Code |
|---------|------|
| Critical section with auto-logging | `with ErrorContext("open port"): ...` |
| Try many schema files, report all | `collector = collect_errors("load schemas"); with collector.try_operation(...): ...` |
| Show an error in the CLI | `message, hint = format_error_for_display(e)` |

## Architecture

```
  CLI              prints user_message + recovery_hint, exits 1
   ^
   | SysexCtlError
  session/parser   converts low-level failures, adds context
   ^
   | OSError, ValueError, pydantic.ValidationError
  mido / json      raise standard Python exceptions
```
"""

import logging
from typing import Optional

from .base import SysexCtlError
from .config import ConfigFileInvalidError, ConfigValidationError
from .device import MidiPortError, MidiSendError


logger = logging.getLogger(__name__)


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Example:
        ```python
        with ErrorContext("open MicroBrute port", logger_instance=logger):
            port = DevicePort.open(name)
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger_instance: Logger to use (defaults to module logger)
            re_raise: Whether to re-raise exceptions
        """
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[Exception] = None

    def __enter__(self):
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val

        if isinstance(exc_val, SysexCtlError):
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)

        return not self.re_raise


def wrap_pydantic_error(error: Exception, file_path: str) -> SysexCtlError:
    """
    Convert Pydantic validation errors to sysexctl exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        # Format: "Invalid JSON: <actual error> [type=json_invalid, ..."
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", ("unknown",)))
            return ConfigValidationError(
                field=field,
                value=first_error.get("input"),
                error_msg=first_error.get("msg", "validation failed"),
                file_path=file_path,
            )
        if errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get("loc", ("unknown",)))
                error_lines.append(f"  - {field}: {err.get('msg', 'validation failed')}")
            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=f"{len(errors)} validation errors:\n" + "\n".join(error_lines),
                file_path=file_path,
            )

    return ConfigValidationError(field="unknown", value=None, error_msg=error_msg, file_path=file_path)


def wrap_midi_error(error: Exception, port_name: Optional[str], sending: bool = False) -> SysexCtlError:
    """
    Convert low-level mido/rtmidi errors to sysexctl exceptions.

    Args:
        error: The original exception from the MIDI backend
        port_name: The port involved in the error
        sending: True if the error happened while sending rather than opening

    Returns:
        A DeviceError with appropriate type and message
    """
    if isinstance(error, SysexCtlError):
        return error
    if sending:
        return MidiSendError(port_name, original_error=str(error))
    return MidiPortError(port_name or "<unknown>", original_error=str(error))


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, SysexCtlError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None


def collect_errors(operation: str) -> "ErrorCollector":
    """
    Create an error collector for batch operations.

    Example:
        ```python
        collector = collect_errors("load schemas")
        for path in paths:
            with collector.try_operation(f"load {path.name}"):
                load(path)
        ```
    """
    return ErrorCollector(operation)


class ErrorCollector:
    """
    Collects multiple errors during batch operations.

    Allows operations to continue even if some fail, then
    report all failures at once.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def try_operation(self, sub_operation: str):
        """Context manager that catches and stores errors of one sub-operation."""
        return self._OperationContext(self, sub_operation)

    def get_summary(self) -> str:
        """Multi-line summary of collected errors."""
        if not self.has_errors:
            return f"All operations completed successfully ({self.success_count} total)"

        summary = f"Failed {self.error_count} of {self.error_count + self.success_count} operations:\n"
        for sub_op, error in self.errors:
            if isinstance(error, SysexCtlError):
                summary += f"  - {sub_op}: {error.user_message}\n"
            else:
                summary += f"  - {sub_op}: {error}\n"
        return summary.rstrip()

    class _OperationContext:
        """Internal context manager for individual operations."""

        def __init__(self, collector: "ErrorCollector", sub_operation: str):
            self.collector = collector
            self.sub_operation = sub_operation

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_type is None:
                self.collector.success_count += 1
                return False
            if not issubclass(exc_type, Exception):
                return False
            self.collector.errors.append((self.sub_operation, exc_val))
            return True
