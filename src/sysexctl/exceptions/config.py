"""Configuration and schema file exceptions.

This module defines exceptions for configuration errors:
- ConfigurationError: Base class for configuration errors
- ConfigFileInvalidError: Config or schema file has invalid syntax
- ConfigValidationError: Config values fail validation
- SchemaLoadError: A device schema document could not be loaded
"""

from typing import Any, Optional

from .base import SysexCtlError


class ConfigurationError(SysexCtlError):
    """Configuration is invalid or cannot be loaded."""
    pass


class ConfigFileInvalidError(ConfigurationError):
    """Configuration file has invalid JSON syntax."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Initialize config file invalid error.

        Args:
            file_path: Path to the invalid file
            parse_error: The parsing error message
        """
        user_msg = "Configuration file has invalid syntax"
        recovery = (
            "Check for common JSON errors:\n"
            "  - Trailing commas (remove commas after last item)\n"
            "  - Missing quotes around strings\n"
            "  - Unclosed braces or brackets\n"
            f"  - Edit: {file_path}"
        )

        if "trailing comma" in parse_error.lower():
            user_msg = "Configuration file has a trailing comma"
            recovery = (
                f"Remove the trailing comma from {file_path}\n"
                "JSON doesn't allow commas after the last item in an object or array"
            )
        elif "expecting" in parse_error.lower():
            user_msg = "Configuration file has a syntax error"

        super().__init__(
            user_message=user_msg,
            technical_message=f"JSON parse error in {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=recovery,
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """Configuration values fail validation."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: Optional[str] = None):
        """
        Initialize config validation error.

        Args:
            field: The configuration field that failed validation
            value: The invalid value
            error_msg: Why the value is invalid
            file_path: Path to the config file (optional)
        """
        user_msg = f"Invalid configuration value for '{field}': {error_msg}"

        recovery = f"Update the '{field}' value in your configuration"
        if file_path:
            recovery += f"\nConfig file: {file_path}"

        if "schema_dirs" in field:
            recovery += "\nEach entry must be a directory holding *.json device schemas"
        elif "timeout" in field:
            recovery += "\nThe timeout is given in milliseconds, e.g. 500"

        super().__init__(
            user_message=user_msg,
            technical_message=f"Config validation failed for {field}={value}: {error_msg}",
            recoverable=True,
            recovery_hint=recovery,
        )
        self.field = field
        self.value = value
        self.file_path = file_path


class SchemaLoadError(ConfigurationError):
    """A device schema document is unreadable or inconsistent."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            user_message=f"Could not load device schema {file_path}",
            technical_message=f"Schema {file_path}: {reason}",
            recoverable=False,
            recovery_hint=reason,
        )
        self.file_path = file_path
        self.reason = reason
