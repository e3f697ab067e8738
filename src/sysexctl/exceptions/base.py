"""Root of the sysexctl error tree.

Errors come from two directions and are handled differently:

- text typed by the user (``ParseError``): reported once with a hint and
  the command stops before anything is sent
- frames received from a device (``DecodeError``): logged and dropped,
  the exchange goes on with the next frame

Device and config errors sit beside them. The CLI catches ``SysexCtlError``
at the command boundary and prints ``get_full_message()``; logs get
``technical_message``, which can name byte positions and raw values.
"""

from typing import Optional


class SysexCtlError(Exception):
    """
    Base exception for all sysexctl errors.

    Attributes:
        user_message: One line naming the bad key, value, frame or port
        technical_message: Log line, e.g. with the offending byte position
        recoverable: False only when the command cannot continue
        recovery_hint: What to type or check instead, if known
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        """
        Args:
            user_message: Printed by the CLI after ``ERROR:``
            technical_message: Logged instead of the user message when given
            recoverable: True when a caller can skip the input and go on
            recovery_hint: Printed under the error as a suggestion
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """User message followed by the suggestion, if there is one."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"
