"""Tests for the exception hierarchy and error handling utilities."""

import logging

import pytest

from sysexctl.exceptions import (
    DecodeError,
    ErrorContext,
    MidiPortError,
    MidiSendError,
    NoMatchingBoundsError,
    ParseError,
    SysexCtlError,
    UnknownValueError,
    UnknownVendorError,
    ValueOutOfBoundError,
    collect_errors,
    format_error_for_display,
    wrap_midi_error,
)


@pytest.mark.unit
class TestHierarchy:
    def test_parse_errors_are_recoverable(self):
        error = UnknownValueError("Loud", expected=["Hold", "NoteOn"])
        assert isinstance(error, ParseError)
        assert isinstance(error, SysexCtlError)
        assert error.recoverable
        assert str(error) == "Unknown value 'Loud'"

    def test_full_message_includes_hint(self):
        error = UnknownValueError("Loud", expected=["Hold"])
        assert error.get_full_message() == "Unknown value 'Loud'\n\nSuggestion: Expected one of: Hold"

    def test_decode_error_position(self):
        error = UnknownVendorError(1)
        assert isinstance(error, DecodeError)
        assert error.position == 1
        assert "at byte 1" in error.technical_message

    def test_no_matching_bounds_keeps_causes(self):
        causes = [ValueOutOfBoundError("17", 1, 16), UnknownValueError("17", expected=["All"])]
        error = NoMatchingBoundsError("17", causes)
        assert error.causes == causes
        assert "between 1 and 16" in error.recovery_hint
        assert "All" in error.recovery_hint


@pytest.mark.unit
class TestHandlers:
    """Test the error handling helpers."""

    def test_format_custom_error(self):
        message, hint = format_error_for_display(UnknownValueError("Loud", expected=["Hold"]))
        assert message == "Unknown value 'Loud'"
        assert hint == "Expected one of: Hold"

    def test_format_standard_error(self):
        message, hint = format_error_for_display(KeyError("x"))
        assert message.startswith("KeyError")
        assert hint is None

    def test_wrap_midi_error(self):
        assert isinstance(wrap_midi_error(OSError("busy"), "MicroBrute"), MidiPortError)
        assert isinstance(wrap_midi_error(OSError("gone"), "MicroBrute", sending=True), MidiSendError)

    def test_wrap_keeps_own_errors(self):
        error = MidiSendError("MicroBrute")
        assert wrap_midi_error(error, "MicroBrute") is error

    def test_error_context_logs_and_reraises(self, caplog):
        with caplog.at_level(logging.ERROR):
            with pytest.raises(UnknownVendorError):
                with ErrorContext("decode reply"):
                    raise UnknownVendorError(1)
        assert "Failed to decode reply" in caplog.text

    def test_error_context_can_swallow(self):
        with ErrorContext("probe", re_raise=False) as ctx:
            raise ValueError("nope")
        assert isinstance(ctx.error, ValueError)

    def test_collector(self):
        collector = collect_errors("load schemas")
        with collector.try_operation("a.json"):
            pass
        with collector.try_operation("b.json"):
            raise UnknownValueError("x")

        assert collector.error_count == 1
        assert collector.success_count == 1
        assert "b.json: Unknown value 'x'" in collector.get_summary()
