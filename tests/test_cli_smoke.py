"""Smoke tests for CLI commands.

Tests that CLI commands parse correctly and don't crash. Uses Click's
CliRunner; MIDI ports are replaced by an in-memory MicroBrute.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from sysexctl.cli.main import cli
from sysexctl.midi import DevicePort

from conftest import FakePort
from test_session import FakeMicroBrute


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path: Path, fresh_registry):
    """Invoke the CLI with config and log files kept in a temp directory."""
    base = ["--config", str(tmp_path / "config.json"), "--log-file", str(tmp_path / "sysexctl.log")]

    def _invoke(*args, **kwargs):
        return runner.invoke(cli, [*base, *args], **kwargs)

    return _invoke


@pytest.fixture
def connected():
    """A fake MicroBrute behind DevicePort.for_device."""
    port = FakePort(responder=FakeMicroBrute())
    with patch.object(DevicePort, "for_device", return_value=port):
        yield port


@pytest.mark.integration
class TestCLIHelp:
    """Test that all commands have working help text."""

    def test_main_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "hidden synth parameters" in result.output
        for command in ["list", "get", "set", "reset", "detect", "encode", "decode", "config"]:
            assert command in result.output

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    @pytest.mark.parametrize("command", [["list"], ["get"], ["set"], ["encode"], ["decode"], ["config"]])
    def test_command_help(self, invoke, command):
        result = invoke(*command, "--help")
        assert result.exit_code == 0

    def test_timeout_range(self, runner):
        result = runner.invoke(cli, ["--timeout", "1", "list", "devices"])
        assert result.exit_code != 0


@pytest.mark.integration
class TestListCommands:
    def test_devices(self, invoke):
        result = invoke("list", "devices")
        assert result.exit_code == 0
        assert "MicroBrute  (Arturia)" in result.output

    def test_controls(self, invoke):
        result = invoke("list", "controls", "microbrute")
        assert result.exit_code == 0
        assert "Play" in result.output.splitlines()
        assert "Seq/[1..8]" in result.output

    def test_bounds_values(self, invoke):
        result = invoke("list", "bounds", "MicroBrute", "Play")
        assert result.exit_code == 0
        assert result.output.splitlines() == ["Hold", "NoteOn"]

    def test_bounds_range(self, invoke):
        result = invoke("list", "bounds", "MicroBrute", "BendRange")
        assert result.output.strip() == "[1..12]"

    def test_unknown_control(self, invoke):
        result = invoke("list", "bounds", "MicroBrute", "Cutoff")
        assert result.exit_code == 1
        assert "Unknown parameter 'Cutoff'" in result.output

    def test_unknown_device(self, invoke):
        result = invoke("list", "controls", "MiniBrute")
        assert result.exit_code == 1
        assert "list devices" in result.output

    @patch("sysexctl.midi.port.mido.get_output_names", return_value=["MicroBrute MIDI 1"])
    @patch("sysexctl.midi.port.mido.get_input_names", return_value=[])
    def test_ports(self, mock_inputs, mock_outputs, invoke):
        result = invoke("list", "ports")
        assert result.exit_code == 0
        assert "No MIDI input ports found." in result.output
        assert "[0] MicroBrute MIDI 1  (MicroBrute)" in result.output


@pytest.mark.integration
class TestCodecCommands:
    """Test offline encode and decode."""

    def test_encode(self, invoke):
        result = invoke("encode", "MicroBrute", "Play", "NoteOn")
        assert result.exit_code == 0
        assert result.output.strip() == "f0 00 20 6b 05 01 00 01 2e 01 f7"

    def test_encode_query(self, invoke):
        result = invoke("encode", "--query", "MicroBrute", "Seq/2")
        assert result.output.splitlines() == [
            "f0 00 20 6b 05 01 00 03 3b 01 00 20 f7",
            "f0 00 20 6b 05 01 00 03 3b 01 20 20 f7",
        ]

    def test_encode_bad_value(self, invoke):
        result = invoke("encode", "MicroBrute", "Play", "Loud")
        assert result.exit_code == 1
        assert "ERROR: Unknown value 'Loud'" in result.output
        assert "Hold, NoteOn" in result.output

    def test_encode_bad_index(self, invoke):
        result = invoke("encode", "MicroBrute", "Seq/²", "C4")
        assert result.exit_code == 1
        assert "Bad index" in result.output

    def test_encode_decode_round_trip(self, invoke):
        encoded = invoke("encode", "MicroBrute", "BendRange", "7")
        decoded = invoke("decode", encoded.output.strip())
        assert decoded.exit_code == 0
        assert decoded.output.strip() == "BendRange: 7"

    def test_sequence_round_trip(self, invoke):
        notes = ["C4", "D#4", "_", "G2"] * 10
        encoded = invoke("encode", "MicroBrute", "Seq/1", *notes)
        lines = encoded.output.splitlines()
        assert len(lines) == 2

        decoded = invoke("decode", *lines)
        assert decoded.exit_code == 0
        first, second = decoded.output.splitlines()
        assert first == f"Seq/1 [0..32]: {','.join(notes[:32])}"
        assert second == f"Seq/1 [32..40]: {','.join(notes[32:])}"

    def test_decode_split_tokens(self, invoke):
        result = invoke("decode", "f0", "00", "20", "6b", "05", "01", "00", "01", "2e", "01", "f7")
        assert result.output.strip() == "Play: NoteOn"

    def test_decode_garbage(self, invoke):
        result = invoke("decode", "f0 41 10 42 f7")
        assert result.exit_code == 1
        assert "Unknown vendor" in result.output

    def test_decode_not_hex(self, invoke):
        result = invoke("decode", "zz")
        assert result.exit_code == 2


@pytest.mark.integration
class TestDeviceCommands:
    """Test commands against an in-memory MicroBrute."""

    def test_get(self, invoke, connected):
        result = invoke("--timeout", "20", "get", "MicroBrute", "Play", "Seq/1")
        assert result.exit_code == 0
        assert result.output.splitlines() == ["Play: NoteOn", "Seq/1: C4,D4,_"]

    def test_get_missing_reply(self, invoke, connected):
        result = invoke("--timeout", "20", "get", "MicroBrute", "Play", "Step")
        assert result.exit_code == 0
        assert "Step: (no reply)" in result.output

    def test_set(self, invoke, connected):
        result = invoke("set", "MicroBrute", "Seq/1", "C4", "D4")
        assert result.exit_code == 0
        assert "1 message(s) sent" in result.output
        assert len(connected.sent) == 1

    def test_set_bad_key(self, invoke, connected):
        result = invoke("set", "MicroBrute", "Seq/9", "C4")
        assert result.exit_code == 1
        assert "Bad index" in result.output
        assert connected.sent == []

    def test_detect(self, invoke, connected):
        result = invoke("--timeout", "20", "detect", "MicroBrute")
        assert result.exit_code == 0
        assert "Arturia" in result.output
        assert "1.2.3.4" in result.output

    def test_reset_needs_confirmation(self, invoke, connected):
        result = invoke("reset", "MicroBrute", input="n\n")
        assert result.exit_code != 0
        assert connected.sent == []

    def test_reset(self, invoke, connected):
        result = invoke("reset", "MicroBrute", "--yes")
        assert result.exit_code == 0
        assert "NotePriority: LastNote" in result.output

    @patch("sysexctl.midi.port.mido.get_output_names", return_value=[])
    def test_not_connected(self, mock_outputs, invoke):
        result = invoke("get", "MicroBrute")
        assert result.exit_code == 1
        assert "No connected MicroBrute found" in result.output


@pytest.mark.integration
class TestConfigCommands:
    def test_path(self, invoke, tmp_path: Path):
        result = invoke("config", "path")
        assert result.output.strip() == str(tmp_path / "config.json")

    def test_show_defaults(self, invoke):
        result = invoke("config", "show")
        assert result.exit_code == 0
        assert "query_timeout_ms: 500" in result.output

    def test_show_field(self, invoke):
        result = invoke("config", "show", "--field", "client_name")
        assert result.output.splitlines()[0] == "client_name: sysexctl"

    def test_show_unknown_field(self, invoke):
        result = invoke("config", "show", "--field", "colour")
        assert result.exit_code == 2

    def test_reset(self, invoke, tmp_path: Path):
        result = invoke("config", "reset", "--yes")
        assert result.exit_code == 0
        assert (tmp_path / "config.json").exists()

    def test_broken_config(self, invoke, tmp_path: Path):
        (tmp_path / "config.json").write_text('{"query_timeout_ms": 500,}')
        result = invoke("config", "show")
        assert result.exit_code == 1
        assert "trailing comma" in result.output

    def test_reset_repairs_broken_config(self, invoke, tmp_path: Path):
        (tmp_path / "config.json").write_text("{")
        assert invoke("config", "reset", "--yes").exit_code == 0
        assert invoke("config", "show").exit_code == 0
