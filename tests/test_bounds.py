"""Tests for value bounds."""

import pytest
from pydantic import TypeAdapter, ValidationError

from sysexctl.bounds import Bound, MidiNotesBound, NoteBlock, RangeBound, ValuesBound
from sysexctl.exceptions import (
    BadNoteSyntaxError,
    MissingValueError,
    ShortReadError,
    TooManyValuesError,
    UnknownValueError,
    ValueOutOfBoundError,
)
from sysexctl.schema import IndexedControl, SchemaRegistry


@pytest.fixture
def play_values():
    return ValuesBound(values=[{"name": "Hold", "sysex": 0}, {"name": "NoteOn", "sysex": 1}])


@pytest.fixture
def bend_range():
    return RangeBound(lo=1, hi=12, offset=1)


@pytest.fixture
def seq_notes():
    return MidiNotesBound(max_len=64, offset=24, rest=0x7F, block_size=32)


@pytest.mark.unit
class TestValuesBound:
    """Test enumerations of named values."""

    def test_encode_decode(self, play_values):
        assert play_values.encode("NoteOn") == 1
        assert play_values.decode(0) == "Hold"

    def test_unknown_name_lists_expected(self, play_values):
        with pytest.raises(UnknownValueError) as exc_info:
            play_values.encode("Loud")
        assert "Hold, NoteOn" in exc_info.value.recovery_hint

    def test_match_text(self, play_values):
        match = play_values.match_text("NoteOn")
        assert match.wire == b"\x01"
        assert match.text == "NoteOn"
        assert match.bound is play_values

    def test_match_wire(self, play_values):
        match, pos = play_values.match_wire(b"\x00\x01", 1)
        assert match.text == "NoteOn"
        assert pos == 2

    def test_match_wire_unknown_byte(self, play_values):
        assert play_values.match_wire(b"\x05", 0) is None

    def test_match_wire_past_end(self, play_values):
        with pytest.raises(ShortReadError):
            play_values.match_wire(b"", 0)

    def test_hex_string_codes(self):
        bound = ValuesBound(values=[{"name": "All", "sysex": "0x10"}])
        assert bound.encode("All") == 0x10

    def test_duplicate_codes_rejected(self):
        with pytest.raises(ValidationError):
            ValuesBound(values=[{"name": "A", "sysex": 1}, {"name": "B", "sysex": 1}])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValidationError):
            ValuesBound(values=[{"name": "A", "sysex": 1}, {"name": "A", "sysex": 2}])

    @pytest.mark.parametrize("code", [0x80, -1, "0xff", "loud"])
    def test_codes_must_be_7_bit(self, code):
        with pytest.raises(ValidationError):
            ValuesBound(values=[{"name": "A", "sysex": code}])


@pytest.mark.unit
class TestRangeBound:
    """Test integer ranges with a wire offset."""

    def test_encode_subtracts_offset(self, bend_range):
        assert bend_range.encode(1) == 0
        assert bend_range.encode(12) == 11

    def test_decode_adds_offset(self, bend_range):
        assert bend_range.decode(0) == 1
        assert bend_range.decode(11) == 12

    @pytest.mark.parametrize("value", [0, 13])
    def test_encode_out_of_range(self, bend_range, value):
        with pytest.raises(ValueOutOfBoundError) as exc_info:
            bend_range.encode(value)
        assert "between 1 and 12" in exc_info.value.recovery_hint

    def test_decode_out_of_range(self, bend_range):
        with pytest.raises(ValueOutOfBoundError):
            bend_range.decode(12)

    def test_match_text(self, bend_range):
        match = bend_range.match_text("12")
        assert match.wire == b"\x0b"
        assert match.text == "12"

    def test_match_text_not_a_number(self, bend_range):
        with pytest.raises(UnknownValueError):
            bend_range.match_text("twelve")

    def test_match_wire(self, bend_range):
        match, pos = bend_range.match_wire(b"\x05", 0)
        assert match.text == "6"
        assert pos == 1

    def test_match_wire_out_of_range(self, bend_range):
        assert bend_range.match_wire(b"\x0c", 0) is None

    def test_lo_above_hi_rejected(self):
        with pytest.raises(ValidationError):
            RangeBound(lo=5, hi=1)

    def test_must_fit_a_byte(self):
        with pytest.raises(ValidationError):
            RangeBound(lo=0, hi=200)

    def test_describe(self, bend_range):
        assert bend_range.describe() == "1..12"


@pytest.mark.unit
class TestMidiNotesBound:
    """Test note sequences and their transmission blocks."""

    def test_encode_note_adds_offset(self, seq_notes):
        assert seq_notes.encode_note("C4") == 60 + 24
        assert seq_notes.encode_note("_") == 0x7F

    def test_note_colliding_with_rest_rejected(self, seq_notes):
        # G7 is 103, which would travel as the rest byte
        with pytest.raises(ValueOutOfBoundError):
            seq_notes.encode_note("G7")

    def test_note_above_byte_rejected(self, seq_notes):
        with pytest.raises(ValueOutOfBoundError):
            seq_notes.encode_note("C9")

    def test_decode_note(self, seq_notes):
        assert seq_notes.decode_note(84) == "C4"
        assert seq_notes.decode_note(0x7F) == "_"
        assert seq_notes.decode_note(5) == "?5"

    def test_render_stops_at_terminator(self, seq_notes):
        assert seq_notes.render(bytes([84, 0x7F, 0x00, 84])) == ["C4", "_"]

    def test_match_text(self, seq_notes):
        match = seq_notes.match_text("C4,_,D#4")
        assert match.wire == bytes([84, 0x7F, 87])
        assert match.text == "C4,_,D#4"
        assert match.block_offset == 0

    def test_match_text_empty(self, seq_notes):
        with pytest.raises(MissingValueError):
            seq_notes.match_text("")

    def test_match_text_too_long(self, seq_notes):
        with pytest.raises(TooManyValuesError) as exc_info:
            seq_notes.match_text(",".join(["C4"] * 65))
        assert exc_info.value.maximum == 64

    def test_match_text_empty_token(self, seq_notes):
        with pytest.raises(BadNoteSyntaxError):
            seq_notes.match_text("C4,,D4")

    def test_blocks_of_40_notes(self, seq_notes):
        wire = bytes(range(30, 70))
        blocks = seq_notes.blocks(wire)

        assert [(b.offset, b.length) for b in blocks] == [(0, 32), (32, 8)]
        assert all(len(b.payload) == 32 for b in blocks)
        assert blocks[1].payload[8:] == bytes(24)
        assert blocks[0].payload + blocks[1].payload[:8] == wire

    def test_single_short_block(self, seq_notes):
        blocks = seq_notes.blocks(bytes([84]))
        assert blocks == [NoteBlock(0, 1, bytes([84]) + bytes(31))]

    def test_full_sequence(self, seq_notes):
        blocks = seq_notes.blocks(bytes([84] * 64))
        assert [(b.offset, b.length) for b in blocks] == [(0, 32), (32, 32)]

    def test_query_blocks(self, seq_notes):
        assert seq_notes.query_blocks() == [NoteBlock(0, 32), NoteBlock(32, 32)]

    def test_query_blocks_uneven(self):
        bound = MidiNotesBound(max_len=40, block_size=32)
        assert bound.query_blocks() == [NoteBlock(0, 32), NoteBlock(32, 8)]

    def test_match_wire(self, seq_notes):
        match, pos = seq_notes.match_wire(bytes([0x20, 0x02, 84, 85]), 0)
        assert match.block_offset == 32
        assert match.wire == bytes([84, 85])
        assert match.text == "C4,C#4"
        assert pos == 4

    def test_match_wire_past_max_len(self, seq_notes):
        assert seq_notes.match_wire(bytes([63, 2, 84, 84]), 0) is None

    def test_match_wire_truncated(self, seq_notes):
        with pytest.raises(ShortReadError):
            seq_notes.match_wire(bytes([0, 4, 84]), 0)


@pytest.mark.unit
class TestBoundDiscriminator:
    """Test that schema documents pick the bound kind by its type tag."""

    def test_type_tags(self):
        adapter = TypeAdapter(list[Bound])
        bounds = adapter.validate_python([
            {"type": "values", "values": [{"name": "On", "sysex": 1}]},
            {"type": "range", "lo": 1, "hi": 16, "offset": 1},
            {"type": "midi_notes", "max_len": 64},
        ])
        assert [type(b) for b in bounds] == [ValuesBound, RangeBound, MidiNotesBound]

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            TypeAdapter(Bound).validate_python({"type": "float", "lo": 0, "hi": 1})


def bundled_bounds(kind):
    """Every bound of ``kind`` declared in the bundled schemas, including mode fields."""
    params = []
    for device in SchemaRegistry().devices:
        for control in device.all_controls():
            owners = [(control.name, control.bounds)]
            if isinstance(control, IndexedControl):
                owners.append((f"{control.name}/index", [control.range]))
            for mode in control.modes:
                owners += [(f"{control.name}:{mode.name}.{field.name}", field.bounds) for field in mode.fields]
            for name, bounds in owners:
                for i, bound in enumerate(bounds):
                    if isinstance(bound, kind):
                        params.append(pytest.param(bound, id=f"{device.name}-{name}-{i}"))
    return params


def wire_bytes_outside(bound: RangeBound) -> list[int]:
    candidates = [bound.lo - bound.offset - 1, bound.hi - bound.offset + 1]
    return [byte for byte in candidates if 0 <= byte <= 0x7F]


@pytest.mark.unit
class TestBundledBounds:
    """Every value of every bundled bound survives both directions."""

    def test_bundled_schemas_declare_bounds(self):
        assert bundled_bounds(ValuesBound)
        assert bundled_bounds(RangeBound)

    @pytest.mark.parametrize("bound", bundled_bounds(ValuesBound))
    def test_every_value_name(self, bound):
        for value in bound.values:
            assert bound.decode(value.sysex) == value.name
            assert bound.encode(value.name) == value.sysex
            assert bound.match_text(value.name).wire == bytes([value.sysex])
            match, _ = bound.match_wire(bytes([value.sysex]), 0)
            assert match.text == value.name

    @pytest.mark.parametrize("bound", bundled_bounds(ValuesBound))
    def test_undeclared_bytes_unmatched(self, bound):
        declared = {value.sysex for value in bound.values}
        for byte in range(0x80):
            if byte not in declared:
                assert bound.match_wire(bytes([byte]), 0) is None

    @pytest.mark.parametrize("bound", bundled_bounds(RangeBound))
    def test_every_value_in_range(self, bound):
        for value in range(bound.lo, bound.hi + 1):
            byte = bound.encode(value)
            assert 0 <= byte <= 0x7F
            assert bound.decode(byte) == value
            assert bound.encode(bound.decode(byte)) == byte
            assert bound.match_text(str(value)).wire == bytes([byte])
            match, _ = bound.match_wire(bytes([byte]), 0)
            assert match.text == str(value)

    @pytest.mark.parametrize("bound", bundled_bounds(RangeBound))
    def test_values_outside_rejected(self, bound):
        for value in (bound.lo - 1, bound.hi + 1):
            with pytest.raises(ValueOutOfBoundError):
                bound.encode(value)
            with pytest.raises(ValueOutOfBoundError):
                bound.match_text(str(value))
        for byte in wire_bytes_outside(bound):
            with pytest.raises(ValueOutOfBoundError):
                bound.decode(byte)
            assert bound.match_wire(bytes([byte]), 0) is None
