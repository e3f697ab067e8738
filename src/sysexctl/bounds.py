"""Value bounds and their text/wire conversions.

A bound describes how one control value is written by the user and how it
travels on the wire. There are three kinds, told apart by their ``type``
tag in schema documents:

- ``values``: a named enumeration, one byte per name
- ``range``: an inclusive integer interval, ``wire = value - offset``
- ``midi_notes``: a sequence of note names, ``wire = note + offset``, sent
  in fixed-size blocks

Every kind converts in both directions. Text conversions raise
``ParseError`` subclasses; wire conversions return ``None`` when the bytes
do not belong to the bound so the decoder can try the next one.
"""

from dataclasses import dataclass
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from .exceptions import (
    BadNoteSyntaxError,
    MissingValueError,
    ShortReadError,
    TooManyValuesError,
    UnknownValueError,
    ValueOutOfBoundError,
)
from .notes import is_note, note_name, parse_note

REST_TOKEN = "_"
UNKNOWN_NOTE_PREFIX = "?"


def _coerce_byte(value):
    """Accept ``"0x3a"`` style hex strings wherever a byte is expected."""
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            raise ValueError(f"'{value}' is not a byte (use 58 or \"0x3a\")")
    return value


SysexByte = Annotated[int, BeforeValidator(_coerce_byte), Field(ge=0, le=0x7F)]
"""A 7-bit SysEx data byte, written as an integer or a hex string."""


@dataclass(frozen=True, slots=True)
class BoundMatch:
    """
    A value matched against one bound.

    Attributes:
        bound: The bound that accepted the value
        wire: Value bytes as they travel on the wire (unpadded for notes)
        text: Display text of the value
        block_offset: Position of ``wire`` within a note sequence, if any
    """

    bound: "Bound"
    wire: bytes
    text: str
    block_offset: Optional[int] = None


class ValueName(BaseModel):
    """One named value of an enumeration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    sysex: SysexByte


class ValuesBound(BaseModel):
    """Enumeration of named values."""

    model_config = ConfigDict(frozen=True)

    type: Literal["values"] = "values"
    values: list[ValueName] = Field(min_length=1)

    @field_validator("values")
    @classmethod
    def validate_unique(cls, v: list[ValueName]) -> list[ValueName]:
        names = [value.name for value in v]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate value names in {names}")
        codes = [value.sysex for value in v]
        if len(set(codes)) != len(codes):
            raise ValueError(f"Duplicate value codes in {codes}")
        return v

    @property
    def names(self) -> list[str]:
        return [value.name for value in self.values]

    def encode(self, name: str) -> int:
        for value in self.values:
            if value.name == name:
                return value.sysex
        raise UnknownValueError(name, expected=self.names)

    def decode(self, byte: int) -> str:
        for value in self.values:
            if value.sysex == byte:
                return value.name
        raise UnknownValueError(f"0x{byte:02x}", expected=self.names)

    def match_text(self, text: str) -> BoundMatch:
        return BoundMatch(self, bytes([self.encode(text)]), text)

    def match_wire(self, data: bytes, pos: int) -> Optional[tuple[BoundMatch, int]]:
        if pos >= len(data):
            raise ShortReadError(pos)
        byte = data[pos]
        for value in self.values:
            if value.sysex == byte:
                return BoundMatch(self, bytes([byte]), value.name), pos + 1
        return None

    def describe(self) -> str:
        return " | ".join(self.names)


class RangeBound(BaseModel):
    """Inclusive integer range with an optional wire offset."""

    model_config = ConfigDict(frozen=True)

    type: Literal["range"] = "range"
    lo: int
    hi: int
    offset: int = 0

    @model_validator(mode="after")
    def validate_range(self) -> "RangeBound":
        if self.lo > self.hi:
            raise ValueError(f"Range lo {self.lo} is above hi {self.hi}")
        if self.lo - self.offset < 0 or self.hi - self.offset > 0x7F:
            raise ValueError(
                f"Range {self.lo}..{self.hi} with offset {self.offset} does not fit a 7-bit byte"
            )
        return self

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def encode(self, value: int) -> int:
        """Display value to wire byte."""
        if not self.contains(value):
            raise ValueOutOfBoundError(str(value), self.lo, self.hi)
        return value - self.offset

    def decode(self, byte: int) -> int:
        """Wire byte to display value."""
        value = byte + self.offset
        if not self.contains(value):
            raise ValueOutOfBoundError(str(value), self.lo, self.hi)
        return value

    def parse_int(self, text: str) -> int:
        try:
            return int(text.strip())
        except ValueError:
            raise UnknownValueError(text)

    def match_text(self, text: str) -> BoundMatch:
        value = self.parse_int(text)
        return BoundMatch(self, bytes([self.encode(value)]), str(value))

    def match_wire(self, data: bytes, pos: int) -> Optional[tuple[BoundMatch, int]]:
        if pos >= len(data):
            raise ShortReadError(pos)
        value = data[pos] + self.offset
        if not self.contains(value):
            return None
        return BoundMatch(self, bytes([data[pos]]), str(value)), pos + 1

    def describe(self) -> str:
        return f"{self.lo}..{self.hi}"


@dataclass(frozen=True, slots=True)
class NoteBlock:
    """One transmission block of a note sequence."""

    offset: int
    length: int
    payload: bytes = b""


class MidiNotesBound(BaseModel):
    """
    Sequence of note names.

    Text is a comma separated list such as ``C4,_,D#4``, where ``_`` is a
    rest. On the wire each note is ``note + offset``; rests use the
    ``rest`` byte and ``0x00`` ends the sequence.

    Sequences are sent in blocks of ``block_size``: the notes are padded
    with ``0x00`` up to ``max_len`` and every block carries its
    ``(offset, length, payload)``. Only as many blocks as the notes need
    are sent, and the last block's length is the remainder.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["midi_notes"] = "midi_notes"
    max_len: int = Field(ge=1, le=0x7F)
    offset: int = Field(default=0, ge=-0x7F, le=0x7F)
    rest: SysexByte = 0x7F
    block_size: int = Field(default=32, ge=1, le=0x7F)

    def encode_note(self, token: str) -> int:
        token = token.strip()
        if token == REST_TOKEN:
            return self.rest
        if not token:
            raise BadNoteSyntaxError(token)
        wire = parse_note(token) + self.offset
        if wire <= 0 or wire > 0x7F or wire == self.rest:
            raise ValueOutOfBoundError(token)
        return wire

    def decode_note(self, byte: int) -> str:
        """Render one non-terminator byte."""
        if byte == self.rest:
            return REST_TOKEN
        value = byte - self.offset
        if is_note(value):
            return note_name(value)
        return f"{UNKNOWN_NOTE_PREFIX}{byte}"

    def render(self, wire: bytes) -> list[str]:
        """Render sequence bytes, stopping at the first ``0x00``."""
        tokens = []
        for byte in wire:
            if byte == 0x00:
                break
            tokens.append(self.decode_note(byte))
        return tokens

    def match_text(self, text: str) -> BoundMatch:
        tokens = [t for t in text.split(",")] if text.strip() else []
        if not tokens:
            raise MissingValueError(text)
        if len(tokens) > self.max_len:
            raise TooManyValuesError(text, len(tokens), self.max_len)
        wire = bytes(self.encode_note(token) for token in tokens)
        return BoundMatch(self, wire, ",".join(self.render(wire)), block_offset=0)

    def match_wire(self, data: bytes, pos: int) -> Optional[tuple[BoundMatch, int]]:
        if pos + 2 > len(data):
            raise ShortReadError(pos, 2)
        block_offset, length = data[pos], data[pos + 1]
        if block_offset + length > self.max_len or length > self.block_size:
            return None
        start = pos + 2
        if start + length > len(data):
            raise ShortReadError(len(data), start + length - len(data))
        wire = bytes(data[start:start + length])
        return (
            BoundMatch(self, wire, ",".join(self.render(wire)), block_offset=block_offset),
            start + length,
        )

    def blocks(self, wire: bytes) -> list[NoteBlock]:
        """Split sequence bytes into transmission blocks."""
        padded = wire + bytes(self.max_len - len(wire))
        blocks = []
        remaining = len(wire)
        offset = 0
        while remaining > 0:
            length = min(self.block_size, remaining)
            blocks.append(NoteBlock(offset, length, padded[offset:offset + self.block_size]))
            remaining -= length
            offset += self.block_size
        return blocks

    def query_blocks(self) -> list[NoteBlock]:
        """Blocks to request when reading the whole sequence back."""
        return [
            NoteBlock(offset, min(self.block_size, self.max_len - offset))
            for offset in range(0, self.max_len, self.block_size)
        ]

    def describe(self) -> str:
        return f"up to {self.max_len} notes (e.g. C4,D#4,{REST_TOKEN})"


Bound = Annotated[
    Union[ValuesBound, RangeBound, MidiNotesBound],
    Field(discriminator="type"),
]
