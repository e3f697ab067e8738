"""Pydantic models for device schema documents.

A schema document describes one vendor: its SysEx prefix, its devices and,
for every device, the controls that can be read and written over SysEx.
Documents are JSON files validated with Pydantic v2; once loaded every
model is frozen and shared by the whole process.

Example document (abridged):

```json
{
  "name": "Arturia",
  "sysex": ["0x00", "0x20", "0x6b"],
  "devices": [{
    "name": "MicroBrute",
    "sysex": ["0x05"],
    "port_prefix": "MicroBrute",
    "contexts": {
      "plain": {"default": ["0x01"], "query": ["0x00"]},
      "indexed": {"default": ["0x23"], "query": ["0x03"]}
    },
    "controls": [{
      "name": "Play",
      "sysex": {"default": ["0x2e"], "query": ["0x2f"]},
      "bounds": [{"type": "values", "values": [
        {"name": "Hold", "sysex": 0}, {"name": "NoteOn", "sysex": 1}]}]
    }]
  }]
}
```

Wire codes may differ between the three message forms: ``query`` (asking
the device for a value), ``update`` (writing a value) and ``reply`` (what
the device answers). A bare byte list applies to all three.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..bounds import Bound, BoundMatch, MidiNotesBound, RangeBound, SysexByte
from ..exceptions import (
    BadControlIndexError,
    BadControlSyntaxError,
    BadFieldError,
    BadModeParameterError,
    EmptyParameterError,
    NoBoundsError,
    NoMatchingBoundsError,
    ParseError,
    UnknownParameterError,
)

Form = Literal["query", "update", "reply"]
FORMS: tuple[Form, ...] = ("query", "update", "reply")

_KEY_RE = re.compile(r"^(?P<name>[^/:]+)(?:/(?P<index>[^/:]*))?(?::(?P<mode>[^/:]*))?$")


class Sysex(BaseModel):
    """Wire code that may depend on the message form."""

    model_config = ConfigDict(frozen=True)

    default: list[SysexByte] = Field(default_factory=list)
    query: Optional[list[SysexByte]] = None
    update: Optional[list[SysexByte]] = None
    reply: Optional[list[SysexByte]] = None

    @model_validator(mode="before")
    @classmethod
    def accept_bare_bytes(cls, data):
        """A bare list (or single byte) is the default for every form."""
        if isinstance(data, (list, tuple)):
            return {"default": list(data)}
        if isinstance(data, (int, str)):
            return {"default": [data]}
        return data

    def for_form(self, form: Form) -> bytes:
        code = getattr(self, form)
        return bytes(self.default if code is None else code)


class ModeField(BaseModel):
    """Named field of a control mode, with its own bounds."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    sysex: Sysex
    bounds: list[Bound] = Field(min_length=1)


class Mode(BaseModel):
    """Operating mode of a control; each mode exposes its own fields."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    sysex: Sysex
    fields: list[ModeField] = Field(min_length=1)

    @field_validator("fields")
    @classmethod
    def validate_unique_fields(cls, v: list[ModeField]) -> list[ModeField]:
        _check_unique([f.name for f in v], "field")
        return v

    def get_field(self, name: str) -> Optional[ModeField]:
        return next((f for f in self.fields if f.name == name), None)


class Control(BaseModel):
    """A single addressable device parameter."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, pattern=r"^[^/:=\s]+$")
    sysex: Sysex
    bounds: list[Bound] = Field(default_factory=list)
    modes: list[Mode] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_bounds(self) -> "Control":
        if not self.bounds and not self.modes:
            raise ValueError(f"Control '{self.name}' declares neither bounds nor modes")
        _check_unique([m.name for m in self.modes], "mode")
        return self

    @property
    def indexed(self) -> bool:
        return False

    def get_mode(self, name: str) -> Optional[Mode]:
        return next((m for m in self.modes if m.name == name), None)


class IndexedControl(Control):
    """A control repeated over a numbered range, e.g. stored sequences.

    ``range`` is the 1-based index users type; its offset maps it to the
    0-based byte on the wire.
    """

    range: RangeBound

    @property
    def indexed(self) -> bool:
        return True

    def indices(self) -> range:
        return range(self.range.lo, self.range.hi + 1)


class Contexts(BaseModel):
    """Context bytes telling plain parameter messages from indexed ones."""

    model_config = ConfigDict(frozen=True)

    plain: Sysex
    indexed: Sysex


class Device(BaseModel):
    """A device of a vendor and its controls."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    sysex: list[SysexByte] = Field(min_length=1, description="Device id byte(s)")
    sub_id: SysexByte = 0x01
    port_prefix: str = Field(min_length=1, description="MIDI port name prefix")
    contexts: Contexts
    controls: list[Control] = Field(default_factory=list)
    indexed_controls: list[IndexedControl] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_controls(self) -> "Device":
        _check_unique([c.name for c in self.all_controls()], "control")
        for form in FORMS:
            seen: dict[bytes, str] = {}
            for control in self.all_controls():
                code = control.sysex.for_form(form)
                if code in seen:
                    raise ValueError(
                        f"Controls '{seen[code]}' and '{control.name}' share "
                        f"{form} code {code.hex(' ')}"
                    )
                seen[code] = control.name
        return self

    def all_controls(self) -> list[Union[Control, IndexedControl]]:
        return [*self.controls, *self.indexed_controls]

    def get_control(self, name: str) -> Optional[Union[Control, IndexedControl]]:
        return next((c for c in self.all_controls() if c.name == name), None)

    def context(self, control: Control, form: Form) -> bytes:
        contexts = self.contexts.indexed if control.indexed else self.contexts.plain
        return contexts.for_form(form)

    def parse_key(self, text: str) -> "Key":
        """
        Parse ``Name``, ``Name/Index``, ``Name:Mode`` or ``Name/Index:Mode``.

        Raises:
            EmptyParameterError: Text is empty
            BadControlSyntaxError: Text does not follow the grammar
            UnknownParameterError: No control has that name
            BadControlIndexError: Index missing, unexpected or out of range
            BadModeParameterError: Mode missing, unexpected or unknown
        """
        text = text.strip()
        if not text:
            raise EmptyParameterError()

        match = _KEY_RE.match(text)
        if not match:
            raise BadControlSyntaxError(text)
        name, index_text, mode_name = match.group("name", "index", "mode")

        control = self.get_control(name)
        if control is None:
            raise UnknownParameterError(name, self.name)

        index = None
        if isinstance(control, IndexedControl):
            if index_text is None:
                raise BadControlIndexError(text, f"'{name}' needs an index")
            if not (index_text.isascii() and index_text.isdigit()):
                raise BadControlIndexError(text, f"'{index_text}' is not a number")
            index = int(index_text)
            if not control.range.contains(index):
                raise BadControlIndexError(
                    text, f"{index} is not within {control.range.lo}..{control.range.hi}"
                )
        elif index_text is not None:
            raise BadControlIndexError(text, f"'{name}' does not take an index")

        mode = None
        if control.modes:
            if not mode_name:
                raise BadModeParameterError(text, f"'{name}' needs one of {[m.name for m in control.modes]}")
            mode = control.get_mode(mode_name)
            if mode is None:
                raise BadModeParameterError(text, f"unknown mode '{mode_name}'")
        elif mode_name is not None:
            raise BadModeParameterError(text, f"'{name}' has no modes")

        return Key(self, control, index, mode)


@dataclass(frozen=True, slots=True)
class Key:
    """A control addressed by text: name plus optional index and mode."""

    device: Device
    control: Union[Control, IndexedControl]
    index: Optional[int] = None
    mode: Optional[Mode] = None

    @property
    def display(self) -> str:
        text = self.control.name
        if self.index is not None:
            text += f"/{self.index}"
        if self.mode is not None:
            text += f":{self.mode.name}"
        return text

    def bounds(self, field_name: Optional[str] = None) -> list[Bound]:
        """
        Bounds that apply to this key.

        Modal keys need a field name; plain keys must not have one.

        Raises:
            BadFieldError: Field unknown, or given for a key without modes
            NoBoundsError: Modal key without a field name
        """
        if self.mode is not None:
            if field_name is None:
                raise NoBoundsError(self.display)
            field = self.mode.get_field(field_name)
            if field is None:
                raise BadFieldError(field_name, self.mode.name)
            return list(field.bounds)
        if field_name is not None:
            raise BadFieldError(field_name)
        if not self.control.bounds:
            raise NoBoundsError(self.display)
        return list(self.control.bounds)

    def field(self, field_name: str) -> ModeField:
        if self.mode is None or self.mode.get_field(field_name) is None:
            raise BadFieldError(field_name, self.mode.name if self.mode else None)
        return self.mode.get_field(field_name)

    def parse_value(self, text: str) -> tuple[Optional[ModeField], BoundMatch]:
        """
        Match value text against the key's bounds in declared order.

        Modal keys take ``Field=Value``. When no bound accepts the value the
        error of a lone bound is raised as is; several failing bounds are
        wrapped in ``NoMatchingBoundsError``.
        """
        field = None
        value = text
        if self.mode is not None:
            if "=" not in text:
                raise NoBoundsError(self.display)
            field_name, value = text.split("=", 1)
            field = self.field(field_name.strip())
            bounds = list(field.bounds)
        else:
            bounds = self.bounds()

        errors: list[ParseError] = []
        for bound in bounds:
            try:
                return field, bound.match_text(value)
            except ParseError as e:
                errors.append(e)
        if len(errors) == 1:
            raise errors[0]
        raise NoMatchingBoundsError(value, errors)

    def notes_bound(self) -> Optional[MidiNotesBound]:
        """The first note-sequence bound of a plain key, if any."""
        if self.mode is not None:
            return None
        return next((b for b in self.control.bounds if isinstance(b, MidiNotesBound)), None)


class Vendor(BaseModel):
    """A manufacturer and its devices; the root of a schema document."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    sysex: list[SysexByte] = Field(min_length=1, description="Manufacturer id prefix")
    devices: list[Device] = Field(default_factory=list)

    @field_validator("devices")
    @classmethod
    def validate_unique_devices(cls, v: list[Device]) -> list[Device]:
        _check_unique([d.name for d in v], "device")
        return v

    @classmethod
    def from_json_file(cls, path: Path) -> "Vendor":
        """Load a vendor schema from a JSON file with validation."""
        with open(path) as f:
            return cls.model_validate_json(f.read())


def _check_unique(names: list[str], what: str) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Duplicate {what} name '{name}'")
        seen.add(name)
