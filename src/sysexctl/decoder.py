"""Wire decoder: received SysEx frames to command trees.

The decoder is a recursive-descent match of the frame against the schema
registry, always using the ``reply`` form of every wire code:

::

    F0                           start of exclusive
    <vendor prefix>              first vendor whose prefix matches
    <device id> <sub id>         first device of that vendor; sub id checked
    <msg id>                     carried into the tree, not checked
    <context>                    plain or indexed, as declared by the device
    <control code> [<index>]     control, or indexed control plus index byte
    [<mode code> <field code>]   only for controls with modes
    <value bytes>                first bound, in declared order, that matches
    [00 ...]                     trailing padding, ignored
    F7                           end of exclusive

Decoding keeps no state between calls, so one decoder can serve the MIDI
input thread and the main thread at once. Every failure is a
``DecodeError``; callers drop the frame and carry on.
"""

import logging
from typing import Optional, Union

from .bounds import BoundMatch, MidiNotesBound, NoteBlock
from .exceptions import (
    DecodeError,
    EmptyMessageError,
    ShortReadError,
    UnexpectedByteError,
    UnknownControlCodeError,
    UnknownDeviceCodeError,
    UnknownVendorError,
    UnmatchedValueError,
    ValueOutOfBoundError,
)
from .schema import Control, Device, IndexedControl, SchemaRegistry, Vendor, get_registry
from .tree import (
    SYSEX_END,
    SYSEX_START,
    BlockNode,
    ControlNode,
    DeviceNode,
    FieldNode,
    IndexedControlNode,
    ModeNode,
    RootNode,
    ValueNode,
    VendorNode,
)

logger = logging.getLogger(__name__)

FORM = "reply"


class WireDecoder:
    """Decodes received frames against the schema registry."""

    def __init__(self, registry: Optional[SchemaRegistry] = None):
        self.registry = registry or get_registry()

    def decode(self, message: Union[bytes, bytearray, list[int]]) -> RootNode:
        """
        Decode one frame.

        Args:
            message: Complete frame starting with ``F0``

        Returns:
            Command tree with exactly one leaf: a ``BlockNode`` for note
            sequences, a ``ValueNode`` for everything else

        Raises:
            DecodeError: The frame does not match any schema entry
        """
        data = bytes(message)
        if not data:
            raise EmptyMessageError()

        _expect(data, 0, bytes([SYSEX_START]))
        pos = 1

        vendor = self._match_vendor(data, pos)
        pos += len(vendor.sysex)

        device = self._match_device(vendor, data, pos)
        pos += len(device.sysex)

        _expect(data, pos, bytes([device.sub_id]))
        pos += 1

        _need(data, pos)
        msg_id = data[pos]
        pos += 1

        root = RootNode()
        device_node = root.add(VendorNode(vendor)).add(DeviceNode(device, msg_id))

        control, context = self._match_control(device, data, pos)
        pos += len(context) + len(control.sysex.for_form(FORM))

        if isinstance(control, IndexedControl):
            _need(data, pos)
            try:
                index = control.range.decode(data[pos])
            except ValueOutOfBoundError:
                raise UnmatchedValueError(control.name, pos)
            node = device_node.add(IndexedControlNode(device, control, FORM, index, context))
            pos += 1
        else:
            node = device_node.add(ControlNode(device, control, FORM, context))

        bounds = control.bounds
        if control.modes:
            mode = _first_prefix(control.modes, data, pos)
            if mode is None:
                raise UnknownControlCodeError(device.name, pos)
            node = node.add(ModeNode(mode, FORM))
            pos += len(mode.sysex.for_form(FORM))

            field = _first_prefix(mode.fields, data, pos)
            if field is None:
                raise UnknownControlCodeError(device.name, pos)
            node = node.add(FieldNode(field, FORM))
            pos += len(field.sysex.for_form(FORM))
            bounds = field.bounds

        match, pos = self._match_bounds(control, bounds, data, pos)
        end = pos
        while end < len(data) and data[end] == 0x00:
            end += 1

        if isinstance(match.bound, MidiNotesBound):
            # Padding stays in the payload, after the block length
            start = pos - len(match.wire)
            block = NoteBlock(match.block_offset, len(match.wire), bytes(data[start:end]))
            node.add(BlockNode(match.bound, block, match))
        else:
            node.add(ValueNode(match))

        _expect(data, end, bytes([SYSEX_END]))

        return root

    def try_decode(self, message) -> Optional[RootNode]:
        """Decode a frame, logging and swallowing decode errors."""
        try:
            return self.decode(message)
        except DecodeError as e:
            logger.debug(f"Dropped frame {bytes(message).hex(' ')}: {e.technical_message}")
            return None

    def _match_vendor(self, data: bytes, pos: int) -> Vendor:
        _need(data, pos)
        for vendor in self.registry.vendors:
            prefix = bytes(vendor.sysex)
            if data[pos:pos + len(prefix)] == prefix:
                return vendor
        raise UnknownVendorError(pos)

    @staticmethod
    def _match_device(vendor: Vendor, data: bytes, pos: int) -> Device:
        _need(data, pos)
        for device in vendor.devices:
            code = bytes(device.sysex)
            if data[pos:pos + len(code)] == code:
                return device
        raise UnknownDeviceCodeError(vendor.name, pos)

    @staticmethod
    def _match_control(device: Device, data: bytes, pos: int) -> tuple[Control, bytes]:
        _need(data, pos)
        candidates: list[tuple[Control, bytes]] = []
        plain = device.contexts.plain.for_form(FORM)
        indexed = device.contexts.indexed.for_form(FORM)
        if data[pos:pos + len(plain)] == plain:
            candidates += [(c, plain) for c in device.controls]
        if data[pos:pos + len(indexed)] == indexed:
            candidates += [(c, indexed) for c in device.indexed_controls]
        if not candidates:
            raise UnexpectedByteError(pos, plain, data[pos:pos + len(plain)])

        for control, context in candidates:
            start = pos + len(context)
            code = control.sysex.for_form(FORM)
            if data[start:start + len(code)] == code:
                return control, context

        start = pos + len(candidates[0][1])
        _need(data, start)
        raise UnknownControlCodeError(device.name, start)

    @staticmethod
    def _match_bounds(control: Control, bounds, data: bytes, pos: int) -> tuple[BoundMatch, int]:
        short: Optional[ShortReadError] = None
        for bound in bounds:
            try:
                result = bound.match_wire(data, pos)
            except ShortReadError as e:
                short = short or e
                continue
            if result is not None:
                return result
        if short is not None:
            raise short
        raise UnmatchedValueError(control.name, pos)


def _need(data: bytes, pos: int, count: int = 1) -> None:
    if pos + count > len(data):
        raise ShortReadError(len(data), pos + count - len(data))


def _expect(data: bytes, pos: int, expected: bytes) -> None:
    _need(data, pos, len(expected))
    found = data[pos:pos + len(expected)]
    if found != expected:
        raise UnexpectedByteError(pos, expected, found)


def _first_prefix(items, data: bytes, pos: int):
    for item in items:
        code = item.sysex.for_form(FORM)
        if data[pos:pos + len(code)] == code:
            return item
    return None
