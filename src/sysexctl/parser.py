"""Text command parser: user keys and values to command trees.

Keys follow ``Name``, ``Name/Index``, ``Name:Mode`` or ``Name/Index:Mode``.
Values are a bound-matchable token, ``Field=Value`` for modal keys, or a
comma separated note list for note sequences. Every check runs before the
tree is returned, so a tree that comes out of here always serializes.

Indexes are 1-based in text. ``IndexedControlNode`` turns them into the
0-based wire byte through the control's index range, and nothing else in
the codec converts them.
"""

import logging
from typing import Iterable, Optional, Union

from .bounds import MidiNotesBound
from .exceptions import MissingValueError, TooManyValuesError
from .schema import Control, Device, Form, IndexedControl, Key, Mode, SchemaRegistry, get_registry
from .tree import (
    BlockNode,
    ControlNode,
    DeviceNode,
    FieldNode,
    IndexedControlNode,
    ModeNode,
    Node,
    RootNode,
    ValueNode,
    VendorNode,
)

logger = logging.getLogger(__name__)


class TextCommandParser:
    """Builds update and query command trees from user text."""

    def __init__(self, registry: Optional[SchemaRegistry] = None):
        self.registry = registry or get_registry()

    def parse_update(
        self,
        device_name: str,
        key: str,
        values: Union[str, Iterable[str]],
        msg_id: int = 0,
    ) -> RootNode:
        """
        Build the tree that writes one control.

        Several value tokens are only accepted for note sequences, where
        they are joined with commas. A note sequence fans out into one
        message per transmission block.

        Raises:
            ParseError: Any problem with the device, key or values
        """
        device = self.registry.resolve_device(device_name)
        parsed = device.parse_key(key)

        tokens = [values] if isinstance(values, str) else list(values)
        tokens = [t for t in tokens if t.strip()]
        if not tokens:
            raise MissingValueError(parsed.display)
        if len(tokens) > 1:
            if parsed.notes_bound() is None:
                raise TooManyValuesError(parsed.display, len(tokens), 1)
            text = ",".join(tokens)
        else:
            text = tokens[0]

        field, match = parsed.parse_value(text)

        root, device_node = self._frame(device, msg_id)
        node = device_node.add(self._control_node(device, parsed.control, "update", parsed.index))
        if parsed.mode is not None:
            node = node.add(ModeNode(parsed.mode, "update"))
            node = node.add(FieldNode(field, "update"))

        if isinstance(match.bound, MidiNotesBound):
            for block in match.bound.blocks(match.wire):
                node.add(BlockNode(match.bound, block))
        else:
            node.add(ValueNode(match))

        logger.debug(f"Parsed update {parsed.display}={match.text} for {device.name}")
        return root

    def parse_query(
        self,
        device_name: str,
        keys: Iterable[str] = (),
        msg_id: int = 0,
    ) -> RootNode:
        """
        Build the tree that reads controls back.

        No keys means every control, every index of every indexed control,
        and every block of every note sequence.

        Raises:
            ParseError: Any problem with the device or keys
        """
        device = self.registry.resolve_device(device_name)
        parsed_keys = [device.parse_key(key) for key in keys]

        root, device_node = self._frame(device, msg_id)
        if parsed_keys:
            for parsed in parsed_keys:
                self._add_query(device_node, device, parsed.control, parsed.index, parsed.mode)
        else:
            for control in device.controls:
                self._add_query(device_node, device, control)
            for control in device.indexed_controls:
                for index in control.indices():
                    self._add_query(device_node, device, control, index)

        logger.debug(f"Parsed query of {len(root.leaves())} message(s) for {device.name}")
        return root

    def parse_key(self, device_name: str, key: str) -> Key:
        return self.registry.resolve_device(device_name).parse_key(key)

    def _frame(self, device: Device, msg_id: int) -> tuple[RootNode, DeviceNode]:
        root = RootNode()
        vendor_node = root.add(VendorNode(self.registry.vendor_of(device)))
        device_node = vendor_node.add(DeviceNode(device, msg_id))
        return root, device_node

    @staticmethod
    def _control_node(
        device: Device,
        control: Union[Control, IndexedControl],
        form: Form,
        index: Optional[int] = None,
    ) -> ControlNode:
        if isinstance(control, IndexedControl):
            return IndexedControlNode(device, control, form, index)
        return ControlNode(device, control, form)

    def _add_query(
        self,
        parent: Node,
        device: Device,
        control: Union[Control, IndexedControl],
        index: Optional[int] = None,
        mode: Optional[Mode] = None,
    ) -> None:
        node = parent.add(self._control_node(device, control, "query", index))

        if control.modes:
            modes = [mode] if mode is not None else control.modes
            for m in modes:
                mode_node = node.add(ModeNode(m, "query"))
                for field in m.fields:
                    mode_node.add(FieldNode(field, "query"))
            return

        notes = next((b for b in control.bounds if isinstance(b, MidiNotesBound)), None)
        if notes is not None:
            for block in notes.query_blocks():
                node.add(BlockNode(notes, block))
