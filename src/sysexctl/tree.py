"""Command trees.

A command tree is the shared shape of everything the codec produces: the
text parser builds one per command and the wire decoder builds one per
received frame. Every node owns the bytes it contributes to a message:

- ``head``: bytes written when the walk enters the node
- ``tail``: bytes written after all of the node's descendants

A node with one child continues the same message. A node with several
children is a *fork*: each child completes its own message, so one text
command can stand for many wire messages::

    RootNode            F0 ............................. F7
    └── VendorNode      00 20 6b
        └── DeviceNode  05 01 <msg id>
            ├── IndexedControlNode   23 3a 00            Seq/1
            │   ├── BlockNode        00 20 <32 notes>    block 1
            │   └── BlockNode        20 08 <32 notes>    block 2
            └── ...

The serializer turns every leaf into one message (see ``serializer.py``).
"""

from typing import Iterator, Optional

from .bounds import BoundMatch, MidiNotesBound, NoteBlock
from .schema.model import Control, Device, Form, IndexedControl, Mode, ModeField, Vendor

SYSEX_START = 0xF0
SYSEX_END = 0xF7


class Node:
    """Base class of all command tree nodes."""

    def __init__(self, head: bytes = b"", tail: bytes = b"", children: Optional[list["Node"]] = None):
        self.head = bytes(head)
        self.tail = bytes(tail)
        self.children: list[Node] = list(children or [])

    def add(self, child: "Node") -> "Node":
        """Append a child and return it, for chaining."""
        self.children.append(child)
        return child

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_fork(self) -> bool:
        return len(self.children) > 1

    def walk(self) -> Iterator["Node"]:
        """All nodes, depth first, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()

    def leaves(self) -> list["Node"]:
        return [node for node in self.walk() if node.is_leaf]

    def path_to(self, target: "Node") -> Optional[list["Node"]]:
        """Nodes from this one down to ``target``, or None if not below."""
        if self is target:
            return [self]
        for child in self.children:
            path = child.path_to(target)
            if path is not None:
                return [self, *path]
        return None

    def paths(self) -> Iterator[list["Node"]]:
        """Root-to-leaf node lists, one per leaf."""
        if self.is_leaf:
            yield [self]
            return
        for child in self.children:
            for path in child.paths():
                yield [self, *path]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(head={self.head.hex(' ')!r}, children={len(self.children)})"


class RootNode(Node):
    """Frames every message in ``F0 ... F7``."""

    def __init__(self):
        super().__init__(head=bytes([SYSEX_START]), tail=bytes([SYSEX_END]))


class VendorNode(Node):
    def __init__(self, vendor: Vendor):
        super().__init__(head=bytes(vendor.sysex))
        self.vendor = vendor


class DeviceNode(Node):
    """Device id, sub id and the message id shared by its messages."""

    def __init__(self, device: Device, msg_id: int = 0):
        super().__init__(head=bytes([*device.sysex, device.sub_id, msg_id & 0x7F]))
        self.device = device
        self.msg_id = msg_id & 0x7F


class ControlNode(Node):
    """Context byte(s) and control code of a plain control."""

    def __init__(self, device: Device, control: Control, form: Form, context: Optional[bytes] = None):
        if context is None:
            context = device.context(control, form)
        super().__init__(head=context + control.sysex.for_form(form))
        self.control = control
        self.context = context
        self.form = form

    @property
    def key(self) -> str:
        return self.control.name


class IndexedControlNode(ControlNode):
    """Control code followed by the 0-based wire index.

    ``index`` is the 1-based number users see; ``wire_index`` is the byte.
    """

    def __init__(
        self,
        device: Device,
        control: IndexedControl,
        form: Form,
        index: int,
        context: Optional[bytes] = None,
    ):
        super().__init__(device, control, form, context)
        self.index = index
        self.wire_index = control.range.encode(index)
        self.head += bytes([self.wire_index])

    @property
    def key(self) -> str:
        return f"{self.control.name}/{self.index}"


class ModeNode(Node):
    def __init__(self, mode: Mode, form: Form):
        super().__init__(head=mode.sysex.for_form(form))
        self.mode = mode


class FieldNode(Node):
    def __init__(self, field: ModeField, form: Form):
        super().__init__(head=field.sysex.for_form(form))
        self.field = field


class ValueNode(Node):
    """A matched value; its bytes are the value's wire bytes."""

    def __init__(self, match: BoundMatch):
        super().__init__(head=match.wire)
        self.match = match


class BlockNode(Node):
    """One block of a note sequence: offset, length and optional payload.

    Decoded blocks also keep the ``match`` they were read from.
    """

    def __init__(self, bound: MidiNotesBound, block: NoteBlock, match: Optional[BoundMatch] = None):
        super().__init__(head=bytes([block.offset, block.length]) + block.payload)
        self.bound = bound
        self.block = block
        self.match = match

    @property
    def notes(self) -> bytes:
        """Sequence bytes this block carries, without padding."""
        return self.block.payload[:self.block.length]

    @property
    def text(self) -> str:
        return ",".join(self.bound.render(self.notes))


def display_key(path: list[Node]) -> Optional[str]:
    """
    Control identity of a root-to-leaf path: ``Name``, ``Name/Index`` or
    ``Name:Mode.Field``. None when the path names no control.
    """
    key = None
    for node in path:
        if isinstance(node, ControlNode):
            key = node.key
        elif isinstance(node, ModeNode) and key is not None:
            key += f":{node.mode.name}"
        elif isinstance(node, FieldNode) and key is not None:
            key += f".{node.field.name}"
    return key
