"""Message serializer: command tree to framed SysEx messages.

The walk keeps one buffer per message under construction, made of a
``head`` (bytes in wire order) and a ``tail`` stack holding closing bytes
in reverse order. Single-child nodes extend the buffer in place; forks
copy it once per child. Each leaf finishes one message as
``head + reversed(tail)``, so siblings share every byte up to their
common ancestor and there are exactly as many messages as leaves.
"""

from typing import Optional

from .tree import Node


class _Buffer:
    __slots__ = ("head", "tail")

    def __init__(self, head: Optional[bytearray] = None, tail: Optional[bytearray] = None):
        self.head = head if head is not None else bytearray()
        self.tail = tail if tail is not None else bytearray()

    def enter(self, node: Node) -> None:
        self.head += node.head
        # stored reversed so that closing order is a plain reverse at the end
        self.tail += node.tail[::-1]

    def fork(self) -> "_Buffer":
        return _Buffer(bytearray(self.head), bytearray(self.tail))

    def finish(self) -> bytes:
        return bytes(self.head + self.tail[::-1])


def serialize(tree: Node) -> list[bytes]:
    """
    Serialize a command tree into one message per leaf.

    Args:
        tree: Root of the tree, normally a ``RootNode``

    Returns:
        Complete messages in depth-first leaf order
    """
    messages: list[bytes] = []
    _walk(tree, _Buffer(), messages)
    return messages


def _walk(node: Node, buffer: _Buffer, out: list[bytes]) -> None:
    buffer.enter(node)
    if node.is_leaf:
        out.append(buffer.finish())
    elif node.is_fork:
        for child in node.children:
            _walk(child, buffer.fork(), out)
    else:
        _walk(node.children[0], buffer, out)
