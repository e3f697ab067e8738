"""Reply accumulator: folds decoded replies into control values.

Replies can arrive in any order and a single query may be answered by
several frames (one per note block), so values are keyed by control
identity (``Name``, ``Name/Index`` or ``Name:Mode.Field``) and note blocks
are placed by their block offset. ``feed`` runs on mido's input thread
while the caller waits on the main thread; all state sits behind one
condition variable.
"""

import logging
import threading
import time
from typing import Optional

from .bounds import MidiNotesBound
from .decoder import WireDecoder
from .exceptions import DecodeError
from .schema import Device
from .tree import BlockNode, DeviceNode, RootNode, ValueNode, display_key

logger = logging.getLogger(__name__)


class ReplyAccumulator:
    """
    Collects replies for one exchange with a device.

    Example:
        ```python
        acc = ReplyAccumulator(WireDecoder(), device)
        port.subscribe(lambda ts, data: acc.feed(data))
        port.send_all(messages)
        acc.wait(len(messages), timeout=0.5)
        print(acc.results())
        ```
    """

    def __init__(self, decoder: Optional[WireDecoder] = None, device: Optional[Device] = None):
        """
        Initialize the accumulator.

        Args:
            decoder: Decoder for incoming frames
            device: Only keep replies from this device, None for any
        """
        self.decoder = decoder or WireDecoder()
        self.device = device
        self._cond = threading.Condition()
        self._values: dict[str, list[str]] = {}
        self._sequences: dict[str, tuple[MidiNotesBound, dict[int, int]]] = {}
        self.received = 0
        self.dropped = 0

    def feed(self, message) -> bool:
        """
        Decode one frame and fold it in.

        Never raises: frames that fail to decode are logged and dropped.

        Returns:
            True if the frame was folded in
        """
        try:
            tree = self.decoder.decode(message)
        except DecodeError as e:
            logger.debug(f"Ignoring frame: {e.technical_message}")
            with self._cond:
                self.dropped += 1
            return False
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed frame {message!r}: {e}")
            with self._cond:
                self.dropped += 1
            return False
        return self.fold(tree)

    def fold(self, tree: RootNode) -> bool:
        """Fold an already decoded tree in."""
        if self.device is not None:
            device_node = next((n for n in tree.walk() if isinstance(n, DeviceNode)), None)
            if device_node is None or device_node.device.name != self.device.name:
                logger.debug("Ignoring reply from another device")
                return False

        folded = False
        with self._cond:
            for path in tree.paths():
                leaf = path[-1]
                key = display_key(path)
                if key is None:
                    continue
                if isinstance(leaf, BlockNode):
                    _, cells = self._sequences.setdefault(key, (leaf.bound, {}))
                    for i, byte in enumerate(leaf.notes):
                        cells[leaf.block.offset + i] = byte
                    self._values.setdefault(key, [])
                elif isinstance(leaf, ValueNode):
                    self._values[key] = [leaf.match.text]
                else:
                    continue
                folded = True
            if folded:
                self.received += 1
                self._cond.notify_all()
        return folded

    def wait(self, expected: int, timeout: float) -> bool:
        """
        Block until ``expected`` replies were folded or ``timeout`` seconds pass.

        Returns:
            True if all expected replies arrived
        """
        deadline = time.monotonic() + timeout
        with self._cond:
            while self.received < expected:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True

    def results(self) -> dict[str, list[str]]:
        """Snapshot of values so far; may be partial."""
        with self._cond:
            results = {key: list(values) for key, values in self._values.items()}
            for key, (bound, cells) in self._sequences.items():
                results[key] = bound.render(_contiguous(cells))
            return results


def _contiguous(cells: dict[int, int]) -> bytes:
    """Bytes from position 0 up to the first gap."""
    out = bytearray()
    while len(out) in cells:
        out.append(cells[len(out)])
    return bytes(out)
