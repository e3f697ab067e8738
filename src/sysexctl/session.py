"""Device session: one request/response exchange at a time with a device.

The session ties the codec to a transport port. It numbers outgoing
messages (a 7-bit counter that wraps), sends the serialized messages in
order and collects replies for the configured window:

::

    get(keys)     parse_query ─→ serialize ─→ send ─→ collect ─→ {key: values}
    set(key, v)   parse_update ─→ serialize ─→ send (stop at first failure)
    detect()      identity request ─→ identity reply
    reset()       set every plain control to its first declared value

A failed send is propagated as is and the remaining messages are not
sent. The session never retries: whether a block can be resent safely
depends on the device.
"""

import logging
import threading
from collections.abc import Callable
from typing import Iterable, Optional, Protocol, Union

from .accumulator import ReplyAccumulator
from .bounds import RangeBound, ValuesBound
from .decoder import WireDecoder
from .exceptions import DecodeError, NoReplyError
from .identity import IdentityReply, identity_request, is_identity_reply, parse_identity_reply
from .parser import TextCommandParser
from .schema import Device, SchemaRegistry, get_registry
from .serializer import serialize
from .tree import Node, display_key

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 0.5


class Transport(Protocol):
    """What a session needs from a port (see ``midi.port.DevicePort``)."""

    def send(self, data: bytes) -> None: ...

    def subscribe(self, callback: Optional[Callable[[float, bytes], None]]) -> None: ...


class DeviceSession:
    """
    Reads and writes the controls of one connected device.

    Example:
        ```python
        with DevicePort.for_device(device) as port:
            session = DeviceSession(device, port)
            session.set("Seq/1", ["C4", "D4", "_", "E4"])
            print(session.get(["Seq/1", "Play"]))
        ```
    """

    def __init__(
        self,
        device: Device,
        port: Transport,
        registry: Optional[SchemaRegistry] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize a session.

        Args:
            device: Schema of the connected device
            port: Open transport to the device
            registry: Schema registry, defaults to the shared one
            timeout: Reply collection window in seconds
        """
        self.device = device
        self.port = port
        self.registry = registry or get_registry()
        self.timeout = timeout
        self.parser = TextCommandParser(self.registry)
        self.decoder = WireDecoder(self.registry)
        self._msg_id = 0
        self._exchange_lock = threading.Lock()

    def next_msg_id(self) -> int:
        """Next message id, wrapping within 7 bits."""
        msg_id = self._msg_id
        self._msg_id = (self._msg_id + 1) & 0x7F
        return msg_id

    def send_all(self, messages: Iterable[bytes]) -> int:
        """
        Send messages in order, stopping at the first failure.

        Returns:
            Number of messages sent

        Raises:
            MidiSendError: Propagated from the port; later messages are not sent
        """
        sent = 0
        for message in messages:
            self.port.send(message)
            sent += 1
        return sent

    def get(self, keys: Iterable[str] = ()) -> dict[str, list[str]]:
        """
        Read control values from the device.

        Args:
            keys: Control keys; empty reads every control

        Returns:
            Values keyed by control identity, in query order. Controls that
            did not answer within the window are missing.

        Raises:
            ParseError: A key is invalid
            NoReplyError: Nothing at all came back
        """
        tree = self.parser.parse_query(self.device.name, list(keys), self.next_msg_id())
        messages = serialize(tree)
        accumulator = ReplyAccumulator(self.decoder, self.device)

        with self._exchange_lock:
            self.port.subscribe(lambda ts, data: accumulator.feed(data))
            try:
                self.send_all(messages)
                complete = accumulator.wait(len(messages), self.timeout)
            finally:
                self.port.subscribe(None)

        results = accumulator.results()
        if not results:
            raise NoReplyError(self.device.name, int(self.timeout * 1000))
        if not complete:
            logger.warning(
                f"Only {accumulator.received} of {len(messages)} replies arrived from {self.device.name}"
            )
        return _in_query_order(tree, results)

    def set(self, key: str, values: Union[str, Iterable[str]]) -> list[bytes]:
        """
        Write one control.

        Returns:
            The messages that were sent

        Raises:
            ParseError: Key or values are invalid; nothing is sent
            MidiSendError: A send failed; later messages are not sent
        """
        tree = self.parser.parse_update(self.device.name, key, values, self.next_msg_id())
        messages = serialize(tree)
        with self._exchange_lock:
            self.send_all(messages)
        logger.info(f"Set {key} on {self.device.name} ({len(messages)} message(s))")
        return messages

    def detect(self) -> IdentityReply:
        """
        Ask the device to identify itself.

        Raises:
            NoReplyError: No identity reply within the window
        """
        replies: list[IdentityReply] = []
        arrived = threading.Event()

        def on_frame(timestamp: float, data: bytes) -> None:
            if not is_identity_reply(data):
                return
            try:
                replies.append(parse_identity_reply(data))
                arrived.set()
            except DecodeError as e:
                logger.debug(f"Ignoring identity reply: {e.technical_message}")

        with self._exchange_lock:
            self.port.subscribe(on_frame)
            try:
                self.port.send(identity_request())
                arrived.wait(self.timeout)
            finally:
                self.port.subscribe(None)

        if not replies:
            raise NoReplyError(self.device.name, int(self.timeout * 1000))
        reply = replies[0]
        vendor = self.registry.find_vendor_by_manufacturer(reply.manufacturer)
        logger.info(f"{self.device.name} identified as {vendor.name if vendor else 'unknown vendor'}: {reply}")
        return reply

    def reset(self) -> dict[str, str]:
        """
        Set every plain control to its first declared value.

        Controls with modes or note sequences are left alone.

        Returns:
            The value written per control
        """
        written: dict[str, str] = {}
        for control in self.device.controls:
            if control.modes or not control.bounds:
                continue
            value = first_value(control.bounds[0])
            if value is None:
                continue
            self.set(control.name, value)
            written[control.name] = value
        return written


def first_value(bound) -> Optional[str]:
    """Text of a bound's first declared value, None for note sequences."""
    if isinstance(bound, ValuesBound):
        return bound.values[0].name
    if isinstance(bound, RangeBound):
        return str(bound.lo)
    return None


def _in_query_order(tree: Node, results: dict[str, list[str]]) -> dict[str, list[str]]:
    ordered: dict[str, list[str]] = {}
    for path in tree.paths():
        key = display_key(path)
        if key in results and key not in ordered:
            ordered[key] = results[key]
    for key, values in results.items():
        ordered.setdefault(key, values)
    return ordered
