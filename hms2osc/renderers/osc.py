"""OSC (Open Sound Control) sender over UDP.

Encodes a transformer's address and argument list as an OSC 1.0 message
using python-osc's :class:`OscMessageBuilder` and sends it as a single
datagram.  Numbers go on the wire as float32 (tag ``f``); an absent value
(``None``) goes as Nil (tag ``N``), so the message keeps its arity.

OSC message format::

    /hall/light ,fff  12.59 0.0 1.0
    /hall/presence ,N
"""

from __future__ import annotations

import logging
import socket
from typing import Sequence

from pythonosc.osc_message_builder import BuildError, OscMessageBuilder

from ..config import bind_addr_for
from ..errors import OscEncodeError

logger = logging.getLogger(__name__)


def encode_message(address: str, args: Sequence[float | None]) -> bytes:
    """Encode *address* and *args* as an OSC message datagram."""
    builder = OscMessageBuilder(address=address)
    try:
        for arg in args:
            if arg is None:
                builder.add_arg(None, OscMessageBuilder.ARG_TYPE_NIL)
            else:
                builder.add_arg(float(arg), OscMessageBuilder.ARG_TYPE_FLOAT)
        return builder.build().dgram
    except (BuildError, OverflowError, TypeError, ValueError) as exc:
        raise OscEncodeError(f"Cannot encode OSC message for {address}: {exc}") from exc


class OscUdpSender:
    """Sends OSC messages to one fixed UDP destination.

    Parameters
    ----------
    family:
        Address family of the destination (``AF_INET`` or ``AF_INET6``).
    destination:
        Socket address tuple, as returned by
        :func:`~hms2osc.config.resolve_socket_addr`.

    The socket is bound to the any-address of the destination's family
    on an ephemeral port and is only ever used to send.
    """

    def __init__(self, family: socket.AddressFamily, destination: tuple) -> None:
        self.family = family
        self.destination = destination
        self._sock = socket.socket(family, socket.SOCK_DGRAM)
        self._sock.bind(bind_addr_for(family))
        self.messages_total: int = 0
        logger.info("sending OSC to %s:%s", destination[0], destination[1])

    # -- public API -------------------------------------------------------

    def send(self, address: str, args: Sequence[float | None]) -> None:
        """Encode and send one message."""
        dgram = encode_message(address, args)
        self._sock.sendto(dgram, self.destination)
        self.messages_total += 1
        logger.debug("osc: %s %r", address, list(args))

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> "OscUdpSender":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
