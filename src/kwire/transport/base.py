"""Shared pieces of the ZeroMQ transport.

One context serves every socket in the process. Sockets are created and
bound in the constructor of each Server, so that a failure to bind surfaces
immediately, as a startup error, rather than inside a background thread.
"""

from __future__ import annotations

import logging
from typing import Tuple

import zmq


logger = logging.getLogger(__name__)

zmq_context = zmq.Context()

# How long, in milliseconds, a loop blocks in poll() before checking
# whether it has been asked to stop.
poll_interval = 100

# How long, in milliseconds, a closing broadcast socket keeps trying to
# deliver messages it has already accepted.
flush_linger = 1000


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportPortError(TransportError):
    """A required socket could not be bound."""


def bind(socket: zmq.Socket, endpoint: str) -> Tuple[str, int]:
    """ Bind *socket* to *endpoint*, a ``transport://address:port`` string.
        A port of 0 binds a random available port. Returns the endpoint and
        the port actually bound.
    """

    base, _, port = endpoint.rpartition(':')

    try:
        port = int(port)
    except ValueError:
        raise TransportPortError('invalid endpoint: ' + repr(endpoint))

    try:
        if port == 0:
            port = socket.bind_to_random_port(base)
        else:
            socket.bind(endpoint)
    except zmq.ZMQBaseError as exc:
        raise TransportPortError("cannot bind %s: %s" % (endpoint, exc)) from exc

    endpoint = "%s:%d" % (base, port)
    logger.debug("bound %s", endpoint)
    return endpoint, port


def socket(kind: int) -> zmq.Socket:
    """ Return a new socket of *kind* from the shared context, configured
        to drop pending messages on close.
    """

    new = zmq_context.socket(kind)
    new.setsockopt(zmq.LINGER, 0)
    return new


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
