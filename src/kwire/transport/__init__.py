"""ZeroMQ transport: one Server class per transport role."""

from .base import (
    TransportError,
    TransportPortError,
)

from . import request
from . import publish
from . import heartbeat


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
