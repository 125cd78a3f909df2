""" Sub-protocols layered over comms: :mod:`kwire.comms.rpc` for JSON-RPC
    method calls, and :mod:`kwire.comms.bridge` for comms that negotiate a
    plain TCP side channel.
"""

from . import rpc
from . import bridge


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
