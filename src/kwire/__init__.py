""" Python implementation of the Jupyter kernel wire protocol. This includes
    the signed message codec, the closed catalog of message types, one
    ZeroMQ channel per kernel role, request dispatch with Busy/Idle status
    reporting, and the comm registry that multiplexes sub-protocols over
    the kernel channels.

    A language is plugged in by subclassing :class:`ShellHandler`.
"""

__version__ = '0.3.0'

# Utility components.

from . import json

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import config

# Primary public-facing interfaces.

from .handler import ShellHandler
from .comm import Comm, CommRegistry
from . import dispatch
from .kernel import Kernel
from . import comms
from . import echo

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
