from . import fields
from . import errors
from . import message
from . import content
from . import catalog
from . import session
from . import wire

from .errors import (
    ProtocolError,
    DecodeError,
    SignatureError,
    UnknownMessageType,
    MissingField,
    UnsupportedMessage,
)
from .message import Header, Message
from .session import Session

PROTOCOL_VERSION = fields.PROTOCOL_VERSION


"""
kwire Protocol Layer
====================

This package defines the meaning of kernel protocol messages and how they
are framed and signed. It MUST NOT depend on any transport implementation;
nothing here imports ZeroMQ.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Dispatcher / Kernel (kwire.dispatch, kwire.kernel)
    Routes typed requests to the handler
    Brackets each request with busy/idle status

    │
    ▼
Message Catalog (catalog.py)
    Closed mapping of type tag -> content schema
    - classify()
    - create_reply()
    - create_error_reply()

    │
    ▼
Content Schemas (content.py)
    One class per message type, required fields and defaults

    │
    ▼
Message Model (message.py)
    Header + Message, identities, parent header, metadata

    │
    ▼
Wire Codec + Session (wire.py, session.py)
    Message <-> signed multipart frames

    │
    ▼
Field Vocabulary (fields.py)
    Canonical type tags and constants

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer (kwire.transport)
    Moves frames over ZeroMQ sockets, one thread per role

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
