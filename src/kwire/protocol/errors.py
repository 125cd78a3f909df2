"""Protocol-level exceptions.

Transport failures live in :mod:`kwire.transport.base`; everything here is
about the meaning of a message, not about moving it.
"""


class ProtocolError(Exception):
    """Base class for all protocol-layer errors."""


class DecodeError(ProtocolError):
    """An inbound envelope could not be turned into a message."""


class SignatureError(DecodeError):
    """The envelope signature does not match its frames."""


class UnknownMessageType(DecodeError):
    """The header names a message type outside the closed catalog."""

    def __init__(self, kind):
        ProtocolError.__init__(self, 'unknown message type: ' + repr(kind))
        self.kind = kind


class MissingField(DecodeError):
    """A message lacks a field its content schema requires."""

    def __init__(self, kind, field):
        ProtocolError.__init__(self, "%s is missing required field %s" % (kind, repr(field)))
        self.kind = kind
        self.field = field


class UnsupportedMessage(ProtocolError):
    """A well-formed message arrived where nothing can handle it, such as
       a reply-only type on a request channel.
    """

    def __init__(self, kind, channel):
        ProtocolError.__init__(self, "%s is not supported on the %s channel" % (kind, channel))
        self.kind = kind
        self.channel = channel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
