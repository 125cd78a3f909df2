""" A class representation of a kernel protocol message: the header, the
    header of the message it answers (if any), free-form metadata, and the
    content. Routing identities ride along for ROUTER sockets so that a reply
    finds its way back to the front end that asked.
"""

from __future__ import annotations

import datetime
import uuid
from typing import Any, Dict, List, Optional

from . import fields
from .errors import DecodeError


def _now():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class Header:
    """ The :class:`Header` identifies one message. A fresh header is created
        for every outgoing message via :func:`create`; inbound headers are
        rebuilt with :func:`from_dict`.

        :ivar msg_id: Unique identifier for this message.
        :ivar session: Session id of the sender.
        :ivar username: Username of the sender.
        :ivar date: ISO 8601 timestamp of creation.
        :ivar msg_type: The type tag naming the content schema.
        :ivar version: Protocol version of the sender.
    """

    def __init__(self, msg_id, session, username, date, msg_type, version=fields.PROTOCOL_VERSION):

        self.msg_id = msg_id
        self.session = session
        self.username = username
        self.date = date
        self.msg_type = msg_type
        self.version = version


    def __eq__(self, other):
        if not isinstance(other, Header):
            return NotImplemented
        return self.to_dict() == other.to_dict()


    def __repr__(self):
        return 'Header(%s)' % (self.to_dict())


    @classmethod
    def create(cls, msg_type, session):
        """ Create a new header for an outgoing message of *msg_type*, using
            the identity of the supplied :class:`Session`.
        """

        return cls(uuid.uuid4().hex, session.session_id, session.username, _now(), msg_type)


    @classmethod
    def from_dict(cls, header):
        """ Rebuild a :class:`Header` from its decoded JSON dictionary. All
            header keys are required; a missing key raises :class:`DecodeError`.
        """

        if not isinstance(header, dict):
            raise DecodeError('header is not a JSON object')

        arguments = dict()
        for key in fields.HEADER_KEYS:
            try:
                arguments[key] = header[key]
            except KeyError:
                raise DecodeError('header is missing ' + repr(key))

        return cls(**arguments)


    def to_dict(self) -> Dict[str, Any]:

        header = dict()
        for key in fields.HEADER_KEYS:
            header[key] = getattr(self, key)

        return header


# end of class Header



class Message:
    """ One logical message. The *content* is a plain dictionary for a raw
        message straight off the wire, and a typed
        :class:`kwire.protocol.content.Content` instance once the message has
        been through :func:`kwire.protocol.catalog.classify`.

        :ivar identities: ROUTER identity frames, empty for broadcasts.
        :ivar header: The :class:`Header` of this message.
        :ivar parent_header: The :class:`Header` this message answers, or None.
        :ivar metadata: Free-form metadata dictionary.
        :ivar content: The message body.
        :ivar buffers: Trailing binary frames, if any.
    """

    def __init__(self, header, content, parent_header=None, metadata=None, identities=None, buffers=None):

        self.header = header
        self.content = content
        self.parent_header = parent_header

        if metadata is None:
            metadata = dict()
        if identities is None:
            identities = list()
        if buffers is None:
            buffers = list()

        self.metadata = metadata
        self.identities = list(identities)
        self.buffers = list(buffers)


    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented

        return (self.header == other.header and
                self.parent_header == other.parent_header and
                self.metadata == other.metadata and
                self.content == other.content and
                self.identities == other.identities and
                self.buffers == other.buffers)


    def __repr__(self):
        return '%s(%s, parent=%s)' % (self.msg_type, repr(self.content), self.parent_id)


    @property
    def msg_type(self) -> str:
        return self.header.msg_type


    @property
    def msg_id(self) -> str:
        return self.header.msg_id


    @property
    def parent_id(self) -> Optional[str]:
        if self.parent_header is None:
            return None
        return self.parent_header.msg_id


    def content_dict(self) -> Dict[str, Any]:
        """ Return the content as a plain dictionary, regardless of whether
            this message has been classified.
        """

        try:
            to_dict = self.content.to_dict
        except AttributeError:
            return self.content
        else:
            return to_dict()


# end of class Message


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
