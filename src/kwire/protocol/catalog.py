""" The closed catalog of message types. :func:`classify` turns a raw
    message into a typed one by its header type tag; :func:`create_reply` and
    :func:`create_error_reply` build replies correlated with the request that
    produced them.
"""

from __future__ import annotations

import traceback
from typing import Dict, Optional, Type

from . import content
from .errors import UnknownMessageType, UnsupportedMessage
from .message import Header, Message


variants = (
    content.KernelInfoRequest,
    content.KernelInfoReply,
    content.ExecuteRequest,
    content.ExecuteReply,
    content.ExecuteInput,
    content.ExecuteResult,
    content.ExecuteError,
    content.Stream,
    content.CompleteRequest,
    content.CompleteReply,
    content.IsCompleteRequest,
    content.IsCompleteReply,
    content.InspectRequest,
    content.InspectReply,
    content.CommInfoRequest,
    content.CommInfoReply,
    content.CommOpen,
    content.CommMsg,
    content.CommClose,
    content.ShutdownRequest,
    content.ShutdownReply,
    content.InterruptRequest,
    content.InterruptReply,
    content.Status,
)

catalog: Dict[str, Type[content.Content]] = dict()

for variant in variants:
    catalog[variant.msg_type] = variant

del variant


def lookup(msg_type) -> Type[content.Content]:
    """ Return the content class for *msg_type*. Anything outside the closed
        set raises :class:`UnknownMessageType`.
    """

    try:
        return catalog[msg_type]
    except (KeyError, TypeError):
        raise UnknownMessageType(msg_type)



def classify(raw: Message) -> Message:
    """ Return a new :class:`Message` whose content is the typed variant
        named by ``raw.header.msg_type``. A message that is already typed
        is returned as-is.
    """

    if isinstance(raw.content, content.Content):
        return raw

    variant = lookup(raw.header.msg_type)
    typed = variant.from_dict(raw.content)

    return Message(raw.header, typed, raw.parent_header, raw.metadata, raw.identities, raw.buffers)



def create(body: content.Content, session, parent: Optional[Header] = None, metadata=None) -> Message:
    """ Create a new outgoing message carrying *body*, stamped with the
        kernel *session* identity. The *parent* header, if given, correlates
        this message with the request that caused it.
    """

    msg_type = body.msg_type
    lookup(msg_type)

    header = Header.create(msg_type, session)
    return Message(header, body, parent, metadata)



def create_reply(request: Message, body: content.Content, session) -> Message:
    """ Create the reply to *request*. The reply header always uses the
        kernel *session*, never the requester's; the parent header is the
        request header; the routing identities are copied so the reply
        returns to the front end that asked.
    """

    reply = create(body, session, parent=request.header)
    reply.identities = list(request.identities)
    return reply



def reply_type(request: Message) -> str:
    """ Return the canonical reply tag for *request*, or raise
        :class:`UnsupportedMessage` if the request variant has no reply.
    """

    variant = lookup(request.header.msg_type)

    if variant.reply is None:
        raise UnsupportedMessage(request.header.msg_type, 'reply')

    return variant.reply.msg_type



def create_error_reply(request: Message, exception, session) -> Message:
    """ Create an error reply to *request*. The correlation rules are those
        of :func:`create_reply`; the type tag is the one a successful reply
        would have carried. The *exception* may be an exception instance or
        a record as returned by :func:`exception_record`.
    """

    if isinstance(exception, BaseException):
        record = exception_record(exception)
    else:
        record = exception

    body = content.ErrorReply.from_exception(reply_type(request), record)
    return create_reply(request, body, session)



def exception_record(exception: BaseException):
    """ Describe *exception* as {name, message, traceback}, the traceback
        being a list of formatted lines.
    """

    formatted = traceback.format_exception(type(exception), exception, exception.__traceback__)

    record = dict()
    record['name'] = type(exception).__name__
    record['message'] = str(exception)
    record['traceback'] = [line.rstrip('\n') for line in formatted]
    return record


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
