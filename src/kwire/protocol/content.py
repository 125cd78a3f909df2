""" Content schemas for every message type in the closed catalog. Each
    :class:`Content` subclass names its wire type tag, the fields it requires,
    and the defaults for the fields it does not. Request variants also name
    the class of their reply, which is how error replies learn the tag they
    must carry.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from . import fields
from .errors import MissingField


class Content:
    """ The :class:`Content` base class behaves much like a small record:
        every required and defaulted field becomes an attribute, and
        :func:`to_dict` returns the JSON-ready dictionary that goes on the
        wire. Unrecognized keys arriving from a front end are preserved in
        the *extra* dictionary so that re-encoding a message does not lose
        them.

        :ivar msg_type: The wire type tag for this content.
        :ivar required: Names of fields that must be present.
        :ivar defaults: Default values for optional fields.
        :ivar reply: For request variants, the matching reply class.
    """

    msg_type = None
    required = ()
    defaults = dict()
    reply = None

    def __init__(self, /, **kwargs):

        for field in self.required:
            try:
                value = kwargs.pop(field)
            except KeyError:
                raise MissingField(self.msg_type, field)
            setattr(self, field, value)

        for field, default in self.defaults.items():
            try:
                value = kwargs.pop(field)
            except KeyError:
                # Mutable defaults must not be shared between instances.
                value = copy.copy(default)
            setattr(self, field, value)

        self.extra = kwargs


    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.msg_type == other.msg_type and self.to_dict() == other.to_dict()


    def __repr__(self):
        return '%s(%s)' % (type(self).__name__, self.to_dict())


    @classmethod
    def field_names(cls):
        return tuple(cls.required) + tuple(cls.defaults.keys())


    @classmethod
    def from_dict(cls, content):
        """ Build an instance from a decoded content dictionary. Missing
            required fields raise :class:`MissingField`.
        """

        if not isinstance(content, dict):
            raise MissingField(cls.msg_type, '<content>')

        return cls(**content)


    def to_dict(self) -> Dict[str, Any]:

        content = dict(self.extra)
        for field in self.field_names():
            content[field] = getattr(self, field)

        return content


# end of class Content



class Reply(Content):
    """ Replies carry a status; a reply arriving with status 'error' is an
        :class:`ErrorReply`, not an instance of the successful schema.
    """

    @classmethod
    def from_dict(cls, content):

        if isinstance(content, dict) and content.get('status') == fields.ERROR:
            return ErrorReply.from_dict(content, msg_type=cls.msg_type)

        return super().from_dict(content)


# end of class Reply



class ErrorReply(Content):
    """ A content-level variant of any reply: the request failed. There is
        no error tag of its own; the instance carries the tag of the
        successful reply it stands in for.

        The exception record {name, message, traceback} is flattened onto
        the conventional ``ename``, ``evalue`` and ``traceback`` keys.
    """

    required = ('ename', 'evalue')
    defaults = dict(status=fields.ERROR, traceback=list())

    def __init__(self, msg_type=None, /, **kwargs):
        self.msg_type = msg_type
        Content.__init__(self, **kwargs)


    @classmethod
    def from_dict(cls, content, msg_type=None):

        if not isinstance(content, dict):
            raise MissingField(msg_type, '<content>')

        return cls(msg_type, **content)


    @classmethod
    def from_exception(cls, msg_type, record):
        """ Build an error reply of *msg_type* from an exception record as
            returned by :func:`kwire.protocol.catalog.exception_record`.
        """

        return cls(msg_type, ename=record['name'], evalue=record['message'], traceback=record['traceback'])


    @property
    def exception(self):
        return dict(name=self.ename, message=self.evalue, traceback=self.traceback)


# end of class ErrorReply


# Execution.

class KernelInfoReply(Reply):
    msg_type = fields.KERNEL_INFO_REPLY
    required = ('protocol_version', 'implementation', 'implementation_version', 'language_info')
    defaults = dict(status=fields.OK, banner='', debugger=False, help_links=list())


class KernelInfoRequest(Content):
    msg_type = fields.KERNEL_INFO_REQUEST
    reply = KernelInfoReply


class ExecuteReply(Reply):
    msg_type = fields.EXECUTE_REPLY
    required = ('execution_count',)
    defaults = dict(status=fields.OK, user_expressions=dict())


class ExecuteRequest(Content):
    msg_type = fields.EXECUTE_REQUEST
    required = ('code',)
    defaults = dict(silent=False, store_history=True, user_expressions=dict(), allow_stdin=False, stop_on_error=True)
    reply = ExecuteReply


class ExecuteInput(Content):
    msg_type = fields.EXECUTE_INPUT
    required = ('code', 'execution_count')


class ExecuteResult(Content):
    msg_type = fields.EXECUTE_RESULT
    required = ('execution_count', 'data')
    defaults = dict(metadata=dict())


class ExecuteError(Content):
    msg_type = fields.EXECUTE_ERROR
    required = ('ename', 'evalue')
    defaults = dict(traceback=list())


class Stream(Content):
    msg_type = fields.STREAM
    required = ('name', 'text')


# Introspection.

class CompleteReply(Reply):
    msg_type = fields.COMPLETE_REPLY
    required = ('matches', 'cursor_start', 'cursor_end')
    defaults = dict(status=fields.OK, metadata=dict())


class CompleteRequest(Content):
    msg_type = fields.COMPLETE_REQUEST
    required = ('code', 'cursor_pos')
    reply = CompleteReply


class IsCompleteReply(Reply):
    msg_type = fields.IS_COMPLETE_REPLY
    required = ('status',)
    defaults = dict(indent='')


class IsCompleteRequest(Content):
    msg_type = fields.IS_COMPLETE_REQUEST
    required = ('code',)
    reply = IsCompleteReply


class InspectReply(Reply):
    msg_type = fields.INSPECT_REPLY
    required = ('found',)
    defaults = dict(status=fields.OK, data=dict(), metadata=dict())


class InspectRequest(Content):
    msg_type = fields.INSPECT_REQUEST
    required = ('code', 'cursor_pos')
    defaults = dict(detail_level=0)
    reply = InspectReply


# Comms.

class CommInfoReply(Reply):
    msg_type = fields.COMM_INFO_REPLY
    required = ('comms',)
    defaults = dict(status=fields.OK)


class CommInfoRequest(Content):
    msg_type = fields.COMM_INFO_REQUEST
    defaults = dict(target_name=None)
    reply = CommInfoReply


class CommOpen(Content):
    msg_type = fields.COMM_OPEN
    required = ('comm_id', 'target_name')
    defaults = dict(data=dict(), target_module=None)


class CommMsg(Content):
    msg_type = fields.COMM_MSG
    required = ('comm_id',)
    defaults = dict(data=dict())


class CommClose(Content):
    msg_type = fields.COMM_CLOSE
    required = ('comm_id',)
    defaults = dict(data=dict())


# Control.

class ShutdownReply(Reply):
    msg_type = fields.SHUTDOWN_REPLY
    defaults = dict(status=fields.OK, restart=False)


class ShutdownRequest(Content):
    msg_type = fields.SHUTDOWN_REQUEST
    defaults = dict(restart=False)
    reply = ShutdownReply


class InterruptReply(Reply):
    msg_type = fields.INTERRUPT_REPLY
    defaults = dict(status=fields.OK)


class InterruptRequest(Content):
    msg_type = fields.INTERRUPT_REQUEST
    reply = InterruptReply


# Broadcast.

class Status(Content):
    msg_type = fields.STATUS
    required = ('execution_state',)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
