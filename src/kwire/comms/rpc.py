""" JSON-RPC over a comm. Each comm_msg carries one JSON-RPC 2.0 object in
    its data: a call ``{"id", "method", "params"}``, a notification (a call
    with no id), or a response ``{"id", "result"}`` / ``{"id", "error"}``.
    Calls flow both ways: the front end calls methods registered here, and
    the kernel calls methods on the front end via :func:`RpcComm.request`.
"""

from __future__ import annotations

import inspect
import itertools
import logging
import threading

from .. import comm as comm_module


logger = logging.getLogger(__name__)

VERSION = '2.0'

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class RpcError(Exception):
    """ The other side answered a call with an error object. """

    def __init__(self, code, message, data=None):
        Exception.__init__(self, message)
        self.code = code
        self.message = message
        self.data = data


class PendingRequest:
    """ A kernel to front end call awaiting its response. The id is locally
        unique, so the response handler can tie an incoming response to the
        request that generated it.
    """

    def __init__(self, id, method):
        self.id = id
        self.method = method
        self.response = None
        self.event = threading.Event()


    def _complete(self, response):
        """ Locally store the response and signal any callers blocking via
            :func:`wait` to proceed.
        """

        self.response = response
        self.event.set()


    def wait(self, timeout=None):
        """ Block until the response arrives. The response is always
            returned; it will be None if the request is still pending after
            *timeout* seconds.
        """

        self.event.wait(timeout)
        return self.response


# end of class PendingRequest



class RpcComm:
    """ Wrap an open :class:`kwire.comm.Comm` so that inbound messages are
        treated as JSON-RPC. Methods callable by the front end are added with
        :func:`register`; anything not registered is answered with a
        'method not found' error.
    """

    def __init__(self, comm, methods=None):

        self.comm = comm
        self.methods = dict()
        self.pending = dict()
        self.lock = threading.Lock()
        self.ids = itertools.count(1)

        if methods is not None:
            for name, method in methods.items():
                self.register(name, method)

        comm.on_msg(self.rpc_incoming)
        comm.on_close(self._closed)


    def register(self, name, method):
        self.methods[name] = method


    def rpc_incoming(self, message):
        """ All inbound comm messages are filtered through this method. """

        data = message.content.data

        if not isinstance(data, dict):
            logger.warning("comm %s: ignoring non-object RPC message %s", self.comm.comm_id, repr(data))
            return

        if 'method' in data:
            self._call(data, message)
        elif 'id' in data and ('result' in data or 'error' in data):
            self._resolve(data)
        else:
            logger.warning("comm %s: ignoring malformed RPC message %s", self.comm.comm_id, repr(data))


    def _call(self, data, message):

        id = data.get('id')
        name = data['method']
        params = data.get('params')

        if params is None:
            params = list()

        try:
            method = self.methods[name]
        except KeyError:
            self._error(id, METHOD_NOT_FOUND, 'method not found: ' + str(name), message)
            return

        if isinstance(params, dict):
            args = ()
            kwargs = params
        elif isinstance(params, list):
            args = params
            kwargs = dict()
        else:
            self._error(id, INVALID_PARAMS, 'params must be an array or an object', message)
            return

        try:
            inspect.signature(method).bind(*args, **kwargs)
        except TypeError as exc:
            self._error(id, INVALID_PARAMS, str(exc), message)
            return
        except ValueError:
            # No signature available, as for some builtins; let the call
            # itself decide.
            pass

        try:
            result = method(*args, **kwargs)
        except Exception as exc:
            logger.exception("comm %s: RPC method %s failed", self.comm.comm_id, name)
            self._error(id, INTERNAL_ERROR, "%s: %s" % (type(exc).__name__, exc), message)
            return

        if id is None:
            return

        response = dict(jsonrpc=VERSION, id=id, result=result)
        self.comm.send(response, parent=message.header)


    def _error(self, id, code, text, message):

        if id is None:
            logger.warning("comm %s: notification failed: %s", self.comm.comm_id, text)
            return

        error = dict(code=code, message=text)
        response = dict(jsonrpc=VERSION, id=id, error=error)
        self.comm.send(response, parent=message.header)


    def _resolve(self, data):

        with self.lock:
            pending = self.pending.pop(data['id'], None)

        if pending is None:
            logger.warning("comm %s: response for unknown request id %s", self.comm.comm_id, repr(data['id']))
            return

        pending._complete(data)


    def request(self, method, params=None, timeout=None):
        """ Call *method* on the front end and block until it answers,
            returning the result. An error response raises :class:`RpcError`;
            no response within *timeout* seconds raises :class:`TimeoutError`.
        """

        with self.lock:
            id = next(self.ids)
            pending = PendingRequest(id, method)
            self.pending[id] = pending

        call = dict(jsonrpc=VERSION, id=id, method=method)
        if params is not None:
            call['params'] = params

        self.comm.send(call)
        response = pending.wait(timeout)

        if response is None:
            with self.lock:
                self.pending.pop(id, None)
            raise TimeoutError("no response to %s within %s seconds" % (method, timeout))

        if 'error' in response:
            error = response['error']
            raise RpcError(error.get('code'), error.get('message'), error.get('data'))

        return response.get('result')


    def notify(self, method, params=None):
        """ Send an event to the front end; no response is expected. """

        call = dict(jsonrpc=VERSION, method=method)
        if params is not None:
            call['params'] = params

        self.comm.send(call)


    def _closed(self, message):

        # Nobody is going to answer the outstanding requests now.

        with self.lock:
            pending = tuple(self.pending.values())
            self.pending.clear()

        for request in pending:
            error = dict(code=INTERNAL_ERROR, message='comm closed')
            request._complete(dict(jsonrpc=VERSION, id=request.id, error=error))


# end of class RpcComm



def serve(registry: comm_module.CommRegistry, target_name, methods, opened=None):
    """ Register *target_name* with the *registry* so that every comm the
        front end opens for it is served as an :class:`RpcComm` exposing
        *methods*, a dictionary of callables. The optional *opened* callback
        receives each new :class:`RpcComm`.
    """

    def open_target(comm, message):
        rpc = RpcComm(comm, methods)
        if opened is not None:
            opened(rpc)

    registry.register_target(target_name, open_target)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
