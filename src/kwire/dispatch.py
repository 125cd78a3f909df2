""" Request dispatch. A :class:`Dispatcher` sits behind one request channel
    and turns each typed request into a reply: it looks up the route for the
    request type, announces Busy on the broadcast channel, invokes the
    route, sends the reply (or an error reply if the route raised), and
    announces Idle no matter what happened in between.

    The :class:`ShellDispatcher` serves the execution channel and is the only
    path into the :class:`kwire.handler.ShellHandler`; the
    :class:`ControlDispatcher` serves the control channel and never waits
    for the handler, so a shutdown or interrupt is answered even while a
    long execution is in progress.
"""

from __future__ import annotations

import logging
import threading

from .protocol import catalog
from .protocol import content
from .protocol import fields
from .protocol.errors import UnsupportedMessage


logger = logging.getLogger(__name__)


class Dispatcher:
    """ Base class for the per-channel dispatchers. Subclasses populate
        *routes*, a dictionary mapping a request type tag to a method that
        accepts the typed request message and returns the reply content,
        or None if the request type has no reply.

        The *iopub* argument is the :class:`kwire.transport.publish.Server`
        used for the Busy/Idle bracket; *session* is the kernel session that
        stamps every reply.
    """

    def __init__(self, name, iopub, session):

        self.name = name
        self.iopub = iopub
        self.session = session
        self.routes = dict()

        # Actions to run once the current request is completely finished,
        # after the Idle status is queued. Only touched by the one thread
        # that runs the owning channel.

        self.deferred = list()


    def route(self, message):
        """ Return the route for *message*, or raise
            :class:`kwire.protocol.errors.UnsupportedMessage` if this
            dispatcher does not handle its type.
        """

        try:
            return self.routes[message.msg_type]
        except KeyError:
            raise UnsupportedMessage(message.msg_type, self.name)


    def dispatch(self, message, channel):
        """ Handle one request that arrived on *channel*, which is the
            :class:`kwire.transport.request.Server` the reply goes back out
            on. A request type with no route is logged and produces no
            reply and no status events.
        """

        try:
            route = self.route(message)
        except UnsupportedMessage as exc:
            logger.warning("%s: %s", self.name, exc)
            return

        parent = message.header
        self.deferred = list()

        self.publish_status(fields.BUSY, parent)

        try:
            self._dispatch(route, message, channel)
        finally:
            self.publish_status(fields.IDLE, parent)

        deferred = self.deferred
        self.deferred = list()

        for action in deferred:
            action()


    def _dispatch(self, route, message, channel):

        error = None

        try:
            body = route(message)
        except Exception as exc:
            logger.debug("%s: %s raised %s", self.name, message.msg_type, repr(exc))
            error = catalog.exception_record(exc)
            body = None

        if error is not None:
            try:
                reply = catalog.create_error_reply(message, error, self.session)
            except UnsupportedMessage:
                # Requests with no reply variant cannot carry the error
                # back; the best we can do is say so locally.
                logger.error("%s: %s failed:\n%s", self.name, message.msg_type, '\n'.join(error['traceback']))
                return
        elif body is None:
            if catalog.lookup(message.msg_type).reply is None:
                return

            # Every request with a reply variant gets exactly one reply.
            logger.error("%s: handler returned no reply for %s", self.name, message.msg_type)
            record = dict(name='MissingReply', message='no reply produced for ' + message.msg_type, traceback=list())
            reply = catalog.create_error_reply(message, record, self.session)
        else:
            if isinstance(body, content.ErrorReply) and body.msg_type is None:
                body.msg_type = catalog.reply_type(message)
            reply = catalog.create_reply(message, body, self.session)

        # Delivery failures are logged by the channel. One that raises is
        # logged here, so that deferred actions still run.

        try:
            channel.send(reply)
        except Exception:
            logger.exception("%s: failed to send %s", self.name, reply.msg_type)


    def publish_status(self, state, parent=None):

        body = content.Status(execution_state=state)
        self.iopub.publish(body, parent=parent)


# end of class Dispatcher



class ShellDispatcher(Dispatcher):
    """ Routes for the execution channel. Every call into the *handler* is
        made while holding *handler_lock*, so at most one handler call is in
        progress; comm messages are resolved through the *registry*, a
        :class:`kwire.comm.CommRegistry`. The *kernel*, if provided, is
        asked to stop after a shutdown request has been answered.
    """

    def __init__(self, iopub, session, handler, registry, handler_lock=None, kernel=None):

        Dispatcher.__init__(self, 'shell', iopub, session)

        if handler_lock is None:
            handler_lock = threading.Lock()

        self.handler = handler
        self.registry = registry
        self.handler_lock = handler_lock
        self.kernel = kernel

        self.routes[fields.KERNEL_INFO_REQUEST] = self.req_kernel_info
        self.routes[fields.EXECUTE_REQUEST] = self.req_execute
        self.routes[fields.COMPLETE_REQUEST] = self.req_complete
        self.routes[fields.IS_COMPLETE_REQUEST] = self.req_is_complete
        self.routes[fields.INSPECT_REQUEST] = self.req_inspect
        self.routes[fields.COMM_INFO_REQUEST] = self.req_comm_info
        self.routes[fields.COMM_OPEN] = self.req_comm_open
        self.routes[fields.COMM_MSG] = self.req_comm_msg
        self.routes[fields.COMM_CLOSE] = self.req_comm_close
        self.routes[fields.SHUTDOWN_REQUEST] = self.req_shutdown


    def call(self, method, message):

        with self.handler_lock:
            return method(message)


    def req_kernel_info(self, message):
        return self.call(self.handler.handle_info_request, message)


    def req_execute(self, message):
        return self.call(self.handler.handle_execute_request, message)


    def req_complete(self, message):
        return self.call(self.handler.handle_complete_request, message)


    def req_is_complete(self, message):
        return self.call(self.handler.handle_is_complete_request, message)


    def req_inspect(self, message):
        return self.call(self.handler.handle_inspect_request, message)


    def req_comm_info(self, message):

        comms = self.registry.comms(message.content.target_name)
        return content.CommInfoReply(comms=comms)


    def req_comm_open(self, message):

        request = message.content
        self.registry.open(request.comm_id, request.target_name, fields.FRONTEND, request.data, message)


    def req_comm_msg(self, message):
        self.registry.route_comm_msg(message.content.comm_id, message)


    def req_comm_close(self, message):
        self.registry.close(message.content.comm_id, message)


    def req_shutdown(self, message):

        restart = message.content.restart
        self.handler.shutdown(restart)

        if self.kernel is not None:
            self.deferred.append(lambda: self.kernel.request_shutdown(restart))

        return content.ShutdownReply(restart=restart)


# end of class ShellDispatcher



class ControlDispatcher(Dispatcher):
    """ Routes for the control channel. Nothing here takes the handler
        lock: :func:`kwire.handler.ShellHandler.interrupt` and
        :func:`kwire.handler.ShellHandler.shutdown` are called directly, out
        of band with respect to whatever the execution channel is doing.
    """

    def __init__(self, iopub, session, handler, kernel=None):

        Dispatcher.__init__(self, 'control', iopub, session)

        self.handler = handler
        self.kernel = kernel

        self.routes[fields.SHUTDOWN_REQUEST] = self.req_shutdown
        self.routes[fields.INTERRUPT_REQUEST] = self.req_interrupt


    def req_shutdown(self, message):

        restart = message.content.restart
        self.handler.shutdown(restart)

        if self.kernel is not None:
            self.deferred.append(lambda: self.kernel.request_shutdown(restart))

        return content.ShutdownReply(restart=restart)


    def req_interrupt(self, message):

        self.handler.interrupt()
        return content.InterruptReply()


# end of class ControlDispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
