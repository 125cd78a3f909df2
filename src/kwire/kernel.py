""" The :class:`Kernel` ties the pieces together: one session, four bound
    channels, a comm registry, and the dispatchers that connect them to a
    :class:`kwire.handler.ShellHandler`.
"""

from __future__ import annotations

import logging
import threading

from . import comm
from . import dispatch
from .protocol import content
from .protocol import fields
from .protocol.session import Session
from .transport import heartbeat
from .transport import publish
from .transport import request


logger = logging.getLogger(__name__)


class Kernel:
    """ A running kernel for one connection descriptor.

        The *connection* argument is a :class:`kwire.config.Connection`; the
        *handler* is the :class:`kwire.handler.ShellHandler` that implements
        the language. Every socket is bound here, in the constructor: a port
        that cannot be bound raises
        :class:`kwire.transport.TransportPortError`, and an unsupported
        signature scheme raises :class:`ValueError`. Either one means the
        kernel never comes up; there is no retry.

        Nothing is received until :func:`start` is called. A typical
        kernel process does little more than::

            kernel = kwire.Kernel(kwire.config.load(filename), handler)
            kernel.run()

        :ivar session: The :class:`kwire.protocol.session.Session`.
        :ivar comms: The :class:`kwire.comm.CommRegistry`.
        :ivar control: The control :class:`kwire.transport.request.Server`.
        :ivar shell: The execution :class:`kwire.transport.request.Server`.
        :ivar iopub: The broadcast :class:`kwire.transport.publish.Server`.
        :ivar heartbeat: The :class:`kwire.transport.heartbeat.Server`.
    """

    def __init__(self, connection, handler, session=None):

        self.connection = connection
        self.handler = handler

        if session is None:
            session = Session(key=connection.key, signature_scheme=connection.signature_scheme)

        self.session = session

        self.restart = False
        self.stopped = threading.Event()
        self.handler_lock = threading.Lock()

        self.servers = list()

        try:
            self._bind()
        except Exception:
            # Release whatever was already bound; the ports belong to the
            # caller again.
            for server in self.servers:
                server.socket.close()
            raise

        self.comms = comm.CommRegistry(self.iopub)
        handler.connect(self.iopub)

        self.shell.dispatcher = dispatch.ShellDispatcher(self.iopub, self.session, handler, self.comms, self.handler_lock, self)
        self.control.dispatcher = dispatch.ControlDispatcher(self.iopub, self.session, handler, self)


    def _bind(self):

        connection = self.connection

        self.iopub = publish.Server(self.session, connection.endpoint(connection.iopub_port))
        self.servers.append(self.iopub)

        self.heartbeat = heartbeat.Server(connection.endpoint(connection.hb_port))
        self.servers.append(self.heartbeat)

        self.control = request.Server('control', self.session, connection.endpoint(connection.control_port))
        self.servers.append(self.control)

        self.shell = request.Server('shell', self.session, connection.endpoint(connection.shell_port))
        self.servers.append(self.shell)


    @property
    def ports(self):
        """ The bound port for every role, as a dictionary keyed the same
            way as a connection descriptor.
        """

        ports = dict()
        ports['control_port'] = self.control.port
        ports['shell_port'] = self.shell.port
        ports['iopub_port'] = self.iopub.port
        ports['hb_port'] = self.heartbeat.port
        return ports


    def start(self):
        """ Start every channel thread, and announce the kernel on the
            broadcast channel with a 'starting' status.
        """

        for server in self.servers:
            server.start()

        self.iopub.publish(content.Status(execution_state=fields.STARTING))
        logger.info("kernel %s started: %s", self.session.session_id, self.ports)


    def request_shutdown(self, restart=False):
        """ Ask the kernel to stop; :func:`wait` returns once this is called.
            Called by the dispatchers after a shutdown reply has gone out.
        """

        self.restart = restart
        self.stopped.set()


    def wait(self, timeout=None):
        """ Block until a shutdown is requested, or *timeout* seconds have
            elapsed. Returns True if a shutdown was requested.
        """

        return self.stopped.wait(timeout)


    def stop(self):
        """ Stop every channel thread and close every socket. The broadcast
            channel goes last, so that events queued by the other channels
            are flushed before its socket closes.
        """

        self.stopped.set()

        for server in (self.control, self.shell, self.heartbeat):
            server.stop()

        self.comms.close_all()
        self.iopub.stop()

        logger.info("kernel %s stopped", self.session.session_id)


    def run(self):
        """ Start the kernel, serve until a shutdown is requested, then stop.
            Returns True if the front end asked for a restart.
        """

        self.start()

        try:
            self.wait()
        except KeyboardInterrupt:
            logger.info("kernel %s interrupted, stopping", self.session.session_id)
        finally:
            self.stop()

        return self.restart


# end of class Kernel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
