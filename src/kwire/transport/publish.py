"""ZeroMQ broadcast channel for the IOPub role.

Any thread may hand a message to :func:`Server.send`; a single background
thread owns the PUB socket and publishes queued messages in the order each
producer enqueued them. Nothing is received on this socket, and having no
subscriber at all is not an error.
"""

from __future__ import annotations

import logging
import queue
import threading

import zmq

from ..protocol import catalog
from ..protocol import wire
from ..protocol.errors import DecodeError
from . import base


logger = logging.getLogger(__name__)

_stop = object()


class Server:
    """ Send broadcasts via a ZeroMQ PUB socket bound to *endpoint*.

        :ivar endpoint: The endpoint this server is bound to.
        :ivar port: The port this server is bound to.
    """

    name = 'iopub'

    def __init__(self, session, endpoint):

        self.session = session

        self.socket = base.socket(zmq.PUB)

        try:
            self.endpoint, self.port = base.bind(self.socket, endpoint)
        except base.TransportPortError:
            self.socket.close()
            raise

        # A SimpleQueue is safe for any number of producers; the only
        # consumer is the thread running run().

        self.queue = queue.SimpleQueue()

        self.sent = 0
        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name=self.name, daemon=True)


    def start(self):
        self.thread.start()


    def stop(self, timeout=1):
        self.shutdown = True
        self.queue.put(_stop)

        if self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout)

        self.socket.close(linger=base.flush_linger)


    def send(self, message):
        """ Queue a fully formed :class:`kwire.protocol.message.Message` for
            broadcast. This method never blocks on the socket.
        """

        self.queue.put(message)


    def publish(self, body, parent=None, metadata=None):
        """ Create a broadcast message carrying *body*, a
            :class:`kwire.protocol.content.Content` instance, correlated
            with the *parent* header if one is given, and queue it. The
            created message is returned.
        """

        message = catalog.create(body, self.session, parent=parent, metadata=metadata)
        self.send(message)
        return message


    def run(self):

        while self.shutdown == False:
            try:
                message = self.queue.get(timeout=base.poll_interval / 1000)
            except queue.Empty:
                continue

            if message is _stop:
                break

            self._pub_outgoing(message)

        # Flush anything that arrived before the stop request.

        while True:
            try:
                message = self.queue.get(block=False)
            except queue.Empty:
                break

            if message is not _stop:
                self._pub_outgoing(message)


    def _pub_outgoing(self, message):

        try:
            frames = wire.encode(message, self.session)
        except DecodeError:
            logger.exception("iopub: cannot encode %s", message.msg_type)
            return

        try:
            self.socket.send_multipart(frames)
        except zmq.ZMQError as exc:
            logger.error("iopub: failed to publish %s: %s", message.msg_type, exc)
            return

        self.sent += 1
        logger.debug("iopub: published %s", message.msg_type)


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
