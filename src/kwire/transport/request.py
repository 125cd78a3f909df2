"""ZeroMQ request/reply channel for the Control and Execution roles.

A front end talks to a ROUTER socket through a DEALER socket; the ROUTER
prefixes each inbound envelope with the identity of the sender, and a reply
sent with the same identity prefix goes back to that sender only.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import zmq

from ..protocol import wire
from ..protocol.errors import DecodeError, SignatureError
from ..protocol.message import Message
from . import base


logger = logging.getLogger(__name__)


class Server:
    """ Receive requests via a ZeroMQ ROUTER socket, and hand each one to
        the *dispatcher*. The socket is bound once, here, and never rebound;
        a front end going away does not tear the channel down.

        The *name* is the role this channel serves ('shell' or 'control')
        and is used in log messages and routing errors. The *dispatcher* is
        any object with a ``dispatch(message, channel)`` method; it is
        invoked on this channel's own thread, one message at a time.

        :ivar endpoint: The endpoint this server is bound to.
        :ivar port: The port this server is bound to.
    """

    def __init__(self, name, session, endpoint, dispatcher=None):

        self.name = name
        self.session = session
        self.dispatcher = dispatcher

        self.socket = base.socket(zmq.ROUTER)
        self.socket_lock = threading.Lock()

        try:
            self.endpoint, self.port = base.bind(self.socket, endpoint)
        except base.TransportPortError:
            self.socket.close()
            raise

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name=name, daemon=True)


    def start(self):
        self.thread.start()


    def stop(self, timeout=1):
        self.shutdown = True

        if self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout)

        with self.socket_lock:
            self.socket.close()


    def run(self):

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        while self.shutdown == False:
            try:
                sockets = dict(poller.poll(base.poll_interval))
            except zmq.ZMQError:
                if self.shutdown:
                    break
                logger.exception("%s: poll failed", self.name)
                continue

            if self.socket not in sockets:
                continue

            try:
                with self.socket_lock:
                    frames = self.socket.recv_multipart(zmq.NOBLOCK)
            except zmq.Again:
                continue
            except zmq.ZMQError:
                if self.shutdown:
                    break
                logger.exception("%s: receive failed", self.name)
                continue

            self.req_incoming(frames)


    def req_incoming(self, frames) -> Optional[Message]:
        """ All inbound envelopes are filtered through this method: decode,
            verify, classify, dispatch. Nothing that goes wrong here may end
            the loop; malformed or forged envelopes are logged and dropped
            before the dispatcher ever sees them.
        """

        try:
            message = wire.read(frames, self.session)
        except SignatureError:
            logger.warning("%s: dropping message with an invalid signature", self.name)
            return None
        except DecodeError as exc:
            logger.warning("%s: dropping message that could not be decoded: %s", self.name, exc)
            return None
        except Exception:
            logger.exception("%s: dropping message, unexpected failure while decoding", self.name)
            return None

        logger.debug("%s: received %s", self.name, message.msg_type)

        if self.dispatcher is None:
            logger.warning("%s: no dispatcher, dropping %s", self.name, message.msg_type)
            return message

        try:
            self.dispatcher.dispatch(message, self)
        except Exception:
            logger.exception("%s: failed to handle %s", self.name, message.msg_type)

        return message


    def send(self, message: Message) -> bool:
        """ Sign and send *message*, a reply built with
            :func:`kwire.protocol.catalog.create_reply` so that its routing
            identities are in place. Delivery is best-effort: a failure is
            logged and False is returned, nothing is raised.
        """

        try:
            frames = wire.encode(message, self.session)
        except DecodeError:
            logger.exception("%s: cannot encode %s", self.name, message.msg_type)
            return False

        # The lock around the ZeroMQ socket is necessary in a multithreaded
        # application; otherwise, if two different threads both invoke
        # send_multipart(), the message parts can and will get mixed together.

        try:
            with self.socket_lock:
                self.socket.send_multipart(frames)
        except zmq.ZMQError as exc:
            logger.error("%s: failed to send %s: %s", self.name, message.msg_type, exc)
            return False

        logger.debug("%s: sent %s", self.name, message.msg_type)
        return True


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
