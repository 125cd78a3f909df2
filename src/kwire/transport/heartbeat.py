"""ZeroMQ heartbeat channel.

A REP socket that echoes every request straight back. The heartbeat thread
shares no state with the rest of the kernel, so it keeps answering no matter
how busy the execution or control channels are.
"""

from __future__ import annotations

import logging
import threading

import zmq

from . import base


logger = logging.getLogger(__name__)


class Server:

    name = 'heartbeat'

    def __init__(self, endpoint):

        self.socket = base.socket(zmq.REP)

        try:
            self.endpoint, self.port = base.bind(self.socket, endpoint)
        except base.TransportPortError:
            self.socket.close()
            raise

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name=self.name, daemon=True)


    def start(self):
        self.thread.start()


    def stop(self, timeout=1):
        self.shutdown = True

        if self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout)

        self.socket.close()


    def run(self):

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        while self.shutdown == False:
            try:
                sockets = dict(poller.poll(base.poll_interval))
                if self.socket not in sockets:
                    continue

                frames = self.socket.recv_multipart(zmq.NOBLOCK)
                self.socket.send_multipart(frames)
            except zmq.Again:
                continue
            except zmq.ZMQError as exc:
                if self.shutdown:
                    break
                logger.error("heartbeat: %s", exc)
            except Exception:
                logger.exception("heartbeat: unexpected failure")


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
