""" A comm-negotiated side channel. Some sub-protocols, such as a debug
    adapter or a language server, want a plain TCP stream rather than a
    sequence of comm messages. The :class:`BridgeServer` binds a listener,
    tells the front end where it is via the comm, and then serves one
    client connection at a time for as long as the comm stays open.

    Unlike the kernel channels, which are bound once and live as long as
    the kernel, a client of the bridge may come and go: when one disconnects
    the server goes back to accepting the next.
"""

from __future__ import annotations

import logging
import socket
import threading


logger = logging.getLogger(__name__)

# How long, in seconds, accept() blocks before checking whether the server
# has been asked to stop.
accept_interval = 0.1


class BridgeServer:
    """ Serve TCP clients on behalf of the open *comm*. The *serve* callable
        is invoked on the server thread with each accepted
        :class:`socket.socket`, and should return when the client goes away;
        the connection is closed afterwards regardless. The listener binds a
        random port on *address*, announced to the front end as::

            {"method": "server_started", "params": {"port": port}}

        Closing the comm, from either side, stops the server.

        :ivar port: The port the listener is bound to.
    """

    def __init__(self, comm, serve, address='127.0.0.1'):

        self.comm = comm
        self.serve = serve
        self.address = address
        self.clients = 0

        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        try:
            listener.bind((address, 0))
            listener.listen(1)
        except OSError:
            listener.close()
            raise

        listener.settimeout(accept_interval)

        self.listener = listener
        self.port = listener.getsockname()[1]

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name='bridge-' + comm.comm_id, daemon=True)

        comm.on_close(self._closed)


    def start(self):
        """ Start accepting clients and announce the port over the comm. """

        self.thread.start()

        params = dict(port=self.port)
        self.comm.send(dict(method='server_started', params=params))
        logger.debug("bridge for comm %s listening on %s:%d", self.comm.comm_id, self.address, self.port)


    def stop(self, timeout=1):
        self.shutdown = True

        if self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout)

        self.listener.close()


    def run(self):

        while self.shutdown == False:
            try:
                connection, peer = self.listener.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self.shutdown:
                    break
                logger.error("bridge for comm %s: cannot accept client: %s", self.comm.comm_id, exc)
                continue

            self.clients += 1
            logger.info("bridge for comm %s: client connected from %s", self.comm.comm_id, peer)

            # The listener timeout is inherited on some platforms; a client
            # connection blocks normally.
            connection.settimeout(None)

            try:
                self.serve(connection)
            except Exception:
                logger.exception("bridge for comm %s: client handler failed", self.comm.comm_id)
            finally:
                connection.close()

            logger.info("bridge for comm %s: client disconnected", self.comm.comm_id)


    def _closed(self, message):
        self.stop()


# end of class BridgeServer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
