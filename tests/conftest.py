import pytest
import threading
import time
import zmq

import kwire
from kwire.protocol import catalog
from kwire.protocol import content
from kwire.protocol import fields
from kwire.protocol import wire


key = b'a shared secret for the test kernel'


class Client:
    """ A minimal front end: DEALER sockets for the control and shell
        channels, a SUB socket for the broadcast channel, and a REQ socket
        for the heartbeat.
    """

    def __init__(self, kernel, key=key):

        self.kernel = kernel
        self.session = kwire.protocol.Session(key=key)
        self.context = zmq.Context.instance()

        ip = kernel.connection.ip
        ports = kernel.ports

        self.sockets = dict()
        self.sockets['shell'] = self._socket(zmq.DEALER, ip, ports['shell_port'])
        self.sockets['control'] = self._socket(zmq.DEALER, ip, ports['control_port'])
        self.sockets['hb'] = self._socket(zmq.REQ, ip, ports['hb_port'])

        iopub = self._socket(zmq.SUB, ip, ports['iopub_port'])
        iopub.setsockopt(zmq.SUBSCRIBE, b'')
        self.sockets['iopub'] = iopub


    def _socket(self, kind, ip, port):

        socket = self.context.socket(kind)
        socket.setsockopt(zmq.LINGER, 0)
        socket.connect("tcp://%s:%d" % (ip, port))
        return socket


    def close(self):
        for socket in self.sockets.values():
            socket.close()


    def send(self, channel, body, **kwargs):
        message = catalog.create(body, self.session, **kwargs)
        self.send_frames(channel, wire.encode(message, self.session))
        return message


    def send_frames(self, channel, frames):
        self.sockets[channel].send_multipart(frames)


    def recv(self, channel, timeout=2):
        """ Return the next message on *channel*, or None after *timeout*
            seconds.
        """

        socket = self.sockets[channel]

        if socket.poll(int(timeout * 1000)) == 0:
            return None

        frames = socket.recv_multipart()
        return wire.read(frames, self.session)


    def request(self, channel, body, timeout=2):
        request = self.send(channel, body)
        reply = self.recv(channel, timeout)
        return request, reply


    def broadcasts(self, parent, timeout=2):
        """ Collect broadcast messages correlated with the *parent* request,
            through to its Idle status.
        """

        collected = list()
        deadline = time.time() + timeout

        while time.time() < deadline:
            message = self.recv('iopub', deadline - time.time())
            if message is None:
                break

            if message.parent_id != parent.msg_id:
                continue

            collected.append(message)

            if message.msg_type == fields.STATUS and message.content.execution_state == fields.IDLE:
                break

        return collected


    def drain(self, channel='iopub', timeout=0.2):
        while self.recv(channel, timeout) is not None:
            pass


    def wait_ready(self, attempts=20):
        """ A SUB socket misses anything published before its subscription
            reaches the publisher. Keep asking for kernel info until the
            broadcast of its status bracket arrives.
        """

        for attempt in range(attempts):
            request, reply = self.request('shell', content.KernelInfoRequest())
            assert reply is not None

            if self.recv('iopub', 0.1) is not None:
                self.drain()
                return

        raise RuntimeError('broadcast channel never became ready')


# end of class Client



class BlockingHandler(kwire.echo.EchoHandler):
    """ An echo handler whose executions of the code 'block' wait until
        *release* is set, and whose executions of 'raise' fail.
    """

    def __init__(self):
        kwire.echo.EchoHandler.__init__(self)
        self.release = threading.Event()
        self.started = threading.Event()
        self.interrupts = 0
        self.shutdowns = list()


    def _execute(self, request):

        code = request.content.code

        if code == 'block':
            self.started.set()
            self.release.wait(10)
        elif code == 'raise':
            raise ValueError('this code always fails')

        return kwire.echo.EchoHandler._execute(self, request)


    def interrupt(self):
        self.interrupts += 1
        kwire.echo.EchoHandler.interrupt(self)


    def shutdown(self, restart=False):
        self.shutdowns.append(restart)
        self.release.set()
        kwire.echo.EchoHandler.shutdown(self, restart)


# end of class BlockingHandler



def local_connection(**kwargs):
    return kwire.config.Connection(ip='127.0.0.1', key=key, **kwargs)


@pytest.fixture
def handler():
    return BlockingHandler()


@pytest.fixture
def kernel(handler):

    kernel = kwire.Kernel(local_connection(), handler)
    kernel.start()

    yield kernel

    handler.release.set()
    kernel.stop()


@pytest.fixture
def client(kernel):

    client = Client(kernel)
    client.wait_ready()

    yield client

    client.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
