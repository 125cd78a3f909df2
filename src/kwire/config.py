""" Connection descriptors. A front end launches a kernel with the path to a
    small JSON file naming the transport, the address, one port per role,
    and the HMAC key; :func:`load` reads such a file into a
    :class:`Connection`.
"""

from __future__ import annotations

from . import json


_ports = ('control_port', 'shell_port', 'iopub_port', 'hb_port', 'stdin_port')


class Connection:
    """ A convenience class to represent a connection descriptor. A port of
        zero means the kernel should pick a free port at bind time; the
        bound ports are available from the running kernel afterwards.

        The stdin port is accepted, so that real descriptors load cleanly,
        but no input channel is served on it.
    """

    def __init__(self, ip='127.0.0.1', transport='tcp', key=b'', signature_scheme='hmac-sha256', kernel_name=None, **ports):

        if transport != 'tcp':
            raise ValueError('unsupported transport: ' + repr(transport))

        self.transport = transport
        self.ip = ip

        if isinstance(key, str):
            key = key.encode('utf-8')

        self.key = key
        self.signature_scheme = signature_scheme
        self.kernel_name = kernel_name

        for port in _ports:
            value = ports.pop(port, 0)
            value = int(value)
            setattr(self, port, value)

        if ports:
            unknown = ', '.join(sorted(ports.keys()))
            raise TypeError('unexpected connection fields: ' + unknown)


    def __repr__(self):
        return "Connection(%s://%s, control=%d, shell=%d, iopub=%d, hb=%d)" % (self.transport, self.ip, self.control_port, self.shell_port, self.iopub_port, self.hb_port)


    @classmethod
    def from_dict(cls, descriptor):
        """ Build a :class:`Connection` from a decoded descriptor. Keys this
            kernel has no use for are ignored, the way a front end ignores
            keys it does not recognize.
        """

        known = ('ip', 'transport', 'key', 'signature_scheme', 'kernel_name') + _ports

        arguments = dict()
        for key in known:
            try:
                arguments[key] = descriptor[key]
            except KeyError:
                pass

        return cls(**arguments)


    def to_dict(self):

        descriptor = dict()
        descriptor['transport'] = self.transport
        descriptor['ip'] = self.ip
        descriptor['key'] = self.key.decode('utf-8')
        descriptor['signature_scheme'] = self.signature_scheme

        if self.kernel_name is not None:
            descriptor['kernel_name'] = self.kernel_name

        for port in _ports:
            descriptor[port] = getattr(self, port)

        return descriptor


    def endpoint(self, port):
        """ Return the ZeroMQ endpoint string for *port* on this address. """

        return "%s://%s:%d" % (self.transport, self.ip, port)


# end of class Connection



def load(filename):
    """ Read the connection file *filename* and return a :class:`Connection`.
    """

    with open(filename, 'rb') as contents:
        raw = contents.read()

    descriptor = json.loads(raw)
    return Connection.from_dict(descriptor)



def save(connection, filename):
    """ Write *connection* to *filename* in the same format :func:`load`
        reads.
    """

    raw = json.dumps(connection.to_dict())

    with open(filename, 'wb') as contents:
        contents.write(raw)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
