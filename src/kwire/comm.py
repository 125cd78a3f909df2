""" Comms are logical sub-channels multiplexed over the execution and
    broadcast sockets. A front end opens one with a comm_open on the shell
    channel; the kernel opens one by publishing a comm_open on IOPub. After
    that both sides exchange comm_msg envelopes addressed by comm id until
    either side sends comm_close. No new socket is created per comm.

    The :class:`CommRegistry` owns every open :class:`Comm`. Which
    sub-protocols the kernel understands is decided by the targets
    registered with :func:`CommRegistry.register_target`; a comm_open for
    any other target name is logged and ignored.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Dict, Optional

from .protocol import content
from .protocol import fields


logger = logging.getLogger(__name__)


class Comm:
    """ One open comm. Instances are created by the :class:`CommRegistry`,
        never directly.

        :ivar comm_id: Process-unique identifier, never reused.
        :ivar target_name: The sub-protocol this comm speaks.
        :ivar initiator: Either 'frontend' or 'kernel'.
        :ivar data: The payload the comm was opened with.
    """

    def __init__(self, registry, comm_id, target_name, initiator, data=None):

        self.registry = registry
        self.comm_id = comm_id
        self.target_name = target_name
        self.initiator = initiator

        if data is None:
            data = dict()

        self.data = data
        self.closed = False

        self.msg_callbacks = list()
        self.close_callbacks = list()


    def __repr__(self):
        return "Comm(%s, %s, %s)" % (self.comm_id, repr(self.target_name), self.initiator)


    def on_msg(self, callback):
        """ Register *callback* to be invoked with every inbound comm_msg
            :class:`kwire.protocol.message.Message` addressed to this comm.
        """

        self.msg_callbacks.append(callback)


    def on_close(self, callback):
        """ Register *callback* to be invoked once, with the comm_close
            message (or None for a kernel-side close), when this comm closes.
        """

        self.close_callbacks.append(callback)


    def send(self, data=None, parent=None):
        """ Send *data* to the front end as a comm_msg on the broadcast
            channel, optionally correlated with the *parent* header.
        """

        if self.closed:
            raise RuntimeError("comm %s is closed" % (self.comm_id))

        if data is None:
            data = dict()

        body = content.CommMsg(comm_id=self.comm_id, data=data)
        return self.registry.publish(body, parent)


    def close(self, data=None, parent=None):
        """ Close this comm from the kernel side: tell the front end, and
            retire the comm id.
        """

        if self.closed:
            return

        if data is None:
            data = dict()

        body = content.CommClose(comm_id=self.comm_id, data=data)
        self.registry.publish(body, parent)
        self.registry.close(self.comm_id)


    def _handle_msg(self, message):

        for callback in tuple(self.msg_callbacks):
            try:
                callback(message)
            except Exception:
                logger.exception("comm %s: message callback failed", self.comm_id)


    def _handle_close(self, message):

        self.closed = True

        callbacks = self.close_callbacks
        self.close_callbacks = list()

        for callback in callbacks:
            try:
                callback(message)
            except Exception:
                logger.exception("comm %s: close callback failed", self.comm_id)


# end of class Comm



class CommRegistry:
    """ Tracks open comms by id, and the targets the kernel knows how to
        serve. All bookkeeping happens under a single lock; callbacks are
        always invoked after the lock is released, since a callback is free
        to open, message or close comms of its own.

        The *iopub* argument is the broadcast channel used for kernel-side
        sends; it may be attached later via the *iopub* attribute.
    """

    def __init__(self, iopub=None):

        self.iopub = iopub
        self.lock = threading.Lock()

        self._comms: Dict[str, Comm] = dict()
        self._retired = set()
        self._targets: Dict[str, Callable] = dict()


    def __contains__(self, comm_id):
        with self.lock:
            return comm_id in self._comms


    def __len__(self):
        with self.lock:
            return len(self._comms)


    def get(self, comm_id) -> Optional[Comm]:
        with self.lock:
            return self._comms.get(comm_id)


    def publish(self, body, parent=None):

        if self.iopub is None:
            raise RuntimeError('comm registry has no broadcast channel')

        return self.iopub.publish(body, parent=parent)


    def register_target(self, target_name, callback):
        """ Declare that comms for *target_name* are served here. When a front
            end opens such a comm, *callback* is invoked with the new
            :class:`Comm` and the comm_open message; it would typically
            attach message handlers, or start a worker thread.
        """

        with self.lock:
            self._targets[target_name] = callback


    def unregister_target(self, target_name):

        with self.lock:
            self._targets.pop(target_name, None)


    def targets(self):
        with self.lock:
            return tuple(self._targets.keys())


    def open(self, comm_id, target_name, initiator=fields.FRONTEND, data=None, message=None) -> Optional[Comm]:
        """ Register a comm opened by the front end. Returns the new
            :class:`Comm`, or None if the comm was not registered: the target
            is unknown, or the id is already in use or retired. None of these
            cases produce a reply; the protocol defines none.
        """

        with self.lock:
            if comm_id in self._comms or comm_id in self._retired:
                logger.warning("comm_open for comm id %s that is already in use, ignoring", comm_id)
                return None

            try:
                callback = self._targets[target_name]
            except KeyError:
                logger.warning("comm_open for unknown target %s (comm %s), ignoring", repr(target_name), comm_id)
                return None

            comm = Comm(self, comm_id, target_name, initiator, data)
            self._comms[comm_id] = comm

        logger.debug("opened %s", repr(comm))

        try:
            callback(comm, message)
        except Exception:
            logger.exception("comm target %s failed to open comm %s", repr(target_name), comm_id)
            self.close(comm_id)
            return None

        return comm


    def open_comm(self, target_name, data=None, parent=None) -> Comm:
        """ Open a comm from the kernel side: allocate a fresh id, register
            it, and announce it to the front end with a comm_open.
        """

        comm_id = uuid.uuid4().hex

        if data is None:
            data = dict()

        comm = Comm(self, comm_id, target_name, fields.KERNEL, data)

        with self.lock:
            self._comms[comm_id] = comm

        body = content.CommOpen(comm_id=comm_id, target_name=target_name, data=data)
        self.publish(body, parent)

        logger.debug("opened %s", repr(comm))
        return comm


    def route_comm_msg(self, comm_id, message) -> bool:
        """ Forward an inbound comm_msg to the comm that owns *comm_id*.
            Returns False, after logging, if there is no such comm.
        """

        with self.lock:
            comm = self._comms.get(comm_id)

        if comm is None:
            logger.warning("comm_msg for unknown comm %s, dropping", comm_id)
            return False

        comm._handle_msg(message)
        return True


    def close(self, comm_id, message=None) -> bool:
        """ Remove *comm_id* from the registry and retire the id for the life
            of the process. Returns False, after logging, if there is no
            such comm.
        """

        with self.lock:
            comm = self._comms.pop(comm_id, None)
            if comm is not None:
                self._retired.add(comm_id)

        if comm is None:
            logger.warning("comm_close for unknown comm %s", comm_id)
            return False

        logger.debug("closed %s", repr(comm))
        comm._handle_close(message)
        return True


    def comms(self, target_name=None):
        """ Describe the open comms, optionally only those for *target_name*,
            in the shape expected by a comm_info_reply.
        """

        with self.lock:
            comms = tuple(self._comms.values())

        described = dict()
        for comm in comms:
            if target_name is None or comm.target_name == target_name:
                described[comm.comm_id] = dict(target_name=comm.target_name)

        return described


    def close_all(self):
        """ Close every open comm without notifying the front end; used at
            kernel shutdown.
        """

        with self.lock:
            comm_ids = tuple(self._comms.keys())

        for comm_id in comm_ids:
            self.close(comm_id)


# end of class CommRegistry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
