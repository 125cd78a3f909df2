""" A toy :class:`kwire.handler.ShellHandler` that "executes" code by echoing
    it back. It is enough to drive a front end end to end, and shows the
    intended shape of a real handler: execution happens on a worker thread
    of its own, fed through a queue, while the execution channel waits for
    the outcome.
"""

from __future__ import annotations

import logging
import queue
import threading

from . import __version__
from .handler import ShellHandler
from .protocol import content
from .protocol import fields


logger = logging.getLogger(__name__)

_brackets = {')': '(', ']': '[', '}': '{'}


class Interrupted(Exception):
    """ Raised from :func:`EchoHandler.handle_execute_request` when the
        execution it was waiting for was interrupted.
    """


class Execution:
    """ One unit of work for the worker thread. """

    def __init__(self, request):
        self.request = request
        self.done = threading.Event()
        self.result = None
        self.error = None


class EchoHandler(ShellHandler):

    def __init__(self):

        self.execution_count = 0
        self.queue = queue.SimpleQueue()
        self.current = None
        self.current_lock = threading.Lock()

        self.shutdown_requested = False
        self.thread = threading.Thread(target=self._worker_main, name='execute', daemon=True)
        self.thread.start()


    def handle_info_request(self, request):

        language = dict()
        language['name'] = 'echo'
        language['version'] = __version__
        language['mimetype'] = 'text/plain'
        language['file_extension'] = '.txt'

        return content.KernelInfoReply(protocol_version=fields.PROTOCOL_VERSION,
                implementation='kwire',
                implementation_version=__version__,
                language_info=language,
                banner="kwire echo kernel %s" % (__version__))


    def handle_execute_request(self, request):

        if self.shutdown_requested:
            raise RuntimeError('the kernel is shutting down')

        execution = Execution(request)

        with self.current_lock:
            self.current = execution

        self.queue.put(execution)

        # The worker exits on shutdown, possibly before it ever sees this
        # execution.

        while execution.done.wait(0.1) == False:
            if self.thread.is_alive() == False and execution.done.is_set() == False:
                execution.error = RuntimeError('the kernel is shutting down')
                break

        with self.current_lock:
            self.current = None

        if execution.error is not None:
            raise execution.error

        return execution.result


    def handle_is_complete_request(self, request):
        """ Code is complete when every bracket is closed; a stray closing
            bracket makes it invalid.
        """

        stack = list()

        for character in request.content.code:
            if character in '([{':
                stack.append(character)
            elif character in _brackets:
                if not stack or stack[-1] != _brackets[character]:
                    return content.IsCompleteReply(status=fields.INVALID)
                stack.pop()

        if stack:
            return content.IsCompleteReply(status=fields.INCOMPLETE, indent='    ')

        return content.IsCompleteReply(status=fields.COMPLETE)


    def handle_inspect_request(self, request):

        code = request.content.code.strip()

        if code == 'teapot':
            data = {'text/plain': 'This is clearly a teapot.'}
            return content.InspectReply(found=True, data=data)

        return content.InspectReply(found=False)


    def interrupt(self):

        with self.current_lock:
            execution = self.current

        if execution is None:
            logger.debug("interrupt with nothing executing")
            return

        execution.error = Interrupted('execution interrupted')
        execution.done.set()


    def shutdown(self, restart=False):

        self.shutdown_requested = True
        self.queue.put(None)


    def _worker_main(self):
        """ Consume executions one at a time until shutdown. The result is
            published before the waiting execution channel is released, so
            that front ends see the result ahead of the Idle status.
        """

        while self.shutdown_requested == False:
            execution = self.queue.get()

            if execution is None:
                continue

            if execution.done.is_set():
                # Interrupted before it ever started.
                continue

            try:
                execution.result = self._execute(execution.request)
            except Exception as exc:
                execution.error = exc

            execution.done.set()


    def _execute(self, request):

        code = request.content.code
        silent = request.content.silent

        if silent:
            return content.ExecuteReply(execution_count=self.execution_count)

        if request.content.store_history:
            self.execution_count += 1

        count = self.execution_count

        self.publish(content.ExecuteInput(code=code, execution_count=count), request)

        data = {'text/plain': code}
        self.publish(content.ExecuteResult(execution_count=count, data=data), request)

        return content.ExecuteReply(execution_count=count)


# end of class EchoHandler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
