""" The :class:`ShellHandler` is the language-specific half of a kernel:
    it interprets code, produces completions, and so on. The protocol engine
    only ever talks to it through the methods defined here.
"""

from __future__ import annotations

import abc

from .protocol import content


class ShellHandler(abc.ABC):
    """ One method per request variant. Every ``handle_*`` method receives
        the typed request :class:`kwire.protocol.message.Message` and returns
        the reply content; raising an exception produces an error reply
        instead. Handler methods may block for as long as they need to.

        The kernel guarantees that at most one ``handle_*`` call is in
        progress at a time. :func:`interrupt` and :func:`shutdown` are the
        exception: they are called from the control thread, without that
        guarantee, precisely so that they can reach a handler that is busy.

        Broadcast events (execution input, results, streams) are published
        through the *iopub* attribute, which the kernel sets via :func:`connect`
        before any request arrives.
    """

    iopub = None

    def connect(self, iopub):
        """ Called once by the kernel with its broadcast channel, a
            :class:`kwire.transport.publish.Server`.
        """

        self.iopub = iopub


    def publish(self, body, parent):
        """ Convenience wrapper to broadcast *body* correlated with the
            *parent* request message.
        """

        if self.iopub is None:
            raise RuntimeError('handler is not connected to a kernel')

        return self.iopub.publish(body, parent=parent.header)


    @abc.abstractmethod
    def handle_info_request(self, request) -> content.KernelInfoReply:
        """ Describe the kernel and its language. """


    @abc.abstractmethod
    def handle_execute_request(self, request) -> content.ExecuteReply:
        """ Execute ``request.content.code``. """


    def handle_complete_request(self, request) -> content.CompleteReply:
        cursor = request.content.cursor_pos
        return content.CompleteReply(matches=list(), cursor_start=cursor, cursor_end=cursor)


    def handle_is_complete_request(self, request) -> content.IsCompleteReply:
        return content.IsCompleteReply(status='unknown')


    def handle_inspect_request(self, request) -> content.InspectReply:
        return content.InspectReply(found=False)


    def interrupt(self):
        """ Ask the handler to abandon whatever it is doing. Called from the
            control thread while a request may be in progress; the default
            does nothing.
        """

        pass


    def shutdown(self, restart=False):
        """ The kernel is about to stop. Called from the control thread. """

        pass


# end of class ShellHandler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
