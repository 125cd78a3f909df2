import threading
import time

import kwire
from kwire.comms import rpc
from kwire.protocol import fields

from test_comm import Broadcasts, comm_message


def open_rpc(methods):

    iopub = Broadcasts()
    registry = kwire.CommRegistry(iopub)
    opened = list()

    rpc.serve(registry, 'ui', methods, opened.append)
    registry.open('ui-comm', 'ui')

    return registry, iopub, opened[0]


def last_data(iopub):
    message = iopub.published[-1]
    assert message.msg_type == fields.COMM_MSG
    return message.content.data


def test_method_call():

    methods = dict(add=lambda a, b: a + b, hello=lambda name='world': 'hello ' + name)
    registry, iopub, server = open_rpc(methods)

    call = comm_message('ui-comm', dict(jsonrpc='2.0', id=7, method='add', params=[2, 3]))
    registry.route_comm_msg('ui-comm', call)

    assert last_data(iopub) == dict(jsonrpc='2.0', id=7, result=5)
    assert iopub.published[-1].parent_header == call.header

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id='x', method='hello', params=dict(name='kernel'))))
    assert last_data(iopub)['result'] == 'hello kernel'

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id='y', method='hello')))
    assert last_data(iopub)['result'] == 'hello world'


def test_method_errors():

    def fail():
        raise RuntimeError('broken')

    registry, iopub, server = open_rpc(dict(add=lambda a, b: a + b, fail=fail))

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id=1, method='nonesuch')))
    assert last_data(iopub)['error']['code'] == rpc.METHOD_NOT_FOUND

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id=2, method='add', params=[1])))
    assert last_data(iopub)['error']['code'] == rpc.INVALID_PARAMS

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id=3, method='add', params='1, 2')))
    assert last_data(iopub)['error']['code'] == rpc.INVALID_PARAMS

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id=4, method='fail')))
    error = last_data(iopub)['error']
    assert error['code'] == rpc.INTERNAL_ERROR
    assert 'broken' in error['message']
    assert last_data(iopub)['id'] == 4


def test_notifications_get_no_response():

    calls = list()
    registry, iopub, server = open_rpc(dict(busy=calls.append))
    published = len(iopub.published)

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(method='busy', params=[True])))
    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(method='nonesuch')))

    assert calls == [True]
    assert len(iopub.published) == published


def test_request_to_front_end():

    registry, iopub, server = open_rpc(dict())
    results = list()

    thread = threading.Thread(target=lambda: results.append(server.request('editor_context', timeout=5)))
    thread.start()

    for attempt in range(100):
        if iopub.published:
            break
        time.sleep(0.01)

    call = last_data(iopub)
    assert call['method'] == 'editor_context'
    assert 'params' not in call

    # A response for some other id changes nothing.

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id=call['id'] + 100, result=None)))
    assert thread.is_alive()

    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(jsonrpc='2.0', id=call['id'], result={'path': 'a.R'})))
    thread.join(5)

    assert results == [{'path': 'a.R'}]
    assert server.pending == dict()


def test_request_errors():

    registry, iopub, server = open_rpc(dict())

    try:
        server.request('slow', timeout=0.1)
    except TimeoutError:
        pass
    else:
        raise AssertionError('expected a timeout')

    assert server.pending == dict()

    failures = list()

    def call():
        try:
            server.request('refuse', [1], timeout=5)
        except rpc.RpcError as exc:
            failures.append(exc)

    thread = threading.Thread(target=call)
    thread.start()

    for attempt in range(100):
        if last_data(iopub).get('method') == 'refuse':
            break
        time.sleep(0.01)

    sent = last_data(iopub)
    assert sent['params'] == [1]

    error = dict(code=-32000, message='refused')
    registry.route_comm_msg('ui-comm', comm_message('ui-comm', dict(id=sent['id'], error=error)))
    thread.join(5)

    assert len(failures) == 1
    assert failures[0].code == -32000
    assert failures[0].message == 'refused'


def test_close_releases_pending_requests():

    registry, iopub, server = open_rpc(dict())
    failures = list()

    def call():
        try:
            server.request('never', timeout=5)
        except rpc.RpcError as exc:
            failures.append(exc)

    thread = threading.Thread(target=call)
    thread.start()

    for attempt in range(100):
        if iopub.published:
            break
        time.sleep(0.01)

    registry.close('ui-comm')
    thread.join(5)

    assert len(failures) == 1
    assert failures[0].code == rpc.INTERNAL_ERROR


def test_notify():

    registry, iopub, server = open_rpc(dict())
    server.notify('show_message', dict(message='hi'))

    assert last_data(iopub) == dict(jsonrpc='2.0', method='show_message', params=dict(message='hi'))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
