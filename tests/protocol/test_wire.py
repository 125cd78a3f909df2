import pytest

from kwire import json
from kwire.protocol import catalog
from kwire.protocol import content
from kwire.protocol import fields
from kwire.protocol import wire
from kwire.protocol.errors import DecodeError, MissingField, SignatureError, UnknownMessageType
from kwire.protocol.message import Header, Message
from kwire.protocol.session import Session


session = Session(key=b'secret')

samples = (
    content.KernelInfoRequest(),
    content.KernelInfoReply(protocol_version='5.3', implementation='kwire', implementation_version='0', language_info=dict(name='echo')),
    content.ExecuteRequest(code='1+1', silent=True),
    content.ExecuteReply(execution_count=3),
    content.ExecuteInput(code='1+1', execution_count=3),
    content.ExecuteResult(execution_count=3, data={'text/plain': '2'}),
    content.ExecuteError(ename='ValueError', evalue='bad', traceback=['line']),
    content.Stream(name='stdout', text='hello\n'),
    content.CompleteRequest(code='pri', cursor_pos=3),
    content.CompleteReply(matches=['print'], cursor_start=0, cursor_end=3),
    content.IsCompleteRequest(code='(1'),
    content.IsCompleteReply(status=fields.INCOMPLETE, indent='    '),
    content.InspectRequest(code='teapot', cursor_pos=6),
    content.InspectReply(found=True, data={'text/plain': 'a teapot'}),
    content.CommInfoRequest(target_name='lsp'),
    content.CommInfoReply(comms={'abc': dict(target_name='lsp')}),
    content.CommOpen(comm_id='abc', target_name='lsp', data={'port': 1}),
    content.CommMsg(comm_id='abc', data={'method': 'ping'}),
    content.CommClose(comm_id='abc'),
    content.ShutdownRequest(restart=True),
    content.ShutdownReply(restart=True),
    content.InterruptRequest(),
    content.InterruptReply(),
    content.Status(execution_state=fields.BUSY),
)


def test_every_variant_is_sampled():

    sampled = set(sample.msg_type for sample in samples)
    assert sampled == set(catalog.catalog.keys())


@pytest.mark.parametrize('body', samples, ids=lambda body: body.msg_type)
def test_round_trip(body):

    parent = Header.create(fields.EXECUTE_REQUEST, Session())
    message = catalog.create(body, session, parent=parent, metadata={'note': 1})
    message.identities = [b'front-end']
    message.buffers = [b'\x00\x01binary']

    frames = wire.encode(message, session)
    decoded = wire.read(frames, session)

    assert decoded == message
    assert isinstance(decoded.content, type(body))


def test_frame_layout():

    message = catalog.create(content.KernelInfoRequest(), session)
    message.identities = [b'one', b'two']

    frames = wire.encode(message, session)

    assert frames[:3] == [b'one', b'two', fields.DELIMITER]
    assert len(frames) == 8

    signature, header, parent, metadata, body = frames[3:]
    assert signature == session.sign(header, parent, metadata, body).encode()
    assert json.loads(header)['msg_type'] == fields.KERNEL_INFO_REQUEST
    assert parent == b'{}'
    assert json.loads(metadata) == dict()
    assert json.loads(body) == dict()

    decoded = wire.decode(frames, session)
    assert decoded.parent_header is None
    assert decoded.identities == [b'one', b'two']
    assert isinstance(decoded.content, dict)


def test_tampering_is_detected():

    message = catalog.create(content.ExecuteRequest(code='1+1'), session)
    frames = wire.encode(message, session)
    split = frames.index(fields.DELIMITER)

    for offset in (1, 2, 5):
        tampered = list(frames)
        frame = bytearray(tampered[split + offset])
        frame[len(frame) // 2] ^= 0x01
        tampered[split + offset] = bytes(frame)

        with pytest.raises(SignatureError):
            wire.decode(tampered, session)


def test_wrong_key():

    message = catalog.create(content.KernelInfoRequest(), Session(key=b'other'))
    frames = wire.encode(message, Session(key=b'other'))

    with pytest.raises(SignatureError):
        wire.decode(frames, session)


def test_unsigned_session():

    unsigned = Session()
    message = catalog.create(content.KernelInfoRequest(), unsigned)
    frames = wire.encode(message, unsigned)

    assert frames[1] == b''
    assert wire.read(frames, unsigned) == message

    # A signed session refuses unsigned envelopes.

    with pytest.raises(SignatureError):
        wire.decode(frames, session)


def signed_frames(header, body=None, parent=b'{}'):

    header = json.dumps(header)
    if body is None:
        body = b'{}'

    signature = session.sign(header, parent, b'{}', body).encode()
    return [fields.DELIMITER, signature, header, parent, b'{}', body]


def header_dict(msg_type):
    return Header.create(msg_type, session).to_dict()


def test_malformed_envelopes():

    good = signed_frames(header_dict(fields.KERNEL_INFO_REQUEST))

    with pytest.raises(DecodeError):
        wire.decode(good[1:], session)

    with pytest.raises(DecodeError):
        wire.decode(good[:-1], session)

    header = header_dict(fields.KERNEL_INFO_REQUEST)
    del header['msg_id']

    with pytest.raises(DecodeError):
        wire.decode(signed_frames(header), session)

    with pytest.raises(DecodeError):
        wire.decode(signed_frames(header_dict(fields.EXECUTE_REQUEST), b'not json'), session)

    with pytest.raises(DecodeError):
        wire.decode(signed_frames(header_dict(fields.EXECUTE_REQUEST), b'[1, 2]'), session)


def test_classify_errors():

    with pytest.raises(UnknownMessageType) as caught:
        wire.read(signed_frames(header_dict('history_request')), session)

    assert caught.value.kind == 'history_request'

    with pytest.raises(MissingField) as caught:
        wire.read(signed_frames(header_dict(fields.EXECUTE_REQUEST), b'{"silent": true}'), session)

    assert caught.value.field == 'code'
    assert isinstance(caught.value, DecodeError)


def test_unknown_content_keys_survive():

    body = b'{"code":"x","future_field":[1,2]}'
    message = wire.read(signed_frames(header_dict(fields.EXECUTE_REQUEST), body), session)

    assert message.content.code == 'x'
    assert message.content.extra == {'future_field': [1, 2]}
    assert message.content.to_dict()['future_field'] == [1, 2]


def test_content_keys_named_like_arguments():

    body = b'{"self": 1}'
    message = wire.read(signed_frames(header_dict(fields.KERNEL_INFO_REQUEST), body), session)

    assert isinstance(message.content, content.KernelInfoRequest)
    assert message.content.extra == {'self': 1}

    body = b'{"code": "x", "self": true}'
    message = wire.read(signed_frames(header_dict(fields.EXECUTE_REQUEST), body), session)

    assert message.content.code == 'x'
    assert message.content.extra == {'self': True}

    # An error reply carries its tag separately from its content keys.

    body = b'{"status": "error", "ename": "E", "evalue": "v", "msg_type": "x", "self": 2}'
    message = wire.read(signed_frames(header_dict(fields.EXECUTE_REPLY), body), session)

    assert isinstance(message.content, content.ErrorReply)
    assert message.content.msg_type == fields.EXECUTE_REPLY
    assert message.content.ename == 'E'
    assert message.content.extra == {'msg_type': 'x', 'self': 2}

    # Required fields are still required.

    with pytest.raises(MissingField):
        wire.read(signed_frames(header_dict(fields.EXECUTE_REQUEST), b'{"self": 1}'), session)


def test_unserializable_content():

    body = content.ExecuteResult(execution_count=1, data={'text/plain': object()})
    message = catalog.create(body, session)

    with pytest.raises(DecodeError):
        wire.encode(message, session)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
