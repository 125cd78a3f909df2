import hashlib
import hmac
import pytest

from kwire.protocol.session import Session


frames = (b'{"msg_id":"1"}', b'{}', b'{}', b'{"code":"1+1"}')


def test_sign_matches_hmac():

    session = Session(key=b'secret')
    signature = session.sign(*frames)

    expected = hmac.new(b'secret', b''.join(frames), hashlib.sha256).hexdigest()
    assert signature == expected
    assert signature == signature.lower()


def test_verify():

    session = Session(key='secret')
    assert session.key == b'secret'

    signature = session.sign(*frames)
    assert session.verify(signature, *frames)
    assert session.verify(signature.encode(), *frames)

    # Any change to any frame, or to the signature, fails.

    assert not session.verify(signature, frames[0], frames[1], frames[2], b'{"code":"1+2"}')
    assert not session.verify(signature[:-1] + 'x', *frames)
    assert not session.verify('', *frames)

    other = Session(key=b'another secret')
    assert not other.verify(signature, *frames)


def test_unsigned():

    session = Session()
    assert session.signed == False
    assert session.sign(*frames) == ''
    assert session.verify('', *frames)
    assert not session.verify('deadbeef', *frames)


def test_schemes():

    session = Session(key=b'secret', signature_scheme='hmac-sha512')
    assert session.algorithm == 'sha512'
    assert len(session.sign(*frames)) == 128

    for scheme in ('sha256', 'hmac-', 'hmac-nonesuch', 'rsa-sha256'):
        with pytest.raises(ValueError):
            Session(key=b'secret', signature_scheme=scheme)


def test_identity():

    first = Session()
    second = Session()

    assert first.session_id != second.session_id
    assert first.username

    with pytest.raises(AttributeError):
        first.key = b'changed'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
