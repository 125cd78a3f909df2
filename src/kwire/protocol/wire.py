""" Map a :class:`Message` to and from the multipart frames on the wire.

    Layout::

        [identity ...] <IDS|MSG> signature header parent_header metadata content [buffer ...]

    The header, parent header, metadata and content frames are UTF-8 JSON;
    the signature is the lowercase hex HMAC of those four frames, in that
    order, using the :class:`Session` key. Inbound frames are verified before
    any of them is parsed.
"""

from __future__ import annotations

from typing import List, Sequence

from .. import json
from . import catalog
from . import fields
from .errors import DecodeError, SignatureError
from .message import Header, Message


_EMPTY = b'{}'


def _dumps(value) -> bytes:
    try:
        return json.dumps(value)
    except (json.EncodeError, TypeError, ValueError, OverflowError) as exc:
        raise DecodeError('frame is not JSON-serializable: ' + str(exc)) from exc


def _loads(frame: bytes, name):
    try:
        value = json.loads(frame)
    except (json.DecodeError, ValueError) as exc:
        raise DecodeError("%s frame is not valid JSON: %s" % (name, exc)) from exc

    if not isinstance(value, dict):
        raise DecodeError("%s frame is not a JSON object" % (name))

    return value


def encode(message: Message, session) -> List[bytes]:
    """ Serialize and sign *message*, returning the list of frames to hand
        to ``send_multipart()``. Routing identities are prepended as-is;
        broadcast messages simply have none.
    """

    header = _dumps(message.header.to_dict())

    if message.parent_header is None:
        parent = _EMPTY
    else:
        parent = _dumps(message.parent_header.to_dict())

    metadata = _dumps(message.metadata)
    content = _dumps(message.content_dict())

    signature = session.sign(header, parent, metadata, content)
    signature = signature.encode('ascii')

    frames = list(message.identities)
    frames.append(fields.DELIMITER)
    frames.extend((signature, header, parent, metadata, content))
    frames.extend(message.buffers)

    return frames



def decode(frames: Sequence[bytes], session) -> Message:
    """ The inverse of :func:`encode`, returning a raw :class:`Message`
        whose content is a plain dictionary. Raises :class:`SignatureError`
        if the signature does not verify, and :class:`DecodeError` for any
        other malformation.
    """

    frames = [bytes(frame) for frame in frames]

    try:
        split = frames.index(fields.DELIMITER)
    except ValueError:
        raise DecodeError('no delimiter frame in envelope')

    identities = frames[:split]
    signed = frames[split + 1:]

    if len(signed) < 5:
        raise DecodeError("envelope has %d frames after the delimiter, expected at least 5" % (len(signed)))

    signature, header, parent, metadata, content = signed[:5]
    buffers = signed[5:]

    if not session.verify(signature, header, parent, metadata, content):
        raise SignatureError('invalid signature')

    header = Header.from_dict(_loads(header, 'header'))

    parent = _loads(parent, 'parent_header')
    if parent:
        parent = Header.from_dict(parent)
    else:
        parent = None

    metadata = _loads(metadata, 'metadata')
    content = _loads(content, 'content')

    return Message(header, content, parent, metadata, identities, buffers)



def read(frames: Sequence[bytes], session) -> Message:
    """ Decode and classify in one step; the result carries typed content.
    """

    return catalog.classify(decode(frames, session))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
