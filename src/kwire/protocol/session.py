""" The :class:`Session` is the identity of one running kernel: the session
    id stamped into every outgoing header, the username, and the secret used
    to sign and verify envelopes. It is constructed once at startup and shared,
    read-only, by every channel thread.
"""

from __future__ import annotations

import dataclasses
import getpass
import hashlib
import hmac
import uuid
from typing import Union


DEFAULT_SCHEME = 'hmac-sha256'


def _username():
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # No passwd entry for this uid, which happens in containers.
        return 'kernel'


@dataclasses.dataclass(frozen=True)
class Session:
    """ Immutable per-kernel identity. The *key* may be given as text or
        bytes; an empty key disables signing entirely, in which case every
        signature is the empty string. The *signature_scheme* must be of the
        form ``hmac-<algorithm>`` where the algorithm is known to
        :mod:`hashlib`; anything else raises :class:`ValueError`, which is
        a fatal startup error.
    """

    key: bytes = b''
    signature_scheme: str = DEFAULT_SCHEME
    session_id: str = dataclasses.field(default_factory=lambda: uuid.uuid4().hex)
    username: str = dataclasses.field(default_factory=_username)

    def __post_init__(self):

        key = self.key
        if isinstance(key, str):
            key = key.encode('utf-8')
        elif key is None:
            key = b''

        # Frozen dataclasses only allow assignment through object.__setattr__;
        # this is the one place the key is normalized.

        object.__setattr__(self, 'key', bytes(key))

        scheme = self.signature_scheme or DEFAULT_SCHEME
        prefix, _, algorithm = scheme.partition('-')

        if prefix != 'hmac' or algorithm == '':
            raise ValueError('unsupported signature scheme: ' + repr(scheme))

        try:
            hashlib.new(algorithm)
        except (ValueError, TypeError):
            raise ValueError('unsupported signature scheme: ' + repr(scheme))

        object.__setattr__(self, 'signature_scheme', scheme)


    @property
    def algorithm(self) -> str:
        return self.signature_scheme.partition('-')[2]


    @property
    def signed(self) -> bool:
        """ True if this session signs and verifies envelopes.
        """

        return len(self.key) > 0


    def sign(self, header: bytes, parent: bytes, metadata: bytes, content: bytes) -> str:
        """ Return the lowercase hex HMAC of the four serialized frames,
            computed in wire order. The empty string is returned for an
            unsigned session.
        """

        if not self.signed:
            return ''

        digest = hmac.new(self.key, digestmod=self.algorithm)
        for frame in (header, parent, metadata, content):
            digest.update(frame)

        return digest.hexdigest()


    def verify(self, signature: Union[bytes, str], header: bytes, parent: bytes, metadata: bytes, content: bytes) -> bool:
        """ Return True if *signature* matches the four serialized frames.
            The comparison is constant-time. An unsigned session accepts only
            an empty signature.
        """

        if isinstance(signature, str):
            signature = signature.encode('ascii', errors='replace')

        expected = self.sign(header, parent, metadata, content).encode('ascii')
        return hmac.compare_digest(expected, signature)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
