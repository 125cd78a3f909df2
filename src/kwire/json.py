''' Select the fastest available library for the JSON encoding of envelope
    frames. Every :func:`dumps` returns bytes, since the result goes straight
    onto the wire and into the signature; every :func:`loads` accepts bytes.
'''

# Only the first library found is imported; there is no reason to pay the
# import cost of the slower alternatives.

msgspec = None
orjson = None
json = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    try:
        import orjson
    except ImportError:
        pass

if msgspec is None and orjson is None:
    import json


def _json_dumps(value):
    return json.dumps(value, separators=(',', ':')).encode('utf-8')


def _json_loads(raw):
    return json.loads(raw)


if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
    DecodeError = msgspec.DecodeError
    EncodeError = msgspec.EncodeError
elif orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = orjson.JSONDecodeError
    EncodeError = orjson.JSONEncodeError
else:
    dumps = _json_dumps
    loads = _json_loads
    DecodeError = json.JSONDecodeError
    EncodeError = TypeError


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
