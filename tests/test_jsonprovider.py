import io
import json
from decimal import Decimal

import pytest

from queryhooks import jsonprovider
from queryhooks.jsonprovider import JsonProvider


def test_marshal_round_trip():
    value = {"a": [1, 2.5, "x"], "b": None}
    assert jsonprovider.unmarshal(jsonprovider.marshal(value)) == value


def test_marshal_is_compact():
    assert b" " not in jsonprovider.marshal({"a": [1, 2]})


def test_unmarshal_invalid():
    with pytest.raises(json.JSONDecodeError):
        jsonprovider.unmarshal(b"{bad")


def test_encoder_decoder_stream():
    buf = io.StringIO()
    enc = jsonprovider.new_encoder(buf)
    enc.encode({"k": 1})
    enc.encode([True])
    assert buf.getvalue().count("\n") == 2
    dec = jsonprovider.new_decoder(io.StringIO(buf.getvalue()))
    assert dec.decode() == {"k": 1}
    assert dec.decode() == [True]
    with pytest.raises(EOFError):
        dec.decode()


def test_decoder_use_number():
    dec = jsonprovider.new_decoder(io.StringIO("[0.1, 7]"))
    dec.use_number()
    assert dec.decode() == [Decimal("0.1"), Decimal(7)]


def test_set_provider():
    class Fixed(JsonProvider):
        def marshal(self, value):
            return b"fixed"

    try:
        jsonprovider.set_provider(Fixed())
        assert jsonprovider.marshal({"a": 1}) == b"fixed"
    finally:
        jsonprovider.set_provider(JsonProvider())
    assert jsonprovider.unmarshal(jsonprovider.marshal([1])) == [1]