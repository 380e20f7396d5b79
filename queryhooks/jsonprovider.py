"""A swappable JSON provider with stream encoders and decoders."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, TextIO


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class StreamEncoder:
    """Writes one JSON value per line to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def encode(self, value: Any) -> None:
        self._stream.write(_dumps(value) + "\n")


class StreamDecoder:
    """Reads successive JSON values from a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._buffer: str | None = None
        self._pos = 0
        self._use_number = False

    def use_number(self) -> None:
        """Decode numbers as exact Decimal values instead of int and float."""
        self._use_number = True

    def decode(self) -> Any:
        """Return the next value; raise EOFError when none is left."""
        if self._buffer is None:
            self._buffer = self._stream.read()
        text = self._buffer
        while self._pos < len(text) and text[self._pos].isspace():
            self._pos += 1
        if self._pos >= len(text):
            raise EOFError("no more JSON values")
        if self._use_number:
            decoder = json.JSONDecoder(parse_float=Decimal, parse_int=Decimal)
        else:
            decoder = json.JSONDecoder()
        value, self._pos = decoder.raw_decode(text, self._pos)
        return value


class JsonProvider:
    """The standard JSON provider."""

    def marshal(self, value: Any) -> bytes:
        return _dumps(value).encode()

    def unmarshal(self, data) -> Any:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode()
        return json.loads(data)

    def new_encoder(self, stream: TextIO) -> StreamEncoder:
        return StreamEncoder(stream)

    def new_decoder(self, stream: TextIO) -> StreamDecoder:
        return StreamDecoder(stream)


class _Registry:
    """Holds the provider used by the module-level functions."""

    def __init__(self) -> None:
        self.provider: Any = JsonProvider()


_registry = _Registry()


def set_provider(provider: Any) -> None:
    """Replace the provider used by the module-level functions."""
    _registry.provider = provider


def marshal(value: Any) -> bytes:
    return _registry.provider.marshal(value)


def unmarshal(data) -> Any:
    return _registry.provider.unmarshal(data)


def new_encoder(stream: TextIO):
    return _registry.provider.new_encoder(stream)


def new_decoder(stream: TextIO):
    return _registry.provider.new_decoder(stream)