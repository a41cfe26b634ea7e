from __future__ import annotations

"""`random.Random` front-end over the TinyMT engines."""

import random
from collections.abc import Iterable

from .tinymt32 import TinyMT32
from .tinymt64 import TinyMT64
from .types import TinyMT32Params, TinyMT64Params

__all__ = [
    "TinyMTRandom",
    "engine_for_width",
    "seed_words",
]

Engine = TinyMT32 | TinyMT64
Params = TinyMT32Params | TinyMT64Params

_STATE_VERSION = 1


def engine_for_width(width: int) -> type[TinyMT32] | type[TinyMT64]:
    if int(width) == 32:
        return TinyMT32
    if int(width) == 64:
        return TinyMT64
    raise ValueError(f"width must be 32 or 64, got {width}")


def seed_words(data: bytes | bytearray | str, *, width: int) -> list[int]:
    """Pack a byte string (or UTF-8 text) into little-endian seed words."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    size = int(width) // 8
    raw = bytes(data)
    return [int.from_bytes(raw[offset : offset + size], "little") for offset in range(0, len(raw), size)]


class TinyMTRandom(random.Random):
    """`random.Random` driven by a TinyMT engine instead of MT19937.

    Accepts an int, a byte string, a sequence of ints, or an existing engine as
    the seed. There is no implicit entropy source: `seed(None)` is rejected.
    """

    def __init__(self, x: object = 0, *, width: int = 64, params: Params | None = None) -> None:
        self._width = int(width)
        engine_for_width(self._width)
        if params is not None and params.width != self._width:
            raise ValueError(f"params are for a {params.width}-bit engine, width is {self._width}")
        self._params = params
        self._engine: Engine
        super().__init__(x)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def width(self) -> int:
        return self._width

    def seed(self, a: object = 0, version: int = 2) -> None:  # type: ignore[override]
        if a is None:
            raise TypeError("TinyMTRandom needs an explicit seed")
        if isinstance(a, (TinyMT32, TinyMT64)):
            self._engine = a.copy()
            self._width = a.WORD_BITS
            self._params = a.params
        else:
            cls = engine_for_width(self._width)
            if isinstance(a, int):
                self._engine = cls.from_seed(a, self._params)
            elif isinstance(a, (bytes, bytearray, str)):
                self._engine = cls.from_array(seed_words(a, width=self._width), self._params)
            elif isinstance(a, Iterable):
                self._engine = cls.from_array(a, self._params)
            else:
                raise TypeError(f"unsupported seed type: {type(a).__name__}")
        self.gauss_next = None

    def random(self) -> float:
        engine = self._engine
        if isinstance(engine, TinyMT64):
            return engine.generate_double()
        return engine.generate_32double()

    def getrandbits(self, k: int) -> int:
        k = int(k)
        if k < 0:
            raise ValueError("number of bits must be non-negative")
        word_bits = self._engine.WORD_BITS
        next_word = self._engine.next_int
        result = 0
        shift = 0
        while k > 0:
            word = next_word()
            if k < word_bits:
                word >>= word_bits - k
            result |= word << shift
            shift += word_bits
            k -= word_bits
        return result

    def randbytes(self, n: int) -> bytes:
        return self._engine.random_bytes(n)

    def fill_bytes(self, dest: bytearray | memoryview) -> None:
        self._engine.fill_bytes(dest)

    def getstate(self) -> tuple:
        engine = self._engine
        return (_STATE_VERSION, engine.WORD_BITS, engine.status, engine.params.as_tuple(), self.gauss_next)

    def setstate(self, state: tuple) -> None:
        try:
            version, width, status, params, gauss_next = state
        except (TypeError, ValueError) as exc:
            raise ValueError(f"malformed TinyMTRandom state: {state!r}") from exc
        if version != _STATE_VERSION:
            raise ValueError(f"state with version {version!r} passed to setstate() of version {_STATE_VERSION}")
        cls = engine_for_width(width)
        params_cls = TinyMT32Params if cls is TinyMT32 else TinyMT64Params
        try:
            resolved = params_cls(*params)
            engine = cls.from_state(status, resolved)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid TinyMTRandom state: {exc}") from exc
        self._engine = engine
        self._width = cls.WORD_BITS
        self._params = resolved
        self.gauss_next = gauss_next
