from __future__ import annotations

from collections.abc import Iterable, Sequence

from .bits import MASK32, bit_to_mask32, f32_from_bits, fill_le_words
from .trace import trace_enabled, trace_event
from .types import TINYMT32_REFERENCE_PARAMS, Interval, TinyMT32Params

TINYMT32_MEXP = 127
TINYMT32_SH0 = 1
TINYMT32_SH1 = 10
TINYMT32_SH8 = 8
TINYMT32_MASK = 0x7FFFFFFF
TINYMT32_MUL = 1.0 / 16777216.0
MIN_LOOP = 8
PRE_LOOP = 8

_PERIOD_MARKER = (ord("T"), ord("I"), ord("N"), ord("Y"))


def _ini_func1(x: int) -> int:
    return ((x ^ (x >> 27)) * 1664525) & MASK32


def _ini_func2(x: int) -> int:
    return ((x ^ (x >> 27)) * 1566083941) & MASK32


def _is_degenerate(status: Sequence[int]) -> bool:
    return (status[0] & TINYMT32_MASK) == 0 and status[1] == 0 and status[2] == 0 and status[3] == 0


def _certify_period(status: list[int]) -> bool:
    # An all-zero state (ignoring the top bit of word 0) would collapse the 2^127-1 period.
    if not _is_degenerate(status):
        return False
    status[:] = _PERIOD_MARKER
    return True


def _coerce_params(params: TinyMT32Params | None) -> TinyMT32Params:
    if params is None:
        return TINYMT32_REFERENCE_PARAMS
    if not isinstance(params, TinyMT32Params):
        raise TypeError(f"expected TinyMT32Params, got {type(params).__name__}")
    return params


class TinyMT32:
    """TinyMT 32-bit generator.

    The state is 127 bits spread over four 32-bit words; `params` selects the
    recurrence. Every output runs `next_state()` first and then tempers the new
    state, so instances must not be shared between threads without a lock.
    """

    __slots__ = ("_status", "_params")

    MEXP = TINYMT32_MEXP
    WORD_BITS = 32

    def __init__(self, seed: int = 0, *, params: TinyMT32Params | None = None) -> None:
        self._params = _coerce_params(params)
        self._status = [0, 0, 0, 0]
        self.init(seed)

    @classmethod
    def from_seed(cls, seed: int, params: TinyMT32Params | None = None) -> TinyMT32:
        return cls(seed, params=params)

    @classmethod
    def from_array(cls, init_key: Iterable[int], params: TinyMT32Params | None = None) -> TinyMT32:
        engine = cls.__new__(cls)
        engine._params = _coerce_params(params)
        engine._status = [0, 0, 0, 0]
        engine.init_by_array(init_key)
        return engine

    @classmethod
    def from_state(cls, status: Sequence[int], params: TinyMT32Params | None = None) -> TinyMT32:
        words = [int(word) for word in status]
        if len(words) != 4:
            raise ValueError(f"TinyMT32 state must have 4 words, got {len(words)}")
        for word in words:
            if word < 0 or word > MASK32:
                raise ValueError(f"TinyMT32 state word out of range: {word:#x}")
        if _is_degenerate(words):
            raise ValueError("TinyMT32 state is all-zero")
        engine = cls.__new__(cls)
        engine._params = _coerce_params(params)
        engine._status = words
        return engine

    @property
    def params(self) -> TinyMT32Params:
        return self._params

    @property
    def status(self) -> tuple[int, int, int, int]:
        st = self._status
        return (st[0], st[1], st[2], st[3])

    @property
    def mexp(self) -> int:
        return TINYMT32_MEXP

    def copy(self) -> TinyMT32:
        clone = TinyMT32.__new__(type(self))
        clone._params = self._params
        clone._status = list(self._status)
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> TinyMT32:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TinyMT32):
            return NotImplemented
        return self._status == other._status and self._params == other._params

    def __repr__(self) -> str:
        words = ", ".join(f"{word:#010x}" for word in self._status)
        return f"TinyMT32(status=[{words}], params={self._params!r})"

    def init(self, seed: int) -> None:
        seed = int(seed) & MASK32
        params = self._params
        st = [seed, params.mat1, params.mat2, params.tmat]
        for i in range(1, MIN_LOOP):
            prev = st[(i - 1) & 3]
            st[i & 3] ^= (i + 1812433253 * (prev ^ (prev >> 30))) & MASK32
        self._status = st
        certified = _certify_period(st)
        for _ in range(PRE_LOOP):
            self.next_state()
        if trace_enabled():
            trace_event("seed", width=32, kind="scalar", seed=seed, certified=certified)

    def init_by_array(self, init_key: Iterable[int]) -> None:
        key = [int(word) & MASK32 for word in init_key]
        key_length = len(key)
        lag = 1
        mid = 1
        size = 4
        params = self._params
        st = [0, params.mat1, params.mat2, params.tmat]

        count = max(MIN_LOOP, key_length + 1)
        r = _ini_func1(st[0] ^ st[mid % size] ^ st[(size - 1) % size])
        st[mid % size] = (st[mid % size] + r) & MASK32
        r = (r + key_length) & MASK32
        st[(mid + lag) % size] = (st[(mid + lag) % size] + r) & MASK32
        st[0] = r
        count -= 1

        i = 1
        boundary = min(count, key_length)
        for j in range(boundary):
            r = _ini_func1(st[i % size] ^ st[(i + mid) % size] ^ st[(i + size - 1) % size])
            st[(i + mid) % size] = (st[(i + mid) % size] + r) & MASK32
            r = (r + key[j] + i) & MASK32
            st[(i + mid + lag) % size] = (st[(i + mid + lag) % size] + r) & MASK32
            st[i % size] = r
            i = (i + 1) % size
        for _ in range(boundary, count):
            r = _ini_func1(st[i % size] ^ st[(i + mid) % size] ^ st[(i + size - 1) % size])
            st[(i + mid) % size] = (st[(i + mid) % size] + r) & MASK32
            r = (r + i) & MASK32
            st[(i + mid + lag) % size] = (st[(i + mid + lag) % size] + r) & MASK32
            st[i % size] = r
            i = (i + 1) % size
        for _ in range(size):
            r = _ini_func2((st[i % size] + st[(i + mid) % size] + st[(i + size - 1) % size]) & MASK32)
            st[(i + mid) % size] ^= r
            r = (r - i) & MASK32
            st[(i + mid + lag) % size] ^= r
            st[i % size] = r
            i = (i + 1) % size

        self._status = st
        certified = _certify_period(st)
        for _ in range(PRE_LOOP):
            self.next_state()
        if trace_enabled():
            trace_event("seed", width=32, kind="array", key_length=key_length, certified=certified)

    def next_state(self) -> None:
        st = self._status
        params = self._params
        y = st[3]
        x = (st[0] & TINYMT32_MASK) ^ st[1] ^ st[2]
        x ^= (x << TINYMT32_SH0) & MASK32
        y ^= (y >> TINYMT32_SH0) ^ x
        st[0] = st[1]
        st[1] = st[2]
        st[2] = x ^ ((y << TINYMT32_SH1) & MASK32)
        st[3] = y
        mask = bit_to_mask32(y)
        st[1] ^= mask & params.mat1
        st[2] ^= mask & params.mat2

    def temper(self) -> int:
        st = self._status
        t0 = st[3]
        # Addition, not the xor used by the reference LINEARITY_CHECK build.
        t1 = (st[0] + (st[2] >> TINYMT32_SH8)) & MASK32
        t0 ^= t1
        return t0 ^ (bit_to_mask32(t1) & self._params.tmat)

    def temper_conv(self) -> float:
        """Tempered output as a float32 in [1, 2)."""
        return f32_from_bits((self.temper() >> 9) | 0x3F800000)

    def temper_conv_open(self) -> float:
        """Tempered output as a float32 in (1, 2)."""
        return f32_from_bits((self.temper() >> 9) | 0x3F800001)

    def generate_uint32(self) -> int:
        self.next_state()
        return self.temper()

    def generate_float(self) -> float:
        """[0, 1) with 24 bits of precision, by scaling."""
        self.next_state()
        return (self.temper() >> 8) * TINYMT32_MUL

    def generate_float01(self) -> float:
        """[0, 1), by bit injection."""
        self.next_state()
        return self.temper_conv() - 1.0

    def generate_float12(self) -> float:
        self.next_state()
        return self.temper_conv()

    def generate_float12_open(self) -> float:
        self.next_state()
        return self.temper_conv_open()

    def generate_float_oc(self) -> float:
        """(0, 1]: never returns 0.0.

        Advances the state twice, matching the reference implementation.
        """
        self.next_state()
        return 1.0 - self.generate_float()

    def generate_float_oo(self) -> float:
        self.next_state()
        return self.temper_conv_open() - 1.0

    def generate_32double(self) -> float:
        """[0, 1) as a double carrying only 32 bits of precision."""
        self.next_state()
        return self.temper() * (1.0 / 4294967296.0)

    def next_float(self, interval: Interval | str = Interval.CLOSED_OPEN) -> float:
        interval = Interval.parse(interval)
        if interval is Interval.CLOSED_OPEN:
            return self.generate_float()
        if interval is Interval.OPEN_OPEN:
            return self.generate_float_oo()
        if interval is Interval.OPEN_CLOSED:
            return self.generate_float_oc()
        if interval is Interval.CLOSED_OPEN_12:
            return self.generate_float12()
        return self.generate_float12_open()

    def next_int(self) -> int:
        return self.generate_uint32()

    def next_u32(self) -> int:
        return self.generate_uint32()

    def next_u64(self) -> int:
        hi = self.generate_uint32()
        lo = self.generate_uint32()
        return (hi << 32) | lo

    def fill_bytes(self, dest: bytearray | memoryview) -> None:
        fill_le_words(dest, self.generate_uint32, 4)

    def random_bytes(self, n: int) -> bytes:
        n = int(n)
        if n < 0:
            raise ValueError(f"byte count must be non-negative, got {n}")
        buf = bytearray(n)
        self.fill_bytes(buf)
        return bytes(buf)


__all__ = [
    "TINYMT32_MEXP",
    "TinyMT32",
]
