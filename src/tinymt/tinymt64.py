from __future__ import annotations

from collections.abc import Iterable, Sequence

from .bits import MASK32, MASK64, bit_to_mask64, f64_from_bits, fill_le_words
from .trace import trace_enabled, trace_event
from .types import TINYMT64_REFERENCE_PARAMS, Interval, TinyMT64Params

TINYMT64_MEXP = 127
TINYMT64_SH0 = 12
TINYMT64_SH1 = 11
TINYMT64_SH8 = 8
TINYMT64_MASK = 0x7FFFFFFFFFFFFFFF
TINYMT64_MUL = 1.0 / 9007199254740992.0
MIN_LOOP = 8

_PERIOD_MARKER = (ord("T"), ord("M"))


def _ini_func1(x: int) -> int:
    return ((x ^ (x >> 59)) * 2173292883993) & MASK64


def _ini_func2(x: int) -> int:
    return ((x ^ (x >> 59)) * 58885565329898161) & MASK64


def _is_degenerate(status: Sequence[int]) -> bool:
    return (status[0] & TINYMT64_MASK) == 0 and status[1] == 0


def _certify_period(status: list[int]) -> bool:
    if not _is_degenerate(status):
        return False
    status[:] = _PERIOD_MARKER
    return True


def _coerce_params(params: TinyMT64Params | None) -> TinyMT64Params:
    if params is None:
        return TINYMT64_REFERENCE_PARAMS
    if not isinstance(params, TinyMT64Params):
        raise TypeError(f"expected TinyMT64Params, got {type(params).__name__}")
    return params


class TinyMT64:
    """TinyMT 64-bit generator: 127-bit state in two 64-bit words.

    Unlike the 32-bit engine there is no pre-loop after seeding.
    """

    __slots__ = ("_status", "_params")

    MEXP = TINYMT64_MEXP
    WORD_BITS = 64

    def __init__(self, seed: int = 0, *, params: TinyMT64Params | None = None) -> None:
        self._params = _coerce_params(params)
        self._status = [0, 0]
        self.init(seed)

    @classmethod
    def from_seed(cls, seed: int, params: TinyMT64Params | None = None) -> TinyMT64:
        return cls(seed, params=params)

    @classmethod
    def from_array(cls, init_key: Iterable[int], params: TinyMT64Params | None = None) -> TinyMT64:
        engine = cls.__new__(cls)
        engine._params = _coerce_params(params)
        engine._status = [0, 0]
        engine.init_by_array(init_key)
        return engine

    @classmethod
    def from_state(cls, status: Sequence[int], params: TinyMT64Params | None = None) -> TinyMT64:
        words = [int(word) for word in status]
        if len(words) != 2:
            raise ValueError(f"TinyMT64 state must have 2 words, got {len(words)}")
        for word in words:
            if word < 0 or word > MASK64:
                raise ValueError(f"TinyMT64 state word out of range: {word:#x}")
        if _is_degenerate(words):
            raise ValueError("TinyMT64 state is all-zero")
        engine = cls.__new__(cls)
        engine._params = _coerce_params(params)
        engine._status = words
        return engine

    @property
    def params(self) -> TinyMT64Params:
        return self._params

    @property
    def status(self) -> tuple[int, int]:
        return (self._status[0], self._status[1])

    @property
    def mexp(self) -> int:
        return TINYMT64_MEXP

    def copy(self) -> TinyMT64:
        clone = TinyMT64.__new__(type(self))
        clone._params = self._params
        clone._status = list(self._status)
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> TinyMT64:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TinyMT64):
            return NotImplemented
        return self._status == other._status and self._params == other._params

    def __repr__(self) -> str:
        words = ", ".join(f"{word:#018x}" for word in self._status)
        return f"TinyMT64(status=[{words}], params={self._params!r})"

    def init(self, seed: int) -> None:
        seed = int(seed) & MASK64
        params = self._params
        st = [seed ^ (params.mat1 << 32), params.mat2 ^ params.tmat]
        for i in range(1, MIN_LOOP):
            prev = st[(i - 1) & 1]
            st[i & 1] ^= (i + 6364136223846793005 * (prev ^ (prev >> 62))) & MASK64
        self._status = st
        certified = _certify_period(st)
        if trace_enabled():
            trace_event("seed", width=64, kind="scalar", seed=seed, certified=certified)

    def init_by_array(self, init_key: Iterable[int]) -> None:
        key = [int(word) & MASK64 for word in init_key]
        key_length = len(key)
        lag = 1
        mid = 1
        size = 4
        params = self._params
        st = [0, params.mat1, params.mat2, params.tmat]

        count = max(MIN_LOOP, key_length + 1)
        r = _ini_func1(st[0] ^ st[mid % size] ^ st[(size - 1) % size])
        st[mid % size] = (st[mid % size] + r) & MASK64
        r = (r + key_length) & MASK64
        st[(mid + lag) % size] = (st[(mid + lag) % size] + r) & MASK64
        st[0] = r
        count -= 1

        i = 1
        boundary = min(count, key_length)
        for word in key[:boundary]:
            r = _ini_func1(st[i] ^ st[(i + mid) % size] ^ st[(i + size - 1) % size])
            st[(i + mid) % size] = (st[(i + mid) % size] + r) & MASK64
            r = (r + word + i) & MASK64
            st[(i + mid + lag) % size] = (st[(i + mid + lag) % size] + r) & MASK64
            st[i] = r
            i = (i + 1) % size
        for _ in range(boundary, count):
            r = _ini_func1(st[i] ^ st[(i + mid) % size] ^ st[(i + size - 1) % size])
            st[(i + mid) % size] = (st[(i + mid) % size] + r) & MASK64
            r = (r + i) & MASK64
            st[(i + mid + lag) % size] = (st[(i + mid + lag) % size] + r) & MASK64
            st[i] = r
            i = (i + 1) % size
        for _ in range(size):
            r = _ini_func2((st[i] + st[(i + mid) % size] + st[(i + size - 1) % size]) & MASK64)
            st[(i + mid) % size] ^= r
            r = (r - i) & MASK64
            st[(i + mid + lag) % size] ^= r
            st[i] = r
            i = (i + 1) % size

        status = [st[0] ^ st[1], st[2] ^ st[3]]
        self._status = status
        certified = _certify_period(status)
        if trace_enabled():
            trace_event("seed", width=64, kind="array", key_length=key_length, certified=certified)

    def next_state(self) -> None:
        st = self._status
        params = self._params
        st[0] &= TINYMT64_MASK
        x = st[0] ^ st[1]
        x ^= (x << TINYMT64_SH0) & MASK64
        # swap the 32-bit halves into each other
        x ^= x >> 32
        x ^= (x << 32) & MASK64
        x ^= (x << TINYMT64_SH1) & MASK64
        st[0] = st[1]
        st[1] = x
        mask = bit_to_mask64(x)
        st[0] ^= mask & params.mat1
        st[1] ^= mask & ((params.mat2 << 32) & MASK64)

    def temper(self) -> int:
        st = self._status
        x = (st[0] + st[1]) & MASK64
        x ^= st[0] >> TINYMT64_SH8
        return x ^ (bit_to_mask64(x) & self._params.tmat)

    def temper_conv(self) -> float:
        """Tempered output as a double in [1, 2)."""
        return f64_from_bits((self.temper() >> 12) | 0x3FF0000000000000)

    def temper_conv_open(self) -> float:
        """Tempered output as a double in (1, 2)."""
        return f64_from_bits((self.temper() >> 12) | 0x3FF0000000000001)

    def generate_uint64(self) -> int:
        self.next_state()
        return self.temper()

    def generate_double(self) -> float:
        """[0, 1) with 53 bits of precision, by scaling."""
        self.next_state()
        return (self.temper() >> 11) * TINYMT64_MUL

    def generate_double01(self) -> float:
        self.next_state()
        return self.temper_conv() - 1.0

    def generate_double12(self) -> float:
        self.next_state()
        return self.temper_conv()

    def generate_double12_open(self) -> float:
        self.next_state()
        return self.temper_conv_open()

    def generate_double_oc(self) -> float:
        """(0, 1]: never returns 0.0."""
        self.next_state()
        return 2.0 - self.temper_conv()

    def generate_double_oo(self) -> float:
        self.next_state()
        return self.temper_conv_open() - 1.0

    def next_float(self, interval: Interval | str = Interval.CLOSED_OPEN) -> float:
        interval = Interval.parse(interval)
        if interval is Interval.CLOSED_OPEN:
            return self.generate_double()
        if interval is Interval.OPEN_OPEN:
            return self.generate_double_oo()
        if interval is Interval.OPEN_CLOSED:
            return self.generate_double_oc()
        if interval is Interval.CLOSED_OPEN_12:
            return self.generate_double12()
        return self.generate_double12_open()

    def next_int(self) -> int:
        return self.generate_uint64()

    def next_u32(self) -> int:
        return self.generate_uint64() & MASK32

    def next_u64(self) -> int:
        return self.generate_uint64()

    def fill_bytes(self, dest: bytearray | memoryview) -> None:
        fill_le_words(dest, self.generate_uint64, 8)

    def random_bytes(self, n: int) -> bytes:
        n = int(n)
        if n < 0:
            raise ValueError(f"byte count must be non-negative, got {n}")
        buf = bytearray(n)
        self.fill_bytes(buf)
        return bytes(buf)


__all__ = [
    "TINYMT64_MEXP",
    "TinyMT64",
]
