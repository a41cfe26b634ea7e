from __future__ import annotations

"""Word masks and IEEE-754 bit reinterpretation helpers shared by both engines."""

import struct
from collections.abc import Callable

__all__ = [
    "MASK32",
    "MASK64",
    "bit_to_mask32",
    "bit_to_mask64",
    "f32_from_bits",
    "f64_from_bits",
    "fill_le_words",
]

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF


def bit_to_mask32(bit: int) -> int:
    """All-ones when the low bit is set, all-zeros otherwise.

    Same as `-(int32_t)(bit & 1)` reinterpreted as `uint32_t`.
    """
    return (-(bit & 1)) & MASK32


def bit_to_mask64(bit: int) -> int:
    return (-(bit & 1)) & MASK64


def f32_from_bits(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", int(bits) & MASK32))[0]


def f64_from_bits(bits: int) -> float:
    return struct.unpack("<d", struct.pack("<Q", int(bits) & MASK64))[0]


def fill_le_words(dest: bytearray | memoryview, next_word: Callable[[], int], word_size: int) -> None:
    """Fill `dest` with little-endian words from `next_word`, truncating the last one."""
    view = memoryview(dest).cast("B")
    if view.readonly:
        raise TypeError("cannot fill a read-only buffer")
    length = len(view)
    position = 0
    while position < length:
        chunk = next_word().to_bytes(word_size, "little")
        take = min(word_size, length - position)
        view[position : position + take] = chunk[:take]
        position += take
