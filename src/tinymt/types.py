from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .bits import MASK32, MASK64

__all__ = [
    "Interval",
    "TINYMT32_REFERENCE_PARAMS",
    "TINYMT64_REFERENCE_PARAMS",
    "TinyMT32Params",
    "TinyMT64Params",
]


def _check_word(name: str, value: int, mask: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > mask:
        raise ValueError(f"{name} out of range for {mask.bit_length()}-bit word: {value:#x}")
    return value


@dataclass(frozen=True, slots=True)
class TinyMT32Params:
    """Recurrence parameters for the 32-bit engine (all three are 32-bit words)."""

    mat1: int
    mat2: int
    tmat: int

    def __post_init__(self) -> None:
        _check_word("mat1", self.mat1, MASK32)
        _check_word("mat2", self.mat2, MASK32)
        _check_word("tmat", self.tmat, MASK32)

    @property
    def width(self) -> int:
        return 32

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.mat1, self.mat2, self.tmat)


@dataclass(frozen=True, slots=True)
class TinyMT64Params:
    """Recurrence parameters for the 64-bit engine.

    `mat1` and `mat2` are 32-bit words (`mat2` is applied to the upper half of
    the state word); `tmat` is a full 64-bit tempering matrix.
    """

    mat1: int
    mat2: int
    tmat: int

    def __post_init__(self) -> None:
        _check_word("mat1", self.mat1, MASK32)
        _check_word("mat2", self.mat2, MASK32)
        _check_word("tmat", self.tmat, MASK64)

    @property
    def width(self) -> int:
        return 64

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.mat1, self.mat2, self.tmat)


# Parameter sets used by the TinyMT reference check programs (check32.c / check64.c).
TINYMT32_REFERENCE_PARAMS = TinyMT32Params(mat1=0x8F7011EE, mat2=0xFC78FF1F, tmat=0x3793FDFF)
TINYMT64_REFERENCE_PARAMS = TinyMT64Params(mat1=0xFA051F40, mat2=0xFFD0FFF4, tmat=0x58D02FFEFFBFFFBC)


class Interval(str, Enum):
    CLOSED_OPEN = "[0,1)"
    OPEN_OPEN = "(0,1)"
    OPEN_CLOSED = "(0,1]"
    CLOSED_OPEN_12 = "[1,2)"
    OPEN_OPEN_12 = "(1,2)"

    @classmethod
    def parse(cls, value: Interval | str) -> Interval:
        if isinstance(value, Interval):
            return value
        text = str(value).replace(" ", "")
        try:
            return cls(text)
        except ValueError:
            pass
        try:
            return cls[text.upper()]
        except KeyError as exc:
            raise ValueError(f"unknown interval: {value!r}") from exc
