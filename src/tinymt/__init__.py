from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .adapter import TinyMTRandom
from .tinymt32 import TinyMT32
from .tinymt64 import TinyMT64
from .types import (
    TINYMT32_REFERENCE_PARAMS,
    TINYMT64_REFERENCE_PARAMS,
    Interval,
    TinyMT32Params,
    TinyMT64Params,
)

try:
    __version__ = version("tinymt")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

__all__ = [
    "Interval",
    "TINYMT32_REFERENCE_PARAMS",
    "TINYMT64_REFERENCE_PARAMS",
    "TinyMT32",
    "TinyMT32Params",
    "TinyMT64",
    "TinyMT64Params",
    "TinyMTRandom",
]
