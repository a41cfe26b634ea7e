from __future__ import annotations

from pathlib import Path

import msgspec

from .types import TinyMT32Params, TinyMT64Params


class ParamsFileError(ValueError):
    pass


class ParamsFile(msgspec.Struct, forbid_unknown_fields=True):
    """JSON parameter set, e.g. `{"width": 32, "mat1": "0x8f7011ee", ...}`."""

    width: int
    mat1: int | str
    mat2: int | str
    tmat: int | str


_PARAMS_DECODER = msgspec.json.Decoder(type=ParamsFile)


def _parse_word(name: str, value: int | str) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(value.strip(), 0)
    except ValueError as exc:
        raise ParamsFileError(f"invalid integer for {name}: {value!r}") from exc


def params_from_file(data: ParamsFile) -> TinyMT32Params | TinyMT64Params:
    words = {
        "mat1": _parse_word("mat1", data.mat1),
        "mat2": _parse_word("mat2", data.mat2),
        "tmat": _parse_word("tmat", data.tmat),
    }
    if data.width == 32:
        params_cls: type[TinyMT32Params] | type[TinyMT64Params] = TinyMT32Params
    elif data.width == 64:
        params_cls = TinyMT64Params
    else:
        raise ParamsFileError(f"width must be 32 or 64, got {data.width}")
    try:
        return params_cls(**words)
    except ValueError as exc:
        raise ParamsFileError(str(exc)) from exc


def decode_params(blob: bytes | str) -> TinyMT32Params | TinyMT64Params:
    try:
        data = _PARAMS_DECODER.decode(blob)
    except msgspec.DecodeError as exc:
        raise ParamsFileError(f"failed to decode params: {exc}") from exc
    return params_from_file(data)


def encode_params(params: TinyMT32Params | TinyMT64Params) -> bytes:
    data = ParamsFile(
        width=params.width,
        mat1=f"{params.mat1:#010x}",
        mat2=f"{params.mat2:#010x}",
        tmat=f"{params.tmat:#0{params.width // 4 + 2}x}",
    )
    return msgspec.json.encode(data)


def load_params(path: Path) -> TinyMT32Params | TinyMT64Params:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ParamsFileError(f"cannot read {path}: {exc}") from exc
    return decode_params(data)


__all__ = [
    "ParamsFile",
    "ParamsFileError",
    "decode_params",
    "encode_params",
    "load_params",
    "params_from_file",
]
