from __future__ import annotations

from pathlib import Path

import msgspec
from construct import Array, Const, Int8ul, Int32ul, Int64ul, OneOf, Struct, Switch, Terminated, this
from construct.core import ConstructError

from .tinymt32 import TinyMT32
from .tinymt64 import TinyMT64
from .types import TinyMT32Params, TinyMT64Params

SNAPSHOT_MAGIC = b"TMTS"
SNAPSHOT_VERSION = 1


class SnapshotFormatError(ValueError):
    pass


TINYMT32_BODY = Struct(
    "mat1" / Int32ul,
    "mat2" / Int32ul,
    "tmat" / Int32ul,
    "status" / Array(4, Int32ul),
)

TINYMT64_BODY = Struct(
    "mat1" / Int32ul,
    "mat2" / Int32ul,
    "tmat" / Int64ul,
    "status" / Array(2, Int64ul),
)

SNAPSHOT_STRUCT = Struct(
    "magic" / Const(SNAPSHOT_MAGIC),
    "version" / OneOf(Int8ul, [SNAPSHOT_VERSION]),
    "width" / OneOf(Int8ul, [32, 64]),
    "body" / Switch(this.width, {32: TINYMT32_BODY, 64: TINYMT64_BODY}),
    Terminated,
)


class StateSnapshot(msgspec.Struct, forbid_unknown_fields=True):
    width: int
    mat1: int
    mat2: int
    tmat: int
    status: list[int] = msgspec.field(default_factory=list)


_JSON_DECODER = msgspec.json.Decoder(type=StateSnapshot)


def _engine_from_fields(
    *,
    width: int,
    mat1: int,
    mat2: int,
    tmat: int,
    status: list[int],
) -> TinyMT32 | TinyMT64:
    try:
        if int(width) == 32:
            return TinyMT32.from_state(status, TinyMT32Params(mat1=mat1, mat2=mat2, tmat=tmat))
        if int(width) == 64:
            return TinyMT64.from_state(status, TinyMT64Params(mat1=mat1, mat2=mat2, tmat=tmat))
    except (TypeError, ValueError) as exc:
        raise SnapshotFormatError(f"invalid snapshot contents: {exc}") from exc
    raise SnapshotFormatError(f"unsupported width: {width!r}")


def to_snapshot(engine: TinyMT32 | TinyMT64) -> StateSnapshot:
    params = engine.params
    return StateSnapshot(
        width=int(engine.WORD_BITS),
        mat1=int(params.mat1),
        mat2=int(params.mat2),
        tmat=int(params.tmat),
        status=list(engine.status),
    )


def from_snapshot(snapshot: StateSnapshot) -> TinyMT32 | TinyMT64:
    return _engine_from_fields(
        width=snapshot.width,
        mat1=snapshot.mat1,
        mat2=snapshot.mat2,
        tmat=snapshot.tmat,
        status=list(snapshot.status),
    )


def encode_snapshot(engine: TinyMT32 | TinyMT64) -> bytes:
    snap = to_snapshot(engine)
    try:
        return SNAPSHOT_STRUCT.build(
            {
                "version": SNAPSHOT_VERSION,
                "width": snap.width,
                "body": {
                    "mat1": snap.mat1,
                    "mat2": snap.mat2,
                    "tmat": snap.tmat,
                    "status": snap.status,
                },
            },
        )
    except ConstructError as exc:
        raise SnapshotFormatError(f"failed to build snapshot: {exc}") from exc


def decode_snapshot(blob: bytes) -> TinyMT32 | TinyMT64:
    try:
        parsed = SNAPSHOT_STRUCT.parse(bytes(blob))
    except ConstructError as exc:
        raise SnapshotFormatError(f"failed to parse snapshot: {exc}") from exc
    body = parsed.body
    return _engine_from_fields(
        width=parsed.width,
        mat1=body.mat1,
        mat2=body.mat2,
        tmat=body.tmat,
        status=list(body.status),
    )


def encode_snapshot_json(engine: TinyMT32 | TinyMT64) -> bytes:
    return msgspec.json.encode(to_snapshot(engine))


def decode_snapshot_json(blob: bytes | str) -> TinyMT32 | TinyMT64:
    try:
        snap = _JSON_DECODER.decode(blob)
    except msgspec.DecodeError as exc:
        raise SnapshotFormatError(f"failed to decode snapshot json: {exc}") from exc
    return from_snapshot(snap)


def save_snapshot(path: Path, engine: TinyMT32 | TinyMT64) -> Path:
    path = Path(path)
    if path.suffix.lower() == ".json":
        path.write_bytes(encode_snapshot_json(engine))
    else:
        path.write_bytes(encode_snapshot(engine))
    return path


def load_snapshot(path: Path) -> TinyMT32 | TinyMT64:
    path = Path(path)
    data = path.read_bytes()
    if path.suffix.lower() == ".json":
        return decode_snapshot_json(data)
    return decode_snapshot(data)


__all__ = [
    "SNAPSHOT_MAGIC",
    "SNAPSHOT_STRUCT",
    "SNAPSHOT_VERSION",
    "SnapshotFormatError",
    "StateSnapshot",
    "decode_snapshot",
    "decode_snapshot_json",
    "encode_snapshot",
    "encode_snapshot_json",
    "from_snapshot",
    "load_snapshot",
    "save_snapshot",
    "to_snapshot",
]
