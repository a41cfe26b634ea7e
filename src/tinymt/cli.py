from __future__ import annotations

import secrets
import string
import struct
from collections.abc import Callable
from pathlib import Path

import typer

from .adapter import TinyMTRandom, engine_for_width
from .config import ParamsFileError, encode_params, load_params
from .snapshot import SnapshotFormatError, load_snapshot, save_snapshot
from .tinymt32 import TinyMT32
from .tinymt64 import TinyMT64
from .trace import close_trace_log, init_trace_log, trace_event
from .types import TINYMT32_REFERENCE_PARAMS, TINYMT64_REFERENCE_PARAMS, TinyMT32Params, TinyMT64Params


app = typer.Typer(
    add_completion=False,
    help=(
        "TinyMT 64/32-bit random number generator. Seeds use the reference parameter sets "
        "(see `tinymt params`), so output is not comparable with tools seeding zero parameters."
    ),
)

RADIX_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase

_OUTPUT_TYPES: dict[str, str] = {
    "int": "int",
    "int32": "int",
    "i32": "int",
    "u32": "int",
    "32": "int",
    "long": "long",
    "int64": "long",
    "i64": "long",
    "u64": "long",
    "64": "long",
    "float": "float",
    "float32": "float",
    "f32": "float",
    "double": "double",
    "float64": "double",
    "f64": "double",
    "string": "string",
    "str": "string",
}

_OUTPUT_WIDTH: dict[str, int] = {
    "int": 32,
    "float": 32,
    "long": 64,
    "double": 64,
    "string": 64,
}


def _resolve_output_type(text: str) -> str:
    kind = _OUTPUT_TYPES.get(text.strip().lower())
    if kind is None:
        raise typer.BadParameter(f"the specified type is not defined: {text}", param_hint="--type")
    return kind


def _parse_int_auto(text: str, *, width: int) -> int:
    try:
        value = int(text.strip(), 0)
    except ValueError as exc:
        raise typer.BadParameter(f"invalid integer: {text!r}", param_hint="SEED") from exc
    if value < 0 or value >= (1 << width):
        raise typer.BadParameter(f"seed {text!r} does not fit in {width} bits", param_hint="SEED")
    return value


def _parse_seed(text: str, *, width: int) -> int | list[int]:
    if "," in text:
        return [_parse_int_auto(part, width=width) for part in text.split(",") if part.strip()]
    return _parse_int_auto(text, width=width)


def _format_f32(value: float) -> str:
    # Shortest decimal that reads back as the same float32.
    packed = struct.pack("<f", value)
    for digits in range(6, 10):
        text = f"{value:.{digits}g}"
        if struct.pack("<f", float(text)) == packed:
            return text
    return repr(value)


def _load_engine(
    *,
    width: int,
    seed: str | None,
    params_path: Path | None,
    state_path: Path | None,
) -> TinyMT32 | TinyMT64:
    if state_path is not None:
        if seed is not None or params_path is not None:
            raise typer.BadParameter("cannot be combined with a seed or --params", param_hint="--state")
        try:
            engine = load_snapshot(state_path)
        except (OSError, SnapshotFormatError) as exc:
            raise typer.BadParameter(str(exc), param_hint="--state") from exc
        if engine.WORD_BITS != width:
            raise typer.BadParameter(
                f"snapshot holds a {engine.WORD_BITS}-bit generator, output type needs {width}",
                param_hint="--state",
            )
        return engine

    params: TinyMT32Params | TinyMT64Params | None = None
    if params_path is not None:
        try:
            params = load_params(params_path)
        except ParamsFileError as exc:
            raise typer.BadParameter(str(exc), param_hint="--params") from exc
        if params.width != width:
            raise typer.BadParameter(
                f"params are for a {params.width}-bit generator, output type needs {width}",
                param_hint="--params",
            )

    cls = engine_for_width(width)
    if seed is None:
        return cls.from_seed(secrets.randbits(width), params)  # type: ignore[arg-type]
    parsed = _parse_seed(seed, width=width)
    if isinstance(parsed, list):
        return cls.from_array(parsed, params)  # type: ignore[arg-type]
    return cls.from_seed(parsed, params)  # type: ignore[arg-type]


def _formatter(
    kind: str,
    engine: TinyMT32 | TinyMT64,
    *,
    length: int,
    radix: int,
) -> tuple[Callable[[], str], TinyMT32 | TinyMT64]:
    if kind == "int":
        return (lambda: str(engine.next_u32())), engine
    if kind == "long":
        return (lambda: str(engine.next_u64())), engine
    if kind == "float":
        return (lambda: _format_f32(engine.next_float())), engine
    if kind == "double":
        return (lambda: repr(engine.next_float())), engine
    rng = TinyMTRandom(engine)
    alphabet = RADIX_ALPHABET[:radix]
    return (lambda: "".join(rng.choice(alphabet) for _ in range(length))), rng.engine


@app.command("generate")
def cmd_generate(
    seed: str | None = typer.Argument(
        None,
        help="seed of the generator: integer (decimal or 0x) or comma-separated list for array seeding",
    ),
    count: int = typer.Option(1, "--count", "-n", min=0, help="number to generate"),
    kind: str = typer.Option(
        "double",
        "--type",
        "-t",
        help="generate random number of int, long, float, double or string type",
    ),
    length: int = typer.Option(16, "--length", "-l", min=1, help="characters per string (string type)"),
    radix: int = typer.Option(62, "--radix", "-r", min=2, max=62, help="alphabet size from 0-9a-zA-Z (string type)"),
    params_path: Path | None = typer.Option(None, "--params", help="JSON parameter file (mat1/mat2/tmat)"),
    state_path: Path | None = typer.Option(None, "--state", help="resume from a saved snapshot instead of seeding"),
    save_state: Path | None = typer.Option(None, "--save-state", help="write the generator state here afterwards"),
    trace_log: Path | None = typer.Option(None, "--trace-log", help="append trace events to this file"),
) -> None:
    """Print COUNT random values, one per line."""
    output = _resolve_output_type(kind)
    width = _OUTPUT_WIDTH[output]
    if trace_log is not None:
        init_trace_log(trace_log)
    try:
        engine = _load_engine(width=width, seed=seed, params_path=params_path, state_path=state_path)
        emit, engine = _formatter(output, engine, length=length, radix=radix)
        trace_event("generate", type=output, width=width, count=count, resumed=state_path is not None)
        for _ in range(count):
            typer.echo(emit())
        if save_state is not None:
            try:
                save_snapshot(save_state, engine)
            except OSError as exc:
                raise typer.BadParameter(str(exc), param_hint="--save-state") from exc
            trace_event("save_state", path=save_state)
    finally:
        if trace_log is not None:
            close_trace_log()


@app.command("state")
def cmd_state(
    path: Path = typer.Argument(..., help="snapshot file (.json or binary)"),
) -> None:
    """Inspect a saved generator state."""
    try:
        engine = load_snapshot(path)
    except (OSError, SnapshotFormatError) as exc:
        raise typer.BadParameter(str(exc), param_hint="PATH") from exc
    params = engine.params
    digits = engine.WORD_BITS // 4
    typer.echo(f"path: {path}")
    typer.echo(f"width: {engine.WORD_BITS}")
    typer.echo(f"mat1: {params.mat1:#010x}")
    typer.echo(f"mat2: {params.mat2:#010x}")
    typer.echo(f"tmat: {params.tmat:#0{digits + 2}x}")
    typer.echo("status: " + " ".join(f"{word:#0{digits + 2}x}" for word in engine.status))


@app.command("params")
def cmd_params(
    width: int = typer.Option(64, "--width", "-w", help="32 or 64"),
) -> None:
    """Print the reference parameter set as JSON (usable with --params)."""
    if width == 32:
        typer.echo(encode_params(TINYMT32_REFERENCE_PARAMS).decode("utf-8"))
    elif width == 64:
        typer.echo(encode_params(TINYMT64_REFERENCE_PARAMS).decode("utf-8"))
    else:
        raise typer.BadParameter(f"width must be 32 or 64, got {width}", param_hint="--width")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="tinymt", args=argv)


if __name__ == "__main__":
    main()
