"""Where a test's build products, dumps and auxiliary files are placed."""

from __future__ import annotations

import os
from pathlib import Path

PathLike = str | os.PathLike[str]


def _with_extension(path: Path, extension: str) -> Path:
    """Replace the extension of ``path``, or add one if it has none."""
    stem = path.stem if path.suffix else path.name
    if not extension:
        return path.with_name(stem)
    return path.with_name(f"{stem}.{extension}")


def output_base_name(build_base: PathLike, relative_dir: PathLike,
                     file: PathLike, stage_id: str) -> Path:
    """Base name of a test's outputs: ``<build>/<relative_dir>/<stem>.<stage_id>``."""
    directory = Path(build_base) / Path(relative_dir)
    return _with_extension(directory / Path(file).stem, stage_id)


def make_exe_name(base: PathLike, target: str, exe_suffix: str | None = None) -> Path:
    """Name of the executable built from a test, suffixed for ``target``.

    ``exe_suffix`` defaults to the executable suffix of the running platform.
    """
    base = Path(base)
    if exe_suffix is None:
        exe_suffix = ".exe" if os.name == "nt" else ""
    if "emscripten" in target:
        suffix = ".js"
    elif "spirv" in target:
        suffix = ".spv"
    elif "wasm32" in target:
        suffix = ".wasm"
    else:
        suffix = exe_suffix
    if not suffix:
        return base
    return base.with_name(base.name + suffix)


def aux_output_dir_name(base: PathLike, disambiguator: str) -> Path:
    """Directory holding the auxiliary libraries of a test."""
    base = Path(base)
    return base.with_name(f"{base.name}{disambiguator}.aux")


def make_out_name(base: PathLike, extension: str) -> Path:
    """The output base name with its extension replaced by ``extension``."""
    return _with_extension(Path(base), extension)


def incremental_dir(base: PathLike) -> Path:
    """Directory where incremental work products are stored."""
    return _with_extension(Path(base), "inc")


def mir_dump_dir(build_base: PathLike, relative_dir: PathLike, file: PathLike) -> Path:
    """Directory the compiler dumps MIR into for a test."""
    return Path(build_base) / Path(relative_dir) / Path(file).stem


def aux_test_paths(file: PathLike, relative_dir: PathLike,
                   rel_ab: str) -> tuple[Path, Path]:
    """Locate an ``aux-build`` source next to the test in ``auxiliary/``.

    Returns the auxiliary source file and its relative directory. Raises
    FileNotFoundError when the source does not exist.
    """
    aux_file = Path(file).parent / "auxiliary" / rel_ab
    if not aux_file.exists():
        raise FileNotFoundError(f"aux-build `{aux_file}` source not found")
    aux_relative = (Path(relative_dir) / "auxiliary" / rel_ab).parent
    return aux_file, aux_relative