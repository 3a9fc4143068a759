"""Building the command lines that compile and run a test."""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from compiletools.normalize import split_maybe_args

PathLike = str | os.PathLike[str]

_JSON_ERROR_MODES = ("compile-fail", "parse-fail", "incremental")
_JSON_UNLESS_SET_MODES = ("run-pass", "ui")
_ALLOW_UNUSED_MODES = ("compile-fail", "ui")
_WASM_BARE = "wasm32-unknown-unknown"


@dataclass
class CompileSettings:
    """Configuration and test properties that shape a compiler command."""

    rustc_path: PathLike
    build_base: PathLike
    target: str
    host: str = ""
    mode: str = "run-pass"
    force_host: bool = False
    compile_flags: list[str] = field(default_factory=list)
    error_patterns: list[str] = field(default_factory=list)
    revision: str | None = None
    incremental_dir: PathLike | None = None
    no_prefer_dynamic: bool = False
    host_rustcflags: str | None = None
    target_rustcflags: str | None = None
    linker: str | None = None
    mir_dump_dir: PathLike | None = None


def default_allow_unused(mode: str) -> bool:
    """Whether unused-code warnings are silenced by default in ``mode``."""
    return mode in _ALLOW_UNUSED_MODES


def build_compile_args(settings: CompileSettings, input_file: PathLike,
                       output: tuple[str, PathLike], allow_unused: bool) -> list[str]:
    """Return the compiler command line for ``input_file``.

    ``output`` is ``("file", path)`` to name the output file or
    ``("dir", path)`` to name the output directory. In ``mir-opt`` mode the
    MIR dump directory is emptied and recreated.
    """
    kind, out_path = output
    if kind not in ("file", "dir"):
        raise ValueError(f"unknown output kind {kind!r}")

    args = [os.fspath(settings.rustc_path), os.fspath(input_file),
            "-L", os.fspath(settings.build_base)]

    if not any(flag.startswith("--target") for flag in settings.compile_flags):
        target = settings.host if settings.force_host else settings.target
        args.append(f"--target={target}")

    if settings.revision is not None:
        args += ["--cfg", settings.revision]

    if settings.incremental_dir is not None:
        args += ["-Z", f"incremental={os.fspath(settings.incremental_dir)}",
                 "-Z", "incremental-verify-ich",
                 "-Z", "incremental-queries"]

    mode = settings.mode
    if mode in _JSON_ERROR_MODES:
        # Old-style error patterns still match the raw compiler output.
        if not settings.error_patterns:
            args += ["--error-format", "json"]
    elif mode == "mir-opt":
        if settings.mir_dump_dir is None:
            raise ValueError("mir-opt mode needs a MIR dump directory")
        dump_dir = Path(settings.mir_dump_dir)
        shutil.rmtree(dump_dir, ignore_errors=True)
        dump_dir.mkdir(parents=True, exist_ok=True)
        args += ["-Zdump-mir=all", "-Zmir-opt-level=3",
                 "-Zdump-mir-exclude-pass-number",
                 f"-Zdump-mir-dir={os.fspath(dump_dir)}"]
    elif mode in _JSON_UNLESS_SET_MODES:
        if not any(flag.startswith("--error-format") for flag in settings.compile_flags):
            args += ["--error-format", "json"]

    if settings.target != _WASM_BARE and not settings.no_prefer_dynamic:
        args += ["-C", "prefer-dynamic"]

    args += ["-o" if kind == "file" else "--out-dir", os.fspath(out_path)]

    # Before configured and in-test flags, so that those can override it.
    if allow_unused:
        args += ["-A", "unused"]

    rustcflags = settings.host_rustcflags if settings.force_host else settings.target_rustcflags
    args += split_maybe_args(rustcflags)

    if settings.linker is not None:
        args.append(f"-Clinker={settings.linker}")

    args += settings.compile_flags
    return args


def run_args(runtool: str | None, target: str, nodejs: str | None,
             src_base: PathLike, exe_file: PathLike,
             run_flags: str | None) -> tuple[str, list[str]]:
    """Return the program and arguments that run a compiled test.

    The test runs under ``runtool`` when one is given, and under NodeJS for
    emscripten and wasm32 targets. Raises ValueError when NodeJS is needed
    but not given.
    """
    args = split_maybe_args(runtool)

    if "emscripten" in target:
        if nodejs is None:
            raise ValueError("no NodeJS binary found (--nodejs)")
        args.append(nodejs)

    if "wasm32" in target:
        if nodejs is None:
            raise ValueError("no NodeJS binary found (--nodejs)")
        args.append(nodejs)
        src_root = Path(src_base).parent.parent.parent
        args.append(str(src_root / "src/etc/wasm32-shim.js"))

    args.append(os.fspath(exe_file))
    args += split_maybe_args(run_flags)
    prog = args.pop(0)
    return prog, args