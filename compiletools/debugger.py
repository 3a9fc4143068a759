"""Building debugger scripts for debug-info tests."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Sequence

_BREAK_MARKER = "#break"
_SAFE_PATH_MIN_GDB = (7, 4)


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def find_breakpoint_lines(text: str) -> list[int]:
    """Return the 1-based numbers of the lines that contain ``#break``."""
    return [number for number, line in enumerate(_lines(text), start=1)
            if _BREAK_MARKER in line]


def gdb_charset(platform: str | None = None) -> str:
    """Charset to set in GDB on ``platform`` (default: the running one)."""
    platform = sys.platform if platform is None else platform
    if platform.startswith("bitrig"):
        return "auto"
    if platform.startswith("freebsd"):
        # Older FreeBSD GDB does not support the "auto" charset.
        return "ISO-8859-1"
    return "UTF-8"


def _escape(path: str) -> str:
    return path.replace("\\", "\\\\")


def gdb_script(charset: str, exe_file: str | os.PathLike[str], source_name: str,
               breakpoint_lines: Iterable[int], commands: Sequence[str],
               pp_module_path: str | os.PathLike[str],
               gdb_version: tuple[int, ...] | None = None,
               native_rust: bool = False) -> str:
    """Build the GDB script that runs a debug-info test.

    ``gdb_version`` is a version tuple such as ``(8, 1)``; when it is newer
    than 7.4 the pretty-printer directory is added to the safe path.
    """
    pp_path = os.fspath(pp_module_path)
    parts = [f"set charset {charset}\n", "show version\n"]
    if gdb_version is not None and tuple(gdb_version) > _SAFE_PATH_MIN_GDB:
        parts.append(f"add-auto-load-safe-path {_escape(pp_path)}\n")
    # Print values on one line.
    parts.append("set print pretty off\n")
    parts.append(f"directory {pp_path}\n")
    parts.append(f"file {_escape(os.fspath(exe_file))}\n")
    if native_rust:
        parts.append("set language rust\n")
    parts.extend(f"break '{source_name}':{line}\n" for line in breakpoint_lines)
    parts.append("\n".join(commands))
    parts.append("\nquit\n")
    return "".join(parts)


def lldb_script(pp_module_path: str | os.PathLike[str], source_name: str,
                breakpoint_lines: Iterable[int], commands: Iterable[str]) -> str:
    """Build the LLDB script that runs a debug-info test."""
    parts = [
        # Do not hang on `quit` while the process is still running.
        "settings set auto-confirm true\n",
        "version\n",
        f"command script import {os.fspath(pp_module_path)}\n",
        "type summary add --no-value "
        "--python-function lldb_rust_formatters.print_val "
        "-x \".*\" --category Rust\n",
        "type category enable Rust\n",
    ]
    parts.extend(f"breakpoint set --file '{source_name}' --line {line}\n"
                 for line in breakpoint_lines)
    parts.extend(f"{command}\n" for command in commands)
    parts.append("\nquit\n")
    return "".join(parts)