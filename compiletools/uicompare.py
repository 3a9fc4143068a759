"""Comparing normalised test output with the expected output files."""

from __future__ import annotations

import difflib
import os
from collections.abc import Iterator
from pathlib import Path

PathLike = str | os.PathLike[str]


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _diff(expected: str, actual: str) -> Iterator[str]:
    """Yield a line diff: ``-`` only expected, ``+`` only actual, `` `` both."""
    left, right = _lines(expected), _lines(actual)
    matcher = difflib.SequenceMatcher(a=left, b=right, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            yield from (f" {line}" for line in left[i1:i2])
            continue
        yield from (f"-{line}" for line in left[i1:i2])
        yield from (f"+{line}" for line in right[j1:j2])


def load_expected_output(path: PathLike) -> str:
    """Return the contents of ``path``, or an empty string if it does not exist."""
    path = Path(path)
    if not path.exists():
        return ""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as err:
        raise OSError(err.errno,
                      f"failed to load expected output from `{path}`: {err}") from err


def delete_file(path: PathLike) -> None:
    """Remove ``path`` if it exists."""
    path = Path(path)
    if not path.exists():
        return
    try:
        path.unlink()
    except OSError as err:
        raise OSError(err.errno, f"failed to delete `{path}`: {err}") from err


def compare_output(kind: str, actual: str, expected: str, output_file: PathLike,
                   bless: bool = False, blessed_path: PathLike | None = None) -> int:
    """Compare ``actual`` output of ``kind`` with ``expected``.

    Returns 0 when they are equal. Otherwise the actual output is saved to
    ``output_file`` (and, when blessing, to ``blessed_path``), or those files
    are removed if it is empty; the result is 1, or 0 when blessing.
    """
    if actual == expected:
        return 0

    if not bless:
        if not expected:
            print(f"normalized {kind}:\n{actual}\n")
        else:
            print(f"diff of {kind}:\n")
            for line in _diff(expected, actual):
                print(line)

    files = [Path(output_file)]
    if bless and blessed_path is not None:
        files.append(Path(blessed_path))

    for path in files:
        if not actual:
            delete_file(path)
            continue
        try:
            path.write_text(actual, encoding="utf-8")
        except OSError as err:
            raise OSError(err.errno,
                          f"failed to write {kind} to `{path}`: {err}") from err

    print(f"\nThe actual {kind} differed from the expected {kind}.")
    for path in files:
        print(f"Actual {kind} saved to {path}")
    return 0 if bless else 1