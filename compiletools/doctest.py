"""Checking that every documentation code block was run as a doc test."""

from __future__ import annotations

import bisect
from collections.abc import Mapping, Sequence

_FENCE = "```"
_DOC_COMMENT = "///"
_TEST_PREFIX = "test "


class DocTestMismatch(Exception):
    """Doc tests reported by the tool do not match the code blocks in the sources."""


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def doc_test_lines(content: str) -> tuple[list[int], list[str]]:
    """Find the doc code blocks in a source file.

    Returns the 1-based line numbers on which code blocks open, and the names
    of the modules declared with ``mod name;`` that live in other files.
    """
    starts: list[int] = []
    other_files: list[str] = []
    inside = False
    for number, line in enumerate(_lines(content), start=1):
        stripped = line.lstrip()
        if (stripped.startswith("pub mod ") or stripped.startswith("mod ")) \
                and line.endswith(";"):
            other_files.append(line.rsplit("mod ", 1)[-1].replace(";", ""))
            continue
        text = line.split(_DOC_COMMENT)[-1].lstrip()
        if text.startswith(_FENCE):
            if inside:
                inside = False
            else:
                inside = True
                starts.append(number)
    return starts, other_files


def _parse_line_number(text: str) -> int:
    digits = text[1:] if text.startswith("+") else text
    if digits and digits.isascii() and digits.isdigit():
        return int(digits)
    return 0


def _line_of(description: str) -> int:
    pieces = description.split("(line ")
    after = pieces[1] if len(pieces) > 1 else ")"
    return _parse_line_number(after.split(")")[0])


def check_doc_test_output(stdout: str, files: Mapping[str, Sequence[int]]) -> int:
    """Match the doc-test runner's ``stdout`` against expected code blocks.

    ``files`` maps a source path (with ``/`` separators) to the sorted line
    numbers of its code blocks. Every reported test must name a known block
    and every block must be reported. Returns the number of reported tests
    that were matched; raises DocTestMismatch otherwise.
    """
    remaining = {path: sorted(lines) for path, lines in files.items()}
    tested = 0
    for entry in stdout.split("\n"):
        if not entry.startswith(_TEST_PREFIX):
            continue
        parts = entry.split(" - ")
        if len(parts) != 2:
            continue
        path = parts[0].rsplit(_TEST_PREFIX, 1)[-1]
        lines = remaining.get(path.replace("\\", "/"))
        if lines is None:
            continue
        tested += 1
        line = _line_of(parts[1])
        position = bisect.bisect_left(lines, line)
        if position < len(lines) and lines[position] == line:
            del lines[position]
        else:
            raise DocTestMismatch(f'Not found doc test: "{entry}" in "{path}":{lines!r}')

    if tested == 0:
        raise DocTestMismatch(f"No test has been found... {remaining!r}")
    for path, lines in remaining.items():
        if lines:
            plural = "s" if len(lines) > 1 else ""
            raise DocTestMismatch(f'Not found test at line{plural} "{path}":{lines!r}')
    return tested