"""Checking MIR dumps against the expectations written after a test's source."""

from __future__ import annotations

import logging
import os
from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

_SOURCE_END = "// END RUST SOURCE"
_START = "// START "
_END = "// END"
_END_NAME = "// END "
_COMMENT = "//"
_TEXT = "// "


class MirMismatch(Exception):
    """A MIR dump did not match the expected lines."""


@dataclass(frozen=True)
class Elision:
    """Stands for any number of lines that are not checked."""

    def __repr__(self) -> str:
        return '"..." (Elision)'


ExpectedLine = Union[Elision, str]


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def nocomment_mir_line(line: str) -> str:
    """Drop a trailing ``//`` comment and the whitespace before it."""
    index = line.find(_COMMENT)
    if index == -1:
        return line
    return line[:index].rstrip()


def normalize_mir_line(line: str) -> str:
    """Drop comments and all whitespace from a MIR line."""
    return "".join(ch for ch in nocomment_mir_line(line) if not ch.isspace())


def parse_mir_expectations(text: str) -> list[tuple[str, list[ExpectedLine]]]:
    """Return ``(dump file name, expected lines)`` for each test in ``text``.

    Expectations follow the ``// END RUST SOURCE`` marker, each enclosed in
    ``// START name`` and ``// END name``; ``// ...`` marks an elision.
    """
    index = text.find(_SOURCE_END)
    if index == -1:
        return []
    tests: list[tuple[str, list[ExpectedLine]]] = []
    current: str | None = None
    contents: list[ExpectedLine] = [Elision()]
    for line in _lines(text[index + len(_SOURCE_END):]):
        logger.debug("line: %r", line)
        if line.startswith(_START):
            current = line[len(_START):]
        elif line.startswith(_END):
            name = line[len(_END_NAME):]
            if name != current:
                raise MirMismatch("mismatched START END test name")
            tests.append((name, contents))
            current = None
            contents = [Elision()]
        elif not line:
            continue
        elif line.startswith(_COMMENT) and line[len(_COMMENT):].strip() == "...":
            contents.append(Elision())
        elif line.startswith(_TEXT):
            contents.append(line[len(_TEXT):])
    return tests


def _describe(line: ExpectedLine) -> str:
    return "... (elided)" if isinstance(line, Elision) else line


def compare_mir_output(dumped: str, expected: Sequence[ExpectedLine]) -> None:
    """Check the text of a MIR dump against ``expected``.

    Text lines must appear consecutively unless separated by an elision.
    Raises MirMismatch on the first line that cannot be matched.
    """
    dumped_lines: Iterator[str] = (line for line in _lines(dumped) if line)
    pending: deque[ExpectedLine] = deque(
        line for line in expected if isinstance(line, Elision) or line
    )

    def matches(expected_line: str, dumped_line: str) -> bool:
        e_norm = normalize_mir_line(expected_line)
        d_norm = normalize_mir_line(dumped_line)
        logger.debug("found: %r", d_norm)
        logger.debug("expected: %r", e_norm)
        return e_norm == d_norm

    def fail(expected_line: str, extra: str) -> MirMismatch:
        actual = "\n".join(
            stripped for stripped in map(nocomment_mir_line, _lines(dumped)) if stripped
        )
        wanted = "\n".join(_describe(line) for line in expected)
        return MirMismatch(
            f"Did not find expected line, error: {extra}\n"
            f"Actual Line: {expected_line!r}\n"
            f"Expected:\n{wanted}\n"
            f"Actual:\n{actual}"
        )

    start_block: str | None = None
    for dumped_line in dumped_lines:
        if not pending:
            continue
        item = pending.popleft()
        if isinstance(item, str):
            if ":{" in normalize_mir_line(item):
                start_block = item
            if not matches(item, dumped_line):
                logger.error("%r", start_block)
                raise fail(
                    item,
                    f"Mismatch in lines\nCurrent block: {start_block or 'None'}\n"
                    f"Expected Line: {dumped_line!r}",
                )
            continue
        while pending and isinstance(pending[0], Elision):
            pending.popleft()
        if not pending:
            continue
        target = pending.popleft()
        assert isinstance(target, str)
        if matches(target, dumped_line):
            continue
        if not any(matches(target, line) for line in dumped_lines):
            raise fail(target, "ran out of mir dump to match against")


def check_mir_timestamp(source_file: str | os.PathLike[str],
                        output_file: str | os.PathLike[str],
                        test_name: str) -> None:
    """Raise MirMismatch if the test source is newer than the dump file."""
    source_time = os.stat(source_file).st_mtime_ns
    output_time = os.stat(output_file).st_mtime_ns
    if source_time > output_time:
        logger.debug("source file time: %s output file time: %s",
                     source_time, output_time)
        raise MirMismatch(
            f"test source file `{Path(source_file)}` is newer than potentially "
            f"stale output file `{test_name}`."
        )