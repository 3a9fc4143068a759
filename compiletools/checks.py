"""Checks of compiler and debugger output against expected patterns."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

_ELLIPSIS = "[...]"
_ICE_MARKER = "error: internal compiler error"


class CheckError(Exception):
    """Output did not satisfy a check; ``missing`` lists what was not found."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def check_single_line(line: str, check_line: str) -> bool:
    """Match ``line`` against ``check_line``, where ``[...]`` matches anything."""
    line = line.strip()
    check_line = check_line.strip()
    can_start_anywhere = check_line.startswith(_ELLIPSIS)
    can_end_anywhere = check_line.endswith(_ELLIPSIS)

    fragments = [frag for frag in check_line.split(_ELLIPSIS) if frag]
    if not fragments:
        return True

    rest = line
    if can_start_anywhere:
        position = rest.find(fragments[0])
        if position == -1:
            return False
        rest = rest[position + len(fragments[0]):]
        fragments = fragments[1:]

    for fragment in fragments:
        position = rest.find(fragment)
        if position == -1:
            return False
        rest = rest[position + len(fragment):]

    return can_end_anywhere or not rest


def check_debugger_output(stdout: str, check_lines: Sequence[str]) -> None:
    """Require every check line to match some output line, in order."""
    pending = iter(check_lines)
    current = next(pending, None)
    for line in _lines(stdout):
        if current is None:
            break
        if check_single_line(line, current):
            current = next(pending, None)
    if current is not None:
        raise CheckError(f"line not found in debugger output: {current}", [current])


def check_error_patterns(output: str, patterns: Sequence[str],
                         must_compile_successfully: bool = False) -> None:
    """Require all ``patterns`` to occur in ``output`` lines, in order."""
    if not patterns:
        if must_compile_successfully:
            return
        raise CheckError("no error pattern specified")

    next_index = 0
    for line in _lines(output):
        if patterns[next_index].strip() in line:
            logger.debug("found error pattern %s", patterns[next_index])
            next_index += 1
            if next_index == len(patterns):
                logger.debug("found all error patterns")
                return

    missing = list(patterns[next_index:])
    if len(missing) == 1:
        raise CheckError(f"error pattern '{missing[0]}' not found!", missing)
    for pattern in missing:
        print(f"\nerror: error pattern '{pattern}' not found!")
    raise CheckError("multiple error patterns not found", missing)


def find_forbidden_output(output: str, forbidden: Iterable[str]) -> list[str]:
    """Return the forbidden patterns that occur in ``output``."""
    return [pattern for pattern in forbidden if pattern in output]


def has_compiler_crash(stderr: str) -> bool:
    """Return whether ``stderr`` reports an internal compiler error."""
    return any(_ICE_MARKER in line for line in _lines(stderr))