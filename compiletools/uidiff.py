"""Checking whether compiler output matches the expected output."""

from __future__ import annotations

from itertools import zip_longest

_WILDCARD = "[..]"


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def diff_lines(actual: str, expected: str) -> list[str]:
    """Return a description of every line that differs between the texts."""
    result = []
    for index, (a, e) in enumerate(zip_longest(_lines(actual), _lines(expected))):
        if a is not None and e is not None:
            if not lines_match(e, a):
                result.append(f"{index:3} - |{e}|\n    + |{a}|\n")
        elif a is not None:
            result.append(f"{index:3} -\n    + |{a}|\n")
        else:
            result.append(f"{index:3} - |{e}|\n    +\n")
    return result


def lines_match(expected: str, actual: str) -> bool:
    """Match ``actual`` against ``expected``, where ``[..]`` matches anything."""
    for index, part in enumerate(expected.split(_WILDCARD)):
        position = actual.find(part)
        if position == -1:
            return False
        if index == 0 and position != 0:
            return False
        actual = actual[position + len(part):]
    return not actual or expected.endswith(_WILDCARD)