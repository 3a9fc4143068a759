"""Argument splitting, output normalisation and source comparison."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence

_DEBUG_INFO_OPTIONS = ("-O", "-g", "--debuginfo")
_JSON_FLAGS = (
    "--error-format json",
    "--error-format pretty-json",
    "--error-format=json",
    "--error-format=pretty-json",
    "--output-format json",
    "--output-format=json",
)
_RULE = "------------------------------------------"
_GROUP_REF = re.compile(r"\$(?:(\$)|\{([^}]*)\}|([A-Za-z0-9_]+))")


class SourceMismatch(Exception):
    """Pretty-printed source differs from the expected source."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__("pretty-printed source does not match expected source")
        self.expected = expected
        self.actual = actual


def split_maybe_args(argstr: str | None) -> list[str]:
    """Split ``argstr`` on spaces, dropping blank pieces; None gives []."""
    if argstr is None:
        return []
    return [piece for piece in argstr.split(" ") if piece.strip()]


def cleanup_debug_info_options(options: str | None) -> str | None:
    """Drop options that are unwanted or may duplicate debug info flags."""
    if options is None:
        return None
    return " ".join(arg for arg in split_maybe_args(options)
                    if arg not in _DEBUG_INFO_OPTIONS)


def _group(match: re.Match[str], name: str) -> str:
    key: int | str = int(name) if name.isdigit() else name
    try:
        value = match.group(key)
    except (IndexError, re.error):
        return ""
    return value or ""


def _expand(template: str, match: re.Match[str]) -> str:
    def substitute(ref: re.Match[str]) -> str:
        if ref.group(1):
            return "$"
        return _group(match, ref.group(2) if ref.group(2) is not None else ref.group(3))

    return _GROUP_REF.sub(substitute, template)


def normalize_output(output: str, parent_dir: str | os.PathLike[str],
                     build_base: str | os.PathLike[str],
                     compile_flags: Sequence[str] = (),
                     custom_rules: Iterable[tuple[str, str]] = (),
                     src_dir: str | os.PathLike[str] | None = None) -> str:
    """Make compiler output comparable across machines.

    Replaces directory paths with placeholders, unifies path separators and
    line endings, makes tabs visible and then applies ``custom_rules``, pairs
    of a regular expression and a replacement in which ``$name`` refers to a
    group.
    """
    cflags = " ".join(compile_flags)
    json = any(flag in cflags for flag in _JSON_FLAGS)

    normalized = output

    def normalize_path(path: str | os.PathLike[str], placeholder: str) -> None:
        nonlocal normalized
        text = os.fspath(path)
        if json:
            text = text.replace("\\", "\\\\")
        normalized = normalized.replace(text, placeholder)

    normalize_path(parent_dir, "$DIR")
    if src_dir is not None:
        normalize_path(src_dir, "$SRC_DIR")
    normalize_path(build_base, "$TEST_BUILD_DIR")

    if json:
        # Escaped newlines in JSON strings are only read by humans here.
        normalized = normalized.replace("\\n", "\n")

    normalized = (normalized.replace("\\\\", "\\")
                  .replace("\\", "/")
                  .replace("\r\n", "\n")
                  .replace("\t", "\\t"))

    for pattern, replacement in custom_rules:
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"bad regex in custom normalization rule: {exc}") from exc
        normalized = regex.sub(lambda m, r=replacement: _expand(r, m), normalized)
    return normalized


def compare_source(expected: str, actual: str) -> None:
    """Raise SourceMismatch, after printing both texts, if they differ."""
    if expected == actual:
        return
    print("\nerror: pretty-printed source does not match expected source")
    print(f"\nexpected:\n{_RULE}\n{expected}\n{_RULE}\n"
          f"actual:\n{_RULE}\n{actual}\n{_RULE}\n\n")
    raise SourceMismatch(expected, actual)