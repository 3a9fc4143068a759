import pytest

from compiletools.checks import (
    CheckError,
    check_debugger_output,
    check_error_patterns,
    check_single_line,
    find_forbidden_output,
    has_compiler_crash,
)


def test_single_line_exact_match():
    assert check_single_line("  $1 = 5  ", "$1 = 5") is True
    assert check_single_line("$1 = 5", "$1 = 6") is False


def test_single_line_trailing_text_rejected_without_ellipsis():
    assert check_single_line("$1 = 5 extra", "$1 = 5") is False


def test_single_line_only_ellipsis_matches_anything():
    assert check_single_line("anything at all", "[...]") is True
    assert check_single_line("anything", "") is True


def test_debugger_output_in_order():
    stdout = "start\n$1 = 1\nnoise\n$2 = 2\n"
    check_debugger_output(stdout, ["$1 = 1", "$2 = 2"])
    with pytest.raises(CheckError) as info:
        check_debugger_output(stdout, ["$2 = 2", "$1 = 1"])
    assert info.value.missing == ["$1 = 1"]
    assert "line not found in debugger output: $1 = 1" == str(info.value)


def test_debugger_output_no_check_lines():
    assert check_debugger_output("whatever", []) is None


def test_error_patterns_found_in_order():
    output = "error: meep\nnote: something\nerror: moop\n"
    assert check_error_patterns(output, ["meep", " moop "]) is None


def test_error_patterns_single_missing():
    with pytest.raises(CheckError) as info:
        check_error_patterns("thread panicked at 'moop'", ["meep"])
    assert str(info.value) == "error pattern 'meep' not found!"
    assert info.value.missing == ["meep"]


def test_error_patterns_multiple_missing():
    with pytest.raises(CheckError) as info:
        check_error_patterns("only first\n", ["first", "second", "third"])
    assert str(info.value) == "multiple error patterns not found"
    assert info.value.missing == ["second", "third"]


def test_error_patterns_empty():
    assert check_error_patterns("out", [], must_compile_successfully=True) is None
    with pytest.raises(CheckError):
        check_error_patterns("out", [])


def test_forbidden_output():
    found = find_forbidden_output("warning: unused variable", ["unused", "absent"])
    assert found == ["unused"]
    assert find_forbidden_output("clean", ["unused"]) == []


def test_compiler_crash():
    assert has_compiler_crash("x\nerror: internal compiler error: boom\n") is True
    assert has_compiler_crash("error: mismatched types\n") is False