from pathlib import Path

import pytest

from compiletools.commands import (
    CompileSettings,
    build_compile_args,
    default_allow_unused,
    run_args,
)


def _settings(**kwargs):
    base = dict(rustc_path="rustc", build_base="build", target="x86_64-unknown-linux-gnu",
                host="x86_64-unknown-linux-gnu")
    base.update(kwargs)
    return CompileSettings(**base)


def test_basic_command_starts_with_compiler_and_input():
    args = build_compile_args(_settings(), "t.rs", ("file", "out/t"), False)
    assert args[:5] == ["rustc", "t.rs", "-L", "build",
                        "--target=x86_64-unknown-linux-gnu"]
    assert args[-2:] == ["-o", "out/t"]
    assert "-A" not in args


def test_force_host_uses_host_target_and_flags():
    settings = _settings(target="wasm32-unknown-unknown", host="myhost",
                         force_host=True, host_rustcflags="-L hostlib",
                         target_rustcflags="-L targetlib")
    args = build_compile_args(settings, "t.rs", ("dir", "out"), False)
    assert "--target=myhost" in args
    assert "hostlib" in args and "targetlib" not in args
    assert args[args.index("--out-dir") + 1] == "out"


def test_custom_target_in_compile_flags_suppresses_default():
    settings = _settings(compile_flags=["--target=foo"])
    args = build_compile_args(settings, "t.rs", ("file", "o"), False)
    assert [a for a in args if a.startswith("--target")] == ["--target=foo"]


def test_revision_and_incremental_flags():
    settings = _settings(revision="rpass1", incremental_dir="inc")
    args = build_compile_args(settings, "t.rs", ("file", "o"), False)
    assert args[args.index("--cfg") + 1] == "rpass1"
    assert "incremental=inc" in args
    assert "incremental-verify-ich" in args
    assert "incremental-queries" in args


@pytest.mark.parametrize("mode", ["compile-fail", "parse-fail", "incremental"])
def test_json_errors_only_without_error_patterns(mode):
    plain = build_compile_args(_settings(mode=mode), "t.rs", ("file", "o"), False)
    assert "--error-format" in plain
    patterned = build_compile_args(_settings(mode=mode, error_patterns=["meep"]),
                                   "t.rs", ("file", "o"), False)
    assert "--error-format" not in patterned


def test_ui_respects_explicit_error_format():
    settings = _settings(mode="ui", compile_flags=["--error-format=human"])
    args = build_compile_args(settings, "t.rs", ("file", "o"), True)
    assert args.count("--error-format=human") == 1
    assert "--error-format" not in args


def test_allow_unused_comes_before_configured_and_test_flags():
    settings = _settings(target_rustcflags="-L target/debug",
                         compile_flags=["-W", "unused"], linker="cc")
    args = build_compile_args(settings, "t.rs", ("file", "o"), True)
    allow = args.index("unused")
    assert args[allow - 1] == "-A"
    assert allow < args.index("target/debug") < args.index("-Clinker=cc") < args.index("-W")
    assert args[-2:] == ["-W", "unused"]


def test_prefer_dynamic_rules():
    default = build_compile_args(_settings(), "t.rs", ("file", "o"), False)
    assert "prefer-dynamic" in default
    wasm = build_compile_args(_settings(target="wasm32-unknown-unknown"),
                              "t.rs", ("file", "o"), False)
    assert "prefer-dynamic" not in wasm
    static = build_compile_args(_settings(no_prefer_dynamic=True),
                                "t.rs", ("file", "o"), False)
    assert "prefer-dynamic" not in static


def test_mir_opt_recreates_dump_dir(tmp_path):
    dump = tmp_path / "mir" / "foo"
    dump.mkdir(parents=True)
    (dump / "stale.mir").write_text("old")
    settings = _settings(mode="mir-opt", mir_dump_dir=dump)
    args = build_compile_args(settings, "t.rs", ("file", "o"), False)
    assert f"-Zdump-mir-dir={dump}" in args
    assert "-Zdump-mir=all" in args
    assert dump.is_dir()
    assert list(dump.iterdir()) == []


def test_mir_opt_without_dump_dir_fails():
    with pytest.raises(ValueError):
        build_compile_args(_settings(mode="mir-opt"), "t.rs", ("file", "o"), False)


def test_unknown_output_kind():
    with pytest.raises(ValueError):
        build_compile_args(_settings(), "t.rs", ("somewhere", "o"), False)


@pytest.mark.parametrize("mode, expected", [
    ("compile-fail", True), ("ui", True), ("run-pass", False), ("pretty", False),
])
def test_default_allow_unused(mode, expected):
    assert default_allow_unused(mode) is expected


def test_run_args_plain():
    prog, args = run_args(None, "x86_64-unknown-linux-gnu", None, "tests/run-pass",
                          "out/t", "--flag  value")
    assert prog == "out/t"
    assert args == ["--flag", "value"]


def test_run_args_under_runtool():
    prog, args = run_args("valgrind --quiet", "x86_64-unknown-linux-gnu", None,
                          "tests/run-pass", "out/t", None)
    assert prog == "valgrind"
    assert args == ["--quiet", "out/t"]


def test_run_args_wasm_uses_node_and_shim():
    prog, args = run_args(None, "wasm32-unknown-unknown", "node", "a/b/c/d",
                          "out/t.wasm", None)
    assert prog == "node"
    assert args == [str(Path("a") / "src/etc/wasm32-shim.js"), "out/t.wasm"]


@pytest.mark.parametrize("target", ["asmjs-unknown-emscripten", "wasm32-unknown-unknown"])
def test_run_args_requires_nodejs(target):
    with pytest.raises(ValueError, match="NodeJS"):
        run_args(None, target, None, "a/b/c/d", "out/t", None)