from pathlib import Path

import pytest

from compiletools.procout import dylib_env_var
from compiletools.rmake import RmakeSettings, make_program, msvc_cflags


def _settings(**overrides):
    values = dict(
        target="x86_64-unknown-linux-gnu",
        host="x86_64-unknown-linux-gnu",
        docck_python="python3",
        src_base="src/test/run-make",
        stage_id="stage1",
        rustc_path="bin/rustc",
        rustdoc_path="bin/rustdoc",
        compile_lib_path="lib/host",
        run_lib_path="lib/target",
        cc="gcc",
        cxx="g++",
        cflags="-O2 -fPIC",
        ar="ar",
    )
    values.update(overrides)
    return RmakeSettings(**values)


@pytest.mark.parametrize("host", ["x86_64-unknown-freebsd", "x86_64-unknown-netbsd",
                                  "x86_64-unknown-openbsd", "x86_64-unknown-dragonfly"])
def test_bsd_hosts_use_gmake(host):
    assert make_program(host) == "gmake"


def test_other_hosts_use_make():
    assert make_program("x86_64-unknown-linux-gnu") == "make"


def test_msvc_cflags_turns_slashes_into_dashes():
    assert msvc_cflags("/O2 /nologo") == "-O2 -nologo"


def test_environment_paths_are_joined_to_cwd(tmp_path):
    env = _settings().environment(tmp_path, tmp_path / "tmp")
    assert env["RUSTC"] == str(tmp_path / "bin/rustc")
    assert env["RUSTDOC"] == str(tmp_path / "bin/rustdoc")
    assert env["HOST_RPATH_DIR"] == str(tmp_path / "lib/host")
    assert env["TARGET_RPATH_DIR"] == str(tmp_path / "lib/target")
    assert env["TMPDIR"] == str(tmp_path / "tmp")
    assert Path(env["S"]) == tmp_path / Path("src/test/run-make").parent.parent.parent


def test_environment_carries_config(tmp_path):
    settings = _settings()
    env = settings.environment(tmp_path, tmp_path)
    assert env["TARGET"] == settings.target
    assert env["PYTHON"] == settings.docck_python
    assert env["RUST_BUILD_STAGE"] == settings.stage_id
    assert env["LD_LIB_PATH_ENVVAR"] == dylib_env_var()
    assert env["CC"] == f"{settings.cc} {settings.cflags}"
    assert env["CXX"] == f"{settings.cxx} {settings.cflags}"
    assert env["AR"] == settings.ar
    assert "IS_WINDOWS" not in env
    assert "RUSTC_BLESS_TEST" not in env


def test_environment_removes_rustflags(tmp_path, monkeypatch):
    monkeypatch.setenv("RUSTFLAGS", "-Dwarnings")
    env = _settings().environment(tmp_path, tmp_path)
    assert "RUSTFLAGS" not in env


def test_linker_and_bless(tmp_path):
    env = _settings(linker="lld", bless=True).environment(tmp_path, tmp_path)
    assert env["RUSTC_LINKER"] == "lld"
    assert env["RUSTC_BLESS_TEST"] == "--bless"


def test_windows_gnu_target_sets_is_windows(tmp_path):
    env = _settings(target="x86_64-pc-windows-gnu").environment(tmp_path, tmp_path)
    assert env["IS_WINDOWS"] == "1"
    assert "IS_MSVC" not in env


def test_msvc_target_environment(tmp_path):
    settings = _settings(target="x86_64-pc-windows-msvc", cc="tools/cl.exe",
                         cxx="tools/cl.exe", cflags="/O2 /MD")
    env = settings.environment(tmp_path, tmp_path)
    assert env["IS_MSVC"] == "1"
    assert env["IS_WINDOWS"] == "1"
    assert env["MSVC_LIB"] == f"'{Path('tools') / 'lib.exe'}' -nologo"
    assert env["CC"] == f"'tools/cl.exe' {msvc_cflags('/O2 /MD')}"
    assert env["CXX"] == "tools/cl.exe"


def test_missing_rustdoc_is_an_error(tmp_path):
    with pytest.raises(ValueError):
        _settings(rustdoc_path=None).environment(tmp_path, tmp_path)