"""Settings and environment for tests driven by a Makefile."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from compiletools.procout import dylib_env_var

PathLike = str | os.PathLike[str]

_GMAKE_HOSTS = ("bitrig", "dragonfly", "freebsd", "netbsd", "openbsd")


def make_program(host: str) -> str:
    """The make program to use on ``host``."""
    return "gmake" if any(name in host for name in _GMAKE_HOSTS) else "make"


def msvc_cflags(cflags: str) -> str:
    """Turn ``/flag`` arguments into ``-flag`` so MSYS does not treat them as paths."""
    return " ".join(piece.replace("/", "-") for piece in cflags.split(" "))


@dataclass
class RmakeSettings:
    """Configuration that a Makefile-driven test receives through its environment."""

    target: str
    host: str
    docck_python: str
    src_base: PathLike
    stage_id: str
    rustc_path: PathLike
    rustdoc_path: PathLike | None
    compile_lib_path: PathLike
    run_lib_path: PathLike
    llvm_components: str = ""
    llvm_cxxflags: str = ""
    cc: str = "cc"
    cxx: str = "c++"
    cflags: str = ""
    ar: str = "ar"
    linker: str | None = None
    bless: bool = False

    def environment(self, cwd: PathLike, tmpdir: PathLike) -> dict[str, str]:
        """Full environment for running make, with RUSTFLAGS removed."""
        if self.rustdoc_path is None:
            raise ValueError("--rustdoc-path passed")
        cwd = Path(cwd)
        src_root = cwd / Path(self.src_base).parent.parent.parent

        env = dict(os.environ)
        # Outside RUSTFLAGS must not interfere with flags set in the tests.
        env.pop("RUSTFLAGS", None)
        env.update({
            "TARGET": self.target,
            "PYTHON": self.docck_python,
            "S": str(src_root),
            "RUST_BUILD_STAGE": self.stage_id,
            "RUSTC": str(cwd / Path(self.rustc_path)),
            "RUSTDOC": str(cwd / Path(self.rustdoc_path)),
            "TMPDIR": os.fspath(tmpdir),
            "LD_LIB_PATH_ENVVAR": dylib_env_var(),
            "HOST_RPATH_DIR": str(cwd / Path(self.compile_lib_path)),
            "TARGET_RPATH_DIR": str(cwd / Path(self.run_lib_path)),
            "LLVM_COMPONENTS": self.llvm_components,
            "LLVM_CXXFLAGS": self.llvm_cxxflags,
        })

        if self.linker is not None:
            env["RUSTC_LINKER"] = self.linker
        if self.bless:
            env["RUSTC_BLESS_TEST"] = "--bless"

        if "msvc" in self.target:
            # lib.exe is assumed to live next to cl.exe.
            lib = Path(self.cc).parent / "lib.exe"
            env.update({
                "IS_MSVC": "1",
                "IS_WINDOWS": "1",
                "MSVC_LIB": f"'{lib}' -nologo",
                "CC": f"'{self.cc}' {msvc_cflags(self.cflags)}",
                "CXX": self.cxx,
            })
        else:
            env.update({
                "CC": f"{self.cc} {self.cflags}",
                "CXX": f"{self.cxx} {self.cflags}",
                "AR": self.ar,
            })
            if "windows" in self.target:
                env["IS_WINDOWS"] = "1"
        return env