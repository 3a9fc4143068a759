"""Running child processes and collecting their (possibly abbreviated) output."""

from __future__ import annotations

import os
import shlex
import stat
import subprocess
import sys
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

_RULE = "------------------------------------------"


class ProcFailure(Exception):
    """A checked process did not behave as the test expected."""

    def __init__(self, message: str, proc_res: ProcRes | None = None) -> None:
        super().__init__(message)
        self.proc_res = proc_res


@dataclass
class ProcRes:
    """Result of one child process."""

    returncode: int | None
    stdout: str
    stderr: str
    cmdline: str

    def success(self) -> bool:
        return self.returncode == 0

    @property
    def status(self) -> str:
        if self.returncode is None:
            return "unknown"
        if self.returncode < 0:
            return f"signal: {-self.returncode}"
        return f"exit status: {self.returncode}"

    def report(self, err: str | None = None) -> str:
        """Describe the process: status, command line, stdout and stderr."""
        prefix = f"\nerror: {err}\n" if err is not None else ""
        return (
            f"{prefix}"
            f"status: {self.status}\n"
            f"command: {self.cmdline}\n"
            f"stdout:\n{_RULE}\n{self.stdout}\n{_RULE}\n"
            f"stderr:\n{_RULE}\n{self.stderr}\n{_RULE}\n\n"
        )

    def fatal(self, err: str | None = None) -> None:
        """Print the report and raise ProcFailure."""
        print(self.report(err), end="")
        raise ProcFailure(err or "process failed", self)


class ProcOutput:
    """Output buffer that keeps the head and the tail once it grows too large."""

    HEAD_LEN = 160 * 1024
    TAIL_LEN = 256 * 1024

    def __init__(self, head_len: int = HEAD_LEN, tail_len: int = TAIL_LEN) -> None:
        if head_len < 0 or tail_len <= 0:
            raise ValueError("head_len must be >= 0 and tail_len > 0")
        self.head_len = head_len
        self.tail_len = tail_len
        self._head = bytearray()
        self._tail: bytes | None = None
        self.skipped = 0

    @property
    def abbreviated(self) -> bool:
        return self._tail is not None

    def extend(self, data: bytes) -> None:
        if self._tail is None:
            self._head.extend(data)
            size = len(self._head)
            if size <= self.head_len + self.tail_len:
                return
            cut = size - self.tail_len
            self._tail = bytes(self._head[cut:])
            del self._head[cut:]
            self.skipped = size - self.head_len - self.tail_len
        else:
            self.skipped += len(data)
            self._tail = (self._tail + bytes(data))[-self.tail_len:]

    def into_bytes(self) -> bytes:
        if self._tail is None:
            return bytes(self._head)
        marker = f"\n\n<<<<<< SKIPPED {self.skipped} BYTES >>>>>>\n\n".encode()
        return bytes(self._head) + marker + self._tail


def dylib_env_var() -> str:
    """Name of the environment variable that holds dynamic library locations."""
    if sys.platform == "win32":
        return "PATH"
    if sys.platform == "darwin":
        return "DYLD_LIBRARY_PATH"
    if sys.platform.startswith("haiku"):
        return "LIBRARY_PATH"
    return "LD_LIBRARY_PATH"


def build_library_path(lib_path: str, aux_path: str | None = None,
                       current: str | None = None) -> str:
    """Put ``lib_path`` and then ``aux_path`` in front of ``current``."""
    entries = (current or "").split(os.pathsep)
    if aux_path is not None:
        entries.insert(0, aux_path)
    entries.insert(0, lib_path)
    return os.pathsep.join(entries)


def _pump(stream, sink: ProcOutput) -> None:
    try:
        for chunk in iter(lambda: stream.read(8192), b""):
            sink.extend(chunk)
    finally:
        stream.close()


def read2_abbreviated(process: subprocess.Popen) -> subprocess.CompletedProcess:
    """Read stdout and stderr of ``process`` together and wait for it."""
    if process.stdin is not None:
        process.stdin.close()
    stdout, stderr = ProcOutput(), ProcOutput()
    threads = [
        threading.Thread(target=_pump, args=(stream, sink), daemon=True)
        for stream, sink in ((process.stdout, stdout), (process.stderr, stderr))
        if stream is not None
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    returncode = process.wait()
    return subprocess.CompletedProcess(
        process.args, returncode, stdout.into_bytes(), stderr.into_bytes()
    )


def run_process(argv: Sequence[str | os.PathLike[str]], lib_path: str,
                aux_path: str | None = None, input: str | None = None,
                env: Mapping[str, str] | None = None,
                cwd: str | os.PathLike[str] | None = None) -> ProcRes:
    """Run ``argv`` with the library search path extended, capturing output."""
    args = [os.fspath(arg) for arg in argv]
    cmdline = shlex.join(args)
    child_env = dict(os.environ)
    if env:
        child_env.update(env)
    var = dylib_env_var()
    child_env[var] = build_library_path(lib_path, aux_path, os.environ.get(var))
    try:
        process = subprocess.Popen(
            args,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=child_env,
            cwd=cwd,
        )
    except OSError as exc:
        raise RuntimeError(f"failed to exec `{cmdline}`: {exc}") from exc
    if input is not None and process.stdin is not None:
        process.stdin.write(input.encode())
    output = read2_abbreviated(process)
    return ProcRes(
        returncode=output.returncode,
        stdout=output.stdout.decode("utf-8", errors="replace"),
        stderr=output.stderr.decode("utf-8", errors="replace"),
        cmdline=cmdline,
    )


def aggressive_rm_rf(path: str | os.PathLike[str]) -> None:
    """Remove a directory tree, including read-only files on Windows."""
    path = Path(path)
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                aggressive_rm_rf(entry.path)
                continue
            try:
                os.remove(entry.path)
            except PermissionError:
                if sys.platform != "win32":
                    raise
                os.chmod(entry.path, stat.S_IWRITE | stat.S_IREAD)
                os.remove(entry.path)
    os.rmdir(path)