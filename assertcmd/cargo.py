"""Locate binaries built by Cargo so tests can run them."""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path

EXE_SUFFIX = ".exe" if os.name == "nt" else ""

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "i686",
    "i586": "i686",
    "x86": "i686",
}


class CargoError(Exception):
    """Error when finding a crate binary."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(cause)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def with_cause(cls, cause: BaseException) -> "CargoError":
        """Wrap the underlying error for passing up."""
        if not isinstance(cause, BaseException):
            raise TypeError("cause must be an exception")
        return cls(cause)

    def __str__(self) -> str:
        if self.cause is None:
            return ""
        return f"Cause: {self.cause}\n"


class NotFoundError(Exception):
    """The expected binary does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(self.path)

    def __str__(self) -> str:
        return f"Cargo command not found: {self.path}\n"


def current_target() -> str:
    """Target triplet describing the running platform."""
    machine = platform.machine().strip() or "unknown"
    arch = _MACHINE_ALIASES.get(machine.lower(), machine.lower())
    plat = sys.platform
    if plat.startswith("linux"):
        return f"{arch}-unknown-linux-gnu"
    if plat == "darwin":
        return f"{arch}-apple-darwin"
    if plat in ("win32", "cygwin"):
        return f"{arch}-pc-windows-msvc"
    if plat.startswith("freebsd"):
        return f"{arch}-unknown-freebsd"
    if plat.startswith("netbsd"):
        return f"{arch}-unknown-netbsd"
    if plat.startswith("openbsd"):
        return f"{arch}-unknown-openbsd"
    return f"{arch}-unknown-{plat}"


def _runner_env_var() -> str:
    return f"CARGO_TARGET_{current_target().replace('-', '_').upper()}_RUNNER"


def cargo_runner() -> list[str] | None:
    """The runner configured for the current target, split into words."""
    runner = os.environ.get(_runner_env_var())
    if runner is None:
        return None
    return runner.split(" ")


def target_dir() -> Path:
    """Directory holding the running executable, skipping a ``deps`` level."""
    if not sys.executable:
        raise RuntimeError("this should only be used where a current executable is known")
    path = Path(sys.executable).parent
    if path.name == "deps":
        path = path.parent
    return path


def cargo_bin(name: str) -> Path:
    """Look up the path to a Cargo-built binary."""
    env_value = os.environ.get(f"CARGO_BIN_EXE_{name}")
    if env_value is not None:
        return Path(env_value)
    return target_dir() / f"{name}{EXE_SUFFIX}"


def cargo_bin_cmd(name: str) -> list[str]:
    """Command line that runs the named binary, through a runner if configured."""
    path = cargo_bin(name)
    if not path.is_file():
        raise CargoError.with_cause(NotFoundError(path))
    runner = cargo_runner()
    if runner is not None:
        return [*runner, str(path)]
    return [str(path)]