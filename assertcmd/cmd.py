"""A process builder customised for testing command-line programs."""

from __future__ import annotations

import datetime
import os
import subprocess
from pathlib import Path
from typing import Iterable, Mapping

from .assertion import Assert
from .cargo import cargo_bin_cmd
from .output import DebugBuffer, DebugBytes, Output, OutputError


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _to_bytes(buffer: str | bytes | bytearray | memoryview | Iterable[int]) -> bytes:
    if isinstance(buffer, str):
        return buffer.encode("utf-8")
    return bytes(buffer)


class Command:
    """Describes a program to run, its arguments, environment and input.

    Builder methods return the command itself so calls can be chained.
    Running it always captures stdout and stderr and feeds stdin from the
    buffer given to :meth:`write_stdin` (or nothing).
    """

    def __init__(self, program: str | os.PathLike) -> None:
        self._program = os.fsdecode(program)
        self._args: list[str] = []
        self._env: dict[str, str | None] = {}
        self._env_cleared = False
        self._cwd: Path | None = None
        self._stdin: bytes | None = None
        self._timeout: float | None = None

    @classmethod
    def from_argv(cls, argv: Iterable[str | os.PathLike]) -> "Command":
        """Build a command from a program followed by its arguments."""
        items = list(argv)
        if not items:
            raise ValueError("argv must name a program")
        return cls(items[0]).args(items[1:])

    @classmethod
    def cargo_bin(cls, name: str) -> "Command":
        """Command running a Cargo-built binary; raises ``CargoError`` if missing."""
        return cls.from_argv(cargo_bin_cmd(name))

    def write_stdin(
        self, buffer: str | bytes | bytearray | memoryview | Iterable[int]
    ) -> "Command":
        """Write ``buffer`` to the program's stdin when it is run."""
        self._stdin = _to_bytes(buffer)
        return self

    def timeout(self, seconds: float | datetime.timedelta) -> "Command":
        """Kill the program if it runs longer than ``seconds``."""
        if isinstance(seconds, datetime.timedelta):
            seconds = seconds.total_seconds()
        seconds = float(seconds)
        if seconds < 0:
            raise ValueError("timeout must not be negative")
        self._timeout = seconds
        return self

    def pipe_stdin(self, file: str | os.PathLike) -> "Command":
        """Feed the content of ``file`` to stdin; raises ``OSError`` if unreadable.

        The path is relative to the current process's directory, not to
        :meth:`current_dir`.
        """
        return self.write_stdin(Path(file).read_bytes())

    def arg(self, arg: str | os.PathLike) -> "Command":
        self._args.append(os.fsdecode(arg))
        return self

    def args(self, args: Iterable[str | os.PathLike]) -> "Command":
        self._args.extend(os.fsdecode(arg) for arg in args)
        return self

    def env(self, key: str, val: str | os.PathLike) -> "Command":
        """Set an environment variable for the program."""
        self._env[os.fsdecode(key)] = os.fsdecode(val)
        return self

    def envs(
        self,
        vars: Mapping[str, str] | Iterable[tuple[str, str]],
    ) -> "Command":
        """Set several environment variables."""
        items = vars.items() if isinstance(vars, Mapping) else vars
        for key, val in items:
            self.env(key, val)
        return self

    def env_remove(self, key: str) -> "Command":
        """Make sure the program does not see ``key``."""
        self._env[os.fsdecode(key)] = None
        return self

    def env_clear(self) -> "Command":
        """Run the program with an empty environment plus explicit settings."""
        self._env.clear()
        self._env_cleared = True
        return self

    def current_dir(self, dir: str | os.PathLike) -> "Command":
        self._cwd = Path(dir)
        return self

    def get_program(self) -> str:
        return self._program

    def get_args(self) -> list[str]:
        return list(self._args)

    def get_envs(self) -> list[tuple[str, str | None]]:
        """Explicit environment settings, sorted by name; ``None`` marks removal."""
        return sorted(self._env.items())

    def get_current_dir(self) -> Path | None:
        return self._cwd

    def _environment(self) -> dict[str, str]:
        environ = {} if self._env_cleared else dict(os.environ)
        for key, val in self._env.items():
            if val is None:
                environ.pop(key, None)
            else:
                environ[key] = val
        return environ

    def _describe(self) -> str:
        parts: list[str] = []
        if self._cwd is not None:
            parts.append(f"cd {_quote(str(self._cwd))} &&")
        if self._env_cleared:
            parts.append("env -i")
        for key, val in self.get_envs():
            if val is None:
                parts.append(f"-u {_quote(key)}")
            else:
                parts.append(f"{key}={_quote(val)}")
        parts.append(_quote(self._program))
        parts.extend(_quote(arg) for arg in self._args)
        return " ".join(parts)

    def output(self) -> Output:
        """Run the program to completion and capture its output.

        Raises ``OSError`` when the program cannot be started.
        """
        proc = subprocess.Popen(
            [self._program, *self._args],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=self._environment(),
            cwd=self._cwd,
        )
        with proc:
            try:
                stdout, stderr = proc.communicate(self._stdin, timeout=self._timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                stdout, stderr = proc.communicate()
        returncode = proc.returncode
        code = returncode if returncode is not None and returncode >= 0 else None
        return Output(code=code, stdout=stdout or b"", stderr=stderr or b"")

    def ok(self) -> Output:
        """Run the program; raise :class:`OutputError` unless it succeeded."""
        try:
            output = self.output()
        except OSError as err:
            raise OutputError.with_cause(err) from err
        if output.success():
            return output
        error = OutputError(output).set_cmd(self._describe())
        if self._stdin is not None:
            error.set_stdin(self._stdin)
        raise error

    def unwrap(self) -> Output:
        """Run the program; fail with an ``AssertionError`` report unless it succeeded."""
        try:
            return self.ok()
        except OutputError as err:
            raise AssertionError(str(err)) from err

    def unwrap_err(self) -> OutputError:
        """Run the program and return its error; fail if it succeeded."""
        try:
            output = self.ok()
        except OutputError as err:
            return err
        message = f"Completed successfully:\ncommand=`{self._describe()}`\n"
        if self._stdin is not None:
            message += f"stdin=```{DebugBytes(self._stdin)}```\n"
        message += f"stdout=```{DebugBytes(output.stdout)}```"
        raise AssertionError(message)

    def assert_(self) -> Assert:
        """Run the program and start assertions on its output."""
        try:
            output = self.output()
        except OSError as err:
            raise AssertionError(f"Failed to spawn {self!r}: {err}") from err
        assertion = Assert(output).append_context("command", self._describe())
        if self._stdin is not None:
            assertion.append_context("stdin", DebugBuffer(self._stdin))
        return assertion

    def __repr__(self) -> str:
        return f"Command({self._describe()})"