"""Captured process output and helpers for one-off runs of programs."""

from __future__ import annotations

import re
import subprocess
import unicodedata
from dataclasses import dataclass
from typing import Iterable

from .color import Palette

_LINES_MIN_OVERFLOW = 80
_LINES_MAX_START = 20
_LINES_MAX_END = 40
_LINES_MAX_PRINTED = _LINES_MAX_START + _LINES_MAX_END

_BYTES_MIN_OVERFLOW = 8192
_BYTES_MAX_START = 2048
_BYTES_MAX_END = 2048
_BYTES_MAX_PRINTED = _BYTES_MAX_START + _BYTES_MAX_END

_LINE_RE = re.compile(rb"[^\n]*\n|[^\n]+")


@dataclass
class Output:
    """Exit status and captured streams of a finished process.

    ``code`` is ``None`` when the process was terminated by a signal.
    """

    code: int | None = 0
    stdout: bytes = b""
    stderr: bytes = b""

    @classmethod
    def from_completed(cls, completed: subprocess.CompletedProcess) -> "Output":
        returncode = completed.returncode
        code = returncode if returncode is not None and returncode >= 0 else None
        return cls(
            code=code,
            stdout=bytes(completed.stdout or b""),
            stderr=bytes(completed.stderr or b""),
        )

    def success(self) -> bool:
        return self.code == 0


class OutputError(Exception):
    """A process that did not succeed, or could not be run at all."""

    def __init__(self, cause: "Output | BaseException") -> None:
        super().__init__(cause)
        self.cmd: str | None = None
        self.stdin: bytes | None = None
        self.cause = cause

    @classmethod
    def with_cause(cls, cause: BaseException) -> "OutputError":
        """Wrap an error raised while creating an :class:`Output`."""
        if not isinstance(cause, BaseException):
            raise TypeError("cause must be an exception")
        return cls(cause)

    def set_cmd(self, cmd: str) -> "OutputError":
        self.cmd = cmd
        return self

    def set_stdin(self, stdin: bytes) -> "OutputError":
        self.stdin = bytes(stdin)
        return self

    def as_output(self) -> Output | None:
        return self.cause if isinstance(self.cause, Output) else None

    def __str__(self) -> str:
        palette = Palette.color()
        parts = []
        if self.cmd is not None:
            parts.append(f"{palette.key('command'):#}={palette.value(self.cmd):#}\n")
        if self.stdin is not None:
            parts.append(
                f"{palette.key('stdin'):#}={palette.value(DebugBytes(self.stdin)):#}\n"
            )
        if isinstance(self.cause, Output):
            parts.append(output_fmt(self.cause))
        else:
            parts.append(str(self.cause))
        return "".join(parts)


@dataclass(frozen=True)
class DebugBytes:
    """Displays bytes in a readable, size-limited form."""

    data: bytes

    def __str__(self) -> str:
        return format_bytes(self.data)


@dataclass(frozen=True)
class DebugBuffer:
    """Owned buffer displayed like :class:`DebugBytes`."""

    buffer: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "buffer", bytes(self.buffer))

    def __str__(self) -> str:
        return format_bytes(self.buffer)


def ok(output: Output) -> Output:
    """Return ``output`` if it succeeded, otherwise raise :class:`OutputError`."""
    if output.success():
        return output
    raise OutputError(output)


def unwrap(output: Output) -> Output:
    """Like :func:`ok`, but fail with an ``AssertionError`` carrying the report."""
    try:
        return ok(output)
    except OutputError as err:
        raise AssertionError(str(err)) from err


def unwrap_err(output: Output) -> OutputError:
    """Return the error of a failed output; fail if it succeeded."""
    try:
        ok(output)
    except OutputError as err:
        return err
    raise AssertionError(
        f"Command completed successfully\nstdout=```{DebugBytes(output.stdout)}```"
    )


def output_fmt(output: Output) -> str:
    """Render the code and both streams of ``output``."""
    palette = Palette.color()
    code = output.code if output.code is not None else "<interrupted>"
    return (
        f"{palette.key('code'):#}={palette.value(code):#}\n"
        f"{palette.key('stdout'):#}={palette.value(DebugBytes(output.stdout)):#}\n"
        f"{palette.key('stderr'):#}={palette.value(DebugBytes(output.stderr)):#}\n"
    )


def _lines(data: bytes) -> list[bytes]:
    return _LINE_RE.findall(data)


def _escape_char(ch: str) -> str:
    code = ord(ch)
    if ch == "\0":
        return "\\0"
    if 0xDC80 <= code <= 0xDCFF:
        return f"\\x{code - 0xDC00:02X}"
    if 0x01 <= code <= 0x08 or code in (0x0B, 0x0C, 0x7F) or 0x0E <= code <= 0x19:
        return f"\\x{code:02x}"
    simple = {"\n": "\\n", "\r": "\\r", "\t": "\\t", '"': '\\"', "'": "\\'", "\\": "\\\\"}
    if ch in simple:
        return simple[ch]
    if ch != " " and unicodedata.category(ch)[0] in "CZ":
        return f"\\u{{{code:x}}}"
    return ch


def _debug_bstr(data: bytes) -> str:
    text = data.decode("utf-8", errors="surrogateescape")
    return '"' + "".join(_escape_char(ch) for ch in text) + '"'


def _write_debug_bstrs(multiline: bool, lines: Iterable[bytes]) -> str:
    if not multiline:
        first = next(iter(lines), b"")
        return _debug_bstr(first)
    parts = ["```\n"]
    for line in lines:
        newline = line.endswith(b"\n")
        if newline:
            line = line[:-1]
        parts.append(_debug_bstr(line)[1:-1])
        if newline:
            parts.append("\n")
    parts.append("```\n")
    return "".join(parts)


def format_bytes(data: bytes) -> str:
    """Render bytes for diagnostics, eliding the middle of large data."""
    lines = _lines(data)
    lines_total = len(lines)
    multiline = lines_total > 1

    if lines_total >= _LINES_MIN_OVERFLOW:
        lines_omitted = lines_total - _LINES_MAX_PRINTED
        return (
            f"<{lines_total} lines total>\n"
            + _write_debug_bstrs(True, lines[:_LINES_MAX_START])
            + f"<{lines_omitted} lines omitted>\n"
            + _write_debug_bstrs(True, lines[_LINES_MAX_START + lines_omitted :])
        )
    if len(data) >= _BYTES_MIN_OVERFLOW:
        sep = "\n" if multiline else ""
        return (
            f"<{len(data)} bytes total>{sep}"
            + _write_debug_bstrs(multiline, _lines(data[:_BYTES_MAX_START]))
            + f"<{len(data) - _BYTES_MAX_PRINTED} bytes omitted>{sep}"
            + _write_debug_bstrs(multiline, _lines(data[len(data) - _BYTES_MAX_END :]))
        )
    return _write_debug_bstrs(multiline, lines)