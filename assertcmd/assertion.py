"""Assertions on the exit status and captured streams of a process."""

from __future__ import annotations

import subprocess
from enum import Enum
from typing import Any, Iterable

from .color import Palette
from .output import DebugBytes, Output, output_fmt
from .predicates import (
    Case,
    DifferencePredicate,
    EqPredicate,
    InPredicate,
    Predicate,
    diff,
    eq,
    from_utf8,
    in_iter,
)


class AssertReason(Enum):
    """Why an assertion failed."""

    UNEXPECTED_FAILURE = "unexpected failure"
    UNEXPECTED_SUCCESS = "unexpected success"
    UNEXPECTED_COMPLETION = "unexpected completion"
    COMMAND_INTERRUPTED = "command interrupted"
    UNEXPECTED_RETURN_CODE = "unexpected return code"
    UNEXPECTED_STDOUT = "unexpected stdout"
    UNEXPECTED_STDERR = "unexpected stderr"


class AssertError(Exception):
    """A failed assertion, raised by the ``try_`` methods of :class:`Assert`.

    ``assertion`` is the :class:`Assert` that failed, so further checks can be
    made on its output.
    """

    def __init__(
        self,
        assertion: "Assert",
        reason: AssertReason,
        *,
        actual_code: int | None = None,
        case_tree: str | None = None,
    ) -> None:
        super().__init__(reason.value)
        self.assertion = assertion
        self.reason = reason
        self.actual_code = actual_code
        self.case_tree = case_tree

    def _headline(self) -> str:
        reason = self.reason
        if reason is AssertReason.UNEXPECTED_FAILURE:
            code = (
                str(self.actual_code)
                if self.actual_code is not None
                else "<interrupted>"
            )
            stderr = DebugBytes(self.assertion.get_output().stderr)
            return f"Unexpected failure.\ncode={code}\nstderr=```{stderr}```\n"
        if reason is AssertReason.UNEXPECTED_SUCCESS:
            return "Unexpected success\n"
        if reason is AssertReason.UNEXPECTED_COMPLETION:
            return "Unexpected completion\n"
        if reason is AssertReason.COMMAND_INTERRUPTED:
            return "Command interrupted\n"
        if reason is AssertReason.UNEXPECTED_RETURN_CODE:
            return f"Unexpected return code, failed {self.case_tree}\n"
        if reason is AssertReason.UNEXPECTED_STDOUT:
            return f"Unexpected stdout, failed {self.case_tree}\n"
        return f"Unexpected stderr, failed {self.case_tree}\n"

    def __str__(self) -> str:
        return self._headline() + str(self.assertion)


class Assert:
    """Checks on an :class:`Output`; each check returns the same object.

    The plain methods raise ``AssertionError`` with a full report; the
    ``try_`` methods raise :class:`AssertError` instead.
    """

    def __init__(self, output: Output) -> None:
        self._output = output
        self._context: list[tuple[str, Any]] = []

    def append_context(self, name: str, context: Any) -> "Assert":
        """Add a named value to show in failure reports."""
        self._context.append((name, context))
        return self

    def get_output(self) -> Output:
        return self._output

    def _fail(self, reason: AssertReason, **details: Any) -> AssertError:
        return AssertError(self, reason, **details)

    @staticmethod
    def _unwrap(check) -> "Assert":
        try:
            return check()
        except AssertError as err:
            raise AssertionError(str(err)) from err

    def success(self) -> "Assert":
        """Ensure the command succeeded."""
        return self._unwrap(self.try_success)

    def try_success(self) -> "Assert":
        if not self._output.success():
            raise self._fail(
                AssertReason.UNEXPECTED_FAILURE, actual_code=self._output.code
            )
        return self

    def failure(self) -> "Assert":
        """Ensure the command failed."""
        return self._unwrap(self.try_failure)

    def try_failure(self) -> "Assert":
        if self._output.success():
            raise self._fail(AssertReason.UNEXPECTED_SUCCESS)
        return self

    def interrupted(self) -> "Assert":
        """Ensure the command aborted before returning a code."""
        return self._unwrap(self.try_interrupted)

    def try_interrupted(self) -> "Assert":
        if self._output.code is not None:
            raise self._fail(AssertReason.UNEXPECTED_COMPLETION)
        return self

    def code(self, pred: Any) -> "Assert":
        """Ensure the command returned the expected code.

        ``pred`` may be a predicate, an ``int`` or an iterable of ints.
        """
        return self._unwrap(lambda: self.try_code(pred))

    def try_code(self, pred: Any) -> "Assert":
        predicate = into_code(pred)
        actual_code = self._output.code
        if actual_code is None:
            raise self._fail(AssertReason.COMMAND_INTERRUPTED)
        case = predicate.find_case(False, actual_code)
        if case is not None:
            raise self._fail(
                AssertReason.UNEXPECTED_RETURN_CODE, case_tree=case.tree()
            )
        return self

    def stdout(self, pred: Any) -> "Assert":
        """Ensure the command wrote the expected data to stdout.

        ``pred`` may be a predicate, ``bytes``, a list of byte values or a ``str``.
        """
        return self._unwrap(lambda: self.try_stdout(pred))

    def try_stdout(self, pred: Any) -> "Assert":
        case = into_output(pred).find_case(False, self._output.stdout)
        if case is not None:
            raise self._fail(AssertReason.UNEXPECTED_STDOUT, case_tree=case.tree())
        return self

    def stderr(self, pred: Any) -> "Assert":
        """Ensure the command wrote the expected data to stderr."""
        return self._unwrap(lambda: self.try_stderr(pred))

    def try_stderr(self, pred: Any) -> "Assert":
        case = into_output(pred).find_case(False, self._output.stderr)
        if case is not None:
            raise self._fail(AssertReason.UNEXPECTED_STDERR, case_tree=case.tree())
        return self

    def __str__(self) -> str:
        palette = Palette.color()
        lines = [
            f"{palette.key(name):#}=`{palette.value(context):#}`\n"
            for name, context in self._context
        ]
        return "".join(lines) + output_fmt(self._output)

    def __repr__(self) -> str:
        return f"Assert(output={self._output!r})"


class _Delegating(Predicate):
    """A predicate that forwards to a wrapped one."""

    def __init__(self, inner: Predicate) -> None:
        self._inner = inner

    def eval(self, item: Any) -> bool:
        return self._inner.eval(item)

    def find_case(self, expected: bool, item: Any) -> Case | None:
        return self._inner.find_case(expected, item)

    def __str__(self) -> str:
        return str(self._inner)


class EqCodePredicate(_Delegating):
    """Exit code equals a single value."""

    def __init__(self, value: int) -> None:
        super().__init__(eq(value))

    def __repr__(self) -> str:
        return f"EqCodePredicate({self._inner!r})"


class InCodePredicate(_Delegating):
    """Exit code is one of several values."""

    def __init__(self, values: Iterable[int]) -> None:
        super().__init__(in_iter(values))

    def __repr__(self) -> str:
        return f"InCodePredicate({self._inner!r})"


class BytesContentOutputPredicate(Predicate):
    """Output equals the given bytes exactly."""

    def __init__(self, value: bytes | bytearray | Iterable[int]) -> None:
        self.value = bytes(value)

    def eval(self, item: bytes) -> bool:
        return self.value == bytes(item)

    def find_case(self, expected: bool, item: bytes) -> Case | None:
        actual = self.eval(item)
        if expected == actual:
            return Case(self, actual)
        return None

    def __str__(self) -> str:
        return str(EqPredicate(self.value))

    def __repr__(self) -> str:
        return f"BytesContentOutputPredicate({self.value!r})"


class StrContentOutputPredicate(_Delegating):
    """Output, decoded as UTF-8, equals the given text; failures show a diff."""

    def __init__(self, text: str) -> None:
        super().__init__(from_utf8(diff(text)))

    def __repr__(self) -> str:
        return f"StrContentOutputPredicate({self._inner!r})"


class StrOutputPredicate(_Delegating):
    """Applies a string predicate to output decoded as UTF-8."""

    def __init__(self, pred: Predicate) -> None:
        super().__init__(from_utf8(pred))

    def __repr__(self) -> str:
        return f"StrOutputPredicate({self._inner!r})"


def into_code(pred: Any) -> Predicate:
    """Convert a predicate, an int or an iterable of ints to a code predicate."""
    if isinstance(pred, Predicate):
        return pred
    if isinstance(pred, int):
        return EqCodePredicate(pred)
    if isinstance(pred, (str, bytes, bytearray)):
        raise TypeError(f"cannot use {type(pred).__name__} as an exit code predicate")
    try:
        values = list(pred)
    except TypeError:
        raise TypeError(
            f"cannot use {type(pred).__name__} as an exit code predicate"
        ) from None
    if not all(isinstance(value, int) for value in values):
        raise TypeError("exit codes must be integers")
    return InCodePredicate(values)


def _is_str_predicate(pred: Predicate) -> bool:
    if isinstance(pred, DifferencePredicate):
        return True
    if isinstance(pred, EqPredicate):
        return isinstance(pred.value, str)
    if isinstance(pred, InPredicate):
        return bool(pred.values) and all(isinstance(v, str) for v in pred.values)
    return False


def into_output(pred: Any) -> Predicate:
    """Convert a predicate, bytes or text to a predicate over output bytes.

    Predicates that only make sense for text are applied to the output
    decoded as UTF-8; other predicates see the raw bytes.
    """
    if isinstance(pred, Predicate):
        return StrOutputPredicate(pred) if _is_str_predicate(pred) else pred
    if isinstance(pred, str):
        return StrContentOutputPredicate(pred)
    if isinstance(pred, (bytes, bytearray, memoryview)):
        return BytesContentOutputPredicate(bytes(pred))
    try:
        return BytesContentOutputPredicate(bytes(pred))
    except (TypeError, ValueError):
        raise TypeError(
            f"cannot use {type(pred).__name__} as an output predicate"
        ) from None


def assert_output(output: Output | subprocess.CompletedProcess) -> Assert:
    """Start assertions on a finished process's output."""
    if isinstance(output, subprocess.CompletedProcess):
        output = Output.from_completed(output)
    return Assert(output)