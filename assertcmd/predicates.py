"""Composable predicates that explain why they passed or failed."""

from __future__ import annotations

import difflib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


@dataclass
class Case:
    """The outcome of evaluating a predicate, with supporting details.

    ``products`` are ``(name, value)`` pairs describing the evaluation and
    ``children`` are the cases of nested predicates.
    """

    predicate: "Predicate | None"
    result: bool
    products: list[tuple[str, str]] = field(default_factory=list)
    children: list["Case"] = field(default_factory=list)

    def _label(self) -> str:
        return str(self.predicate) if self.predicate is not None else str(self.result)

    def _tree_lines(self) -> list[str]:
        items = [
            f"{name}: {value}".splitlines() or [f"{name}: "]
            for name, value in self.products
        ]
        items.extend(child._tree_lines() for child in self.children)

        lines = [self._label()]
        for index, sub in enumerate(items):
            last = index == len(items) - 1
            head, cont = ("└── ", "    ") if last else ("├── ", "│   ")
            lines.append(head + sub[0])
            lines.extend(cont + line for line in sub[1:])
        return lines

    def tree(self) -> str:
        """Render the case and everything below it as an indented tree."""
        return "\n".join(self._tree_lines())

    def __str__(self) -> str:
        return self.tree()


class Predicate(ABC):
    """A boolean test over a value that can explain its result."""

    @abstractmethod
    def eval(self, item: Any) -> bool:
        """Whether ``item`` satisfies the predicate."""

    def find_case(self, expected: bool, item: Any) -> Case | None:
        """Return a :class:`Case` when the result equals ``expected``."""
        result = self.eval(item)
        if result == expected:
            return Case(self, result)
        return None


class EqPredicate(Predicate):
    """Holds when the value equals a fixed one."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def eval(self, item: Any) -> bool:
        return item == self.value

    def find_case(self, expected: bool, item: Any) -> Case | None:
        result = self.eval(item)
        if result != expected:
            return None
        return Case(self, result, products=[("var", repr(item))])

    def __str__(self) -> str:
        return f"var == {self.value!r}"

    def __repr__(self) -> str:
        return f"EqPredicate({self.value!r})"


class InPredicate(Predicate):
    """Holds when the value is one of a fixed collection."""

    def __init__(self, values: Iterable[Any]) -> None:
        self.values = list(values)

    def eval(self, item: Any) -> bool:
        return item in self.values

    def find_case(self, expected: bool, item: Any) -> Case | None:
        result = self.eval(item)
        if result != expected:
            return None
        return Case(self, result, products=[("var", repr(item))])

    def __str__(self) -> str:
        return f"var in {self.values!r}"

    def __repr__(self) -> str:
        return f"InPredicate({self.values!r})"


class DifferencePredicate(Predicate):
    """Holds when a string equals the original; failures carry a diff."""

    def __init__(self, text: str) -> None:
        self.text = str(text)

    def eval(self, item: str) -> bool:
        return item == self.text

    def find_case(self, expected: bool, item: str) -> Case | None:
        result = self.eval(item)
        if result != expected:
            return None
        delta = "".join(
            difflib.unified_diff(
                self.text.splitlines(keepends=True),
                item.splitlines(keepends=True),
                fromfile="original",
                tofile="var",
            )
        )
        return Case(self, result, products=[("diff", delta)])

    def __str__(self) -> str:
        return "diff original var"

    def __repr__(self) -> str:
        return f"DifferencePredicate({self.text!r})"


class Utf8Predicate(Predicate):
    """Applies a string predicate to bytes decoded as UTF-8.

    Bytes that are not valid UTF-8 never satisfy it.
    """

    def __init__(self, pred: Predicate) -> None:
        self.pred = pred

    @staticmethod
    def _decode(item: bytes) -> str | None:
        try:
            return bytes(item).decode("utf-8")
        except UnicodeDecodeError:
            return None

    def eval(self, item: bytes) -> bool:
        text = self._decode(item)
        return text is not None and self.pred.eval(text)

    def find_case(self, expected: bool, item: bytes) -> Case | None:
        text = self._decode(item)
        if text is None:
            if expected:
                return None
            return Case(self, False, products=[("invalid utf-8", repr(bytes(item)))])
        child = self.pred.find_case(expected, text)
        if child is None:
            return None
        return Case(self, child.result, children=[child])

    def __str__(self) -> str:
        return str(self.pred)

    def __repr__(self) -> str:
        return f"Utf8Predicate({self.pred!r})"


class FnPredicate(Predicate):
    """Wraps an arbitrary callable returning a truth value."""

    def __init__(self, fn: Callable[[Any], Any], name: str = "fn") -> None:
        self.fn = fn
        self.name = name

    def eval(self, item: Any) -> bool:
        return bool(self.fn(item))

    def find_case(self, expected: bool, item: Any) -> Case | None:
        result = self.eval(item)
        if result != expected:
            return None
        return Case(self, result, products=[("var", repr(item))])

    def __str__(self) -> str:
        return f"{self.name}(var)"

    def __repr__(self) -> str:
        return f"FnPredicate({self.name!r})"


def eq(value: Any) -> EqPredicate:
    """Predicate that the value equals ``value``."""
    return EqPredicate(value)


def in_iter(values: Iterable[Any]) -> InPredicate:
    """Predicate that the value is among ``values``."""
    return InPredicate(values)


def diff(text: str) -> DifferencePredicate:
    """Predicate that a string equals ``text``, reporting a diff otherwise."""
    return DifferencePredicate(text)


def from_utf8(pred: Predicate) -> Utf8Predicate:
    """Adapt a string predicate so it accepts UTF-8 bytes."""
    return Utf8Predicate(pred)


def function(fn: Callable[[Any], Any], name: str = "fn") -> FnPredicate:
    """Predicate backed by ``fn``."""
    return FnPredicate(fn, name)