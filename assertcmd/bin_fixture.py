"""A small program driven by environment variables, used as a test subject.

``stdout`` and ``stderr`` are echoed with a trailing newline, ``sleep`` is a
number of seconds to wait and ``exit`` is the exit code.
"""

from __future__ import annotations

import os
import re
import sys
import time
from typing import Mapping, Sequence

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"\+?[0-9]+")
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U64_MAX = 2**64 - 1


def _parse_i32(text: str) -> int:
    if text == "":
        raise ValueError("cannot parse integer from empty string")
    if text in ("+", "-") or not _INT_RE.fullmatch(text):
        raise ValueError("invalid digit found in string")
    value = int(text)
    if value > _I32_MAX:
        raise ValueError("number too large to fit in target type")
    if value < _I32_MIN:
        raise ValueError("number too small to fit in target type")
    return value


def _parse_u64(text: str) -> int | None:
    if not _UINT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U64_MAX else None


def run(environ: Mapping[str, str]) -> int:
    """Act on ``environ`` and return the exit code.

    Raises ``ValueError`` when ``exit`` is not a valid 32-bit integer.
    """
    text = environ.get("stdout")
    if text is not None:
        sys.stdout.write(f"{text}\n")
        sys.stdout.flush()
    text = environ.get("stderr")
    if text is not None:
        sys.stderr.write(f"{text}\n")
        sys.stderr.flush()

    seconds = environ.get("sleep")
    if seconds is not None:
        delay = _parse_u64(seconds)
        if delay is not None:
            time.sleep(delay)

    code = environ.get("exit")
    return 0 if code is None else _parse_i32(code)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the fixture against the process environment; arguments are ignored."""
    try:
        return run(os.environ)
    except ValueError as err:
        sys.stderr.write(str(err))
        sys.stderr.flush()
        return 1


if __name__ == "__main__":
    sys.exit(main())