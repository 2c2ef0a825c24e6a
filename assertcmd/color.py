"""Terminal styling for key/value diagnostics."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import IntEnum

COLOR_ENV = "ASSERTCMD_COLOR"
RESET = "\x1b[0m"

_TRUTHY = frozenset({"1", "true", "yes", "on", "always"})


class AnsiColor(IntEnum):
    """Foreground colours used by the palette."""

    YELLOW = 33
    BLUE = 34


@dataclass(frozen=True)
class Style:
    """An optional foreground colour plus an optional bold effect."""

    fg: AnsiColor | None = None
    bold: bool = False

    @property
    def is_plain(self) -> bool:
        return self.fg is None and not self.bold

    def render(self) -> str:
        """Escape sequence that switches this style on."""
        parts = []
        if self.bold:
            parts.append("\x1b[1m")
        if self.fg is not None:
            parts.append(f"\x1b[{int(self.fg)}m")
        return "".join(parts)

    def render_reset(self) -> str:
        """Escape sequence that switches this style off."""
        return "" if self.is_plain else RESET


def _color_enabled() -> bool:
    return os.environ.get(COLOR_ENV, "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Styled:
    """A displayable value paired with a style.

    The style is only applied in the alternate form (``format(x, "#")``).
    """

    display: object
    style: Style = Style()

    def render(self, alternate: bool) -> str:
        text = str(self.display)
        if alternate:
            return f"{self.style.render()}{text}{self.style.render_reset()}"
        return text

    def __str__(self) -> str:
        return self.render(False)

    def __format__(self, spec: str) -> str:
        alternate = "#" in spec
        rest = spec.replace("#", "")
        rendered = self.render(alternate)
        return format(rendered, rest) if rest else rendered


@dataclass(frozen=True)
class Palette:
    """Styles for the keys and values of diagnostic output."""

    key_style: Style = Style()
    value_style: Style = Style()

    @classmethod
    def color(cls) -> "Palette":
        """The coloured palette when colour is enabled, otherwise plain."""
        if _color_enabled():
            return cls(
                key_style=Style(fg=AnsiColor.BLUE, bold=True),
                value_style=Style(fg=AnsiColor.YELLOW, bold=True),
            )
        return cls.plain()

    @classmethod
    def plain(cls) -> "Palette":
        return cls()

    def key(self, display: object) -> Styled:
        return Styled(display, self.key_style)

    def value(self, display: object) -> Styled:
        return Styled(display, self.value_style)