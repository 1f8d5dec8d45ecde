"""Named colors, color-scheme cycling, and ANSI palette resolution.

Color names come from the user config (``colorscheme`` and
``highlight_color``). Unknown names fall back to ``lightblue``.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_COLOR = "lightblue"

# name -> (foreground SGR, background SGR)
_COLOR_SGR: dict[str, tuple[str, str]] = {
    "lightblue": ("94", "104"),
    "blue": ("34", "44"),
    "lightred": ("91", "101"),
    "red": ("31", "41"),
    "lightgreen": ("92", "102"),
    "green": ("32", "42"),
    "lightcyan": ("96", "106"),
    "cyan": ("36", "46"),
    "lightyellow": ("93", "103"),
    "yellow": ("33", "43"),
    "gray": ("37", "47"),
    "white": ("97", "107"),
}

COLOR_CYCLE: tuple[str, ...] = (
    "lightblue",
    "cyan",
    "lightgreen",
    "yellow",
    "lightred",
    "green",
    "lightcyan",
    "blue",
    "lightyellow",
    "red",
)


def available_color_names() -> tuple[str, ...]:
    return tuple(sorted(_COLOR_SGR))


def normalize_color_name(name: str | None) -> str:
    """Return a known lowercase color name, falling back to the default."""
    if not name:
        return DEFAULT_COLOR
    candidate = str(name).strip().lower()
    if candidate in _COLOR_SGR:
        return candidate
    return DEFAULT_COLOR


def foreground_sgr(name: str) -> str:
    return f"\033[{_COLOR_SGR[normalize_color_name(name)][0]}m"


def highlight_sgr(name: str) -> str:
    """White text on the named background, used for the selected list row."""
    return f"\033[97;{_COLOR_SGR[normalize_color_name(name)][1]}m"


def scheme_cycle_for(colorscheme: str) -> tuple[str, ...]:
    """Return the cycle that ``next_color_scheme`` walks for ``colorscheme``.

    The configured scheme is always a member, so advancing ``len(cycle)``
    times lands back on it.
    """
    normalized = normalize_color_name(colorscheme)
    if normalized in COLOR_CYCLE:
        return COLOR_CYCLE
    return (normalized, *COLOR_CYCLE)


@dataclass(frozen=True)
class ColorScheme:
    """Active foreground/highlight pair plus its position in the cycle."""

    colorscheme: str
    highlight_color: str
    cycle_index: int
    cycle: tuple[str, ...]

    @classmethod
    def from_config(cls, colorscheme: str, highlight_color: str) -> ColorScheme:
        normalized = normalize_color_name(colorscheme)
        cycle = scheme_cycle_for(normalized)
        return cls(
            colorscheme=normalized,
            highlight_color=normalize_color_name(highlight_color),
            cycle_index=cycle.index(normalized),
            cycle=cycle,
        )

    def advanced(self) -> ColorScheme:
        """Return the next scheme: foreground ``cycle[i]``, highlight ``cycle[i + 1]``."""
        size = len(self.cycle)
        index = (self.cycle_index + 1) % size
        return ColorScheme(
            colorscheme=self.cycle[index],
            highlight_color=self.cycle[(index + 1) % size],
            cycle_index=index,
            cycle=self.cycle,
        )


__all__ = [
    "COLOR_CYCLE",
    "ColorScheme",
    "DEFAULT_COLOR",
    "available_color_names",
    "foreground_sgr",
    "highlight_sgr",
    "normalize_color_name",
    "scheme_cycle_for",
]
