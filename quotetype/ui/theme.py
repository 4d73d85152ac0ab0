"""Terminal colours and layout settings for the renderer."""

from __future__ import annotations

import curses
from dataclasses import dataclass, replace

DEFAULT_LINE_WIDTH = 50

PAIR_CORRECT = 1
PAIR_INCORRECT = 2
PAIR_MUTED = 3
PAIR_ACCENT = 4
PAIR_SUCCESS = 5


@dataclass(frozen=True)
class Theme:
    """Read-only style settings. Colour values are curses colour numbers; -1 is the terminal default."""

    correct: int = curses.COLOR_WHITE
    incorrect_fg: int = curses.COLOR_WHITE
    incorrect_bg: int = curses.COLOR_RED
    muted: int = curses.COLOR_CYAN
    accent: int = curses.COLOR_BLUE
    success: int = curses.COLOR_GREEN
    background: int = -1
    line_width: int = DEFAULT_LINE_WIDTH

    def install(self) -> None:
        """Register the colour pairs. Only valid once curses is initialised."""
        if not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(PAIR_CORRECT, self.correct, self.background)
        curses.init_pair(PAIR_INCORRECT, self.incorrect_fg, self.incorrect_bg)
        curses.init_pair(PAIR_MUTED, self.muted, self.background)
        curses.init_pair(PAIR_ACCENT, self.accent, self.background)
        curses.init_pair(PAIR_SUCCESS, self.success, self.background)

    def with_width(self, width: int) -> "Theme":
        return replace(self, line_width=max(10, int(width)))


DEFAULT_THEME = Theme()
