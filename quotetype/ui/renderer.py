"""Curses drawing of a session snapshot.

Layout helpers (``wrap_lines``, ``quote_spans`` and the text formatters) are
pure so they can be tested without a terminal; ``CursesRenderer`` only turns
their output into ``addstr`` calls.
"""

from __future__ import annotations

import curses
import enum
from typing import List, Optional, Sequence, Tuple

from quotetype.core.session import CharStatus, SessionSnapshot, SessionState, speed_tier
from quotetype.ui.theme import (
    DEFAULT_THEME,
    PAIR_ACCENT,
    PAIR_CORRECT,
    PAIR_INCORRECT,
    PAIR_MUTED,
    PAIR_SUCCESS,
    Theme,
)

TITLE = " Typing Test "
TITLE_DONE = " Typing Test Completed "
HELP_TEXT = "type to start | <- -> length | TAB new quote | ESC quit"
HELP_TEXT_DONE = "TAB try again | ESC quit"


class Style(enum.Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNTYPED = "untyped"
    CURSOR = "cursor"


Span = Tuple[str, Style]


def wrap_lines(text: str, width: int) -> List[Tuple[int, int]]:
    """Word-wrap ``text`` into ``(start, end)`` index ranges.

    Each line keeps the space it broke on, so the ranges cover the text
    exactly and every position stays typeable. Words longer than ``width``
    are split.
    """
    width = max(1, width)
    ranges: List[Tuple[int, int]] = []
    start = 0
    n = len(text)
    while start < n:
        if n - start <= width:
            ranges.append((start, n))
            break
        k = text.rfind(" ", start + 1, start + width + 1)
        end = k + 1 if k != -1 else start + width
        ranges.append((start, end))
        start = end
    return ranges


def _style_for(snapshot: SessionSnapshot, index: int) -> Style:
    status = snapshot.cells[index].status
    if status is CharStatus.CORRECT:
        return Style.CORRECT
    if status is CharStatus.INCORRECT:
        return Style.INCORRECT
    if index == snapshot.cursor and not snapshot.is_complete:
        return Style.CURSOR
    return Style.UNTYPED


def quote_spans(snapshot: SessionSnapshot, width: int) -> List[List[Span]]:
    """Wrapped quote lines as runs of same-styled text."""
    text = snapshot.text
    lines: List[List[Span]] = []
    for start, end in wrap_lines(text, width):
        spans: List[Span] = []
        for i in range(start, end):
            style = _style_for(snapshot, i)
            if spans and spans[-1][1] is style:
                spans[-1] = (spans[-1][0] + text[i], style)
            else:
                spans.append((text[i], style))
        lines.append(spans)
    return lines


def format_wpm(wpm: Optional[float]) -> str:
    if wpm is None:
        return "-"
    return f"{round(wpm)} ({speed_tier(wpm)})"


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return "-"
    return f"{seconds:.1f}s"


def selector_items(snapshot: SessionSnapshot) -> List[Tuple[str, bool]]:
    return [(label, i == snapshot.category_index) for i, label in enumerate(snapshot.categories)]


def status_text(snapshot: SessionSnapshot) -> str:
    if snapshot.state is SessionState.NOT_STARTED:
        return f"Length: {snapshot.category}"
    wpm = snapshot.wpm if snapshot.is_complete else snapshot.live_wpm
    return (
        f"WPM: {format_wpm(wpm)}  |  Accuracy: {snapshot.accuracy:.1f}%"
        f"  |  {snapshot.correct_count} - {snapshot.error_count}"
    )


def result_lines(snapshot: SessionSnapshot) -> List[Tuple[str, str]]:
    """Label/value rows for the completion panel."""
    if not snapshot.is_complete:
        return []
    return [
        ("WPM", format_wpm(snapshot.wpm)),
        ("Net WPM", format_wpm(snapshot.net_wpm)),
        ("Time", format_duration(snapshot.elapsed)),
        ("Words", str(len(snapshot.text.split()))),
        ("Accuracy", f"{snapshot.accuracy:.1f}%"),
        ("Correct", str(snapshot.correct_count)),
        ("Incorrect", str(snapshot.error_count)),
    ]


class CursesRenderer:
    """Draws snapshots onto a curses window. Never mutates the session."""

    def __init__(self, window, theme: Theme = DEFAULT_THEME) -> None:
        self._window = window
        self._theme = theme

    def _attr(self, style: Style) -> int:
        if style is Style.CORRECT:
            return curses.color_pair(PAIR_CORRECT)
        if style is Style.INCORRECT:
            return curses.color_pair(PAIR_INCORRECT) | curses.A_BOLD
        if style is Style.CURSOR:
            return curses.color_pair(PAIR_MUTED) | curses.A_UNDERLINE
        return curses.color_pair(PAIR_MUTED) | curses.A_DIM

    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        height, width = self._window.getmaxyx()
        if y < 0 or y >= height or x >= width:
            return
        text = text[: max(0, width - x - 1)]
        if not text:
            return
        try:
            self._window.addstr(y, max(0, x), text, attr)
        except curses.error:
            pass

    def _centered(self, y: int, text: str, attr: int = 0) -> None:
        _, width = self._window.getmaxyx()
        self._put(y, max(0, (width - len(text)) // 2), text, attr)

    def draw(self, snapshot: SessionSnapshot) -> None:
        self._window.erase()
        height, _ = self._window.getmaxyx()
        accent = curses.color_pair(PAIR_ACCENT) | curses.A_BOLD

        if snapshot.is_complete:
            self._draw_results(snapshot)
            self._centered(height - 1, HELP_TEXT_DONE, accent)
            self._window.refresh()
            return

        self._centered(0, TITLE, curses.A_BOLD)
        self._draw_selector(2, snapshot)

        if snapshot.error:
            self._centered(4, snapshot.error, curses.color_pair(PAIR_INCORRECT) | curses.A_BOLD)
        else:
            y = self._draw_quote(4, snapshot)
            self._centered(y + 1, status_text(snapshot), curses.A_BOLD)
            self._put(y + 3, 2, "Source: ", accent)
            self._put(y + 3, 10, snapshot.source, curses.A_ITALIC)

        self._centered(height - 1, HELP_TEXT, accent)
        self._window.refresh()

    def _draw_selector(self, y: int, snapshot: SessionSnapshot) -> None:
        accent = curses.color_pair(PAIR_ACCENT) | curses.A_BOLD
        self._put(y, 2, "Length:", accent)
        x = 10
        for label, selected in selector_items(snapshot):
            item = f" {label} "
            attr = curses.color_pair(PAIR_SUCCESS) | curses.A_BOLD | curses.A_UNDERLINE if selected else 0
            self._put(y, x, item, attr)
            x += len(item) + 1

    def _draw_quote(self, top: int, snapshot: SessionSnapshot) -> int:
        _, width = self._window.getmaxyx()
        line_width = min(self._theme.line_width, max(1, width - 2))
        lines = quote_spans(snapshot, line_width)
        for row, spans in enumerate(lines):
            x = max(0, (width - sum(len(t) for t, _ in spans)) // 2)
            for text, style in spans:
                self._put(top + row, x, text, self._attr(style))
                x += len(text)
        return top + len(lines)

    def _draw_results(self, snapshot: SessionSnapshot) -> None:
        self._centered(0, TITLE_DONE, curses.color_pair(PAIR_SUCCESS) | curses.A_BOLD)
        rows: Sequence[Tuple[str, str]] = result_lines(snapshot)
        for i, (label, value) in enumerate(rows):
            line = f"{label}: {value}"
            attr = curses.color_pair(PAIR_SUCCESS) | curses.A_BOLD if label == "WPM" else 0
            self._centered(2 + i, line, attr)
        self._put(3 + len(rows), 2, "Source: ", curses.color_pair(PAIR_ACCENT) | curses.A_BOLD)
        self._put(3 + len(rows), 10, snapshot.source, curses.A_ITALIC)
