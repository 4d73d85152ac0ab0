from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from quotetype.core.errors import DataUnavailable
from quotetype.core.quotes import Quote, QuoteSource

logger = logging.getLogger(__name__)

CHARS_PER_WORD = 5
MIN_ELAPSED_SECONDS = 1e-3


class SessionState(enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class CharStatus(enum.Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNTYPED = "untyped"


@dataclass(frozen=True)
class CharCell:
    char: str
    status: CharStatus


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session, handed to the renderer each frame."""

    cells: Tuple[CharCell, ...]
    cursor: int
    state: SessionState
    correct_count: int
    error_count: int
    accuracy: float
    elapsed: Optional[float]
    wpm: Optional[float]
    net_wpm: Optional[float]
    live_wpm: Optional[float]
    category_index: int
    category: str
    categories: Tuple[str, ...]
    source: str
    error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    @property
    def text(self) -> str:
        return "".join(cell.char for cell in self.cells)


def _minutes(elapsed_seconds: float) -> float:
    return max(elapsed_seconds, MIN_ELAPSED_SECONDS) / 60.0


def compute_wpm(char_count: int, elapsed_seconds: float) -> float:
    """Raw WPM: (characters / 5) / minutes, with elapsed floored above zero."""
    return (char_count / CHARS_PER_WORD) / _minutes(elapsed_seconds)


def compute_net_wpm(char_count: int, errors: int, elapsed_seconds: float) -> float:
    """Net WPM (error-adjusted): (chars - 5 * errors) / 5 / minutes, floored at 0."""
    return max(0.0, (char_count - CHARS_PER_WORD * errors) / CHARS_PER_WORD / _minutes(elapsed_seconds))


def compute_accuracy(correct: int, typed: int) -> float:
    return (correct / typed) * 100.0 if typed else 0.0


class TypingSession:
    """One attempt at typing a quote, plus the length group used to pick the next one.

    States run NOT_STARTED -> IN_PROGRESS (first keystroke) -> COMPLETE (typed
    covers the whole quote). Completion is terminal: keystrokes are ignored
    until a new quote is begun. Timing uses the injected clock, which must be
    monotonic.
    """

    def __init__(
        self,
        source: QuoteSource,
        category: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._clock = clock
        group_count = len(source.groups)
        self._category = category % group_count if group_count else 0
        self._quote: Optional[Quote] = None
        self._typed: list[str] = []
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._error: Optional[str] = None

    @property
    def quote(self) -> Optional[Quote]:
        return self._quote

    @property
    def target(self) -> str:
        return self._quote.text if self._quote else ""

    @property
    def typed(self) -> str:
        return "".join(self._typed)

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def end_time(self) -> Optional[float]:
        return self._end_time

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def selected_length_category(self) -> int:
        return self._category

    @property
    def state(self) -> SessionState:
        if self._end_time is not None:
            return SessionState.COMPLETE
        if self._start_time is not None:
            return SessionState.IN_PROGRESS
        return SessionState.NOT_STARTED

    def is_complete(self) -> bool:
        return self._end_time is not None

    @property
    def error_count(self) -> int:
        target = self.target
        return sum(1 for i, c in enumerate(self._typed) if c != target[i])

    @property
    def correct_count(self) -> int:
        return len(self._typed) - self.error_count

    def begin(self, quote: Quote) -> None:
        """Start a fresh attempt at ``quote``."""
        self._quote = quote
        self._typed = []
        self._start_time = None
        self._end_time = None
        self._error = None
        logger.debug("Began quote %d (%d chars)", quote.id, len(quote.text))

    def request_new_quote(self) -> None:
        try:
            quote = self._source.pick(self._category)
        except DataUnavailable as e:
            logger.warning("Could not pick a quote: %s", e)
            self._quote = None
            self._typed = []
            self._start_time = None
            self._end_time = None
            self._error = f"No quotes available for length '{e.category}'"
            return
        self.begin(quote)

    def cycle_length(self, direction: int) -> None:
        """Move to the next (+1) or previous (-1) length group, wrapping, and pick a quote."""
        group_count = len(self._source.groups)
        if group_count:
            self._category = (self._category + direction) % group_count
        self.request_new_quote()

    def type_character(self, char: str) -> None:
        if len(char) != 1:
            raise ValueError(f"expected a single character, got {char!r}")
        if self._quote is None:
            return
        if self.is_complete():
            logger.debug("Ignoring %r: session already complete", char)
            return

        now = self._clock()
        if self._start_time is None:
            self._start_time = now
        self._typed.append(char)
        if len(self._typed) == len(self._quote.text):
            self._end_time = self._clock()
            logger.info(
                "Completed quote %d: %.1f wpm, %d errors",
                self._quote.id,
                self.wpm(),
                self.error_count,
            )

    def backspace(self) -> None:
        if not self._typed or self.is_complete():
            return
        self._typed.pop()

    def elapsed(self) -> Optional[float]:
        """Seconds since the first keystroke; final once complete."""
        if self._start_time is None:
            return None
        end = self._end_time if self._end_time is not None else self._clock()
        return end - self._start_time

    def wpm(self) -> Optional[float]:
        if not self.is_complete():
            return None
        return compute_wpm(len(self.target), self.elapsed())

    def net_wpm(self) -> Optional[float]:
        if not self.is_complete():
            return None
        return compute_net_wpm(len(self.target), self.error_count, self.elapsed())

    def accuracy(self) -> float:
        return compute_accuracy(self.correct_count, len(self._typed))

    def snapshot(self) -> SessionSnapshot:
        target = self.target
        cells = []
        for i, c in enumerate(target):
            if i >= len(self._typed):
                status = CharStatus.UNTYPED
            elif self._typed[i] == c:
                status = CharStatus.CORRECT
            else:
                status = CharStatus.INCORRECT
            cells.append(CharCell(c, status))

        state = self.state
        elapsed = self.elapsed()
        live_wpm = None
        if state is SessionState.IN_PROGRESS:
            live_wpm = compute_wpm(len(self._typed), elapsed)

        groups = self._source.groups
        errors = self.error_count
        return SessionSnapshot(
            cells=tuple(cells),
            cursor=len(self._typed),
            state=state,
            correct_count=len(self._typed) - errors,
            error_count=errors,
            accuracy=self.accuracy(),
            elapsed=elapsed,
            wpm=self.wpm(),
            net_wpm=self.net_wpm(),
            live_wpm=live_wpm,
            category_index=self._category,
            category=groups[self._category].name if groups else "",
            categories=tuple(g.label for g in groups),
            source=self._quote.source if self._quote else "",
            error=self._error,
        )


def speed_tier(wpm: float) -> str:
    """Name the speed bracket a WPM value falls in."""
    for limit, name in (
        (10, "sloth"),
        (25, "snail"),
        (50, "turtle"),
        (75, "rabbit"),
        (100, "cheetah"),
        (125, "train"),
    ):
        if wpm < limit:
            return name
    return "lightning"
