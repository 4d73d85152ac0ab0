"""Translate curses key events into session actions."""

from __future__ import annotations

import curses
import enum
import logging
from typing import Optional, Tuple, Union

from quotetype.core.session import TypingSession

logger = logging.getLogger(__name__)

KEY_TAB = "\t"
KEY_ESCAPE = "\x1b"
BACKSPACE_CHARS = ("\x7f", "\b")


class Action(enum.Enum):
    TYPE = "type"
    BACKSPACE = "backspace"
    PREVIOUS_LENGTH = "previous_length"
    NEXT_LENGTH = "next_length"
    NEW_QUOTE = "new_quote"
    QUIT = "quit"
    IGNORE = "ignore"


Key = Union[str, int]


def translate(key: Key) -> Tuple[Action, Optional[str]]:
    """Map a ``get_wch()`` result to an action and, for TYPE, the character."""
    if isinstance(key, int):
        if key == curses.KEY_BACKSPACE:
            return Action.BACKSPACE, None
        if key == curses.KEY_LEFT:
            return Action.PREVIOUS_LENGTH, None
        if key == curses.KEY_RIGHT:
            return Action.NEXT_LENGTH, None
        return Action.IGNORE, None

    if key == KEY_TAB:
        return Action.NEW_QUOTE, None
    if key == KEY_ESCAPE:
        return Action.QUIT, None
    if key in BACKSPACE_CHARS:
        return Action.BACKSPACE, None
    if len(key) == 1 and key.isprintable():
        return Action.TYPE, key
    return Action.IGNORE, None


def dispatch(session: TypingSession, key: Key) -> bool:
    """Apply ``key`` to the session. Returns False when the user asked to quit."""
    action, char = translate(key)
    if action is Action.QUIT:
        logger.info("Quit requested")
        return False
    if action is Action.TYPE:
        session.type_character(char)
    elif action is Action.BACKSPACE:
        session.backspace()
    elif action is Action.PREVIOUS_LENGTH:
        session.cycle_length(-1)
    elif action is Action.NEXT_LENGTH:
        session.cycle_length(1)
    elif action is Action.NEW_QUOTE:
        session.request_new_quote()
    return True
