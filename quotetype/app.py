"""Application entry point and setup for the quotetype typing test."""

from __future__ import annotations

import argparse
import curses
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from quotetype.core.quotes import QuoteBank, QuoteSource, default_quotes_path, load_quote_bank
from quotetype.core.session import TypingSession
from quotetype.ui.keys import dispatch
from quotetype.ui.renderer import CursesRenderer
from quotetype.ui.theme import DEFAULT_LINE_WIDTH, DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

ESCAPE_DELAY_MS = 25
DEFAULT_LOG_FILE = Path.home() / ".quotetype" / "quotetype.log"


@dataclass(frozen=True)
class AppConfig:
    quotes_path: Path = field(default_factory=default_quotes_path)
    log_file: Path = DEFAULT_LOG_FILE
    length: Optional[str] = None
    theme: Theme = DEFAULT_THEME
    debug: bool = False


def configure_logging(log_file: Path, debug: bool = False) -> None:
    """Configure application-wide logging with a standard format.

    curses owns the terminal, so records go to ``log_file``.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=str(log_file),
        encoding="utf-8",
    )


def parse_args(argv: Optional[List[str]] = None) -> AppConfig:
    p = argparse.ArgumentParser(prog="quotetype", description="Terminal typing speed test")
    p.add_argument("--quotes", type=Path, default=None, help="YAML quote file (default: bundled English quotes)")
    p.add_argument("--length", type=str, default=None, help="Initial length group name, e.g. short")
    p.add_argument("--width", type=int, default=DEFAULT_LINE_WIDTH, help="Maximum characters per quote line")
    p.add_argument("--log-file", type=Path, default=DEFAULT_LOG_FILE, help="Where to write the log")
    p.add_argument("--debug", action="store_true", help="Log at DEBUG level")
    args = p.parse_args(argv)
    return AppConfig(
        quotes_path=args.quotes or default_quotes_path(),
        log_file=args.log_file,
        length=args.length,
        theme=DEFAULT_THEME.with_width(args.width),
        debug=args.debug,
    )


def initial_category(bank: QuoteBank, length: Optional[str]) -> int:
    if not length:
        return 0
    try:
        return bank.group_index(length)
    except KeyError:
        logger.warning("Unknown length group %r, using %s", length, bank.groups[0].name)
        return 0


def run_loop(window, session: TypingSession, theme: Theme) -> None:
    """Read a key, apply it, redraw, until the user quits."""
    curses.set_escdelay(ESCAPE_DELAY_MS)
    curses.curs_set(0)
    theme.install()
    renderer = CursesRenderer(window, theme)
    window.keypad(True)

    while True:
        renderer.draw(session.snapshot())
        try:
            key = window.get_wch()
        except curses.error:
            continue
        if not dispatch(session, key):
            break


def run(config: AppConfig) -> int:
    try:
        bank = load_quote_bank(config.quotes_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError, OSError) as e:
        logger.error("Could not load quotes: %s", e)
        print(f"quotetype: could not load quotes: {e}", file=sys.stderr)
        return 1

    source = QuoteSource(bank)
    session = TypingSession(source, category=initial_category(bank, config.length))
    session.request_new_quote()

    try:
        curses.wrapper(run_loop, session, config.theme)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    config = parse_args(argv)
    try:
        configure_logging(config.log_file, config.debug)
    except OSError as e:
        print(f"quotetype: could not open log file {config.log_file}: {e}", file=sys.stderr)
        return 1
    return run(config)
