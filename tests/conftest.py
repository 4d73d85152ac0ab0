"""Shared fixtures: a hand-built quote bank and a controllable clock."""

from __future__ import annotations

import random

import pytest

from quotetype.core.quotes import LengthGroup, Quote, QuoteBank, QuoteSource


class FakeClock:
    """Monotonic clock stand-in; time only moves when a test advances it."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_bank(*texts: str, groups=None) -> QuoteBank:
    groups = groups or (
        LengthGroup("short", 1, 10),
        LengthGroup("medium", 11, 30),
        LengthGroup("long", 31, 1000),
    )
    quotes = tuple(Quote(id=i, text=t, source=f"src{i}") for i, t in enumerate(texts))
    return QuoteBank(language="english", groups=tuple(groups), quotes=quotes)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def bank() -> QuoteBank:
    return make_bank(
        "abc",
        "hello",
        "the quick brown fox",
        "pack my box with five dozen liquor jugs",
    )


@pytest.fixture()
def source(bank: QuoteBank) -> QuoteSource:
    return QuoteSource(bank, rng=random.Random(7))
