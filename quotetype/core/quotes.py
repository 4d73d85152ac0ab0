from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from quotetype.core.errors import DataUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    id: int
    text: str
    source: str
    category: str = ""


@dataclass(frozen=True)
class LengthGroup:
    name: str
    min_length: int
    max_length: int

    def fits(self, text: str) -> bool:
        return self.min_length <= len(text) <= self.max_length

    @property
    def label(self) -> str:
        return f"{self.name} ({self.min_length}-{self.max_length})"


@dataclass(frozen=True)
class QuoteBank:
    language: str
    groups: Tuple[LengthGroup, ...]
    quotes: Tuple[Quote, ...]

    def group_index(self, name: str) -> int:
        for i, group in enumerate(self.groups):
            if group.name == name:
                return i
        raise KeyError(name)


def default_quotes_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "quotes" / "english.yaml"


def normalize_text(text: str) -> str:
    """Collapse whitespace runs (newlines included) to single spaces."""
    return " ".join(str(text).split())


def load_quote_bank(path: Optional[Path] = None) -> QuoteBank:
    path = Path(path) if path is not None else default_quotes_path()
    if not path.exists():
        raise FileNotFoundError(f"Quote file not found: {path}")

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected YAML with 'groups' and 'quotes'")

    language = str(raw.get("language") or "english").strip()
    groups = _parse_groups(path, raw.get("groups"))

    quotes_raw = raw.get("quotes")
    if quotes_raw is None:
        raise ValueError(f"{path.name}: missing 'quotes'")
    if not isinstance(quotes_raw, list):
        raise ValueError(f"{path.name}: 'quotes' must be a list")

    entries: List[Tuple[Optional[int], str, str]] = []
    for n, item in enumerate(quotes_raw):
        if isinstance(item, str):
            item = {"text": item}
        if not isinstance(item, dict):
            raise ValueError(f"{path.name}: quote #{n} must be a mapping or a string")
        text = normalize_text(item.get("text") or "")
        if not text:
            raise ValueError(f"{path.name}: quote #{n} has no text")
        source = str(item.get("source") or "unknown").strip()
        entries.append((_parse_id(path, n, item), text, source))

    if not entries:
        raise ValueError(f"{path.name}: 'quotes' has no entries")

    explicit = [quote_id for quote_id, _, _ in entries if quote_id is not None]
    seen = set()
    for quote_id in explicit:
        if quote_id in seen:
            raise ValueError(f"{path.name}: duplicate quote id {quote_id}")
        seen.add(quote_id)

    # entries without an id are numbered after the highest explicit one
    next_id = max(explicit, default=-1) + 1
    quotes: List[Quote] = []
    for quote_id, text, source in entries:
        if quote_id is None:
            quote_id = next_id
            next_id += 1
        quotes.append(Quote(id=quote_id, text=text, source=source))

    bank = QuoteBank(language=language, groups=groups, quotes=tuple(quotes))
    logger.info("Loaded %d quotes in %d length groups from %s", len(quotes), len(groups), path)
    return bank


def _parse_id(path: Path, n: int, item: dict) -> Optional[int]:
    if "id" not in item:
        return None
    try:
        return int(item["id"])
    except (TypeError, ValueError):
        raise ValueError(f"{path.name}: quote #{n} has invalid 'id'") from None


def _parse_groups(path: Path, groups_raw) -> Tuple[LengthGroup, ...]:
    if not groups_raw or not isinstance(groups_raw, list):
        raise ValueError(f"{path.name}: missing or invalid 'groups'")

    groups: List[LengthGroup] = []
    for n, item in enumerate(groups_raw):
        if not isinstance(item, dict):
            raise ValueError(f"{path.name}: group #{n} must be a mapping")
        name = item.get("name")
        if not name or not isinstance(name, str):
            raise ValueError(f"{path.name}: group #{n} missing or invalid 'name'")
        try:
            low = int(item["min"])
            high = int(item["max"])
        except (KeyError, TypeError, ValueError):
            raise ValueError(f"{path.name}: group '{name}' needs integer 'min' and 'max'") from None
        if low < 0 or high < low:
            raise ValueError(f"{path.name}: group '{name}' has invalid bounds {low}-{high}")
        groups.append(LengthGroup(name=name.strip(), min_length=low, max_length=high))
    return tuple(groups)


class QuoteSource:
    """Random quote selection over a loaded QuoteBank."""

    def __init__(self, bank: QuoteBank, rng: Optional[random.Random] = None) -> None:
        self._bank = bank
        self._rng = rng or random.Random()
        self._last: Optional[Quote] = None

    @property
    def groups(self) -> Tuple[LengthGroup, ...]:
        return self._bank.groups

    def candidates(self, category_index: int) -> List[Quote]:
        group = self._bank.groups[category_index]
        return [q for q in self._bank.quotes if group.fits(q.text)]

    def pick(self, category_index: int) -> Quote:
        """Return a random quote from the given length group.

        Avoids handing out the previous quote again when the group has
        any alternative. Raises DataUnavailable when the group is empty.
        """
        if not 0 <= category_index < len(self._bank.groups):
            raise DataUnavailable(str(category_index), "unknown length group")
        group = self._bank.groups[category_index]
        pool = self.candidates(category_index)
        if not pool:
            raise DataUnavailable(group.name)

        if len(pool) > 1:
            pool = [q for q in pool if q is not self._last] or pool
        picked = self._rng.choice(pool)
        self._last = picked
        logger.debug("Picked quote %d from group %s", picked.id, group.name)
        return Quote(id=picked.id, text=picked.text, source=picked.source, category=group.name)
