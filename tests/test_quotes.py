"""Tests for quotetype.core.quotes – YAML quote loading and selection."""

from __future__ import annotations

import random
from pathlib import Path

import pytest
import yaml

from quotetype.core.errors import DataUnavailable, QuoteTypeError
from quotetype.core.quotes import (
    LengthGroup,
    Quote,
    QuoteBank,
    QuoteSource,
    default_quotes_path,
    load_quote_bank,
    normalize_text,
)

from conftest import make_bank

GROUPS = [
    {"name": "short", "min": 1, "max": 10},
    {"name": "long", "min": 11, "max": 100},
]


def _write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.dump(data, allow_unicode=True, default_flow_style=False), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

class TestDataclasses:
    def test_quote_frozen(self):
        q = Quote(id=1, text="abc", source="me")
        with pytest.raises(AttributeError):
            q.text = "other"  # type: ignore[misc]

    def test_group_fits_inclusive(self):
        g = LengthGroup("short", 3, 5)
        assert not g.fits("ab")
        assert g.fits("abc")
        assert g.fits("abcde")
        assert not g.fits("abcdef")

    def test_group_label(self):
        assert LengthGroup("short", 1, 100).label == "short (1-100)"

    def test_bank_group_index(self):
        bank = make_bank("abc")
        assert bank.group_index("medium") == 1
        with pytest.raises(KeyError):
            bank.group_index("nope")


class TestNormalizeText:
    def test_collapses_whitespace(self):
        assert normalize_text("  a\n b\t\tc  ") == "a b c"

    def test_blank(self):
        assert normalize_text(" \n ") == ""


# ---------------------------------------------------------------------------
# load_quote_bank – happy paths
# ---------------------------------------------------------------------------

class TestLoadHappy:
    def test_minimal_file(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {
            "language": "english",
            "groups": GROUPS,
            "quotes": [{"id": 4, "text": "hello", "source": "Someone"}],
        })
        bank = load_quote_bank(path)
        assert bank.language == "english"
        assert bank.groups == (LengthGroup("short", 1, 10), LengthGroup("long", 11, 100))
        assert bank.quotes == (Quote(id=4, text="hello", source="Someone"),)

    def test_plain_string_quotes(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS, "quotes": ["one", "two"]})
        bank = load_quote_bank(path)
        assert [q.text for q in bank.quotes] == ["one", "two"]
        assert [q.id for q in bank.quotes] == [0, 1]
        assert bank.quotes[0].source == "unknown"

    def test_text_is_normalised(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS, "quotes": [{"text": "a  b\nc"}]})
        assert load_quote_bank(path).quotes[0].text == "a b c"

    def test_implicit_ids_follow_explicit_ones(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {
            "groups": GROUPS,
            "quotes": [{"id": 1, "text": "first"}, "second", {"id": 7, "text": "third"}, "fourth"],
        })
        ids = [q.id for q in load_quote_bank(path).quotes]
        assert ids == [1, 8, 7, 9]
        assert len(set(ids)) == len(ids)

    def test_language_defaults(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS, "quotes": ["x"]})
        assert load_quote_bank(path).language == "english"

    def test_bundled_dataset(self):
        bank = load_quote_bank()
        assert default_quotes_path().exists()
        assert len(bank.groups) >= 3
        source = QuoteSource(bank)
        for i in range(len(bank.groups)):
            assert source.candidates(i), f"group {bank.groups[i].name} has no quotes"


# ---------------------------------------------------------------------------
# load_quote_bank – error paths
# ---------------------------------------------------------------------------

class TestLoadErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_quote_bank(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path: Path):
        (tmp_path / "q.yaml").write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="expected YAML"):
            load_quote_bank(tmp_path / "q.yaml")

    def test_not_a_mapping(self, tmp_path: Path):
        (tmp_path / "q.yaml").write_text("- item\n", encoding="utf-8")
        with pytest.raises(ValueError, match="expected YAML"):
            load_quote_bank(tmp_path / "q.yaml")

    def test_missing_groups(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"quotes": ["a"]})
        with pytest.raises(ValueError, match="'groups'"):
            load_quote_bank(path)

    def test_group_without_name(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": [{"min": 1, "max": 2}], "quotes": ["a"]})
        with pytest.raises(ValueError, match="'name'"):
            load_quote_bank(path)

    def test_group_without_bounds(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": [{"name": "s"}], "quotes": ["a"]})
        with pytest.raises(ValueError, match="integer 'min' and 'max'"):
            load_quote_bank(path)

    def test_group_inverted_bounds(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": [{"name": "s", "min": 9, "max": 2}], "quotes": ["a"]})
        with pytest.raises(ValueError, match="invalid bounds"):
            load_quote_bank(path)

    def test_missing_quotes(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS})
        with pytest.raises(ValueError, match="missing 'quotes'"):
            load_quote_bank(path)

    def test_empty_quotes(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS, "quotes": []})
        with pytest.raises(ValueError, match="no entries"):
            load_quote_bank(path)

    def test_blank_quote_text(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS, "quotes": [{"text": "  "}]})
        with pytest.raises(ValueError, match="has no text"):
            load_quote_bank(path)

    @pytest.mark.parametrize("bad_id", [None, [1], "one"])
    def test_invalid_id(self, tmp_path: Path, bad_id):
        path = _write_yaml(tmp_path / "q.yaml", {"groups": GROUPS, "quotes": [{"id": bad_id, "text": "hi there"}]})
        with pytest.raises(ValueError, match="quote #0 has invalid 'id'"):
            load_quote_bank(path)

    def test_empty_id_field(self, tmp_path: Path):
        (tmp_path / "q.yaml").write_text(
            "groups: [{name: s, min: 1, max: 50}]\nquotes: [{id: , text: hi there}]\n", encoding="utf-8"
        )
        with pytest.raises(ValueError, match="invalid 'id'"):
            load_quote_bank(tmp_path / "q.yaml")

    def test_duplicate_ids(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {
            "groups": GROUPS,
            "quotes": [{"id": 3, "text": "one"}, {"id": 3, "text": "two"}],
        })
        with pytest.raises(ValueError, match="duplicate quote id 3"):
            load_quote_bank(path)

    def test_malformed_yaml(self, tmp_path: Path):
        (tmp_path / "q.yaml").write_text("groups: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            load_quote_bank(tmp_path / "q.yaml")


# ---------------------------------------------------------------------------
# QuoteSource
# ---------------------------------------------------------------------------

class TestQuoteSource:
    def test_pick_respects_group(self, source: QuoteSource):
        for _ in range(20):
            q = source.pick(0)
            assert 1 <= len(q.text) <= 10
            assert q.category == "short"

    def test_pick_never_empty(self, source: QuoteSource):
        for i in range(3):
            assert source.pick(i).text

    def test_no_immediate_repeat(self, bank: QuoteBank):
        src = QuoteSource(bank, rng=random.Random(0))
        previous = src.pick(0)
        for _ in range(20):
            current = src.pick(0)
            assert current.id != previous.id
            previous = current

    def test_no_immediate_repeat_with_mixed_ids(self, tmp_path: Path):
        path = _write_yaml(tmp_path / "q.yaml", {
            "groups": [{"name": "short", "min": 1, "max": 50}],
            "quotes": [{"id": 1, "text": "first quote"}, "second quote"],
        })
        src = QuoteSource(load_quote_bank(path), rng=random.Random(0))
        texts = [src.pick(0).text for _ in range(40)]
        assert all(a != b for a, b in zip(texts, texts[1:]))

    def test_no_immediate_repeat_with_shared_ids(self):
        bank = QuoteBank(
            language="english",
            groups=(LengthGroup("short", 1, 50),),
            quotes=(Quote(id=1, text="first quote", source="a"), Quote(id=1, text="second quote", source="b")),
        )
        src = QuoteSource(bank, rng=random.Random(0))
        texts = [src.pick(0).text for _ in range(40)]
        assert all(a != b for a, b in zip(texts, texts[1:]))

    def test_single_quote_group_repeats(self, source: QuoteSource):
        assert source.pick(1).text == source.pick(1).text == "the quick brown fox"

    def test_empty_group_raises(self):
        bank = make_bank("abc", groups=(LengthGroup("short", 1, 5), LengthGroup("long", 50, 60)))
        with pytest.raises(DataUnavailable) as info:
            QuoteSource(bank).pick(1)
        assert info.value.category == "long"
        assert isinstance(info.value, QuoteTypeError)

    def test_out_of_range_raises(self, source: QuoteSource):
        with pytest.raises(DataUnavailable):
            source.pick(3)
        with pytest.raises(DataUnavailable):
            source.pick(-1)

    def test_seeded_rng_is_deterministic(self, bank: QuoteBank):
        a = QuoteSource(bank, rng=random.Random(3))
        b = QuoteSource(bank, rng=random.Random(3))
        assert [a.pick(0).id for _ in range(5)] == [b.pick(0).id for _ in range(5)]
