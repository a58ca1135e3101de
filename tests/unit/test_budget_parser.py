"""Unit tests for the budget range parser.

Covers ranges, open-ended and capped inputs, currency noise, numeric
inputs, and the never-raise fallback to the default baseline.
"""

from decimal import Decimal

import pytest

from app.layers.layer2_budget import parse_budget
from app.models import MAX_AMOUNT, BudgetConfidence


class TestRanges:
    def test_shorthand_range_uses_floored_midpoint(self):
        result = parse_budget("5k-10k")
        assert result.baseline_amount == Decimal("7500")
        assert result.min_bound == Decimal("5000")
        assert result.max_bound == Decimal("10000")
        assert result.confidence == BudgetConfidence.EXACT

    def test_currency_symbols_and_commas_are_ignored(self):
        result = parse_budget("$2,500 - $5,000")
        assert result.baseline_amount == Decimal("3750")
        assert result.confidence == BudgetConfidence.EXACT

    def test_odd_midpoint_is_floored(self):
        assert parse_budget("1001-1002").baseline_amount == Decimal("1001")

    def test_to_separator(self):
        assert parse_budget("10000 to 20000").baseline_amount == Decimal("15000")

    def test_reversed_bounds_are_sorted(self):
        result = parse_budget("3k-1k")
        assert result.min_bound == Decimal("1000")
        assert result.max_bound == Decimal("3000")
        assert result.baseline_amount == Decimal("2000")

    def test_decimal_thousands(self):
        assert parse_budget("2.5k-3k").baseline_amount == Decimal("2750")


class TestOpenEndedAndCapped:
    def test_plus_suffix_applies_multiplier(self):
        result = parse_budget("10k+")
        assert result.baseline_amount == Decimal("15000")
        assert result.min_bound == Decimal("10000")
        assert result.max_bound is None
        assert result.confidence == BudgetConfidence.APPROXIMATE

    def test_plus_word_suffix(self):
        assert parse_budget("35k-plus").baseline_amount == Decimal("52500")

    def test_multiplier_override(self):
        result = parse_budget("10k+", open_ended_multiplier=Decimal("2"))
        assert result.baseline_amount == Decimal("20000")

    @pytest.mark.parametrize("source", ["under 1k", "under-1k", "up to 1000"])
    def test_under_uses_ceiling(self, source):
        result = parse_budget(source)
        assert result.baseline_amount == Decimal("1000")
        assert result.min_bound == Decimal("0")
        assert result.confidence == BudgetConfidence.APPROXIMATE
        assert result.is_low_confidence


class TestSingleAmounts:
    def test_plain_amount(self):
        result = parse_budget("5000")
        assert result.baseline_amount == Decimal("5000")
        assert result.confidence == BudgetConfidence.EXACT
        assert not result.is_low_confidence

    def test_numeric_input(self):
        result = parse_budget(7500)
        assert result.baseline_amount == Decimal("7500")
        assert result.confidence == BudgetConfidence.EXACT

    def test_float_input_keeps_cents(self):
        assert parse_budget(1234.5).baseline_amount == Decimal("1234.5")


class TestFallback:
    @pytest.mark.parametrize(
        "source",
        ["discuss", "", "   ", None, "lots of money", "5k-10k-20k", float("nan"), -5, True],
    )
    def test_unparseable_input_returns_default(self, source):
        result = parse_budget(source)
        assert result.baseline_amount == Decimal("5000")
        assert result.confidence == BudgetConfidence.DEFAULT
        assert result.is_low_confidence

    def test_default_baseline_override(self):
        result = parse_budget("let's talk", default_baseline=Decimal("8000"))
        assert result.baseline_amount == Decimal("8000")

    def test_source_is_preserved(self):
        assert parse_budget("Let's discuss").source == "Let's discuss"

    @pytest.mark.parametrize("source", ["9" * 29, "1" + "0" * 30 + "k", 1e30])
    def test_amount_above_cap_returns_default(self, source):
        result = parse_budget(source)
        assert result.baseline_amount == Decimal("5000")
        assert result.confidence == BudgetConfidence.DEFAULT

    def test_amount_at_cap_is_kept(self):
        result = parse_budget(str(MAX_AMOUNT))
        assert result.baseline_amount == MAX_AMOUNT
        assert result.confidence == BudgetConfidence.EXACT
