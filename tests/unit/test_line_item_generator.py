"""Unit tests for weighted line-item generation."""

import random
from decimal import Decimal

import pytest

from app.exceptions import InputValidationError
from app.layers.layer4_line_items import (
    DEFAULT_TEMPLATE,
    LINE_ITEM_TEMPLATES,
    generate_line_items,
    line_items_from_proposal,
    template_for,
)
from app.models import MAX_AMOUNT, quantize_money


def _amounts(items):
    return [item.amount for item in items]


class TestTemplates:
    def test_weights_sum_to_one(self):
        for template in [*LINE_ITEM_TEMPLATES.values(), DEFAULT_TEMPLATE]:
            assert sum(weight for _, weight in template) == Decimal("1")

    def test_site_types_share_website_template(self):
        assert template_for("business-site") == LINE_ITEM_TEMPLATES["website"]
        assert template_for("Portfolio") == LINE_ITEM_TEMPLATES["website"]

    def test_aliases(self):
        assert template_for("E-Commerce") == LINE_ITEM_TEMPLATES["ecommerce"]
        assert template_for("web app") == LINE_ITEM_TEMPLATES["web-app"]

    def test_unknown_type_uses_default_split(self):
        assert template_for("mobile game") == DEFAULT_TEMPLATE
        assert template_for(None) == DEFAULT_TEMPLATE


class TestGenerate:
    def test_website_split(self):
        items = generate_line_items("website", Decimal("10000"))
        assert [item.description for item in items] == [
            "Website Design & Development",
            "Content Management Setup",
            "SEO & Testing",
        ]
        assert _amounts(items) == [Decimal("7000.00"), Decimal("2000.00"), Decimal("1000.00")]

    def test_web_app_split(self):
        items = generate_line_items("web-app", 7500)
        assert _amounts(items) == [
            Decimal("4500.00"),
            Decimal("1500.00"),
            Decimal("750.00"),
            Decimal("750.00"),
        ]

    def test_last_item_absorbs_rounding(self):
        # 0.7/0.2/0.1 × 333.33 → 233.33 / 66.67 / 33.33
        items = generate_line_items("other", Decimal("333.33"))
        assert _amounts(items) == [Decimal("233.33"), Decimal("66.67"), Decimal("33.33")]
        assert sum(_amounts(items)) == Decimal("333.33")

    def test_quantity_is_one_and_rate_matches_amount(self):
        for item in generate_line_items("ecommerce", 12345.67):
            assert item.quantity == Decimal("1")
            assert item.rate == item.amount

    def test_zero_baseline(self):
        assert sum(_amounts(generate_line_items("website", 0))) == Decimal("0")

    def test_remainder_property_over_random_baselines(self):
        """임의의 기준 금액에 대해 합계가 항상 round(baseline, 2)와 같아야 한다."""
        rng = random.Random(20240101)
        project_types = [*LINE_ITEM_TEMPLATES, "business-site", "unknown"]
        for _ in range(500):
            baseline = Decimal(rng.randint(0, 10_000_000)) / Decimal(rng.choice([1, 10, 100, 1000]))
            project_type = rng.choice(project_types)
            items = generate_line_items(project_type, baseline)
            assert sum(_amounts(items)) == quantize_money(baseline)
            assert len(items) == len(template_for(project_type))

    @pytest.mark.parametrize("baseline", [-1, "-0.01", "abc", float("inf"), None])
    def test_invalid_baseline(self, baseline):
        with pytest.raises(InputValidationError):
            generate_line_items("website", baseline)

    def test_baseline_above_cap_is_rejected(self):
        with pytest.raises(InputValidationError, match="상한") as exc_info:
            generate_line_items("website", Decimal("1" + "0" * 30))
        assert exc_info.value.details["max"] == str(MAX_AMOUNT)

    def test_baseline_at_cap_splits_exactly(self):
        items = generate_line_items("web-app", MAX_AMOUNT)
        assert sum(_amounts(items)) == MAX_AMOUNT


def test_line_items_from_proposal(calculator):
    """제안서 가격 내역은 티어 한 줄 + 추가 기능 줄로 변환되고 유지보수 플랜은 빠진다."""
    proposal = calculator.start_proposal("business-site", client_ref="client-1")
    proposal = calculator.select_tier(proposal, "business-site-good")
    proposal = calculator.toggle_add_on(proposal, "booking")
    proposal = calculator.select_maintenance_plan(proposal, "premium")

    items = line_items_from_proposal(calculator.breakdown(proposal))

    assert [item.description for item in items] == ["Foundation Package", "Appointment Booking"]
    assert sum(_amounts(items)) == proposal.computed_total
