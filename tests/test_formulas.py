from decimal import Decimal

import pytest

from laticinio.domain.formulas import (
    compute_derived_pricing,
    profit_margin,
    round2,
    tax_inclusive_price,
)
from laticinio.domain.models import PricingFacts


def test_round2_half_up():
    # float binário arredondaria 2.675 para 2.67
    assert round2(Decimal("2.675")) == Decimal("2.68")
    assert round2(Decimal("2.665")) == Decimal("2.67")
    assert round2(Decimal("-1.005")) == Decimal("-1.01")
    assert round2(Decimal("3")) == Decimal("3.00")


@pytest.mark.parametrize(
    "ht,rate,expected",
    [
        ("10", "20", "12.00"),
        ("10", "0", "10.00"),
        ("10", "100", "20.00"),
        ("3.33", "5.5", "3.51"),
        ("1.25", "19.6", "1.50"),
        ("0", "20", "0.00"),
    ],
)
def test_tax_inclusive_price(ht, rate, expected):
    assert tax_inclusive_price(Decimal(ht), Decimal(rate)) == Decimal(expected)


def test_tax_inclusive_price_rejects_rate_out_of_range():
    with pytest.raises(ValueError):
        tax_inclusive_price(Decimal("10"), Decimal("101"))
    with pytest.raises(ValueError):
        tax_inclusive_price(Decimal("10"), Decimal("-1"))


@pytest.mark.parametrize(
    "cost,retail,expected",
    [
        ("2", "3", "50.00"),
        ("3", "2", "-33.33"),
        ("1.5", "1.5", "0.00"),
        ("3", "4", "33.33"),
        ("3", "0", "-100.00"),
    ],
)
def test_profit_margin(cost, retail, expected):
    assert profit_margin(Decimal(cost), Decimal(retail)) == Decimal(expected)


def test_profit_margin_zero_cost_is_an_error():
    with pytest.raises(ValueError):
        profit_margin(Decimal("0"), Decimal("3"))


def test_compute_derived_pricing_product():
    facts = PricingFacts(
        ht_price=Decimal("10"),
        tax_rate=Decimal("5.5"),
        cost_price=Decimal("2"),
        retail_price=Decimal("3"),
    )
    out = compute_derived_pricing(facts, "product")
    assert out.ttc_price == Decimal("10.55")
    assert out.profit_margin == Decimal("50.00")
    # cópia, não mutação
    assert facts.ttc_price is None
    assert facts.profit_margin is None


def test_compute_derived_pricing_overwrites_stale_values():
    facts = PricingFacts(
        ht_price=Decimal("10"),
        tax_rate=Decimal("20"),
        ttc_price=Decimal("999"),
        cost_price=Decimal("2"),
        retail_price=Decimal("3"),
        profit_margin=Decimal("1"),
    )
    out = compute_derived_pricing(facts, "product")
    assert out.ttc_price == Decimal("12.00")
    assert out.profit_margin == Decimal("50.00")


def test_compute_derived_pricing_incomplete_input_keeps_fields():
    facts = PricingFacts(ht_price=Decimal("10"), retail_price=Decimal("3"))
    out = compute_derived_pricing(facts, "product")
    assert out == facts
    assert out.ttc_price is None
    assert out.profit_margin is None


def test_compute_derived_pricing_raw_material_uses_purchase_price():
    facts = PricingFacts(
        purchase_price=Decimal("4"),
        ht_price=Decimal("100"),
        tax_rate=Decimal("10"),
        cost_price=Decimal("1"),
        retail_price=Decimal("2"),
    )
    out = compute_derived_pricing(facts, "raw_material")
    assert out.ttc_price == Decimal("4.40")
    # margem não se aplica a matéria-prima
    assert out.profit_margin is None


def test_compute_derived_pricing_is_idempotent():
    facts = PricingFacts(
        ht_price=Decimal("7.77"),
        tax_rate=Decimal("19.6"),
        cost_price=Decimal("3.1"),
        retail_price=Decimal("7.77"),
    )
    once = compute_derived_pricing(facts, "product")
    twice = compute_derived_pricing(once, "product")
    assert once == twice
    assert compute_derived_pricing(facts, "product") == once


def test_compute_derived_pricing_unknown_kind():
    with pytest.raises(ValueError):
        compute_derived_pricing(PricingFacts(), "service")


def test_large_and_tiny_amounts_do_not_overflow_precision():
    assert round2(Decimal("1e30")) == Decimal("1000000000000000000000000000000.00")
    assert tax_inclusive_price(Decimal("1e30"), Decimal("5")) == Decimal("1050000000000000000000000000000.00")
    margin = profit_margin(Decimal("0.0000000000000000000001"), Decimal("1000000"))
    assert margin > Decimal("1e29")
