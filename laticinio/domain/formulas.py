"""
Pricing formulas for inventory items.

Given the prices typed in an item form, these functions derive the
tax-inclusive (TTC) price and, for products, the profit margin. The
derived values are never authoritative: whenever both inputs of a
formula are present the result is recomputed and overwrites whatever
was there before.

All functions are pure: they depend solely on their inputs and do
not modify any external state. Amounts are ``Decimal`` and results are
rounded half-up to ``DEFAULTS.price_places`` decimal places.
"""

from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Union

from laticinio.config import DEFAULTS
from laticinio.domain.catalog import PRODUCT, RAW_MATERIAL
from laticinio.domain.models import PricingFacts

Number = Union[Decimal, int, str]

_HUNDRED = Decimal("100")


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def round2(value: Number, places: Optional[int] = None) -> Decimal:
    """Round ``value`` half-up to ``places`` decimals (2 by default).

    ``Decimal("2.675")`` becomes ``Decimal("2.68")``, unlike binary
    floating point rounding.
    """
    if places is None:
        places = DEFAULTS.price_places
    value = Decimal(value)
    with localcontext() as ctx:
        # quantize fails when the result has more digits than the precision
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(_quantum(places), rounding=ROUND_HALF_UP)


def tax_inclusive_price(price: Number, tax_rate: Number) -> Decimal:
    """Compute the tax-inclusive price.

        ttc = price * (1 + tax_rate / 100)

    Parameters
    ----------
    price: Decimal
        Tax-exclusive price (HT for products, purchase price for raw
        materials).
    tax_rate: Decimal
        Tax rate expressed in percent, between 0 and 100.
    """
    price = Decimal(price)
    tax_rate = Decimal(tax_rate)
    if not (0 <= tax_rate <= DEFAULTS.max_tax_rate):
        raise ValueError("tax_rate must be between 0 and 100")
    return round2(price * (1 + tax_rate / _HUNDRED))


def profit_margin(cost_price: Number, retail_price: Number) -> Decimal:
    """Compute the profit margin in percent over the cost price.

        margin = (retail - cost) / cost * 100

    A zero cost has no defined margin; callers must reject it before
    getting here (the item validator does).
    """
    cost_price = Decimal(cost_price)
    retail_price = Decimal(retail_price)
    if cost_price <= 0:
        raise ValueError("cost_price must be greater than zero")
    return round2((retail_price - cost_price) / cost_price * _HUNDRED)


def compute_derived_pricing(facts: PricingFacts, item_kind: str) -> PricingFacts:
    """Return a copy of ``facts`` with the derived fields filled in.

    - product: ``ttc_price`` from ``ht_price`` and ``tax_rate``;
      ``profit_margin`` from ``cost_price`` and ``retail_price``.
    - raw_material: ``ttc_price`` from ``purchase_price`` and
      ``tax_rate``; no margin.

    A formula only runs when both of its inputs are present, so
    incomplete input never produces a spurious value.
    """
    if item_kind == PRODUCT:
        updates = {}
        if facts.ht_price is not None and facts.tax_rate is not None:
            updates["ttc_price"] = tax_inclusive_price(facts.ht_price, facts.tax_rate)
        if facts.cost_price is not None and facts.retail_price is not None:
            updates["profit_margin"] = profit_margin(facts.cost_price, facts.retail_price)
        return replace(facts, **updates)
    if item_kind == RAW_MATERIAL:
        if facts.purchase_price is not None and facts.tax_rate is not None:
            return replace(facts, ttc_price=tax_inclusive_price(facts.purchase_price, facts.tax_rate))
        return replace(facts)
    raise ValueError(f"unknown item kind: {item_kind!r}")
