"""
UC: Validar cadastro de ITEM (matéria-prima ou produto) e níveis de estoque.

Fluxo:
1) Converte os campos crus (strings) em valores tipados; string vazia
   significa "não informado" e o campo some do payload.
2) Exige os campos obrigatórios conforme o tipo do item.
3) Projeta apenas os campos que fazem sentido para o tipo.
4) Recalcula os preços derivados (TTC e margem).
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Union

from laticinio.config import DEFAULTS
from laticinio.adapters.parsers import FieldReader
from laticinio.domain.catalog import ITEM_KINDS, PRODUCT, PRODUCT_TYPES, RAW_MATERIAL, UNITS
from laticinio.domain.errors import ErrorKind, ValidationResult
from laticinio.domain.formulas import compute_derived_pricing
from laticinio.domain.models import (
    InventoryItemDraft,
    PricingFacts,
    StockLevels,
    StockLevelsDraft,
    ValidatedItem,
    ValidatedProduct,
    ValidatedRawMaterial,
)
from laticinio.infra.logger import log_pricing, log_validation


ItemInput = Union[InventoryItemDraft, Mapping[str, Any]]


def _check_levels(r: FieldReader):
    lo = r.decimal("min_stock_level")
    hi = r.decimal("max_stock_level")
    if lo is not None and hi is not None and hi < lo:
        r.error(
            "max_stock_level",
            ErrorKind.OUT_OF_RANGE,
            "Maximum stock level must not be lower than the minimum",
        )
        hi = None
    return lo, hi


def _price(r: FieldReader, name: str, **kwargs):
    """Preço digitado: não-negativo e até ``DEFAULTS.max_price``."""
    return r.decimal(name, maximum=Decimal(DEFAULTS.max_price), **kwargs)


def _product_pricing(r: FieldReader, common: dict) -> PricingFacts:
    cost = _price(r, "cost_price")
    # menor unidade de preço; abaixo disso a margem não tem sentido
    min_cost = Decimal(1).scaleb(-DEFAULTS.price_places)
    if cost is not None and cost < min_cost:
        r.error("cost_price", ErrorKind.OUT_OF_RANGE, f"Cost price must be at least {min_cost}")
        cost = None
    return PricingFacts(
        retail_price=_price(r, "retail_price", required=True, message="Retail price is required for products"),
        wholesale_price=_price(r, "wholesale_price"),
        cost_price=cost,
        # margem pode ser negativa (venda abaixo do custo)
        profit_margin=r.decimal("profit_margin", minimum=None),
        **common,
    )


def _raw_material_pricing(r: FieldReader, common: dict) -> PricingFacts:
    return PricingFacts(
        purchase_price=_price(
            r, "purchase_price", required=True, message="Purchase price is required for raw materials"
        ),
        supplier_price=_price(r, "supplier_price"),
        **common,
    )


def validate_item_draft(draft: ItemInput) -> ValidationResult[ValidatedItem]:
    """Valida o formulário de item e devolve o registro tipado e podado.

    O draft original nunca é alterado.
    """
    d = draft if isinstance(draft, InventoryItemDraft) else InventoryItemDraft.from_form(draft)
    r = FieldReader(d.as_form())

    item_kind = r.choice("item_kind", ITEM_KINDS, required=True, message="Item type is required")
    name = r.text("name", required=True, message="Name is required")
    unit = r.choice("unit", UNITS, required=True, message="Unit is required")
    min_level, max_level = _check_levels(r)
    base = dict(
        description=r.text("description"),
        barcode=r.text("barcode"),
        shelf_life_days=r.integer("shelf_life_days"),
        storage_conditions=r.text("storage_conditions"),
    )
    common = dict(
        tax_rate=r.decimal("tax_rate", maximum=Decimal(DEFAULTS.max_tax_rate)),
        ht_price=_price(r, "ht_price"),
        ttc_price=r.decimal("ttc_price"),
    )

    pricing = None
    product_type = None
    if item_kind == PRODUCT:
        product_type = r.choice("product_type", PRODUCT_TYPES)
        pricing = _product_pricing(r, common)
    elif item_kind == RAW_MATERIAL:
        pricing = _raw_material_pricing(r, common)

    if r.errors:
        log_validation("item", r.errors, item_kind=item_kind)
        return ValidationResult.failure(r.errors)

    derived = compute_derived_pricing(pricing, item_kind)
    log_pricing(item_kind, pricing.as_dict(), derived.as_dict())

    if item_kind == PRODUCT:
        item = ValidatedProduct(
            name=name, unit=unit, min_stock_level=min_level, max_stock_level=max_level,
            pricing=derived, product_type=product_type, **base,
        )
    else:
        item = ValidatedRawMaterial(
            name=name, unit=unit, min_stock_level=min_level, max_stock_level=max_level,
            pricing=derived, **base,
        )
    log_validation("item", payload=item.to_payload(), item_kind=item_kind)
    return ValidationResult.success(item)


def validate_stock_levels(draft: Union[StockLevelsDraft, Mapping[str, Any]]) -> ValidationResult[StockLevels]:
    """Valida a alteração dos níveis mínimo/máximo de um item.

    Aqui um campo vazio não some do payload: vira ``None`` explícito,
    que limpa o nível configurado.
    """
    d = draft if isinstance(draft, StockLevelsDraft) else StockLevelsDraft.from_form(draft)
    r = FieldReader(d.as_form())
    lo, hi = _check_levels(r)
    if r.errors:
        log_validation("stock_levels", r.errors)
        return ValidationResult.failure(r.errors)
    levels = StockLevels(min_stock_level=lo, max_stock_level=hi)
    log_validation("stock_levels", payload=levels.to_payload())
    return ValidationResult.success(levels)
