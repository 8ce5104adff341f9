# laticinio/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Os *drafts* guardam exatamente o que o usuário digitou (strings cruas).
  Eles vivem apenas durante uma interação de formulário.
- Os registros validados são variantes com tag (produto x matéria-prima,
  entrada x saída, ingrediente de matéria-prima x de produto): campos
  que não fazem sentido para a variante simplesmente não existem.
- ``to_payload()`` devolve o dicionário pronto para serialização, sem
  as chaves não informadas.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from laticinio.config import DEFAULTS
from laticinio.domain.catalog import (
    MOVEMENT_IN,
    MOVEMENT_OUT,
    PRODUCT,
    RAW_MATERIAL,
)


# Identificador de catálogo: inteiro quando numérico, senão string
Reference = Union[int, str]


def compact(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Remove as chaves com valor ``None`` (campos não informados)."""
    return {k: v for k, v in payload.items() if v is not None}


def to_form_value(val: Any) -> str:
    """Valor tipado → string de formulário (inverso do parsing)."""
    if val is None:
        return ""
    if isinstance(val, Decimal):
        return format(val, "f")
    if isinstance(val, date):
        return val.isoformat()
    return str(val)


class FormDraft:
    """Mixin dos drafts: construção a partir de um mapeamento de campos."""

    # nomes alternativos aceitos na entrada (ex.: chaves do payload do backend)
    aliases: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_form(cls, form: Mapping[str, Any]):
        known = {f.name for f in fields(cls)}
        values = {}
        for k, v in form.items():
            k = cls.aliases.get(k, k)
            if k in known:
                values[k] = v if isinstance(v, (list, dict)) else to_form_value(v)
        return cls(**values)

    def as_form(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# -------------------------
# Preços
# -------------------------

@dataclass(frozen=True)
class PricingFacts:
    """Preços de um item. ``ht`` = sem imposto, ``ttc`` = com imposto."""
    ht_price: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    ttc_price: Optional[Decimal] = None
    cost_price: Optional[Decimal] = None
    retail_price: Optional[Decimal] = None
    wholesale_price: Optional[Decimal] = None
    purchase_price: Optional[Decimal] = None
    supplier_price: Optional[Decimal] = None
    profit_margin: Optional[Decimal] = None

    def as_dict(self) -> Dict[str, Optional[Decimal]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


PRODUCT_PRICE_FIELDS: Tuple[str, ...] = (
    "wholesale_price", "retail_price", "tax_rate", "ht_price",
    "ttc_price", "cost_price", "profit_margin",
)
RAW_MATERIAL_PRICE_FIELDS: Tuple[str, ...] = (
    "purchase_price", "supplier_price", "tax_rate", "ht_price", "ttc_price",
)


# -------------------------
# Itens de estoque
# -------------------------

@dataclass
class InventoryItemDraft(FormDraft):
    """Formulário de cadastro de matéria-prima ou produto."""
    aliases: ClassVar[Dict[str, str]] = {"item_type": "item_kind"}

    name: str = ""
    unit: str = ""
    item_kind: str = ""
    description: str = ""
    product_type: str = ""
    min_stock_level: str = ""
    max_stock_level: str = ""
    wholesale_price: str = ""
    retail_price: str = ""
    tax_rate: str = ""
    ht_price: str = ""
    ttc_price: str = ""
    cost_price: str = ""
    profit_margin: str = ""
    barcode: str = ""
    shelf_life_days: str = ""
    storage_conditions: str = ""
    purchase_price: str = ""
    supplier_price: str = ""

    @classmethod
    def new(cls, item_kind: str) -> "InventoryItemDraft":
        """Formulário novo, com os mesmos padrões da tela de cadastro."""
        draft = cls(item_kind=item_kind, unit=DEFAULTS.default_unit)
        if item_kind == PRODUCT:
            draft.product_type = DEFAULTS.product_types[0]
        return draft

    @classmethod
    def from_validated(cls, item: "ValidatedItem") -> "InventoryItemDraft":
        """Reabre um item validado como formulário (para edição)."""
        form = {k: to_form_value(v) for k, v in item.to_payload().items()}
        form["item_kind"] = item.item_kind
        return cls.from_form(form)


@dataclass(frozen=True)
class _ItemBase:
    name: str
    unit: str
    description: Optional[str] = None
    min_stock_level: Optional[Decimal] = None
    max_stock_level: Optional[Decimal] = None
    barcode: Optional[str] = None
    shelf_life_days: Optional[int] = None
    storage_conditions: Optional[str] = None
    pricing: PricingFacts = field(default_factory=PricingFacts)

    item_kind: ClassVar[str] = ""
    price_fields: ClassVar[Tuple[str, ...]] = ()

    def _base_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "unit": self.unit,
            "description": self.description,
            "min_stock_level": self.min_stock_level,
            "max_stock_level": self.max_stock_level,
            "barcode": self.barcode,
            "shelf_life_days": self.shelf_life_days,
            "storage_conditions": self.storage_conditions,
        }

    def to_payload(self) -> Dict[str, Any]:
        out = self._base_payload()
        prices = self.pricing.as_dict()
        out.update({k: prices[k] for k in self.price_fields})
        return compact(out)


@dataclass(frozen=True)
class ValidatedProduct(_ItemBase):
    product_type: Optional[str] = None

    item_kind: ClassVar[str] = PRODUCT
    price_fields: ClassVar[Tuple[str, ...]] = PRODUCT_PRICE_FIELDS

    def to_payload(self) -> Dict[str, Any]:
        out = super().to_payload()
        if self.product_type is not None:
            out["product_type"] = self.product_type
        return out


@dataclass(frozen=True)
class ValidatedRawMaterial(_ItemBase):
    item_kind: ClassVar[str] = RAW_MATERIAL
    price_fields: ClassVar[Tuple[str, ...]] = RAW_MATERIAL_PRICE_FIELDS


ValidatedItem = Union[ValidatedProduct, ValidatedRawMaterial]


@dataclass
class StockLevelsDraft(FormDraft):
    min_stock_level: str = ""
    max_stock_level: str = ""


@dataclass(frozen=True)
class StockLevels:
    min_stock_level: Optional[Decimal] = None
    max_stock_level: Optional[Decimal] = None

    def to_payload(self) -> Dict[str, Any]:
        # None aqui é intencional: limpa o nível no backend
        return {"min_stock_level": self.min_stock_level, "max_stock_level": self.max_stock_level}


# -------------------------
# Receitas
# -------------------------

@dataclass
class IngredientDraft(FormDraft):
    aliases: ClassVar[Dict[str, str]] = {"ingredient_type": "ingredient_kind"}

    ingredient_kind: str = RAW_MATERIAL
    raw_material_id: str = ""
    product_id: str = ""
    quantity: str = ""
    unit: str = DEFAULTS.default_unit
    notes: str = ""


@dataclass(frozen=True)
class RawMaterialIngredient:
    raw_material_id: Reference
    quantity: Decimal
    unit: str
    notes: Optional[str] = None

    ingredient_kind: ClassVar[str] = RAW_MATERIAL

    def to_payload(self) -> Dict[str, Any]:
        return compact({
            "ingredient_type": self.ingredient_kind,
            "raw_material_id": self.raw_material_id,
            "quantity": self.quantity,
            "unit": self.unit,
            "notes": self.notes,
        })


@dataclass(frozen=True)
class ProductIngredient:
    product_id: Reference
    quantity: Decimal
    unit: str
    notes: Optional[str] = None

    ingredient_kind: ClassVar[str] = PRODUCT

    def to_payload(self) -> Dict[str, Any]:
        return compact({
            "ingredient_type": self.ingredient_kind,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit": self.unit,
            "notes": self.notes,
        })


ValidatedIngredient = Union[RawMaterialIngredient, ProductIngredient]


@dataclass
class RecipeDraft(FormDraft):
    name: str = ""
    product_id: str = ""
    description: str = ""
    instructions: str = ""
    yield_quantity: str = ""
    yield_unit: str = DEFAULTS.default_unit
    # ingredientes já aceitos (ou mapeamentos crus vindos de arquivo)
    ingredients: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class ValidatedRecipe:
    name: str
    product_id: Reference
    yield_quantity: Decimal
    yield_unit: str
    ingredients: Tuple[ValidatedIngredient, ...]
    description: Optional[str] = None
    instructions: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        out = compact({
            "name": self.name,
            "product_id": self.product_id,
            "description": self.description,
            "instructions": self.instructions,
            "yield_quantity": self.yield_quantity,
            "yield_unit": self.yield_unit,
        })
        out["ingredients"] = [i.to_payload() for i in self.ingredients]
        return out


# -------------------------
# Movimentações de estoque
# -------------------------

@dataclass
class StockMovementDraft(FormDraft):
    quantity: str = ""
    movement_date: str = ""
    batch_number: str = ""
    expiration_date: str = ""
    unit_price: str = ""
    notes: str = ""
    supplier_id: str = ""
    client_id: str = ""

    @classmethod
    def new(cls, today: Optional[date] = None) -> "StockMovementDraft":
        """Formulário novo: a data já vem preenchida com hoje."""
        return cls(movement_date=(today or date.today()).isoformat())


@dataclass(frozen=True)
class _MovementBase:
    quantity: Decimal
    movement_date: date
    batch_number: Optional[str] = None
    notes: Optional[str] = None
    supplier_id: Optional[Reference] = None
    client_id: Optional[Reference] = None

    movement_type: ClassVar[str] = ""

    def _base_payload(self) -> Dict[str, Any]:
        return {
            "movement_type": self.movement_type,
            "quantity": self.quantity,
            "movement_date": self.movement_date,
            "batch_number": self.batch_number,
            "notes": self.notes,
            "supplier_id": self.supplier_id,
            "client_id": self.client_id,
        }

    def to_payload(self) -> Dict[str, Any]:
        return compact(self._base_payload())


@dataclass(frozen=True)
class InboundMovement(_MovementBase):
    unit_price: Optional[Decimal] = None
    expiration_date: Optional[date] = None

    movement_type: ClassVar[str] = MOVEMENT_IN

    def to_payload(self) -> Dict[str, Any]:
        out = self._base_payload()
        out["unit_price"] = self.unit_price
        out["expiration_date"] = self.expiration_date
        return compact(out)


@dataclass(frozen=True)
class OutboundMovement(_MovementBase):
    movement_type: ClassVar[str] = MOVEMENT_OUT


ValidatedMovement = Union[InboundMovement, OutboundMovement]


# -------------------------
# Produção
# -------------------------

@dataclass
class BatchDraft(FormDraft):
    recipe_id: str = ""
    batch_number: str = ""
    planned_quantity: str = ""
    start_date: str = ""
    supervisor_id: str = ""
    notes: str = ""


@dataclass(frozen=True)
class ValidatedBatch:
    recipe_id: Reference
    batch_number: str
    planned_quantity: Decimal
    start_date: date
    supervisor_id: Optional[Reference] = None
    notes: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return compact({
            "recipe_id": self.recipe_id,
            "batch_number": self.batch_number,
            "planned_quantity": self.planned_quantity,
            "start_date": self.start_date,
            "supervisor_id": self.supervisor_id,
            "notes": self.notes,
        })


# -------------------------
# Coleta de leite
# -------------------------

QUALITY_FIELDS: Tuple[str, ...] = (
    "fat_content", "density", "ph", "protein", "lactose",
    "somatic_cell_count", "total_bacterial_count",
)


@dataclass
class MilkCollectionDraft(FormDraft):
    supplier_id: str = ""
    collection_date: str = ""
    quantity: str = ""
    temperature: str = ""
    quality_params: Dict[str, str] = field(default_factory=lambda: {k: "" for k in QUALITY_FIELDS})
    notes: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "MilkCollectionDraft":
        """Aceita os parâmetros de qualidade aninhados ou já achatados."""
        draft = super().from_form(form)
        quality = {k: "" for k in QUALITY_FIELDS}
        nested = form.get("quality_params") or {}
        for k in QUALITY_FIELDS:
            if k in nested:
                quality[k] = to_form_value(nested[k])
            elif k in form:
                quality[k] = to_form_value(form[k])
        draft.quality_params = quality
        return draft


@dataclass(frozen=True)
class QualityParams:
    fat_content: Optional[Decimal] = None
    density: Optional[Decimal] = None
    ph: Optional[Decimal] = None
    protein: Optional[Decimal] = None
    lactose: Optional[Decimal] = None
    somatic_cell_count: Optional[int] = None
    total_bacterial_count: Optional[int] = None


@dataclass(frozen=True)
class ValidatedCollection:
    supplier_id: Reference
    collection_date: date
    quantity: Decimal
    temperature: Optional[Decimal] = None
    quality: QualityParams = field(default_factory=QualityParams)
    notes: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        out = {
            "supplier_id": self.supplier_id,
            "collection_date": self.collection_date,
            "quantity": self.quantity,
            "temperature": self.temperature,
            "notes": self.notes,
        }
        out.update({k: getattr(self.quality, k) for k in QUALITY_FIELDS})
        return compact(out)


@dataclass
class SupplierDraft(FormDraft):
    name: str = ""
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""


@dataclass(frozen=True)
class ValidatedSupplier:
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return compact({
            "name": self.name,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
        })
