"""
UC: Validar RECEITAS e seus ingredientes.

Regras:
- a receita precisa de nome, produto alvo, rendimento positivo e pelo
  menos um ingrediente no momento do envio;
- cada ingrediente referencia exatamente um item de catálogo, conforme
  seu tipo (matéria-prima ou produto), com quantidade positiva.

``RecipeComposer`` reproduz a sessão do formulário: adicionar um
ingrediente é tudo-ou-nada e o erro de composição vazia só é reavaliado
no próximo envio.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Mapping, Optional, Union

from laticinio.config import DEFAULTS
from laticinio.adapters.parsers import FieldReader
from laticinio.domain.catalog import INGREDIENT_KINDS, PRODUCT, RAW_MATERIAL, UNITS
from laticinio.domain.errors import ErrorKind, FieldError, FieldErrors, ValidationResult
from laticinio.domain.models import (
    IngredientDraft,
    ProductIngredient,
    RawMaterialIngredient,
    RecipeDraft,
    ValidatedIngredient,
    ValidatedRecipe,
)
from laticinio.infra.logger import log_validation


IngredientInput = Union[IngredientDraft, ValidatedIngredient, Mapping[str, Any]]
RecipeInput = Union[RecipeDraft, Mapping[str, Any]]


def validate_ingredient(draft: IngredientInput, prefix: str = "") -> ValidationResult[ValidatedIngredient]:
    """Valida um ingrediente e devolve a variante com a referência correta.

    Só a referência que corresponde ao tipo é mantida; a outra é
    descartada mesmo se preenchida.

    Args:
        draft: Ingrediente cru (draft ou mapeamento). Um ingrediente já
            validado é devolvido como está.
        prefix: Prefixo das chaves de erro (ex.: ``"ingredients[0]."``).
    """
    if isinstance(draft, (RawMaterialIngredient, ProductIngredient)):
        return ValidationResult.success(draft)
    if not isinstance(draft, (IngredientDraft, Mapping)):
        key = prefix.rstrip(".") or "ingredient"
        log_validation("ingredient", {key: type(draft).__name__})
        return ValidationResult.failure({
            key: FieldError(ErrorKind.MISSING_FIELD, "Ingredient must have type, item, quantity and unit"),
        })
    d = draft if isinstance(draft, IngredientDraft) else IngredientDraft.from_form(draft)
    r = FieldReader(d.as_form(), prefix=prefix)

    kind = r.choice("ingredient_kind", INGREDIENT_KINDS, required=True, message="Ingredient type is required")
    quantity = r.quantity(
        "quantity",
        missing_kind=ErrorKind.MISSING_FIELD,
        invalid_kind=ErrorKind.MISSING_FIELD,
        message="Valid quantity is required",
    )
    unit = r.choice("unit", UNITS, required=True, message="Unit is required")
    notes = r.text("notes")

    ref = None
    if kind == RAW_MATERIAL:
        ref = r.reference(
            "raw_material_id", required=True, kind=ErrorKind.MISSING_REFERENCE, message="Raw material is required"
        )
    elif kind == PRODUCT:
        ref = r.reference(
            "product_id", required=True, kind=ErrorKind.MISSING_REFERENCE, message="Product is required"
        )

    if r.errors:
        log_validation("ingredient", r.errors, ingredient_kind=kind)
        return ValidationResult.failure(r.errors)

    if kind == RAW_MATERIAL:
        ingredient = RawMaterialIngredient(raw_material_id=ref, quantity=quantity, unit=unit, notes=notes)
    else:
        ingredient = ProductIngredient(product_id=ref, quantity=quantity, unit=unit, notes=notes)
    return ValidationResult.success(ingredient)


def validate_recipe_draft(draft: RecipeInput) -> ValidationResult[ValidatedRecipe]:
    """Valida a receita completa.

    Ingredientes crus na lista (ex.: vindos de um JSON) passam por
    ``validate_ingredient``; seus erros aparecem como
    ``ingredients[i].<campo>``.
    """
    d = draft if isinstance(draft, RecipeDraft) else RecipeDraft.from_form(draft)
    form = d.as_form()
    form.pop("ingredients")
    r = FieldReader(form)

    name = r.text("name", required=True, message="Recipe name is required")
    product_id = r.reference("product_id", required=True, message="Product is required")
    yield_quantity = r.quantity(
        "yield_quantity",
        missing_kind=ErrorKind.MISSING_FIELD,
        invalid_kind=ErrorKind.MISSING_FIELD,
        message="Valid yield quantity is required",
    )
    yield_unit = r.choice("yield_unit", UNITS, required=True, message="Yield unit is required")
    description = r.text("description")
    instructions = r.text("instructions")

    ingredients: List[ValidatedIngredient] = []
    # de um JSON pode chegar qualquer coisa no lugar da lista
    raw_items = d.ingredients if isinstance(d.ingredients, (list, tuple)) else ()
    if not raw_items:
        r.error("ingredients", ErrorKind.EMPTY_COMPOSITION, "At least one ingredient is required")
    for i, raw in enumerate(raw_items):
        res = validate_ingredient(raw, prefix=f"ingredients[{i}].")
        if res.ok:
            ingredients.append(res.value)
        else:
            r.errors.update(res.errors)

    if r.errors:
        log_validation("recipe", r.errors, ingredients=len(raw_items))
        return ValidationResult.failure(r.errors)

    recipe = ValidatedRecipe(
        name=name,
        product_id=product_id,
        yield_quantity=yield_quantity,
        yield_unit=yield_unit,
        ingredients=tuple(ingredients),
        description=description,
        instructions=instructions,
    )
    log_validation("recipe", payload=recipe.to_payload())
    return ValidationResult.success(recipe)


class RecipeComposer:
    """Sessão de um formulário de receita (estado privado do chamador).

    Mantém o draft da receita, o ingrediente em edição e os erros
    exibidos ao lado dos campos.
    """

    def __init__(self, draft: Optional[RecipeDraft] = None):
        base = draft or RecipeDraft()
        self.draft = replace(base, ingredients=list(base.ingredients))
        self.entry = IngredientDraft()
        self.errors: FieldErrors = {}
        self.ingredient_errors: FieldErrors = {}

    @property
    def ingredients(self) -> tuple:
        return tuple(self.draft.ingredients)

    def set_field(self, name: str, value: Any) -> None:
        """Altera um campo da receita e limpa o erro exibido nele."""
        if name == "ingredients" or not hasattr(self.draft, name):
            raise ValueError(f"unknown recipe field: {name!r}")
        setattr(self.draft, name, "" if value is None else str(value))
        self.errors.pop(name, None)

    def set_ingredient_field(self, name: str, value: Any) -> None:
        """Altera um campo do ingrediente em edição.

        Trocar o tipo limpa a referência do outro tipo e volta a unidade
        para o padrão.
        """
        if not hasattr(self.entry, name):
            raise ValueError(f"unknown ingredient field: {name!r}")
        value = "" if value is None else str(value)
        self.ingredient_errors = {}
        if name == "ingredient_kind":
            self.entry = replace(
                self.entry,
                ingredient_kind=value,
                raw_material_id=self.entry.raw_material_id if value == RAW_MATERIAL else "",
                product_id=self.entry.product_id if value == PRODUCT else "",
                unit=DEFAULTS.default_unit,
            )
        else:
            setattr(self.entry, name, value)

    def add_ingredient(self) -> ValidationResult[ValidatedIngredient]:
        """Adiciona o ingrediente em edição, se válido.

        Um ingrediente inválido nunca entra na lista e o formulário de
        ingrediente só é limpo depois de uma inclusão bem-sucedida.
        """
        res = validate_ingredient(self.entry)
        if not res.ok:
            self.ingredient_errors = dict(res.errors)
            return res
        self.draft.ingredients.append(res.value)
        self.entry = IngredientDraft()
        self.ingredient_errors = {}
        self.errors.pop("ingredients", None)
        return res

    def remove_ingredient(self, index: int) -> ValidatedIngredient:
        removed = self.draft.ingredients.pop(index)
        if not self.draft.ingredients:
            # só o próximo envio volta a acusar a lista vazia
            self.errors.pop("ingredients", None)
        return removed

    def submit(self) -> ValidationResult[ValidatedRecipe]:
        res = validate_recipe_draft(self.draft)
        self.errors = dict(res.errors)
        return res
