# laticinio/adapters/cli.py
"""
CLI das regras de formulário do laticínio (Typer).

Comandos principais:
- pricing                      -> calcula preço TTC e margem
- item validate|levels|status  -> cadastro de item, níveis e status de estoque
- recipe validate <json>       -> valida uma receita com ingredientes
- movement validate            -> valida uma movimentação (entrada/saída)
- movement sheet <xlsx|csv>    -> valida movimentações em lote
- batch new|validate|complete|transition -> lotes de produção
- milk validate|supplier|period|summary  -> coleta de leite

Os campos são passados como ``--field chave=valor`` (repetível) ou por um
arquivo ``--json``. Erros de validação saem em tabela e com código 1.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal, DecimalException
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from laticinio.adapters.parsers import parse_decimal, parse_date
from laticinio.domain.catalog import ITEM_KINDS, MOVEMENT_IN, PRODUCT
from laticinio.domain.errors import FieldErrors, ValidationResult
from laticinio.domain.formulas import compute_derived_pricing
from laticinio.domain.models import PricingFacts, RawMaterialIngredient
from laticinio.domain.policies import stock_status
from laticinio.usecases.validar_item import validate_item_draft, validate_stock_levels
from laticinio.usecases.validar_receita import validate_recipe_draft
from laticinio.usecases.validar_movimento import validate_movement_draft, validate_movement_sheet
from laticinio.usecases.producao import (
    check_batch_transition,
    new_batch_draft,
    validate_batch_completion,
    validate_batch_draft,
)
from laticinio.usecases.coleta_leite import (
    report_period_range,
    summarize_collection_sheet,
    validate_collection_draft,
    validate_supplier_draft,
)


app = typer.Typer(help="Laticínio: CLI de validação de formulários")
console = Console()


# -----------------------
# util
# -----------------------

def _json_default(obj):
    if isinstance(obj, Decimal):
        return format(obj, "f")
    if isinstance(obj, date):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=_json_default))


def _fmt(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, Decimal):
        return format(val, "f")
    if isinstance(val, date):
        return val.strftime("%d/%m/%Y")
    return str(val)


def _collect_fields(pairs: Optional[List[str]], json_path: Optional[str]) -> Dict[str, Any]:
    """Monta o formulário cru a partir de ``--json`` e/ou ``--field k=v``."""
    form: Dict[str, Any] = {}
    if json_path:
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise typer.BadParameter("JSON must contain an object", param_hint="--json")
        form.update(data)
    for pair in pairs or []:
        if "=" not in pair:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--field")
        k, v = pair.split("=", 1)
        form[k.strip()] = v
    return form


def _display_payload(payload: Dict[str, Any], title: str) -> None:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Campo")
    table.add_column("Valor", justify="right")
    for k, v in payload.items():
        if isinstance(v, list):
            table.add_row(k, f"{len(v)} item(s)")
        else:
            table.add_row(k, _fmt(v))
    console.print(table)


def _display_errors(errors: FieldErrors, title: str) -> None:
    table = Table(title=title, box=box.ROUNDED, border_style="red")
    table.add_column("Campo")
    table.add_column("Erro")
    table.add_column("Mensagem")
    for campo, err in errors.items():
        table.add_row(campo, f"[bold red]{err.kind.value}[/]", err.message)
    console.print(table)


def _finish(res: ValidationResult, title: str, as_json: bool) -> None:
    """Exibe o resultado e encerra com código 1 se houver erros."""
    if not res.ok:
        if as_json:
            _print_json({"errors": {k: {"kind": e.kind.value, "message": e.message} for k, e in res.errors.items()}})
        else:
            _display_errors(res.errors, title=f"{title}: erros")
        raise typer.Exit(code=1)
    payload = res.value.to_payload() if hasattr(res.value, "to_payload") else res.value
    if as_json:
        _print_json(payload)
    else:
        _display_payload(payload, title=title)


FIELD_OPT = typer.Option(None, "--field", "-f", help="Campo do formulário: chave=valor (repetível)")
JSON_OPT = typer.Option(None, "--json", help="Arquivo JSON com os campos do formulário")
AS_JSON_OPT = typer.Option(False, "--as-json", help="Imprime o payload em JSON")


# -----------------------
# preços
# -----------------------

@app.command("pricing")
def cmd_pricing(
    kind: str = typer.Option(PRODUCT, "--kind", help="product | raw_material"),
    ht_price: Optional[str] = typer.Option(None, "--ht", help="Preço sem imposto (produto)"),
    tax_rate: Optional[str] = typer.Option(None, "--tax", help="Taxa de imposto em %"),
    cost_price: Optional[str] = typer.Option(None, "--cost", help="Preço de custo (produto)"),
    retail_price: Optional[str] = typer.Option(None, "--retail", help="Preço de venda (produto)"),
    purchase_price: Optional[str] = typer.Option(None, "--purchase", help="Preço de compra (matéria-prima)"),
    as_json: bool = AS_JSON_OPT,
):
    """Calcula os preços derivados (TTC e margem) sem validar o formulário todo."""
    if kind not in ITEM_KINDS:
        raise typer.BadParameter(f"must be one of: {', '.join(ITEM_KINDS)}", param_hint="--kind")
    try:
        facts = PricingFacts(
            ht_price=parse_decimal(ht_price),
            tax_rate=parse_decimal(tax_rate),
            cost_price=parse_decimal(cost_price),
            retail_price=parse_decimal(retail_price),
            purchase_price=parse_decimal(purchase_price),
        )
        derived = compute_derived_pricing(facts, kind)
    except (ValueError, DecimalException) as e:
        typer.echo(f"Erro: {e}")
        raise typer.Exit(code=1)
    out = {k: v for k, v in derived.as_dict().items() if v is not None}
    if as_json:
        _print_json(out)
    else:
        _display_payload(out, title="Preços")


# -----------------------
# itens
# -----------------------

item_app = typer.Typer(help="Cadastro de matérias-primas e produtos.")
app.add_typer(item_app, name="item")


@item_app.command("validate")
def cmd_item_validate(
    kind: Optional[str] = typer.Option(None, "--kind", help="product | raw_material"),
    fields: Optional[List[str]] = FIELD_OPT,
    json_path: Optional[str] = JSON_OPT,
    as_json: bool = AS_JSON_OPT,
):
    """Valida o formulário de item e mostra o payload com preços derivados."""
    form = _collect_fields(fields, json_path)
    if kind:
        form["item_kind"] = kind
    _finish(validate_item_draft(form), title="Item", as_json=as_json)


@item_app.command("levels")
def cmd_item_levels(
    min_level: str = typer.Option("", "--min", help="Nível mínimo (vazio limpa)"),
    max_level: str = typer.Option("", "--max", help="Nível máximo (vazio limpa)"),
    as_json: bool = AS_JSON_OPT,
):
    """Valida a alteração dos níveis de estoque de um item."""
    res = validate_stock_levels({"min_stock_level": min_level, "max_stock_level": max_level})
    _finish(res, title="Níveis de estoque", as_json=as_json)


@item_app.command("status")
def cmd_item_status(
    current: str = typer.Argument(..., help="Estoque atual"),
    min_level: Optional[str] = typer.Option(None, "--min"),
    max_level: Optional[str] = typer.Option(None, "--max"),
):
    """Classifica o estoque atual em low / normal / high."""
    status = stock_status(current, min_level, max_level)
    color = {"low": "red", "high": "green"}.get(status, "blue")
    console.print(f"[bold {color}]{status}[/]")


# -----------------------
# receitas
# -----------------------

recipe_app = typer.Typer(help="Receitas de produção.")
app.add_typer(recipe_app, name="recipe")


@recipe_app.command("validate")
def cmd_recipe_validate(
    json_path: str = typer.Argument(..., help="JSON da receita (com a lista 'ingredients')"),
    as_json: bool = AS_JSON_OPT,
):
    """Valida uma receita completa a partir de um arquivo JSON."""
    form = _collect_fields(None, json_path)
    res = validate_recipe_draft(form)
    if res.ok and not as_json:
        _display_payload(res.value.to_payload(), title="Receita")
        ing_table = Table(title="Ingredientes", box=box.ROUNDED)
        for col in ("tipo", "referência", "quantidade", "unidade", "notas"):
            ing_table.add_column(col)
        for ing in res.value.ingredients:
            ref = ing.raw_material_id if isinstance(ing, RawMaterialIngredient) else ing.product_id
            ing_table.add_row(ing.ingredient_kind, _fmt(ref), _fmt(ing.quantity), ing.unit, _fmt(ing.notes))
        console.print(ing_table)
        return
    _finish(res, title="Receita", as_json=as_json)


# -----------------------
# movimentações
# -----------------------

movement_app = typer.Typer(help="Movimentações de estoque.")
app.add_typer(movement_app, name="movement")


@movement_app.command("validate")
def cmd_movement_validate(
    direction: str = typer.Option(MOVEMENT_IN, "--direction", "-d", help="in | out"),
    fields: Optional[List[str]] = FIELD_OPT,
    json_path: Optional[str] = JSON_OPT,
    as_json: bool = AS_JSON_OPT,
):
    """Valida uma movimentação única."""
    form = _collect_fields(fields, json_path)
    try:
        res = validate_movement_draft(form, direction)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--direction")
    _finish(res, title="Entrada" if direction == MOVEMENT_IN else "Saída", as_json=as_json)


@movement_app.command("sheet")
def cmd_movement_sheet(
    path: str = typer.Argument(..., help="Planilha XLSX/CSV de movimentações"),
    direction: str = typer.Option(MOVEMENT_IN, "--direction", "-d", help="in | out"),
    as_json: bool = AS_JSON_OPT,
):
    """Valida movimentações em lote a partir de uma planilha."""
    try:
        info = validate_movement_sheet(path, direction)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if as_json:
        _print_json(info)
    else:
        panel_content = [
            f"Total de registros: {info['total']}",
            f"Válidos: {info['sucessos']}",
        ]
        if info["erros"]:
            panel_content.append(f"Erros: {len(info['erros'])}")
        console.print(Panel("\n".join(panel_content), title=f"{info['tipo']} em Lote"))
        if info["erros"]:
            erro_table = Table(title="Erros Encontrados")
            erro_table.add_column("Linha")
            erro_table.add_column("Erro")
            for erro in info["erros"]:
                erro_table.add_row(str(erro.get("linha", "?")), erro.get("mensagem", "Erro desconhecido"))
            console.print(erro_table)
    if info["erros"]:
        raise typer.Exit(code=1)


# -----------------------
# produção
# -----------------------

batch_app = typer.Typer(help="Lotes de produção.")
app.add_typer(batch_app, name="batch")


@batch_app.command("new")
def cmd_batch_new(
    recipe_id: str = typer.Option("", "--recipe", help="Receita do lote"),
    as_json: bool = AS_JSON_OPT,
):
    """Mostra um formulário de lote novo (número gerado e data de hoje)."""
    draft = new_batch_draft(recipe_id)
    if as_json:
        _print_json(draft.as_form())
    else:
        _display_payload(draft.as_form(), title="Novo lote")


@batch_app.command("validate")
def cmd_batch_validate(
    fields: Optional[List[str]] = FIELD_OPT,
    json_path: Optional[str] = JSON_OPT,
    as_json: bool = AS_JSON_OPT,
):
    """Valida o formulário de criação de lote."""
    _finish(validate_batch_draft(_collect_fields(fields, json_path)), title="Lote", as_json=as_json)


@batch_app.command("complete")
def cmd_batch_complete(
    actual_quantity: str = typer.Argument(..., help="Quantidade efetivamente produzida"),
    as_json: bool = AS_JSON_OPT,
):
    """Valida a conclusão de um lote."""
    _finish(validate_batch_completion(actual_quantity), title="Conclusão do lote", as_json=as_json)


@batch_app.command("transition")
def cmd_batch_transition(
    current: str = typer.Argument(..., help="Status atual"),
    target: str = typer.Argument(..., help="Status desejado"),
):
    """Confere se a mudança de status do lote é permitida."""
    res = check_batch_transition(current, target)
    if not res.ok:
        _display_errors(res.errors, title="Mudança de status")
        raise typer.Exit(code=1)
    typer.echo(f">> {current} -> {target}: permitido")


# -----------------------
# coleta de leite
# -----------------------

milk_app = typer.Typer(help="Coleta de leite.")
app.add_typer(milk_app, name="milk")


@milk_app.command("validate")
def cmd_milk_validate(
    fields: Optional[List[str]] = FIELD_OPT,
    json_path: Optional[str] = JSON_OPT,
    as_json: bool = AS_JSON_OPT,
):
    """Valida o registro de uma coleta de leite."""
    _finish(validate_collection_draft(_collect_fields(fields, json_path)), title="Coleta", as_json=as_json)


@milk_app.command("supplier")
def cmd_milk_supplier(
    fields: Optional[List[str]] = FIELD_OPT,
    json_path: Optional[str] = JSON_OPT,
    as_json: bool = AS_JSON_OPT,
):
    """Valida o cadastro de um fornecedor de leite."""
    _finish(validate_supplier_draft(_collect_fields(fields, json_path)), title="Fornecedor", as_json=as_json)


@milk_app.command("period")
def cmd_milk_period(
    period: str = typer.Option("daily", "--period", help="daily | weekly | monthly | custom"),
    today: Optional[str] = typer.Option(None, "--today", help="Data de referência (YYYY-MM-DD)"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
):
    """Mostra o intervalo de datas do relatório para o período."""
    try:
        first, last = report_period_range(period, today=parse_date(today), start=start, end=end)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    typer.echo(f"{first.isoformat()} {last.isoformat()}")


@milk_app.command("summary")
def cmd_milk_summary(
    path: str = typer.Argument(..., help="Planilha XLSX/CSV de coletas"),
    period: str = typer.Option("custom", "--period", help="daily | weekly | monthly | custom"),
    today: Optional[str] = typer.Option(None, "--today"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    supplier: Optional[str] = typer.Option(None, "--supplier", help="Filtra por fornecedor"),
    as_json: bool = AS_JSON_OPT,
):
    """Resumo (totais e médias) das coletas de uma planilha."""
    try:
        summary = summarize_collection_sheet(
            path, period=period, today=parse_date(today), start=start, end=end, supplier_id=supplier,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if as_json:
        _print_json(summary)
        return
    by_supplier = summary.pop("by_supplier")
    _display_payload(summary, title="Resumo das coletas")
    if by_supplier:
        table = Table(title="Por fornecedor", box=box.ROUNDED)
        table.add_column("supplier_id")
        table.add_column("coletas", justify="right")
        table.add_column("litros", justify="right")
        for row in by_supplier:
            table.add_row(_fmt(row["supplier_id"]), str(row["collections"]), _fmt(row["quantity"]))
        console.print(table)


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
