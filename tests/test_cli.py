import json
from pathlib import Path

from typer.testing import CliRunner

from laticinio.adapters.cli import app

runner = CliRunner()


def test_cli_pricing_product_json():
    result = runner.invoke(app, ["pricing", "--ht", "10", "--tax", "20", "--cost", "2", "--retail", "3", "--as-json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["ttc_price"] == "12.00"
    assert data["profit_margin"] == "50.00"


def test_cli_pricing_raw_material():
    result = runner.invoke(app, ["pricing", "--kind", "raw_material", "--purchase", "4", "--tax", "10", "--as-json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["ttc_price"] == "4.40"


def test_cli_pricing_zero_cost_fails():
    result = runner.invoke(app, ["pricing", "--cost", "0", "--retail", "3"])
    assert result.exit_code == 1


def test_cli_item_validate_missing_retail():
    result = runner.invoke(app, [
        "item", "validate", "--kind", "product", "-f", "name=Milk", "-f", "unit=L", "--as-json",
    ])
    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data["errors"]["retail_price"]["kind"] == "MissingField"


def test_cli_item_validate_from_json(tmp_path: Path):
    form = tmp_path / "item.json"
    form.write_text(json.dumps({
        "name": "Queijo", "unit": "kg", "item_kind": "product",
        "retail_price": "30", "ht_price": "20", "tax_rate": "10",
    }), encoding="utf-8")
    result = runner.invoke(app, ["item", "validate", "--json", str(form), "--as-json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["ttc_price"] == "22.00"
    assert "purchase_price" not in data


def test_cli_item_validate_table_output():
    result = runner.invoke(app, [
        "item", "validate", "--kind", "raw_material", "-f", "name=Leite cru", "-f", "unit=L", "-f", "purchase_price=2",
    ])
    assert result.exit_code == 0, result.output
    assert "Leite cru" in result.stdout


def test_cli_item_levels_and_status():
    result = runner.invoke(app, ["item", "levels", "--min", "5", "--as-json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"min_stock_level": "5", "max_stock_level": None}

    result = runner.invoke(app, ["item", "levels", "--min", "5", "--max", "1"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["item", "status", "3", "--min", "5"])
    assert result.exit_code == 0
    assert "low" in result.stdout


def test_cli_recipe_validate(tmp_path: Path):
    recipe = tmp_path / "receita.json"
    recipe.write_text(json.dumps({
        "name": "Iogurte natural",
        "product_id": 2,
        "yield_quantity": "20",
        "yield_unit": "L",
        "ingredients": [
            {"ingredient_type": "raw_material", "raw_material_id": 1, "quantity": "21", "unit": "L"},
        ],
    }), encoding="utf-8")
    result = runner.invoke(app, ["recipe", "validate", str(recipe), "--as-json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["ingredients"][0]["raw_material_id"] == 1

    result = runner.invoke(app, ["recipe", "validate", str(recipe)])
    assert result.exit_code == 0, result.output
    assert "Ingredientes" in result.stdout


def test_cli_recipe_empty_composition(tmp_path: Path):
    recipe = tmp_path / "receita.json"
    recipe.write_text(json.dumps({"name": "X", "product_id": 1, "yield_quantity": "1", "ingredients": []}))
    result = runner.invoke(app, ["recipe", "validate", str(recipe), "--as-json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["errors"]["ingredients"]["kind"] == "EmptyComposition"


def test_cli_movement_validate():
    result = runner.invoke(app, [
        "movement", "validate", "-d", "out", "-f", "quantity=2", "-f", "movement_date=2024-01-01",
        "-f", "unit_price=5", "--as-json",
    ])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["movement_type"] == "out"
    assert "unit_price" not in data

    result = runner.invoke(app, ["movement", "validate", "-f", "quantity=0", "--as-json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["errors"]["quantity"]["kind"] == "InvalidQuantity"


def test_cli_movement_bad_direction_and_bad_field():
    result = runner.invoke(app, ["movement", "validate", "-d", "up", "-f", "quantity=1"])
    assert result.exit_code == 2
    result = runner.invoke(app, ["movement", "validate", "-f", "quantity"])
    assert result.exit_code == 2


def test_cli_movement_sheet(tmp_path: Path):
    sheet = tmp_path / "entradas.csv"
    sheet.write_text("quantidade,data\n5,2024-01-01\n0,2024-01-02\n", encoding="utf-8")
    result = runner.invoke(app, ["movement", "sheet", str(sheet), "--as-json"])
    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data["total"] == 2
    assert data["sucessos"] == 1
    assert data["erros"][0]["linha"] == 2


def test_cli_batch_commands():
    result = runner.invoke(app, ["batch", "new", "--recipe", "7", "--as-json"])
    assert result.exit_code == 0, result.output
    draft = json.loads(result.stdout)
    assert draft["recipe_id"] == "7"
    assert draft["batch_number"].startswith("B-")

    result = runner.invoke(app, [
        "batch", "validate", "-f", "recipe_id=7", "-f", f"batch_number={draft['batch_number']}",
        "-f", "planned_quantity=100", "-f", "start_date=2024-03-01", "--as-json",
    ])
    assert result.exit_code == 0, result.output

    assert runner.invoke(app, ["batch", "complete", "0"]).exit_code == 1
    assert runner.invoke(app, ["batch", "complete", "95.5", "--as-json"]).exit_code == 0

    result = runner.invoke(app, ["batch", "transition", "planned", "in_progress"])
    assert result.exit_code == 0
    assert "permitido" in result.stdout
    assert runner.invoke(app, ["batch", "transition", "completed", "planned"]).exit_code == 1


def test_cli_milk_commands(tmp_path: Path):
    result = runner.invoke(app, [
        "milk", "validate", "-f", "supplier_id=1", "-f", "collection_date=2024-01-10",
        "-f", "quantity=300", "-f", "ph=6.7", "--as-json",
    ])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["ph"] == "6.7"

    result = runner.invoke(app, ["milk", "supplier", "-f", "name=Fazenda", "-f", "email=x", "--as-json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["errors"]["email"]["kind"] == "InvalidFormat"

    result = runner.invoke(app, ["milk", "period", "--period", "weekly", "--today", "2024-01-10"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "2024-01-07 2024-01-13"

    assert runner.invoke(app, ["milk", "period", "--period", "yearly"]).exit_code == 2

    sheet = tmp_path / "coletas.csv"
    sheet.write_text(
        "fornecedor,data,litros,gordura\n1,2024-01-08,100,3\n2,2024-01-09,300,4\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["milk", "summary", str(sheet), "--as-json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["total_collections"] == 2
    assert data["total_quantity"] == "400.00"
    assert data["by_supplier"][0]["supplier_id"] == 2


def test_cli_pricing_large_amounts():
    result = runner.invoke(app, ["pricing", "--ht", "1e30", "--tax", "5", "--as-json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["ttc_price"] == "1050000000000000000000000000000.00"

    result = runner.invoke(app, ["pricing", "--ht", "9.9e999999", "--tax", "5"])
    assert result.exit_code == 1
    assert "Erro" in result.stdout


def test_cli_recipe_ingredient_not_an_object(tmp_path: Path):
    recipe = tmp_path / "receita.json"
    recipe.write_text(json.dumps({"name": "X", "product_id": 1, "yield_quantity": "1", "ingredients": [5]}))
    result = runner.invoke(app, ["recipe", "validate", str(recipe), "--as-json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["errors"]["ingredients[0]"]["kind"] == "MissingField"
