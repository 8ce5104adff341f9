# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py pricing --ht 10 --tax 5.5
  python app.py item validate --kind product -f name=Iogurte -f unit=kg -f retail_price=3.5
  python app.py recipe validate receita.json
  python app.py movement validate -d out -f quantity=5 -f movement_date=2024-01-01
  python app.py movement sheet entradas.xlsx -d in
  python app.py milk summary coletas.csv --period weekly
"""

from laticinio.adapters.cli import main

if __name__ == "__main__":
    main()
