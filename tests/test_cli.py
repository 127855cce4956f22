import json

import pandas as pd
import pytest

from spend_forecast.cli import (
    build_argument_parser,
    load_budgets,
    main,
    parse_category_filter,
    summarize_forecasts,
)


@pytest.fixture
def transactions_csv(tmp_path):
    rows = []
    for month, amount in zip(range(1, 9), [100, 110, 120, 130, 140, 150, 160, 170]):
        rows.append({"date": f"2024-{month:02d}-05", "amount": amount, "type": "Expense", "category": "Food"})
        rows.append({"date": f"2024-{month:02d}-01", "amount": 3000, "type": "Income", "category": "Salary"})
    rows.append({"date": "2024-08-03", "amount": 40, "type": "Expense", "category": "Books"})
    path = tmp_path / "transactions.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_parse_category_filter():
    assert parse_category_filter(None) is None
    assert parse_category_filter(" Food, Rent ,,") == ["Food", "Rent"]


def test_load_budgets(tmp_path):
    path = tmp_path / "budgets.json"
    path.write_text(json.dumps({"Food": 500, "Rent": "1200.5"}), encoding="utf-8")
    assert load_budgets(path) == {"Food": 500.0, "Rent": 1200.5}
    assert load_budgets(None) == {}


def test_load_budgets_rejects_non_mapping(tmp_path):
    path = tmp_path / "budgets.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_budgets(path)


def test_parser_defaults():
    args = build_argument_parser().parse_args(["--transactions", "tx.csv"])
    assert args.horizon == 6
    assert args.confidence == 0.95
    assert args.verbose is False


def test_summarize_empty_forecasts():
    assert "No forecasts generated" in summarize_forecasts(pd.DataFrame())


def test_main_prints_forecasts_and_writes_csv(transactions_csv, tmp_path, capsys):
    output = tmp_path / "forecast.csv"
    main(["--transactions", str(transactions_csv), "--horizon", "3", "--forecast-output", str(output)])

    printed = capsys.readouterr().out
    assert "Forecast by category (next month, 95% interval):" in printed
    assert "- Food: 180.00" in printed
    assert "regression" in printed

    saved = pd.read_csv(output)
    assert len(saved) == 3
    assert set(saved["category"]) == {"Food"}


def test_main_category_filter_removing_everything(transactions_csv):
    with pytest.raises(ValueError, match="Category filter removed all rows"):
        main(["--transactions", str(transactions_csv), "--category", "Travel"])
