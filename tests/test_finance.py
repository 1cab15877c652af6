"""Cash-flow aggregation and report tests."""
from datetime import date, datetime
from decimal import Decimal

from conftest import make_transaction
from core.finance import (
    category_totals,
    csv_filename,
    daily_breakdown,
    export_transactions_csv,
    format_brl,
    monthly_breakdown,
    summarize,
)
from core.filters import apply_filters, in_period


def test_summary_of_nothing_is_zero():
    summary = summarize([])
    assert summary.total_income == Decimal("0.00")
    assert summary.total_expense == Decimal("0.00")
    assert summary.balance == Decimal("0.00")


def test_balance_is_exact_to_the_cent(repos):
    for _ in range(10):
        make_transaction(repos, "0.10")
    make_transaction(repos, "0.30", type="EXPENSE")
    summary = summarize(repos.transactions.list())
    assert summary.total_income == Decimal("1.00")
    assert summary.total_expense == Decimal("0.30")
    assert summary.balance == Decimal("0.70")


def test_balance_can_be_negative(repos):
    make_transaction(repos, "100")
    make_transaction(repos, "250.50", type="EXPENSE")
    assert summarize(repos.transactions.list()).balance == Decimal("-150.50")


def test_period_scoped_summary(repos, sample_date):
    make_transaction(repos, "100", entry_date=sample_date)
    make_transaction(repos, "40", entry_date=date(2024, 3, 1))
    make_transaction(repos, "999", entry_date=date(2023, 3, 15))
    transactions = repos.transactions.list()

    day = summarize(apply_filters(transactions, [in_period("day", sample_date)]))
    month = summarize(apply_filters(transactions, [in_period("month", sample_date)]))
    year = summarize(apply_filters(transactions, [in_period("year", sample_date)]))
    assert day.total_income == Decimal("100.00")
    assert month.total_income == Decimal("140.00")
    assert year.total_income == Decimal("140.00")


def test_monthly_breakdown_has_twelve_rows(repos):
    make_transaction(repos, "100", entry_date=date(2024, 2, 10))
    make_transaction(repos, "30", type="EXPENSE", entry_date=date(2024, 2, 11))
    make_transaction(repos, "500", entry_date=date(2023, 2, 10))
    df = monthly_breakdown(repos.transactions.list(), 2024)
    assert len(df) == 12
    assert list(df.columns) == ["Mês", "Receitas", "Despesas"]
    assert df.loc[1, "Receitas"] == 100.0
    assert df.loc[1, "Despesas"] == 30.0
    assert df["Receitas"].sum() == 100.0


def test_daily_breakdown_only_days_with_entries(repos):
    make_transaction(repos, "10", entry_date=date(2024, 3, 5))
    make_transaction(repos, "5", entry_date=date(2024, 3, 5))
    make_transaction(repos, "7", type="EXPENSE", entry_date=date(2024, 3, 20))
    df = daily_breakdown(repos.transactions.list(), 2024, 3)
    assert list(df["Dia"]) == ["05", "20"]
    assert list(df["Entradas"]) == [15.0, 0.0]
    assert list(df["Saídas"]) == [0.0, 7.0]


def test_csv_export_lines_and_signs(repos):
    make_transaction(repos, "150.00", description="Venda O.S. #1", category="Vendas")
    make_transaction(repos, "80.5", type="EXPENSE", description="Conta de luz",
                     category="Custos Fixos", status="PENDING")
    make_transaction(repos, "20", description="Conserto, ajuste")
    transactions = repos.transactions.list()

    csv_text = export_transactions_csv(transactions)
    assert csv_text.startswith("\ufeff")
    lines = csv_text.lstrip("\ufeff").splitlines()
    assert len(lines) == len(transactions) + 1
    assert lines[0] == "Data,Descrição,Categoria,Método de Pagamento,Status,Tipo,Valor"
    expense_line = next(line for line in lines if "Conta de luz" in line)
    assert expense_line.endswith(",Pendente,Saída,-80.50")
    # Fields with commas are quoted
    assert '"Conserto, ajuste"' in csv_text


def test_csv_export_empty():
    csv_text = export_transactions_csv([])
    assert csv_text.lstrip("\ufeff").splitlines() == [
        "Data,Descrição,Categoria,Método de Pagamento,Status,Tipo,Valor"
    ]


def test_csv_filename():
    assert csv_filename(datetime(2024, 3, 5, 14, 7, 9)) == "relatorio-financeiro-2024-03-05-14-07-09.csv"


def test_format_brl():
    assert format_brl(Decimal("1234.5")) == "R$ 1.234,50"
    assert format_brl(Decimal("0")) == "R$ 0,00"
    assert format_brl(Decimal("-1000000.01")) == "-R$ 1.000.000,01"


def test_category_totals(repos):
    make_transaction(repos, "100", category="Vendas")
    make_transaction(repos, "300", type="EXPENSE", category="Fornecedores")
    make_transaction(repos, "50", category="Vendas")
    assert category_totals(repos.transactions.list()) == [
        ("Fornecedores", Decimal("-300.00")),
        ("Vendas", Decimal("150.00")),
    ]
