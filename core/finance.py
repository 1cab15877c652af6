"""Cash-flow totals, chart series and the CSV report."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Sequence

import pandas as pd

from core.constants import CSV_HEADER
from core.models import Transaction

ZERO = Decimal("0.00")

MONTHS = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]
MONTH_ABBR = [m[:3] for m in MONTHS]


@dataclass(frozen=True)
class FinancialSummary:
    total_income: Decimal
    total_expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense


def summarize(transactions: Iterable[Transaction]) -> FinancialSummary:
    """Exact income/expense totals; an empty collection gives zeros."""
    income = ZERO
    expense = ZERO
    for t in transactions:
        if t.is_income:
            income += t.amount
        else:
            expense += t.amount
    return FinancialSummary(total_income=income, total_expense=expense)


def monthly_breakdown(transactions: Iterable[Transaction], year: int) -> pd.DataFrame:
    """Income and expense per month of ``year`` (12 rows, zeros included)."""
    rows = {m: [ZERO, ZERO] for m in range(1, 13)}
    for t in transactions:
        if t.date.year != year:
            continue
        rows[t.date.month][0 if t.is_income else 1] += t.amount
    return pd.DataFrame(
        {
            "Mês": MONTH_ABBR,
            "Receitas": [float(rows[m][0]) for m in range(1, 13)],
            "Despesas": [float(rows[m][1]) for m in range(1, 13)],
        }
    )


def daily_breakdown(transactions: Iterable[Transaction], year: int, month: int) -> pd.DataFrame:
    """Income and expense per day for the days of ``year``/``month`` with entries."""
    rows = {}
    for t in transactions:
        if (t.date.year, t.date.month) != (year, month):
            continue
        totals = rows.setdefault(t.date.day, [ZERO, ZERO])
        totals[0 if t.is_income else 1] += t.amount
    days = sorted(rows)
    return pd.DataFrame(
        {
            "Dia": [f"{d:02d}" for d in days],
            "Entradas": [float(rows[d][0]) for d in days],
            "Saídas": [float(rows[d][1]) for d in days],
        }
    )


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Rows as they appear in the report (amounts signed, labels translated)."""
    return pd.DataFrame(
        [
            [
                t.date.isoformat(),
                t.description,
                t.category,
                t.payment_method_label,
                t.status_label,
                t.type_label,
                f"{t.signed_amount:.2f}",
            ]
            for t in transactions
        ],
        columns=CSV_HEADER,
    )


def export_transactions_csv(transactions: Sequence[Transaction]) -> str:
    """CSV text with a UTF-8 BOM so spreadsheet apps detect the encoding."""
    csv_text = transactions_frame(transactions).to_csv(index=False, lineterminator="\n")
    return "\ufeff" + csv_text


def csv_filename(now: datetime) -> str:
    return f"relatorio-financeiro-{now:%Y-%m-%d}-{now:%H-%M-%S}.csv"


def format_brl(value: Decimal) -> str:
    """Display-only formatting: ``R$ 1.234,56``."""
    sign = "-" if value < 0 else ""
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def category_totals(transactions: Iterable[Transaction]) -> List[tuple]:
    """(category, signed total) pairs, largest absolute value first."""
    totals = {}
    for t in transactions:
        totals[t.category] = totals.get(t.category, ZERO) + t.signed_amount
    return sorted(totals.items(), key=lambda kv: abs(kv[1]), reverse=True)
