"""Financial page: yearly, monthly and daily views with CSV export."""
from datetime import datetime

import plotly.express as px
import streamlit as st

from core.config import SHOP_TZ
from core.constants import TRANSACTION_STATUSES, TRANSACTION_TYPES
from core.errors import OticaError
from core.filters import apply_filters, equals, in_period
from core.finance import (
    MONTHS,
    category_totals,
    csv_filename,
    daily_breakdown,
    export_transactions_csv,
    format_brl,
    monthly_breakdown,
    summarize,
    transactions_frame,
)
from core.services import today

VIEWS = {"year": "Ano", "month": "Mês", "day": "Dia"}


def _period_controls(current_day):
    col1, col2, col3 = st.columns(3)
    view = col1.radio("Visão", list(VIEWS), format_func=VIEWS.get, horizontal=True, key="fin_view")
    if view == "day":
        ref_date = col2.date_input("Dia", value=current_day, format="DD/MM/YYYY", key="fin_day")
        return view, ref_date
    year = col2.number_input("Ano", min_value=2000, max_value=2100, step=1,
                             value=current_day.year, key="fin_year")
    month = current_day.month
    if view == "month":
        month = col3.selectbox(
            "Mês", list(range(1, 13)), index=current_day.month - 1,
            format_func=lambda m: MONTHS[m - 1], key="fin_month",
        )
    return view, current_day.replace(year=int(year), month=month, day=1)


def _chart(view, ref_date, period_tx):
    if view == "year":
        chart_df = monthly_breakdown(period_tx, ref_date.year)
        x, series = "Mês", ["Receitas", "Despesas"]
    elif view == "month":
        chart_df = daily_breakdown(period_tx, ref_date.year, ref_date.month)
        x, series = "Dia", ["Entradas", "Saídas"]
    else:
        rows = category_totals(period_tx)
        if not rows:
            return
        fig = px.bar(
            {"Categoria": [c for c, _ in rows], "Valor": [float(v) for _, v in rows]},
            x="Categoria", y="Valor", labels={"Valor": "R$"},
        )
        st.plotly_chart(fig, width="stretch")
        return
    if chart_df.empty or not chart_df[series].to_numpy().any():
        st.info("Sem dados para o gráfico")
        return
    fig = px.bar(
        chart_df, x=x, y=series, barmode="group",
        color_discrete_sequence=["#0d9488", "#dc2626"],
        labels={"value": "R$", "variable": ""},
    )
    st.plotly_chart(fig, width="stretch")


def render(repos):
    """Render the financial page."""
    st.header("\U0001F4B2 Financeiro")
    try:
        transactions = repos.transactions.list()
        categories = repos.transactions.categories()
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    view, ref_date = _period_controls(today())
    period_tx = apply_filters(transactions, [in_period(view, ref_date)])

    summary = summarize(period_tx)
    col1, col2, col3 = st.columns(3)
    col1.metric("Receitas", format_brl(summary.total_income))
    col2.metric("Despesas", format_brl(summary.total_expense))
    col3.metric("Saldo", format_brl(summary.balance))

    _chart(view, ref_date, period_tx)

    st.subheader("\U0001F4C4 Lançamentos")
    col1, col2, col3 = st.columns(3)
    type_options = {"all": "Todos", **TRANSACTION_TYPES}
    status_options = {"all": "Todos", **TRANSACTION_STATUSES}
    entry_type = col1.selectbox("Tipo", list(type_options), format_func=type_options.get, key="fin_type")
    category = col2.selectbox("Categoria", ["all"] + categories,
                              format_func=lambda c: "Todas" if c == "all" else c, key="fin_category")
    status = col3.selectbox("Status", list(status_options), format_func=status_options.get, key="fin_status")

    shown = apply_filters(period_tx, [
        equals("type", entry_type),
        equals("category", category, case_sensitive=False),
        equals("status", status),
    ])
    if not shown:
        st.info("Nenhum lançamento encontrado")
        st.warning("⚠️ Nenhum dado para exportar.")
    else:
        st.dataframe(transactions_frame(shown), width="stretch", hide_index=True)
        st.download_button(
            "⬇️ Exportar CSV",
            data=export_transactions_csv(shown).encode("utf-8"),
            file_name=csv_filename(datetime.now(SHOP_TZ)),
            mime="text/csv",
        )
