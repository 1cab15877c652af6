"""Dashboard page with the day's cash position and order pipeline."""
import plotly.express as px
import streamlit as st

from core.constants import MENU_ORDERS, ORDER_STATUS_FLOW, ORDER_STATUS_LABELS
from core.errors import OticaError
from core.filters import apply_filters, in_period
from core.finance import daily_breakdown, format_brl, summarize
from core.services import today
from ui.components import render_orders_table
from ui.sidebar import navigate


def render(repos):
    """Render the dashboard page."""
    st.header("\U0001F4CA Dashboard Executivo")
    current_day = today()
    try:
        transactions = repos.transactions.list()
        orders = repos.orders.list()
        products = repos.products.list()
        client_count = len(repos.clients.list())
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    day_summary = summarize(apply_filters(transactions, [in_period("day", current_day)]))
    month_tx = apply_filters(transactions, [in_period("month", current_day)])
    month_summary = summarize(month_tx)

    open_orders = [o for o in orders if not o.is_delivered]
    ready_orders = [o for o in orders if o.status == "READY"]
    low_stock = [p for p in products if p.is_low_stock]

    # Row 1: cash position
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Receita do Dia", format_brl(day_summary.total_income))
    col2.metric("Despesas do Dia", format_brl(day_summary.total_expense))
    col3.metric("Saldo do Dia", format_brl(day_summary.balance))
    col4.metric("Saldo do Mês", format_brl(month_summary.balance))

    # Row 2: operations
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("O.S. em Aberto", len(open_orders))
    col2.metric("Prontas p/ Entrega", len(ready_orders))
    col3.metric("Estoque Baixo", len(low_stock))
    col4.metric("Clientes", client_count)

    st.markdown("---")

    left, right = st.columns(2)
    with left:
        st.subheader("\U0001F4B0 Fluxo de Caixa do Mês")
        chart_df = daily_breakdown(month_tx, current_day.year, current_day.month)
        if chart_df.empty:
            st.info("Nenhum lançamento neste mês")
        else:
            fig = px.bar(
                chart_df,
                x="Dia",
                y=["Entradas", "Saídas"],
                barmode="group",
                color_discrete_sequence=["#0d9488", "#dc2626"],
                labels={"value": "R$", "variable": ""},
            )
            st.plotly_chart(fig, width="stretch")

    with right:
        st.subheader("\U0001F6E0️ Funil de Produção")
        counts = {status: 0 for status in ORDER_STATUS_FLOW}
        for order in orders:
            counts[order.status] = counts.get(order.status, 0) + 1
        funnel = {
            "Etapa": [ORDER_STATUS_LABELS[s] for s in ORDER_STATUS_FLOW],
            "O.S.": [counts[s] for s in ORDER_STATUS_FLOW],
        }
        if not orders:
            st.info("Nenhuma ordem de serviço")
        else:
            fig = px.funnel(funnel, x="O.S.", y="Etapa")
            st.plotly_chart(fig, width="stretch")

    # Recent orders
    st.subheader("\U0001F4CB Ordens Recentes")
    render_orders_table(orders[:4])
    if st.button("Ver todas ➡️", key="dashboard_all_orders"):
        navigate(MENU_ORDERS)
