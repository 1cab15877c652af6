"""Cash-flow entry page: record income/expenses and review the day or month."""
import streamlit as st

from core.constants import (
    DEFAULT_TRANSACTION_CATEGORY,
    PAYMENT_METHODS,
    TRANSACTION_CATEGORIES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
)
from core.errors import OticaError
from core.filters import apply_filters, equals, in_period
from core.finance import format_brl, summarize
from core.services import today
from ui.components import confirm_action, flash

PERIODS = {"day": "Dia", "month": "Mês"}


def _entry_form(repos, categories):
    with st.form("cash_entry_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        entry_type = col1.radio(
            "Tipo", list(TRANSACTION_TYPES), format_func=TRANSACTION_TYPES.get, horizontal=True
        )
        entry_date = col2.date_input("Data", value=today(), format="DD/MM/YYYY")
        amount = col3.number_input("Valor (R$)", min_value=0.0, step=0.01, format="%.2f")
        description = st.text_input("Descrição *", placeholder="Ex: Conta de luz")
        col1, col2, col3 = st.columns(3)
        category = col1.selectbox(
            "Categoria",
            categories,
            index=categories.index(DEFAULT_TRANSACTION_CATEGORY),
        )
        payment_method = col2.selectbox(
            "Forma de pagamento", list(PAYMENT_METHODS), format_func=PAYMENT_METHODS.get,
            index=list(PAYMENT_METHODS).index("CASH"),
        )
        status = col3.selectbox(
            "Status", list(TRANSACTION_STATUSES), format_func=TRANSACTION_STATUSES.get
        )
        submitted = st.form_submit_button("✅ Lançar")
    if submitted:
        try:
            repos.transactions.create(
                description=description,
                amount=f"{amount:.2f}" if amount else "",
                type=entry_type,
                category=category,
                date=entry_date,
                payment_method=payment_method,
                status=status,
            )
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            flash("Lançamento registrado.")
            st.rerun()


def render(repos):
    """Render the cash-flow entry page."""
    st.header("\U0001F45B Lançar Caixa")
    try:
        transactions = repos.transactions.list()
        categories = sorted(
            set(TRANSACTION_CATEGORIES) | set(repos.transactions.categories()), key=str.casefold
        )
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    with st.expander("➕ Novo lançamento", expanded=True):
        _entry_form(repos, categories)

    # Filters
    col1, col2, col3, col4 = st.columns(4)
    period = col1.radio("Período", list(PERIODS), format_func=PERIODS.get, horizontal=True)
    ref_date = col2.date_input("Referência", value=today(), format="DD/MM/YYYY", key="cash_ref_date")
    type_options = {"all": "Todos", **TRANSACTION_TYPES}
    entry_type = col3.selectbox("Tipo", list(type_options), format_func=type_options.get)
    category = col4.selectbox("Categoria", ["all"] + categories,
                              format_func=lambda c: "Todas" if c == "all" else c)

    shown = apply_filters(transactions, [
        in_period(period, ref_date),
        equals("type", entry_type),
        equals("category", category, case_sensitive=False),
    ])
    summary = summarize(shown)
    col1, col2, col3 = st.columns(3)
    col1.metric("Entradas", format_brl(summary.total_income))
    col2.metric("Saídas", format_brl(summary.total_expense))
    col3.metric("Saldo", format_brl(summary.balance))

    st.markdown("---")
    if not shown:
        st.info("Nenhum lançamento no período")
        return

    for t in shown:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        icon = "\U0001F7E2" if t.is_income else "\U0001F534"
        col1.write(f"{icon} **{t.description}**")
        col1.caption(f"{t.date.strftime('%d/%m/%Y')} · {t.category} · {t.payment_method_label}")
        col2.write(format_brl(t.signed_amount))
        col3.caption(t.status_label)
        with col4:
            if confirm_action(
                "\U0001F5D1️",
                key=f"tx_delete_{t.id}",
                prompt=f"Excluir o lançamento \"{t.description}\"?",
            ):
                try:
                    repos.transactions.delete(t.id)
                except OticaError as e:
                    st.error(f"❌ {e}")
                else:
                    flash("Lançamento removido.", icon="\U0001F5D1️")
                    st.rerun()
