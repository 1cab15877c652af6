"""Service orders page: pipeline tracking, edits and PDF export."""
import streamlit as st

from core.config import SHOP_NAME
from core.constants import ORDER_STATUS_FLOW, ORDER_STATUS_LABELS
from core.errors import OticaError
from core.filters import apply_filters, equals
from core.finance import format_brl
from core.orders import advance, export_orders_pdf, next_status
from core.services import today
from ui.components import confirm_action, flash, status_badge

STATUS_FILTER = {"all": "Todos os Status", **ORDER_STATUS_LABELS}


def matches_order(term: str):
    """Search by client name or order number ("#12" or "12")."""
    needle = (term or "").strip().casefold()
    if not needle:
        return lambda order: True
    number = needle.lstrip("#")

    def predicate(order):
        return needle in order.client_name.casefold() or (number.isdigit() and int(number) == order.id)

    return predicate


def _prescription_text(prescription) -> str:
    if not prescription:
        return ""
    parts = []
    for eye in ("od", "oe"):
        values = prescription.get(eye) or {}
        filled = ", ".join(f"{k}: {v}" for k, v in values.items() if v)
        if filled:
            parts.append(f"{eye.upper()} ({filled})")
    return " · ".join(parts)


def _edit_form(repos, order):
    with st.form(f"order_edit_{order.id}"):
        col1, col2 = st.columns(2)
        client_name = col1.text_input("Cliente", value=order.client_name)
        delivery_date = col2.date_input(
            "Previsão de entrega", value=order.delivery_date, format="DD/MM/YYYY"
        )
        items = st.text_area("Itens (separados por vírgula)", value=", ".join(order.items), height=80)
        total_value = st.number_input(
            "Valor total (R$)", min_value=0.0, step=0.01, format="%.2f",
            value=float(order.total_value),
        )
        submitted = st.form_submit_button("\U0001F4BE Salvar alterações")
    if submitted:
        try:
            repos.orders.update(
                order.id,
                client_name=client_name,
                delivery_date=delivery_date,
                items=items,
                total_value=f"{total_value:.2f}",
            )
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            flash(f"O.S. #{order.id} atualizada.")
            st.rerun()


def _order_card(repos, order):
    with st.container():
        col1, col2, col3 = st.columns([4, 2, 2])
        col1.write(f"**#{order.id} · {order.client_name}**")
        col1.caption(", ".join(order.items) or "Sem itens")
        rx = _prescription_text(order.prescription)
        if rx:
            col1.caption(f"Receita: {rx}")
        col2.markdown(status_badge(order), unsafe_allow_html=True)
        col2.caption(
            "Entrega: " + (order.delivery_date.strftime("%d/%m/%Y") if order.delivery_date else "-")
        )
        if order.delivery_date and not order.is_delivered and order.delivery_date < today():
            col2.caption("⚠️ Atrasada")
        col3.write(format_brl(order.total_value))
        if not order.is_delivered:
            target = ORDER_STATUS_LABELS[next_status(order.status)]
            if col3.button(f"➡️ {target}", key=f"order_advance_{order.id}"):
                try:
                    advance(repos, order.id)
                except OticaError as e:
                    st.error(f"❌ {e}")
                else:
                    flash(f"O.S. #{order.id}: {target}")
                    st.rerun()
        with st.expander("✏️ Editar / Excluir"):
            _edit_form(repos, order)
            if confirm_action(
                "\U0001F5D1️ Excluir O.S.",
                key=f"order_delete_{order.id}",
                prompt=f"Tem certeza que deseja excluir a O.S. #{order.id}?",
            ):
                try:
                    repos.orders.delete(order.id)
                except OticaError as e:
                    st.error(f"❌ {e}")
                else:
                    flash(f"O.S. #{order.id} removida.", icon="\U0001F5D1️")
                    st.rerun()
        st.divider()


def render(repos):
    """Render the service orders page."""
    st.header("\U0001F4CB Ordens de Serviço")
    try:
        all_orders = repos.orders.list()
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    col1, col2 = st.columns([3, 2])
    search = col1.text_input("Buscar por cliente ou nº da O.S.")
    status = col2.selectbox("Status", list(STATUS_FILTER), format_func=STATUS_FILTER.get)
    orders = apply_filters(all_orders, [matches_order(search), equals("status", status)])

    counts = {s: sum(1 for o in all_orders if o.status == s) for s in ORDER_STATUS_FLOW}
    st.caption(" · ".join(f"{ORDER_STATUS_LABELS[s]}: {counts[s]}" for s in ORDER_STATUS_FLOW))

    if not orders:
        st.info("Nenhuma ordem encontrada")
        return

    with st.expander("\U0001F5A8️ Exportar PDF"):
        options = {o.id: o for o in orders}
        selected = st.multiselect(
            "Ordens",
            list(options),
            format_func=lambda oid: f"#{oid} - {options[oid].client_name}",
            key="orders_pdf_select",
        )
        if selected:
            st.download_button(
                "⬇️ Baixar PDF",
                data=export_orders_pdf([options[oid] for oid in selected], SHOP_NAME),
                file_name="ordens-de-servico.pdf",
                mime="application/pdf",
            )
        else:
            st.caption("Selecione ao menos uma ordem")

    for order in orders:
        _order_card(repos, order)
