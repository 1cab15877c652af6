"""Reusable UI components."""
from typing import List, Sequence

import pandas as pd
import streamlit as st

from core.finance import format_brl
from core.models import Product, ServiceOrder

STATUS_COLORS = {
    "PENDING": "#64748b",
    "LAB_SENT": "#1d4ed8",
    "ASSEMBLY": "#a16207",
    "QA": "#7e22ce",
    "READY": "#15803d",
    "DELIVERED": "#0f766e",
}


def flash(message: str, icon: str = "✅") -> None:
    """Queue a toast to show after the next rerun."""
    st.session_state.setdefault("_flash", []).append((message, icon))


def show_flash() -> None:
    for message, icon in st.session_state.pop("_flash", []):
        st.toast(message, icon=icon)


def confirm_action(label: str, key: str, prompt: str) -> bool:
    """Two-step destructive button: returns True only after the user confirms.

    The first click arms the confirmation and reruns; the prompt then shows
    "Confirmar"/"Cancelar" in place of the original button.
    """
    pending_key = f"_confirm_{key}"
    if st.session_state.get(pending_key):
        st.warning(prompt)
        col_yes, col_no = st.columns(2)
        if col_yes.button("Confirmar", key=f"{pending_key}_yes", type="primary"):
            st.session_state[pending_key] = False
            return True
        if col_no.button("Cancelar", key=f"{pending_key}_no"):
            st.session_state[pending_key] = False
            st.rerun()
        return False
    if st.button(label, key=key):
        st.session_state[pending_key] = True
        st.rerun()
    return False


def status_badge(order: ServiceOrder) -> str:
    color = STATUS_COLORS.get(order.status, "#64748b")
    return (
        f"<span class='status-badge' style='background:{color}'>"
        f"{order.status_label}</span>"
    )


def products_frame(products: Sequence[Product]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "SKU": p.sku,
                "Produto": p.name,
                "Tipo": p.category_label,
                "Marca": p.brand,
                "Estoque": p.stock,
                "Mínimo": p.min_stock,
                "Custo": format_brl(p.cost_price),
                "Preço": format_brl(p.sale_price),
                "Estoque baixo": "⚠️" if p.is_low_stock else "",
            }
            for p in products
        ]
    )


def render_products_table(products: List[Product]) -> None:
    """Render products with the low-stock marker."""
    if not products:
        st.info("Nenhum produto encontrado")
        return
    st.dataframe(products_frame(products), width="stretch", hide_index=True)


def render_orders_table(orders: List[ServiceOrder]) -> None:
    if not orders:
        st.info("Nenhuma ordem encontrada")
        return
    display_df = pd.DataFrame(
        [
            {
                "O.S.": f"#{o.id}",
                "Cliente": o.client_name,
                "Status": o.status_label,
                "Valor": format_brl(o.total_value),
                "Entrega": o.delivery_date.strftime("%d/%m/%Y") if o.delivery_date else "-",
            }
            for o in orders
        ]
    )
    st.dataframe(display_df, width="stretch", hide_index=True)
