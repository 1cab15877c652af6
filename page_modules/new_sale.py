"""New sale / service order page: client, prescription, cart and checkout."""
import streamlit as st
from streamlit_free_text_select import st_free_text_select

from core.constants import PAYMENT_METHODS
from core.errors import OticaError
from core.filters import apply_filters, text_search
from core.finance import format_brl
from core.models import CartItem
from core.orders import cart_total, finalize_sale
from core.services import today

EYES = {"od": "OD (Direito)", "oe": "OE (Esquerdo)"}
PRESCRIPTION_FIELDS = {
    "sph": "Esférico",
    "cyl": "Cilíndrico",
    "axis": "Eixo",
    "add": "Adição",
    "dnp": "DNP",
}


def _cart() -> dict:
    """Cart kept across reruns as {product_id: qty}."""
    return st.session_state.setdefault("sale_cart", {})


def _reset_sale():
    for key in list(st.session_state):
        if key.startswith(("sale_", "rx_")):
            del st.session_state[key]


def _client_section(clients):
    """Pick an existing client or type a new name; returns (client, name, phone, address)."""
    st.subheader("1. Cliente")
    by_name = {c.name: c for c in clients}
    picked = st_free_text_select(
        "Cliente",
        sorted(by_name, key=str.casefold),
        key="sale_client",
        placeholder="Buscar cliente ou digitar novo nome",
    )
    picked = (picked or "").strip()
    client = next((c for n, c in by_name.items() if n.lower() == picked.lower()), None)
    col1, col2 = st.columns(2)
    phone = col1.text_input(
        "Telefone",
        value=client.phone if client else "",
        key=f"sale_phone_{client.id if client else 'new'}",
        disabled=client is not None,
    )
    address = col2.text_input(
        "Endereço",
        value=client.address if client else "",
        key=f"sale_address_{client.id if client else 'new'}",
    )
    return client, picked, phone, address


def _prescription_section():
    st.subheader("2. Receita")
    prescription = {}
    header = st.columns([2] + [1] * len(PRESCRIPTION_FIELDS))
    header[0].write("")
    for col, label in zip(header[1:], PRESCRIPTION_FIELDS.values()):
        col.caption(label)
    for eye, eye_label in EYES.items():
        cols = st.columns([2] + [1] * len(PRESCRIPTION_FIELDS))
        cols[0].write(f"**{eye_label}**")
        values = {}
        for col, field in zip(cols[1:], PRESCRIPTION_FIELDS):
            values[field] = col.text_input(
                PRESCRIPTION_FIELDS[field],
                key=f"rx_{eye}_{field}",
                label_visibility="collapsed",
            ).strip()
        if any(values.values()):
            prescription[eye] = values
    return prescription or None


def _cart_section(products):
    st.subheader("3. Produtos")
    cart = _cart()
    by_id = {p.id: p for p in products}

    search = st.text_input("Buscar produto por nome ou SKU", key="sale_product_search")
    available = apply_filters(products, [text_search(search, "name", "sku")])
    if available:
        col1, col2, col3 = st.columns([4, 1, 1])
        selected_id = col1.selectbox(
            "Produto",
            [p.id for p in available],
            format_func=lambda pid: (
                f"{by_id[pid].name} ({by_id[pid].sku}) - "
                f"{format_brl(by_id[pid].sale_price)} · estoque {by_id[pid].stock}"
            ),
            key="sale_product_select",
        )
        qty = col2.number_input("Qtd", min_value=1, step=1, value=1, key="sale_product_qty")
        col3.write("")
        if col3.button("➕ Adicionar", key="sale_add_product"):
            # Same product added twice merges into one line
            cart[selected_id] = cart.get(selected_id, 0) + int(qty)
            st.rerun()
    else:
        st.info("Nenhum produto encontrado")

    items = [CartItem(by_id[pid], qty) for pid, qty in cart.items() if pid in by_id]
    if not items:
        st.caption("Carrinho vazio")
        return items

    for item in items:
        col1, col2, col3, col4 = st.columns([4, 1, 2, 1])
        col1.write(item.product.name)
        col2.write(f"{item.qty}x")
        col3.write(format_brl(item.subtotal))
        if col4.button("\U0001F5D1️", key=f"sale_remove_{item.product.id}"):
            cart.pop(item.product.id, None)
            st.rerun()
    return items


def _success_screen():
    order_id, total = st.session_state["sale_done"]
    st.success(f"✅ Venda finalizada! O.S. #{order_id} criada.")
    st.metric("Total", format_brl(total))
    if st.button("\U0001F6D2 Nova venda", key="sale_new"):
        _reset_sale()
        st.rerun()


def render(repos):
    """Render the new sale page."""
    st.header("\U0001F6D2 Nova Venda / O.S.")
    if st.session_state.get("sale_done"):
        _success_screen()
        return

    try:
        clients = repos.clients.list()
        products = repos.products.list()
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    client, client_name, phone, address = _client_section(clients)
    prescription = _prescription_section()
    items = _cart_section(products)

    st.subheader("4. Pagamento")
    total = cart_total(items)
    col1, col2, col3 = st.columns(3)
    col1.metric("Total", format_brl(total))
    payment_method = col2.selectbox(
        "Forma de pagamento",
        list(PAYMENT_METHODS),
        format_func=PAYMENT_METHODS.get,
        key="sale_payment_method",
    )
    delivery_date = col3.date_input("Previsão de entrega", value=None, format="DD/MM/YYYY")

    if st.button("✅ Finalizar Venda", type="primary", disabled=not items, key="sale_finalize"):
        # Client changes are saved with the sale, never on their own
        client_fields = None
        if client is not None:
            client_fields = {"address": address, "last_visit": today()}
        elif client_name and phone.strip():
            client_fields = {"name": client_name, "phone": phone, "address": address}
        try:
            order, _income = finalize_sale(
                repos,
                items,
                client_id=client.id if client else None,
                client_name=client.name if client else client_name,
                payment_method=payment_method,
                prescription=prescription,
                delivery_date=delivery_date,
                client_fields=client_fields,
            )
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            st.session_state.pop("sale_cart", None)
            st.session_state["sale_done"] = (order.id, order.total_value)
            st.rerun()
