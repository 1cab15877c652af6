"""Inventory page: search, low-stock filter, product form and Excel export."""
from decimal import Decimal
from io import BytesIO

import pandas as pd
import streamlit as st
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table as XlTable, TableStyleInfo as XlTableStyleInfo
from streamlit_free_text_select import st_free_text_select

from core.constants import MIN_STOCK_DEFAULT, PRODUCT_CATEGORIES
from core.errors import OticaError
from core.filters import apply_filters, equals, low_stock_only, text_search
from core.finance import format_brl
from ui.components import confirm_action, flash, products_frame, render_products_table

CATEGORY_FILTER = {"all": "Todos os Tipos", **PRODUCT_CATEGORIES}


def _brand_input(products, key: str) -> str:
    """Brand input with suggestions from existing products."""
    existing_brands = sorted({p.brand for p in products if p.brand}, key=str.casefold)
    brand_input = st_free_text_select(
        "Marca",
        existing_brands,
        key=key,
        placeholder="Digite para buscar ou adicionar",
    )
    brand_input = (brand_input or "").strip()
    brand_match = next(
        (b for b in existing_brands if b.lower() == brand_input.lower()),
        None,
    )
    return brand_match if brand_match else brand_input


def _export_excel(products) -> bytes:
    export_df = products_frame(products).drop(columns=["Estoque baixo"])
    export_df["Custo"] = [float(p.cost_price) for p in products]
    export_df["Preço"] = [float(p.sale_price) for p in products]
    excel_buf = BytesIO()
    with pd.ExcelWriter(excel_buf, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name="estoque")
        ws = writer.sheets["estoque"]
        max_col = len(export_df.columns)
        max_row = len(export_df) + 1
        last_col = get_column_letter(max_col)
        table = XlTable(displayName="Estoque", ref=f"A1:{last_col}{max_row}")
        table.tableStyleInfo = XlTableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)
        for idx, col_name in enumerate(export_df.columns, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = max(12, len(str(col_name)) + 2)
    return excel_buf.getvalue()


def _product_form(repos, all_products, product=None):
    """Create form when ``product`` is None, edit form otherwise."""
    form_key = f"product_form_{product.id if product else 'new'}"
    brand = _brand_input(all_products, key=f"{form_key}_brand")
    if not brand and product:
        # Empty picker on edit keeps the current brand
        brand = product.brand
        st.caption(f"Marca atual: {product.brand or '-'}")
    categories = list(PRODUCT_CATEGORIES)
    with st.form(form_key, clear_on_submit=product is None):
        col1, col2 = st.columns(2)
        name = col1.text_input("Nome do produto *", value=product.name if product else "")
        sku = col2.text_input(
            "SKU",
            value=product.sku if product else "",
            placeholder="Gerado automaticamente se vazio",
            help="Deve ser único na loja",
        )
        category = col1.selectbox(
            "Tipo",
            categories,
            index=categories.index(product.category) if product else 0,
            format_func=PRODUCT_CATEGORIES.get,
        )
        sale_price = col2.number_input(
            "Preço de venda (R$)", min_value=0.0, step=0.01, format="%.2f",
            value=float(product.sale_price) if product else 0.0,
        )
        cost_price = col1.number_input(
            "Preço de custo (R$)", min_value=0.0, step=0.01, format="%.2f",
            value=float(product.cost_price) if product else 0.0,
        )
        stock = col2.number_input(
            "Estoque atual", min_value=0, step=1, value=product.stock if product else 0
        )
        min_stock = col1.number_input(
            "Estoque mínimo", min_value=0, step=1,
            value=product.min_stock if product else MIN_STOCK_DEFAULT,
        )
        submitted = st.form_submit_button("\U0001F4BE Salvar" if product else "✅ Cadastrar produto")

    if submitted:
        fields = dict(
            name=name,
            sku=sku,
            category=category,
            brand=brand,
            # number_input gives floats; format to keep the typed cents exact
            sale_price=f"{sale_price:.2f}",
            cost_price=f"{cost_price:.2f}",
            stock=int(stock),
            min_stock=int(min_stock),
        )
        try:
            if product:
                saved = repos.products.update(product.id, **fields)
            else:
                saved = repos.products.create(**fields)
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            flash(f"Produto \"{saved.name}\" salvo.")
            st.rerun()


def render(repos):
    """Render the inventory page."""
    st.header("\U0001F4E6 Estoque")
    try:
        all_products = repos.products.list()
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    low_count = sum(1 for p in all_products if p.is_low_stock)
    stock_value = sum((p.sale_price * p.stock for p in all_products), Decimal("0.00"))
    col1, col2, col3 = st.columns(3)
    col1.metric("Produtos", len(all_products))
    col2.metric("Estoque Baixo", low_count)
    col3.metric("Valor em Estoque", format_brl(stock_value))

    # Filters
    col1, col2, col3 = st.columns([3, 2, 1])
    search = col1.text_input("Buscar por nome ou SKU")
    category = col2.selectbox(
        "Tipo", list(CATEGORY_FILTER), format_func=CATEGORY_FILTER.get
    )
    col3.write("")
    only_low = col3.checkbox("Só estoque baixo")

    products = apply_filters(all_products, [
        text_search(search, "name", "sku"),
        equals("category", category),
        low_stock_only(only_low),
    ])
    render_products_table(products)

    tab_new, tab_edit, tab_export = st.tabs(
        ["➕ Novo Produto", "✏️ Editar / Excluir", "⬇️ Exportar"]
    )
    with tab_new:
        _product_form(repos, all_products)

    with tab_edit:
        if not products:
            st.info("Nenhum produto para editar")
        else:
            options = {p.id: p for p in products}
            selected_id = st.selectbox(
                "Produto",
                list(options),
                format_func=lambda pid: f"{options[pid].name} ({options[pid].sku})",
                key="inventory_edit_select",
            )
            product = options[selected_id]
            _product_form(repos, all_products, product)
            if confirm_action(
                "\U0001F5D1️ Excluir produto",
                key=f"product_delete_{product.id}",
                prompt=f"Tem certeza que deseja excluir \"{product.name}\"? Esta ação não pode ser desfeita.",
            ):
                try:
                    repos.products.delete(product.id)
                except OticaError as e:
                    st.error(f"❌ {e}")
                else:
                    flash(f"Produto \"{product.name}\" removido.", icon="\U0001F5D1️")
                    st.rerun()

    with tab_export:
        if products:
            st.download_button(
                "Exportar para Excel",
                data=_export_excel(products),
                file_name="estoque.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
        else:
            st.info("Nada para exportar com os filtros atuais")
