"""Léo Ótica ERP & CRM - Main Application Entry Point."""
import streamlit as st

from core.config import SHOP_NAME, configure_logging
from core.constants import (
    MENU_CASH_FLOW,
    MENU_CLIENTS,
    MENU_DASHBOARD,
    MENU_EMPLOYEES,
    MENU_FINANCIAL,
    MENU_INVENTORY,
    MENU_NEW_SALE,
    MENU_ORDERS,
)
from core.db_init import init_db
from core.mobile_styles import apply_mobile_styles
from core.repositories import build_repositories
from core.simple_auth import get_current_user, login_form, require_auth
from page_modules import (
    cash_flow,
    clients,
    dashboard,
    employees,
    financial,
    inventory,
    new_sale,
    service_orders,
)
from ui.components import show_flash
from ui.sidebar import render_sidebar_menu

configure_logging()

# Page configuration
st.set_page_config(
    page_title=f"{SHOP_NAME} - ERP & CRM",
    page_icon="\U0001F453",
    layout="wide",
)

apply_mobile_styles()


# Repositories are built once per process and injected into every page
@st.cache_resource
def get_repositories():
    return build_repositories(init_db())


repos = get_repositories()

# Check authentication
if not require_auth():
    login_form(repos.employees, SHOP_NAME)
    st.stop()

user = get_current_user()
show_flash()

menu = render_sidebar_menu(SHOP_NAME)

# Page routing
pages = {
    MENU_DASHBOARD: lambda: dashboard.render(repos),
    MENU_NEW_SALE: lambda: new_sale.render(repos),
    MENU_CASH_FLOW: lambda: cash_flow.render(repos),
    MENU_FINANCIAL: lambda: financial.render(repos),
    MENU_CLIENTS: lambda: clients.render(repos),
    MENU_ORDERS: lambda: service_orders.render(repos),
    MENU_INVENTORY: lambda: inventory.render(repos),
}

# Add admin-only pages
if user['is_admin']:
    pages[MENU_EMPLOYEES] = lambda: employees.render(repos)

# Render selected page
if menu not in pages:
    menu = MENU_DASHBOARD
pages[menu]()
