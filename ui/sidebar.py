"""Sidebar navigation and current user box."""
import streamlit as st

from core.constants import (
    EMPLOYEE_ROLES,
    MENU_CASH_FLOW,
    MENU_CLIENTS,
    MENU_DASHBOARD,
    MENU_EMPLOYEES,
    MENU_FINANCIAL,
    MENU_INVENTORY,
    MENU_NEW_SALE,
    MENU_ORDERS,
)
from core.simple_auth import get_current_user, logout


def menu_for(user: dict) -> list:
    """Sections visible to ``user``; employee management is admin only."""
    menu = [
        MENU_DASHBOARD,
        MENU_NEW_SALE,
        MENU_CASH_FLOW,
        MENU_FINANCIAL,
        MENU_CLIENTS,
        MENU_ORDERS,
        MENU_INVENTORY,
    ]
    if user.get("is_admin"):
        menu.append(MENU_EMPLOYEES)
    return menu


def render_sidebar_menu(shop_name: str) -> str:
    """Render the navigation menu with user info and logout."""
    user = get_current_user()
    menu = menu_for(user)

    st.sidebar.markdown(f"## \U0001F453 {shop_name}")
    # Pages may request a jump (e.g. dashboard "ver todas") before the radio renders
    requested = st.session_state.pop("navigate_to", None)
    if requested in menu:
        st.session_state.menu_selection = requested
    if st.session_state.get("menu_selection") not in menu:
        st.session_state.menu_selection = menu[0]
    selected = st.sidebar.radio("Menu", menu, key="menu_selection", label_visibility="collapsed")

    st.sidebar.markdown("---")
    initials = (user.get("name") or "US")[:2].upper()
    st.sidebar.markdown(f"**{initials}** · {user.get('name')}")
    st.sidebar.caption(EMPLOYEE_ROLES.get(user.get("role"), user.get("role") or ""))
    if st.sidebar.button("\U0001F6AA Sair", key="sidebar_logout"):
        logout()
        st.rerun()

    return selected


def navigate(menu_label: str) -> None:
    """Switch section on the next rerun."""
    st.session_state["navigate_to"] = menu_label
    st.rerun()
