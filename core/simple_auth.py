"""Login gate: credential check against the employee store and session state."""
import logging
from typing import Dict, Optional, Tuple

import streamlit as st

from core.errors import OticaError
from core.repositories import EmployeeRepository
from core.services import hash_password

logger = logging.getLogger(__name__)


def get_bootstrap_users() -> Dict[str, dict]:
    """Get bootstrap admin accounts from secrets.toml (used for initial access)."""
    try:
        if 'users' in st.secrets:
            return {key: dict(value) for key, value in st.secrets['users'].items()}
    except FileNotFoundError:
        pass
    except Exception:
        logger.exception("Failed to read bootstrap users from secrets")
    return {}


def verify_login(
    employees: EmployeeRepository,
    username: str,
    password: str,
    bootstrap_users: Optional[Dict[str, dict]] = None,
) -> Tuple[bool, Optional[str], Optional[str]]:
    """Verify credentials against bootstrap users, then the employee table.
    Returns: (success, display name, role)
    """
    username = (username or "").strip()
    if not username or not password:
        return False, None, None
    password_hash = hash_password(password)

    # Bootstrap users from secrets.toml first (owner access before any employee exists)
    for key, user in (bootstrap_users or {}).items():
        if key.lower() == username.lower():
            if password_hash == user.get('password_hash'):
                return True, user.get('name', key), user.get('role', 'admin')
            break

    employee = employees.find_by_username(username)
    if employee and password_hash == employee.password_hash:
        return True, employee.name, employee.role

    return False, None, None


def _start_session(username: str, name: str, role: str) -> None:
    st.session_state.authenticated = True
    st.session_state.username = username.lower()
    st.session_state.name = name
    st.session_state.role = role


def first_access_form(employees: EmployeeRepository) -> None:
    """Create the first administrator when the employee store is empty."""
    st.markdown("### \U0001F6E0️ Primeiro acesso")
    st.caption("Nenhum funcionário cadastrado. Crie a conta de administrador.")
    with st.form("first_access_form", clear_on_submit=False):
        name = st.text_input("Nome completo")
        username = st.text_input("Nome de usuário")
        password = st.text_input("Senha", type="password")
        confirm = st.text_input("Confirmar senha", type="password")
        submit = st.form_submit_button("Criar administrador", width="stretch")

        if submit:
            if password != confirm:
                st.error("❌ As senhas não conferem")
                return
            try:
                admin = employees.create(
                    username=username, password=password, name=name, role="admin"
                )
            except OticaError as e:
                st.error(f"❌ {e}")
                return
            _start_session(admin.username, admin.name, admin.role)
            st.rerun()


def login_form(employees: EmployeeRepository, shop_name: str) -> None:
    """Display the login form (or the first access form on an empty store)."""
    st.markdown(f"## \U0001F453 {shop_name}")
    bootstrap_users = get_bootstrap_users()
    if not bootstrap_users and employees.count() == 0:
        first_access_form(employees)
        return

    st.markdown("### \U0001F510 Entrar no Sistema")
    with st.form("login_form", clear_on_submit=False):
        username = st.text_input("Usuário")
        password = st.text_input("Senha", type="password")
        submit = st.form_submit_button("Entrar", width="stretch")

        if submit:
            if username and password:
                success, name, role = verify_login(employees, username, password, bootstrap_users)
                if success:
                    _start_session(username, name, role)
                    logger.info("User %s logged in", username)
                    st.rerun()
                else:
                    st.error("❌ Usuário ou senha incorretos.")
            else:
                st.warning("⚠️ Por favor, preencha todos os campos.")


def logout() -> None:
    """Clear authentication session."""
    logger.info("User %s logged out", st.session_state.get('username'))
    st.session_state.authenticated = False
    st.session_state.username = None
    st.session_state.name = None
    st.session_state.role = None


def require_auth() -> bool:
    """Check if user is authenticated."""
    return bool(st.session_state.get('authenticated', False))


def get_current_user() -> dict:
    """Get current user info."""
    role = st.session_state.get('role')
    return {
        'username': st.session_state.get('username'),
        'name': st.session_state.get('name'),
        'role': role,
        'is_admin': role == 'admin',
    }
