"""Employee management page - admin only."""
import streamlit as st

from core.constants import EMPLOYEE_ROLES, MENU_EMPLOYEES
from core.errors import OticaError
from core.simple_auth import get_current_user
from ui.components import confirm_action, flash


def _create_form(repos):
    with st.form("employee_create_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        name = col1.text_input("Nome completo *")
        username = col2.text_input("Nome de usuário *")
        password = col1.text_input("Senha *", type="password")
        role = col2.selectbox("Tipo de acesso", list(EMPLOYEE_ROLES), format_func=EMPLOYEE_ROLES.get)
        submitted = st.form_submit_button("✅ Cadastrar Funcionário")
    if submitted:
        try:
            employee = repos.employees.create(
                username=username, password=password, name=name, role=role
            )
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            flash(f"Funcionário {employee.name} cadastrado.")
            st.rerun()


def render(repos):
    """Render employee management page."""
    user = get_current_user()

    # Check permissions
    if not user['is_admin']:
        st.error("⛔ Acesso negado. Esta página é restrita a administradores.")
        return

    st.header(MENU_EMPLOYEES)
    try:
        employees = repos.employees.list()
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    with st.expander("➕ Novo Funcionário"):
        _create_form(repos)

    if not employees:
        st.info("Nenhum funcionário cadastrado.")
        return

    roles = list(EMPLOYEE_ROLES)
    for employee in employees:
        is_self = employee.username == user['username']
        with st.container():
            col1, col2, col3 = st.columns([3, 3, 2])

            with col1:
                role_emoji = "\U0001F511" if employee.is_admin else "\U0001F464"
                st.write(f"{role_emoji} **{employee.name}**")
                st.caption(f"@{employee.username}")

            with col2:
                if is_self:
                    st.caption(f"Acesso: {employee.role_label}")
                else:
                    new_role = st.selectbox(
                        "Alterar acesso",
                        roles,
                        index=roles.index(employee.role),
                        format_func=EMPLOYEE_ROLES.get,
                        key=f"role_{employee.id}",
                    )
                    if new_role != employee.role:
                        if st.button("\U0001F4BE Salvar", key=f"save_role_{employee.id}"):
                            try:
                                repos.employees.update(employee.id, role=new_role)
                            except OticaError as e:
                                st.error(f"❌ {e}")
                            else:
                                flash(f"{employee.username}: {EMPLOYEE_ROLES[new_role]}")
                                st.rerun()

            with col3:
                # Nobody deletes their own account
                if is_self:
                    st.caption("(Você)")
                elif confirm_action(
                    "\U0001F5D1️ Excluir",
                    key=f"delete_{employee.id}",
                    prompt=f"Excluir o funcionário {employee.name}?",
                ):
                    try:
                        repos.employees.delete(employee.id)
                    except OticaError as e:
                        st.error(f"❌ {e}")
                    else:
                        flash(f"Funcionário {employee.username} removido.", icon="\U0001F5D1️")
                        st.rerun()

            st.divider()

    # Statistics
    col1, col2 = st.columns(2)
    col1.metric("Total", len(employees))
    col2.metric("Administradores", sum(1 for e in employees if e.is_admin))
