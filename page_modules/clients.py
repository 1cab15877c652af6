"""Clients (CRM) page: registration, edits and recall outreach."""
import pandas as pd
import streamlit as st

from core.config import RECALL_MONTHS, SHOP_NAME, WHATSAPP_COUNTRY_CODE
from core.constants import RECALL_MESSAGE_DEFAULT, RECALL_MONTH_OPTIONS
from core.errors import OticaError
from core.filters import apply_filters, text_search
from core.recall import recall_list, whatsapp_link
from core.services import today
from ui.components import confirm_action, flash


def _register_form(repos):
    with st.form("client_register_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        name = col1.text_input("Nome completo *", placeholder="Ex: João da Silva")
        phone = col2.text_input("Telefone / WhatsApp *", placeholder="(00) 00000-0000")
        address = st.text_area("Endereço", placeholder="Rua, Número, Bairro, Cidade...", height=80)
        submitted = st.form_submit_button("✅ Cadastrar Cliente")
    if submitted:
        try:
            client = repos.clients.create(name=name, phone=phone, address=address)
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            flash(f"Cliente {client.name} cadastrado com sucesso!")
            st.rerun()


def _edit_form(repos, client):
    with st.form(f"client_edit_{client.id}"):
        col1, col2 = st.columns(2)
        name = col1.text_input("Nome *", value=client.name)
        phone = col2.text_input("Telefone *", value=client.phone)
        address = st.text_area("Endereço", value=client.address, height=80)
        col1, col2 = st.columns(2)
        last_visit = col1.date_input("Última visita", value=client.last_visit, format="DD/MM/YYYY")
        nps = col2.number_input(
            "NPS (0-10)", min_value=0, max_value=10, step=1,
            value=client.nps_score, placeholder="Sem avaliação",
        )
        submitted = st.form_submit_button("\U0001F4BE Salvar alterações")
    if submitted:
        try:
            repos.clients.update(
                client.id,
                name=name,
                phone=phone,
                address=address,
                last_visit=last_visit,
                nps_score=nps,
            )
        except OticaError as e:
            st.error(f"❌ {e}")
        else:
            flash("Cliente atualizado.")
            st.rerun()


def _message_settings():
    """Recall interval and message template, kept for the session."""
    st.session_state.setdefault("recall_months", RECALL_MONTHS)
    st.session_state.setdefault("recall_template", RECALL_MESSAGE_DEFAULT)
    with st.expander("⚙️ Configurar Mensagens"):
        st.selectbox(
            "Intervalo de recall",
            RECALL_MONTH_OPTIONS,
            format_func=lambda m: f"A cada {m} meses",
            key="recall_months",
        )
        st.text_area(
            "Mensagem",
            key="recall_template",
            help="Use {nome} ou [Nome] para o nome do cliente e {loja} para o nome da loja.",
        )


def render(repos):
    """Render the clients page."""
    st.header("\U0001F465 Clientes (CRM)")
    try:
        clients = repos.clients.list()
    except OticaError as e:
        st.error(f"❌ {e}")
        return

    _message_settings()
    template = st.session_state["recall_template"]
    months = st.session_state["recall_months"]

    tab_list, tab_recall, tab_new = st.tabs(
        ["\U0001F4C7 Clientes", "⏰ Recall", "➕ Novo Cliente"]
    )

    with tab_list:
        search = st.text_input("Buscar por nome, telefone ou endereço")
        shown = apply_filters(clients, [text_search(search, "name", "phone", "address")])
        if not shown:
            st.info("Nenhum cliente encontrado")
        for client in shown:
            with st.container():
                col1, col2, col3 = st.columns([4, 3, 2])
                col1.write(f"**{client.name}**")
                col1.caption(client.address or "Endereço não informado")
                col2.caption(f"\U0001F4DE {client.phone}")
                col2.caption(
                    "Última visita: "
                    + (client.last_visit.strftime("%d/%m/%Y") if client.last_visit else "-")
                    + (f" · NPS: {client.nps_score}" if client.nps_score is not None else "")
                )
                col3.link_button(
                    "WhatsApp",
                    whatsapp_link(
                        client.phone, client.name, SHOP_NAME, template, WHATSAPP_COUNTRY_CODE
                    ),
                )
                with st.expander("✏️ Editar / Excluir"):
                    _edit_form(repos, client)
                    if confirm_action(
                        "\U0001F5D1️ Excluir cliente",
                        key=f"client_delete_{client.id}",
                        prompt=f"Tem certeza que deseja excluir o cliente \"{client.name}\"?",
                    ):
                        try:
                            repos.clients.delete(client.id)
                        except OticaError as e:
                            st.error(f"❌ {e}")
                        else:
                            flash(f"Cliente {client.name} removido.", icon="\U0001F5D1️")
                            st.rerun()
                st.divider()

    with tab_recall:
        due = recall_list(clients, today(), months)
        st.write(f"**{len(due)}** cliente(s) sem visita há mais de {months} meses")
        if due:
            recall_df = pd.DataFrame(
                [
                    {
                        "Cliente": c.name,
                        "Telefone": c.phone,
                        "Última visita": c.last_visit.strftime("%d/%m/%Y") if c.last_visit else "-",
                        "WhatsApp": whatsapp_link(
                            c.phone, c.name, SHOP_NAME, template, WHATSAPP_COUNTRY_CODE
                        ),
                    }
                    for c in due
                ]
            )
            st.dataframe(
                recall_df,
                width="stretch",
                hide_index=True,
                column_config={
                    "WhatsApp": st.column_config.LinkColumn("WhatsApp", display_text="Enviar mensagem"),
                },
            )

    with tab_new:
        _register_form(repos)
