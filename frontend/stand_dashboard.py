"""
Stand Dashboard — the dealer's leads and stock.

Reached by stands and admins (route level). Whether the stand is approved
is read from its profile on every render and gates what is shown: a pending
or rejected stand sees the "under review" notice instead of leads and stock.
Admins always count as approved.

Entry point:  show_stand_dashboard()
"""

import pandas as pd
import requests
import streamlit as st

from frontend import api_client
from frontend.auth_client import AuthError
from frontend.roles import Role
from frontend.runtime import Runtime, navigate
from frontend.utils import format_currency

LEAD_STATUSES = ["Pendente", "Contactado", "Vendido", "Cancelado"]


def is_approved(profile: dict | None, role: Role) -> bool:
    return role is Role.ADMIN or (profile or {}).get("status") == "approved"


def stand_name_of(profile: dict | None, user_metadata: dict) -> str:
    return (
        ((profile or {}).get("stand_name") or "").strip()
        or (user_metadata.get("stand_name") or "").strip()
        or "Sem Nome"
    )


def show_stand_dashboard(rt: Runtime):
    """Render leads / stock tabs for the signed-in stand."""
    try:
        user = rt.auth.get_user()
    except AuthError as e:
        st.error(f"Erro Dashboard: {e}")
        return
    if user is None:
        if rt.state.role is Role.ADMIN:
            st.info("Sessão de administrador local: inicie sessão no serviço para gerir stock.")
            return
        navigate("/login")

    try:
        profile = api_client.get_profile(user.id)
    except requests.exceptions.RequestException as e:
        st.error(f"Erro Dashboard: {api_client.error_message(e)}")
        return

    name = stand_name_of(profile, user.user_metadata)
    approved = is_approved(profile, rt.state.role)

    st.title(name)
    st.caption("Stand Verificado" if approved else "Conta em Análise")

    if not approved:
        st.warning(
            "A sua conta de stand está em análise. Assim que for aprovada poderá "
            "publicar anúncios e receber contactos."
        )
        return

    if rt.state.role is Role.STAND and st.button("➕ Novo anúncio"):
        navigate("/anunciar")

    try:
        leads = api_client.list_leads(rt.token)
        cars = api_client.list_cars(user_id=user.id)
    except requests.exceptions.RequestException as e:
        st.error(f"Erro Dashboard: {api_client.error_message(e)}")
        return

    tab_leads, tab_stock = st.tabs([f"Leads ({len(leads)})", f"Stock ({len(cars)})"])

    with tab_leads:
        _leads_tab(rt, leads)
    with tab_stock:
        _stock_tab(rt, cars)


def _leads_tab(rt: Runtime, leads: list[dict]):
    if not leads:
        st.info("Ainda não recebeu contactos.")
        return

    df = pd.DataFrame(leads)[["created_at", "customer_name", "customer_email", "customer_phone", "status"]]
    df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce").dt.strftime("%d/%m/%Y %H:%M")
    st.dataframe(df, width="stretch", hide_index=True)

    for lead in leads:
        with st.expander(f"{lead['customer_name']} — {lead['status']}"):
            st.text(lead.get("message") or "")
            new_status = st.selectbox(
                "Estado", LEAD_STATUSES,
                index=LEAD_STATUSES.index(lead["status"]),
                key=f"lead-status-{lead['id']}",
            )
            if new_status != lead["status"] and st.button("Guardar", key=f"lead-save-{lead['id']}"):
                try:
                    api_client.update_lead_status(rt.token, lead["id"], new_status)
                except requests.exceptions.RequestException as e:
                    st.error(api_client.error_message(e))
                else:
                    st.rerun()


def _stock_tab(rt: Runtime, cars: list[dict]):
    if not cars:
        st.info("Ainda não publicou anúncios.")
        return

    for car in cars:
        with st.container(border=True):
            c1, c2, c3 = st.columns([4, 1, 1])
            c1.markdown(f"**{car['brand']} {car['model']}** ({car['year']}) — {format_currency(car['price'])}")
            c1.caption("Verificado" if car.get("verified") else "A aguardar verificação")
            if c2.button("Editar", key=f"edit-{car['id']}"):
                navigate(f"/editar-anuncio/{car['id']}")
            if c3.button("Remover", key=f"del-{car['id']}"):
                st.session_state["confirm_delete"] = car["id"]

            if st.session_state.get("confirm_delete") == car["id"]:
                st.warning("Deseja remover este anúncio definitivamente? Esta ação não pode ser desfeita.")
                if st.button("Confirmar remoção", key=f"confirm-{car['id']}"):
                    try:
                        api_client.delete_car(rt.token, car["id"])
                    except requests.exceptions.RequestException as e:
                        st.error(f"Erro ao eliminar: {api_client.error_message(e)}")
                    else:
                        st.session_state.pop("confirm_delete", None)
                        st.rerun()
