"""
Admin Dashboard — platform-wide view for the administrator.

Tabs:
  • Visão Geral  — counts of listings, stands awaiting approval and leads
  • Anúncios     — verify / deactivate / delete any listing
  • Utilizadores — approve or reject stand accounts
  • Leads        — every contact request, filterable by stand

Backend admin actions need a remote admin session; with the local bypass
only the read-only public data loads.
"""

import pandas as pd
import requests
import streamlit as st

from frontend import api_client
from frontend.runtime import Runtime
from frontend.utils import format_currency


def pending_stands(profiles: list[dict]) -> list[dict]:
    return [p for p in profiles if p.get("role") == "stand" and p.get("status") == "pending"]


def show_admin_dashboard(rt: Runtime):
    st.title("Painel de Administração")

    try:
        cars = api_client.list_cars(limit=500)
        profiles = api_client.list_profiles()
    except requests.exceptions.RequestException as e:
        st.error(f"Erro ao carregar dados: {api_client.error_message(e)}")
        return

    leads: list[dict] = []
    if rt.token:
        try:
            leads = api_client.list_leads(rt.token)
        except requests.exceptions.RequestException as e:
            st.warning(f"Leads indisponíveis: {api_client.error_message(e)}")
    else:
        st.info("Sessão local de administrador: inicie sessão no serviço para executar ações.")

    tab_overview, tab_ads, tab_users, tab_leads = st.tabs(
        ["Visão Geral", "Anúncios", "Utilizadores", "Leads"]
    )
    with tab_overview:
        _overview_tab(cars, profiles, leads)
    with tab_ads:
        _ads_tab(rt, cars)
    with tab_users:
        _users_tab(rt, profiles)
    with tab_leads:
        _leads_tab(leads)


# ═══════════════════════════════════════════════════════
# TABS
# ═══════════════════════════════════════════════════════

def _overview_tab(cars: list[dict], profiles: list[dict], leads: list[dict]):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Anúncios", len(cars))
    c2.metric("Por verificar", sum(1 for c in cars if not c.get("verified")))
    c3.metric("Stands pendentes", len(pending_stands(profiles)))
    c4.metric("Leads", len(leads))

    if cars:
        df = pd.DataFrame(cars)
        st.subheader("Anúncios por stand")
        st.bar_chart(df.groupby("stand_name").size().rename("anúncios"))


def _ads_tab(rt: Runtime, cars: list[dict]):
    if not cars:
        st.info("Sem anúncios.")
        return

    df = pd.DataFrame(cars)[["brand", "model", "year", "price", "stand_name", "verified", "active"]]
    df["price"] = df["price"].map(format_currency)
    st.dataframe(df, width="stretch", hide_index=True)

    for car in cars:
        with st.expander(f"{car['brand']} {car['model']} — {car['stand_name']}"):
            c1, c2, c3 = st.columns(3)
            label = "Retirar verificação" if car.get("verified") else "Verificar"
            if c1.button(label, key=f"verify-{car['id']}", disabled=not rt.token):
                _act(api_client.update_car, rt.token, car["id"], {"verified": not car.get("verified")})
            label = "Desativar" if car.get("active", True) else "Ativar"
            if c2.button(label, key=f"active-{car['id']}", disabled=not rt.token):
                _act(api_client.update_car, rt.token, car["id"], {"active": not car.get("active", True)})
            if c3.button("Eliminar", key=f"delete-{car['id']}", disabled=not rt.token):
                _act(api_client.delete_car, rt.token, car["id"])


def _users_tab(rt: Runtime, profiles: list[dict]):
    pending = pending_stands(profiles)
    st.subheader(f"Stands a aguardar aprovação ({len(pending)})")
    for profile in pending:
        with st.container(border=True):
            c1, c2, c3 = st.columns([3, 1, 1])
            c1.markdown(f"**{profile.get('stand_name') or 'Sem Nome'}**  \n{profile['email']}")
            if c2.button("Aprovar", key=f"approve-{profile['id']}", disabled=not rt.token):
                _act(api_client.update_profile, rt.token, profile["id"], {"status": "approved"})
            if c3.button("Rejeitar", key=f"reject-{profile['id']}", disabled=not rt.token):
                _act(api_client.update_profile, rt.token, profile["id"], {"status": "rejected"})

    st.subheader("Todos os utilizadores")
    if profiles:
        df = pd.DataFrame(profiles)
        cols = [c for c in ["full_name", "email", "role", "stand_name", "status", "created_at"] if c in df.columns]
        st.dataframe(df[cols], width="stretch", hide_index=True)


def _leads_tab(leads: list[dict]):
    if not leads:
        st.info("Sem leads.")
        return
    df = pd.DataFrame(leads)
    stands = ["Todos"] + sorted(df["stand_name"].dropna().unique().tolist())
    chosen = st.selectbox("Stand", stands)
    if chosen != "Todos":
        df = df[df["stand_name"] == chosen]
    st.dataframe(
        df[["created_at", "stand_name", "customer_name", "customer_email", "status"]],
        width="stretch",
        hide_index=True,
    )


def _act(fn, *args):
    try:
        fn(*args)
    except requests.exceptions.RequestException as e:
        st.error(api_client.error_message(e))
        return
    st.rerun()
