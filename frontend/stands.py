"""
Dealer directory — approved stands and each stand's public page.

Stands are addressed by the slug of their name (/stand/<slug>).
"""

import requests
import streamlit as st

from frontend import api_client
from frontend.catalog import car_grid
from frontend.runtime import Runtime, navigate
from frontend.utils import slugify


def _approved_stands() -> list[dict]:
    try:
        return api_client.list_profiles(role="stand", status="approved")
    except requests.exceptions.RequestException as e:
        st.error(f"Não foi possível carregar os stands: {api_client.error_message(e)}")
        return []


def stock_counts(cars: list[dict]) -> dict[str, int]:
    """Listing count per stand name."""
    counts: dict[str, int] = {}
    for car in cars:
        name = car.get("stand_name") or ""
        counts[name] = counts.get(name, 0) + 1
    return counts


def find_stand(stands: list[dict], slug: str) -> dict | None:
    for stand in stands:
        if slugify(stand.get("stand_name") or "") == slug:
            return stand
    return None


def show_stands(rt: Runtime):
    st.title("Stands")
    stands = _approved_stands()
    search = st.text_input("Pesquisar stand ou localidade").strip().lower()
    if search:
        stands = [
            s for s in stands
            if search in (s.get("stand_name") or "").lower() or search in (s.get("location") or "").lower()
        ]

    if not stands:
        st.info("Nenhum stand encontrado.")
        return

    try:
        counts = stock_counts(api_client.list_cars(active=True, limit=500))
    except requests.exceptions.RequestException:
        counts = {}

    for stand in stands:
        name = stand.get("stand_name") or "Sem Nome"
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"**{name}**  \n{stand.get('location') or ''}")
            c1.caption(f"{counts.get(name, 0)} veículos em stock")
            if c2.button("Ver stand", key=f"stand-{stand['id']}"):
                navigate(f"/stand/{slugify(name)}")


def show_stand_detail(rt: Runtime, standName: str):
    stand = find_stand(_approved_stands(), standName)
    if not stand:
        st.warning("Stand não encontrado.")
        if st.button("Voltar aos stands"):
            navigate("/stands")
        return

    st.title(stand.get("stand_name") or "Stand")
    st.caption(stand.get("location") or "")
    if stand.get("description"):
        st.markdown(stand["description"])
    if stand.get("phone"):
        st.markdown(f"📞 {stand['phone']}")

    st.divider()
    try:
        cars = api_client.list_cars(active=True, stand_name=stand["stand_name"])
    except requests.exceptions.RequestException as e:
        st.error(api_client.error_message(e))
        return
    if cars:
        car_grid(rt, cars, key_prefix="stand")
    else:
        st.info("Este stand ainda não tem veículos publicados.")
