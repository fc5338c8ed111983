"""
Public catalog pages — home, listings, car detail (with lead form),
vanity-slug redirect and the about page.

Entry points:  show_home, show_listings, show_car_detail, show_vanity, show_about
"""

import requests
import streamlit as st

from frontend import api_client
from frontend.runtime import Runtime, get_favorites, navigate, toggle_favorite
from frontend.utils import compose_lead_message, default_lead_message, format_currency, slugify

CATEGORIES = ["Todas", "SUV", "Sedan", "Coupe", "Hatchback", "Utilitário"]
FUELS = ["Todos", "Gasolina", "Diesel", "Elétrico", "Híbrido"]
CONTACT_PREFERENCES = ["WhatsApp", "Chamada", "Email"]
PAYMENT_METHODS = ["Pronto Pagamento", "Financiamento"]


# ═══════════════════════════════════════════════════════
# API HELPER
# ═══════════════════════════════════════════════════════

def _cars(**filters) -> list[dict]:
    """Catalog query; shows the error and returns [] when the backend fails."""
    try:
        return api_client.list_cars(**filters)
    except requests.exceptions.RequestException as e:
        st.error(f"Não foi possível carregar os veículos: {api_client.error_message(e)}")
        return []


def car_card(rt: Runtime, car: dict, key_prefix: str = "car"):
    """One listing tile: photo, title, price and the favourite toggle."""
    if car.get("image"):
        st.image(car["image"], width="stretch")
    badge = " ✅" if car.get("verified") else ""
    st.markdown(f"**{car['brand']} {car['model']}**{badge}")
    st.caption(f"{car['year']} · {car.get('mileage', 0):,} km · {car.get('fuel', '')} · {car.get('location', '')}")
    st.markdown(f"### {format_currency(car.get('price', 0))}")

    c1, c2 = st.columns(2)
    if c1.button("Ver detalhes", key=f"{key_prefix}-open-{car['id']}"):
        navigate(f"/veiculos/{car['id']}")
    fav = car["id"] in get_favorites(rt)
    if c2.button("★" if fav else "☆", key=f"{key_prefix}-fav-{car['id']}"):
        toggle_favorite(rt, car["id"])
        st.rerun()


def car_grid(rt: Runtime, cars: list[dict], columns: int = 3, key_prefix: str = "car"):
    for i in range(0, len(cars), columns):
        cols = st.columns(columns)
        for col, car in zip(cols, cars[i : i + columns]):
            with col:
                car_card(rt, car, key_prefix)


# ═══════════════════════════════════════════════════════
# PAGES
# ═══════════════════════════════════════════════════════

def show_home(rt: Runtime):
    st.title("Facilitador Car")
    st.subheader("O seu próximo carro, de stands verificados.")
    if st.button("Ver todos os veículos"):
        navigate("/veiculos")

    st.divider()
    st.subheader("Destaques")
    featured = _cars(active=True, limit=6)
    if featured:
        car_grid(rt, featured, key_prefix="home")
    else:
        st.info("Ainda não há veículos publicados.")


def show_listings(rt: Runtime):
    st.title("Veículos")

    c1, c2, c3 = st.columns([2, 1, 1])
    q = c1.text_input("Pesquisar marca ou modelo")
    category = c2.selectbox("Categoria", CATEGORIES)
    fuel = c3.selectbox("Combustível", FUELS)

    cars = _cars(
        active=True,
        q=q or None,
        category=None if category == "Todas" else category,
        fuel=None if fuel == "Todos" else fuel,
    )
    st.caption(f"{len(cars)} veículos encontrados")
    if cars:
        car_grid(rt, cars, key_prefix="list")
    else:
        st.info("Nenhum veículo corresponde à pesquisa.")


def show_car_detail(rt: Runtime, id: str):
    try:
        car = api_client.get_car(id)
    except requests.exceptions.RequestException as e:
        st.error(f"Erro ao carregar o veículo: {api_client.error_message(e)}")
        return
    if not car:
        st.warning("Veículo não encontrado.")
        if st.button("Voltar aos veículos"):
            navigate("/veiculos")
        return

    st.title(f"{car['brand']} {car['model']}")
    left, right = st.columns([3, 2])

    with left:
        images = car.get("images") or [car.get("image")]
        st.image(images[0], width="stretch")
        if len(images) > 1:
            thumbs = st.columns(min(len(images) - 1, 5))
            for col, img in zip(thumbs, images[1:6]):
                col.image(img, width="stretch")
        st.markdown(car.get("description") or "")

    with right:
        st.markdown(f"## {format_currency(car.get('price', 0))}")
        st.markdown(
            f"- **Ano:** {car['year']}\n"
            f"- **Quilómetros:** {car.get('mileage', 0):,}\n"
            f"- **Combustível:** {car.get('fuel', '')}\n"
            f"- **Caixa:** {car.get('transmission', '')}\n"
            f"- **Categoria:** {car.get('category', '')}\n"
            f"- **Localização:** {car.get('location', '')}"
        )
        stand = car.get("stand_name") or "Particular"
        if st.button(f"Stand: {stand}"):
            navigate(f"/stand/{slugify(stand)}")
        lead_form(car)

    st.divider()
    st.subheader("Veículos relacionados")
    related = [c for c in _cars(active=True, category=car.get("category"), limit=4) if c["id"] != car["id"]]
    if related:
        car_grid(rt, related[:3], key_prefix="related")


def lead_form(car: dict):
    """Contact form; the lead goes to the car's stand."""
    st.subheader("Pedir informações")
    with st.form(f"lead-{car['id']}"):
        name = st.text_input("Nome")
        email = st.text_input("E-mail")
        phone = st.text_input("Telemóvel")
        c1, c2 = st.columns(2)
        contact = c1.selectbox("Contacto preferido", CONTACT_PREFERENCES)
        payment = c2.selectbox("Pagamento", PAYMENT_METHODS)
        message = st.text_area("Mensagem", value=default_lead_message(car["brand"], car["model"], car["year"]))
        submitted = st.form_submit_button("Enviar Agora", width="stretch")

    if submitted:
        if not name.strip() or not email.strip():
            st.error("Indique o nome e o e-mail.")
            return
        try:
            api_client.create_lead({
                "customer_name": name.strip(),
                "customer_email": email.strip().lower(),
                "customer_phone": phone.strip(),
                "car_id": car["id"],
                "stand_name": (car.get("stand_name") or "").strip() or "Particular",
                "message": compose_lead_message(message, contact, payment),
            })
        except requests.exceptions.RequestException as e:
            st.error(api_client.error_message(e))
            return
        st.success("Pedido enviado! O stand entrará em contacto brevemente.")


def show_vanity(rt: Runtime, slug: str):
    """/v/<slug> → the listing's detail page, or the catalog when unknown."""
    try:
        car = api_client.find_car_by_subdomain(slug)
    except requests.exceptions.RequestException:
        car = None
    navigate(f"/veiculos/{car['id']}" if car else "/veiculos")


def show_about(rt: Runtime):
    st.title("Sobre nós")
    st.markdown(
        "O Facilitador Car liga compradores a stands profissionais verificados. "
        "Cada stand é aprovado pela nossa equipa antes de publicar anúncios, "
        "e cada pedido de contacto chega diretamente ao vendedor."
    )
