import pytest

from frontend.utils import (
    compose_lead_message,
    default_lead_message,
    format_currency,
    parse_price,
    password_strength,
    sanitize_subdomain,
    slugify,
    validate_new_password,
)


@pytest.mark.parametrize("text, slug", [
    ("Stand Águia Motors", "stand-aguia-motors"),
    ("  Auto  Lisboa ", "auto-lisboa"),
    ("Carros & Cia", "carros-cia"),
    ("", ""),
])
def test_slugify(text, slug):
    assert slugify(text) == slug


def test_sanitize_subdomain():
    assert sanitize_subdomain("BMW Série 3!") == "bmw-série-3"
    assert sanitize_subdomain("") == ""


@pytest.mark.parametrize("amount, lang, text", [
    (25000, "pt", "25 000 €"),
    (2500, "pt", "2500 €"),
    (1250000, "pt", "1 250 000 €"),
    (25000, "en", "€25,000"),
    (None, "pt", "0 €"),
])
def test_format_currency(amount, lang, text):
    assert format_currency(amount, lang) == text


def test_password_strength():
    assert password_strength("") == 0
    assert password_strength("abc") == 1
    assert password_strength("abcdef") == 2
    assert password_strength("Abcdefgh12") == 3


def test_validate_new_password():
    assert validate_new_password("abcdef", "abcdeg") == "As palavras-passe não coincidem."
    assert validate_new_password("abc", "abc") == "A palavra-passe deve ter pelo menos 6 caracteres."
    assert validate_new_password("abcdef", "abcdef") is None


@pytest.mark.parametrize("raw, value", [
    ("25000", 25000.0),
    ("24999,90", 24999.90),
    ("abc", 0.0),
    ("", 0.0),
    (None, 0.0),
])
def test_parse_price(raw, value):
    assert parse_price(raw) == pytest.approx(value)


def test_lead_messages():
    text = compose_lead_message("Olá", "WhatsApp", "Financiamento")
    assert text.startswith("Olá\n\nPREFERÊNCIAS:")
    assert "- Contacto: WhatsApp" in text
    assert "- Pagamento: Financiamento" in text
    assert "BMW Série 3 (2019)" in default_lead_message("BMW", "Série 3", 2019)
