"""
Small formatting and validation helpers shared by the views.
"""

import re
import unicodedata

MIN_PASSWORD_LENGTH = 6
MAX_AD_IMAGES = 10


def slugify(text: str) -> str:
    """'Stand Águia Motors' → 'stand-aguia-motors'."""
    if not text:
        return ""
    text = unicodedata.normalize("NFD", str(text).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"[^\w-]+", "", text)
    text = re.sub(r"--+", "-", text)
    return text.strip("-")


def sanitize_subdomain(value: str) -> str:
    """Vanity-link slug as typed in the ad form: lowercase, spaces to dashes,
    anything else dropped."""
    value = re.sub(r"\s+", "-", (value or "").lower())
    return re.sub(r"[^\w-]", "", value)


def format_currency(amount: float, lang: str = "pt") -> str:
    """Whole euros. pt: '25 000 €' (no grouping under 10 000); en: '€25,000'."""
    value = int(round(amount or 0))
    if lang == "en":
        return f"€{value:,}"
    digits = f"{abs(value)}"
    if len(digits) > 4:
        digits = f"{abs(value):,}".replace(",", " ")
    sign = "-" if value < 0 else ""
    return f"{sign}{digits} €"


def password_strength(password: str) -> int:
    """0 empty, 1 weak (< 6), 2 fair, 3 strong (≥ 10 with a digit and a capital)."""
    if not password:
        return 0
    if len(password) < MIN_PASSWORD_LENGTH:
        return 1
    if len(password) >= 10 and re.search(r"[0-9]", password) and re.search(r"[A-Z]", password):
        return 3
    return 2


def validate_new_password(password: str, confirm: str) -> str | None:
    """Error message for the reset form, or None when acceptable."""
    if password != confirm:
        return "As palavras-passe não coincidem."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"A palavra-passe deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres."
    return None


def parse_price(value) -> float:
    """Price as typed in the ad form, decimal comma allowed; garbage → 0."""
    text = str(value or "").strip().replace(",", ".", 1)
    try:
        return float(text)
    except ValueError:
        return 0.0


def compose_lead_message(message: str, contact_preference: str, payment_method: str) -> str:
    return (
        f"{message}\n\n"
        "PREFERÊNCIAS:\n"
        f"- Contacto: {contact_preference}\n"
        f"- Pagamento: {payment_method}"
    )


def default_lead_message(brand: str, model: str, year) -> str:
    return (
        f"Olá! Estou interessado no {brand} {model} ({year}). "
        "Poderia dar-me mais informações?"
    )
