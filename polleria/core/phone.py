"""
Phone number normalization for WhatsApp senders and customer lookup
"""
import re

DEFAULT_COUNTRY_CODE = "52"

_SEPARATORS = re.compile(r"[\s\-\(\)\.]")


def _digits(raw: str) -> str:
    number = (raw or "").strip().replace("whatsapp:", "")
    number = _SEPARATORS.sub("", number)
    if number.startswith("+"):
        number = number[1:]
    return number


def normalize_phone(raw: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Canonical customer phone: "+" followed by country code and number.
    A bare 10-digit local number gets the default country code.
    normalize_phone(normalize_phone(p)) == normalize_phone(p)
    """
    number = _digits(raw)
    if not number:
        raise ValueError("Empty phone number")
    if len(number) == 10:
        number = f"{country_code}{number}"
    return f"+{number}"


def to_wa_id(raw: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Digits-only destination for the Graph API (country code, no '+')"""
    return normalize_phone(raw, country_code)[1:]


def last_four(raw: str) -> str:
    return _digits(raw)[-4:]
