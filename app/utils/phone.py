import re


def normalize_phone(phone: str) -> str:
    """Strip formatting from a customer phone number.

    Keeps a leading ``+`` and the digits. Raises ValueError when fewer
    than 7 or more than 15 digits remain.
    """
    raw = (phone or "").strip()
    digits = re.sub(r"\D", "", raw)
    if not 7 <= len(digits) <= 15:
        raise ValueError("phone must have between 7 and 15 digits")
    return f"+{digits}" if raw.startswith("+") else digits


__all__ = ["normalize_phone"]
