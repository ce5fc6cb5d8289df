# validators.py
"""Formatting and validation helpers for Brazilian customer data.

The format_* helpers implement progressive masking: they strip everything
that is not a digit and re-insert punctuation as digits accumulate, so they
can be applied on every keystroke and on values that are already formatted.
"""
import re
from typing import Optional

_NON_DIGITS = re.compile(r"[^0-9]")


def only_digits(value: Optional[str]) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_cpf(value: str) -> str:
    """000.000.000-00"""
    digits = only_digits(value)[:11]
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}.{digits[3:]}"
    if len(digits) <= 9:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:]}"
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_phone(value: str) -> str:
    """(00) 00000-0000 for mobiles, (00) 0000-0000 for landlines."""
    digits = only_digits(value)[:11]
    if not digits:
        return ""
    if len(digits) <= 2:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:2]}) {digits[2:]}"
    if len(digits) <= 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"


def format_cep(value: str) -> str:
    """00000-000"""
    digits = only_digits(value)[:8]
    if len(digits) <= 5:
        return digits
    return f"{digits[:5]}-{digits[5:]}"


def format_card_number(value: str) -> str:
    digits = only_digits(value)[:16]
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def format_card_expiry(value: str) -> str:
    """MM/YY"""
    digits = only_digits(value)[:4]
    if len(digits) <= 2:
        return digits
    return f"{digits[:2]}/{digits[2:]}"


def _cpf_check_digit(digits: str, first_weight: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(first_weight, 1, -1)))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(value: Optional[str]) -> bool:
    """Check a CPF against its two modulo-11 check digits.

    Malformed input never raises; it just fails validation.
    """
    digits = only_digits(value)
    if len(digits) != 11 or len(set(digits)) == 1:
        return False
    if _cpf_check_digit(digits[:9], 10) != int(digits[9]):
        return False
    return _cpf_check_digit(digits[:10], 11) == int(digits[10])


def validate_cep(value: Optional[str]) -> bool:
    return len(only_digits(value)) == 8


def validate_phone(value: Optional[str]) -> bool:
    return len(only_digits(value)) in (10, 11)


def validate_card_expiry(value: Optional[str]) -> bool:
    digits = only_digits(value)
    if len(digits) != 4:
        return False
    return 1 <= int(digits[:2]) <= 12


# Ordered: Elo and Hipercard ranges overlap the generic prefixes below them.
_CARD_BRANDS = [
    ("Elo", re.compile(r"^(4011(78|79)|43(1274|8935)|45(1416|7393|763(1|2))|50(4175|6699|67[0-7][0-9]|9000)|627780|63(6297|6368)|650(0[3-5]|4[0-9]|5[0-3])|6550)")),
    ("Hipercard", re.compile(r"^(606282|3841)")),
    ("Amex", re.compile(r"^3[47]")),
    ("Visa", re.compile(r"^4")),
    ("Mastercard", re.compile(r"^(5[1-5]|2(2[2-9]|[3-6][0-9]|7[01]|720))")),
]


def detect_card_brand(card_number: Optional[str]) -> Optional[str]:
    digits = only_digits(card_number)
    if not digits:
        return None
    for brand, pattern in _CARD_BRANDS:
        if pattern.match(digits):
            return brand
    return None
