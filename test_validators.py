# test_validators.py
import pytest

from validators import (
    detect_card_brand,
    format_card_expiry,
    format_card_number,
    format_cep,
    format_cpf,
    format_phone,
    only_digits,
    validate_card_expiry,
    validate_cep,
    validate_cpf,
    validate_phone,
)


def test_only_digits():
    assert only_digits("529.982.247-25") == "52998224725"
    assert only_digits(None) == ""


@pytest.mark.parametrize("raw,expected", [
    ("529", "529"),
    ("5299", "529.9"),
    ("5299822", "529.982.2"),
    ("52998224725", "529.982.247-25"),
    ("529.982.247-25999", "529.982.247-25"),
])
def test_format_cpf_progressive(raw, expected):
    assert format_cpf(raw) == expected


def test_format_phone_mobile_and_landline():
    assert format_phone("11987654321") == "(11) 98765-4321"
    assert format_phone("1133334444") == "(11) 3333-4444"
    assert format_phone("11") == "(11"
    assert format_phone("") == ""


def test_format_cep_and_card_fields():
    assert format_cep("01310100") == "01310-100"
    assert format_cep("0131") == "0131"
    assert format_card_number("4111111111111111") == "4111 1111 1111 1111"
    assert format_card_expiry("1230") == "12/30"


@pytest.mark.parametrize("formatter,formatted", [
    (format_cpf, "529.982.247-25"),
    (format_cpf, "529.98"),
    (format_phone, "(11) 98765-4321"),
    (format_phone, "(11) 3333-4444"),
    (format_cep, "01310-100"),
    (format_cep, "01310-1"),
    (format_card_number, "4111 1111 1111 1111"),
    (format_card_number, "4111 11"),
    (format_card_expiry, "12/30"),
])
def test_format_is_idempotent_on_formatted_input(formatter, formatted):
    assert formatter(formatted) == formatted
    assert formatter(formatter(formatted)) == formatted


def test_non_ascii_digits_are_not_digits():
    arabic_indic_cpf = "٥٢٩٩٨٢٢٤٧٢٥"
    assert only_digits(arabic_indic_cpf) == ""
    assert not validate_cpf(arabic_indic_cpf)
    assert not validate_phone("١١٩٨٧٦٥٤٣٢١")
    assert format_cep("٠١٣١٠١٠٠") == ""


@pytest.mark.parametrize("cpf", ["529.982.247-25", "52998224725", "111.444.777-35"])
def test_validate_cpf_accepts_valid(cpf):
    assert validate_cpf(cpf)


@pytest.mark.parametrize("cpf", ["529.982.247-26", "111.111.111-11", "123", "", None, "abc"])
def test_validate_cpf_rejects_invalid(cpf):
    assert not validate_cpf(cpf)


def test_validate_cep_and_phone():
    assert validate_cep("01310-100")
    assert not validate_cep("0131-100")
    assert validate_phone("(11) 98765-4321")
    assert validate_phone("(11) 3333-4444")
    assert not validate_phone("98765-4321")


def test_validate_card_expiry():
    assert validate_card_expiry("12/30")
    assert not validate_card_expiry("13/30")
    assert not validate_card_expiry("1/30")


@pytest.mark.parametrize("number,brand", [
    ("4111 1111 1111 1111", "Visa"),
    ("5555 5555 5555 4444", "Mastercard"),
    ("2221 0000 0000 0009", "Mastercard"),
    ("3782 822463 10005", "Amex"),
    ("6362 9700 0000 0005", "Elo"),
    ("6062 8200 0000 0000", "Hipercard"),
    ("9999 0000 0000 0000", None),
    ("", None),
])
def test_detect_card_brand(number, brand):
    assert detect_card_brand(number) == brand
