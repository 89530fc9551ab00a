from datetime import date

import pytest

from musicos.utils.sanitize import sanitize, sanitize_html, sanitize_mapping
from musicos.utils.validators import (
    nif_check_digit,
    normalize_phone,
    validate_amount,
    validate_date,
    validate_email,
    validate_iban,
    validate_name,
    validate_nif,
    validate_object,
    validate_password,
    validate_phone,
    validate_url,
)


@pytest.mark.parametrize("nif", ["123456789", "501442600", "999999990", "123 456 789"])
def test_valid_nif(nif):
    assert validate_nif(nif).valid


def test_nif_check_digit():
    # 1*9 + 2*8 + ... + 8*2 = 156, 156 % 11 = 2, 11 - 2 = 9
    assert nif_check_digit("12345678") == 9


@pytest.mark.parametrize(
    "nif,error",
    [
        ("123456780", "NIF inválido"),
        ("12345678", "NIF deve ter 9 dígitos"),
        ("12345678a", "NIF deve ter 9 dígitos"),
        ("", "NIF é obrigatório"),
        (None, "NIF é obrigatório"),
    ],
)
def test_invalid_nif(nif, error):
    res = validate_nif(nif)
    assert not res.valid
    assert res.error == error


def test_password_length_bounds():
    assert validate_password("abc12").error == "Password deve ter pelo menos 6 caracteres"
    assert validate_password("abc123").valid
    assert validate_password("a" * 127 + "1").valid
    assert validate_password("a" * 128 + "1").error == "Password demasiado longa"


def test_password_needs_letters_and_digits():
    assert not validate_password("abcdefgh").valid
    assert not validate_password("12345678").valid
    assert validate_password(None).error == "Password é obrigatória"


def test_email():
    assert validate_email("ana@example.pt").valid
    assert validate_email("ana@example").error == "Email inválido"
    assert validate_email("").error == "Email é obrigatório"
    assert validate_email("a" * 250 + "@x.pt").error == "Email demasiado longo"


def test_name():
    assert validate_name("João Silva").valid
    assert validate_name("Jo").error == "Nome deve ter pelo menos 3 caracteres"
    assert validate_name("R2D2").error == "Nome contém caracteres inválidos"
    assert not validate_name("a" * 101).valid
    assert validate_name("Jo", min_len=2).valid


@pytest.mark.parametrize("phone", ["+351912345678", "351912345678", "912345678", "212345678", "+351 912-345 (678)"])
def test_valid_phone(phone):
    assert validate_phone(phone).valid


@pytest.mark.parametrize("phone", ["812345678", "91234567", "+34912345678", ""])
def test_invalid_phone(phone):
    assert not validate_phone(phone).valid


def test_normalize_phone():
    assert normalize_phone("+351 912-345 678") == "+351912345678"


@pytest.mark.parametrize(
    "iban", ["LT98 3250 0007 9827 7556", "DE89370400440532013000", "gb82 west 1234 5698 7654 32"]
)
def test_valid_iban(iban):
    assert validate_iban(iban).valid


def test_invalid_iban():
    assert validate_iban("LT99 3250 0007 9827 7556").error == "IBAN inválido (dígitos de controlo)"
    assert validate_iban("1234").error == "Formato de IBAN inválido"
    assert validate_iban("LT98 3250").error == "Comprimento de IBAN inválido"


def test_amount():
    assert validate_amount("99.50").valid
    assert validate_amount(0).valid
    assert not validate_amount("-1").valid
    assert not validate_amount("abc").valid
    assert not validate_amount(True).valid
    assert not validate_amount(1_000_001).valid
    assert not validate_amount(5, min_value=10).valid


def test_date_not_in_past():
    today = date(2026, 5, 1)
    assert validate_date("2026-05-01", today=today).valid
    assert validate_date("2026-05-01T23:00:00", today=today).valid
    assert validate_date("2026-04-30", today=today).error == "Data não pode ser no passado"
    assert validate_date("31/12/2026", today=today).error == "Data inválida"
    assert validate_date("", today=today).error == "Data é obrigatória"


def test_url():
    assert validate_url("https://musicosbooking.pt/perfil").valid
    assert not validate_url("musicosbooking.pt").valid


def test_validate_object_collects_field_errors():
    schema = {
        "email": {"required": True, "type": "email"},
        "nome": {"required": True, "type": "nome"},
        "telefone": {"type": "telefone"},
        "site": {"type": "desconhecido"},
    }
    res = validate_object({"email": "mau", "site": "???"}, schema)
    assert not res.valid
    assert res.errors == {"email": "Email inválido", "nome": "nome é obrigatório"}


def test_validate_object_ok():
    schema = {"valor": {"required": True, "type": "valor", "min": 10, "max": 100}}
    assert validate_object({"valor": "50"}, schema).valid
    assert validate_object({"valor": "500"}, schema).errors == {"valor": "Valor máximo é €100"}


def test_sanitize_strips_markup():
    assert sanitize("<b>Ana</b> Silva") == "Ana Silva"
    assert sanitize("<script>alert(1)</script>Olá") == "Olá"
    assert sanitize("  texto  ") == "texto"
    assert sanitize(42) == 42
    assert sanitize(None) is None


def test_sanitize_escapes_text():
    assert sanitize("3 < 5 & 6 > 2") == "3 &lt; 5 &amp; 6 &gt; 2"
    assert sanitize("&lt;script&gt;x") == "&lt;script&gt;x"
    assert sanitize("O'Neil") == "O'Neil"


def test_sanitize_drops_unterminated_tags():
    for value in (
        "Ana<img src=x onerror=alert(1)//",
        "Ana<svg/onload=alert(1)",
        "Ana<!-- comentario",
        '<b onclick="x()">Ana</b>',
        "<script>alert(1)",
    ):
        out = sanitize(value)
        assert "<" not in out and "on" not in out.lower(), value
    assert sanitize("Ana<img src=x onerror=alert(1)//") == "Ana"


def test_sanitize_html_allowlist():
    assert sanitize_html('<p onclick="x()">olá</p>') == "<p>olá</p>"
    assert sanitize_html('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"
    assert sanitize_html('<a href="https://a.pt" style="x">x</a>') == '<a href="https://a.pt">x</a>'
    assert sanitize_html("<div><b>negrito") == "<b>negrito</b>"
    assert sanitize_html("<iframe src='x'>fora</iframe>ok") == "ok"
    assert sanitize_html(None) == ""


def test_sanitize_html_malformed_and_encoded():
    assert sanitize_html("<p>olá") == "<p>olá</p>"
    assert sanitize_html('ok<a href="x" onclick="y"') == "ok"
    assert sanitize_html('<a href="&#106;avascript:alert(1)">x</a>') == "<a>x</a>"
    assert sanitize_html('<a href="java&#x09;script:alert(1)">x</a>') == "<a>x</a>"
    assert sanitize_html('<a href=" JAVASCRIPT:alert(1)">x</a>') == "<a>x</a>"
    assert sanitize_html("<b>1 < 2</b>") == "<b>1 &lt; 2</b>"


def test_sanitize_mapping():
    assert sanitize_mapping({"nome": "<i>Ana</i>", "n": 1}) == {"nome": "Ana", "n": 1}
