from decimal import Decimal

import pytest

from musicos.config import Settings, settings
from musicos.errors import ValidationError
from musicos.models.order import Order
from musicos.services.payment_instructions import format_amount, format_payment_instructions
from musicos.services.payment_service import PaymentService, parse_method


def make_order(method="bank_transfer", phone=""):
    return Order(
        payment_reference="MUS-1704067200000-AB12C",
        total_amount=Decimal("150.00"),
        payment_method=method,
        bank_details=settings.bank_details(),
        customer_phone=phone,
    )


def test_format_amount():
    assert format_amount(150) == "150.00"
    assert format_amount("99.9") == "99.90"
    assert format_amount(Decimal("1200.00")) == "1200.00"


def test_instructions_text():
    text = format_payment_instructions("MUS-1704067200000-AB12C", 150, settings.bank_details())
    assert "REFERÊNCIA: MUS-1704067200000-AB12C" in text
    assert "VALOR: €150.00" in text
    assert "MOEDA: EUR" in text
    assert "IBAN: LT98 3250 0007 9827 7556" in text
    assert "BIC/SWIFT: REVOLT21" in text
    assert "Beneficiário: Bruno Novaes Souza" in text
    assert "Validade do pagamento: 7 dias" in text


def test_instructions_validity_days():
    text = format_payment_instructions("MB2024030512345", "10", {}, validity_days=3)
    assert "Validade do pagamento: 3 dias" in text
    assert "IBAN: \n" in text


def test_parse_method():
    assert parse_method("paypal").value == "paypal"
    with pytest.raises(ValidationError):
        parse_method("cheque")


@pytest.mark.parametrize(
    "method,fee,total",
    [
        ("bank_transfer", "0.00", "100.00"),
        ("mbway", "0.00", "100.00"),
        ("paypal", "3.75", "103.75"),
    ],
)
def test_calculate_fees(method, fee, total):
    res = PaymentService().calculate_fees(100, method)
    assert res["subtotal"] == Decimal("100.00")
    assert res["fee"] == Decimal(fee)
    assert res["total"] == Decimal(total)


def test_paypal_fee_rounding():
    # 19.99 * 0.034 = 0.67966 -> 0.68, plus 0.35
    assert PaymentService().calculate_fees("19.99", "paypal")["fee"] == Decimal("1.03")


def test_bank_transfer_instructions():
    res = PaymentService().instructions_for(make_order())
    assert res["method"] == "bank_transfer"
    assert res["reference"] == "MUS-1704067200000-AB12C"
    assert res["bankDetails"]["iban"] == settings.BANK_IBAN
    assert res["nextStep"] == "upload_proof"
    assert "MUS-1704067200000-AB12C" in res["instructions"]


def test_paypal_instructions():
    svc = PaymentService(Settings(PAYPAL_ME_HANDLE="musicosbooking"))
    res = svc.instructions_for(make_order("paypal"))
    assert res["paypalLink"] == "https://www.paypal.me/musicosbooking/155.45EUR"
    assert res["fees"]["fee"] == Decimal("5.45")
    assert res["nextStep"] == "await_confirmation"


def test_mbway_instructions():
    res = PaymentService().instructions_for(make_order("mbway", phone="912345678"))
    assert res["phone"] == "912345678"
    assert res["expiresIn"] == 300
    with pytest.raises(ValidationError):
        PaymentService().instructions_for(make_order("mbway", phone="123"))
