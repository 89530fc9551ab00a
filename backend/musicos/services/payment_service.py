from decimal import ROUND_HALF_UP, Decimal
from typing import Dict
from urllib.parse import quote

from musicos.config import settings as default_settings
from musicos.errors import ValidationError
from musicos.models.order import Order, PaymentMethod
from musicos.services.payment_instructions import format_amount, format_payment_instructions
from musicos.utils.validators import validate_phone

CENT = Decimal("0.01")

# method -> (percentage, fixed fee in EUR)
FEES = {
    PaymentMethod.BANK_TRANSFER: (Decimal("0"), Decimal("0")),
    PaymentMethod.PAYPAL: (Decimal("0.034"), Decimal("0.35")),
    PaymentMethod.MBWAY: (Decimal("0"), Decimal("0")),
}
MBWAY_REQUEST_TTL_SECONDS = 300


def parse_method(method) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        raise ValidationError(f"Método de pagamento inválido: {method}")


class PaymentService:
    def __init__(self, settings=default_settings):
        self.settings = settings

    def calculate_fees(self, amount, method) -> Dict[str, Decimal]:
        method = parse_method(method)
        subtotal = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
        pct, fixed = FEES[method]
        fee = (subtotal * pct + fixed).quantize(CENT, rounding=ROUND_HALF_UP) if pct or fixed else Decimal("0.00")
        return {"subtotal": subtotal, "fee": fee, "total": subtotal + fee}

    def paypal_link(self, amount) -> str:
        handle = quote(self.settings.PAYPAL_ME_HANDLE, safe="@.")
        return f"https://www.paypal.me/{handle}/{format_amount(amount)}EUR"

    def instructions_for(self, order: Order) -> Dict:
        method = parse_method(order.payment_method)
        fees = self.calculate_fees(order.total_amount, method)
        base = {
            "method": method.value,
            "reference": order.payment_reference,
            "amount": order.total_amount,
            "fees": fees,
        }
        if method is PaymentMethod.BANK_TRANSFER:
            base.update(
                bankDetails=order.bank_details,
                text=format_payment_instructions(
                    order.payment_reference,
                    order.total_amount,
                    order.bank_details,
                    validity_days=self.settings.ORDER_TTL_DAYS,
                ),
                instructions=f"Use a referência {order.payment_reference} na transferência",
                nextStep="upload_proof",
            )
        elif method is PaymentMethod.PAYPAL:
            base.update(
                paypalLink=self.paypal_link(fees["total"]),
                instructions="Clique no link para pagar via PayPal",
                nextStep="await_confirmation",
            )
        else:
            result = validate_phone(order.customer_phone)
            if not result.valid:
                raise ValidationError("Número de telemóvel inválido")
            base.update(
                phone=order.customer_phone,
                instructions="Pedido MB WAY enviado. Confirme no seu telemóvel",
                nextStep="await_confirmation",
                expiresIn=MBWAY_REQUEST_TTL_SECONDS,
            )
        return base
