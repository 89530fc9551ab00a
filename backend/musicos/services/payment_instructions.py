from decimal import Decimal
from typing import Mapping

INSTRUCTIONS_TEMPLATE = """========================================
INSTRUÇÕES DE PAGAMENTO - MúsicosBooking.pt
========================================

REFERÊNCIA: {reference}
VALOR: €{amount}
MOEDA: {currency}

DETALHES BANCÁRIOS:
IBAN: {iban}
BIC/SWIFT: {bic}
Beneficiário: {beneficiary}
Banco: {bank_name}
Morada: {bank_address}

IMPORTANTE:
1. Inclua a REFERÊNCIA no assunto da transferência
2. Envie o comprovativo via plataforma
3. Validação em até 2 horas úteis
4. Validade do pagamento: {validity_days} dias

========================================"""


def format_amount(amount) -> str:
    return f"{Decimal(str(amount)):.2f}"


def format_payment_instructions(
    reference: str, amount, bank_details: Mapping[str, str], validity_days: int = 7
) -> str:
    """Human-readable bank transfer instructions for one order."""
    return INSTRUCTIONS_TEMPLATE.format(
        reference=reference,
        amount=format_amount(amount),
        currency=bank_details.get("currency", "EUR"),
        iban=bank_details.get("iban", ""),
        bic=bank_details.get("bic", ""),
        beneficiary=bank_details.get("beneficiary", ""),
        bank_name=bank_details.get("bankName", ""),
        bank_address=bank_details.get("bankAddress", ""),
        validity_days=validity_days,
    )
