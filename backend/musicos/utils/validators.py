"""
Field validators shared by the checkout, account and quote-request flows.

Every validator is a pure function returning a ``ValidationResult``; none of
them raise. Error messages are in Portuguese because they are shown to the
end user verbatim.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlparse

from musicos.utils.clock import utcnow


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def __bool__(self):
        return self.valid


@dataclass(frozen=True)
class ObjectValidationResult:
    valid: bool
    errors: Optional[Dict[str, str]] = None


OK = ValidationResult(True)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_RE = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")
PHONE_PATTERNS = (
    re.compile(r"^\+351[0-9]{9}$"),
    re.compile(r"^351[0-9]{9}$"),
    re.compile(r"^[92][0-9]{8}$"),
)
PHONE_STRIP_RE = re.compile(r"[\s()-]")
IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]+$")


def _fail(message: str) -> ValidationResult:
    return ValidationResult(False, message)


def validate_email(value: Any) -> ValidationResult:
    if not value or not isinstance(value, str):
        return _fail("Email é obrigatório")
    if not EMAIL_RE.match(value):
        return _fail("Email inválido")
    if len(value) > 254:
        return _fail("Email demasiado longo")
    return OK


def validate_password(value: Any) -> ValidationResult:
    if not value or not isinstance(value, str):
        return _fail("Password é obrigatória")
    if len(value) < 6:
        return _fail("Password deve ter pelo menos 6 caracteres")
    if len(value) > 128:
        return _fail("Password demasiado longa")
    if not re.search(r"[a-zA-Z]", value) or not re.search(r"[0-9]", value):
        return _fail("Password deve conter letras e números")
    return OK


def validate_name(value: Any, min_len: int = 3, max_len: int = 100) -> ValidationResult:
    if not value or not isinstance(value, str):
        return _fail("Nome é obrigatório")
    trimmed = value.strip()
    if len(trimmed) < min_len:
        return _fail(f"Nome deve ter pelo menos {min_len} caracteres")
    if len(trimmed) > max_len:
        return _fail(f"Nome não pode exceder {max_len} caracteres")
    if not NAME_RE.match(trimmed):
        return _fail("Nome contém caracteres inválidos")
    return OK


def normalize_phone(value: str) -> str:
    return PHONE_STRIP_RE.sub("", value)


def validate_phone(value: Any) -> ValidationResult:
    """Portuguese numbers: +351/351 prefix or a 9-digit number starting with 9 or 2."""
    if not value or not isinstance(value, str):
        return _fail("Telefone é obrigatório")
    cleaned = normalize_phone(value)
    if not any(p.match(cleaned) for p in PHONE_PATTERNS):
        return _fail("Número de telefone português inválido")
    return OK


def nif_check_digit(first_eight: str) -> int:
    total = sum(int(d) * (9 - i) for i, d in enumerate(first_eight))
    check = 11 - (total % 11)
    return 0 if check >= 10 else check


def validate_nif(value: Any) -> ValidationResult:
    if value is None or value == "":
        return _fail("NIF é obrigatório")
    cleaned = re.sub(r"\s", "", str(value))
    if not re.fullmatch(r"[0-9]{9}", cleaned):
        return _fail("NIF deve ter 9 dígitos")
    if nif_check_digit(cleaned[:8]) != int(cleaned[8]):
        return _fail("NIF inválido")
    return OK


def iban_checksum_ok(cleaned: str) -> bool:
    """ISO 13616 mod-97: move the first four chars to the end, letters become 10..35."""
    rearranged = cleaned[4:] + cleaned[:4]
    remainder = 0
    for ch in rearranged:
        # int(ch, 36) maps 0-9 to themselves and A-Z to 10-35
        for digit in str(int(ch, 36)):
            remainder = (remainder * 10 + int(digit)) % 97
    return remainder == 1


def validate_iban(value: Any) -> ValidationResult:
    if not value or not isinstance(value, str):
        return _fail("IBAN é obrigatório")
    cleaned = re.sub(r"\s", "", value).upper()
    if not IBAN_RE.match(cleaned):
        return _fail("Formato de IBAN inválido")
    if len(cleaned) < 15 or len(cleaned) > 34:
        return _fail("Comprimento de IBAN inválido")
    if not iban_checksum_ok(cleaned):
        return _fail("IBAN inválido (dígitos de controlo)")
    return OK


def parse_amount(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        num = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if num.is_nan():
        return None
    return num


def validate_amount(value: Any, min_value=0, max_value=1_000_000) -> ValidationResult:
    num = parse_amount(value)
    if num is None:
        return _fail("Valor inválido")
    if num < Decimal(str(min_value)):
        return _fail(f"Valor mínimo é €{min_value}")
    if num > Decimal(str(max_value)):
        return _fail(f"Valor máximo é €{max_value}")
    return OK


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None


def validate_date(value: Any, today: Optional[date] = None) -> ValidationResult:
    """Valid calendar date that is not before today (time of day ignored)."""
    if not value:
        return _fail("Data é obrigatória")
    parsed = parse_date(value)
    if parsed is None:
        return _fail("Data inválida")
    if parsed < (today or utcnow().date()):
        return _fail("Data não pode ser no passado")
    return OK


def validate_url(value: Any) -> ValidationResult:
    if not value or not isinstance(value, str):
        return _fail("URL é obrigatória")
    try:
        parsed = urlparse(value)
    except ValueError:
        return _fail("URL inválida")
    if not parsed.scheme or not parsed.netloc:
        return _fail("URL inválida")
    return OK


# validate_object looks validators up by the "type" of a schema rule. Both the
# English names and the Portuguese names used by the web forms are accepted.
VALIDATORS: Dict[str, Callable[..., ValidationResult]] = {
    "email": lambda v, lo, hi: validate_email(v),
    "password": lambda v, lo, hi: validate_password(v),
    "name": lambda v, lo, hi: validate_name(v, lo if lo is not None else 3, hi if hi is not None else 100),
    "phone": lambda v, lo, hi: validate_phone(v),
    "nif": lambda v, lo, hi: validate_nif(v),
    "iban": lambda v, lo, hi: validate_iban(v),
    "amount": lambda v, lo, hi: validate_amount(
        v, lo if lo is not None else 0, hi if hi is not None else 1_000_000
    ),
    "date": lambda v, lo, hi: validate_date(v),
    "url": lambda v, lo, hi: validate_url(v),
}
VALIDATORS.update(
    {
        "nome": VALIDATORS["name"],
        "telefone": VALIDATORS["phone"],
        "valor": VALIDATORS["amount"],
        "data": VALIDATORS["date"],
    }
)


def validate_object(values: Mapping[str, Any], schema: Mapping[str, Mapping[str, Any]]) -> ObjectValidationResult:
    """
    schema: field -> {"required": bool, "type": str, "min": ..., "max": ...}

    Missing required fields short-circuit that field; every other field is
    checked with the validator named by its type. Unknown types are ignored.
    """
    errors: Dict[str, str] = {}
    for field, rules in schema.items():
        value = values.get(field)
        if rules.get("required") and not value:
            errors[field] = f"{field} é obrigatório"
            continue
        validator = VALIDATORS.get(rules.get("type"))
        if value and validator:
            result = validator(value, rules.get("min"), rules.get("max"))
            if not result.valid:
                errors[field] = result.error
    return ObjectValidationResult(valid=not errors, errors=errors or None)
