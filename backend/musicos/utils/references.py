"""
Payment references printed on bank transfers.

Two renderings exist: ``MUS-<epoch millis>-<5 chars>`` for checkout orders and
the dated ``MB<YYYYMMDD><5 digits>``. Neither checks for uniqueness; the
``orders.payment_reference`` unique constraint does.
"""
import re
import secrets
import string
from datetime import datetime
from typing import Optional

from musicos.utils.clock import epoch_millis, utcnow

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
ORDER_REFERENCE_RE = re.compile(r"^MUS-\d+-[A-Z0-9]{5}$")
DATED_REFERENCE_RE = re.compile(r"^MB\d{8}\d{5}$")


def order_reference(now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(5))
    return f"MUS-{epoch_millis(now)}-{suffix}"


def dated_reference(now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    return f"MB{now:%Y%m%d}{secrets.randbelow(100000):05d}"


def generate_payment_reference(style: str = "mus", now: Optional[datetime] = None) -> str:
    if style == "mus":
        return order_reference(now)
    if style == "mb":
        return dated_reference(now)
    raise ValueError(f"Unknown payment reference style: {style}")


def is_payment_reference(value: str) -> bool:
    return bool(ORDER_REFERENCE_RE.match(value) or DATED_REFERENCE_RE.match(value))
