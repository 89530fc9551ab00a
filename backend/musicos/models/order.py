import enum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from musicos.db import Base
from musicos.utils.clock import utcnow


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"  # only reached when ORDER_EXPIRY_ENFORCED is on


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    MBWAY = "mbway"


class Order(Base):
    __tablename__ = "orders"
    id = Column(String(32), primary_key=True)
    uid = Column(String(64), nullable=False, index=True)
    payment_reference = Column(String(32), unique=True, nullable=False, index=True)
    customer_email = Column(String(254), nullable=False)
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(32), nullable=False, default="")
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(16), nullable=False, default=OrderStatus.PENDING.value)
    payment_method = Column(
        String(16), nullable=False, default=PaymentMethod.BANK_TRANSFER.value
    )
    bank_details = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    proof_of_payment_url = Column(String(1024), nullable=True)
    proof_uploaded_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=False, default="")

    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
    )


class OrderLine(Base):
    __tablename__ = "order_lines"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(32), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    item_id = Column(String(64), nullable=False)
    name = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="lines")
