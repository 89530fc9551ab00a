from musicos.db import Base
from musicos.utils.clock import utcnow
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship


class SessionCart(Base):
    __tablename__ = "carts"
    id = Column(Integer, primary_key=True, index=True)
    cart_uuid = Column(
        String(64), unique=True, index=True, nullable=False
    )  # cookie identifier
    created_at = Column(DateTime, default=utcnow)

    items = relationship(
        "SessionCartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="SessionCartItem.id",
    )
