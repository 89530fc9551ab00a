from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from musicos.db import Base


class SessionCartItem(Base):
    __tablename__ = "cart_items"
    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(
        Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    offer_id = Column(String(64), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    price_snapshot = Column(
        Numeric(12, 2), nullable=False, default=0
    )  # catalogue price at time of add

    cart = relationship("SessionCart", back_populates="items")
