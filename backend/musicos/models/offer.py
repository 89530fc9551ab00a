from sqlalchemy import Boolean, Column, Numeric, String, Text
from musicos.db import Base

class Offer(Base):
    __tablename__ = "offers"

    id = Column(String(64), primary_key=True)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    musician_uid = Column(String(64), nullable=True, index=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Offer id={self.id} title={self.title}>"
