from sqlalchemy import Column, DateTime, Integer, String

from musicos.db import Base


class RateLimitHit(Base):
    __tablename__ = "rate_limit_hits"
    id = Column(Integer, primary_key=True, autoincrement=True)
    identifier = Column(String(255), nullable=False, index=True)
    hit_at = Column(DateTime, nullable=False, index=True)
