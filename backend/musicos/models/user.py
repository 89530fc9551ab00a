from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from musicos.db import Base
from musicos.utils.clock import utcnow


class User(Base):
    __tablename__ = "users"
    uid = Column(String(32), primary_key=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    nome = Column(String(100), nullable=False)
    tipo = Column(String(16), nullable=False)  # musico, empresa, admin
    telefone = Column(String(32), nullable=False, default="")
    nif = Column(String(9), unique=True, nullable=True)
    password_hash = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    login_count = Column(Integer, default=0, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)


class AuthToken(Base):
    __tablename__ = "auth_tokens"
    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    uid = Column(String(32), ForeignKey("users.uid"), nullable=False, index=True)
    purpose = Column(String(16), nullable=False, default="session")  # session, reset
    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)
