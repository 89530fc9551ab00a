from typing import Optional

from pydantic import BaseModel


class RegisterIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    nome: Optional[str] = None
    tipo: Optional[str] = None
    telefone: Optional[str] = None
    nif: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResetPasswordIn(BaseModel):
    email: Optional[str] = None


class ResetPasswordConfirmIn(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


class ProfileIn(BaseModel):
    uid: Optional[str] = None
    nome: Optional[str] = None
    telefone: Optional[str] = None
