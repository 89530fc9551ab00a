from typing import Optional, Union

from pydantic import BaseModel


class QuoteRequestIn(BaseModel):
    nome: Optional[str] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    tipoEvento: Optional[str] = None
    dataEvento: Optional[str] = None
    localizacao: Optional[str] = None
    estiloMusical: Optional[str] = None
    orcamento: Optional[Union[str, int, float]] = None
    mensagem: Optional[str] = None
