import logging
from typing import Dict, Mapping

from musicos.adapters.mailer import MailerError
from musicos.config import settings as default_settings
from musicos.errors import ExternalServiceError, ValidationError
from musicos.services import email_templates
from musicos.utils.sanitize import sanitize
from musicos.utils.validators import validate_date, validate_email

log = logging.getLogger("quotes")

QUOTE_FIELDS = (
    "nome",
    "email",
    "telefone",
    "tipoEvento",
    "dataEvento",
    "localizacao",
    "estiloMusical",
    "orcamento",
    "mensagem",
)
REQUIRED_FIELDS = ("nome", "email", "telefone", "tipoEvento", "dataEvento", "localizacao", "mensagem")


class QuoteService:
    """Quote requests from event organisers: one mail to the operator, one to the requester."""

    def __init__(self, mailer, settings=default_settings):
        self.mailer = mailer
        self.settings = settings

    def send_quote_request(self, payload: Mapping) -> Dict:
        data = {f: sanitize(payload.get(f)) for f in QUOTE_FIELDS}
        if any(not data.get(f) for f in REQUIRED_FIELDS):
            raise ValidationError("Todos os campos obrigatórios devem ser preenchidos")
        for result in (validate_email(data["email"]), validate_date(data["dataEvento"])):
            if not result.valid:
                raise ValidationError(result.error)
        # header values must stay on one line
        data["tipoEvento"] = " ".join(str(data["tipoEvento"]).split())

        try:
            self.mailer.send(self.settings.EMAIL_RECEIVE, *email_templates.quote_request_operator(data))
        except MailerError:
            log.exception("quote request from %s not delivered to the operator", data["email"])
            raise ExternalServiceError("Erro ao enviar orçamento. Tente novamente.")
        # from here on the operator has the request; confirmation failures are only logged
        try:
            self.mailer.send(data["email"], *email_templates.quote_request_confirmation(data))
        except MailerError:
            log.exception("quote confirmation to %s failed", data["email"])

        log.info("quote request sent (%s, %s)", data["tipoEvento"], data["dataEvento"])
        return {"success": True, "message": "Orçamento enviado com sucesso"}
