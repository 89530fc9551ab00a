"""Domain error taxonomy.

Every public operation either returns a ``{"success": True, ...}`` payload or
raises one of these. The HTTP layer maps ``status_code`` straight onto the
response and uses ``message`` as the ``error`` field, so messages must be safe
to show to the end user.
"""


class DomainError(Exception):
    status_code = 400
    default_message = "Pedido inválido"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Dados inválidos"


class InvalidItem(ValidationError):
    default_message = "Item inválido - faltam campos obrigatórios"


class MissingCustomerData(ValidationError):
    default_message = "Email e nome são obrigatórios"


class EmptyCart(ValidationError):
    default_message = "Carrinho vazio"


class MissingFile(ValidationError):
    default_message = "Ficheiro obrigatório"


class UnsupportedType(ValidationError):
    default_message = "Tipo de ficheiro não suportado (JPEG, PNG, PDF)"


class FileTooLarge(ValidationError):
    default_message = "Ficheiro muito grande (máximo 5MB)"


class AuthError(DomainError):
    status_code = 401
    default_message = "Não autenticado"


class NotAuthenticated(AuthError):
    default_message = "Utilizador não autenticado"


class RateLimited(AuthError):
    status_code = 429
    default_message = "Demasiadas tentativas. Tente novamente mais tarde"


class PermissionDenied(DomainError):
    status_code = 403
    default_message = "Sem permissão"


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Não encontrado"


class ConflictError(DomainError):
    status_code = 409
    default_message = "Conflito com o estado atual"


class ExternalServiceError(DomainError):
    status_code = 500
    default_message = "Erro interno. Tente novamente"
