# app/domain/errors.py


class ServiceError(Exception):
    """Erro de dominio com mensagem segura para devolver ao cliente."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ServiceError):
    pass


class NotFound(ServiceError):
    pass


class Internal(ServiceError):
    pass
