# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception, retry_if_exception_type
import requests
from sqlalchemy.exc import IntegrityError, OperationalError

from app.domain.errors import Internal


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def _lost_db_race(exc: BaseException) -> bool:
    # transaction() embrulha o erro do banco em Internal
    if isinstance(exc, Internal):
        exc = exc.__cause__
    return isinstance(exc, (IntegrityError, OperationalError))


def db_retry():
    """
    Repete a transacao inteira quando perde uma corrida no banco:
    - IntegrityError: dois "primeiros add" criando o carrinho do mesmo usuario
    - OperationalError: deadlock / serializacao abortada pelo banco
    A transacao ja foi desfeita (rollback) quando a excecao chega aqui.
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception(_lost_db_race),
    )
