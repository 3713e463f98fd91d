# app/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routers import carts, health, products
from app.domain.errors import InvalidArgument, Internal, NotFound, ServiceError
from app.services.registry_client import RegistryAgent, RegistryClient
from app.utils.logging import get_logger
from app.utils.settings import CORS_ORIGINS, REGISTRY_ENABLED

logger = get_logger(__name__)

ERROR_STATUS = {
    InvalidArgument: 400,
    NotFound: 404,
    Internal: 500,
}

INTERNAL_MESSAGE = "Erro interno do servidor."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def status_for(exc: ServiceError) -> int:
    for kind in type(exc).__mro__:
        if kind in ERROR_STATUS:
            return ERROR_STATUS[kind]
    return 500


async def service_error_handler(request: Request, exc: ServiceError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} falhou: {exc.message}")
    return _error(status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query"))
    message = first.get("msg", "Requisição inválida.")
    if field:
        message = f"Campo inválido '{field}': {message}"
    return _error(400, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Erro de banco em {request.method} {request.url.path}")
    return _error(500, INTERNAL_MESSAGE)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Erro inesperado em {request.method} {request.url.path}")
    return _error(500, INTERNAL_MESSAGE)


def create_app(register_service: bool = REGISTRY_ENABLED) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        agent = RegistryAgent(RegistryClient()) if register_service else None
        if agent:
            agent.start()
        yield
        if agent:
            await run_in_threadpool(agent.stop)

    app = FastAPI(title="Vendas Service", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)

    return app
