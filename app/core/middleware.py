# app/core/middleware.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import time
import logging

from app.config.settings import settings
from app.shared.exceptions import TransferError
from app.shared.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

def setup_middleware(app: FastAPI):
    """Middleware y manejadores de error globales"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response

    # Errores de dominio que ningún router tradujo
    @app.exception_handler(TransferError)
    async def transfer_error_handler(request: Request, exc: TransferError):
        logger.error(f"❌ {request.method} {request.url.path}: {exc}")
        error = ErrorResponse(message=str(exc), error_code=type(exc).__name__)
        return JSONResponse(status_code=400, content=error.model_dump(mode="json"))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"❌ Error de base de datos en {request.method} {request.url.path}")
        error = ErrorResponse(message="Error interno de base de datos", error_code="DATABASE_ERROR")
        return JSONResponse(status_code=500, content=error.model_dump(mode="json"))
