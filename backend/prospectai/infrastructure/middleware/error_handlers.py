"""
Handlers de erro do domínio
Converte exceções do ProspectAI em respostas HTTP {"detail": ...}
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from prospectai.domain.exceptions import (
    ConstraintViolationError,
    InvalidStageError,
    NotFoundError,
    PersistenceError,
    ProspectingLockedError,
    StageInUseError,
)

logger = logging.getLogger(__name__)


def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


def invalid_stage_handler(request: Request, exc: InvalidStageError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.message})


def constraint_violation_handler(request: Request, exc: ConstraintViolationError) -> JSONResponse:
    content = {"detail": exc.message}
    if isinstance(exc, ProspectingLockedError):
        content["pending_lead_ids"] = exc.pending_lead_ids
    if isinstance(exc, StageInUseError):
        content["lead_count"] = exc.lead_count
    return JSONResponse(status_code=409, content=content)


def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(f"❌ Falha de persistência em {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Banco de dados indisponível. Tente novamente."},
        headers={"Retry-After": "5"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(InvalidStageError, invalid_stage_handler)
    app.add_exception_handler(ConstraintViolationError, constraint_violation_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
