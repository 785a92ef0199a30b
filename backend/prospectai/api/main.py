"""
PROSPECTAI API - Ponto de Entrada
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prospectai.config import get_settings
from prospectai.infrastructure.database import init_db
from prospectai.infrastructure.logging_config import setup_logging
from prospectai.infrastructure.middleware.error_handlers import register_exception_handlers
from prospectai.infrastructure.scheduler.scheduler import create_scheduler, start_scheduler, stop_scheduler

# Routers
from prospectai.api.routes import (
    tenants_router,
    pipeline_router,
    sellers_router,
    leads_router,
    metrics_router,
    jobs_router,
    health_router,
)

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


# ============================================================
# 🔁 LIFESPAN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Iniciando ProspectAI API...")

    if not settings.is_production:
        await init_db()
        logger.info("✅ Tabelas criadas!")

    if settings.run_sweep_in_process:
        create_scheduler()
        start_scheduler()
    else:
        logger.info("⏱️ Varredura de prazos disparada externamente (POST /api/v1/jobs/deadline-sweep)")

    yield

    stop_scheduler()
    logger.info("👋 Encerrando ProspectAI API...")


# ============================================================
# FASTAPI APP
# ============================================================

app = FastAPI(
    title="ProspectAI API",
    description="Pipeline de prospecção de leads multi-tenant",
    version="0.1.0",
    lifespan=lifespan,
)

# ============================================================
# ⭐ CORS
# ============================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ============================================================
# ROTAS
# ============================================================

app.include_router(tenants_router, prefix="/api/v1")
app.include_router(pipeline_router, prefix="/api/v1")
app.include_router(sellers_router, prefix="/api/v1")
app.include_router(leads_router, prefix="/api/v1")
app.include_router(metrics_router, prefix="/api/v1")
app.include_router(jobs_router, prefix="/api/v1")
app.include_router(health_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"name": "ProspectAI API", "version": "0.1.0", "docs": "/docs"}
