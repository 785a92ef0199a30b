"""
HEALTH CHECK
============
Usado por monitoramento externo e pelo orquestrador de containers.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from prospectai.config import get_settings
from prospectai.infrastructure.database import get_db
from prospectai.infrastructure.scheduler.scheduler import get_scheduler_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """200 se o banco responde, 503 caso contrário."""
    settings = get_settings()
    checks = {}
    status = "healthy"

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"❌ Health check: banco indisponível: {e}")
        checks["database"] = "error"
        status = "unhealthy"

    checks["scheduler"] = get_scheduler_status() if settings.run_sweep_in_process else "external"

    body = {"status": status, "environment": settings.environment, "checks": checks}
    return JSONResponse(status_code=200 if status == "healthy" else 503, content=body)
