"""Rotas da API."""

from .tenants import router as tenants_router
from .pipeline import router as pipeline_router
from .sellers import router as sellers_router
from .leads import router as leads_router
from .metrics import router as metrics_router
from .jobs import router as jobs_router
from .health import router as health_router

__all__ = [
    "tenants_router",
    "pipeline_router",
    "sellers_router",
    "leads_router",
    "metrics_router",
    "jobs_router",
    "health_router",
]
