"""
ROTAS: MÉTRICAS
================

Desempenho do ProspectAI: funil, conversão, tempos médios e
linha do tempo de feedbacks. Da empresa toda ou de um vendedor.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from prospectai.api.dependencies import get_current_tenant, get_repository
from prospectai.api.schemas import MetricsResponse
from prospectai.domain.entities import MetricsPeriod, Tenant
from prospectai.domain.services.performance_metrics import to_dict
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository
from prospectai.infrastructure.services import metrics_service

router = APIRouter(prefix="/metrics", tags=["Métricas"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(
    seller_id: Optional[str] = Query(None),
    period: MetricsPeriod = Query(MetricsPeriod.ALL),
    start: Optional[datetime] = Query(None, description="Início (inclusive); tem precedência sobre period"),
    end: Optional[datetime] = Query(None, description="Fim (exclusive)"),
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    metrics = await metrics_service.get_metrics(
        repo, tenant, seller_id=seller_id, period=period, start=start, end=end
    )
    return to_dict(metrics)
