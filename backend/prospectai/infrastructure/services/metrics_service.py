"""
SERVIÇO DE MÉTRICAS DO PROSPECTAI
==================================

Carrega leads e etapas do tenant (opcionalmente de um vendedor) e
entrega para o agregador puro em domain.services.performance_metrics.
"""

import logging
from datetime import datetime
from typing import Optional

from prospectai.config import get_settings
from prospectai.domain.entities import MetricsPeriod, Tenant, utcnow
from prospectai.domain.repositories import ProspectRepository
from prospectai.domain.services.performance_metrics import (
    PerformanceMetrics,
    compute_metrics,
    resolve_period,
)
from prospectai.domain.services.time_utils import ensure_aware

logger = logging.getLogger(__name__)


async def get_metrics(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: Optional[str] = None,
    period: MetricsPeriod = MetricsPeriod.ALL,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> PerformanceMetrics:
    """
    Métricas do período.

    start/end explícitos têm precedência sobre `period`. O intervalo
    é [start, end) sobre a data de criação do lead.
    """
    leads = await repo.list_leads(tenant.id, seller_id=seller_id)
    stages = await repo.list_stages(tenant.id)

    if start is not None or end is not None:
        date_range = (
            ensure_aware(start) if start else None,
            ensure_aware(end) if end else None,
        )
    else:
        period_start = resolve_period(period, now or utcnow(), get_settings().timezone)
        date_range = (period_start, None) if period_start else None

    metrics = compute_metrics(leads, stages, date_range)
    logger.debug(
        f"📊 Métricas {tenant.slug} (vendedor={seller_id or 'todos'}, período={period.value}): "
        f"{metrics.total_leads} leads"
    )
    return metrics
