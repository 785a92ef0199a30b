"""
ROTAS: JOBS
============

Disparo da varredura de prazos por agendador externo
(cron, systemd timer, cloud scheduler), uma vez por minuto.
"""

import logging

from fastapi import APIRouter, Depends

from prospectai.api.dependencies import get_repository
from prospectai.api.schemas import SweepSummary
from prospectai.infrastructure.jobs.deadline_sweep_service import DeadlineSweepService
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("/deadline-sweep", response_model=SweepSummary)
async def run_deadline_sweep(
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """
    Uma passada da varredura de prazos em todos os tenants.

    Pode ser chamada de novo a qualquer momento: leads já remanejados
    não estão mais atrasados para o dono anterior.
    """
    service = DeadlineSweepService(repo)
    return await service.sweep_overdue_leads()
