"""
VARREDURA DE PRAZOS - REMANEJAMENTO AUTOMÁTICO
===============================================

Passa leads parados em Novos Leads além do prazo do vendedor para
outro vendedor da mesma empresa.

CARACTERÍSTICAS:
- Multi-tenant (percorre todos os tenants ativos)
- Prazo e modo (random / specific) configurados por vendedor
- O lead continua em Novos Leads, só troca de dono
- Cada lead é remanejado no máximo uma vez por passada
- Escrita condicional: só remaneja se o lead ainda é do mesmo vendedor
  e ainda está em Novos Leads
- Falha em um lead é registrada e a varredura segue para o próximo

DISPARO:
- Agendador externo (cron, systemd timer, cloud scheduler) chamando
  POST /api/v1/jobs/deadline-sweep ou o script run_deadline_sweep
- APScheduler dentro do processo só com RUN_SWEEP_IN_PROCESS=true
"""

import logging
import random
from datetime import datetime
from typing import Dict, List, Optional, Set

from prospectai.config import get_settings
from prospectai.domain.entities import ProspectLead, ReassignmentMode, Seller, StageRole, Tenant, utcnow
from prospectai.domain.repositories import ProspectRepository
from prospectai.domain.services.deadline_policy import (
    DeadlineSettings,
    choose_new_owner,
    deadline_cutoff,
)
from prospectai.domain.services.lead_transitions import plan_auto_reassignment
from prospectai.domain.services.pipeline_rules import find_stage_by_role
from prospectai.infrastructure.database import async_session
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository

logger = logging.getLogger(__name__)


# =============================================================================
# SERVIÇO PRINCIPAL
# =============================================================================

class DeadlineSweepService:
    """
    Uma passada da varredura sobre todos os tenants.

    `rng` é injetável para sorteios determinísticos nos testes.
    """

    def __init__(
        self,
        repo: ProspectRepository,
        rng: Optional[random.Random] = None,
        default_minutes: Optional[int] = None,
    ):
        self.repo = repo
        self.rng = rng or random.Random()
        self.default_minutes = default_minutes or get_settings().default_deadline_minutes

        self.processed_count = 0
        self.reassigned_count = 0
        self.skipped_count = 0
        self.error_count = 0

    # =========================================================================
    # MÉTODO PRINCIPAL - PROCESSA TODOS OS TENANTS
    # =========================================================================

    async def sweep_overdue_leads(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or utcnow()

        logger.info("=" * 60)
        logger.info("⏱️ INICIANDO VARREDURA DE PRAZOS")
        logger.info("=" * 60)

        self.processed_count = 0
        self.reassigned_count = 0
        self.skipped_count = 0
        self.error_count = 0

        tenants = await self.repo.list_active_tenants()
        logger.info(f"📊 Encontrados {len(tenants)} tenants ativos")

        for tenant in tenants:
            await self._process_tenant(tenant, now)

        logger.info("=" * 60)
        logger.info("✅ VARREDURA FINALIZADA")
        logger.info(f"   Processados: {self.processed_count}")
        logger.info(f"   Remanejados: {self.reassigned_count}")
        logger.info(f"   Pulados: {self.skipped_count}")
        logger.info(f"   Erros: {self.error_count}")
        logger.info("=" * 60)

        return {
            "processed": self.processed_count,
            "reassigned": self.reassigned_count,
            "skipped": self.skipped_count,
            "errors": self.error_count,
        }

    # =========================================================================
    # PROCESSA UM TENANT
    # =========================================================================

    async def _process_tenant(self, tenant: Tenant, now: datetime):
        stages = await self.repo.list_stages(tenant.id)
        entry = find_stage_by_role(stages, StageRole.ENTRY)
        if entry is None:
            logger.warning(f"⚠️ Tenant {tenant.slug}: sem etapa inicial, pulando")
            return

        sellers = await self.repo.list_sellers(tenant.id)
        peers = [s for s in sellers if s.active]
        # leads já tratados nesta passada não voltam a ser remanejados
        handled: Set[str] = set()

        for seller in sellers:
            settings = DeadlineSettings.for_seller(seller, self.default_minutes)
            if not settings.auto_reassign_enabled:
                continue

            overdue = await self.repo.list_leads(
                tenant.id,
                seller_id=seller.id,
                stage_id=entry.id,
                created_before=deadline_cutoff(settings, now),
            )
            overdue = [lead for lead in overdue if lead.id not in handled]
            if not overdue:
                continue

            logger.info(f"🏢 {tenant.slug} / {seller.name}: {len(overdue)} lead(s) fora do prazo ({settings.minutes} min)")

            for lead in overdue:
                handled.add(lead.id)
                self.processed_count += 1
                await self._process_lead(lead, seller, entry.id, settings, peers, now)

    # =========================================================================
    # PROCESSA UM LEAD
    # =========================================================================

    async def _process_lead(
        self,
        lead: ProspectLead,
        seller: Seller,
        entry_stage_id: str,
        settings: DeadlineSettings,
        peers: List[Seller],
        now: datetime,
    ):
        new_owner_id = choose_new_owner(settings, seller.id, peers, self.rng)
        if new_owner_id is None:
            if settings.reassignment_mode is ReassignmentMode.SPECIFIC:
                logger.warning(
                    f"⚠️ Lead {lead.id}: vendedor de destino {settings.reassignment_target_id} "
                    f"inativo ou inexistente, pulando"
                )
            else:
                logger.info(f"⏭️ Lead {lead.id}: nenhum outro vendedor ativo, pulando")
            self.skipped_count += 1
            return

        changes = plan_auto_reassignment(lead, new_owner_id, now)
        try:
            async with self.repo.savepoint():
                updated = await self.repo.update_lead(
                    lead,
                    changes,
                    expected_seller_id=seller.id,
                    expected_stage_id=entry_stage_id,
                )
        except Exception as e:
            logger.error(f"❌ Erro ao remanejar lead {lead.id}: {e}", exc_info=True)
            self.error_count += 1
            return

        if not updated:
            logger.info(f"⏭️ Lead {lead.id}: já saiu de Novos Leads ou mudou de dono")
            self.skipped_count += 1
            return

        self.reassigned_count += 1
        logger.info(f"🔀 Lead {lead.id} remanejado: {seller.id} → {new_owner_id}")


# =============================================================================
# FUNÇÕES DE ENTRADA
# =============================================================================

async def run_deadline_sweep() -> Dict[str, int]:
    """Uma passada com sessão própria (script, APScheduler)."""
    async with async_session() as session:
        service = DeadlineSweepService(SqlAlchemyProspectRepository(session))
        summary = await service.sweep_overdue_leads()
        await session.commit()
    return summary
