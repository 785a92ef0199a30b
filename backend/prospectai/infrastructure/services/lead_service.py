"""
SERVIÇO DE LEADS DO PROSPECTAI
===============================

Operações interativas sobre um lead:
- Entrada do lead (captação) em Novos Leads
- Mudança de etapa
- Feedback
- Remanejamento manual
- Início da prospecção (respeita a trava de feedback)

Toda validação acontece antes de gravar. Se o banco falhar, o erro sobe
(PersistenceError) e o lead não muda.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from prospectai.config import get_settings
from prospectai.domain.entities import PipelineStage, ProspectLead, StageRole, Tenant, new_id, utcnow
from prospectai.domain.exceptions import (
    ConstraintViolationError,
    InvalidStageError,
    NotFoundError,
    ProspectingLockedError,
)
from prospectai.domain.repositories import ProspectRepository
from prospectai.domain.services.lead_transitions import (
    plan_feedback,
    plan_manual_reassignment,
    plan_transition,
)
from prospectai.domain.services.pipeline_rules import (
    find_stage,
    find_stage_by_role,
    list_actionable_stages,
)
from prospectai.domain.services.prospecting_lock import evaluate_prospecting_lock

logger = logging.getLogger(__name__)


# ==========================================
# CONSULTAS
# ==========================================

async def get_lead(repo: ProspectRepository, tenant: Tenant, lead_id: str) -> ProspectLead:
    lead = await repo.get_lead(lead_id)
    if lead is None or lead.tenant_id != tenant.id:
        raise NotFoundError("Lead", lead_id)
    return lead


async def list_leads(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: Optional[str] = None,
    stage_id: Optional[str] = None,
) -> List[ProspectLead]:
    return await repo.list_leads(tenant.id, seller_id=seller_id, stage_id=stage_id)


async def get_actionable_stages(
    repo: ProspectRepository,
    tenant: Tenant,
    lead_id: str,
) -> List[PipelineStage]:
    """Etapas para onde o lead pode ir (funil só anda para frente)."""
    lead = await get_lead(repo, tenant, lead_id)
    stages = await repo.list_stages(tenant.id)
    current = find_stage(stages, lead.stage_id)
    if current is None:
        raise InvalidStageError(f"Etapa atual do lead não encontrada: {lead.stage_id}")
    return list_actionable_stages(current, stages)


# ==========================================
# ENTRADA DO LEAD
# ==========================================

async def create_lead(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    lead_name: str,
    lead_phone: Optional[str] = None,
    interest_vehicle: Optional[str] = None,
    raw_lead_data: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> ProspectLead:
    """Lead novo entra em Novos Leads com o vendedor indicado."""
    now = now or utcnow()

    seller = await repo.get_seller(seller_id)
    if seller is None or seller.tenant_id != tenant.id or not seller.active:
        raise NotFoundError("Vendedor", seller_id)

    stages = await repo.list_stages(tenant.id)
    entry = find_stage_by_role(stages, StageRole.ENTRY)
    if entry is None:
        raise InvalidStageError(f"Tenant {tenant.slug} não tem etapa inicial")

    lead = ProspectLead(
        id=new_id(),
        tenant_id=tenant.id,
        seller_id=seller.id,
        stage_id=entry.id,
        lead_name=lead_name,
        lead_phone=lead_phone,
        interest_vehicle=interest_vehicle,
        raw_lead_data=raw_lead_data,
        details=dict(details) if details else None,
        feedback=[],
        created_at=now,
        updated_at=now,
    )
    await repo.add_lead(lead)

    logger.info(f"📥 Lead {lead.id} ({lead_name}) recebido por {seller.name}")
    return lead


# ==========================================
# MUDANÇA DE ETAPA
# ==========================================

async def transition_lead(
    repo: ProspectRepository,
    tenant: Tenant,
    lead_id: str,
    target_stage_id: str,
    extra: Optional[Dict[str, Any]] = None,
    forward_only: bool = False,
    now: Optional[datetime] = None,
) -> ProspectLead:
    """
    Move o lead para outra etapa.

    Com forward_only, o destino precisa estar entre as etapas acionáveis
    (é o que a API usa, a não ser que a requisição peça force).
    """
    now = now or utcnow()
    lead = await get_lead(repo, tenant, lead_id)
    target = await repo.get_stage(target_stage_id)

    if forward_only and target is not None and target.tenant_id == lead.tenant_id:
        stages = await repo.list_stages(tenant.id)
        current = find_stage(stages, lead.stage_id)
        allowed = {s.id for s in list_actionable_stages(current, stages)} if current else set()
        if target.id not in allowed:
            raise ConstraintViolationError(
                f"Transição não permitida para '{target.name}': o funil só anda para frente"
            )

    changes = plan_transition(lead, target, extra, now)
    previous_stage_id = lead.stage_id

    if not await repo.update_lead(lead, changes):
        raise NotFoundError("Lead", lead_id)

    logger.info(f"➡️ Lead {lead.id}: etapa {previous_stage_id} → {target.name}")
    return lead


async def start_prospecting(
    repo: ProspectRepository,
    tenant: Tenant,
    lead_id: str,
    seller_id: str,
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> ProspectLead:
    """
    Vendedor começa a trabalhar um lead de Novos Leads (ou recebido
    por Remanejados): o lead vai para Primeira Tentativa.
    """
    now = now or utcnow()
    tz_name = tz_name or get_settings().timezone

    lead = await get_lead(repo, tenant, lead_id)
    if lead.seller_id != seller_id:
        raise ConstraintViolationError("Somente o dono do lead pode iniciar a prospecção")

    stages = await repo.list_stages(tenant.id)
    current = find_stage(stages, lead.stage_id)
    if current is None or current.role not in (StageRole.ENTRY.value, StageRole.HOLDING.value):
        raise ConstraintViolationError("A prospecção só começa em leads novos ou remanejados")

    seller_leads = await repo.list_leads(tenant.id, seller_id=seller_id)
    lock = evaluate_prospecting_lock(seller_leads, stages, seller_id, now, tz_name)
    if lock.locked:
        logger.info(f"🔒 Prospecção bloqueada para {seller_id}: {len(lock.pending_lead_ids)} pendente(s)")
        raise ProspectingLockedError(seller_id, lock.pending_lead_ids)

    first_attempt = find_stage_by_role(stages, StageRole.FIRST_ATTEMPT)
    if first_attempt is None or not first_attempt.is_enabled:
        raise InvalidStageError(f"Tenant {tenant.slug} não tem etapa de primeira tentativa habilitada")

    changes = plan_transition(lead, first_attempt, None, now)
    updated = await repo.update_lead(
        lead,
        changes,
        expected_seller_id=seller_id,
        expected_stage_id=current.id,
    )
    if not updated:
        raise ConstraintViolationError("O lead mudou de dono ou de etapa; atualize a tela")

    logger.info(f"📞 Prospecção iniciada: lead {lead.id} por {seller_id}")
    return lead


# ==========================================
# FEEDBACK
# ==========================================

async def submit_feedback(
    repo: ProspectRepository,
    tenant: Tenant,
    lead_id: str,
    text: str,
    images: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> ProspectLead:
    now = now or utcnow()
    lead = await get_lead(repo, tenant, lead_id)

    changes = plan_feedback(lead, text, images, now)
    if not await repo.update_lead(lead, changes):
        raise NotFoundError("Lead", lead_id)

    logger.info(f"📝 Feedback registrado no lead {lead.id}")
    return lead


# ==========================================
# REMANEJAMENTO MANUAL
# ==========================================

async def reassign_manually(
    repo: ProspectRepository,
    tenant: Tenant,
    lead_id: str,
    new_seller_id: str,
    from_seller_id: str,
    now: Optional[datetime] = None,
) -> ProspectLead:
    """
    Passa o lead para outro vendedor e o estaciona em Remanejados.

    from_seller_id precisa ser o dono atual; protege contra telas
    desatualizadas que tentam remanejar um lead que já mudou de mãos.
    """
    now = now or utcnow()
    lead = await get_lead(repo, tenant, lead_id)

    if lead.seller_id != from_seller_id:
        raise ConstraintViolationError("O lead não pertence mais ao vendedor de origem")
    if new_seller_id == lead.seller_id:
        raise ConstraintViolationError("O novo vendedor deve ser diferente do atual")

    new_seller = await repo.get_seller(new_seller_id)
    if new_seller is None or new_seller.tenant_id != tenant.id or not new_seller.active:
        raise NotFoundError("Vendedor", new_seller_id)

    stages = await repo.list_stages(tenant.id)
    holding = find_stage_by_role(stages, StageRole.HOLDING)
    if holding is None:
        raise InvalidStageError(f"Tenant {tenant.slug} não tem etapa de remanejados")

    changes = plan_manual_reassignment(lead, holding, new_seller.id, from_seller_id, now)
    if not await repo.update_lead(lead, changes, expected_seller_id=from_seller_id):
        raise ConstraintViolationError("O lead mudou de dono; atualize a tela")

    logger.info(f"🔀 Lead {lead.id} remanejado manualmente: {from_seller_id} → {new_seller.id}")
    return lead
