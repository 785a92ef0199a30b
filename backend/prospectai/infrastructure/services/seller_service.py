"""
SERVIÇO DE VENDEDORES
======================

Equipe de vendas do tenant e o que cada vendedor vê no ProspectAI:
- Cadastro / ativação
- Prazo de primeiro contato e remanejamento automático
- Quadro (kanban), trava de prospecção, agendamentos, KPI mensal
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from prospectai.config import get_settings
from prospectai.domain.entities import ProspectLead, ReassignmentMode, Seller, Tenant, new_id, utcnow
from prospectai.domain.exceptions import NotFoundError
from prospectai.domain.repositories import ProspectRepository
from prospectai.domain.services.board import (
    BoardColumn,
    build_board,
    can_view_monthly_kpi,
    upcoming_appointments,
)
from prospectai.domain.services.deadline_policy import (
    DeadlineSettings,
    deadline_remaining,
    merge_deadline_settings,
    validate_deadline_settings,
)
from prospectai.domain.services.performance_metrics import monthly_leads_count
from prospectai.domain.services.pipeline_rules import find_stage
from prospectai.domain.services.prospecting_lock import ProspectingLock, evaluate_prospecting_lock

logger = logging.getLogger(__name__)


@dataclass
class SellerBoard:
    columns: List[BoardColumn]
    deadline_remaining: Dict[str, Optional[float]]
    lock: ProspectingLock


# ==========================================
# CADASTRO
# ==========================================

async def get_seller(repo: ProspectRepository, tenant: Tenant, seller_id: str) -> Seller:
    seller = await repo.get_seller(seller_id)
    if seller is None or seller.tenant_id != tenant.id:
        raise NotFoundError("Vendedor", seller_id)
    return seller


async def list_sellers(repo: ProspectRepository, tenant: Tenant, active_only: bool = False) -> List[Seller]:
    return await repo.list_sellers(tenant.id, active_only=active_only)


async def create_seller(
    repo: ProspectRepository,
    tenant: Tenant,
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    monthly_sales_goal: int = 0,
) -> Seller:
    seller = Seller(
        id=new_id(),
        tenant_id=tenant.id,
        name=name,
        email=email,
        phone=phone,
        monthly_sales_goal=monthly_sales_goal,
        active=True,
    )
    await repo.add_seller(seller)
    logger.info(f"👤 Vendedor cadastrado: {name} ({tenant.slug})")
    return seller


async def update_seller(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    changes: Dict[str, Any],
) -> Seller:
    seller = await get_seller(repo, tenant, seller_id)
    allowed = {k: v for k, v in changes.items() if k in ("name", "email", "phone", "monthly_sales_goal", "active")}
    if allowed:
        await repo.update_seller(seller, allowed)
        logger.info(f"✏️ Vendedor {seller.id} atualizado: {sorted(allowed)}")
    return seller


# ==========================================
# PRAZOS
# ==========================================

async def get_deadline_settings(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
) -> DeadlineSettings:
    seller = await get_seller(repo, tenant, seller_id)
    return DeadlineSettings.for_seller(seller, get_settings().default_deadline_minutes)


async def update_deadline_settings(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    data: Dict[str, Any],
) -> DeadlineSettings:
    """Atualiza só os campos informados; o resto mantém o valor atual."""
    seller = await get_seller(repo, tenant, seller_id)
    current = DeadlineSettings.for_seller(seller, get_settings().default_deadline_minutes)
    settings = DeadlineSettings.from_dict({**current.to_dict(), **data})

    target = None
    target_id = settings.reassignment_target_id
    if settings.reassignment_mode is ReassignmentMode.SPECIFIC and target_id and target_id != seller.id:
        target = await repo.get_seller(target_id)
        if target is None:
            raise NotFoundError("Vendedor", target_id)

    validate_deadline_settings(seller, settings, target)

    merged = merge_deadline_settings(seller.prospect_settings, settings)
    await repo.update_seller(seller, {"prospect_settings": merged})

    logger.info(
        f"⏱️ Prazo de {seller.name}: {settings.minutes} min, "
        f"remanejamento={'on' if settings.auto_reassign_enabled else 'off'} ({settings.reassignment_mode.value})"
    )
    return settings


# ==========================================
# VISÃO DO VENDEDOR
# ==========================================

async def get_prospecting_lock(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    now: Optional[datetime] = None,
) -> ProspectingLock:
    seller = await get_seller(repo, tenant, seller_id)
    leads = await repo.list_leads(tenant.id, seller_id=seller.id)
    stages = await repo.list_stages(tenant.id)
    return evaluate_prospecting_lock(leads, stages, seller.id, now or utcnow(), get_settings().timezone)


async def get_board(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    now: Optional[datetime] = None,
) -> SellerBoard:
    now = now or utcnow()
    config = get_settings()

    seller = await get_seller(repo, tenant, seller_id)
    leads = await repo.list_leads(tenant.id)
    stages = await repo.list_stages(tenant.id)

    columns = build_board(leads, stages, seller.id)
    settings = DeadlineSettings.for_seller(seller, config.default_deadline_minutes)

    remaining = {}
    for column in columns:
        if column.read_only:
            continue
        for lead in column.leads:
            remaining[lead.id] = deadline_remaining(lead, find_stage(stages, lead.stage_id), settings, now)

    lock = evaluate_prospecting_lock(leads, stages, seller.id, now, config.timezone)
    return SellerBoard(columns=columns, deadline_remaining=remaining, lock=lock)


async def get_upcoming_appointments(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    now: Optional[datetime] = None,
    window_hours: Optional[int] = None,
) -> List[Tuple[ProspectLead, Optional[str]]]:
    seller = await get_seller(repo, tenant, seller_id)
    leads = await repo.list_leads(tenant.id, seller_id=seller.id)
    stages = await repo.list_stages(tenant.id)
    hours = window_hours or get_settings().appointment_reminder_hours
    return upcoming_appointments(leads, stages, seller.id, now or utcnow(), hours)


async def get_monthly_kpi(
    repo: ProspectRepository,
    tenant: Tenant,
    seller_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """KPI de leads do mês, se o tenant liberou para este vendedor."""
    seller = await get_seller(repo, tenant, seller_id)
    if not can_view_monthly_kpi(tenant.settings, seller.id):
        return {"visible": False, "count": None}

    leads = await repo.list_leads(tenant.id, seller_id=seller.id)
    count = monthly_leads_count(leads, now or utcnow(), get_settings().timezone)
    return {"visible": True, "count": count}
