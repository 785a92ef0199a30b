"""
ROTAS: VENDEDORES (SELLERS)
============================

Equipe de vendas e a visão de cada vendedor no ProspectAI:
prazos, quadro, trava de prospecção, agendamentos e KPI do mês.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from prospectai.api.dependencies import get_current_tenant, get_repository
from prospectai.api.schemas import (
    AppointmentReminder,
    BoardColumnResponse,
    BoardLeadResponse,
    BoardResponse,
    DeadlineSettingsResponse,
    DeadlineSettingsUpdate,
    LeadResponse,
    MonthlyKpiResponse,
    ProspectingLockResponse,
    SellerCreate,
    SellerResponse,
    SellerUpdate,
    StageResponse,
)
from prospectai.domain.entities import Tenant
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository
from prospectai.infrastructure.services import seller_service

router = APIRouter(prefix="/sellers", tags=["Vendedores"])


# ==========================================
# CADASTRO
# ==========================================

@router.get("", response_model=List[SellerResponse])
async def list_sellers(
    active_only: bool = Query(False),
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await seller_service.list_sellers(repo, tenant, active_only=active_only)


@router.post("", response_model=SellerResponse, status_code=201)
async def create_seller(
    payload: SellerCreate,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await seller_service.create_seller(
        repo,
        tenant,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        monthly_sales_goal=payload.monthly_sales_goal,
    )


@router.patch("/{seller_id}", response_model=SellerResponse)
async def update_seller(
    seller_id: str,
    payload: SellerUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await seller_service.update_seller(repo, tenant, seller_id, payload.model_dump(exclude_unset=True))


# ==========================================
# PRAZOS
# ==========================================

@router.get("/{seller_id}/deadline-settings", response_model=DeadlineSettingsResponse)
async def get_deadline_settings(
    seller_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    settings = await seller_service.get_deadline_settings(repo, tenant, seller_id)
    return settings.to_dict()


@router.put("/{seller_id}/deadline-settings", response_model=DeadlineSettingsResponse)
async def update_deadline_settings(
    seller_id: str,
    payload: DeadlineSettingsUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """
    Configura o prazo de primeiro contato.

    Modo "specific" exige reassignment_target_id de outro vendedor da empresa.
    """
    settings = await seller_service.update_deadline_settings(
        repo, tenant, seller_id, payload.model_dump(exclude_unset=True)
    )
    return settings.to_dict()


# ==========================================
# VISÃO DO VENDEDOR
# ==========================================

@router.get("/{seller_id}/board", response_model=BoardResponse)
async def get_board(
    seller_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """
    Kanban do vendedor.

    Leads recebidos por remanejamento aparecem em Novos Leads; a coluna
    Remanejados mostra (somente leitura) os leads que ele repassou.
    """
    board = await seller_service.get_board(repo, tenant, seller_id)

    columns = []
    for column in board.columns:
        leads = [
            BoardLeadResponse(
                **LeadResponse.model_validate(lead).model_dump(),
                deadline_remaining_seconds=board.deadline_remaining.get(lead.id),
            )
            for lead in column.leads
        ]
        columns.append(BoardColumnResponse(
            stage=StageResponse.model_validate(column.stage),
            read_only=column.read_only,
            leads=leads,
        ))

    return BoardResponse(
        seller_id=seller_id,
        columns=columns,
        prospecting_lock=ProspectingLockResponse(
            locked=board.lock.locked,
            pending_lead_ids=board.lock.pending_lead_ids,
        ),
    )


@router.get("/{seller_id}/prospecting-lock", response_model=ProspectingLockResponse)
async def get_prospecting_lock(
    seller_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    lock = await seller_service.get_prospecting_lock(repo, tenant, seller_id)
    return ProspectingLockResponse(locked=lock.locked, pending_lead_ids=lock.pending_lead_ids)


@router.get("/{seller_id}/appointments", response_model=List[AppointmentReminder])
async def get_upcoming_appointments(
    seller_id: str,
    window_hours: Optional[int] = Query(None, ge=1, le=24 * 30),
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """Agendamentos das próximas horas (padrão: APPOINTMENT_REMINDER_HOURS)."""
    upcoming = await seller_service.get_upcoming_appointments(repo, tenant, seller_id, window_hours=window_hours)
    return [
        AppointmentReminder(
            lead=LeadResponse.model_validate(lead),
            appointment_at=lead.appointment_at,
            latest_feedback=latest_feedback,
        )
        for lead, latest_feedback in upcoming
    ]


@router.get("/{seller_id}/monthly-kpi", response_model=MonthlyKpiResponse)
async def get_monthly_kpi(
    seller_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await seller_service.get_monthly_kpi(repo, tenant, seller_id)
