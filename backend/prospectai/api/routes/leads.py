"""
ROTAS: LEADS
=============

Endpoints do pipeline de prospecção:
entrada de lead, mudança de etapa, feedback, remanejamento manual
e início da prospecção.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from prospectai.api.dependencies import get_current_tenant, get_repository
from prospectai.api.schemas import (
    FeedbackRequest,
    LeadCreate,
    LeadResponse,
    ReassignRequest,
    StageResponse,
    StartProspectingRequest,
    TransitionRequest,
)
from prospectai.domain.entities import Tenant
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository
from prospectai.infrastructure.services import lead_service

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("", response_model=List[LeadResponse])
async def list_leads(
    seller_id: Optional[str] = Query(None),
    stage_id: Optional[str] = Query(None),
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await lead_service.list_leads(repo, tenant, seller_id=seller_id, stage_id=stage_id)


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(
    payload: LeadCreate,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """Entrada do lead vindo da captação. Cai em Novos Leads."""
    return await lead_service.create_lead(
        repo,
        tenant,
        seller_id=payload.seller_id,
        lead_name=payload.lead_name,
        lead_phone=payload.lead_phone,
        interest_vehicle=payload.interest_vehicle,
        raw_lead_data=payload.raw_lead_data,
        details=payload.details,
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await lead_service.get_lead(repo, tenant, lead_id)


@router.get("/{lead_id}/actionable-stages", response_model=List[StageResponse])
async def get_actionable_stages(
    lead_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await lead_service.get_actionable_stages(repo, tenant, lead_id)


@router.post("/{lead_id}/transition", response_model=LeadResponse)
async def transition_lead(
    lead_id: str,
    payload: TransitionRequest,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """
    Move o lead de etapa.

    Só para frente, a não ser com force=true.
    """
    return await lead_service.transition_lead(
        repo,
        tenant,
        lead_id,
        payload.target_stage_id,
        extra=payload.extra(),
        forward_only=not payload.force,
    )


@router.post("/{lead_id}/feedback", response_model=LeadResponse)
async def submit_feedback(
    lead_id: str,
    payload: FeedbackRequest,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await lead_service.submit_feedback(repo, tenant, lead_id, payload.text, payload.images)


@router.post("/{lead_id}/reassign", response_model=LeadResponse)
async def reassign_lead(
    lead_id: str,
    payload: ReassignRequest,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await lead_service.reassign_manually(
        repo, tenant, lead_id, payload.new_seller_id, payload.from_seller_id
    )


@router.post("/{lead_id}/start-prospecting", response_model=LeadResponse)
async def start_prospecting(
    lead_id: str,
    payload: StartProspectingRequest,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """409 com pending_lead_ids quando há leads de dias anteriores sem feedback."""
    return await lead_service.start_prospecting(repo, tenant, lead_id, payload.seller_id)
