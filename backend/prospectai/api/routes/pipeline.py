"""
ROTAS: PIPELINE
================

Configuração das etapas do funil do tenant.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from prospectai.api.dependencies import get_current_tenant, get_repository
from prospectai.api.schemas import StageCreate, StageResponse, StageUpdate
from prospectai.domain.entities import Tenant
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository
from prospectai.infrastructure.services import pipeline_service

router = APIRouter(prefix="/pipeline/stages", tags=["Pipeline"])


@router.get("", response_model=List[StageResponse])
async def list_stages(
    include_disabled: bool = Query(True),
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await pipeline_service.list_stages(repo, tenant, include_disabled=include_disabled)


@router.post("", response_model=StageResponse, status_code=201)
async def add_stage(
    payload: StageCreate,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await pipeline_service.add_stage(repo, tenant, payload.name)


@router.patch("/{stage_id}", response_model=StageResponse)
async def update_stage(
    stage_id: str,
    payload: StageUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await pipeline_service.update_stage(
        repo, tenant, stage_id, name=payload.name, is_enabled=payload.is_enabled
    )


@router.delete("/{stage_id}", status_code=204)
async def delete_stage(
    stage_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """409 se a etapa é fixa ou ainda tem leads."""
    await pipeline_service.delete_stage(repo, tenant, stage_id)
    return Response(status_code=204)
