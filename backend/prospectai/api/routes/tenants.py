"""
ROTAS: TENANTS
===============

Cadastro de empresas (cada uma já nasce com o pipeline padrão)
e configurações do ProspectAI.
"""

from fastapi import APIRouter, Depends

from prospectai.api.dependencies import get_repository
from prospectai.api.schemas import (
    ProspectAISettings,
    ProspectAISettingsUpdate,
    TenantCreate,
    TenantResponse,
)
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository
from prospectai.infrastructure.services import tenant_service

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(
    payload: TenantCreate,
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """Cria a empresa e as etapas padrão do funil."""
    return await tenant_service.create_tenant(repo, payload.name, payload.slug, payload.settings)


@router.get("/{slug}", response_model=TenantResponse)
async def get_tenant(
    slug: str,
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    return await tenant_service.get_tenant_by_slug(repo, slug)


@router.get("/{slug}/prospectai-settings", response_model=ProspectAISettings)
async def get_prospectai_settings(
    slug: str,
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    tenant = await tenant_service.get_tenant_by_slug(repo, slug)
    return tenant_service.get_prospectai_settings(tenant)


@router.patch("/{slug}/prospectai-settings", response_model=ProspectAISettings)
async def update_prospectai_settings(
    slug: str,
    payload: ProspectAISettingsUpdate,
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
):
    """Ex: liberar o KPI de leads do mês para todos ou para alguns vendedores."""
    tenant = await tenant_service.get_tenant_by_slug(repo, slug)
    return await tenant_service.update_prospectai_settings(
        repo, tenant, payload.model_dump(exclude_none=True)
    )
