"""
DEPENDENCIES (Dependências)
============================

Funções que são injetadas nas rotas.
O tenant vem do parâmetro ?tenant_slug= em todas as rotas do ProspectAI.
"""

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from prospectai.domain.entities import Tenant
from prospectai.infrastructure.database import get_db
from prospectai.infrastructure.repositories.sqlalchemy_repository import SqlAlchemyProspectRepository
from prospectai.infrastructure.services.tenant_service import get_tenant_by_slug


async def get_repository(db: AsyncSession = Depends(get_db)) -> SqlAlchemyProspectRepository:
    """Repositório ligado à sessão da requisição."""
    return SqlAlchemyProspectRepository(db)


async def get_current_tenant(
    tenant_slug: str = Query(..., description="Slug da empresa"),
    repo: SqlAlchemyProspectRepository = Depends(get_repository),
) -> Tenant:
    """
    Retorna o tenant ativo do slug informado.

    Uso nas rotas:
        @router.get("/rota")
        async def rota(tenant: Tenant = Depends(get_current_tenant)):
            ...
    """
    return await get_tenant_by_slug(repo, tenant_slug)
