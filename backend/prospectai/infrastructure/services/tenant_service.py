"""
SERVIÇO DE TENANTS
===================

Cadastro da empresa junto com o pipeline padrão, e as configurações
do ProspectAI guardadas em tenant.settings.
"""

import logging
from typing import Any, Dict, Optional

from prospectai.domain.entities import Tenant, new_id
from prospectai.domain.exceptions import ConstraintViolationError, NotFoundError
from prospectai.domain.repositories import ProspectRepository
from prospectai.domain.services.board import prospectai_settings
from prospectai.infrastructure.services.pipeline_service import create_default_pipeline

logger = logging.getLogger(__name__)


async def create_tenant(
    repo: ProspectRepository,
    name: str,
    slug: str,
    settings: Optional[Dict[str, Any]] = None,
) -> Tenant:
    if await repo.get_tenant_by_slug(slug):
        raise ConstraintViolationError(f"Slug já está em uso: {slug}")

    tenant = Tenant(
        id=new_id(),
        name=name,
        slug=slug,
        settings=dict(settings or {}),
        active=True,
    )
    await repo.add_tenant(tenant)
    await create_default_pipeline(repo, tenant)

    logger.info(f"🏢 Tenant criado: {tenant.name} ({tenant.slug})")
    return tenant


async def get_tenant_by_slug(repo: ProspectRepository, slug: str) -> Tenant:
    tenant = await repo.get_tenant_by_slug(slug)
    if tenant is None or not tenant.active:
        raise NotFoundError("Tenant", slug)
    return tenant


def get_prospectai_settings(tenant: Tenant) -> Dict[str, Any]:
    return prospectai_settings(tenant.settings)


async def update_prospectai_settings(
    repo: ProspectRepository,
    tenant: Tenant,
    data: Dict[str, Any],
) -> Dict[str, Any]:
    """Mescla as configurações recebidas com as atuais e grava."""
    current = dict(tenant.settings or {})
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(current.get(key), dict):
            current[key] = {**current[key], **value}
        else:
            current[key] = value

    await repo.update_tenant(tenant, {"settings": current})
    logger.info(f"⚙️ Configurações do ProspectAI atualizadas em {tenant.slug}")
    return prospectai_settings(current)
