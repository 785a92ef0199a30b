"""
SERVIÇO DE CONFIGURAÇÃO DO PIPELINE
====================================

Etapas do funil de cada tenant:
- Pipeline padrão (criado com o tenant)
- Adicionar / renomear / habilitar / desabilitar / excluir etapas

Etapas fixas (Novos Leads, Finalizados, Remanejados) não podem ser
renomeadas, desabilitadas nem excluídas. Uma etapa só é excluída se
nenhum lead estiver nela.
"""

import logging
from typing import List, Optional

from prospectai.domain.entities import PipelineStage, Tenant, new_id
from prospectai.domain.exceptions import ConstraintViolationError, NotFoundError, StageInUseError
from prospectai.domain.repositories import ProspectRepository
from prospectai.domain.services.pipeline_rules import (
    build_default_stages,
    next_stage_order,
    resolve_role,
    sort_stages,
)

logger = logging.getLogger(__name__)


def _name_taken(stages: List[PipelineStage], name: str, ignore_id: Optional[str] = None) -> bool:
    wanted = name.strip().lower()
    return any(s.name.strip().lower() == wanted and s.id != ignore_id for s in stages)


async def create_default_pipeline(repo: ProspectRepository, tenant: Tenant) -> List[PipelineStage]:
    """Cria as etapas padrão. Não faz nada se o tenant já tem etapas."""
    existing = await repo.list_stages(tenant.id)
    if existing:
        return existing

    stages = build_default_stages(tenant.id)
    for stage in stages:
        await repo.add_stage(stage)

    logger.info(f"📋 Pipeline padrão criado para {tenant.slug} ({len(stages)} etapas)")
    return stages


async def list_stages(
    repo: ProspectRepository,
    tenant: Tenant,
    include_disabled: bool = True,
) -> List[PipelineStage]:
    stages = sort_stages(await repo.list_stages(tenant.id))
    if include_disabled:
        return stages
    return [s for s in stages if s.is_enabled]


async def get_stage(repo: ProspectRepository, tenant: Tenant, stage_id: str) -> PipelineStage:
    stage = await repo.get_stage(stage_id)
    if stage is None or stage.tenant_id != tenant.id:
        raise NotFoundError("Etapa", stage_id)
    return stage


async def add_stage(repo: ProspectRepository, tenant: Tenant, name: str) -> PipelineStage:
    """Adiciona uma etapa customizada antes de Finalizados/Remanejados."""
    name = name.strip()
    if not name:
        raise ConstraintViolationError("Nome da etapa é obrigatório")

    stages = await repo.list_stages(tenant.id)
    if _name_taken(stages, name):
        raise ConstraintViolationError(f"Já existe uma etapa chamada '{name}'")

    stage = PipelineStage(
        id=new_id(),
        tenant_id=tenant.id,
        name=name,
        stage_order=next_stage_order(stages),
        role=resolve_role(name, stages).value,
        is_fixed=False,
        is_enabled=True,
    )
    await repo.add_stage(stage)

    logger.info(f"➕ Etapa '{name}' ({stage.role}) criada em {tenant.slug}")
    return stage


async def update_stage(
    repo: ProspectRepository,
    tenant: Tenant,
    stage_id: str,
    name: Optional[str] = None,
    is_enabled: Optional[bool] = None,
) -> PipelineStage:
    """Renomeia e/ou habilita/desabilita. O papel da etapa não muda."""
    stage = await get_stage(repo, tenant, stage_id)
    changes = {}

    if name is not None and name.strip() != stage.name:
        if stage.is_fixed:
            raise ConstraintViolationError(f"A etapa '{stage.name}' é fixa e não pode ser renomeada")
        name = name.strip()
        if not name:
            raise ConstraintViolationError("Nome da etapa é obrigatório")
        stages = await repo.list_stages(tenant.id)
        if _name_taken(stages, name, ignore_id=stage.id):
            raise ConstraintViolationError(f"Já existe uma etapa chamada '{name}'")
        changes["name"] = name

    if is_enabled is not None and is_enabled != stage.is_enabled:
        if stage.is_fixed:
            raise ConstraintViolationError(f"A etapa '{stage.name}' é fixa e não pode ser desabilitada")
        changes["is_enabled"] = is_enabled

    if changes:
        await repo.update_stage(stage, changes)
        logger.info(f"✏️ Etapa {stage.id} atualizada: {changes}")

    return stage


async def delete_stage(repo: ProspectRepository, tenant: Tenant, stage_id: str) -> None:
    stage = await get_stage(repo, tenant, stage_id)

    if stage.is_fixed:
        raise ConstraintViolationError(f"A etapa '{stage.name}' é fixa e não pode ser excluída")

    lead_count = await repo.count_leads_in_stage(stage.id)
    if lead_count:
        raise StageInUseError(stage.name, lead_count)

    await repo.delete_stage(stage)
    logger.info(f"🗑️ Etapa '{stage.name}' excluída de {tenant.slug}")
