"""
REGRAS DO PIPELINE
==================

Configuração das etapas do funil por tenant:
- Pipeline padrão criado junto com a empresa
- Resolução do papel (role) de cada etapa a partir do nome
- Filtro de etapas acionáveis (funil só anda para frente)

O papel é resolvido uma vez, na criação da etapa. Renomear uma etapa
não muda o papel dela.
"""

from typing import Iterable, List, Optional, Sequence

from prospectai.domain.entities import PipelineStage, StageRole, new_id


# Etapas de ordem >= 99 ficam sempre no fim (Finalizados, Remanejados)
RESERVED_ORDER_START = 99

DEFAULT_PIPELINE = [
    # (nome, ordem, papel, fixa)
    ("Novos Leads", 0, StageRole.ENTRY, True),
    ("Primeira Tentativa", 1, StageRole.FIRST_ATTEMPT, False),
    ("Segunda Tentativa", 2, StageRole.STANDARD, False),
    ("Terceira Tentativa", 3, StageRole.STANDARD, False),
    ("Agendado", 4, StageRole.SCHEDULING, False),
    ("Finalizados", 99, StageRole.TERMINAL, True),
    ("Remanejados", 100, StageRole.HOLDING, True),
]

ROLE_BY_NAME = {
    "novos leads": StageRole.ENTRY,
    "primeira tentativa": StageRole.FIRST_ATTEMPT,
    "agendado": StageRole.SCHEDULING,
    "finalizados": StageRole.TERMINAL,
    "remanejados": StageRole.HOLDING,
}

# Etapas onde o vendedor precisa agir (e dar feedback)
NON_ACTIONABLE_ROLES = {StageRole.ENTRY, StageRole.TERMINAL, StageRole.HOLDING}


def build_default_stages(tenant_id: str) -> List[PipelineStage]:
    """Cria (sem persistir) as etapas padrão de um tenant novo."""
    return [
        PipelineStage(
            id=new_id(),
            tenant_id=tenant_id,
            name=name,
            stage_order=order,
            role=role.value,
            is_fixed=fixed,
            is_enabled=True,
        )
        for name, order, role, fixed in DEFAULT_PIPELINE
    ]


def resolve_role(name: str, existing: Iterable[PipelineStage] = ()) -> StageRole:
    """
    Resolve o papel de uma etapa nova pelo nome.

    Papéis especiais são únicos por tenant: se o papel já existe,
    a nova etapa vira STANDARD.
    """
    role = ROLE_BY_NAME.get(name.strip().lower(), StageRole.STANDARD)
    if role is StageRole.STANDARD:
        return role

    taken = {stage.role for stage in existing}
    if role.value in taken:
        return StageRole.STANDARD
    return role


def sort_stages(stages: Iterable[PipelineStage]) -> List[PipelineStage]:
    return sorted(stages, key=lambda s: s.stage_order)


def find_stage_by_role(stages: Iterable[PipelineStage], role: StageRole) -> Optional[PipelineStage]:
    for stage in stages:
        if stage.role == role.value:
            return stage
    return None


def find_stage(stages: Iterable[PipelineStage], stage_id: str) -> Optional[PipelineStage]:
    for stage in stages:
        if stage.id == stage_id:
            return stage
    return None


def next_stage_order(stages: Iterable[PipelineStage]) -> int:
    """Ordem da próxima etapa customizada (antes da faixa reservada)."""
    orders = [s.stage_order for s in stages if s.stage_order < RESERVED_ORDER_START]
    return (max(orders) + 1) if orders else 0


def actionable_stages(stages: Iterable[PipelineStage]) -> List[PipelineStage]:
    """Etapas habilitadas em que o vendedor está trabalhando o lead."""
    return [
        s for s in sort_stages(stages)
        if s.is_enabled and StageRole(s.role) not in NON_ACTIONABLE_ROLES
    ]


def list_actionable_stages(
    current_stage: PipelineStage,
    stages: Sequence[PipelineStage],
) -> List[PipelineStage]:
    """
    Destinos válidos a partir da etapa atual.

    Toda etapa habilitada do mesmo tenant com ordem estritamente maior,
    exceto a de remanejados, em ordem crescente. Um lead na etapa de
    remanejados é tratado como se estivesse na etapa inicial (é assim
    que o novo dono o recebe).
    """
    origin = current_stage
    if current_stage.role == StageRole.HOLDING.value:
        origin = find_stage_by_role(stages, StageRole.ENTRY) or current_stage

    return [
        s for s in sort_stages(stages)
        if s.tenant_id == current_stage.tenant_id
        and s.is_enabled
        and s.stage_order > origin.stage_order
        and s.role != StageRole.HOLDING.value
    ]
