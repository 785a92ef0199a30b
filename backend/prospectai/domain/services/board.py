"""
QUADRO DO VENDEDOR (KANBAN)
============================

Monta as colunas que o vendedor vê:
- Leads dele em suas etapas (os que chegaram por Remanejados aparecem
  em Novos Leads, como se tivessem acabado de chegar)
- Leads que ele passou para outro vendedor, na coluna Remanejados
  (somente leitura)

Também resolve lembretes de agendamento e a visibilidade do KPI mensal.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from prospectai.domain.entities import PipelineStage, ProspectLead, StageRole
from prospectai.domain.services.pipeline_rules import find_stage_by_role, sort_stages


DEFAULT_PROSPECTAI_SETTINGS = {
    "show_monthly_leads_kpi": {
        "enabled": False,
        "visible_to": "all",
    },
}


@dataclass
class BoardColumn:
    stage: PipelineStage
    leads: List[ProspectLead] = field(default_factory=list)
    read_only: bool = False


def reassigned_away_leads(leads: Iterable[ProspectLead], seller_id: str) -> List[ProspectLead]:
    """Leads que o vendedor repassou e que hoje são de outro."""
    return [
        lead for lead in leads
        if lead.seller_id != seller_id
        and (lead.details or {}).get("reassigned_from") == seller_id
    ]


def build_board(
    leads: Sequence[ProspectLead],
    stages: Sequence[PipelineStage],
    seller_id: str,
) -> List[BoardColumn]:
    columns = [BoardColumn(stage=s) for s in sort_stages(stages) if s.is_enabled]
    by_stage_id = {column.stage.id: column for column in columns}

    entry = find_stage_by_role(stages, StageRole.ENTRY)
    holding = find_stage_by_role(stages, StageRole.HOLDING)

    for lead in leads:
        if lead.seller_id != seller_id:
            continue
        stage_id = lead.stage_id
        if holding is not None and entry is not None and stage_id == holding.id:
            stage_id = entry.id
        column = by_stage_id.get(stage_id)
        if column is not None:
            column.leads.append(lead)

    if holding is not None and holding.id in by_stage_id:
        holding_column = by_stage_id[holding.id]
        holding_column.leads = reassigned_away_leads(leads, seller_id)
        holding_column.read_only = True

    return columns


def latest_feedback_text(lead: ProspectLead) -> Optional[str]:
    if not lead.feedback:
        return None
    return lead.feedback[-1].get("text") or None


def upcoming_appointments(
    leads: Iterable[ProspectLead],
    stages: Iterable[PipelineStage],
    seller_id: str,
    now: datetime,
    window_hours: int = 48,
) -> List[Tuple[ProspectLead, Optional[str]]]:
    """
    Agendamentos do vendedor nas próximas `window_hours` horas.

    Retorna (lead, texto do último feedback), do mais próximo ao mais distante.
    """
    scheduling_ids = {s.id for s in stages if s.role == StageRole.SCHEDULING.value}
    limit = now + timedelta(hours=window_hours)

    upcoming = [
        lead for lead in leads
        if lead.seller_id == seller_id
        and lead.stage_id in scheduling_ids
        and lead.appointment_at is not None
        and now < lead.appointment_at <= limit
    ]
    upcoming.sort(key=lambda lead: lead.appointment_at)
    return [(lead, latest_feedback_text(lead)) for lead in upcoming]


def prospectai_settings(tenant_settings: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Configurações do ProspectAI do tenant mescladas com o padrão."""
    merged = {key: dict(value) for key, value in DEFAULT_PROSPECTAI_SETTINGS.items()}
    for key, value in (tenant_settings or {}).items():
        if key in merged and isinstance(value, dict):
            merged[key].update(value)
    return merged


def can_view_monthly_kpi(tenant_settings: Optional[Dict[str, Any]], seller_id: str) -> bool:
    kpi = prospectai_settings(tenant_settings)["show_monthly_leads_kpi"]
    if not kpi.get("enabled"):
        return False
    visible_to = kpi.get("visible_to", "all")
    if visible_to == "all":
        return True
    return seller_id in (visible_to or [])
