"""
MÉTRICAS DE DESEMPENHO DO PROSPECTAI
=====================================

Projeção somente-leitura sobre um conjunto de leads + etapas do tenant:
- Contagem por etapa (Finalizados dividido em convertido / não convertido)
- Funil (total → em contato → agendados → finalizados)
- Taxa de conversão
- Tempo médio de primeiro contato e de atendimento
- Linha do tempo de feedbacks
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from prospectai.domain.entities import LeadOutcome, MetricsPeriod, PipelineStage, ProspectLead, StageRole
from prospectai.domain.services.pipeline_rules import sort_stages
from prospectai.domain.services.time_utils import parse_timestamp, start_of_day


STATUS_CONVERTED = "Finalizado - Convertido"
STATUS_NOT_CONVERTED = "Finalizado - Não Convertido"
STATUS_UNKNOWN = "Desconhecido"

CONTACTED_ROLES = {StageRole.FIRST_ATTEMPT, StageRole.STANDARD, StageRole.SCHEDULING, StageRole.TERMINAL}
SCHEDULED_ROLES = {StageRole.SCHEDULING, StageRole.TERMINAL}


@dataclass
class FeedbackTimelineEntry:
    lead_id: str
    lead_name: str
    lead_status: str
    text: str
    images: List[str]
    created_at: Optional[datetime]


@dataclass
class PerformanceMetrics:
    total_leads: int = 0
    total_converted: int = 0
    total_not_converted: int = 0
    conversion_rate: float = 0.0
    avg_response_time_seconds: float = 0.0
    avg_closing_time_seconds: float = 0.0
    stage_counts: Dict[str, int] = field(default_factory=dict)
    funnel: Dict[str, int] = field(default_factory=dict)
    feedback_timeline: List[FeedbackTimelineEntry] = field(default_factory=list)


def resolve_period(
    period: MetricsPeriod,
    now: datetime,
    tz_name: str,
) -> Optional[datetime]:
    """Data inicial do período (None = todo o período)."""
    today = start_of_day(now, tz_name)
    if period is MetricsPeriod.LAST_7_DAYS:
        return today - timedelta(days=7)
    if period is MetricsPeriod.THIS_MONTH:
        return today.replace(day=1)
    if period is MetricsPeriod.LAST_90_DAYS:
        return today - timedelta(days=90)
    return None


def filter_by_created_at(
    leads: Iterable[ProspectLead],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[ProspectLead]:
    return [
        lead for lead in leads
        if (start is None or lead.created_at >= start)
        and (end is None or lead.created_at < end)
    ]


def display_status(lead: ProspectLead, stage: Optional[PipelineStage]) -> str:
    """Nome da etapa, ou Finalizado - (Não) Convertido na etapa final."""
    if stage is None:
        return STATUS_UNKNOWN
    if stage.role == StageRole.TERMINAL.value:
        if lead.outcome == LeadOutcome.CONVERTED.value:
            return STATUS_CONVERTED
        if lead.outcome == LeadOutcome.NOT_CONVERTED.value:
            return STATUS_NOT_CONVERTED
    return stage.name


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _stage_counts(leads: Sequence[ProspectLead], stages: Sequence[PipelineStage]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for stage in sort_stages(stages):
        if stage.role == StageRole.TERMINAL.value:
            counts[STATUS_CONVERTED] = 0
            counts[STATUS_NOT_CONVERTED] = 0
        else:
            counts[stage.name] = 0

    by_id = {s.id: s for s in stages}
    for lead in leads:
        status = display_status(lead, by_id.get(lead.stage_id))
        counts[status] = counts.get(status, 0) + 1
    return counts


def _funnel(leads: Sequence[ProspectLead], stages_by_id: Dict[str, PipelineStage], converted: int, not_converted: int) -> Dict[str, int]:
    roles = [
        StageRole(stages_by_id[lead.stage_id].role)
        for lead in leads if lead.stage_id in stages_by_id
    ]
    return {
        "total": len(leads),
        "contacted": sum(1 for role in roles if role in CONTACTED_ROLES),
        "scheduled": sum(1 for role in roles if role in SCHEDULED_ROLES),
        "converted": converted,
        "not_converted": not_converted,
    }


def _feedback_timeline(leads: Sequence[ProspectLead], stages_by_id: Dict[str, PipelineStage]) -> List[FeedbackTimelineEntry]:
    entries = []
    for lead in leads:
        if not lead.feedback:
            continue
        status = display_status(lead, stages_by_id.get(lead.stage_id))
        for item in lead.feedback:
            entries.append(FeedbackTimelineEntry(
                lead_id=lead.id,
                lead_name=lead.lead_name,
                lead_status=status,
                text=item.get("text", ""),
                images=list(item.get("images") or []),
                created_at=parse_timestamp(item.get("created_at")),
            ))
    # feedback sem data (importado / migrado) vai para o fim
    entries.sort(key=lambda e: (e.created_at is not None, e.created_at or datetime.min), reverse=True)
    return entries


def compute_metrics(
    leads: Iterable[ProspectLead],
    stages: Sequence[PipelineStage],
    date_range: Optional[Tuple[Optional[datetime], Optional[datetime]]] = None,
) -> PerformanceMetrics:
    """Calcula as métricas sem alterar nada."""
    if date_range is not None:
        leads = filter_by_created_at(leads, *date_range)
    leads = list(leads)

    stages_by_id = {s.id: s for s in stages}
    terminal_ids = {s.id for s in stages if s.role == StageRole.TERMINAL.value}
    finalized = [l for l in leads if l.stage_id in terminal_ids]

    converted = [l for l in finalized if l.outcome == LeadOutcome.CONVERTED.value]
    not_converted = [l for l in finalized if l.outcome == LeadOutcome.NOT_CONVERTED.value]
    decided = len(converted) + len(not_converted)

    conversion_rate = (len(converted) / decided) * 100 if decided else 0.0

    response_times = [
        (l.prospected_at - l.created_at).total_seconds()
        for l in leads if l.prospected_at is not None
    ]
    closing_times = [
        (l.last_feedback_at - l.prospected_at).total_seconds()
        for l in converted + not_converted
        if l.prospected_at is not None and l.last_feedback_at is not None
    ]

    return PerformanceMetrics(
        total_leads=len(leads),
        total_converted=len(converted),
        total_not_converted=len(not_converted),
        conversion_rate=conversion_rate,
        avg_response_time_seconds=_average([t for t in response_times if t >= 0]),
        avg_closing_time_seconds=_average([t for t in closing_times if t >= 0]),
        stage_counts=_stage_counts(leads, stages),
        funnel=_funnel(leads, stages_by_id, len(converted), len(not_converted)),
        feedback_timeline=_feedback_timeline(leads, stages_by_id),
    )


def monthly_leads_count(leads: Iterable[ProspectLead], now: datetime, tz_name: str) -> int:
    """KPI de leads recebidos no mês corrente."""
    start = resolve_period(MetricsPeriod.THIS_MONTH, now, tz_name)
    return len(filter_by_created_at(leads, start))


def to_dict(metrics: PerformanceMetrics) -> Dict[str, Any]:
    return {
        "total_leads": metrics.total_leads,
        "total_converted": metrics.total_converted,
        "total_not_converted": metrics.total_not_converted,
        "conversion_rate": round(metrics.conversion_rate, 1),
        "avg_response_time_seconds": metrics.avg_response_time_seconds,
        "avg_closing_time_seconds": metrics.avg_closing_time_seconds,
        "stage_counts": metrics.stage_counts,
        "funnel": metrics.funnel,
        "feedback_timeline": [
            {
                "lead_id": e.lead_id,
                "lead_name": e.lead_name,
                "lead_status": e.lead_status,
                "text": e.text,
                "images": e.images,
                "created_at": e.created_at.isoformat() if e.created_at else None,
            }
            for e in metrics.feedback_timeline
        ],
    }
