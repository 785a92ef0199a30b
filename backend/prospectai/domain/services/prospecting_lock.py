"""
TRAVA DE PROSPECÇÃO POR FEEDBACK
=================================

O vendedor não pode começar um lead novo enquanto tiver leads
"pendentes": leads em etapa acionável cujo último feedback (ou, sem
feedback, o primeiro contato / a criação) é de um dia anterior.

A trava é regra de fluxo, não de integridade: precisa dar o mesmo
resultado onde quer que seja avaliada, por isso vive aqui e não na tela.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from prospectai.domain.entities import PipelineStage, ProspectLead
from prospectai.domain.services.pipeline_rules import actionable_stages
from prospectai.domain.services.time_utils import parse_timestamp, start_of_day


@dataclass
class ProspectingLock:
    locked: bool
    pending_lead_ids: List[str] = field(default_factory=list)


def last_activity_at(lead: ProspectLead) -> Optional[datetime]:
    """Data do último feedback (ou last_feedback_at); sem feedback, prospected_at ou created_at."""
    if lead.feedback:
        at = parse_timestamp(lead.feedback[-1].get("created_at"))
        if at is not None:
            return at
        if lead.last_feedback_at is not None:
            return lead.last_feedback_at
    return lead.prospected_at or lead.created_at


def find_pending_leads(
    leads: Iterable[ProspectLead],
    stages: Iterable[PipelineStage],
    seller_id: str,
    now: datetime,
    tz_name: str,
) -> List[ProspectLead]:
    today = start_of_day(now, tz_name)
    actionable_ids = {s.id for s in actionable_stages(stages)}

    pending = []
    for lead in leads:
        if lead.seller_id != seller_id or lead.stage_id not in actionable_ids:
            continue
        activity = last_activity_at(lead)
        if activity is not None and activity < today:
            pending.append(lead)
    return pending


def evaluate_prospecting_lock(
    leads: Iterable[ProspectLead],
    stages: Iterable[PipelineStage],
    seller_id: str,
    now: datetime,
    tz_name: str,
) -> ProspectingLock:
    pending = find_pending_leads(leads, stages, seller_id, now, tz_name)
    return ProspectingLock(locked=bool(pending), pending_lead_ids=[lead.id for lead in pending])
