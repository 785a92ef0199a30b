"""
MOTOR DE TRANSIÇÕES DO LEAD
============================

Funções puras: recebem o lead e a etapa de destino e devolvem o dicionário
de alterações a persistir. Nada aqui toca no banco; quem grava é o
repositório (ProspectRepository), e o lead em memória só muda depois que
a gravação dá certo.

EFEITOS POR PAPEL DA ETAPA DE DESTINO:
- FIRST_ATTEMPT: grava prospected_at (apenas na primeira vez)
- TERMINAL: grava outcome (se informado); qualquer outra etapa limpa outcome
- SCHEDULING: grava appointment_at (se informado); qualquer outra limpa
- Sempre: remove details.appointment_date (campo transitório do formulário)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from prospectai.domain.entities import LeadOutcome, PipelineStage, ProspectLead, StageRole
from prospectai.domain.exceptions import ConstraintViolationError, InvalidStageError
from prospectai.domain.services.time_utils import parse_timestamp, to_iso


AUTO_REASSIGN_REASON = "Lead not prospected within the time limit."

# Chaves que só o remanejamento automático grava em details
SYSTEM_REASSIGNMENT_KEYS = ("reassigned_by_system", "reason")


def _normalize_details(details: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return details or None


def plan_transition(
    lead: ProspectLead,
    target_stage: Optional[PipelineStage],
    extra: Optional[Dict[str, Any]],
    now: datetime,
) -> Dict[str, Any]:
    """
    Calcula as alterações de uma mudança de etapa.

    extra aceita {"outcome": "convertido"|"nao_convertido",
                  "appointment_date": ISO-8601}
    """
    if target_stage is None or target_stage.tenant_id != lead.tenant_id:
        raise InvalidStageError("Etapa não encontrada para a empresa do lead")

    extra = extra or {}
    role = StageRole(target_stage.role)
    changes: Dict[str, Any] = {"stage_id": target_stage.id}

    if role is StageRole.FIRST_ATTEMPT and lead.prospected_at is None:
        changes["prospected_at"] = now

    details = dict(lead.details or {})
    details.pop("appointment_date", None)
    changes["details"] = _normalize_details(details)

    if role is StageRole.TERMINAL:
        raw_outcome = extra.get("outcome")
        if raw_outcome:
            try:
                changes["outcome"] = LeadOutcome(raw_outcome).value
            except ValueError:
                raise ConstraintViolationError(f"Resultado inválido: {raw_outcome}")
    else:
        changes["outcome"] = None

    if role is StageRole.SCHEDULING:
        appointment = extra.get("appointment_date")
        if appointment:
            try:
                changes["appointment_at"] = parse_timestamp(appointment)
            except (TypeError, ValueError):
                raise ConstraintViolationError(f"Data de agendamento inválida: {appointment}")
    else:
        changes["appointment_at"] = None

    return changes


def plan_manual_reassignment(
    lead: ProspectLead,
    holding_stage: PipelineStage,
    new_seller_id: str,
    from_seller_id: str,
    now: datetime,
) -> Dict[str, Any]:
    """
    Remanejamento manual: leva o lead para Remanejados e troca o dono.

    Sem o flag reassigned_by_system; é isso que diferencia o manual
    do automático nos relatórios.
    """
    changes = plan_transition(lead, holding_stage, None, now)

    details = dict(changes["details"] or {})
    for key in SYSTEM_REASSIGNMENT_KEYS:
        details.pop(key, None)
    details.update({
        "reassigned_from": from_seller_id,
        "reassigned_to": new_seller_id,
        "reassigned_at": to_iso(now),
    })

    changes["details"] = details
    changes["seller_id"] = new_seller_id
    return changes


def plan_auto_reassignment(
    lead: ProspectLead,
    new_seller_id: str,
    now: datetime,
    reason: str = AUTO_REASSIGN_REASON,
) -> Dict[str, Any]:
    """
    Remanejamento automático (varredura de prazos).

    A etapa NÃO muda: o lead continua em Novos Leads com o novo dono.
    """
    details = dict(lead.details or {})
    details.update({
        "reassigned_by_system": True,
        "reassigned_from": lead.seller_id,
        "reassigned_to": new_seller_id,
        "reassigned_at": to_iso(now),
        "reason": reason,
    })
    return {"seller_id": new_seller_id, "details": details}


def plan_feedback(
    lead: ProspectLead,
    text: str,
    images: Optional[List[str]],
    now: datetime,
) -> Dict[str, Any]:
    """Anexa um feedback (somente-anexação) e atualiza last_feedback_at."""
    text = (text or "").strip()
    images = [ref for ref in (images or []) if ref]
    if not text and not images:
        raise ConstraintViolationError("Feedback precisa de texto ou imagens")

    entry = {
        "text": text,
        "images": images,
        "created_at": to_iso(now),
    }
    return {
        "feedback": list(lead.feedback or []) + [entry],
        "last_feedback_at": now,
    }


def apply_changes(lead: ProspectLead, changes: Dict[str, Any]) -> ProspectLead:
    """Aplica o dicionário de alterações no objeto do lead."""
    for field, value in changes.items():
        setattr(lead, field, value)
    return lead
