"""
TESTES - MOTOR DE TRANSIÇÕES
=============================

Funções puras de domain.services.lead_transitions e pipeline_rules.
"""

from datetime import timedelta

import pytest

from prospectai.domain.entities import ProspectLead, StageRole, new_id
from prospectai.domain.exceptions import ConstraintViolationError, InvalidStageError
from prospectai.domain.services.lead_transitions import (
    AUTO_REASSIGN_REASON,
    apply_changes,
    plan_auto_reassignment,
    plan_feedback,
    plan_manual_reassignment,
    plan_transition,
)
from prospectai.domain.services.pipeline_rules import (
    build_default_stages,
    list_actionable_stages,
    next_stage_order,
    resolve_role,
)
from tests.utils import NOW, make_stage

TENANT = "tenant-a"


@pytest.fixture
def stages():
    """Novos Leads(0) · Primeira Tentativa(1) · Agendado(2) · Finalizados(3)"""
    return {
        "entry": make_stage(TENANT, "Novos Leads", 0, StageRole.ENTRY, fixed=True),
        "first": make_stage(TENANT, "Primeira Tentativa", 1, StageRole.FIRST_ATTEMPT),
        "scheduled": make_stage(TENANT, "Agendado", 2, StageRole.SCHEDULING),
        "final": make_stage(TENANT, "Finalizados", 3, StageRole.TERMINAL, fixed=True),
        "holding": make_stage(TENANT, "Remanejados", 100, StageRole.HOLDING, fixed=True),
    }


@pytest.fixture
def lead(stages):
    return ProspectLead(
        id=new_id(),
        tenant_id=TENANT,
        seller_id="s1",
        stage_id=stages["entry"].id,
        lead_name="Maria",
        created_at=NOW - timedelta(minutes=10),
    )


def move(lead, stage, extra=None, now=NOW):
    return apply_changes(lead, plan_transition(lead, stage, extra, now))


# =============================================================================
# PRIMEIRO CONTATO
# =============================================================================

def test_first_attempt_stamps_prospected_at_once(lead, stages):
    move(lead, stages["first"])

    assert lead.stage_id == stages["first"].id
    assert lead.prospected_at == NOW

    move(lead, stages["first"], now=NOW + timedelta(hours=2))
    assert lead.prospected_at == NOW


def test_transition_to_other_tenant_stage_is_rejected(lead):
    foreign = make_stage("tenant-b", "Primeira Tentativa", 1, StageRole.FIRST_ATTEMPT)

    with pytest.raises(InvalidStageError):
        plan_transition(lead, foreign, None, NOW)

    with pytest.raises(InvalidStageError):
        plan_transition(lead, None, None, NOW)


# =============================================================================
# RESULTADO SÓ NA ETAPA FINAL
# =============================================================================

def test_outcome_set_on_terminal_and_cleared_when_leaving(lead, stages):
    move(lead, stages["first"])
    move(lead, stages["final"], {"outcome": "convertido"})

    assert lead.stage_id == stages["final"].id
    assert lead.outcome == "convertido"

    # movimento "forçado" para trás
    move(lead, stages["scheduled"])
    assert lead.outcome is None


def test_english_outcome_alias_is_accepted(lead, stages):
    move(lead, stages["final"], {"outcome": "not_converted"})
    assert lead.outcome == "nao_convertido"


def test_invalid_outcome_is_rejected(lead, stages):
    with pytest.raises(ConstraintViolationError):
        plan_transition(lead, stages["final"], {"outcome": "talvez"}, NOW)


def test_appointment_only_in_scheduling_stage(lead, stages):
    lead.details = {"appointment_date": "2026-10-20T14:00:00Z", "origem": "site"}
    move(lead, stages["scheduled"], {"appointment_date": "2026-10-20T14:00:00Z"})

    assert lead.appointment_at.isoformat() == "2026-10-20T14:00:00+00:00"
    assert lead.details == {"origem": "site"}

    move(lead, stages["final"], {"outcome": "convertido"})
    assert lead.appointment_at is None


def test_empty_details_become_none(lead, stages):
    lead.details = {"appointment_date": "2026-10-20T14:00:00Z"}
    move(lead, stages["first"])
    assert lead.details is None


def test_invalid_appointment_date_is_rejected(lead, stages):
    with pytest.raises(ConstraintViolationError):
        plan_transition(lead, stages["scheduled"], {"appointment_date": "amanhã cedo"}, NOW)


def test_transition_does_not_touch_feedback(lead, stages):
    lead.feedback = [{"text": "ligou", "images": [], "created_at": NOW.isoformat()}]
    changes = plan_transition(lead, stages["first"], None, NOW)
    assert "feedback" not in changes


# =============================================================================
# ETAPAS ACIONÁVEIS
# =============================================================================

def test_actionable_stages_only_move_forward(stages):
    all_stages = list(stages.values())

    result = list_actionable_stages(stages["first"], all_stages)

    assert [s.name for s in result] == ["Agendado", "Finalizados"]
    assert all(s.stage_order > stages["first"].stage_order for s in result)


def test_actionable_stages_skip_disabled_and_holding(stages):
    stages["scheduled"].is_enabled = False

    result = list_actionable_stages(stages["entry"], list(stages.values()))

    assert [s.name for s in result] == ["Primeira Tentativa", "Finalizados"]


def test_holding_stage_behaves_like_entry(stages):
    all_stages = list(stages.values())

    from_holding = list_actionable_stages(stages["holding"], all_stages)
    from_entry = list_actionable_stages(stages["entry"], all_stages)

    assert [s.id for s in from_holding] == [s.id for s in from_entry]


# =============================================================================
# REMANEJAMENTO E FEEDBACK
# =============================================================================

def test_manual_reassignment_parks_lead_in_holding(lead, stages):
    move(lead, stages["final"], {"outcome": "convertido"})
    lead.details = {"reassigned_by_system": True, "reason": "antigo"}

    apply_changes(lead, plan_manual_reassignment(lead, stages["holding"], "s3", "s1", NOW))

    assert lead.stage_id == stages["holding"].id
    assert lead.seller_id == "s3"
    assert lead.outcome is None
    assert lead.details["reassigned_from"] == "s1"
    assert lead.details["reassigned_to"] == "s3"
    assert "reassigned_by_system" not in lead.details
    assert "reason" not in lead.details


def test_auto_reassignment_keeps_stage(lead, stages):
    changes = plan_auto_reassignment(lead, "s2", NOW)

    assert "stage_id" not in changes
    assert changes["seller_id"] == "s2"
    assert changes["details"]["reassigned_by_system"] is True
    assert changes["details"]["reassigned_from"] == "s1"
    assert changes["details"]["reason"] == AUTO_REASSIGN_REASON


def test_feedback_is_appended(lead):
    lead.feedback = [{"text": "primeiro", "images": [], "created_at": NOW.isoformat()}]
    later = NOW + timedelta(hours=1)

    apply_changes(lead, plan_feedback(lead, "  retornar amanhã ", ["img/1.png", ""], later))

    assert [f["text"] for f in lead.feedback] == ["primeiro", "retornar amanhã"]
    assert lead.feedback[-1]["images"] == ["img/1.png"]
    assert lead.last_feedback_at == later


def test_empty_feedback_is_rejected(lead):
    with pytest.raises(ConstraintViolationError):
        plan_feedback(lead, "   ", [], NOW)


# =============================================================================
# REGRAS DO PIPELINE
# =============================================================================

def test_default_pipeline_roles():
    stages = build_default_stages(TENANT)

    roles = {s.name: s.role for s in stages}
    assert roles["Novos Leads"] == "entry"
    assert roles["Primeira Tentativa"] == "first_attempt"
    assert roles["Segunda Tentativa"] == "standard"
    assert roles["Agendado"] == "scheduling"
    assert roles["Finalizados"] == "terminal"
    assert roles["Remanejados"] == "holding"
    assert {s.name for s in stages if s.is_fixed} == {"Novos Leads", "Finalizados", "Remanejados"}
    assert len({s.id for s in stages}) == len(stages)


def test_special_role_is_unique_per_tenant():
    stages = build_default_stages(TENANT)

    assert resolve_role("Agendado", stages) is StageRole.STANDARD
    assert resolve_role("agendado", []) is StageRole.SCHEDULING
    assert resolve_role("Test drive", stages) is StageRole.STANDARD


def test_custom_stages_go_before_reserved_band():
    stages = build_default_stages(TENANT)
    assert next_stage_order(stages) == 5
    assert next_stage_order([]) == 0
