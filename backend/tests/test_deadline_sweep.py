"""
TESTES - VARREDURA DE PRAZOS
=============================

DeadlineSweepService sobre o repositório em memória, com relógio fixo
e sorteio determinístico.
"""

import random
from datetime import timedelta

from prospectai.domain.entities import StageRole
from prospectai.infrastructure.jobs.deadline_sweep_service import DeadlineSweepService
from tests.utils import NOW, add_lead, add_seller, deadline_config, seed_tenant

NINETY_MINUTES_AGO = NOW - timedelta(minutes=90)


def make_service(repo, seed: int = 42) -> DeadlineSweepService:
    return DeadlineSweepService(repo, rng=random.Random(seed), default_minutes=60)


# =============================================================================
# LEAD ATRASADO VAI PARA OUTRO VENDEDOR
# =============================================================================

async def test_overdue_lead_is_reassigned_and_stays_in_entry(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    s2 = await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary == {"processed": 1, "reassigned": 1, "skipped": 0, "errors": 0}
    assert lead.seller_id == s2.id
    assert lead.stage_id == stages[StageRole.ENTRY].id
    assert lead.details["reassigned_by_system"] is True
    assert lead.details["reassigned_from"] == s1.id
    assert lead.details["reassigned_to"] == s2.id


async def test_lead_within_deadline_is_untouched(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NOW - timedelta(minutes=30))

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["processed"] == 0
    assert lead.seller_id == s1.id


async def test_lead_outside_entry_stage_is_ignored(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.FIRST_ATTEMPT], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["processed"] == 0
    assert lead.seller_id == s1.id


async def test_second_sweep_reassigns_nothing(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    await add_seller(repo, tenant, "Bruno")
    await add_seller(repo, tenant, "Carla")
    for _ in range(3):
        await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    service = make_service(repo)
    first = await service.sweep_overdue_leads(now=NOW)
    second = await service.sweep_overdue_leads(now=NOW)

    assert first["reassigned"] == 3
    assert second == {"processed": 0, "reassigned": 0, "skipped": 0, "errors": 0}


async def test_lead_is_reassigned_once_per_sweep_when_new_owner_also_has_deadline(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    s2 = await add_seller(repo, tenant, "Bruno", prospect_settings=deadline_config(60))
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary == {"processed": 1, "reassigned": 1, "skipped": 0, "errors": 0}
    assert lead.seller_id == s2.id
    assert lead.details["reassigned_from"] == s1.id
    assert lead.details["reassigned_to"] == s2.id


async def test_each_seller_loses_own_overdue_lead_once_in_a_swap(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    s2 = await add_seller(repo, tenant, "Bruno", prospect_settings=deadline_config(60))
    from_ana = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)
    from_bruno = await add_lead(repo, tenant, s2, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["reassigned"] == 2
    assert from_ana.seller_id == s2.id
    assert from_bruno.seller_id == s1.id
    assert all(lead.seller_id != s1.id for lead in repo.leads.values())


async def test_auto_reassign_disabled_does_nothing(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60, enabled=False))
    await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["processed"] == 0
    assert lead.seller_id == s1.id
    assert lead.details is None


async def test_seller_without_settings_uses_disabled_default(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana")
    await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NOW - timedelta(days=2))

    await make_service(repo).sweep_overdue_leads(now=NOW)

    assert lead.seller_id == s1.id


# =============================================================================
# ESCOLHA DO NOVO DONO
# =============================================================================

async def test_specific_mode_uses_configured_target(repo):
    tenant, stages = await seed_tenant(repo)
    s2 = await add_seller(repo, tenant, "Bruno")
    s3 = await add_seller(repo, tenant, "Carla")
    s1 = await add_seller(
        repo, tenant, "Ana",
        prospect_settings=deadline_config(60, mode="specific", target_id=s3.id),
    )
    leads = [
        await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)
        for _ in range(4)
    ]

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["reassigned"] == 4
    assert {lead.seller_id for lead in leads} == {s3.id}
    assert s2.id not in {lead.seller_id for lead in leads}


async def test_specific_mode_with_inactive_target_is_skipped(repo):
    tenant, stages = await seed_tenant(repo)
    await add_seller(repo, tenant, "Bruno")
    s3 = await add_seller(repo, tenant, "Carla", active=False)
    s1 = await add_seller(
        repo, tenant, "Ana",
        prospect_settings=deadline_config(60, mode="specific", target_id=s3.id),
    )
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary == {"processed": 1, "reassigned": 0, "skipped": 1, "errors": 0}
    assert lead.seller_id == s1.id


async def test_random_mode_never_picks_inactive_or_owner(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    s2 = await add_seller(repo, tenant, "Bruno")
    await add_seller(repo, tenant, "Carla", active=False)
    leads = [
        await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)
        for _ in range(5)
    ]

    await make_service(repo, seed=7).sweep_overdue_leads(now=NOW)

    assert {lead.seller_id for lead in leads} == {s2.id}


async def test_no_peers_skips_lead(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary == {"processed": 1, "reassigned": 0, "skipped": 1, "errors": 0}
    assert lead.seller_id == s1.id


async def test_inactive_owner_leads_are_still_swept(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", active=False, prospect_settings=deadline_config(60))
    s2 = await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    await make_service(repo).sweep_overdue_leads(now=NOW)

    assert lead.seller_id == s2.id


# =============================================================================
# FALHAS E MULTI-TENANT
# =============================================================================

async def test_failure_on_one_lead_does_not_stop_sweep(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    s2 = await add_seller(repo, tenant, "Bruno")
    broken = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NOW - timedelta(minutes=120))
    healthy = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)
    repo.failing_lead_ids.add(broken.id)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary == {"processed": 2, "reassigned": 1, "skipped": 0, "errors": 1}
    assert broken.seller_id == s1.id
    assert broken.details is None
    assert healthy.seller_id == s2.id


async def test_sweep_covers_every_active_tenant(repo):
    tenant_a, stages_a = await seed_tenant(repo, slug="loja-a")
    tenant_b, stages_b = await seed_tenant(repo, slug="loja-b")

    a1 = await add_seller(repo, tenant_a, "Ana", prospect_settings=deadline_config(60))
    a2 = await add_seller(repo, tenant_a, "Bruno")
    b1 = await add_seller(repo, tenant_b, "Carla", prospect_settings=deadline_config(60))
    b2 = await add_seller(repo, tenant_b, "Diego")

    lead_a = await add_lead(repo, tenant_a, a1, stages_a[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)
    lead_b = await add_lead(repo, tenant_b, b1, stages_b[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["reassigned"] == 2
    assert lead_a.seller_id == a2.id
    assert lead_b.seller_id == b2.id


async def test_inactive_tenant_is_not_swept(repo):
    tenant, stages = await seed_tenant(repo)
    s1 = await add_seller(repo, tenant, "Ana", prospect_settings=deadline_config(60))
    await add_seller(repo, tenant, "Bruno")
    lead = await add_lead(repo, tenant, s1, stages[StageRole.ENTRY], created_at=NINETY_MINUTES_AGO)
    tenant.active = False

    summary = await make_service(repo).sweep_overdue_leads(now=NOW)

    assert summary["processed"] == 0
    assert lead.seller_id == s1.id
