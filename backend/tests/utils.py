"""
Utilitários de teste: repositório em memória e fábricas de dados.

NOW = 2026-10-19 15:00 UTC = 12:00 em São Paulo (início do dia: 03:00 UTC).
"""
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from prospectai.domain.entities import PipelineStage, ProspectLead, Seller, StageRole, Tenant, new_id
from prospectai.domain.exceptions import PersistenceError
from prospectai.domain.services.lead_transitions import apply_changes
from prospectai.domain.services.pipeline_rules import find_stage_by_role
from prospectai.infrastructure.services import tenant_service

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
YESTERDAY = NOW - timedelta(days=1)


class InMemoryProspectRepository:
    """ProspectRepository em memória; `failing_lead_ids` simula o banco recusando a escrita."""

    def __init__(self):
        self.tenants: Dict[str, Tenant] = {}
        self.stages: Dict[str, PipelineStage] = {}
        self.sellers: Dict[str, Seller] = {}
        self.leads: Dict[str, ProspectLead] = {}
        self.failing_lead_ids = set()

    @staticmethod
    def _ensure_identity(obj):
        if obj.id is None:
            obj.id = new_id()
        if getattr(obj, "created_at", None) is None:
            obj.created_at = NOW
        if getattr(obj, "updated_at", None) is None:
            obj.updated_at = obj.created_at
        return obj

    @asynccontextmanager
    async def savepoint(self):
        yield

    # tenants
    async def get_tenant_by_slug(self, slug):
        return next((t for t in self.tenants.values() if t.slug == slug), None)

    async def list_active_tenants(self):
        return [t for t in self.tenants.values() if t.active is not False]

    async def add_tenant(self, tenant):
        self.tenants[self._ensure_identity(tenant).id] = tenant
        return tenant

    async def update_tenant(self, tenant, changes):
        apply_changes(tenant, changes)
        return True

    # etapas
    async def list_stages(self, tenant_id):
        return sorted(
            (s for s in self.stages.values() if s.tenant_id == tenant_id),
            key=lambda s: s.stage_order,
        )

    async def get_stage(self, stage_id):
        return self.stages.get(stage_id)

    async def add_stage(self, stage):
        self.stages[self._ensure_identity(stage).id] = stage
        return stage

    async def update_stage(self, stage, changes):
        apply_changes(stage, changes)
        return True

    async def delete_stage(self, stage):
        self.stages.pop(stage.id, None)

    async def count_leads_in_stage(self, stage_id):
        return sum(1 for lead in self.leads.values() if lead.stage_id == stage_id)

    # vendedores
    async def get_seller(self, seller_id):
        return self.sellers.get(seller_id)

    async def list_sellers(self, tenant_id, active_only=False):
        sellers = [s for s in self.sellers.values() if s.tenant_id == tenant_id]
        if active_only:
            sellers = [s for s in sellers if s.active]
        return sorted(sellers, key=lambda s: s.name)

    async def add_seller(self, seller):
        self.sellers[self._ensure_identity(seller).id] = seller
        return seller

    async def update_seller(self, seller, changes):
        apply_changes(seller, changes)
        return True

    # leads
    async def get_lead(self, lead_id):
        return self.leads.get(lead_id)

    async def list_leads(self, tenant_id, seller_id=None, stage_id=None, created_before=None):
        leads = [
            lead for lead in self.leads.values()
            if lead.tenant_id == tenant_id
            and (seller_id is None or lead.seller_id == seller_id)
            and (stage_id is None or lead.stage_id == stage_id)
            and (created_before is None or lead.created_at < created_before)
        ]
        return sorted(leads, key=lambda lead: lead.created_at)

    async def add_lead(self, lead):
        self.leads[self._ensure_identity(lead).id] = lead
        return lead

    async def update_lead(self, lead, changes, expected_seller_id=None, expected_stage_id=None):
        if lead.id in self.failing_lead_ids:
            raise PersistenceError(f"Falha simulada ao gravar {lead.id}")

        stored = self.leads.get(lead.id)
        if stored is None:
            return False
        if expected_seller_id is not None and stored.seller_id != expected_seller_id:
            return False
        if expected_stage_id is not None and stored.stage_id != expected_stage_id:
            return False

        apply_changes(stored, changes)
        if stored is not lead:
            apply_changes(lead, changes)
        return True


# ==========================================
# FÁBRICAS
# ==========================================

async def seed_tenant(repo, slug: str = "loja-centro", settings: Optional[Dict[str, Any]] = None):
    """Tenant com o pipeline padrão. Retorna (tenant, {papel: etapa})."""
    tenant = await tenant_service.create_tenant(repo, f"Concessionária {slug}", slug, settings)
    stages = await repo.list_stages(tenant.id)
    by_role = {role: find_stage_by_role(stages, role) for role in StageRole}
    return tenant, by_role


def deadline_config(
    minutes: int = 60,
    enabled: bool = True,
    mode: str = "random",
    target_id: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "deadlines": {
            "initial_contact": {
                "minutes": minutes,
                "auto_reassign_enabled": enabled,
                "reassignment_mode": mode,
                "reassignment_target_id": target_id,
            }
        }
    }


async def add_seller(repo, tenant, name: str, active: bool = True, prospect_settings=None) -> Seller:
    seller = Seller(
        id=new_id(),
        tenant_id=tenant.id,
        name=name,
        active=active,
        monthly_sales_goal=0,
        prospect_settings=prospect_settings,
        created_at=NOW - timedelta(days=30),
    )
    return await repo.add_seller(seller)


async def add_lead(
    repo,
    tenant,
    seller,
    stage,
    created_at: datetime = NOW,
    **fields,
) -> ProspectLead:
    lead = ProspectLead(
        id=new_id(),
        tenant_id=tenant.id,
        seller_id=seller.id,
        stage_id=stage.id,
        lead_name=fields.pop("lead_name", "Cliente"),
        created_at=created_at,
        updated_at=created_at,
        **fields,
    )
    return await repo.add_lead(lead)


def make_stage(tenant_id: str, name: str, order: int, role: StageRole, fixed: bool = False, enabled: bool = True) -> PipelineStage:
    return PipelineStage(
        id=new_id(),
        tenant_id=tenant_id,
        name=name,
        stage_order=order,
        role=role.value,
        is_fixed=fixed,
        is_enabled=enabled,
    )


def feedback_entry(text: str, at: datetime, images: Optional[List[str]] = None) -> Dict[str, Any]:
    return {"text": text, "images": images or [], "created_at": at.isoformat()}
