"""
PORTA DE PERSISTÊNCIA DO PROSPECTAI
====================================

Os serviços falam com o banco só através desta interface.
Produção: SqlAlchemyProspectRepository. Testes: repositório em memória.

Regras para quem implementa:
- Erros do banco viram PersistenceError
- update_* só altera o objeto em memória depois que a escrita deu certo
- update_lead aceita predicados de dono/etapa (escrita condicional da varredura)
"""

from datetime import datetime
from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol

from prospectai.domain.entities import PipelineStage, ProspectLead, Seller, Tenant


class ProspectRepository(Protocol):

    # ==========================================
    # TENANTS
    # ==========================================

    async def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]: ...

    async def list_active_tenants(self) -> List[Tenant]: ...

    async def add_tenant(self, tenant: Tenant) -> Tenant: ...

    async def update_tenant(self, tenant: Tenant, changes: Dict[str, Any]) -> bool: ...

    # ==========================================
    # ETAPAS
    # ==========================================

    async def list_stages(self, tenant_id: str) -> List[PipelineStage]: ...

    async def get_stage(self, stage_id: str) -> Optional[PipelineStage]: ...

    async def add_stage(self, stage: PipelineStage) -> PipelineStage: ...

    async def update_stage(self, stage: PipelineStage, changes: Dict[str, Any]) -> bool: ...

    async def delete_stage(self, stage: PipelineStage) -> None: ...

    async def count_leads_in_stage(self, stage_id: str) -> int: ...

    # ==========================================
    # VENDEDORES
    # ==========================================

    async def get_seller(self, seller_id: str) -> Optional[Seller]: ...

    async def list_sellers(self, tenant_id: str, active_only: bool = False) -> List[Seller]: ...

    async def add_seller(self, seller: Seller) -> Seller: ...

    async def update_seller(self, seller: Seller, changes: Dict[str, Any]) -> bool: ...

    # ==========================================
    # LEADS
    # ==========================================

    async def get_lead(self, lead_id: str) -> Optional[ProspectLead]: ...

    async def list_leads(
        self,
        tenant_id: str,
        seller_id: Optional[str] = None,
        stage_id: Optional[str] = None,
        created_before: Optional[datetime] = None,
    ) -> List[ProspectLead]: ...

    async def add_lead(self, lead: ProspectLead) -> ProspectLead: ...

    async def update_lead(
        self,
        lead: ProspectLead,
        changes: Dict[str, Any],
        expected_seller_id: Optional[str] = None,
        expected_stage_id: Optional[str] = None,
    ) -> bool:
        """
        Grava as alterações. Com predicados, só grava se o lead ainda
        tem aquele dono/etapa; retorna False quando nada foi alterado.
        """
        ...

    def savepoint(self) -> AsyncContextManager[None]:
        """Isola a escrita de um único lead dentro de um lote."""
        ...
