"""
REPOSITÓRIO SQLALCHEMY
=======================

Implementação de ProspectRepository sobre uma AsyncSession.

Toda escrita roda dentro de um SAVEPOINT: se o banco rejeitar, só aquela
escrita é desfeita (a varredura continua com os próximos leads) e o erro
sobe como PersistenceError. Atualizações usam UPDATE com WHERE, então o
objeto em memória só muda depois que o banco confirmou.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from prospectai.domain.entities import PipelineStage, ProspectLead, Seller, Tenant, utcnow
from prospectai.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SqlAlchemyProspectRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==========================================
    # HELPERS
    # ==========================================

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"❌ Erro de leitura no banco: {e}", exc_info=True)
            raise PersistenceError(f"Falha ao consultar o banco: {e.__class__.__name__}") from e

    async def _add(self, obj):
        try:
            async with self.session.begin_nested():
                self.session.add(obj)
                await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"❌ Erro ao gravar {obj!r}: {e}", exc_info=True)
            raise PersistenceError(f"Falha ao gravar {obj.__class__.__name__}") from e
        return obj

    async def _update(self, model, obj, changes: Dict[str, Any], *conditions) -> bool:
        values = dict(changes)
        values["updated_at"] = utcnow()
        stmt = (
            update(model)
            .where(model.id == obj.id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"❌ Erro ao atualizar {obj!r}: {e}", exc_info=True)
            raise PersistenceError(f"Falha ao atualizar {model.__name__} {obj.id}") from e

        if result.rowcount == 0:
            return False

        for key, value in values.items():
            set_committed_value(obj, key, value)
        return True

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        async with self.session.begin_nested():
            yield

    # ==========================================
    # TENANTS
    # ==========================================

    async def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]:
        result = await self._execute(select(Tenant).where(Tenant.slug == slug))
        return result.scalar_one_or_none()

    async def list_active_tenants(self) -> List[Tenant]:
        result = await self._execute(select(Tenant).where(Tenant.active == True).order_by(Tenant.created_at))
        return list(result.scalars().all())

    async def add_tenant(self, tenant: Tenant) -> Tenant:
        return await self._add(tenant)

    async def update_tenant(self, tenant: Tenant, changes: Dict[str, Any]) -> bool:
        return await self._update(Tenant, tenant, changes)

    # ==========================================
    # ETAPAS
    # ==========================================

    async def list_stages(self, tenant_id: str) -> List[PipelineStage]:
        result = await self._execute(
            select(PipelineStage)
            .where(PipelineStage.tenant_id == tenant_id)
            .order_by(PipelineStage.stage_order)
        )
        return list(result.scalars().all())

    async def get_stage(self, stage_id: str) -> Optional[PipelineStage]:
        result = await self._execute(select(PipelineStage).where(PipelineStage.id == stage_id))
        return result.scalar_one_or_none()

    async def add_stage(self, stage: PipelineStage) -> PipelineStage:
        return await self._add(stage)

    async def update_stage(self, stage: PipelineStage, changes: Dict[str, Any]) -> bool:
        return await self._update(PipelineStage, stage, changes)

    async def delete_stage(self, stage: PipelineStage) -> None:
        try:
            async with self.session.begin_nested():
                await self.session.execute(delete(PipelineStage).where(PipelineStage.id == stage.id))
        except SQLAlchemyError as e:
            logger.error(f"❌ Erro ao excluir {stage!r}: {e}", exc_info=True)
            raise PersistenceError(f"Falha ao excluir etapa {stage.id}") from e
        if stage in self.session:
            self.session.expunge(stage)

    async def count_leads_in_stage(self, stage_id: str) -> int:
        result = await self._execute(
            select(func.count(ProspectLead.id)).where(ProspectLead.stage_id == stage_id)
        )
        return result.scalar() or 0

    # ==========================================
    # VENDEDORES
    # ==========================================

    async def get_seller(self, seller_id: str) -> Optional[Seller]:
        result = await self._execute(select(Seller).where(Seller.id == seller_id))
        return result.scalar_one_or_none()

    async def list_sellers(self, tenant_id: str, active_only: bool = False) -> List[Seller]:
        query = select(Seller).where(Seller.tenant_id == tenant_id)
        if active_only:
            query = query.where(Seller.active == True)
        result = await self._execute(query.order_by(Seller.name))
        return list(result.scalars().all())

    async def add_seller(self, seller: Seller) -> Seller:
        return await self._add(seller)

    async def update_seller(self, seller: Seller, changes: Dict[str, Any]) -> bool:
        return await self._update(Seller, seller, changes)

    # ==========================================
    # LEADS
    # ==========================================

    async def get_lead(self, lead_id: str) -> Optional[ProspectLead]:
        result = await self._execute(select(ProspectLead).where(ProspectLead.id == lead_id))
        return result.scalar_one_or_none()

    async def list_leads(
        self,
        tenant_id: str,
        seller_id: Optional[str] = None,
        stage_id: Optional[str] = None,
        created_before: Optional[datetime] = None,
    ) -> List[ProspectLead]:
        query = select(ProspectLead).where(ProspectLead.tenant_id == tenant_id)
        if seller_id is not None:
            query = query.where(ProspectLead.seller_id == seller_id)
        if stage_id is not None:
            query = query.where(ProspectLead.stage_id == stage_id)
        if created_before is not None:
            query = query.where(ProspectLead.created_at < created_before)
        result = await self._execute(query.order_by(ProspectLead.created_at))
        return list(result.scalars().all())

    async def add_lead(self, lead: ProspectLead) -> ProspectLead:
        return await self._add(lead)

    async def update_lead(
        self,
        lead: ProspectLead,
        changes: Dict[str, Any],
        expected_seller_id: Optional[str] = None,
        expected_stage_id: Optional[str] = None,
    ) -> bool:
        conditions = []
        if expected_seller_id is not None:
            conditions.append(ProspectLead.seller_id == expected_seller_id)
        if expected_stage_id is not None:
            conditions.append(ProspectLead.stage_id == expected_stage_id)
        return await self._update(ProspectLead, lead, changes, *conditions)
