"""
MODELOS DO BANCO DE DADOS
==========================

Tenant (empresa/concessionária) e sua configuração de pipeline.

Campo settings usa MutableDict para o SQLAlchemy detectar
mudanças internas no JSON.
"""
from typing import List, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.ext.mutable import MutableDict

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, json_type
from .enums import StageRole

if TYPE_CHECKING:
    from .seller import Seller
    from .lead import ProspectLead


# ============================================
# TENANT - Empresa cliente (concessionária)
# ============================================

class Tenant(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Empresa que usa o sistema."""

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    # Configurações do ProspectAI (ex: show_monthly_leads_kpi)
    settings: Mapped[dict] = mapped_column(
        MutableDict.as_mutable(json_type()),
        default=dict,
        nullable=True
    )

    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relacionamentos principais
    stages: Mapped[List["PipelineStage"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
        order_by="PipelineStage.stage_order",
    )
    sellers: Mapped[List["Seller"]] = relationship(back_populates="tenant", cascade="all, delete-orphan")
    leads: Mapped[List["ProspectLead"]] = relationship(back_populates="tenant", cascade="all, delete-orphan")


# ============================================
# PIPELINE_STAGE - Etapas do funil do tenant
# ============================================

class PipelineStage(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Etapa do funil de vendas.

    O papel (role) é resolvido uma única vez na criação e é ele que o
    motor de transições consulta; o nome é só rótulo de exibição.
    """

    __tablename__ = "pipeline_stages"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_pipeline_stages_tenant_name"),
    )

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    stage_order: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=StageRole.STANDARD.value, nullable=False)

    # Etapas fixas não podem ser renomeadas, excluídas ou desativadas
    is_fixed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    tenant: Mapped["Tenant"] = relationship(back_populates="stages")

    def __repr__(self) -> str:
        return f"<PipelineStage {self.name} ({self.role}) #{self.stage_order}>"


# ============================================
# IMPORTS PARA EVITAR CIRCULAR
# ============================================
from .seller import Seller  # noqa: E402
from .lead import ProspectLead  # noqa: E402
