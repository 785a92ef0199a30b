"""
MODELO: VENDEDOR (SELLER)
==========================

Representa um vendedor da equipe do tenant.
Recebe leads do ProspectAI e tem seus próprios prazos de atendimento.
"""

from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.ext.mutable import MutableDict

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, json_type

if TYPE_CHECKING:
    from .models import Tenant
    from .lead import ProspectLead


class Seller(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Vendedor da equipe.

    O gestor cadastra seus vendedores aqui e configura, para cada um,
    o prazo de primeiro contato e o remanejamento automático.
    """

    __tablename__ = "sellers"

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), index=True)

    # ==========================================
    # DADOS BÁSICOS
    # ==========================================
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    monthly_sales_goal: Mapped[int] = mapped_column(Integer, default=0)

    # ==========================================
    # CONTROLE DE ATIVIDADE
    # ==========================================
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # ==========================================
    # PRAZOS DO PROSPECTAI
    # ==========================================
    # {"deadlines": {"initial_contact": {"minutes": 60, "auto_reassign_enabled": false,
    #   "reassignment_mode": "random", "reassignment_target_id": null}}}
    prospect_settings: Mapped[Optional[dict]] = mapped_column(
        MutableDict.as_mutable(json_type()),
        nullable=True
    )

    # ==========================================
    # RELACIONAMENTOS
    # ==========================================
    tenant: Mapped["Tenant"] = relationship(back_populates="sellers")
    leads: Mapped[List["ProspectLead"]] = relationship(back_populates="seller")

    def __repr__(self) -> str:
        return f"<Seller {self.id}: {self.name}>"
