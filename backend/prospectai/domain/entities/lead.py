"""
MODELO: LEAD DO PROSPECTAI
===========================

Um registro por prospect. Entra na etapa inicial (Novos Leads) pela
integração de captação e percorre o funil nas mãos do vendedor.

Invariantes:
- outcome só é preenchido na etapa final (Finalizados)
- appointment_at só é preenchido na etapa de agendamento (Agendado)
- prospected_at é gravado uma única vez (primeiro contato)
- feedback é somente-anexação
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.ext.mutable import MutableDict, MutableList

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, json_type, UTCDateTime

if TYPE_CHECKING:
    from .models import Tenant, PipelineStage
    from .seller import Seller


class ProspectLead(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Lead do pipeline de prospecção."""

    __tablename__ = "prospect_leads"

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), index=True)
    seller_id: Mapped[str] = mapped_column(ForeignKey("sellers.id", ondelete="RESTRICT"), index=True)
    stage_id: Mapped[str] = mapped_column(ForeignKey("pipeline_stages.id", ondelete="RESTRICT"), index=True)

    # ==========================================
    # DADOS DO LEAD (vindos da captação)
    # ==========================================
    lead_name: Mapped[str] = mapped_column(String(200), nullable=False)
    lead_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    interest_vehicle: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    raw_lead_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================================
    # ESTADO NO FUNIL
    # ==========================================
    outcome: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    appointment_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Mapa livre: appointment_date (transitório), trilha de remanejamento...
    details: Mapped[Optional[dict]] = mapped_column(
        MutableDict.as_mutable(json_type()),
        nullable=True
    )

    # [{"text": str, "images": [str], "created_at": iso}]
    feedback: Mapped[Optional[list]] = mapped_column(
        MutableList.as_mutable(json_type()),
        nullable=True
    )

    # ==========================================
    # TEMPOS
    # ==========================================
    prospected_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    last_feedback_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # ==========================================
    # RELACIONAMENTOS
    # ==========================================
    tenant: Mapped["Tenant"] = relationship(back_populates="leads")
    seller: Mapped["Seller"] = relationship(back_populates="leads")
    stage: Mapped["PipelineStage"] = relationship()

    def __repr__(self) -> str:
        return f"<ProspectLead {self.id}: {self.lead_name} stage={self.stage_id} seller={self.seller_id}>"
