"""
SCHEMAS PYDANTIC
=================

Validação de entrada e formato de saída da API do ProspectAI.
Datas saem sempre em ISO-8601.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from prospectai.domain.entities import ReassignmentMode


# ============================================
# TENANT
# ============================================

class TenantCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    slug: str = Field(..., min_length=2, max_length=100, pattern=r"^[a-z0-9-]+$")
    settings: Dict[str, Any] = Field(default_factory=dict)


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    active: bool
    settings: Optional[Dict[str, Any]] = None
    created_at: datetime


class MonthlyKpiSettings(BaseModel):
    enabled: bool = False
    visible_to: Union[Literal["all"], List[str]] = "all"


class ProspectAISettings(BaseModel):
    show_monthly_leads_kpi: MonthlyKpiSettings = Field(default_factory=MonthlyKpiSettings)


class ProspectAISettingsUpdate(BaseModel):
    show_monthly_leads_kpi: Optional[MonthlyKpiSettings] = None


# ============================================
# ETAPAS DO PIPELINE
# ============================================

class StageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class StageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_enabled: Optional[bool] = None


class StageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    stage_order: int
    role: str
    is_fixed: bool
    is_enabled: bool


# ============================================
# VENDEDORES
# ============================================

class SellerCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    monthly_sales_goal: int = Field(default=0, ge=0)


class SellerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    monthly_sales_goal: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None


class SellerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    monthly_sales_goal: int = 0
    active: bool
    created_at: datetime


class DeadlineSettingsUpdate(BaseModel):
    """Campos ausentes mantêm o valor atual."""
    minutes: Optional[int] = None
    auto_reassign_enabled: Optional[bool] = None
    reassignment_mode: Optional[ReassignmentMode] = None
    reassignment_target_id: Optional[str] = None


class DeadlineSettingsResponse(BaseModel):
    minutes: int
    auto_reassign_enabled: bool
    reassignment_mode: ReassignmentMode
    reassignment_target_id: Optional[str] = None


# ============================================
# LEADS
# ============================================

class FeedbackEntry(BaseModel):
    text: str = ""
    images: List[str] = Field(default_factory=list)
    created_at: str


class LeadCreate(BaseModel):
    seller_id: str
    lead_name: str = Field(..., min_length=1, max_length=200)
    lead_phone: Optional[str] = Field(None, max_length=20)
    interest_vehicle: Optional[str] = Field(None, max_length=200)
    raw_lead_data: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    seller_id: str
    stage_id: str
    lead_name: str
    lead_phone: Optional[str] = None
    interest_vehicle: Optional[str] = None
    raw_lead_data: Optional[str] = None
    outcome: Optional[str] = None
    appointment_at: Optional[datetime] = None
    details: Optional[Dict[str, Any]] = None
    feedback: Optional[List[FeedbackEntry]] = None
    prospected_at: Optional[datetime] = None
    last_feedback_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TransitionRequest(BaseModel):
    target_stage_id: str
    outcome: Optional[str] = Field(None, description="convertido | nao_convertido (só na etapa final)")
    appointment_date: Optional[str] = Field(None, description="ISO-8601 (só na etapa de agendamento)")
    force: bool = Field(False, description="Permite voltar etapas")

    def extra(self) -> Dict[str, Any]:
        return {k: v for k, v in {"outcome": self.outcome, "appointment_date": self.appointment_date}.items() if v}


class FeedbackRequest(BaseModel):
    text: str = ""
    images: List[str] = Field(default_factory=list)


class ReassignRequest(BaseModel):
    new_seller_id: str
    from_seller_id: str


class StartProspectingRequest(BaseModel):
    seller_id: str


# ============================================
# VISÃO DO VENDEDOR
# ============================================

class ProspectingLockResponse(BaseModel):
    locked: bool
    pending_lead_ids: List[str] = Field(default_factory=list)


class BoardLeadResponse(LeadResponse):
    deadline_remaining_seconds: Optional[float] = None


class BoardColumnResponse(BaseModel):
    stage: StageResponse
    read_only: bool = False
    leads: List[BoardLeadResponse] = Field(default_factory=list)


class BoardResponse(BaseModel):
    seller_id: str
    columns: List[BoardColumnResponse]
    prospecting_lock: ProspectingLockResponse


class AppointmentReminder(BaseModel):
    lead: LeadResponse
    appointment_at: datetime
    latest_feedback: Optional[str] = None


class MonthlyKpiResponse(BaseModel):
    visible: bool
    count: Optional[int] = None


# ============================================
# MÉTRICAS
# ============================================

class FeedbackTimelineItem(BaseModel):
    lead_id: str
    lead_name: str
    lead_status: str
    text: str
    images: List[str]
    created_at: Optional[str] = None


class MetricsResponse(BaseModel):
    total_leads: int
    total_converted: int
    total_not_converted: int
    conversion_rate: float
    avg_response_time_seconds: float
    avg_closing_time_seconds: float
    stage_counts: Dict[str, int]
    funnel: Dict[str, int]
    feedback_timeline: List[FeedbackTimelineItem]


# ============================================
# JOBS
# ============================================

class SweepSummary(BaseModel):
    processed: int
    reassigned: int
    skipped: int
    errors: int
