"""Schemas da API."""
from .schemas import (
    TenantCreate,
    TenantResponse,
    MonthlyKpiSettings,
    ProspectAISettings,
    ProspectAISettingsUpdate,
    StageCreate,
    StageUpdate,
    StageResponse,
    SellerCreate,
    SellerUpdate,
    SellerResponse,
    DeadlineSettingsUpdate,
    DeadlineSettingsResponse,
    FeedbackEntry,
    LeadCreate,
    LeadResponse,
    TransitionRequest,
    FeedbackRequest,
    ReassignRequest,
    StartProspectingRequest,
    ProspectingLockResponse,
    BoardLeadResponse,
    BoardColumnResponse,
    BoardResponse,
    AppointmentReminder,
    MonthlyKpiResponse,
    FeedbackTimelineItem,
    MetricsResponse,
    SweepSummary,
)
