"""Entidades do domínio."""
from .base import Base, TimestampMixin, new_id, utcnow
from .enums import (
    StageRole,
    LeadOutcome,
    ReassignmentMode,
    MetricsPeriod,
)
from .models import (
    Tenant,
    PipelineStage,
)
from .seller import Seller
from .lead import ProspectLead

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "new_id",
    "utcnow",
    # Enums
    "StageRole",
    "LeadOutcome",
    "ReassignmentMode",
    "MetricsPeriod",
    # Models
    "Tenant",
    "PipelineStage",
    "Seller",
    "ProspectLead",
]
