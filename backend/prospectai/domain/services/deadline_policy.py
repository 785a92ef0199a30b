"""
POLÍTICA DE PRAZOS E REMANEJAMENTO AUTOMÁTICO
==============================================

Cada vendedor tem um prazo (em minutos) para tirar o lead de "Novos Leads".
Com o remanejamento automático ligado, a varredura periódica passa os
leads atrasados para outro vendedor:

- random: sorteia um vendedor da mesma empresa (exceto o dono atual)
- specific: sempre o vendedor configurado

Sem vendedor elegível, ou se o escolhido é o próprio dono, o lead é
pulado (não é erro).
"""

import random
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Sequence

from prospectai.domain.entities import PipelineStage, ProspectLead, ReassignmentMode, Seller, StageRole
from prospectai.domain.exceptions import ConstraintViolationError


# ==========================================
# CONFIGURAÇÕES PADRÃO
# ==========================================

DEFAULT_DEADLINE_CONFIG = {
    "minutes": 60,
    "auto_reassign_enabled": False,
    "reassignment_mode": ReassignmentMode.RANDOM.value,
    "reassignment_target_id": None,
}


@dataclass(frozen=True)
class DeadlineSettings:
    """Prazo de primeiro contato de um vendedor."""

    minutes: int = 60
    auto_reassign_enabled: bool = False
    reassignment_mode: ReassignmentMode = ReassignmentMode.RANDOM
    reassignment_target_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], default_minutes: int = 60) -> "DeadlineSettings":
        config = {**DEFAULT_DEADLINE_CONFIG, "minutes": default_minutes}
        config.update({k: v for k, v in (data or {}).items() if k in DEFAULT_DEADLINE_CONFIG})
        return cls(
            minutes=int(config["minutes"]),
            auto_reassign_enabled=bool(config["auto_reassign_enabled"]),
            reassignment_mode=ReassignmentMode(config["reassignment_mode"] or ReassignmentMode.RANDOM.value),
            reassignment_target_id=config["reassignment_target_id"],
        )

    @classmethod
    def for_seller(cls, seller: Seller, default_minutes: int = 60) -> "DeadlineSettings":
        """Lê settings.deadlines.initial_contact; ausente = padrão."""
        raw = ((seller.prospect_settings or {}).get("deadlines") or {}).get("initial_contact")
        return cls.from_dict(raw, default_minutes=default_minutes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reassignment_mode"] = self.reassignment_mode.value
        return data


def validate_deadline_settings(
    seller: Seller,
    settings: DeadlineSettings,
    target: Optional[Seller],
) -> None:
    """
    Valida a configuração antes de gravar.

    O chamador resolve `target` pelo id configurado (None se não existe).
    """
    if settings.minutes < 1:
        raise ConstraintViolationError("O prazo deve ser de pelo menos 1 minuto")

    if settings.reassignment_mode is not ReassignmentMode.SPECIFIC:
        return

    if not settings.reassignment_target_id:
        raise ConstraintViolationError("Modo 'specific' exige um vendedor de destino")
    if settings.reassignment_target_id == seller.id:
        raise ConstraintViolationError("O vendedor de destino deve ser outro vendedor")
    if target is None or target.tenant_id != seller.tenant_id:
        raise ConstraintViolationError("O vendedor de destino deve ser da mesma empresa")


def merge_deadline_settings(prospect_settings: Optional[Dict[str, Any]], settings: DeadlineSettings) -> Dict[str, Any]:
    """Grava initial_contact preservando o resto de prospect_settings."""
    merged = dict(prospect_settings or {})
    deadlines = dict(merged.get("deadlines") or {})
    deadlines["initial_contact"] = settings.to_dict()
    merged["deadlines"] = deadlines
    return merged


# ==========================================
# SELEÇÃO DOS LEADS ATRASADOS
# ==========================================

def deadline_cutoff(settings: DeadlineSettings, now: datetime) -> datetime:
    return now - timedelta(minutes=settings.minutes)


def choose_new_owner(
    settings: DeadlineSettings,
    current_owner_id: str,
    peers: Sequence[Seller],
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """
    Escolhe o novo dono de um lead atrasado.

    `peers` são os vendedores ativos da empresa (o dono atual pode estar
    na lista; é descartado aqui). Retorna None quando o lead deve ser pulado.
    """
    candidates = [p for p in peers if p.id != current_owner_id]
    if not candidates:
        return None

    if settings.reassignment_mode is ReassignmentMode.SPECIFIC:
        target_id = settings.reassignment_target_id
        if not target_id or target_id == current_owner_id:
            return None
        if target_id not in {p.id for p in candidates}:
            return None
        return target_id

    rng = rng or random.Random()
    return rng.choice(candidates).id


def deadline_remaining(
    lead: ProspectLead,
    stage: Optional[PipelineStage],
    settings: DeadlineSettings,
    now: datetime,
) -> Optional[float]:
    """
    Segundos até o lead poder ser remanejado (contador do card).

    None quando o remanejamento está desligado ou o lead já saiu
    de Novos Leads. Nunca negativo.
    """
    if not settings.auto_reassign_enabled:
        return None
    if stage is None or stage.role != StageRole.ENTRY.value:
        return None

    deadline = lead.created_at + timedelta(minutes=settings.minutes)
    return max((deadline - now).total_seconds(), 0.0)
