"""Enums - valores fixos que se repetem no sistema."""

from enum import Enum


class StageRole(str, Enum):
    """Papel semântico de uma etapa do pipeline (resolvido na configuração)."""
    ENTRY = "entry"                  # Novos Leads - onde todo lead nasce
    FIRST_ATTEMPT = "first_attempt"  # Primeira Tentativa - marca prospected_at
    STANDARD = "standard"            # Etapa comum / customizada
    SCHEDULING = "scheduling"        # Agendado - carrega appointment_at
    TERMINAL = "terminal"            # Finalizados - carrega outcome
    HOLDING = "holding"              # Remanejados - leads remanejados manualmente


class LeadOutcome(str, Enum):
    """Resultado do lead (só faz sentido na etapa final)."""
    CONVERTED = "convertido"
    NOT_CONVERTED = "nao_convertido"

    @classmethod
    def _missing_(cls, value):
        # Aceita também os valores em inglês
        aliases = {"converted": cls.CONVERTED, "not_converted": cls.NOT_CONVERTED}
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


class ReassignmentMode(str, Enum):
    """Como o remanejamento automático escolhe o novo vendedor."""
    RANDOM = "random"      # Sorteia outro vendedor da empresa
    SPECIFIC = "specific"  # Sempre o vendedor configurado


class MetricsPeriod(str, Enum):
    """Períodos pré-definidos da análise de desempenho."""
    ALL = "all"
    LAST_7_DAYS = "7d"
    THIS_MONTH = "this_month"
    LAST_90_DAYS = "90d"
