"""
Erros do domínio do ProspectAI.

Erros de validação (InvalidStageError, ConstraintViolationError) são
levantados antes de qualquer mutação. PersistenceError vem do repositório
quando o banco rejeita a escrita.
"""


class ProspectAIError(Exception):
    """Erro base do domínio."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ProspectAIError):
    """Lead, vendedor, etapa ou tenant inexistente."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} não encontrado: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InvalidStageError(ProspectAIError):
    """Etapa de destino não existe ou não pertence ao tenant do lead."""


class ConstraintViolationError(ProspectAIError):
    """Regra de negócio violada (etapa fixa, etapa com leads, alvo = próprio vendedor...)."""


class StageInUseError(ConstraintViolationError):
    """Etapa ainda referenciada por leads."""

    def __init__(self, stage_name: str, lead_count: int):
        super().__init__(
            f"A etapa '{stage_name}' ainda tem {lead_count} lead(s); mova-os antes de excluir"
        )
        self.lead_count = lead_count


class ProspectingLockedError(ConstraintViolationError):
    """Vendedor tem leads pendentes de feedback de dias anteriores."""

    def __init__(self, seller_id: str, pending_lead_ids: list[str]):
        super().__init__(
            f"Prospecção bloqueada: {len(pending_lead_ids)} lead(s) aguardando feedback"
        )
        self.seller_id = seller_id
        self.pending_lead_ids = pending_lead_ids


class PersistenceError(ProspectAIError):
    """O banco rejeitou a escrita."""
