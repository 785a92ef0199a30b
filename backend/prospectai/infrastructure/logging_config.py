import logging
import json
import sys
from typing import Any, Optional

# Atributos padrão do LogRecord; o resto veio de `extra=` e vai para o JSON
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    Formatador de logs em JSON para facilitar ingestão por ferramentas de observabilidade (Datadog, CloudWatch, etc).
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Adiciona campos extras passados no log
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_record[key] = value

        return json.dumps(log_record, default=str, ensure_ascii=False)


def setup_logging(level: Optional[str] = None):
    """
    Configura o logging raiz da aplicação para usar JSON.
    """
    logger = logging.getLogger()
    logger.setLevel(level or logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    # Remove handlers existentes para evitar duplicação
    logger.handlers = []
    logger.addHandler(handler)

    # Configura loggers de bibliotecas específicas para reduzir ruído
    logging.getLogger("uvicorn.access").handlers = []  # Deixa o uvicorn usar o root logger
    logging.getLogger("uvicorn.error").handlers = []
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
