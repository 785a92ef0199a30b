"""
Roda uma passada da varredura de prazos.

Uso (cron / systemd timer, a cada minuto):
    python -m prospectai.scripts.run_deadline_sweep
"""
import asyncio
import logging

from prospectai.infrastructure.database import engine
from prospectai.infrastructure.jobs.deadline_sweep_service import run_deadline_sweep
from prospectai.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def main() -> dict:
    try:
        return await run_deadline_sweep()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    summary = asyncio.run(main())
    logger.info(f"🏁 Varredura concluída: {summary}")
