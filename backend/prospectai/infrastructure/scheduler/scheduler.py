"""
SCHEDULER DA VARREDURA DE PRAZOS
=================================

Registro opcional da varredura dentro do processo da API.

Por padrão a varredura é disparada de fora (cron, systemd timer, cloud
scheduler). Este scheduler só é criado com RUN_SWEEP_IN_PROCESS=true.

TECNOLOGIA: APScheduler (AsyncIOScheduler)
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from prospectai.config import get_settings

logger = logging.getLogger(__name__)

DEADLINE_SWEEP_JOB_ID = "deadline_sweep_job"

# Instância global do scheduler
scheduler: Optional[AsyncIOScheduler] = None


def create_scheduler() -> AsyncIOScheduler:
    """
    Cria e configura o scheduler.

    CHAMADO POR: main.py no startup (se run_sweep_in_process)
    """
    global scheduler

    if scheduler is not None:
        logger.warning("⚠️ Scheduler já existe, retornando instância existente")
        return scheduler

    settings = get_settings()
    logger.info("🔧 Criando scheduler...")

    scheduler = AsyncIOScheduler(
        timezone=settings.timezone,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 60,
        }
    )

    _register_deadline_sweep_job(scheduler, settings.sweep_interval_minutes)

    logger.info("✅ Scheduler criado com sucesso")
    return scheduler


def _register_deadline_sweep_job(sched: AsyncIOScheduler, interval_minutes: int):
    from prospectai.infrastructure.jobs.deadline_sweep_service import run_deadline_sweep

    sched.add_job(
        run_deadline_sweep,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=DEADLINE_SWEEP_JOB_ID,
        name="Varredura de Prazos",
        replace_existing=True,
    )

    logger.info(f"📅 Job registrado: Varredura de Prazos (a cada {interval_minutes} min)")


def start_scheduler():
    """CHAMADO POR: main.py no startup (depois de create_scheduler)"""
    if scheduler is None:
        logger.error("❌ Scheduler não foi criado. Chame create_scheduler() primeiro.")
        return

    if scheduler.running:
        logger.warning("⚠️ Scheduler já está rodando")
        return

    scheduler.start()
    logger.info("🚀 Scheduler iniciado!")

    for job in scheduler.get_jobs():
        logger.info(f"   - {job.name} (próxima execução: {job.next_run_time})")


def stop_scheduler():
    """CHAMADO POR: main.py no shutdown"""
    global scheduler

    if scheduler is None or not scheduler.running:
        return

    scheduler.shutdown(wait=False)
    scheduler = None
    logger.info("🛑 Scheduler parado")


def get_scheduler_status() -> dict:
    """Status para o health check."""
    if scheduler is None:
        return {"running": False, "jobs": []}

    return {
        "running": scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run": str(job.next_run_time) if job.next_run_time else None,
            }
            for job in scheduler.get_jobs()
        ],
    }
