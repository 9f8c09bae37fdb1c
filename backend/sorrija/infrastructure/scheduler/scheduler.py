"""
SCHEDULER DE JOBS PERIÓDICOS
=============================

Gerencia a execução de tarefas agendadas.

JOBS CONFIGURADOS:
- Transições automáticas de leads: a cada AUTO_TRANSITIONS_INTERVAL_MINUTES
- Transições automáticas (startup): uma vez, alguns segundos após subir

TECNOLOGIA: APScheduler (AsyncIOScheduler)
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from sorrija.config import Settings, get_settings

logger = logging.getLogger(__name__)

AUTO_TRANSITIONS_JOB_ID = "auto_lead_transitions"
AUTO_TRANSITIONS_STARTUP_JOB_ID = "auto_lead_transitions_startup"

# Instância global do scheduler
scheduler: Optional[AsyncIOScheduler] = None


def create_scheduler(settings: Optional[Settings] = None) -> AsyncIOScheduler:
    """
    Cria e configura o scheduler.

    CHAMADO POR: main.py no startup
    """
    global scheduler

    if scheduler is not None:
        logger.warning("⚠️ Scheduler já existe, retornando instância existente")
        return scheduler

    settings = settings or get_settings()
    logger.info("🔧 Criando scheduler...")

    scheduler = AsyncIOScheduler(
        timezone=settings.scheduler_timezone,
        job_defaults={
            "coalesce": True,  # Agrupa execuções perdidas
            "max_instances": 1,  # Só uma instância por vez
            "misfire_grace_time": 60,
        }
    )

    # =========================================================================
    # REGISTRA OS JOBS
    # =========================================================================

    if settings.auto_transitions_enabled:
        _register_auto_transitions_jobs(scheduler, settings)
    else:
        logger.info("⏸️ Transições automáticas desligadas (AUTO_TRANSITIONS_ENABLED=false)")

    logger.info("✅ Scheduler criado com sucesso")

    return scheduler


def _register_auto_transitions_jobs(sched: AsyncIOScheduler, settings: Settings):
    """
    Registra o job periódico de transições e a execução inicial.

    A execução inicial espera alguns segundos para não competir com o
    restante do startup.
    """
    from sorrija.infrastructure.jobs.auto_transitions_job import run_auto_transitions_job

    sched.add_job(
        run_auto_transitions_job,
        trigger=IntervalTrigger(minutes=settings.auto_transitions_interval_minutes),
        id=AUTO_TRANSITIONS_JOB_ID,
        name="Transições Automáticas de Leads",
        replace_existing=True,
    )

    run_at = datetime.now(ZoneInfo(settings.scheduler_timezone)) + timedelta(
        seconds=settings.auto_transitions_startup_delay_seconds
    )
    sched.add_job(
        run_auto_transitions_job,
        trigger=DateTrigger(run_date=run_at),
        id=AUTO_TRANSITIONS_STARTUP_JOB_ID,
        name="Transições Automáticas de Leads (startup)",
        replace_existing=True,
    )

    logger.info(
        f"📅 Job registrado: Transições Automáticas "
        f"(a cada {settings.auto_transitions_interval_minutes} min, "
        f"primeira em {settings.auto_transitions_startup_delay_seconds}s)"
    )


def get_scheduler() -> Optional[AsyncIOScheduler]:
    return scheduler


def start_scheduler():
    """
    Inicia o scheduler.

    CHAMADO POR: main.py no startup (depois de create_scheduler)
    """
    global scheduler

    if scheduler is None:
        logger.error("❌ Scheduler não foi criado. Chame create_scheduler() primeiro.")
        return

    if scheduler.running:
        logger.warning("⚠️ Scheduler já está rodando")
        return

    scheduler.start()
    logger.info("🚀 Scheduler iniciado!")

    # Lista jobs registrados
    jobs = scheduler.get_jobs()
    logger.info(f"📋 Jobs ativos: {len(jobs)}")
    for job in jobs:
        logger.info(f"   - {job.name} (próxima execução: {job.next_run_time})")


def stop_scheduler():
    """
    Para o scheduler. Rodadas em andamento não são interrompidas.

    CHAMADO POR: main.py no shutdown
    """
    global scheduler

    if scheduler is None:
        return

    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("🛑 Scheduler parado")

    scheduler = None


def get_scheduler_status() -> dict:
    """
    Retorna status do scheduler.

    Útil para endpoint de health check.
    """
    if scheduler is None:
        return {
            "running": False,
            "jobs": [],
            "error": "Scheduler não inicializado",
        }

    jobs_info = []
    for job in scheduler.get_jobs():
        next_run = getattr(job, "next_run_time", None)
        jobs_info.append({
            "id": job.id,
            "name": job.name,
            "next_run": str(next_run) if next_run else None,
        })

    return {
        "running": scheduler.running,
        "jobs": jobs_info,
    }


async def run_job_now(job_id: str) -> dict:
    """
    Executa um job imediatamente (fora do agendamento).

    Útil para testes ou execução manual pelo admin.
    """
    if scheduler is None:
        return {"success": False, "error": "Scheduler não inicializado"}

    job = scheduler.get_job(job_id)

    if job is None:
        return {"success": False, "error": f"Job '{job_id}' não encontrado"}

    try:
        if job_id in (AUTO_TRANSITIONS_JOB_ID, AUTO_TRANSITIONS_STARTUP_JOB_ID):
            from sorrija.infrastructure.jobs.auto_transitions_job import run_auto_transitions_job
            result = await run_auto_transitions_job()
            return {"success": True, "result": result}

        return {"success": False, "error": "Job não suporta execução manual"}

    except Exception as e:
        logger.error(f"❌ Erro ao executar job {job_id}: {e}", exc_info=True)
        return {"success": False, "error": str(e)}
