"""
ROTAS ADMIN: SCHEDULER
=======================

Status dos jobs agendados e disparo manual (apenas superadmin).
"""

from fastapi import APIRouter, Depends

from sorrija.api.dependencies import get_current_superadmin
from sorrija.domain.entities import User
from sorrija.infrastructure.scheduler import get_scheduler_status, run_job_now

router = APIRouter(prefix="/admin/scheduler", tags=["Admin - Scheduler"])


@router.get("/status")
async def scheduler_status(
    current_user: User = Depends(get_current_superadmin),
):
    """Retorna os jobs registrados e o próximo horário de cada um."""
    return get_scheduler_status()


@router.post("/jobs/{job_id}/run")
async def trigger_job(
    job_id: str,
    current_user: User = Depends(get_current_superadmin),
):
    """
    Dispara um job agora, fora do agendamento.

    Para as transições automáticas, cada organização continua passando
    pelo runner (mesma trava e mesmo cooldown).
    """
    return await run_job_now(job_id)
