"""
JOB DE TRANSIÇÕES AUTOMÁTICAS
=============================

Roda as transições de temperatura/substatus para todas as
organizações ativas.

CHAMADO PELO: Scheduler (a cada AUTO_TRANSITIONS_INTERVAL_MINUTES
e uma vez logo após o startup)
"""

import logging
from typing import Optional

from sqlalchemy import select

from sorrija.domain.entities import Organization
from sorrija.infrastructure.jobs.transition_runner import LeadTransitionRunner, get_transition_runner

logger = logging.getLogger(__name__)


async def get_active_organization_ids(session_factory) -> list[int]:
    async with session_factory() as session:
        result = await session.execute(
            select(Organization.id).where(Organization.active.is_(True)).order_by(Organization.id)
        )
        return list(result.scalars().all())


async def run_auto_transitions_job(
    runner: Optional[LeadTransitionRunner] = None,
    session_factory=None,
) -> dict:
    """
    Executa uma rodada para cada organização ativa.

    Retorna um resumo com as contagens somadas.
    """
    if session_factory is None:
        from sorrija.infrastructure.database import async_session
        session_factory = async_session
    runner = runner or get_transition_runner()

    logger.info("=" * 60)
    logger.info("🔄 INICIANDO JOB DE TRANSIÇÕES AUTOMÁTICAS")
    logger.info("=" * 60)

    summary = {
        "organizations": 0,
        "transitions_made": 0,
        "substatuses_cleared": 0,
        "substatuses_updated": 0,
        "skipped": 0,
        "errors": 0,
    }

    try:
        organization_ids = await get_active_organization_ids(session_factory)
    except Exception as e:
        logger.error(f"❌ Erro ao buscar organizações ativas: {e}", exc_info=True)
        summary["errors"] += 1
        return summary

    logger.info(f"📊 Encontradas {len(organization_ids)} organizações ativas")

    for organization_id in organization_ids:
        summary["organizations"] += 1
        result = await runner.run(organization_id)

        if result.skipped:
            summary["skipped"] += 1
        elif not result.success:
            summary["errors"] += 1
        else:
            summary["transitions_made"] += result.transitions_made or 0
            summary["substatuses_cleared"] += result.substatuses_cleared or 0
            summary["substatuses_updated"] += result.substatuses_updated or 0

    logger.info("=" * 60)
    logger.info("✅ JOB DE TRANSIÇÕES FINALIZADO")
    logger.info(f"   Organizações: {summary['organizations']}")
    logger.info(f"   Leads movidos: {summary['transitions_made']}")
    logger.info(f"   Substatus limpos: {summary['substatuses_cleared']}")
    logger.info(f"   Substatus atualizados: {summary['substatuses_updated']}")
    logger.info(f"   Ignoradas (cooldown): {summary['skipped']}")
    logger.info(f"   Erros: {summary['errors']}")
    logger.info("=" * 60)

    return summary
