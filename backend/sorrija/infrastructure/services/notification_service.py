"""
NOTIFICATION SERVICE
====================

Notificações do painel da clínica (banco de dados).

Usado pelas transições automáticas quando a execução está em modo
verboso: um resumo por rodada que moveu algum lead.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sorrija.domain.entities import Notification

logger = logging.getLogger(__name__)


NOTIFICATION_TYPES = {
    "auto_transitions": "🔄 Transições Automáticas",
}


async def create_panel_notification(
    db: AsyncSession,
    organization_id: int,
    notification_type: str,
    message: str,
    title: Optional[str] = None,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
) -> Notification:
    """Adiciona a notificação na sessão (commit fica com quem chamou)."""
    notification = Notification(
        organization_id=organization_id,
        type=notification_type,
        title=title or NOTIFICATION_TYPES.get(notification_type, "📢 Notificação"),
        message=message,
        reference_type=reference_type,
        reference_id=reference_id,
        read=False,
    )
    db.add(notification)
    logger.info(f"📢 Notificação criada no painel: {notification_type} - organização {organization_id}")
    return notification


def format_transition_summary(transitions_made: int, substatuses_cleared: int, substatuses_updated: int = 0) -> str:
    message = (
        f"Transições automáticas: {transitions_made} leads movidos, "
        f"{substatuses_cleared} substatus limpos"
    )
    if substatuses_updated:
        message += f", {substatuses_updated} substatus atualizados"
    return message


async def notify_transition_summary(
    session_factory: async_sessionmaker,
    organization_id: int,
    transitions_made: int,
    substatuses_cleared: int,
    substatuses_updated: int = 0,
) -> None:
    """Grava o resumo de uma rodada de transições como notificação do painel."""
    async with session_factory() as db:
        await create_panel_notification(
            db,
            organization_id=organization_id,
            notification_type="auto_transitions",
            message=format_transition_summary(transitions_made, substatuses_cleared, substatuses_updated),
        )
        await db.commit()
