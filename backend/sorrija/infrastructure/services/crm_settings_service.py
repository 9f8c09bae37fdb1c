"""
SERVIÇO: CONFIGURAÇÕES DO CRM
==============================

Leitura (com criação sob demanda) e atualização do CRMSettings
de uma organização.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.domain.entities import CRMSettings, DEFAULT_CRM_SETTINGS

logger = logging.getLogger(__name__)


class InvalidSettingsError(ValueError):
    """Valores de configuração fora dos limites aceitos."""


# Limites aceitos por campo numérico: (mínimo, máximo)
SETTINGS_LIMITS = {
    "new_to_cold_minutes": (1, 60 * 24 * 365),
    "hot_to_cold_days": (0, 365),
    "hot_to_cold_hours": (0, 23),
    "awaiting_response_minutes": (1, 60 * 24 * 30),
    "em_conversa_timeout_minutes": (1, 60 * 24 * 30),
    "aguardando_to_cold_hours": (1, 24 * 365),
    "max_follow_up_attempts": (0, 50),
    "default_follow_up_interval": (1, 365),
}

EDITABLE_FIELDS = frozenset(DEFAULT_CRM_SETTINGS)


async def get_crm_settings(session: AsyncSession, organization_id: int) -> CRMSettings | None:
    result = await session.execute(
        select(CRMSettings).where(CRMSettings.organization_id == organization_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_crm_settings(session: AsyncSession, organization_id: int) -> CRMSettings:
    """
    Retorna as configurações da organização, criando com os padrões se não existirem.

    Não faz commit: quem chamou decide quando persistir.
    """
    settings = await get_crm_settings(session, organization_id)
    if settings is not None:
        return settings

    settings = CRMSettings.with_defaults(organization_id)
    session.add(settings)
    await session.flush()

    logger.info(f"⚙️ CRMSettings criado com valores padrão para organização {organization_id}")
    return settings


def validate_crm_settings(values: dict[str, Any]) -> None:
    """Valida limites numéricos e a combinação dias + horas de QUENTE → FRIO."""
    for field_name, (minimum, maximum) in SETTINGS_LIMITS.items():
        value = values.get(field_name)
        if value is None:
            continue
        if value < minimum or value > maximum:
            raise InvalidSettingsError(
                f"{field_name} deve estar entre {minimum} e {maximum}"
            )

    days = values.get("hot_to_cold_days") or 0
    hours = values.get("hot_to_cold_hours") or 0
    if days == 0 and hours == 0:
        raise InvalidSettingsError("Tempo de QUENTE → FRIO deve ser de pelo menos 1 hora")


async def update_crm_settings(
    session: AsyncSession,
    organization_id: int,
    data: dict[str, Any],
) -> CRMSettings:
    """Atualiza apenas os campos enviados, validando o resultado final."""
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise InvalidSettingsError(f"Campos desconhecidos: {', '.join(sorted(unknown))}")

    settings = await get_or_create_crm_settings(session, organization_id)

    current = {name: getattr(settings, name) for name in EDITABLE_FIELDS}
    merged = {**current, **data}
    validate_crm_settings(merged)

    for field_name, value in data.items():
        setattr(settings, field_name, value)

    await session.flush()

    logger.info(
        f"⚙️ CRMSettings atualizado (organização {organization_id}): {', '.join(sorted(data))}"
    )
    return settings
