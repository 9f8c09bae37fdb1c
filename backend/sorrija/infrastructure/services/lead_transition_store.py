"""
LEAD TRANSITION STORE
=====================

Interface de acesso a dados usada pelo motor de transições automáticas
e a implementação concreta em SQLAlchemy.

Cada operação usa a própria sessão: uma falha ao gravar um lead não
contamina a gravação dos demais.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from sorrija.domain.entities import CRMSettings, Lead, TemperatureTransitionRule
from sorrija.domain.services.temperature_rules import LeadSnapshot
from sorrija.infrastructure.services.crm_settings_service import get_or_create_crm_settings
from sorrija.infrastructure.services.temperature_rule_service import get_active_rules

logger = logging.getLogger(__name__)


class TransitionStoreError(Exception):
    """Falha de leitura/escrita no armazenamento de leads ou regras."""


class LeadTransitionStore(ABC):
    """
    Contrato de dados do motor de transições.

    - get_settings(): nunca falha por ausência (cria os padrões)
    - get_active_rules(): regras ativas em ordem de prioridade
    - get_leads(): todos os leads da organização
    - update_lead(): grava um lead se ele ainda estiver como foi lido
      (False = pulado); levanta exceção se a gravação falhar
    """

    @abstractmethod
    async def get_settings(self, organization_id: int) -> CRMSettings:
        ...

    @abstractmethod
    async def get_active_rules(self, organization_id: int) -> Sequence[TemperatureTransitionRule]:
        ...

    @abstractmethod
    async def get_leads(self, organization_id: int) -> list[LeadSnapshot]:
        ...

    @abstractmethod
    async def update_lead(self, organization_id: int, lead: LeadSnapshot, changes: dict[str, Any]) -> bool:
        ...


class SqlAlchemyLeadTransitionStore(LeadTransitionStore):
    """Implementação sobre o banco relacional (AsyncSession)."""

    def __init__(self, session_factory: async_sessionmaker, batch_size: int = 500):
        self._session_factory = session_factory
        self._batch_size = batch_size

    async def get_settings(self, organization_id: int) -> CRMSettings:
        try:
            async with self._session_factory() as session:
                settings = await get_or_create_crm_settings(session, organization_id)
                await session.commit()
                return settings
        except SQLAlchemyError as e:
            raise TransitionStoreError(f"Erro ao ler configurações do CRM: {e}") from e

    async def get_active_rules(self, organization_id: int) -> Sequence[TemperatureTransitionRule]:
        try:
            async with self._session_factory() as session:
                return await get_active_rules(session, organization_id)
        except SQLAlchemyError as e:
            raise TransitionStoreError(f"Erro ao ler regras de transição: {e}") from e

    async def get_leads(self, organization_id: int) -> list[LeadSnapshot]:
        """Lê em páginas por id para não montar uma única consulta gigante."""
        leads: list[LeadSnapshot] = []
        last_id = 0

        try:
            async with self._session_factory() as session:
                while True:
                    result = await session.execute(
                        select(
                            Lead.id,
                            Lead.temperature,
                            Lead.hot_substatus,
                            Lead.last_interaction_at,
                            Lead.created_at,
                            Lead.lost_reason,
                        )
                        .where(Lead.organization_id == organization_id)
                        .where(Lead.id > last_id)
                        .order_by(Lead.id.asc())
                        .limit(self._batch_size)
                    )
                    rows = result.all()
                    if not rows:
                        break

                    leads.extend(
                        LeadSnapshot(
                            id=row.id,
                            temperature=row.temperature,
                            hot_substatus=row.hot_substatus,
                            last_interaction_at=row.last_interaction_at,
                            created_at=row.created_at,
                            lost_reason=row.lost_reason,
                        )
                        for row in rows
                    )
                    last_id = rows[-1].id

                    if len(rows) < self._batch_size:
                        break
        except SQLAlchemyError as e:
            raise TransitionStoreError(f"Erro ao ler leads: {e}") from e

        return leads

    async def update_lead(self, organization_id: int, lead: LeadSnapshot, changes: dict[str, Any]) -> bool:
        """
        UPDATE condicionado ao estado lido (temperatura + substatus).

        Se o lead mudou (ex: alteração manual) ou sumiu desde a leitura,
        nenhuma linha casa e a gravação é pulada (retorna False).
        """
        if lead.hot_substatus is None:
            same_substatus = Lead.hot_substatus.is_(None)
        else:
            same_substatus = Lead.hot_substatus == lead.hot_substatus

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    update(Lead)
                    .where(Lead.id == lead.id)
                    .where(Lead.organization_id == organization_id)
                    .where(Lead.temperature == lead.temperature)
                    .where(same_substatus)
                    .values(**changes)
                )
                if result.rowcount == 0:
                    await session.rollback()
                    logger.warning(f"⚠️ Lead {lead.id} mudou desde a leitura, transição pulada")
                    return False
                await session.commit()
                return True
        except SQLAlchemyError as e:
            raise TransitionStoreError(f"Erro ao atualizar lead {lead.id}: {e}") from e
