"""
SERVIÇO: REGRAS DE TRANSIÇÃO DE TEMPERATURA
============================================

CRUD e reordenação das regras customizadas de uma organização.
O motor de transições só lê as regras ativas (get_active_rules).
"""

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.domain.entities import (
    TemperatureTransitionRule,
    LeadTemperature,
    HotSubstatus,
    TriggerEvent,
)

logger = logging.getLogger(__name__)


class RuleNotFoundError(LookupError):
    """Regra inexistente (ou de outra organização)."""


class InvalidRuleError(ValueError):
    """Regra com condição/ação inválida."""


VALID_TRIGGERS = frozenset(t.value for t in TriggerEvent)
VALID_FROM_TEMPERATURES = frozenset({
    LeadTemperature.NEW.value,
    LeadTemperature.HOT.value,
    LeadTemperature.COLD.value,
})
# Regras automáticas nunca levam o lead para PERDIDO
VALID_TARGET_TEMPERATURES = VALID_FROM_TEMPERATURES
VALID_SUBSTATUSES = frozenset(s.value for s in HotSubstatus)

RULE_FIELDS = (
    "name",
    "priority",
    "active",
    "trigger_event",
    "from_temperature",
    "from_substatus",
    "timer_minutes",
    "action_set_temperature",
    "action_set_substatus",
    "action_clear_substatus",
)


def validate_rule(values: dict[str, Any]) -> None:
    """Valida a regra já mesclada (estado final)."""
    if not (values.get("name") or "").strip():
        raise InvalidRuleError("Nome da regra é obrigatório")

    if values.get("trigger_event") not in VALID_TRIGGERS:
        raise InvalidRuleError(f"Evento inválido: {values.get('trigger_event')}")

    from_temperature = values.get("from_temperature")
    if from_temperature is not None and from_temperature not in VALID_FROM_TEMPERATURES:
        raise InvalidRuleError(f"Temperatura de origem inválida: {from_temperature}")

    from_substatus = values.get("from_substatus")
    if from_substatus is not None and from_substatus not in VALID_SUBSTATUSES:
        raise InvalidRuleError(f"Substatus de origem inválido: {from_substatus}")

    if (values.get("timer_minutes") or 0) < 1:
        raise InvalidRuleError("Timer deve ser de no mínimo 1 minuto")

    target = values.get("action_set_temperature")
    if target is not None and target not in VALID_TARGET_TEMPERATURES:
        raise InvalidRuleError(f"Temperatura de destino inválida: {target}")

    set_substatus = values.get("action_set_substatus")
    if set_substatus is not None:
        if set_substatus not in VALID_SUBSTATUSES:
            raise InvalidRuleError(f"Substatus de destino inválido: {set_substatus}")
        if values.get("action_clear_substatus"):
            raise InvalidRuleError("Não é possível definir e limpar o substatus na mesma regra")

    if target is None and set_substatus is None and not values.get("action_clear_substatus"):
        raise InvalidRuleError("A regra precisa de pelo menos uma ação")


# =============================================================================
# LEITURA
# =============================================================================

async def list_rules(session: AsyncSession, organization_id: int) -> Sequence[TemperatureTransitionRule]:
    result = await session.execute(
        select(TemperatureTransitionRule)
        .where(TemperatureTransitionRule.organization_id == organization_id)
        .order_by(TemperatureTransitionRule.priority.asc(), TemperatureTransitionRule.id.asc())
    )
    return result.scalars().all()


async def get_active_rules(session: AsyncSession, organization_id: int) -> Sequence[TemperatureTransitionRule]:
    """Regras ativas ordenadas por prioridade (menor primeiro)."""
    result = await session.execute(
        select(TemperatureTransitionRule)
        .where(TemperatureTransitionRule.organization_id == organization_id)
        .where(TemperatureTransitionRule.active.is_(True))
        .order_by(TemperatureTransitionRule.priority.asc(), TemperatureTransitionRule.id.asc())
    )
    return result.scalars().all()


async def get_rule(session: AsyncSession, organization_id: int, rule_id: int) -> TemperatureTransitionRule:
    result = await session.execute(
        select(TemperatureTransitionRule)
        .where(TemperatureTransitionRule.id == rule_id)
        .where(TemperatureTransitionRule.organization_id == organization_id)
    )
    rule = result.scalar_one_or_none()
    if rule is None:
        raise RuleNotFoundError(f"Regra {rule_id} não encontrada")
    return rule


# =============================================================================
# ESCRITA
# =============================================================================

async def create_rule(
    session: AsyncSession,
    organization_id: int,
    data: dict[str, Any],
) -> TemperatureTransitionRule:
    """Cria a regra. Sem prioridade informada, entra no fim da lista."""
    values = {
        "active": True,
        "action_clear_substatus": False,
        "from_temperature": None,
        "from_substatus": None,
        "action_set_temperature": None,
        "action_set_substatus": None,
        **{k: v for k, v in data.items() if k in RULE_FIELDS},
    }
    validate_rule(values)

    if values.get("priority") is None:
        result = await session.execute(
            select(func.max(TemperatureTransitionRule.priority))
            .where(TemperatureTransitionRule.organization_id == organization_id)
        )
        max_priority: Optional[int] = result.scalar()
        values["priority"] = (max_priority if max_priority is not None else -1) + 1

    rule = TemperatureTransitionRule(organization_id=organization_id, **values)
    session.add(rule)
    await session.flush()

    logger.info(f"📐 Regra criada: {rule.name} (organização {organization_id}, prioridade {rule.priority})")
    return rule


async def update_rule(
    session: AsyncSession,
    organization_id: int,
    rule_id: int,
    data: dict[str, Any],
) -> TemperatureTransitionRule:
    rule = await get_rule(session, organization_id, rule_id)

    changes = {k: v for k, v in data.items() if k in RULE_FIELDS}
    merged = {name: getattr(rule, name) for name in RULE_FIELDS}
    merged.update(changes)
    validate_rule(merged)

    for field_name, value in changes.items():
        setattr(rule, field_name, value)

    await session.flush()
    logger.info(f"📐 Regra {rule_id} atualizada: {', '.join(sorted(changes)) or 'sem mudanças'}")
    return rule


async def delete_rule(session: AsyncSession, organization_id: int, rule_id: int) -> None:
    rule = await get_rule(session, organization_id, rule_id)
    await session.delete(rule)
    await session.flush()
    logger.info(f"🗑️ Regra {rule_id} excluída (organização {organization_id})")


async def reorder_rules(
    session: AsyncSession,
    organization_id: int,
    ordered_ids: Sequence[int],
) -> Sequence[TemperatureTransitionRule]:
    """Define priority = posição na lista recebida."""
    if len(set(ordered_ids)) != len(ordered_ids):
        raise InvalidRuleError("Lista de regras contém ids repetidos")

    rules = {rule.id: rule for rule in await list_rules(session, organization_id)}

    missing = [rule_id for rule_id in ordered_ids if rule_id not in rules]
    if missing:
        raise RuleNotFoundError(f"Regras não encontradas: {missing}")

    for position, rule_id in enumerate(ordered_ids):
        rules[rule_id].priority = position

    await session.flush()
    logger.info(f"↕️ Regras reordenadas (organização {organization_id}): {list(ordered_ids)}")
    return await list_rules(session, organization_id)
