"""
ROTAS: REGRAS DE TRANSIÇÃO DE TEMPERATURA
==========================================

CRUD, reordenação e testador das regras customizadas.
Regras customizadas são avaliadas antes das regras padrão.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.infrastructure.database import get_db
from sorrija.domain.entities import Organization
from sorrija.domain.services.temperature_rules import simulate_transition_rule
from sorrija.api.dependencies import get_current_organization
from sorrija.api.schemas import (
    RuleReorderRequest,
    RuleTestRequest,
    RuleTestResponse,
    TemperatureRuleCreate,
    TemperatureRuleResponse,
    TemperatureRuleUpdate,
)
from sorrija.infrastructure.services.temperature_rule_service import (
    InvalidRuleError,
    RuleNotFoundError,
    create_rule,
    delete_rule,
    get_rule,
    list_rules,
    reorder_rules,
    update_rule,
)

router = APIRouter(prefix="/temperature-rules", tags=["Temperature Rules"])


@router.get("", response_model=list[TemperatureRuleResponse])
async def list_rules_endpoint(
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    return await list_rules(db, organization.id)


@router.post("", response_model=TemperatureRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule_endpoint(
    payload: TemperatureRuleCreate,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_rule(db, organization.id, payload.model_dump())
    except InvalidRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/reorder", response_model=list[TemperatureRuleResponse])
async def reorder_rules_endpoint(
    payload: RuleReorderRequest,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await reorder_rules(db, organization.id, payload.rule_ids)
    except RuleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{rule_id}", response_model=TemperatureRuleResponse)
async def update_rule_endpoint(
    rule_id: int,
    payload: TemperatureRuleUpdate,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await update_rule(db, organization.id, rule_id, payload.model_dump(exclude_unset=True))
    except RuleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule_endpoint(
    rule_id: int,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    try:
        await delete_rule(db, organization.id, rule_id)
    except RuleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{rule_id}/test", response_model=RuleTestResponse)
async def test_rule_endpoint(
    rule_id: int,
    payload: RuleTestRequest,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    """
    Simula a regra contra condições informadas.

    Mostra cada condição (esperado x atual) e o resultado da ação se casar.
    """
    try:
        rule = await get_rule(db, organization.id, rule_id)
    except RuleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    result = simulate_transition_rule(
        rule,
        temperature=payload.temperature,
        substatus=payload.substatus,
        minutes_since_interaction=payload.minutes_since_interaction,
    )
    return {
        "matches": result.matches,
        "checks": [vars(check) for check in result.checks],
        "next_temperature": result.next_temperature,
        "next_hot_substatus": result.next_hot_substatus,
    }
