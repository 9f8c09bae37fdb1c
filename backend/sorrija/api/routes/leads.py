"""
ROTAS: LEADS
=============

Mudança manual de temperatura do lead pelo usuário.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.infrastructure.database import get_db
from sorrija.domain.entities import Lead, Organization
from sorrija.domain.services.lead_temperature import InvalidTemperatureChange, build_temperature_change
from sorrija.api.dependencies import get_current_organization
from sorrija.api.schemas import LeadResponse, LeadTemperatureUpdate

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.patch("/{lead_id}/temperature", response_model=LeadResponse)
async def update_lead_temperature(
    lead_id: int,
    payload: LeadTemperatureUpdate,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    """
    Muda a temperatura do lead mantendo as invariantes:
    substatus só em QUENTE, motivo de perda só em PERDIDO.
    """
    result = await db.execute(
        select(Lead)
        .where(Lead.id == lead_id)
        .where(Lead.organization_id == organization.id)
    )
    lead = result.scalar_one_or_none()

    if not lead:
        raise HTTPException(status_code=404, detail="Lead não encontrado")

    try:
        changes = build_temperature_change(
            current_substatus=lead.hot_substatus,
            temperature=payload.temperature,
            now=datetime.now(timezone.utc),
            hot_substatus=payload.hot_substatus,
            lost_reason=payload.lost_reason,
        )
    except InvalidTemperatureChange as e:
        raise HTTPException(status_code=400, detail=str(e))

    for field_name, value in changes.items():
        setattr(lead, field_name, value)

    await db.flush()
    await db.refresh(lead)
    return lead
