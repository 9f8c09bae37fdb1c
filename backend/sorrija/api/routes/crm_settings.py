"""
ROTAS: CONFIGURAÇÕES DO CRM
============================

Tempos e chaves que alimentam as regras padrão de transição.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.infrastructure.database import get_db
from sorrija.domain.entities import Organization
from sorrija.api.dependencies import get_current_organization
from sorrija.api.schemas import CRMSettingsResponse, CRMSettingsUpdate
from sorrija.infrastructure.services.crm_settings_service import (
    InvalidSettingsError,
    get_or_create_crm_settings,
    update_crm_settings,
)

router = APIRouter(prefix="/crm-settings", tags=["CRM Settings"])


@router.get("", response_model=CRMSettingsResponse)
async def get_settings_endpoint(
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    """Retorna as configurações (cria com os padrões na primeira leitura)."""
    return await get_or_create_crm_settings(db, organization.id)


@router.patch("", response_model=CRMSettingsResponse)
async def update_settings_endpoint(
    payload: CRMSettingsUpdate,
    organization: Organization = Depends(get_current_organization),
    db: AsyncSession = Depends(get_db),
):
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not data:
        raise HTTPException(status_code=400, detail="Nenhum campo para atualizar")

    try:
        return await update_crm_settings(db, organization.id, data)
    except InvalidSettingsError as e:
        raise HTTPException(status_code=400, detail=str(e))
