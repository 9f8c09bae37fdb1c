"""
ROTAS: TRANSIÇÕES AUTOMÁTICAS
==============================

Execução sob demanda das transições de temperatura/substatus
e estado do runner para a organização do usuário.

A execução periódica fica no scheduler; este endpoint passa pelo
mesmo runner (mesmo cooldown e mesma trava).
"""

from typing import Optional

from fastapi import APIRouter, Depends

from sorrija.api.dependencies import get_current_organization, get_lead_transition_runner
from sorrija.api.schemas import TransitionRunRequest, TransitionRunResponse, TransitionStatusResponse
from sorrija.domain.entities import Organization
from sorrija.infrastructure.jobs.transition_runner import LeadTransitionRunner

router = APIRouter(prefix="/lead-transitions", tags=["Lead Transitions"])


@router.post("/run", response_model=TransitionRunResponse)
async def run_lead_transitions(
    payload: Optional[TransitionRunRequest] = None,
    organization: Organization = Depends(get_current_organization),
    runner: LeadTransitionRunner = Depends(get_lead_transition_runner),
):
    """
    Roda as transições agora.

    Recusas por cooldown/execução em andamento voltam com skipped=true
    (não são erro para o painel).
    """
    verbose = payload.verbose if payload else None
    result = await runner.run(organization.id, verbose=verbose)
    return result.to_dict()


@router.get("/status", response_model=TransitionStatusResponse)
async def get_lead_transitions_status(
    organization: Organization = Depends(get_current_organization),
    runner: LeadTransitionRunner = Depends(get_lead_transition_runner),
):
    return runner.status(organization.id)
