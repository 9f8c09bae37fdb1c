"""
DEPENDENCIES (Dependências)
============================

Funções que são injetadas nas rotas para validação.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.infrastructure.database import get_db
from sorrija.infrastructure.services.auth_service import decode_access_token
from sorrija.infrastructure.jobs.transition_runner import LeadTransitionRunner, get_transition_runner
from sorrija.domain.entities import User, Organization
from sorrija.domain.entities.enums import UserRole

# Esquema de autenticação Bearer
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Valida o token e retorna o usuário autenticado.

    Uso nas rotas:
        @router.get("/rota-protegida")
        async def rota(user: User = Depends(get_current_user)):
            # user está disponível aqui
    """

    token = credentials.credentials
    payload = decode_access_token(token)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
        )

    result = await db.execute(
        select(User).where(User.id == int(user_id)).where(User.active.is_(True))
    )
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não encontrado",
        )

    return user


async def get_current_superadmin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verifica se o usuário atual é superadmin.

    Raises:
        HTTPException 403: Se não for superadmin
    """
    if current_user.role != UserRole.SUPERADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso negado. Apenas superadmins podem acessar este recurso.",
        )
    return current_user


async def get_current_organization(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Organization:
    """
    Retorna a organização (clínica) do usuário autenticado.
    """

    result = await db.execute(
        select(Organization)
        .where(Organization.id == user.organization_id)
        .where(Organization.active.is_(True))
    )
    organization = result.scalar_one_or_none()

    if not organization:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Organização não encontrada ou inativa",
        )

    return organization


def get_lead_transition_runner() -> LeadTransitionRunner:
    """Runner único do processo (sobrescrito nos testes)."""
    return get_transition_runner()
