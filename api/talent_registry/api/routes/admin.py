from fastapi import APIRouter, Depends, HTTPException, Response, status

from talent_registry.core.auth import ViewerRole
from talent_registry.core.config import Settings, get_settings
from talent_registry.core.headers import apply_private_profile_headers
from talent_registry.core.security import get_human_principal
from talent_registry.schemas.profiles import RedactedProfileOut
from talent_registry.services.access import AccessFacts, get_access_facts
from talent_registry.services.materializer import materialize
from talent_registry.services.repository import (
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    get_repository,
)
from talent_registry.services.visibility import resolve_for_principal

router = APIRouter()


@router.get("/profiles/{user_id}", response_model=RedactedProfileOut)
async def get_profile_for_review(
    user_id: str,
    response: Response,
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
    settings: Settings = Depends(get_settings),
) -> RedactedProfileOut:
    try:
        principal.require_roles({ViewerRole.ADMIN})
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    try:
        target = await repository.get_profile_by_user_id(user_id)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RepositoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    # Review views are not counted; the owner's preference is exposed as preferredAnonymity.
    _, decision = await resolve_for_principal(principal, target, facts)
    apply_private_profile_headers(response, max_age_seconds=0)
    return materialize(target, decision)
