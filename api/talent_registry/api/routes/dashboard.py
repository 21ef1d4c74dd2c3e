from fastapi import APIRouter, Depends, HTTPException, Response, status

from talent_registry.api.profile_detail import render_profile_detail
from talent_registry.core.auth import ViewerRole
from talent_registry.core.config import Settings, get_settings
from talent_registry.core.security import get_human_principal
from talent_registry.schemas.profiles import ProfileViewStatsOut, RedactedProfileOut
from talent_registry.services.access import AccessFacts, get_access_facts
from talent_registry.services.repository import (
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    get_repository,
)
from talent_registry.services.view_events import ProfileViewRecorder, get_view_recorder

router = APIRouter()

DASHBOARD_VIEWER_ROLES = {ViewerRole.EMPLOYER, ViewerRole.AGENCY, ViewerRole.PROFESSIONAL, ViewerRole.ADMIN}


@router.get("/view-profile/{user_id}", response_model=RedactedProfileOut)
async def view_profile(
    user_id: str,
    response: Response,
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
    recorder: ProfileViewRecorder = Depends(get_view_recorder),
    settings: Settings = Depends(get_settings),
) -> RedactedProfileOut:
    try:
        principal.require_roles(DASHBOARD_VIEWER_ROLES)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    try:
        target = await repository.get_profile_by_user_id(user_id)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RepositoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return await render_profile_detail(
        principal=principal,
        target=target,
        facts=facts,
        recorder=recorder,
        response=response,
        settings=settings,
    )


@router.get("/profile-views", response_model=ProfileViewStatsOut)
async def profile_view_stats(
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
) -> ProfileViewStatsOut:
    try:
        stats = await repository.get_profile_view_stats(principal.subject)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RepositoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ProfileViewStatsOut(**stats)
