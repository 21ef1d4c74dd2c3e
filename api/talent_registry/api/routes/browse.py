from fastapi import APIRouter, Depends, HTTPException, Query, status

from talent_registry.core.auth import Principal, Viewer, ViewerRole
from talent_registry.core.config import Settings, get_settings
from talent_registry.core.security import get_human_principal
from talent_registry.schemas.candidates import CandidateCardOut, SavedProfessionalOut
from talent_registry.services.access import AccessFacts, get_access_facts
from talent_registry.services.materializer import materialize_card
from talent_registry.services.repository import RepositoryUnavailableError, TargetProfile, get_repository
from talent_registry.services.visibility import prime_for_principal, resolve_decision

router = APIRouter()

CARD_VIEWER_ROLES = {ViewerRole.EMPLOYER, ViewerRole.AGENCY, ViewerRole.ADMIN}
SAVED_VIEWER_ROLES = {ViewerRole.EMPLOYER, ViewerRole.AGENCY}


@router.get("", response_model=list[CandidateCardOut])
async def list_candidate_cards(
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
    settings: Settings = Depends(get_settings),
    limit: int = Query(default=20, ge=1),
    offset: int = Query(default=0, ge=0),
    q: str | None = Query(default=None, min_length=1),
) -> list[CandidateCardOut]:
    _require(principal, CARD_VIEWER_ROLES)
    try:
        targets = await repository.list_candidate_profiles(
            limit=min(limit, settings.candidate_page_size_max),
            offset=offset,
            q=q,
        )
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return await _cards(principal, targets, facts)


@router.get("/saved", response_model=list[SavedProfessionalOut])
async def list_saved_professionals(
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
    settings: Settings = Depends(get_settings),
    limit: int = Query(default=20, ge=1),
    offset: int = Query(default=0, ge=0),
) -> list[SavedProfessionalOut]:
    _require(principal, SAVED_VIEWER_ROLES)
    try:
        saved = await repository.list_saved_professionals(
            principal.subject,
            limit=min(limit, settings.candidate_page_size_max),
            offset=offset,
        )
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    cards = await _cards(principal, [item.profile for item in saved], facts)
    return [
        SavedProfessionalOut(
            **card.model_dump(),
            saved_at=item.saved_at,
            note=item.note,
            job_id=item.job_id,
            job_title=item.job_title,
        )
        for card, item in zip(cards, saved)
    ]


def _require(principal: Principal, allowed: set[ViewerRole]) -> None:
    try:
        principal.require_roles(allowed)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


async def _cards(principal: Principal, targets: list[TargetProfile], facts: AccessFacts) -> list[CandidateCardOut]:
    await prime_for_principal(principal, targets, facts)
    cards: list[CandidateCardOut] = []
    for target in targets:
        viewer = Viewer.for_target(principal, target.user_id)
        decision = await resolve_decision(viewer, target, facts)
        cards.append(materialize_card(target, decision))
    return cards
