from __future__ import annotations

from dataclasses import replace

from fastapi import HTTPException, status
from starlette.responses import Response

from talent_registry.core.auth import Principal, ViewerRole
from talent_registry.core.config import Settings
from talent_registry.core.headers import apply_private_profile_headers
from talent_registry.schemas.profiles import RedactedProfileOut
from talent_registry.services.access import AccessFacts
from talent_registry.services.materializer import materialize
from talent_registry.services.repository import TargetProfile
from talent_registry.services.view_events import ProfileViewRecorder
from talent_registry.services.visibility import resolve_for_principal


def ensure_listed(principal: Principal, target: TargetProfile) -> None:
    """Unapproved profiles are only visible to their owner and to admins."""
    if target.is_approved:
        return
    if principal.role == ViewerRole.ADMIN:
        return
    if principal.subject is not None and principal.subject == target.user_id:
        return
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="profile not found")


async def render_profile_detail(
    *,
    principal: Principal,
    target: TargetProfile,
    facts: AccessFacts,
    recorder: ProfileViewRecorder,
    response: Response,
    settings: Settings,
) -> RedactedProfileOut:
    ensure_listed(principal, target)
    viewer, decision = await resolve_for_principal(principal, target, facts)

    if await recorder.record_view(target.user_id, viewer):
        target = replace(target, profile_views=target.profile_views + 1)

    apply_private_profile_headers(response, max_age_seconds=settings.profile_cache_max_age_seconds)
    return materialize(target, decision)
