import hashlib
from typing import Any

import httpx
from fastapi import Depends, Header, HTTPException, Request, status

from talent_registry.core.auth import Principal, ViewerRole, parse_role
from talent_registry.core.config import Settings, get_settings


async def get_human_principal(
    request: Request,
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Principal:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication required",
        )
    return await _principal_from_bearer(request, settings, authorization)


async def get_optional_principal(
    request: Request,
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Principal:
    if not authorization:
        return Principal(
            subject=None,
            role=ViewerRole.ANONYMOUS,
            session_key=_anonymous_session_key(request, settings),
        )
    if not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid authorization header")
    return await _principal_from_bearer(request, settings, authorization)


async def _principal_from_bearer(request: Request, settings: Settings, authorization: str) -> Principal:
    token = authorization.split(" ", maxsplit=1)[1].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="empty bearer token")

    if not settings.supabase_url or not settings.supabase_anon_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase auth is not configured",
        )

    user = await _fetch_supabase_user(
        supabase_url=settings.supabase_url,
        supabase_anon_key=settings.supabase_anon_key,
        token=token,
        timeout_seconds=settings.auth_timeout_seconds,
    )
    user_id = user.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid bearer token")

    return Principal(
        subject=user_id,
        role=_resolve_human_role(user),
        session_key=f"user:{user_id}",
    )


async def _fetch_supabase_user(
    *,
    supabase_url: str,
    supabase_anon_key: str,
    token: str,
    timeout_seconds: float,
) -> dict[str, Any]:
    headers = {
        "Authorization": f"Bearer {token}",
        "apikey": supabase_anon_key,
    }
    url = f"{supabase_url.rstrip('/')}/auth/v1/user"

    try:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:  # pragma: no cover - network dependent
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase auth verification unavailable",
        ) from exc

    if response.status_code in {401, 403}:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid bearer token")
    if response.status_code != 200:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase auth verification failed",
        )

    return response.json()


def _resolve_human_role(user: dict[str, Any]) -> ViewerRole:
    # user_metadata is writable by the user, so roles only come from app_metadata.
    app_metadata = user.get("app_metadata")
    if not isinstance(app_metadata, dict):
        return ViewerRole.ANONYMOUS

    role = app_metadata.get("role")
    if isinstance(role, str) and role:
        return parse_role(role)

    roles = app_metadata.get("roles")
    if isinstance(roles, list):
        parsed = [parse_role(item) for item in roles if isinstance(item, str)]
        for candidate in (ViewerRole.ADMIN, ViewerRole.EMPLOYER, ViewerRole.AGENCY, ViewerRole.PROFESSIONAL):
            if candidate in parsed:
                return candidate

    return ViewerRole.ANONYMOUS


def _anonymous_session_key(request: Request, settings: Settings) -> str:
    cookie = request.cookies.get(settings.anonymous_session_cookie)
    if cookie:
        raw = f"cookie:{cookie}"
    else:
        host = request.client.host if request.client else ""
        raw = f"client:{host}|{request.headers.get('user-agent', '')}"
    return "anon:" + hashlib.sha256(raw.encode("utf-8")).hexdigest()
