from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Depends
from opentelemetry import trace

from talent_registry.core.auth import Viewer
from talent_registry.core.config import Settings, get_settings
from talent_registry.services.repository import get_repository

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ViewEventStore(Protocol):
    async def record_profile_view(
        self,
        *,
        target_user_id: str,
        viewer_id: str | None,
        viewer_key: str,
        window_hours: int,
    ) -> bool: ...


def viewer_key_for(viewer: Viewer) -> str:
    if viewer.id is not None:
        return f"user:{viewer.id}"
    return viewer.session_key or "anon:unknown"


class ProfileViewRecorder:
    def __init__(self, store: ViewEventStore, window_hours: int) -> None:
        self._store = store
        self.window_hours = max(1, window_hours)

    async def record_view(self, target_user_id: str, viewer: Viewer) -> bool:
        """Count a profile view; returns True only when a new view was stored.

        Owners never count, repeat visits inside the window count once, and a
        storage failure is logged and reported as not counted.
        """
        if viewer.is_owner_of_target:
            return False

        viewer_key = viewer_key_for(viewer)
        with tracer.start_as_current_span("profile_view.record") as span:
            span.set_attribute("profile.user_id", target_user_id)
            span.set_attribute("viewer.role", viewer.role.value)
            try:
                counted = await self._store.record_profile_view(
                    target_user_id=target_user_id,
                    viewer_id=viewer.id,
                    viewer_key=viewer_key,
                    window_hours=self.window_hours,
                )
            except Exception:
                logger.exception("profile view not recorded target_user_id=%s", target_user_id)
                return False
            span.set_attribute("profile_view.counted", bool(counted))

        if counted:
            logger.info("profile view recorded target_user_id=%s role=%s", target_user_id, viewer.role.value)
        return bool(counted)


def get_view_recorder(
    settings: Settings = Depends(get_settings),
    repository=Depends(get_repository),
) -> ProfileViewRecorder:
    return ProfileViewRecorder(repository, window_hours=settings.profile_view_window_hours)
