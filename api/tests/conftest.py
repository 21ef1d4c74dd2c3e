from __future__ import annotations

import os
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

# Tracing is exercised separately; keep the app import free of exporters.
os.environ.setdefault("TR_OTEL_ENABLED", "false")

from talent_registry.services.repository import (  # noqa: E402
    ConversationRecord,
    MessageRecord,
    ParticipantRecord,
    ReplyRecord,
    RepositoryNotFoundError,
    SavedProfessionalRecord,
    TargetProfile,
    ThreadRecord,
    compute_percent_change,
)

OWNER_ID = "aaaaaaaa-0000-0000-0000-000000000001"
OTHER_PRO_ID = "aaaaaaaa-0000-0000-0000-000000000002"
EMPLOYER_ID = "bbbbbbbb-0000-0000-0000-000000000001"
AGENCY_ID = "bbbbbbbb-0000-0000-0000-000000000002"
ADMIN_ID = "cccccccc-0000-0000-0000-000000000001"
PENDING_ID = "aaaaaaaa-0000-0000-0000-000000000003"
CONVERSATION_ID = "dddddddd-0000-0000-0000-000000000001"


def make_profile(**overrides: Any) -> TargetProfile:
    values: dict[str, Any] = {
        "user_id": OWNER_ID,
        "profile_id": "profile-1",
        "slug": "jordan-avery",
        "first_name": "Jordan",
        "last_name": "Avery",
        "email": "jordan@example.com",
        "phone_number": "+1-555-0100",
        "image": "https://cdn.example.com/jordan.png",
        "role": "PROFESSIONAL",
        "created_at": datetime(2025, 1, 2, tzinfo=timezone.utc),
        "custom_initials": None,
        "is_anonymous": False,
        "dont_contact_me": False,
        "status": "APPROVED",
        "resume_url": "https://cdn.example.com/jordan.pdf",
        "additional_photos": ("https://cdn.example.com/jordan-2.png",),
        "profile_views": 7,
        "bio": "Estate manager with hospitality background.",
        "title": "Estate Manager",
        "skills": ("budgeting", "staff training"),
        "location": "Greenwich, CT",
        "work_locations": ("CT", "NY"),
        "years_of_experience": 12,
        "pay_range_min": 120000.0,
        "pay_range_max": 150000.0,
        "media_urls": ("https://cdn.example.com/reel.mp4",),
        "open_to_work": True,
    }
    values.update(overrides)
    return TargetProfile(**values)


def make_participant(user_id: str, first: str, last: str, role: str, **overrides: Any) -> ParticipantRecord:
    return ParticipantRecord(
        user_id=user_id,
        first_name=first,
        last_name=last,
        image=f"https://cdn.example.com/{user_id}.png",
        role=role,
        **overrides,
    )


class FakeVisibilityRepository:
    """In-memory stand-in for PostgresRepository used by route and service tests."""

    def __init__(self) -> None:
        now = datetime.now(timezone.utc)
        self.profiles: dict[str, TargetProfile] = {
            OWNER_ID: make_profile(),
            OTHER_PRO_ID: make_profile(
                user_id=OTHER_PRO_ID,
                profile_id="profile-2",
                slug="riley-jones",
                first_name="Riley",
                last_name="Jones",
                email="riley@example.com",
                custom_initials="RJT",
                is_anonymous=True,
                profile_views=0,
            ),
            PENDING_ID: make_profile(
                user_id=PENDING_ID,
                profile_id="profile-3",
                slug="pending-person",
                status="PENDING",
            ),
        }
        self.network_access: dict[str, bool] = {EMPLOYER_ID: True, AGENCY_ID: False}
        self.applications: set[tuple[str, str]] = set()
        self.view_events: list[dict[str, Any]] = []
        self.network_lookups = 0
        self.relationship_lookups = 0
        self.fail_views = False
        self.fail_access = False
        self.read_marks: list[tuple[str, str]] = []
        self.saved: dict[str, list[tuple[str, datetime, str | None]]] = {
            EMPLOYER_ID: [(OTHER_PRO_ID, now, "Strong estate background"), (OWNER_ID, now - timedelta(days=1), None)],
        }

        owner = self.profiles[OWNER_ID]
        professional = make_participant(
            OWNER_ID,
            owner.first_name or "",
            owner.last_name or "",
            "PROFESSIONAL",
            title=owner.title,
        )
        client = make_participant(EMPLOYER_ID, "Casey", "Morgan", "EMPLOYER", company_name="Harbor Estates")
        self.conversations: dict[str, ConversationRecord] = {
            CONVERSATION_ID: ConversationRecord(
                id=CONVERSATION_ID,
                client=client,
                professional=professional,
                status="ACTIVE",
                last_message_at=now,
                created_at=now - timedelta(days=1),
                unread_count=1,
                messages=(
                    MessageRecord(
                        id="m-2",
                        sender=replace(professional, title=None),
                        content="Happy to talk.",
                        read=False,
                        created_at=now,
                    ),
                    MessageRecord(id="m-1", sender=client, content="Hello!", read=True, created_at=now - timedelta(hours=1)),
                ),
            )
        }
        self.threads: list[ThreadRecord] = [
            ThreadRecord(
                id="t-1",
                title="Best scheduling tools?",
                author=make_participant(OTHER_PRO_ID, "Riley", "Jones", "PROFESSIONAL", custom_initials="RJT"),
                created_at=now,
                last_reply_at=None,
                is_pinned=False,
                is_locked=False,
                reply_count=2,
                participant_count=2,
                like_count=1,
                is_liked=False,
                content="What do you use for household calendars?",
                replies=(
                    ReplyRecord(
                        id="r-1",
                        author=make_participant(OWNER_ID, "Jordan", "Avery", "PROFESSIONAL"),
                        content="A shared spreadsheet.",
                        created_at=now,
                        updated_at=None,
                        like_count=1,
                        is_liked=True,
                    ),
                    ReplyRecord(
                        id="r-2",
                        author=make_participant(OTHER_PRO_ID, "Riley", "Jones", "PROFESSIONAL", custom_initials="RJT"),
                        content="Thanks!",
                        created_at=now,
                        updated_at=None,
                        like_count=0,
                        is_liked=False,
                    ),
                ),
            ),
            ThreadRecord(
                id="t-2",
                title="Interview tips",
                author=make_participant(OWNER_ID, "Jordan", "Avery", "PROFESSIONAL"),
                created_at=now - timedelta(days=2),
                last_reply_at=None,
                is_pinned=True,
                is_locked=False,
                reply_count=0,
                participant_count=1,
                like_count=0,
                is_liked=False,
            ),
        ]

    async def close(self) -> None:
        return None

    async def ping(self) -> None:
        return None

    async def get_profile_by_slug(self, slug: str) -> TargetProfile:
        for profile in self.profiles.values():
            if profile.slug == slug:
                return profile
        raise RepositoryNotFoundError("profile not found")

    async def get_profile_by_user_id(self, user_id: str) -> TargetProfile:
        try:
            return self.profiles[user_id]
        except KeyError as exc:
            raise RepositoryNotFoundError("profile not found") from exc

    async def list_candidate_profiles(self, *, limit: int, offset: int, q: str | None) -> list[TargetProfile]:
        rows = [profile for profile in self.profiles.values() if profile.is_approved]
        if q:
            rows = [row for row in rows if q.lower() in (row.title or "").lower()]
        return rows[offset : offset + limit]

    async def has_network_access(self, employer_id: str) -> bool:
        self.network_lookups += 1
        if self.fail_access:
            raise RuntimeError("store offline")
        return self.network_access.get(employer_id, False)

    async def applied_candidate_ids(self, employer_id: str, candidate_ids: list[str]) -> set[str]:
        self.relationship_lookups += 1
        if self.fail_access:
            raise RuntimeError("store offline")
        return {cid for cid in candidate_ids if (employer_id, cid) in self.applications}

    async def record_profile_view(
        self,
        *,
        target_user_id: str,
        viewer_id: str | None,
        viewer_key: str,
        window_hours: int,
    ) -> bool:
        if self.fail_views:
            raise RuntimeError("insert failed")
        now = datetime.now(timezone.utc)
        window_start = now - timedelta(hours=window_hours)
        for event in self.view_events:
            if (
                event["target_user_id"] == target_user_id
                and event["viewer_key"] == viewer_key
                and event["viewed_at"] > window_start
            ):
                return False
        profile = self.profiles[target_user_id]
        self.profiles[target_user_id] = replace(profile, profile_views=profile.profile_views + 1)
        self.view_events.append(
            {
                "target_user_id": target_user_id,
                "viewer_id": viewer_id,
                "viewer_key": viewer_key,
                "viewed_at": now,
            }
        )
        return True

    async def get_profile_view_stats(self, user_id: str) -> dict[str, Any]:
        profile = await self.get_profile_by_user_id(user_id)
        now = datetime.now(timezone.utc)
        last = sum(
            1
            for event in self.view_events
            if event["target_user_id"] == user_id and event["viewed_at"] >= now - timedelta(days=7)
        )
        return {
            "total_views": profile.profile_views,
            "last_7_days_views": last,
            "previous_7_days_views": 0,
            "percent_change": compute_percent_change(last, 0),
        }

    async def list_conversations(self, user_id: str) -> list[ConversationRecord]:
        return [
            replace(conversation, messages=conversation.messages[:1])
            for conversation in self.conversations.values()
            if user_id in {conversation.client.user_id, conversation.professional.user_id}
        ]

    async def get_conversation(self, conversation_id: str) -> ConversationRecord:
        try:
            return self.conversations[conversation_id]
        except KeyError as exc:
            raise RepositoryNotFoundError("conversation not found") from exc

    async def mark_conversation_read(self, *, conversation_id: str, reader_id: str) -> int:
        self.read_marks.append((conversation_id, reader_id))
        return 1

    async def list_message_board_threads(self, *, viewer_id: str, limit: int, offset: int) -> list[ThreadRecord]:
        ordered = sorted(self.threads, key=lambda thread: not thread.is_pinned)
        return [replace(thread, replies=()) for thread in ordered[offset : offset + limit]]

    async def get_message_board_thread(self, thread_id: str, *, viewer_id: str) -> ThreadRecord:
        for thread in self.threads:
            if thread.id == thread_id:
                return thread
        raise RepositoryNotFoundError("thread not found")

    async def list_saved_professionals(self, employer_id: str, *, limit: int, offset: int) -> list[SavedProfessionalRecord]:
        return [
            SavedProfessionalRecord(profile=self.profiles[candidate_id], saved_at=saved_at, note=note)
            for candidate_id, saved_at, note in self.saved.get(employer_id, [])[offset : offset + limit]
        ]


@pytest.fixture
def fake_repo() -> FakeVisibilityRepository:
    return FakeVisibilityRepository()


USER_ROLES: dict[str, str] = {
    OWNER_ID: "professional",
    OTHER_PRO_ID: "professional",
    PENDING_ID: "professional",
    EMPLOYER_ID: "employer",
    AGENCY_ID: "agency",
    ADMIN_ID: "admin",
}


def bearer(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}


@pytest.fixture
def client(fake_repo: FakeVisibilityRepository, monkeypatch: pytest.MonkeyPatch):
    from fastapi.testclient import TestClient

    import talent_registry.core.security as security
    from talent_registry.core.config import get_settings
    from talent_registry.main import app
    from talent_registry.services.repository import get_repository

    async def _fake_fetch(*, token: str, **_: Any) -> dict[str, Any]:
        # Tokens are user ids in tests; unknown ids come back without a role.
        return {"id": token, "app_metadata": {"role": USER_ROLES.get(token, "")}}

    os.environ["TR_SUPABASE_URL"] = "https://example.supabase.co"
    os.environ["TR_SUPABASE_ANON_KEY"] = "anon-key"
    get_settings.cache_clear()
    monkeypatch.setattr(security, "_fetch_supabase_user", _fake_fetch)
    app.dependency_overrides[get_repository] = lambda: fake_repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        os.environ.pop("TR_SUPABASE_URL", None)
        os.environ.pop("TR_SUPABASE_ANON_KEY", None)
        get_settings.cache_clear()
