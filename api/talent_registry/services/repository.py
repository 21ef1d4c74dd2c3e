from __future__ import annotations

import json
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

from talent_registry.core.config import get_settings


class RepositoryError(Exception):
    """Base repository error."""


class RepositoryUnavailableError(RepositoryError):
    """Raised when the database is unavailable or not configured."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when the requested entity does not exist."""


PROFILE_STATUS_APPROVED = "APPROVED"


@dataclass(slots=True, frozen=True)
class TargetProfile:
    """Candidate profile joined with its owning user.

    Only the columns the visibility policy and its surfaces read are carried.
    """

    user_id: str
    profile_id: str
    slug: str | None
    first_name: str | None
    last_name: str | None
    email: str | None
    phone_number: str | None
    image: str | None
    role: str
    created_at: datetime
    custom_initials: str | None
    is_anonymous: bool
    dont_contact_me: bool
    status: str
    resume_url: str | None
    additional_photos: tuple[str, ...]
    profile_views: int
    bio: str | None = None
    title: str | None = None
    skills: tuple[str, ...] = ()
    experience: tuple[dict[str, Any], ...] = ()
    certifications: tuple[dict[str, Any], ...] = ()
    location: str | None = None
    availability: datetime | None = None
    work_locations: tuple[str, ...] = ()
    open_to_relocation: bool = False
    years_of_experience: int | None = None
    what_im_seeking: str | None = None
    why_i_enjoy_this_work: str | None = None
    what_sets_me_apart: str | None = None
    ideal_environment: str | None = None
    seeking_opportunities: tuple[str, ...] = ()
    pay_range_min: float | None = None
    pay_range_max: float | None = None
    pay_type: str = "Salary"
    media_urls: tuple[str, ...] = ()
    open_to_work: bool = False
    employment_type: str | None = None

    @property
    def is_approved(self) -> bool:
        return self.status == PROFILE_STATUS_APPROVED


@dataclass(slots=True, frozen=True)
class ParticipantRecord:
    user_id: str
    first_name: str | None
    last_name: str | None
    image: str | None
    role: str
    custom_initials: str | None = None
    is_anonymous: bool = False
    company_name: str | None = None
    title: str | None = None


@dataclass(slots=True, frozen=True)
class MessageRecord:
    id: str
    sender: ParticipantRecord
    content: str
    read: bool
    created_at: datetime


@dataclass(slots=True, frozen=True)
class ConversationRecord:
    id: str
    client: ParticipantRecord
    professional: ParticipantRecord
    status: str
    last_message_at: datetime | None
    created_at: datetime
    unread_count: int = 0
    messages: tuple[MessageRecord, ...] = ()


@dataclass(slots=True, frozen=True)
class ThreadRecord:
    id: str
    title: str
    author: ParticipantRecord
    created_at: datetime
    last_reply_at: datetime | None
    is_pinned: bool
    is_locked: bool
    reply_count: int
    participant_count: int
    like_count: int
    is_liked: bool
    content: str | None = None
    replies: tuple[ReplyRecord, ...] = ()


@dataclass(slots=True, frozen=True)
class ReplyRecord:
    id: str
    author: ParticipantRecord
    content: str
    created_at: datetime
    updated_at: datetime | None
    like_count: int
    is_liked: bool


@dataclass(slots=True, frozen=True)
class SavedProfessionalRecord:
    profile: TargetProfile
    saved_at: datetime
    note: str | None = None
    job_id: str | None = None
    job_title: str | None = None


_PROFILE_SELECT = """
    select
      u.id::text as user_id,
      cp.id::text as profile_id,
      u.profile_slug as slug,
      u.first_name,
      u.last_name,
      u.email,
      u.phone_number,
      u.image,
      u.role::text as role,
      u.created_at,
      u.custom_initials,
      u.is_anonymous,
      u.dont_contact_me,
      cp.status::text as status,
      cp.resume_url,
      cp.additional_photos,
      cp.profile_views,
      cp.bio,
      cp.preferred_role as title,
      cp.skills,
      cp.experience,
      cp.certifications,
      cp.location,
      cp.availability,
      cp.work_locations,
      cp.open_to_relocation,
      cp.years_of_experience,
      cp.what_im_seeking,
      cp.why_i_enjoy_this_work,
      cp.what_sets_me_apart,
      cp.ideal_environment,
      cp.seeking_opportunities,
      cp.pay_range_min,
      cp.pay_range_max,
      cp.pay_type,
      cp.media_urls,
      cp.open_to_work,
      cp.employment_type
    from users u
    join candidate_profiles cp on cp.user_id = u.id
"""

_PARTICIPANT_COLUMNS = """
      {alias}.id::text as {prefix}_id,
      {alias}.first_name as {prefix}_first_name,
      {alias}.last_name as {prefix}_last_name,
      {alias}.image as {prefix}_image,
      {alias}.role::text as {prefix}_role,
      {alias}.custom_initials as {prefix}_custom_initials,
      {alias}.is_anonymous as {prefix}_is_anonymous
"""


# $1 is the viewer id used for is_liked.
_THREAD_SELECT = f"""
    select
      t.id::text as id,
      t.title,
      t.content,
      t.created_at,
      t.last_reply_at,
      t.is_pinned,
      t.is_locked,
      {_PARTICIPANT_COLUMNS.format(alias="au", prefix="author")},
      (select count(*) from message_board_replies r where r.thread_id = t.id) as reply_count,
      (
        select count(distinct participant_id)
        from (
          select t.author_id as participant_id
          union all
          select r.author_id from message_board_replies r where r.thread_id = t.id
        ) participants
      ) as participant_count,
      (select count(*) from message_board_likes l where l.thread_id = t.id) as like_count,
      exists (
        select 1 from message_board_likes l
        where l.thread_id = t.id and l.user_id = $1::uuid
      ) as is_liked
    from message_board_threads t
    join users au on au.id = t.author_id
"""


class PostgresRepository:
    def __init__(
        self,
        database_url: str | None,
        min_pool_size: int,
        max_pool_size: int,
    ) -> None:
        self.database_url = database_url
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def ping(self) -> None:
        pool = await self._get_pool()
        try:
            await pool.fetchval("select 1")
        except (OSError, asyncpg.PostgresError) as exc:
            raise RepositoryUnavailableError("database unavailable") from exc

    async def get_profile_by_slug(self, slug: str) -> TargetProfile:
        pool = await self._get_pool()
        row = await pool.fetchrow(f"{_PROFILE_SELECT} where u.profile_slug = $1 limit 1", slug)
        if not row:
            raise RepositoryNotFoundError("profile not found")
        return self._profile_row_to_record(row)

    async def get_profile_by_user_id(self, user_id: str) -> TargetProfile:
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(f"{_PROFILE_SELECT} where u.id = $1::uuid", user_id)
        except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
            raise RepositoryNotFoundError("profile not found") from exc
        if not row:
            raise RepositoryNotFoundError("profile not found")
        return self._profile_row_to_record(row)

    async def list_candidate_profiles(self, *, limit: int, offset: int, q: str | None) -> list[TargetProfile]:
        pool = await self._get_pool()
        conditions = ["cp.status = $1"]
        params: list[Any] = [PROFILE_STATUS_APPROVED]

        normalized_q = self._coerce_text(q)
        if normalized_q:
            params.append(f"%{normalized_q}%")
            token = f"${len(params)}"
            conditions.append(
                f"(cp.preferred_role ilike {token} or coalesce(cp.bio, '') ilike {token} "
                f"or coalesce(cp.location, '') ilike {token} "
                f"or exists (select 1 from unnest(cp.skills) as profile_skill(skill) where profile_skill.skill ilike {token}))"
            )

        params.extend([limit, offset])
        rows = await pool.fetch(
            f"""
            {_PROFILE_SELECT}
            where {" and ".join(conditions)}
            order by cp.updated_at desc, cp.id asc
            limit ${len(params) - 1}
            offset ${len(params)}
            """,
            *params,
        )
        return [self._profile_row_to_record(row) for row in rows]

    async def list_saved_professionals(
        self,
        employer_id: str,
        *,
        limit: int,
        offset: int,
    ) -> list[SavedProfessionalRecord]:
        pool = await self._get_pool()
        rows = await pool.fetch(
            f"""
            select
              sub.*,
              sc.created_at as saved_at,
              sc.note as saved_note,
              j.id::text as saved_job_id,
              j.title as saved_job_title
            from saved_candidates sc
            join lateral (
              {_PROFILE_SELECT}
              where u.id = sc.candidate_id
            ) sub on true
            left join jobs j on j.id = sc.job_id
            where sc.employer_id = $1::uuid
            order by sc.created_at desc, sub.user_id asc
            limit $2
            offset $3
            """,
            employer_id,
            limit,
            offset,
        )
        return [
            SavedProfessionalRecord(
                profile=self._profile_row_to_record(row),
                saved_at=row["saved_at"],
                note=self._coerce_text(row["saved_note"]),
                job_id=row["saved_job_id"],
                job_title=self._coerce_text(row["saved_job_title"]),
            )
            for row in rows
        ]

    async def has_network_access(self, employer_id: str) -> bool:
        pool = await self._get_pool()
        value = await pool.fetchval(
            """
            select coalesce(ep.network_access_end_date >= now(), false)
            from employer_profiles ep
            where ep.user_id = $1::uuid
            """,
            employer_id,
        )
        return bool(value)

    async def applied_candidate_ids(self, employer_id: str, candidate_ids: list[str]) -> set[str]:
        if not candidate_ids:
            return set()
        pool = await self._get_pool()
        rows = await pool.fetch(
            """
            select distinct ja.candidate_id::text as candidate_id
            from job_applications ja
            join jobs j on j.id = ja.job_id
            where j.employer_id = $1::uuid
              and ja.candidate_id = any($2::uuid[])
            """,
            employer_id,
            candidate_ids,
        )
        return {row["candidate_id"] for row in rows}

    async def record_profile_view(
        self,
        *,
        target_user_id: str,
        viewer_id: str | None,
        viewer_key: str,
        window_hours: int,
    ) -> bool:
        """Count one view unless the same viewer was counted inside the window.

        The window check, counter increment and event insert share one
        transaction, serialised per (target, viewer) by an advisory lock.
        """
        pool = await self._get_pool()

        async with pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    "select pg_advisory_xact_lock(hashtextextended($1, 0))",
                    f"profile_view:{target_user_id}:{viewer_key}",
                )
                seen = await conn.fetchval(
                    """
                    select 1
                    from profile_view_events
                    where target_user_id = $1::uuid
                      and viewer_key = $2
                      and viewed_at > now() - make_interval(hours => $3)
                    limit 1
                    """,
                    target_user_id,
                    viewer_key,
                    window_hours,
                )
                if seen:
                    return False

                updated = await conn.fetchval(
                    """
                    update candidate_profiles
                    set profile_views = profile_views + 1
                    where user_id = $1::uuid
                    returning profile_views
                    """,
                    target_user_id,
                )
                if updated is None:
                    raise RepositoryNotFoundError("profile not found")

                await conn.execute(
                    """
                    insert into profile_view_events (target_user_id, viewer_id, viewer_key)
                    values ($1::uuid, $2::uuid, $3)
                    """,
                    target_user_id,
                    viewer_id,
                    viewer_key,
                )
                return True

    async def get_profile_view_stats(self, user_id: str, *, now: datetime | None = None) -> dict[str, Any]:
        pool = await self._get_pool()
        current = now or datetime.now(timezone.utc)
        last_start = current - timedelta(days=7)
        previous_start = last_start - timedelta(days=7)

        row = await pool.fetchrow(
            """
            select
              cp.profile_views as total_views,
              (
                select count(*)
                from profile_view_events e
                where e.target_user_id = cp.user_id
                  and e.viewed_at >= $2
                  and e.viewed_at < $3
              ) as last_7_days_views,
              (
                select count(*)
                from profile_view_events e
                where e.target_user_id = cp.user_id
                  and e.viewed_at >= $4
                  and e.viewed_at < $2
              ) as previous_7_days_views
            from candidate_profiles cp
            where cp.user_id = $1::uuid
            """,
            user_id,
            last_start,
            current,
            previous_start,
        )
        if not row:
            raise RepositoryNotFoundError("profile not found")

        last_views = int(row["last_7_days_views"] or 0)
        previous_views = int(row["previous_7_days_views"] or 0)
        return {
            "total_views": int(row["total_views"] or 0),
            "last_7_days_views": last_views,
            "previous_7_days_views": previous_views,
            "percent_change": compute_percent_change(last_views, previous_views),
        }

    async def list_conversations(self, user_id: str) -> list[ConversationRecord]:
        pool = await self._get_pool()
        rows = await pool.fetch(
            f"""
            select
              c.id::text as id,
              c.status::text as status,
              c.last_message_at,
              c.created_at,
              {_PARTICIPANT_COLUMNS.format(alias="cu", prefix="client")},
              ep.company_name as client_company_name,
              {_PARTICIPANT_COLUMNS.format(alias="pu", prefix="professional")},
              cp.preferred_role as professional_title,
              (
                select count(*)
                from messages m
                where m.conversation_id = c.id
                  and m.sender_id <> $1::uuid
                  and m.read = false
              ) as unread_count
            from conversations c
            join users cu on cu.id = c.client_id
            join users pu on pu.id = c.professional_id
            left join employer_profiles ep on ep.user_id = cu.id
            left join candidate_profiles cp on cp.user_id = pu.id
            where c.client_id = $1::uuid or c.professional_id = $1::uuid
            order by c.last_message_at desc nulls last, c.id asc
            """,
            user_id,
        )
        conversations = [self._conversation_row_to_record(row) for row in rows]
        if not conversations:
            return []

        latest = await pool.fetch(
            f"""
            select distinct on (m.conversation_id)
              m.conversation_id::text as conversation_id,
              m.id::text as id,
              m.content,
              m.read,
              m.created_at,
              {_PARTICIPANT_COLUMNS.format(alias="su", prefix="sender")}
            from messages m
            join users su on su.id = m.sender_id
            where m.conversation_id = any($1::uuid[])
            order by m.conversation_id, m.created_at desc
            """,
            [conversation.id for conversation in conversations],
        )
        latest_by_conversation = {row["conversation_id"]: self._message_row_to_record(row) for row in latest}
        return [
            replace(conversation, messages=(latest_by_conversation[conversation.id],))
            if conversation.id in latest_by_conversation
            else conversation
            for conversation in conversations
        ]

    async def get_conversation(self, conversation_id: str) -> ConversationRecord:
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(
                f"""
                select
                  c.id::text as id,
                  c.status::text as status,
                  c.last_message_at,
                  c.created_at,
                  {_PARTICIPANT_COLUMNS.format(alias="cu", prefix="client")},
                  ep.company_name as client_company_name,
                  {_PARTICIPANT_COLUMNS.format(alias="pu", prefix="professional")},
                  cp.preferred_role as professional_title,
                  0 as unread_count
                from conversations c
                join users cu on cu.id = c.client_id
                join users pu on pu.id = c.professional_id
                left join employer_profiles ep on ep.user_id = cu.id
                left join candidate_profiles cp on cp.user_id = pu.id
                where c.id = $1::uuid
                """,
                conversation_id,
            )
        except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
            raise RepositoryNotFoundError("conversation not found") from exc
        if not row:
            raise RepositoryNotFoundError("conversation not found")

        message_rows = await pool.fetch(
            f"""
            select
              m.id::text as id,
              m.content,
              m.read,
              m.created_at,
              {_PARTICIPANT_COLUMNS.format(alias="su", prefix="sender")}
            from messages m
            join users su on su.id = m.sender_id
            where m.conversation_id = $1::uuid
            order by m.created_at desc
            """,
            conversation_id,
        )
        return replace(
            self._conversation_row_to_record(row),
            messages=tuple(self._message_row_to_record(message) for message in message_rows),
        )

    async def mark_conversation_read(self, *, conversation_id: str, reader_id: str) -> int:
        pool = await self._get_pool()
        result = await pool.execute(
            """
            update messages
            set read = true, read_at = now()
            where conversation_id = $1::uuid
              and sender_id <> $2::uuid
              and read = false
            """,
            conversation_id,
            reader_id,
        )
        return self._coerce_int(result.rsplit(" ", maxsplit=1)[-1]) or 0

    async def list_message_board_threads(self, *, viewer_id: str, limit: int, offset: int) -> list[ThreadRecord]:
        pool = await self._get_pool()
        rows = await pool.fetch(
            f"""
            {_THREAD_SELECT}
            order by t.is_pinned desc, coalesce(t.last_reply_at, t.created_at) desc, t.id asc
            limit $2
            offset $3
            """,
            viewer_id,
            limit,
            offset,
        )
        return [self._thread_row_to_record(row) for row in rows]

    async def get_message_board_thread(self, thread_id: str, *, viewer_id: str) -> ThreadRecord:
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(f"{_THREAD_SELECT} where t.id = $2::uuid", viewer_id, thread_id)
        except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
            raise RepositoryNotFoundError("thread not found") from exc
        if not row:
            raise RepositoryNotFoundError("thread not found")

        reply_rows = await pool.fetch(
            f"""
            select
              r.id::text as id,
              r.content,
              r.created_at,
              r.updated_at,
              {_PARTICIPANT_COLUMNS.format(alias="au", prefix="author")},
              (select count(*) from message_board_reply_likes l where l.reply_id = r.id) as like_count,
              exists (
                select 1 from message_board_reply_likes l
                where l.reply_id = r.id and l.user_id = $2::uuid
              ) as is_liked
            from message_board_replies r
            join users au on au.id = r.author_id
            where r.thread_id = $1::uuid
            order by r.created_at asc, r.id asc
            """,
            thread_id,
            viewer_id,
        )
        replies = tuple(
            ReplyRecord(
                id=reply["id"],
                author=self._participant_from_row(reply, "author"),
                content=reply["content"] or "",
                created_at=reply["created_at"],
                updated_at=reply["updated_at"],
                like_count=int(reply["like_count"] or 0),
                is_liked=bool(reply["is_liked"]),
            )
            for reply in reply_rows
        )
        return replace(self._thread_row_to_record(row), replies=replies)

    async def _get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise RepositoryUnavailableError("TR_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=15,
            )
            return self._pool
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RepositoryUnavailableError("database unavailable") from exc

    def _profile_row_to_record(self, row: asyncpg.Record) -> TargetProfile:
        return TargetProfile(
            user_id=row["user_id"],
            profile_id=row["profile_id"],
            slug=row["slug"],
            first_name=self._coerce_text(row["first_name"]),
            last_name=self._coerce_text(row["last_name"]),
            email=self._coerce_text(row["email"]),
            phone_number=self._coerce_text(row["phone_number"]),
            image=self._coerce_text(row["image"]),
            role=str(row["role"]),
            created_at=row["created_at"],
            custom_initials=self._coerce_text(row["custom_initials"]),
            is_anonymous=self._coerce_bool(row["is_anonymous"]),
            dont_contact_me=self._coerce_bool(row["dont_contact_me"]),
            status=str(row["status"]),
            resume_url=self._coerce_text(row["resume_url"]),
            additional_photos=tuple(self._coerce_text_list(row["additional_photos"])),
            profile_views=self._coerce_int(row["profile_views"]) or 0,
            bio=row["bio"],
            title=row["title"],
            skills=tuple(self._coerce_text_list(row["skills"])),
            experience=tuple(self._coerce_json_list(row["experience"])),
            certifications=tuple(self._coerce_json_list(row["certifications"])),
            location=row["location"],
            availability=row["availability"],
            work_locations=tuple(self._coerce_text_list(row["work_locations"])),
            open_to_relocation=self._coerce_bool(row["open_to_relocation"]),
            years_of_experience=self._coerce_int(row["years_of_experience"]),
            what_im_seeking=row["what_im_seeking"],
            why_i_enjoy_this_work=row["why_i_enjoy_this_work"],
            what_sets_me_apart=row["what_sets_me_apart"],
            ideal_environment=row["ideal_environment"],
            seeking_opportunities=tuple(self._coerce_text_list(row["seeking_opportunities"])),
            pay_range_min=self._coerce_float(row["pay_range_min"]),
            pay_range_max=self._coerce_float(row["pay_range_max"]),
            pay_type=self._coerce_text(row["pay_type"]) or "Salary",
            media_urls=tuple(self._coerce_text_list(row["media_urls"])),
            open_to_work=self._coerce_bool(row["open_to_work"]),
            employment_type=self._coerce_text(row["employment_type"]),
        )

    def _conversation_row_to_record(self, row: asyncpg.Record) -> ConversationRecord:
        return ConversationRecord(
            id=row["id"],
            client=replace(
                self._participant_from_row(row, "client"),
                company_name=self._coerce_text(row["client_company_name"]),
            ),
            professional=replace(
                self._participant_from_row(row, "professional"),
                title=self._coerce_text(row["professional_title"]),
            ),
            status=str(row["status"]),
            last_message_at=row["last_message_at"],
            created_at=row["created_at"],
            unread_count=self._coerce_int(row["unread_count"]) or 0,
        )

    def _message_row_to_record(self, row: asyncpg.Record) -> MessageRecord:
        return MessageRecord(
            id=row["id"],
            sender=self._participant_from_row(row, "sender"),
            content=row["content"] or "",
            read=self._coerce_bool(row["read"]),
            created_at=row["created_at"],
        )

    def _thread_row_to_record(self, row: asyncpg.Record) -> ThreadRecord:
        return ThreadRecord(
            id=row["id"],
            title=row["title"],
            author=self._participant_from_row(row, "author"),
            created_at=row["created_at"],
            last_reply_at=row["last_reply_at"],
            is_pinned=bool(row["is_pinned"]),
            is_locked=bool(row["is_locked"]),
            reply_count=int(row["reply_count"] or 0),
            participant_count=int(row["participant_count"] or 0),
            like_count=int(row["like_count"] or 0),
            is_liked=bool(row["is_liked"]),
            content=self._coerce_text(row["content"]),
        )

    def _participant_from_row(self, row: asyncpg.Record, prefix: str) -> ParticipantRecord:
        return ParticipantRecord(
            user_id=row[f"{prefix}_id"],
            first_name=self._coerce_text(row[f"{prefix}_first_name"]),
            last_name=self._coerce_text(row[f"{prefix}_last_name"]),
            image=self._coerce_text(row[f"{prefix}_image"]),
            role=str(row[f"{prefix}_role"]),
            custom_initials=self._coerce_text(row[f"{prefix}_custom_initials"]),
            is_anonymous=self._coerce_bool(row[f"{prefix}_is_anonymous"]),
        )

    @staticmethod
    def _coerce_text(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return str(value)

    @staticmethod
    def _coerce_text_list(value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        items: list[str] = []
        for item in value:
            if not isinstance(item, str):
                continue
            stripped = item.strip()
            if stripped:
                items.append(stripped)
        return items

    @staticmethod
    def _coerce_float(value: Any) -> float | None:
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _coerce_int(value: Any) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in {"1", "true", "yes", "on"}:
                return True
            if normalized in {"0", "false", "no", "off"}:
                return False
        return False

    @staticmethod
    def _coerce_json_list(value: Any) -> list[dict[str, Any]]:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return []
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


def compute_percent_change(current: int, previous: int) -> float:
    if previous > 0:
        return ((current - previous) / previous) * 100.0
    if current > 0:
        return 100.0
    return 0.0


@lru_cache
def get_repository() -> PostgresRepository:
    settings = get_settings()
    return PostgresRepository(
        database_url=settings.database_url,
        min_pool_size=settings.database_pool_min_size,
        max_pool_size=settings.database_pool_max_size,
    )
