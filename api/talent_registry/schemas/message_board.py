from datetime import datetime

from pydantic import Field

from talent_registry.schemas.profiles import CamelModel


class ThreadOut(CamelModel):
    id: str
    title: str
    author_display_name: str
    created_at: datetime
    last_reply_at: datetime | None = None
    is_pinned: bool = False
    is_locked: bool = False
    reply_count: int = 0
    participant_count: int = 0
    like_count: int = 0
    is_liked: bool = False
    is_author: bool = False


class ReplyOut(CamelModel):
    id: str
    content: str
    author_display_name: str
    created_at: datetime
    updated_at: datetime | None = None
    is_author: bool = False
    like_count: int = 0
    is_liked: bool = False


class ThreadDetailOut(ThreadOut):
    content: str | None = None
    replies: list[ReplyOut] = Field(default_factory=list)
