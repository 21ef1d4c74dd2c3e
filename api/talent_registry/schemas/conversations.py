from datetime import datetime

from pydantic import Field

from talent_registry.schemas.profiles import CamelModel


class ParticipantOut(CamelModel):
    id: str
    first_name: str
    last_name: str
    display_name: str
    image: str | None = None
    role: str
    is_anonymous: bool = False
    custom_initials: str | None = None
    company_name: str | None = None
    title: str | None = None


class MessageOut(CamelModel):
    id: str
    content: str
    read: bool
    created_at: datetime
    sender: ParticipantOut


class ConversationOut(CamelModel):
    id: str
    status: str
    last_message_at: datetime | None = None
    created_at: datetime
    unread_count: int = 0
    client: ParticipantOut
    professional: ParticipantOut
    messages: list[MessageOut] = Field(default_factory=list)
