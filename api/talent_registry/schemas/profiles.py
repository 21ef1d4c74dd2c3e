from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RedactedUserOut(CamelModel):
    id: str
    first_name: str
    last_name: str
    display_name: str
    image: str | None = None
    role: str
    created_at: datetime
    email: str
    phone_number: str | None = None
    is_anonymous: bool
    preferred_anonymity: bool
    custom_initials: str | None = None
    dont_contact_me: bool = False


class RedactedProfileOut(CamelModel):
    id: str
    bio: str | None = None
    title: str | None = None
    preferred_role: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience: list[dict[str, Any]] = Field(default_factory=list)
    certifications: list[dict[str, Any]] = Field(default_factory=list)
    location: str | None = None
    availability: datetime | None = None
    resume_url: str | None = None
    profile_views: int = 0
    work_locations: list[str] = Field(default_factory=list)
    open_to_relocation: bool = False
    years_of_experience: int | None = None
    what_im_seeking: str | None = None
    why_i_enjoy_this_work: str | None = None
    what_sets_me_apart: str | None = None
    ideal_environment: str | None = None
    seeking_opportunities: list[str] = Field(default_factory=list)
    pay_range_min: float | None = None
    pay_range_max: float | None = None
    pay_type: str = "Salary"
    additional_photos: list[str] = Field(default_factory=list)
    media_urls: list[str] = Field(default_factory=list)
    open_to_work: bool = False
    employment_type: str | None = None
    user: RedactedUserOut


class ProfileViewStatsOut(CamelModel):
    total_views: int
    last_7_days_views: int = Field(alias="last7DaysViews")
    previous_7_days_views: int = Field(alias="previous7DaysViews")
    percent_change: float
