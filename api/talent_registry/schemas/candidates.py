from datetime import datetime

from pydantic import Field

from talent_registry.schemas.profiles import CamelModel


class CandidateCardUserOut(CamelModel):
    id: str
    first_name: str
    last_name: str
    display_name: str
    image: str | None = None
    is_anonymous: bool
    custom_initials: str | None = None


class CandidateCardOut(CamelModel):
    id: str
    title: str | None = None
    location: str | None = None
    skills: list[str] = Field(default_factory=list)
    years_of_experience: int | None = None
    work_locations: list[str] = Field(default_factory=list)
    open_to_relocation: bool = False
    open_to_work: bool = False
    pay_range_min: float | None = None
    pay_range_max: float | None = None
    pay_type: str = "Salary"
    user: CandidateCardUserOut


class SavedProfessionalOut(CandidateCardOut):
    saved_at: datetime
    note: str | None = None
    job_id: str | None = None
    job_title: str | None = None
