from datetime import date, datetime

from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import SQLModel

from availability import Status


def _require_text(v, field_name: str):
    if v is None or not v.strip():
        raise ValueError(f"{field_name} is required")
    return v.strip()


def _check_count(v):
    if v is None or v == "":
        return v
    if not str(v).strip().isdigit():
        raise ValueError("Must be a whole number of workers")
    return str(v).strip()


class MukkadamCreate(BaseModel):
    name: str
    mobile: str
    village: str  # Kept verbatim, no case or whitespace folding
    crew_size: str
    max_crew_capacity: str | None = None
    has_smartphone: bool = False
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("name", "mobile")
    @classmethod
    def validate_required(cls, v, info):
        return _require_text(v, info.field_name.capitalize())

    @field_validator("village")
    @classmethod
    def validate_village(cls, v):
        if not v or not v.strip():
            raise ValueError("Village is required")
        return v

    @field_validator("crew_size", "max_crew_capacity", mode="before")
    @classmethod
    def validate_counts(cls, v):
        if isinstance(v, int):
            v = str(v)
        return _check_count(v)

    @model_validator(mode="after")
    def validate_window(self):
        if not self.crew_size:
            raise ValueError("Crew size is required")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Start date must be before end date")
        return self


class MukkadamUpdate(BaseModel):
    name: str | None = None
    mobile: str | None = None
    village: str | None = None
    crew_size: str | None = None
    max_crew_capacity: str | None = None
    has_smartphone: bool | None = None
    start_date: date | None = None
    end_date: date | None = None

    # Only runs for fields present in the body, so null here was sent explicitly
    @field_validator("name", "mobile", "village", "crew_size", "has_smartphone", mode="before")
    @classmethod
    def validate_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return v

    @field_validator("name", "mobile")
    @classmethod
    def validate_not_blank(cls, v, info):
        return _require_text(v, info.field_name.capitalize())

    @field_validator("village")
    @classmethod
    def validate_village(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Village is required")
        return v

    @field_validator("crew_size", "max_crew_capacity", mode="before")
    @classmethod
    def validate_counts(cls, v):
        if isinstance(v, int):
            v = str(v)
        return _check_count(v)

    @model_validator(mode="after")
    def validate_crew_size(self):
        if self.crew_size == "":
            raise ValueError("Crew size is required")
        return self


class MukkadamResponse(SQLModel):
    id: int
    name: str
    mobile: str
    village: str
    crew_size: str
    max_crew_capacity: str | None = None
    has_smartphone: bool
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime
    updated_at: datetime | None = None


class SlotCreate(BaseModel):
    # Dates are optional here so a missing date is reported as a 400 with a readable message
    date_from: date | None = None
    date_to: date | None = None
    status: Status = Status.AVAILABLE
    notes: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        # Accept legacy names like "Available" / "Leave" / "on-leave"
        return Status.parse(v)


class SlotSnapshot(BaseModel):
    date_from: date
    date_to: date
    status: Status = Status.AVAILABLE
    notes: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return Status.parse(v)


class SplitRequest(SlotCreate):
    original: SlotSnapshot | None = None  # Editor snapshot, checked against the stored slot


class SlotResponse(BaseModel):
    index: int
    date_from: date
    date_to: date
    status: Status
    label: str
    icon: str
    css_class: str
    notes: str | None = None


class TimelineRow(BaseModel):
    label: str
    icon: str
    date_from: str  # Display format, e.g. "01 Jun 2024"
    date_to: str
    notes: str | None = None


class AvailabilityResponse(BaseModel):
    mukkadam_id: int
    slots: list[SlotResponse]
    timeline: list[TimelineRow]


class CandidateRow(BaseModel):
    id: int
    name: str
    mobile: str
    village: str
    crew_size: str


class ChoiceRow(BaseModel):
    value: str
    count: int


class SearchResponse(BaseModel):
    step: str
    selected: CandidateRow | None = None
    choices: list[ChoiceRow] = []
    candidates: list[CandidateRow] = []


class DailyRosterResponse(BaseModel):
    day: date
    mukkadams: list[CandidateRow]
    total_crew: int
