from datetime import UTC, date, datetime

from sqlmodel import Field, SQLModel, UniqueConstraint


class Mukkadam(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    mobile: str = Field(index=True)  # One or more numbers, comma separated
    village: str = Field(index=True)  # Stored exactly as entered
    crew_size: str
    max_crew_capacity: str | None = Field(default=None)
    has_smartphone: bool = Field(default=False)
    start_date: date | None = Field(default=None)  # Basic availability from registration
    end_date: date | None = Field(default=None)
    slots_initialised: bool = Field(default=False)  # Set once a slot list has been stored, even an empty one
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)


class AvailabilitySlot(SQLModel, table=True):
    __tablename__ = "availability_slot"
    __table_args__ = (UniqueConstraint("mukkadam_id", "position", name="uniq_slot_mukkadam_position"),)

    id: int | None = Field(default=None, primary_key=True)
    mukkadam_id: int = Field(foreign_key="mukkadam.id", index=True)
    position: int  # Display order within the mukkadam's list
    date_from: date
    date_to: date
    status: str = Field(default="available", index=True)
    notes: str | None = Field(default=None)
