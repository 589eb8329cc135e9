"""Availability slot editing for a selected mukkadam.

Every operation takes an ``EditorState`` and returns a new one. Failed
operations raise before anything is built, so the caller's state is never
partially changed.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class AvailabilityError(Exception):
    """Base class for rejected availability operations."""


class ValidationError(AvailabilityError, ValueError):
    """Missing dates, inverted ranges or an edit outside the original slot."""


class NotFoundError(AvailabilityError):
    """The index or id no longer refers to anything."""


class Status(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    LEAVE = "leave"

    @classmethod
    def parse(cls, value: "str | Status | None") -> "Status":
        """Normalise a stored or submitted status. Missing means available."""
        if isinstance(value, Status):
            return value
        if value is None or value == "":
            return cls.AVAILABLE
        if not isinstance(value, str):
            raise ValidationError(f"Status must be text, got {type(value).__name__}")
        key = value.strip().lower().replace("_", "-")
        legacy_map = {"on-leave": "leave", "off": "leave"}
        key = legacy_map.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(
                f"Status must be one of: {[s.value for s in cls]}"
            ) from None


@dataclass(frozen=True)
class StatusMeta:
    label: str
    icon: str
    css_class: str


def status_meta(status: Status) -> StatusMeta:
    if status is Status.AVAILABLE:
        return StatusMeta("Available", "✅", "bg-green-100 text-green-800 border-green-200")
    if status is Status.BUSY:
        return StatusMeta("Busy", "⛔", "bg-red-100 text-red-800 border-red-200")
    if status is Status.LEAVE:
        return StatusMeta("On Leave", "🌴", "bg-yellow-100 text-yellow-800 border-yellow-200")
    raise AssertionError(f"Unhandled status: {status!r}")


@dataclass(frozen=True)
class Slot:
    date_from: date
    date_to: date
    status: Status = Status.AVAILABLE
    notes: str | None = None

    def covers(self, day: date) -> bool:
        return self.date_from <= day <= self.date_to


@dataclass(frozen=True)
class Editing:
    index: int
    original: Slot


@dataclass(frozen=True)
class EditorState:
    selected: object | None = None
    slots: tuple[Slot, ...] = field(default_factory=tuple)
    editing: Editing | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing is not None


def _check_range(date_from: date | None, date_to: date | None, message: str) -> None:
    if not date_from or not date_to:
        raise ValidationError(message)
    if date_from > date_to:
        raise ValidationError("From date must be before To date")


def _slot_at(state: EditorState, index: int) -> Slot:
    if index < 0 or index >= len(state.slots):
        raise NotFoundError(f"No availability slot at position {index}")
    return state.slots[index]


def select_mukkadam(mukkadam, slots=()) -> EditorState:
    return EditorState(selected=mukkadam, slots=tuple(slots))


def clear_selection(state: EditorState) -> EditorState:
    return EditorState()


def add_slot(
    state: EditorState,
    date_from: date | None,
    date_to: date | None,
    status: Status | str | None = Status.AVAILABLE,
    notes: str | None = None,
) -> EditorState:
    """Append a new slot. Overlap with existing slots is allowed."""
    _check_range(date_from, date_to, "Please select both From and To dates")
    slot = Slot(date_from, date_to, Status.parse(status), notes or None)
    return replace(state, slots=state.slots + (slot,))


def delete_slot(state: EditorState, index: int, confirmed: bool = False) -> EditorState:
    """Remove one slot. Nothing happens until the user has confirmed."""
    _slot_at(state, index)
    if not confirmed:
        return state

    slots = state.slots[:index] + state.slots[index + 1:]
    editing = state.editing
    if editing is not None:
        if editing.index == index:
            editing = None
        elif editing.index > index:
            editing = replace(editing, index=editing.index - 1)
    return replace(state, slots=slots, editing=editing)


def start_editing(state: EditorState, index: int) -> EditorState:
    return replace(state, editing=Editing(index, _slot_at(state, index)))


def cancel_editing(state: EditorState) -> EditorState:
    return replace(state, editing=None)


def split_slot(
    original: Slot,
    new_from: date | None,
    new_to: date | None,
    status: Status | str | None,
    notes: str | None = None,
) -> list[Slot]:
    """Replace part of ``original`` with a new status.

    Returns one to three slots that cover exactly the original range, in
    date order: the untouched part before the edit, the edited block, and
    the untouched part after it.
    """
    _check_range(new_from, new_to, "Please pick both From and To dates.")
    if new_from < original.date_from or new_to > original.date_to:
        raise ValidationError(
            'New range must stay inside the original slot. '
            'Use "Add Availability" for brand new windows.'
        )

    pieces = []
    if new_from > original.date_from:
        pieces.append(replace(original, date_to=new_from - ONE_DAY))
    pieces.append(Slot(new_from, new_to, Status.parse(status), notes or None))
    if new_to < original.date_to:
        pieces.append(replace(original, date_from=new_to + ONE_DAY))
    return pieces


def save_edit(
    state: EditorState,
    new_from: date | None,
    new_to: date | None,
    status: Status | str | None,
    notes: str | None = None,
) -> EditorState:
    """Apply the open edit as a split of the snapshotted slot."""
    if state.editing is None:
        raise NotFoundError("No availability slot is open for editing")
    index = state.editing.index
    _slot_at(state, index)

    pieces = split_slot(state.editing.original, new_from, new_to, status, notes)
    slots = state.slots[:index] + tuple(pieces) + state.slots[index + 1:]
    logger.info(f"Split slot {index} into {len(pieces)} piece(s)")
    return replace(state, slots=slots, editing=None)
