"""Daily crew roster built from availability slots."""
from datetime import date
from typing import Dict, List

from availability import Slot, Status


def format_display_date(value: date | None) -> str:
    """Render a date for timelines, e.g. '01 Jun 2024'."""
    if not value:
        return "--"
    return value.strftime("%d %b %Y")


def crew_count(crew_size: str) -> int:
    try:
        return int(str(crew_size).strip())
    except ValueError:
        return 0


def is_available_on(slots: List[Slot], day: date) -> bool:
    """
    True when some available slot covers the day and no busy or leave slot does.

    Slots may overlap, so a busy or leave slot always wins over an
    available one for the same day.
    """
    covering = [s for s in slots if s.covers(day)]
    if any(s.status is not Status.AVAILABLE for s in covering):
        return False
    return any(s.status is Status.AVAILABLE for s in covering)


def available_on(day: date, roster: list, slots_by_id: Dict[int, List[Slot]]) -> dict:
    """
    Build the roster of mukkadams free to work on ``day``.

    Returns dict with the matching mukkadams (in roster order) and the
    total number of workers they bring.
    """
    available = [m for m in roster if is_available_on(slots_by_id.get(m.id, []), day)]
    return {
        "day": day,
        "mukkadams": available,
        "total_crew": sum(crew_count(m.crew_size) for m in available),
    }
