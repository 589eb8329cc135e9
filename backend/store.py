"""Read and write a mukkadam's slot list as a whole."""
import logging
from typing import Dict, List

from sqlmodel import Session, delete, select

from availability import Slot, Status
from models import AvailabilitySlot, Mukkadam

logger = logging.getLogger(__name__)


def row_to_slot(row: AvailabilitySlot) -> Slot:
    # Rows written before statuses were enforced may hold legacy or empty values
    try:
        status = Status.parse(row.status)
    except ValueError:
        logger.warning(f"Unknown status '{row.status}' on slot {row.id}, treating as available")
        status = Status.AVAILABLE
    return Slot(row.date_from, row.date_to, status, row.notes)


def load_slots(session: Session, mukkadam: Mukkadam) -> List[Slot]:
    """Load slots in display order.

    A mukkadam with no slots but a registration window gets one available
    slot covering that window, until a list has been stored for it. After
    that the stored list wins, even when it is empty.
    """
    rows = session.exec(
        select(AvailabilitySlot)
        .where(AvailabilitySlot.mukkadam_id == mukkadam.id)
        .order_by(AvailabilitySlot.position)
    ).all()
    slots = [row_to_slot(row) for row in rows]

    if not slots and not mukkadam.slots_initialised and mukkadam.start_date and mukkadam.end_date:
        slots = [Slot(mukkadam.start_date, mukkadam.end_date, Status.AVAILABLE)]
    return slots


def save_slots(session: Session, mukkadam_id: int, slots) -> None:
    """Replace the stored list. Caller commits."""
    session.exec(delete(AvailabilitySlot).where(AvailabilitySlot.mukkadam_id == mukkadam_id))
    for position, slot in enumerate(slots):
        session.add(
            AvailabilitySlot(
                mukkadam_id=mukkadam_id,
                position=position,
                date_from=slot.date_from,
                date_to=slot.date_to,
                status=slot.status.value,
                notes=slot.notes,
            )
        )
    mukkadam = session.get(Mukkadam, mukkadam_id)
    if mukkadam is not None and not mukkadam.slots_initialised:
        mukkadam.slots_initialised = True
        session.add(mukkadam)
    logger.info(f"Stored {len(slots)} slot(s) for mukkadam {mukkadam_id}")


def load_all_slots(session: Session, roster: List[Mukkadam]) -> Dict[int, List[Slot]]:
    return {m.id: load_slots(session, m) for m in roster}
