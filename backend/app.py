import logging
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel import Session, select

import availability
import lookup
from availability import AvailabilityError, NotFoundError, Slot, status_meta
from db import CORS_ORIGINS, create_db_and_tables, engine, get_session
from models import Mukkadam
from report import available_on, format_display_date
from schemas import (
    AvailabilityResponse,
    CandidateRow,
    ChoiceRow,
    DailyRosterResponse,
    MukkadamCreate,
    MukkadamResponse,
    MukkadamUpdate,
    SearchResponse,
    SlotCreate,
    SlotResponse,
    SplitRequest,
    TimelineRow,
)
from store import load_all_slots, load_slots, save_slots

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TIMELINE_LENGTH = 4


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    create_db_and_tables()
    logger.info("Database initialized")
    yield


# Create FastAPI app
app = FastAPI(title="Mukkadam Availability API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def reject(e: AvailabilityError) -> HTTPException:
    """Turn a rejected availability operation into an HTTP error."""
    status_code = 404 if isinstance(e, NotFoundError) else 400
    logger.warning(f"Rejected: {e}")
    return HTTPException(status_code=status_code, detail=str(e))


def get_mukkadam_or_404(session: Session, mukkadam_id: int) -> Mukkadam:
    mukkadam = session.get(Mukkadam, mukkadam_id)
    if not mukkadam:
        raise HTTPException(status_code=404, detail="Mukkadam not found")
    return mukkadam


def slot_response(index: int, slot: Slot) -> SlotResponse:
    meta = status_meta(slot.status)
    return SlotResponse(
        index=index,
        date_from=slot.date_from,
        date_to=slot.date_to,
        status=slot.status,
        label=meta.label,
        icon=meta.icon,
        css_class=meta.css_class,
        notes=slot.notes,
    )


def availability_response(mukkadam_id: int, slots) -> AvailabilityResponse:
    timeline = []
    for slot in list(slots)[:TIMELINE_LENGTH]:
        meta = status_meta(slot.status)
        timeline.append(
            TimelineRow(
                label=meta.label,
                icon=meta.icon,
                date_from=format_display_date(slot.date_from),
                date_to=format_display_date(slot.date_to),
                notes=slot.notes,
            )
        )
    return AvailabilityResponse(
        mukkadam_id=mukkadam_id,
        slots=[slot_response(i, s) for i, s in enumerate(slots)],
        timeline=timeline,
    )


def candidate_row(m: Mukkadam) -> CandidateRow:
    return CandidateRow(id=m.id, name=m.name, mobile=m.mobile, village=m.village, crew_size=m.crew_size)


def commit_slots(session: Session, mukkadam_id: int, slots) -> None:
    try:
        save_slots(session, mukkadam_id, slots)
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Error saving availability for mukkadam {mukkadam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not save changes, please try again") from e


@app.post("/mukkadams", response_model=MukkadamResponse, status_code=201)
def register_mukkadam(request: MukkadamCreate, session: Session = Depends(get_session)):
    """Register a new mukkadam."""
    logger.info(f"Register request for mukkadam: {request.name} ({request.village})")

    try:
        mukkadam = Mukkadam(**request.model_dump())
        session.add(mukkadam)
        session.commit()
        session.refresh(mukkadam)
        logger.info(f"Registered mukkadam {mukkadam.id}")
        return mukkadam
    except Exception as e:
        session.rollback()
        logger.error(f"Error registering mukkadam: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not save changes, please try again") from e


@app.get("/mukkadams", response_model=list[MukkadamResponse])
def list_mukkadams(session: Session = Depends(get_session)):
    """List the whole roster ordered by name."""
    return session.exec(select(Mukkadam).order_by(Mukkadam.name, Mukkadam.id)).all()


@app.get("/mukkadams/search", response_model=SearchResponse)
def search_mukkadams(
    q: str = Query("", description="Name, or digits of a mobile number"),
    village: str = Query(None, description="Village picked at the village step"),
    crew_size: str = Query(None, description="Crew size picked at the crew size step"),
    select_id: int = Query(None, description="Mukkadam picked from the candidate list"),
    session: Session = Depends(get_session),
):
    """Resolve a query to one mukkadam, replaying any choices already made."""
    roster = session.exec(select(Mukkadam).order_by(Mukkadam.id)).all()

    try:
        result = lookup.search(q, roster)
        if village is not None:
            result = lookup.choose_village(result, village)
        if crew_size is not None:
            result = lookup.choose_crew_size(result, crew_size)
        if select_id is not None:
            result = lookup.select(result, select_id)
    except AvailabilityError as e:
        raise reject(e) from e

    return SearchResponse(
        step=result.step.value,
        selected=candidate_row(result.selected) if result.selected else None,
        choices=[ChoiceRow(value=str(c.value), count=c.count) for c in result.choices],
        candidates=[candidate_row(m) for m in result.candidates],
    )


@app.get("/mukkadams/{mukkadam_id}", response_model=MukkadamResponse)
def get_mukkadam(mukkadam_id: int, session: Session = Depends(get_session)):
    return get_mukkadam_or_404(session, mukkadam_id)


@app.put("/mukkadams/{mukkadam_id}", response_model=MukkadamResponse)
def update_mukkadam(
    mukkadam_id: int, request: MukkadamUpdate, session: Session = Depends(get_session)
):
    """Edit registration fields. Fields left out are not touched."""
    logger.info(f"Update request for mukkadam {mukkadam_id}")
    mukkadam = get_mukkadam_or_404(session, mukkadam_id)

    changes = request.model_dump(exclude_unset=True)
    start = changes.get("start_date", mukkadam.start_date)
    end = changes.get("end_date", mukkadam.end_date)
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="Start date must be before end date")

    try:
        for key, value in changes.items():
            setattr(mukkadam, key, value)
        mukkadam.updated_at = datetime.now(UTC)
        session.add(mukkadam)
        session.commit()
        session.refresh(mukkadam)
        return mukkadam
    except Exception as e:
        session.rollback()
        logger.error(f"Error updating mukkadam: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not save changes, please try again") from e


@app.get("/mukkadams/{mukkadam_id}/availability", response_model=AvailabilityResponse)
def get_availability(mukkadam_id: int, session: Session = Depends(get_session)):
    mukkadam = get_mukkadam_or_404(session, mukkadam_id)
    return availability_response(mukkadam_id, load_slots(session, mukkadam))


@app.post("/mukkadams/{mukkadam_id}/availability", response_model=AvailabilityResponse, status_code=201)
def add_availability(
    mukkadam_id: int, request: SlotCreate, session: Session = Depends(get_session)
):
    """Append a slot to the mukkadam's list."""
    logger.info(f"Add availability for mukkadam {mukkadam_id}: {request.date_from} to {request.date_to}")
    mukkadam = get_mukkadam_or_404(session, mukkadam_id)
    state = availability.select_mukkadam(mukkadam, load_slots(session, mukkadam))

    try:
        state = availability.add_slot(
            state, request.date_from, request.date_to, request.status, request.notes
        )
    except AvailabilityError as e:
        raise reject(e) from e

    commit_slots(session, mukkadam_id, state.slots)
    return availability_response(mukkadam_id, state.slots)


@app.delete("/mukkadams/{mukkadam_id}/availability/{index}", response_model=AvailabilityResponse)
def delete_availability(
    mukkadam_id: int,
    index: int,
    confirm: bool = Query(False, description="Must be true to actually delete"),
    session: Session = Depends(get_session),
):
    """Delete the slot at a position, once the user has confirmed."""
    logger.info(f"Delete availability {index} for mukkadam {mukkadam_id} (confirm={confirm})")
    mukkadam = get_mukkadam_or_404(session, mukkadam_id)
    state = availability.select_mukkadam(mukkadam, load_slots(session, mukkadam))

    try:
        updated = availability.delete_slot(state, index, confirmed=confirm)
    except AvailabilityError as e:
        raise reject(e) from e

    if updated is state:
        raise HTTPException(status_code=409, detail="Are you sure you want to delete this availability? Pass confirm=true")

    commit_slots(session, mukkadam_id, updated.slots)
    return availability_response(mukkadam_id, updated.slots)


@app.post("/mukkadams/{mukkadam_id}/availability/{index}/split", response_model=AvailabilityResponse)
def split_availability(
    mukkadam_id: int,
    index: int,
    request: SplitRequest,
    session: Session = Depends(get_session),
):
    """Give part of an existing slot a new status, keeping the rest as it was."""
    logger.info(
        f"Split availability {index} for mukkadam {mukkadam_id}: "
        f"{request.date_from} to {request.date_to} as {request.status.value}"
    )
    mukkadam = get_mukkadam_or_404(session, mukkadam_id)
    state = availability.select_mukkadam(mukkadam, load_slots(session, mukkadam))

    try:
        state = availability.start_editing(state, index)
        if request.original is not None:
            original = request.original
            snapshot = Slot(original.date_from, original.date_to, original.status, original.notes or None)
            if snapshot != state.editing.original:
                raise HTTPException(
                    status_code=409,
                    detail="This slot has changed since you started editing it. Reload and try again.",
                )
        state = availability.save_edit(
            state, request.date_from, request.date_to, request.status, request.notes
        )
    except AvailabilityError as e:
        raise reject(e) from e

    commit_slots(session, mukkadam_id, state.slots)
    return availability_response(mukkadam_id, state.slots)


@app.get("/availability/on", response_model=DailyRosterResponse)
def get_daily_roster(
    day: date = Query(..., description="Day in YYYY-MM-DD format"),
    session: Session = Depends(get_session),
):
    """List mukkadams free to work on a day, with their combined crew size."""
    logger.info(f"Daily roster request for {day}")
    roster = session.exec(select(Mukkadam).order_by(Mukkadam.name, Mukkadam.id)).all()
    result = available_on(day, roster, load_all_slots(session, roster))
    logger.info(f"Found {len(result['mukkadams'])} mukkadams available on {day}")
    return DailyRosterResponse(
        day=result["day"],
        mukkadams=[candidate_row(m) for m in result["mukkadams"]],
        total_crew=result["total_crew"],
    )


@app.get("/health")
def health():
    """Check the database connection."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception as e:
        logger.error(f"Connection test failed: {str(e)}")
        raise HTTPException(status_code=503, detail="Database unavailable") from e


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Mukkadam Availability API", "docs": "/docs"}
