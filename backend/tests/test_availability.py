"""Tests for the availability slot editor."""
from datetime import date, timedelta

import pytest

from availability import (
    EditorState,
    NotFoundError,
    Slot,
    Status,
    ValidationError,
    add_slot,
    cancel_editing,
    clear_selection,
    delete_slot,
    save_edit,
    select_mukkadam,
    split_slot,
    start_editing,
    status_meta,
)

JUNE = Slot(date(2024, 6, 1), date(2024, 6, 10), Status.AVAILABLE, "Ready")


def assert_tiles(pieces, original):
    """Pieces cover the original range with no gaps or overlaps, in order."""
    assert pieces[0].date_from == original.date_from
    assert pieces[-1].date_to == original.date_to
    for previous, following in zip(pieces, pieces[1:]):
        assert following.date_from == previous.date_to + timedelta(days=1)


def test_split_middle_gives_three_pieces():
    pieces = split_slot(JUNE, date(2024, 6, 3), date(2024, 6, 5), "busy")

    assert [(p.date_from, p.date_to, p.status) for p in pieces] == [
        (date(2024, 6, 1), date(2024, 6, 2), Status.AVAILABLE),
        (date(2024, 6, 3), date(2024, 6, 5), Status.BUSY),
        (date(2024, 6, 6), date(2024, 6, 10), Status.AVAILABLE),
    ]
    # Remainders keep the original notes
    assert pieces[0].notes == "Ready"
    assert pieces[2].notes == "Ready"
    assert pieces[1].notes is None


def test_split_full_range_gives_one_piece():
    pieces = split_slot(JUNE, date(2024, 6, 1), date(2024, 6, 10), "leave", "Festival")

    assert pieces == [Slot(date(2024, 6, 1), date(2024, 6, 10), Status.LEAVE, "Festival")]


@pytest.mark.parametrize(
    "new_from,new_to,count",
    [
        (date(2024, 6, 1), date(2024, 6, 10), 1),
        (date(2024, 6, 1), date(2024, 6, 4), 2),
        (date(2024, 6, 7), date(2024, 6, 10), 2),
        (date(2024, 6, 2), date(2024, 6, 9), 3),
        (date(2024, 6, 5), date(2024, 6, 5), 3),
    ],
)
def test_split_piece_count_and_coverage(new_from, new_to, count):
    pieces = split_slot(JUNE, new_from, new_to, Status.BUSY)

    assert len(pieces) == count
    assert_tiles(pieces, JUNE)


def test_split_crosses_month_and_year_boundaries():
    original = Slot(date(2023, 12, 30), date(2024, 3, 2), Status.AVAILABLE)

    pieces = split_slot(original, date(2024, 1, 1), date(2024, 2, 29), Status.LEAVE)

    assert pieces[0].date_to == date(2023, 12, 31)
    assert pieces[2].date_from == date(2024, 3, 1)
    assert_tiles(pieces, original)


@pytest.mark.parametrize(
    "new_from,new_to",
    [
        (date(2024, 5, 31), date(2024, 6, 5)),
        (date(2024, 6, 5), date(2024, 6, 11)),
        (date(2024, 5, 1), date(2024, 7, 1)),
    ],
)
def test_split_outside_original_is_rejected(new_from, new_to):
    with pytest.raises(ValidationError, match="Add Availability"):
        split_slot(JUNE, new_from, new_to, Status.BUSY)


def test_split_requires_both_dates_in_order():
    with pytest.raises(ValidationError):
        split_slot(JUNE, None, date(2024, 6, 5), Status.BUSY)
    with pytest.raises(ValidationError):
        split_slot(JUNE, date(2024, 6, 6), date(2024, 6, 5), Status.BUSY)


def test_add_slot_appends_without_overlap_check():
    state = select_mukkadam("m1", [JUNE])

    state = add_slot(state, date(2024, 6, 8), date(2024, 6, 15), "busy", "Overlaps")

    assert len(state.slots) == 2
    assert state.slots[1] == Slot(date(2024, 6, 8), date(2024, 6, 15), Status.BUSY, "Overlaps")


def test_add_slot_rejects_inverted_range():
    state = select_mukkadam("m1", [JUNE])

    with pytest.raises(ValidationError):
        add_slot(state, date(2024, 6, 9), date(2024, 6, 8))
    with pytest.raises(ValidationError):
        add_slot(state, date(2024, 6, 9), None)
    assert state.slots == (JUNE,)


def test_save_edit_splices_in_place():
    other = Slot(date(2024, 7, 1), date(2024, 7, 5), Status.BUSY)
    state = select_mukkadam("m1", [other, JUNE, other])

    state = start_editing(state, 1)
    state = save_edit(state, date(2024, 6, 3), date(2024, 6, 5), "busy")

    assert len(state.slots) == 5
    assert state.slots[0] == other
    assert state.slots[-1] == other
    assert state.slots[2].status is Status.BUSY
    assert state.editing is None


def test_save_edit_out_of_bounds_leaves_state_untouched():
    state = start_editing(select_mukkadam("m1", [JUNE]), 0)

    with pytest.raises(ValidationError):
        save_edit(state, date(2024, 5, 30), date(2024, 6, 5), "busy")

    assert state.slots == (JUNE,)
    assert state.editing.index == 0


def test_save_edit_uses_snapshot_taken_when_editing_started():
    state = start_editing(select_mukkadam("m1", [JUNE]), 0)

    assert state.editing.original == JUNE
    state = save_edit(state, date(2024, 6, 1), date(2024, 6, 2), "leave")
    assert [s.status for s in state.slots] == [Status.LEAVE, Status.AVAILABLE]


def test_save_edit_without_open_editor():
    with pytest.raises(NotFoundError):
        save_edit(select_mukkadam("m1", [JUNE]), date(2024, 6, 1), date(2024, 6, 2), "busy")


def test_start_editing_replaces_previous_edit():
    other = Slot(date(2024, 7, 1), date(2024, 7, 5), Status.BUSY)
    state = start_editing(select_mukkadam("m1", [JUNE, other]), 0)

    state = start_editing(state, 1)

    assert state.editing.index == 1
    assert state.editing.original == other
    assert cancel_editing(state).editing is None


def test_start_editing_stale_index():
    with pytest.raises(NotFoundError):
        start_editing(select_mukkadam("m1", [JUNE]), 3)


def test_delete_requires_confirmation():
    state = select_mukkadam("m1", [JUNE])

    assert delete_slot(state, 0) is state
    assert delete_slot(state, 0, confirmed=True).slots == ()


def test_delete_removes_only_that_slot():
    a = Slot(date(2024, 1, 1), date(2024, 1, 2))
    b = Slot(date(2024, 2, 1), date(2024, 2, 2))
    c = Slot(date(2024, 3, 1), date(2024, 3, 2))
    state = select_mukkadam("m1", [a, b, c])

    state = delete_slot(state, 1, confirmed=True)

    assert state.slots == (a, c)


def test_delete_open_slot_closes_editor():
    state = start_editing(select_mukkadam("m1", [JUNE, JUNE]), 1)

    state = delete_slot(state, 1, confirmed=True)

    assert state.editing is None


def test_delete_before_open_slot_keeps_editor_on_same_slot():
    other = Slot(date(2024, 7, 1), date(2024, 7, 5), Status.BUSY)
    state = start_editing(select_mukkadam("m1", [other, JUNE]), 1)

    state = delete_slot(state, 0, confirmed=True)

    assert state.editing.index == 0
    assert state.slots[state.editing.index] == JUNE


def test_delete_stale_index():
    with pytest.raises(NotFoundError):
        delete_slot(select_mukkadam("m1", []), 0, confirmed=True)


def test_clear_selection_resets_everything():
    state = start_editing(select_mukkadam("m1", [JUNE]), 0)

    assert clear_selection(state) == EditorState()


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Available", Status.AVAILABLE),
        ("Leave", Status.LEAVE),
        ("on-leave", Status.LEAVE),
        ("on_leave", Status.LEAVE),
        ("BUSY", Status.BUSY),
        (None, Status.AVAILABLE),
        ("", Status.AVAILABLE),
    ],
)
def test_status_parse(raw, expected):
    assert Status.parse(raw) is expected


def test_status_parse_unknown():
    with pytest.raises(ValidationError):
        Status.parse("holiday")


def test_every_status_has_metadata():
    labels = {status_meta(s).label for s in Status}
    assert labels == {"Available", "Busy", "On Leave"}


@pytest.mark.parametrize("raw", [5, True, ["busy"]])
def test_status_parse_rejects_non_text(raw):
    with pytest.raises(ValidationError):
        Status.parse(raw)
