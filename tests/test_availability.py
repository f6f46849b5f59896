from datetime import date

import pytest
from conftest import at

from timebook.domain.availability.service import AvailabilityStore
from timebook.errors import InvalidRange, Locked, NotFound, Overlap
from timebook.models import STATUS_CANCELLED, STATUS_CONFIRMED, TimeSlot

NEXT_DAY = date(2030, 1, 16)


def test_create_open_slot(db, catalog):
    store = AvailabilityStore(db)

    slot = store.create(catalog.master_id, catalog.haircut_id, at(9), at(10))

    assert slot.id is not None
    assert slot.is_booked is False
    assert (slot.start_time, slot.end_time) == (at(9), at(10))


def test_create_rejects_inverted_range(db, catalog):
    with pytest.raises(InvalidRange):
        AvailabilityStore(db).create(catalog.master_id, catalog.haircut_id, at(10), at(9))


def test_create_rejects_foreign_service(db, catalog):
    with pytest.raises(NotFound):
        AvailabilityStore(db).create(catalog.master_id, catalog.manicure_id, at(9), at(10))


def test_open_slots_may_overlap(db, catalog):
    store = AvailabilityStore(db)
    store.create(catalog.master_id, catalog.haircut_id, at(9), at(11))
    store.create(catalog.master_id, catalog.coloring_id, at(10), at(12))

    assert len(store.list_for_range(catalog.master_id, at(0), at(23))) == 2


def test_create_over_block_fails(db, catalog, make_slot):
    make_slot(catalog.master_id, catalog.coloring_id, at(12), at(13), is_booked=True)

    with pytest.raises(Overlap):
        AvailabilityStore(db).create(catalog.master_id, catalog.haircut_id, at(12, 30), at(13, 30))


def test_block_of_another_master_does_not_interfere(db, catalog, make_slot):
    make_slot(catalog.other_master_id, catalog.manicure_id, at(12), at(13), is_booked=True)

    slot = AvailabilityStore(db).create(catalog.master_id, catalog.haircut_id, at(12), at(13))
    assert slot.id is not None


def test_update_moves_slot(db, catalog, make_slot):
    slot = make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))

    updated = AvailabilityStore(db).update(slot.id, end=at(11))

    assert (updated.start_time, updated.end_time) == (at(9), at(11))


def test_update_unknown_or_foreign_slot(db, catalog, make_slot):
    store = AvailabilityStore(db)
    with pytest.raises(NotFound):
        store.update(9999, start=at(8))

    slot = make_slot(catalog.other_master_id, catalog.manicure_id, at(9), at(10))
    with pytest.raises(NotFound):
        store.update(slot.id, start=at(8), master_id=catalog.master_id)


def test_update_locked_by_live_appointment(db, catalog, make_slot, make_appointment):
    slot = make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    make_appointment(catalog.master_id, catalog.haircut_id, at(9), at(10), status=STATUS_CONFIRMED)

    with pytest.raises(Locked):
        AvailabilityStore(db).update(slot.id, end=at(11))


def test_update_rejects_inverted_range(db, catalog, make_slot):
    slot = make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))

    with pytest.raises(InvalidRange):
        AvailabilityStore(db).update(slot.id, start=at(10, 30))


def test_delete_open_slot(db, catalog, make_slot):
    slot = make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))

    AvailabilityStore(db).delete(slot.id, master_id=catalog.master_id)

    assert db.query(TimeSlot).count() == 0


def test_delete_blocked_slot_is_locked(db, catalog, make_slot):
    slot = make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10), is_booked=True)

    with pytest.raises(Locked):
        AvailabilityStore(db).delete(slot.id)


def test_delete_allowed_once_appointment_is_cancelled(db, catalog, make_slot, make_appointment):
    slot = make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    appointment = make_appointment(catalog.master_id, catalog.haircut_id, at(9), at(10))
    store = AvailabilityStore(db)

    with pytest.raises(Locked):
        store.delete(slot.id)

    appointment.status = STATUS_CANCELLED
    db.commit()
    store.delete(slot.id)
    assert db.query(TimeSlot).count() == 0


def test_set_booked_upserts_exact_window(db, catalog):
    store = AvailabilityStore(db)

    first = store.set_booked(catalog.master_id, catalog.haircut_id, at(13), at(14), True)
    db.commit()
    second = store.set_booked(catalog.master_id, catalog.haircut_id, at(13), at(14), True)
    db.commit()

    assert first.id == second.id
    assert db.query(TimeSlot).count() == 1

    freed = store.set_booked(catalog.master_id, catalog.haircut_id, at(13), at(14), False)
    db.commit()
    assert freed.id == first.id
    assert freed.is_booked is False


def test_list_for_range_filters(db, catalog, make_slot):
    make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    make_slot(catalog.master_id, catalog.haircut_id, at(11), at(12), is_booked=True)
    make_slot(catalog.master_id, catalog.coloring_id, at(10), at(11))
    make_slot(catalog.master_id, catalog.haircut_id, at(9, day=NEXT_DAY), at(10, day=NEXT_DAY))
    store = AvailabilityStore(db)

    day_slots = store.list_for_range(catalog.master_id, at(0), at(23, 59))
    assert [s.start_time for s in day_slots] == [at(9), at(10), at(11)]

    haircut_only = store.list_for_range(
        catalog.master_id, at(0), at(23, 59), service_id=catalog.haircut_id
    )
    assert len(haircut_only) == 2

    blocks = store.list_for_range(catalog.master_id, at(0), at(23, 59), is_booked=True)
    assert [s.start_time for s in blocks] == [at(11)]
