import pytest
from conftest import DAY, at

from timebook.config import GRID_END_HOUR, GRID_START_HOUR
from timebook.domain.reconciliation.service import ReconciliationEngine
from timebook.errors import NotFound
from timebook.models import STATUS_CANCELLED, STATUS_CONFIRMED, STATUS_REJECTED


def _offers(db, service_id):
    return ReconciliationEngine(db).offers_for_day(service_id, DAY).offers


def _cell(grid, hour):
    return next(c for c in grid.cells if c.start_time.hour == hour)


def test_partial_overlap_hides_offer(db, catalog, make_slot, make_appointment):
    make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    make_appointment(catalog.master_id, catalog.haircut_id, at(9, 30), at(10))

    [offer] = _offers(db, catalog.haircut_id)

    assert offer.available is False
    assert offer.status == "pending"


def test_blocked_slot_is_booked(db, catalog, make_slot):
    make_slot(catalog.master_id, catalog.haircut_id, at(11), at(12), is_booked=True)

    [offer] = _offers(db, catalog.haircut_id)

    assert offer.available is False
    assert offer.status == "booked"


def test_appointment_of_another_service_blocks_offer(db, catalog, make_slot, make_appointment):
    make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    make_appointment(catalog.master_id, catalog.coloring_id, at(9), at(10), status=STATUS_CONFIRMED)

    [offer] = _offers(db, catalog.haircut_id)

    assert offer.available is False
    assert offer.status == "confirmed"


def test_sink_statuses_free_the_offer(db, catalog, make_slot, make_appointment):
    make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    make_appointment(catalog.master_id, catalog.haircut_id, at(9), at(10), status=STATUS_CANCELLED)
    make_appointment(catalog.master_id, catalog.haircut_id, at(9), at(10), status=STATUS_REJECTED)

    [offer] = _offers(db, catalog.haircut_id)

    assert offer.available is True
    assert offer.status == "available"


def test_touching_appointment_does_not_block(db, catalog, make_slot, make_appointment):
    make_slot(catalog.master_id, catalog.haircut_id, at(10), at(11))
    make_appointment(catalog.master_id, catalog.haircut_id, at(9), at(10))

    [offer] = _offers(db, catalog.haircut_id)
    assert offer.available is True


def test_offers_are_sorted_and_scoped_to_service_and_day(db, catalog, make_slot):
    make_slot(catalog.master_id, catalog.haircut_id, at(14), at(15))
    make_slot(catalog.master_id, catalog.haircut_id, at(9), at(10))
    make_slot(catalog.master_id, catalog.coloring_id, at(11), at(12))
    make_slot(catalog.master_id, catalog.haircut_id, at(23), at(23, 59))

    offers = _offers(db, catalog.haircut_id)

    assert [o.start_time for o in offers] == [at(9), at(14), at(23)]
    assert {o.service_id for o in offers} == {catalog.haircut_id}


def test_unknown_service(db, catalog):
    with pytest.raises(NotFound):
        _offers(db, 9999)


def test_grid_has_one_cell_per_hour(db, catalog):
    grid = ReconciliationEngine(db).day_grid(catalog.master_id, DAY)

    assert len(grid.cells) == GRID_END_HOUR - GRID_START_HOUR + 1
    assert grid.cells[0].start_time == at(GRID_START_HOUR)
    assert grid.cells[-1].start_time == at(GRID_END_HOUR)
    assert all(c.status == "available" for c in grid.cells)


def test_grid_priority(db, catalog, make_slot, make_appointment):
    make_appointment(catalog.master_id, catalog.haircut_id, at(9), at(10), user_id=1)
    make_appointment(
        catalog.master_id, catalog.haircut_id, at(9), at(10), user_id=2, status=STATUS_CONFIRMED
    )
    make_slot(catalog.master_id, catalog.haircut_id, at(10), at(11), is_booked=True)
    make_appointment(catalog.master_id, catalog.haircut_id, at(10), at(11))
    make_slot(catalog.master_id, catalog.haircut_id, at(12), at(13), is_booked=True)
    make_slot(catalog.master_id, catalog.haircut_id, at(14), at(15))

    grid = ReconciliationEngine(db).day_grid(catalog.master_id, DAY)

    nine = _cell(grid, 9)
    assert nine.status == "confirmed"
    assert nine.user_id == 2
    assert _cell(grid, 10).status == "pending"
    assert _cell(grid, 12).status == "booked"
    assert _cell(grid, 14).status == "available"
    assert _cell(grid, 14).time_slot_id is not None


def test_grid_counts_partial_hours(db, catalog, make_appointment):
    make_appointment(catalog.master_id, catalog.haircut_id, at(16, 30), at(17, 30))

    grid = ReconciliationEngine(db).day_grid(catalog.master_id, DAY)

    assert _cell(grid, 16).status == "pending"
    assert _cell(grid, 17).status == "pending"
    assert _cell(grid, 18).status == "available"


def test_grid_ignores_other_masters(db, catalog, make_appointment):
    make_appointment(catalog.other_master_id, catalog.manicure_id, at(9), at(10))

    grid = ReconciliationEngine(db).day_grid(catalog.master_id, DAY)
    assert _cell(grid, 9).status == "available"


def test_grid_unknown_master(db, catalog):
    with pytest.raises(NotFound):
        ReconciliationEngine(db).day_grid(9999, DAY)
