"""Reconciliation router - Offers for clients and the master's day grid"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import ROLE_ADMIN, get_current_master, require_roles
from ...database import get_db
from ...models import MasterProfile
from .schemas import DayGrid, OfferList
from .service import ReconciliationEngine

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_engine(db: Session = Depends(get_db)) -> ReconciliationEngine:
    """Dependency injection for ReconciliationEngine"""
    return ReconciliationEngine(db)


@router.get("/services/{service_id}/offers", response_model=OfferList)
def get_offers(
    service_id: int,
    day: date = Query(...),
    engine: ReconciliationEngine = Depends(get_engine),
):
    """Public: bookable windows of a service on a day"""
    return engine.offers_for_day(service_id, day)


@router.get("/masters/me/grid", response_model=DayGrid)
def get_my_grid(
    day: date = Query(...),
    master: MasterProfile = Depends(get_current_master),
    engine: ReconciliationEngine = Depends(get_engine),
):
    """Hour-by-hour calendar of the calling master"""
    return engine.day_grid(master.id, day)


@router.get(
    "/masters/{master_id}/grid",
    response_model=DayGrid,
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)
def get_master_grid(
    master_id: int,
    day: date = Query(...),
    engine: ReconciliationEngine = Depends(get_engine),
):
    """Admin view of any master's calendar"""
    return engine.day_grid(master_id, day)
