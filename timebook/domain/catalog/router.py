"""Catalog router - Public service listing and the admin master directory"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import ROLE_ADMIN, require_roles
from ...database import get_db
from .schemas import MasterResponse, ServiceResponse
from .service import CatalogAdapter

router = APIRouter(prefix="/catalog", tags=["Catalog"])


def get_catalog(db: Session = Depends(get_db)) -> CatalogAdapter:
    """Dependency injection for CatalogAdapter"""
    return CatalogAdapter(db)


@router.get("/services", response_model=list[ServiceResponse])
def list_services(
    master_id: Optional[int] = Query(None),
    catalog: CatalogAdapter = Depends(get_catalog),
):
    """List bookable services, optionally for one master"""
    return catalog.list_services(master_id)


@router.get("/services/{service_id}", response_model=ServiceResponse)
def get_service(service_id: int, catalog: CatalogAdapter = Depends(get_catalog)):
    """Get one service with its options"""
    return catalog.get_service(service_id)


@router.get(
    "/masters",
    response_model=list[MasterResponse],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)
def list_masters(catalog: CatalogAdapter = Depends(get_catalog)):
    """Admin: every master with their services"""
    return catalog.list_masters()
