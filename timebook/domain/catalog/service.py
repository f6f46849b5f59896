"""Catalog adapter - Read-only access to service duration, price and ownership"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFound, ValidationFailed
from ...models import MasterProfile, Service, ServiceOption
from .repository import CatalogRepository

logger = logging.getLogger(__name__)


class CatalogAdapter:
    """
    Boundary to the service catalog.

    A service is either simple (own duration and price, no options) or
    option-based (duration and price come from the chosen option).
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise NotFound("Service not found")
        return service

    def list_services(self, master_id: Optional[int] = None) -> list[Service]:
        return self.repo.list_services(self.db, master_id)

    def get_owned_service(self, master_id: int, service_id: int) -> Service:
        """Get a service that must belong to the given master"""
        service = self.repo.get_service(self.db, service_id)
        if not service or service.master_id != master_id:
            raise NotFound("Service not found or does not belong to you")
        return service

    def resolve_option(
        self, service: Service, service_option_id: Optional[int]
    ) -> Optional[ServiceOption]:
        """Pick the option that defines duration/price, validating the service shape"""
        if service.options:
            if service_option_id is None:
                raise ValidationFailed(
                    f"Service {service.id} has options; service_option_id is required"
                )
            for option in service.options:
                if option.id == service_option_id:
                    return option
            raise ValidationFailed(
                f"Option {service_option_id} does not belong to service {service.id}"
            )

        if service_option_id is not None:
            raise ValidationFailed(f"Service {service.id} has no options")
        if not service.duration_minutes or service.duration_minutes <= 0:
            logger.error(f"❌ Simple service {service.id} has no usable duration")
            raise ValidationFailed(f"Service {service.id} has no duration configured")
        return None

    def get_duration(self, service_id: int, service_option_id: Optional[int] = None) -> int:
        """Duration in minutes for a service or one of its options"""
        service = self.get_service(service_id)
        option = self.resolve_option(service, service_option_id)
        return option.duration_minutes if option else service.duration_minutes

    def get_price(self, service_id: int, service_option_id: Optional[int] = None) -> float:
        service = self.get_service(service_id)
        option = self.resolve_option(service, service_option_id)
        return option.price if option else service.price

    def get_master_id(self, service_id: int) -> int:
        return self.get_service(service_id).master_id

    def get_master_for_user(self, user_id: int) -> MasterProfile:
        """Master profile owned by an identity user id"""
        master = self.repo.get_master_by_user_id(self.db, user_id)
        if not master:
            raise NotFound("Master profile not found")
        return master

    def get_master(self, master_id: int) -> MasterProfile:
        master = self.repo.get_master(self.db, master_id)
        if not master:
            raise NotFound("Master not found")
        return master

    def list_masters(self) -> list[MasterProfile]:
        return self.repo.list_masters(self.db)
