"""Catalog repository - Read-only queries for masters, services and options"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import MasterProfile, Service, ServiceOption


class CatalogRepository:
    """Repository for catalog lookups"""

    @staticmethod
    def get_service(db: Session, service_id: int) -> Optional[Service]:
        """Get a service with its options"""
        return (
            db.query(Service)
            .options(selectinload(Service.options))
            .filter(Service.id == service_id)
            .first()
        )

    @staticmethod
    def get_option(db: Session, option_id: int) -> Optional[ServiceOption]:
        return db.query(ServiceOption).filter(ServiceOption.id == option_id).first()

    @staticmethod
    def list_services(db: Session, master_id: Optional[int] = None) -> list[Service]:
        """List services, optionally for one master"""
        query = db.query(Service).options(selectinload(Service.options))
        if master_id is not None:
            query = query.filter(Service.master_id == master_id)
        return query.order_by(Service.id).all()

    @staticmethod
    def get_master_by_user_id(db: Session, user_id: int) -> Optional[MasterProfile]:
        return db.query(MasterProfile).filter(MasterProfile.user_id == user_id).first()

    @staticmethod
    def get_master(db: Session, master_id: int) -> Optional[MasterProfile]:
        return db.query(MasterProfile).filter(MasterProfile.id == master_id).first()

    @staticmethod
    def list_masters(db: Session) -> list[MasterProfile]:
        """All master profiles with their services"""
        return (
            db.query(MasterProfile)
            .options(selectinload(MasterProfile.services).selectinload(Service.options))
            .order_by(MasterProfile.id)
            .all()
        )
