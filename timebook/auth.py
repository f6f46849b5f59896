"""Identity boundary.

Authentication happens upstream; the gateway forwards the verified caller as
X-User-Id and X-User-Role headers. This module only turns them into an
Identity value and offers role guards for routers.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .domain.catalog.repository import CatalogRepository
from .models import MasterProfile

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_MASTER = "master"
ROLE_ADMIN = "admin"

ROLES = (ROLE_USER, ROLE_MASTER, ROLE_ADMIN)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as issued by the identity service"""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_master(self) -> bool:
        return self.role == ROLE_MASTER


def get_current_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    """Build the caller identity from gateway headers"""
    if not x_user_id or not x_user_role:
        logger.warning("❌ Request without identity headers")
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        user_id = int(x_user_id)
    except ValueError as e:
        logger.warning(f"❌ Malformed X-User-Id header: {x_user_id!r}")
        raise HTTPException(status_code=401, detail="Invalid identity") from e

    role = x_user_role.strip().lower()
    if role not in ROLES:
        logger.warning(f"❌ Unknown role in X-User-Role header: {x_user_role!r}")
        raise HTTPException(status_code=401, detail="Invalid identity")

    return Identity(user_id=user_id, role=role)


def require_roles(*roles: str):
    """
    Create a dependency that only admits identities with one of the given roles

    Example usage:
        @router.post("/blocks")
        async def toggle_block(identity: Identity = Depends(require_roles(ROLE_MASTER, ROLE_ADMIN))):
            ...
    """

    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in roles:
            logger.warning(f"🚫 User {identity.user_id} with role {identity.role} denied")
            raise HTTPException(status_code=403, detail="Insufficient role for this operation")
        return identity

    return checker


def get_current_master(
    identity: Identity = Depends(require_roles(ROLE_MASTER)),
    db: Session = Depends(get_db),
) -> MasterProfile:
    """Master profile of the calling master"""
    master = CatalogRepository.get_master_by_user_id(db, identity.user_id)
    if not master:
        logger.warning(f"⚠️ User {identity.user_id} has role master but no master profile")
        raise HTTPException(status_code=404, detail="Master profile not found")
    return master
