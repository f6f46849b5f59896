"""
Per-master write serialization.

Every write that can change what is free on a master's calendar runs inside
master_transaction(): an in-process lock per master (bounded wait) plus a row
lock on the master's profile so that several worker processes sharing one
PostgreSQL database serialize as well. SQLite ignores FOR UPDATE, which is fine
for single-process deployments and tests because the in-process lock applies.
"""

import logging
import weakref
from contextlib import contextmanager
from threading import Lock
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from .config import LOCK_TIMEOUT_SECONDS
from .errors import StorageTimeout
from .models import MasterProfile

logger = logging.getLogger(__name__)

# master_id -> Lock; an entry lives only while some caller still holds its Lock
_master_locks: "weakref.WeakValueDictionary[int, Lock]" = weakref.WeakValueDictionary()
_registry_lock = Lock()

_TIMEOUT_MARKERS = (
    "timeout",
    "timed out",
    "canceling statement",
    "database is locked",
    "lock not available",
)


def _get_master_lock(master_id: int) -> Lock:
    with _registry_lock:
        lock = _master_locks.get(master_id)
        if lock is None:
            lock = Lock()
            _master_locks[master_id] = lock
        return lock


def is_timeout_error(exc: OperationalError) -> bool:
    """True when the driver error means a bounded wait was exceeded"""
    message = str(getattr(exc, "orig", exc)).lower()
    return any(marker in message for marker in _TIMEOUT_MARKERS)


@contextmanager
def master_transaction(db: Session, master_id: int, timeout: Optional[float] = None):
    """
    Run "re-check, then write" for one master as a single atomic unit.

    Commits when the block exits normally, rolls back on any exception.
    Raises StorageTimeout if the lock or a storage call exceeds its bound;
    timeout defaults to LOCK_TIMEOUT_SECONDS.
    """
    if timeout is None:
        timeout = LOCK_TIMEOUT_SECONDS
    lock = _get_master_lock(master_id)
    if not lock.acquire(timeout=timeout):
        logger.error(f"⏱️ Timed out after {timeout}s waiting for calendar lock of master {master_id}")
        raise StorageTimeout(f"Calendar of master {master_id} is busy, please retry")

    try:
        try:
            db.query(MasterProfile.id).filter(MasterProfile.id == master_id).with_for_update().first()
            yield db
            db.commit()
        except OperationalError as e:
            db.rollback()
            if is_timeout_error(e):
                logger.error(f"⏱️ Storage timeout in transaction for master {master_id}: {e}")
                raise StorageTimeout() from e
            logger.error(f"❌ Storage failure in transaction for master {master_id}: {e}")
            raise
        except Exception:
            db.rollback()
            raise
    finally:
        lock.release()
