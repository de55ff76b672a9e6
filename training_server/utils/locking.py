#!/usr/bin/env python3
"""Optimistic locking for class aggregate updates.

A class, its students, their permissions and apps are read, modified in memory
and written back as one unit. TrainingClass.lock_version is checked on every
write so that two concurrent read-modify-write cycles cannot silently drop
each other's changes.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional

from sqlalchemy.orm.exc import StaleDataError

logger = logging.getLogger(__name__)


class OptimisticLockError(Exception):
    """Raised when optimistic lock version mismatch detected."""
    pass


def check_expected_version(record, expected_version: Optional[int]) -> None:
    """Fail fast when the caller edited a version that is no longer current.

    Args:
        record: Model instance with a 'lock_version' field
        expected_version: Version the caller read, or None to skip the check

    Raises:
        OptimisticLockError: If the stored version differs
    """
    if expected_version is None:
        return
    if record.lock_version != expected_version:
        logger.warning("Version mismatch on %r: expected %s, stored %s",
                       record, expected_version, record.lock_version)
        raise OptimisticLockError(
            f"{type(record).__name__} {record.id} was modified by someone else "
            f"(version {record.lock_version}, expected {expected_version}). "
            f"Please reload and try again."
        )


def with_optimistic_lock(func: Callable) -> Callable:
    """Decorator for functions that modify versioned models.

    The wrapped function mutates the session; the decorator commits it.
    SQLAlchemy adds the version to the UPDATE's WHERE clause (version_id_col)
    and raises StaleDataError when no row matched, which is translated here.

    Raises:
        OptimisticLockError: If concurrent modification detected

    Example:
        @with_optimistic_lock
        def rename_class(class_id, new_name):
            class_obj = db.session.get(TrainingClass, class_id)
            class_obj.name = new_name
            return class_obj
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        from training_server.models import db

        try:
            result = func(*args, **kwargs)
            db.session.commit()
        except StaleDataError as e:
            db.session.rollback()
            logger.warning(f"Optimistic lock conflict in {func.__name__}: {e}")
            raise OptimisticLockError(
                "Your changes conflicted with another user's changes. "
                "Please reload and try again."
            ) from e
        except Exception:
            db.session.rollback()
            raise

        return result

    return wrapper
