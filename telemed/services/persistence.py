from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from telemed.utils.exceptions import BackendError
import logging

logger = logging.getLogger("database")


def commit_session(db: Session, action: str, propagate_integrity: bool = False):
    """Commit the unit of work or roll it back and report a BackendError.

    IntegrityError is re-raised untouched when the caller maps it to a
    domain error itself (e.g. the active-slot unique index).
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if propagate_integrity:
            raise
        logger.error(f"Integrity error while trying to {action}: {e}")
        raise BackendError(f"Failed to {action}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise BackendError(f"Failed to {action}") from e
