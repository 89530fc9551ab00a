import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from musicos.errors import ExternalServiceError

log = logging.getLogger("db")


@contextmanager
def atomic(session: Session, failure_message: str = None) -> Iterator[Session]:
    """
    Commit the work done inside the block, or roll all of it back.

    IntegrityError is re-raised untouched so repositories can turn a unique
    constraint violation into a ConflictError; any other database failure
    becomes an ExternalServiceError with a user-safe message.
    Usage:
        with atomic(db):
            ... DB work ...
    """
    try:
        yield session
        session.commit()
    except IntegrityError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        log.exception("Database operation failed")
        raise ExternalServiceError(failure_message) from exc
    except Exception:
        session.rollback()
        raise
