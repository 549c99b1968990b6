"""
Context manager for handling database sessions and exceptions.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Generator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def managed_session(
    session_factory: Callable[[], Session]
) -> Generator[Session, None, None]:
    """
    Context manager for handling database sessions, including commits, rollbacks,
    and exception logging.

    Args:
        session_factory: Callable returning a new Session

    Yields:
        Session: The SQLAlchemy session object.

    Raises:
        SQLAlchemyError: If a database-related error occurs.
        Exception: For any other unexpected errors.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.error("Database error: %s", e)
        session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
