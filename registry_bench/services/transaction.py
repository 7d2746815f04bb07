"""
Transaction boundaries for the Flask-SQLAlchemy session.

Usage:
    with transaction():
        db.session.execute(stmt, params)
        # commit on success, rollback on error
"""

import logging
from contextlib import contextmanager

from registry_bench import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction():
    """Commit on success, roll back and re-raise on exception."""
    try:
        yield db.session
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error("Transaction rolled back: %s", str(e))
        raise


__all__ = ["transaction"]
