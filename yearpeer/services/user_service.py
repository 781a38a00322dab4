"""Helpers for working with users."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yearpeer.db.models.user import User

logger = logging.getLogger(__name__)


def get_or_create_user(db: Session, user_id: UUID) -> User:
    """Fetch the local user row, creating it on the user's first write."""
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent request inserted the same user between get and flush.
        db.rollback()
        existing = db.get(User, user_id)
        if existing:
            return existing
        raise
    logger.info("Created local user row %s", user_id)
    return user
