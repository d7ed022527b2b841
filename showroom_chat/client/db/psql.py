from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from showroom_chat.db.session import SessionLocal

logger = logging.getLogger(__name__)


@contextmanager
def session_scope(read_only: bool = False) -> Iterator[Session]:
    """
    Unit of work for the chat tables.

    Writes are committed when the block exits cleanly. A `read_only` scope
    always ends in a rollback, so lookups issued while a turn is in flight
    never commit anything by accident.
    """
    db = SessionLocal()
    try:
        yield db
        if read_only:
            db.rollback()
        else:
            db.commit()
    except Exception as exc:
        logger.warning("chat db transaction rolled back: %s", type(exc).__name__)
        db.rollback()
        raise
    finally:
        db.close()
