"""Unit-of-work helper for registry writes."""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.orm import Session


@contextmanager
def transaction(session: Session) -> Generator[Session]:
    """Commit when the block finishes, roll back and re-raise if it fails.

    A drain of the pending-update queue reads and deletes inside one block
    so a crash between the two leaves the queue untouched.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
