from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from app.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def unit_of_work(session: Session, label: str = "unit of work") -> Iterator[Session]:
    """
    Run a block of writes against ``session`` as one all-or-nothing unit.

    Everything issued inside the block (and anything still pending on the
    session) is committed when the block exits normally. Any exception rolls
    the whole transaction back before it propagates.

    Usage:
        with unit_of_work(db, "capture") as tx:
            tx.add(order)
            ...
    """
    try:
        yield session
        session.commit()
    except Exception:
        logger.warning("%s rolled back", label)
        session.rollback()
        raise
