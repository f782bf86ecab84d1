"""
ReadTrack Progress Store - persistence of reading progress
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from app.core.exceptions import ProgressStoreException
from app.db.models import ReadingProgress
from app.services.position_service import clamp_position

logger = logging.getLogger(__name__)

class ProgressStore(Protocol):
    """Anything that can persist (position, completed) for a work"""

    def save_progress(self, work_id: str, position: float, completed: bool) -> bool: ...

def get_progress(db: Session, user_id: str, book_id: str) -> Optional[ReadingProgress]:
    return db.query(ReadingProgress).filter(
        ReadingProgress.user_id == user_id,
        ReadingProgress.book_id == book_id
    ).first()

def upsert_progress(db: Session, user_id: str, book_id: str, position: float, completed: bool) -> ReadingProgress:
    """
    Create or update the progress row of a user and book
    Args:
        db: Database session, committed on success
        user_id: Reader identifier
        book_id: Book identifier
        position: Overall progress, clamped to 0-100
        completed: Completion flag
    Returns:
        The stored ReadingProgress row
    """
    progress = get_progress(db, user_id, book_id)
    if not progress:
        logger.info(f"Creating new reading progress for book {book_id}")
        progress = ReadingProgress(user_id=user_id, book_id=book_id)
        db.add(progress)

    progress.current_position = clamp_position(position)
    progress.is_completed = bool(completed)
    # last writer wins across sessions
    progress.last_read_at = datetime.now(timezone.utc)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(progress)
    return progress

class SQLProgressStore:
    """
    Progress store backed by the SQLAlchemy database
    Each write runs in its own short-lived session
    """

    def __init__(self, session_factory: sessionmaker, user_id: str):
        self.session_factory = session_factory
        self.user_id = user_id

    def save_progress(self, work_id: str, position: float, completed: bool) -> bool:
        db = self.session_factory()
        try:
            upsert_progress(db, self.user_id, work_id, position, completed)
            logger.debug(f"Saved progress for book {work_id}: {position:.2f}% completed={completed}")
            return True

        except SQLAlchemyError as e:
            logger.error(f"Database error while saving progress for book {work_id}: {str(e)}")
            raise ProgressStoreException(f"Failed to save reading progress: {str(e)}")

        finally:
            db.close()
