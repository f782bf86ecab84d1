"""
ReadTrack Reading Progress API Routes
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import ReadTrackException
from app.db.sqlite import get_db
from app.db.models import Book, ReadingProgress
from app.models.progress import ProgressResponse, ProgressUpdate
from app.services.book_service import book_service
from app.services.pagination_service import layout_for_content
from app.services.position_service import page_index_from_position
from app.services.progress_store import get_progress, upsert_progress

router = APIRouter()
logger = logging.getLogger(__name__)

def _progress_response(book: Book, progress: ReadingProgress | None) -> dict:
    layout = layout_for_content(book.content or "")
    position = progress.current_position if progress else 0.0

    return {
        "book_id": str(book.id),
        "current_position": position,
        "is_completed": bool(progress.is_completed) if progress else False,
        "current_page": page_index_from_position(position, layout.page_count),
        "page_count": layout.page_count,
        "last_read_at": progress.last_read_at if progress else None
    }

@router.get("/{book_id}", response_model=ProgressResponse)
async def get_reading_progress(book_id: str, db: Session = Depends(get_db)):
    """
    Get reading progress for a book
    """
    try:
        book = book_service.get_book(db, book_id)
        progress = get_progress(db, settings.DEFAULT_USER_ID, book_id)

        # default progress if none
        return _progress_response(book, progress)

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to get reading progress: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get reading progress: {str(e)}"
        )

@router.put("/{book_id}", response_model=ProgressResponse)
async def update_reading_progress(book_id: str, progress_update: ProgressUpdate, db: Session = Depends(get_db)):
    """
    Update reading progress for a book
    """
    try:
        logger.info(f"Progress update for book {book_id}: {progress_update.current_position}% completed={progress_update.is_completed}")

        book = book_service.get_book(db, book_id)
        progress = upsert_progress(
            db,
            settings.DEFAULT_USER_ID,
            book_id,
            progress_update.current_position,
            progress_update.is_completed
        )

        return _progress_response(book, progress)

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to update reading progress: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update reading progress: {str(e)}"
        )

@router.post("/{book_id}/reset", response_model=ProgressResponse)
async def reset_reading_progress(book_id: str, db: Session = Depends(get_db)):
    """
    Reset reading progress for a book
    """
    try:
        book = book_service.get_book(db, book_id)
        progress = upsert_progress(db, settings.DEFAULT_USER_ID, book_id, 0.0, False)

        return _progress_response(book, progress)

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to reset reading progress: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reset reading progress: {str(e)}"
        )
