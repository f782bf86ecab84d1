"""
ReadTrack Reader Session API Routes
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker
from app.core.config import settings
from app.core.exceptions import ReadTrackException
from app.db.sqlite import get_db, get_session_factory
from app.models.reader import ReaderView, ScrollInput, SessionClosedResponse, SliderInput
from app.services.book_service import book_service
from app.services.progress_store import SQLProgressStore
from app.services.reading_session import ReadingSessionManager, reading_sessions

router = APIRouter()
logger = logging.getLogger(__name__)

def get_reading_sessions() -> ReadingSessionManager:
    """Reading session registry dependency"""
    return reading_sessions

def _raise_http(action: str, e: Exception):
    if isinstance(e, ReadTrackException):
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    logger.error(f"Failed to {action}: {str(e)}", exc_info=True)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}"
    )

@router.post("/{book_id}/sessions", response_model=ReaderView, status_code=status.HTTP_201_CREATED)
async def open_reading_session(
    book_id: str,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
    sessions: ReadingSessionManager = Depends(get_reading_sessions),
):
    """
    Open a book in a new reading session at the stored position
    """
    try:
        user_id = settings.DEFAULT_USER_ID
        material = book_service.get_reading_material(db, book_id, user_id)
        store = SQLProgressStore(session_factory, user_id)

        session = await sessions.open_session(material, user_id, store)
        return session.view()

    except Exception as e: _raise_http("open reading session", e)

@router.get("/sessions/{session_id}", response_model=ReaderView)
async def get_reading_session(session_id: str, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Get the current view of a reading session
    """
    try:
        return sessions.get_session(session_id).view()
    except Exception as e: _raise_http("get reading session", e)

@router.post("/sessions/{session_id}/next", response_model=ReaderView)
async def next_page(session_id: str, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Go to the next page; on the last page this completes the book
    """
    try:
        session = sessions.get_session(session_id)
        session.controller.navigate_next()
        return session.view()
    except Exception as e: _raise_http("go to next page", e)

@router.post("/sessions/{session_id}/previous", response_model=ReaderView)
async def previous_page(session_id: str, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Go to the previous page
    """
    try:
        session = sessions.get_session(session_id)
        session.controller.navigate_previous()
        return session.view()
    except Exception as e: _raise_http("go to previous page", e)

@router.post("/sessions/{session_id}/slider", response_model=ReaderView)
async def set_slider(session_id: str, slider: SliderInput, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Jump to a slider position
    """
    try:
        session = sessions.get_session(session_id)
        session.controller.set_slider(slider.value)
        return session.view()
    except Exception as e: _raise_http("set slider position", e)

@router.post("/sessions/{session_id}/scroll", response_model=ReaderView)
async def report_scroll(session_id: str, scroll: ScrollInput, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Report the scroll offset within the current page
    """
    try:
        session = sessions.get_session(session_id)
        session.controller.on_scroll(scroll.scroll_top, scroll.scroll_height, scroll.client_height)
        return session.view()
    except Exception as e: _raise_http("report scroll", e)

@router.post("/sessions/{session_id}/flush", response_model=ReaderView)
async def flush_reading_session(session_id: str, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Persist the session's progress now instead of waiting for the debounce window
    """
    try:
        session = sessions.get_session(session_id)
        await session.controller.flush()
        return session.view()
    except Exception as e: _raise_http("flush reading session", e)

@router.delete("/sessions/{session_id}", response_model=SessionClosedResponse)
async def close_reading_session(session_id: str, sessions: ReadingSessionManager = Depends(get_reading_sessions)):
    """
    Close a reading session after a final progress flush
    """
    try:
        saved = await sessions.close_session(session_id)
        return SessionClosedResponse(session_id=session_id, saved=saved)
    except Exception as e: _raise_http("close reading session", e)
