"""
ReadTrack Reading Sessions - open readers held in memory between requests
"""
import asyncio
import logging
import uuid
from collections import OrderedDict
from typing import Dict, Any, Optional
from app.core.config import settings
from app.core.exceptions import ReadingSessionNotFoundException
from app.services.book_service import ReadingMaterial
from app.services.progress_controller import ProgressController, ProgressSnapshot
from app.services.progress_store import ProgressStore
from app.services.save_debouncer import SaveDebouncer, Clock
from app.services.scroll_tracker import ScrollTracker

logger = logging.getLogger(__name__)

class ReadingSession:
    """
    One open reader: a progress controller wired to a debounced progress store
    """

    def __init__(self, material: ReadingMaterial, user_id: str, store: ProgressStore, clock: Optional[Clock] = None):
        self.id = str(uuid.uuid4())
        self.book_id = material.book_id
        self.title = material.title
        self.user_id = user_id
        self.store = store

        reader_config = settings.get_reader_config()
        self.completion_reached = False
        self.save_error: Optional[str] = None

        self.debouncer = SaveDebouncer(
            self._save,
            delay=reader_config["save_delay"],
            clock=clock,
            on_error=self._on_save_error,
            name=f"progress of book {self.book_id}",
        )
        self.controller = ProgressController(
            material.content,
            current_position=material.current_position,
            is_completed=material.is_completed,
            target_page_size=reader_config["target_page_size"],
            debouncer=self.debouncer,
            on_completion=self._on_completion,
            scroll_tracker=ScrollTracker(
                reader_config["scroll_noise_threshold"],
                reader_config["scroll_progress_cap"],
            ),
            completion_threshold=reader_config["completion_threshold"],
        )

    async def _save(self, snapshot: ProgressSnapshot) -> bool:
        # store writes block, so they run in a worker thread
        saved = await asyncio.to_thread(self.store.save_progress, self.book_id, snapshot.position, snapshot.completed)
        if saved is not False: self.save_error = None
        return saved

    def _on_save_error(self, error: Exception):
        self.save_error = str(error)

    def _on_completion(self):
        logger.info(f"Book {self.book_id} completed in session {self.id}")
        self.completion_reached = True

    def view(self) -> Dict[str, Any]:
        """
        Current reader view; the completion flag is reported once
        """
        controller = self.controller
        completion_reached, self.completion_reached = self.completion_reached, False

        return {
            "session_id": self.id,
            "book_id": self.book_id,
            "title": self.title,
            "position": controller.position,
            "completed": controller.completed,
            "state": controller.state.value,
            "current_page": controller.current_page,
            "page_count": controller.page_count,
            "page_content": controller.page_text(),
            "can_go_previous": controller.can_go_previous,
            "can_go_next": controller.can_go_next,
            "completion_reached": completion_reached,
            "save_pending": self.debouncer.pending or self.debouncer.dirty,
            "save_error": self.save_error,
        }

    async def close(self) -> bool:
        return await self.controller.close()

class ReadingSessionManager:
    """Registry of open reading sessions, oldest evicted first"""

    def __init__(self, max_sessions: Optional[int] = None, clock: Optional[Clock] = None):
        self.max_sessions = max_sessions or settings.MAX_READING_SESSIONS
        self.clock = clock
        self._sessions: "OrderedDict[str, ReadingSession]" = OrderedDict()
        logger.info(f"Reading session manager initialised with capacity: {self.max_sessions}")

    def __len__(self) -> int:
        return len(self._sessions)

    async def open_session(self, material: ReadingMaterial, user_id: str, store: ProgressStore) -> ReadingSession:
        session = ReadingSession(material, user_id, store, clock=self.clock)
        self._sessions[session.id] = session

        while len(self._sessions) > self.max_sessions:
            _, oldest = self._sessions.popitem(last=False)
            logger.warning(f"Evicting reading session {oldest.id} for book {oldest.book_id}")
            await oldest.close()

        logger.info(f"Opened reading session {session.id} for book {session.book_id}")
        return session

    def get_session(self, session_id: str) -> ReadingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise ReadingSessionNotFoundException(session_id)
        self._sessions.move_to_end(session_id)
        return session

    async def close_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise ReadingSessionNotFoundException(session_id)

        saved = await session.close()
        logger.info(f"Closed reading session {session_id} (saved={saved})")
        return saved

    async def close_all(self):
        """Flush and close every open session, e.g. at shutdown"""
        closed = 0
        while self._sessions:
            _, session = self._sessions.popitem(last=False)
            await session.close()
            closed += 1

        if closed: logger.info(f"Closed {closed} reading sessions")

reading_sessions = ReadingSessionManager()
