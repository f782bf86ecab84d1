"""
ReadTrack Progress Controller - reading state machine for one reading session
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional
from app.services.pagination_service import PageLayout, compute_layout, page_content, DEFAULT_TARGET_PAGE_SIZE
from app.services.position_service import (
    clamp_position,
    clamp_to_page,
    page_index_from_position,
    position_from_page_index,
)
from app.services.save_debouncer import SaveDebouncer
from app.services.scroll_tracker import ScrollTracker, ScrollUpdate, DEFAULT_NOISE_THRESHOLD, DEFAULT_PROGRESS_CAP

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_THRESHOLD = 99.0

class ReaderState(str, enum.Enum):
    READING = "reading"
    COMPLETED = "completed"

@dataclass(frozen=True)
class ProgressSnapshot:
    """Persistable reading progress"""
    position: float
    completed: bool

class ProgressController:
    """
    Reconciles page navigation, slider input and scrolling into one position

    The position percentage is the only stored coordinate; the current page
    is always derived from it. Every change of (position, completed) is
    handed to the save debouncer, and the completion callback runs at most
    once per controller.
    """

    def __init__(
        self,
        content: str,
        current_position: float = 0.0,
        is_completed: bool = False,
        target_page_size: int = DEFAULT_TARGET_PAGE_SIZE,
        debouncer: Optional[SaveDebouncer] = None,
        on_completion: Optional[Callable[[], None]] = None,
        scroll_tracker: Optional[ScrollTracker] = None,
        completion_threshold: float = DEFAULT_COMPLETION_THRESHOLD,
    ):
        self.content = content
        self.layout: PageLayout = compute_layout(len(content), target_page_size)
        self.debouncer = debouncer
        self.on_completion = on_completion
        self.scroll_tracker = scroll_tracker or ScrollTracker(DEFAULT_NOISE_THRESHOLD, DEFAULT_PROGRESS_CAP)
        self.completion_threshold = completion_threshold

        self._position = 0.0
        self._completed = False
        self._completion_notified = False
        self.resume(current_position, is_completed)

    @property
    def position(self) -> float:
        return self._position

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def state(self) -> ReaderState:
        return ReaderState.COMPLETED if self._completed else ReaderState.READING

    @property
    def page_count(self) -> int:
        return self.layout.page_count

    @property
    def current_page(self) -> int:
        return page_index_from_position(self._position, self.layout.page_count)

    @property
    def is_last_page(self) -> bool:
        return self.current_page == self.page_count - 1

    @property
    def can_go_previous(self) -> bool:
        return self.current_page > 0

    @property
    def can_go_next(self) -> bool:
        return not (self._completed and self.is_last_page)

    @property
    def completion_notified(self) -> bool:
        return self._completion_notified

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(position=self._position, completed=self._completed)

    def page_text(self) -> str:
        """Content of the current page"""
        return page_content(self.content, self.layout, self.current_page)

    def resume(self, current_position: float, is_completed: bool):
        """
        Seed state from previously stored progress
        Args:
            current_position: Stored overall progress (0-100)
            is_completed: Stored completion flag
        """
        self._position = clamp_position(current_position)
        self._completed = bool(is_completed)
        # a work finished in an earlier session is not congratulated again
        self._completion_notified = self._completed
        self.scroll_tracker.reset()

        if self.debouncer is not None:
            self.debouncer.mark_saved(self.snapshot())

        logger.debug(f"Resumed at {self._position:.2f}% (page {self.current_page + 1}/{self.page_count}, completed={self._completed})")

    def navigate_previous(self) -> bool:
        """
        Go to the start of the previous page
        Returns:
            True when the state changed
        """
        page = self.current_page
        if page <= 0: return False

        return self._apply(position_from_page_index(page - 1, self.page_count), False)

    def navigate_next(self) -> bool:
        """
        Go to the start of the next page, or complete the work on the last page
        Returns:
            True when the state changed
        """
        page = self.current_page
        if page < self.page_count - 1:
            # arriving on the last page does not complete; a further Next does
            return self._apply(position_from_page_index(page + 1, self.page_count), self._completed)

        return self._apply(self._position, True)

    def set_slider(self, value: float) -> bool:
        """
        Jump to a slider value; values at the threshold or above complete the work
        Returns:
            True when the state changed
        """
        value = clamp_position(value)
        return self._apply(value, value >= self.completion_threshold)

    def on_scroll(self, scroll_top: float, scroll_height: float, client_height: float) -> ScrollUpdate:
        """
        Feed a raw scroll event of the current page
        Returns:
            The scroll tracker's decision
        """
        page = self.current_page
        update = self.scroll_tracker.on_scroll(scroll_top, scroll_height, client_height, page, self.page_count)
        if not update.should_update: return update

        # scrolling stays on the page being read and never touches completion
        position = clamp_to_page(update.new_position, page, self.page_count)
        self._apply(position, self._completed, reset_scroll=False)
        return update

    def _apply(self, position: float, completed: bool, reset_scroll: bool = True) -> bool:
        previous_page = self.current_page
        was_completed = self._completed
        if position == self._position and completed == was_completed: return False

        self._position = position
        self._completed = completed

        if reset_scroll and self.current_page != previous_page:
            self.scroll_tracker.reset()

        logger.debug(f"Progress now {self._position:.2f}% (page {self.current_page + 1}/{self.page_count}, completed={self._completed})")

        if completed and not was_completed and not self._completion_notified:
            self._completion_notified = True
            if self.on_completion is not None:
                try:
                    self.on_completion()
                except Exception as e:
                    logger.error(f"Completion callback failed: {str(e)}", exc_info=True)

        if self.debouncer is not None:
            self.debouncer.schedule(self.snapshot())

        return True

    async def flush(self) -> bool:
        if self.debouncer is None: return True
        return await self.debouncer.flush()

    async def close(self) -> bool:
        """Cancel pending saves and attempt a final flush"""
        if self.debouncer is None: return True
        return await self.debouncer.close()
