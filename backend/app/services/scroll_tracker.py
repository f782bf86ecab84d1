"""
ReadTrack Scroll Tracker - turns in-page scroll offsets into progress updates
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_NOISE_THRESHOLD = 5
DEFAULT_PROGRESS_CAP = 99.0

@dataclass(frozen=True)
class ScrollUpdate:
    """Outcome of a single scroll event"""
    should_update: bool
    new_position: Optional[float] = None
    new_baseline: Optional[int] = None

def scroll_percent(scroll_top: float, scroll_height: float, client_height: float) -> int:
    """
    Whole-number percentage scrolled through the visible page
    Args:
        scroll_top: Offset of the viewport from the top of the page
        scroll_height: Full height of the page content
        client_height: Height of the viewport
    Returns:
        Percentage in [0, 100]; content that fits the viewport counts as fully read
    """
    scrollable = scroll_height - client_height
    if scrollable <= 0: return 100

    ratio = scroll_top / scrollable
    if math.isnan(ratio): return 0

    ratio = max(0.0, min(1.0, ratio))
    return math.ceil(ratio * 100)

def evaluate_scroll(
    scroll_top: float,
    scroll_height: float,
    client_height: float,
    current_page: int,
    page_count: int,
    last_reported_percent: int,
    noise_threshold: int = DEFAULT_NOISE_THRESHOLD,
    progress_cap: float = DEFAULT_PROGRESS_CAP,
) -> ScrollUpdate:
    """
    Decide whether a scroll event moves the reading position
    Args:
        scroll_top: Offset of the viewport from the top of the page
        scroll_height: Full height of the page content
        client_height: Height of the viewport
        current_page: Zero-based page being read
        page_count: Number of pages in the layout
        last_reported_percent: Scroll percentage of the last accepted update
        noise_threshold: Minimum change in percentage points to accept
        progress_cap: Ceiling for scroll-driven overall progress
    Returns:
        ScrollUpdate with the new overall position and baseline when accepted
    """
    if not all(math.isfinite(v) for v in (scroll_top, scroll_height, client_height)):
        logger.warning(f"Ignoring scroll event with non-finite metrics: {scroll_top}, {scroll_height}, {client_height}")
        return ScrollUpdate(should_update=False)

    percent = scroll_percent(scroll_top, scroll_height, client_height)
    if abs(percent - last_reported_percent) < noise_threshold:
        return ScrollUpdate(should_update=False)

    page_count = max(1, int(page_count))
    current_page = max(0, min(page_count - 1, int(current_page)))

    overall = ((current_page + percent / 100) / page_count) * 100
    return ScrollUpdate(
        should_update=True,
        new_position=min(progress_cap, overall),
        new_baseline=percent,
    )

class ScrollTracker:
    """
    Noise-gated scroll filter holding the last reported scroll percentage
    """

    def __init__(self, noise_threshold: int = DEFAULT_NOISE_THRESHOLD, progress_cap: float = DEFAULT_PROGRESS_CAP):
        self.noise_threshold = noise_threshold
        self.progress_cap = progress_cap
        self.baseline = 0

    def on_scroll(
        self,
        scroll_top: float,
        scroll_height: float,
        client_height: float,
        current_page: int,
        page_count: int,
    ) -> ScrollUpdate:
        update = evaluate_scroll(
            scroll_top,
            scroll_height,
            client_height,
            current_page,
            page_count,
            self.baseline,
            noise_threshold=self.noise_threshold,
            progress_cap=self.progress_cap,
        )
        if update.should_update:
            self.baseline = update.new_baseline
            logger.debug(f"Scroll accepted at {update.new_baseline}% of page {current_page}")

        return update

    def reset(self):
        """Forget the baseline, e.g. after the page changed"""
        self.baseline = 0
