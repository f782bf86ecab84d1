"""
ReadTrack Pagination Service - splits book content into fixed pages
"""
import logging
import math
from dataclasses import dataclass
from typing import Iterator, Tuple
from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TARGET_PAGE_SIZE = 3000

@dataclass(frozen=True)
class PageLayout:
    """Fixed page boundaries over a flat character sequence"""
    content_length: int
    page_count: int
    page_size: int

    def clamp_page_index(self, page_index: int) -> int:
        return max(0, min(self.page_count - 1, int(page_index)))

    def page_range(self, page_index: int) -> Tuple[int, int]:
        """
        Half-open character range of a page
        Args:
            page_index: Zero-based page index, clamped into range
        Returns:
            (start, end) offsets, end exclusive and clipped to the content length
        """
        page_index = self.clamp_page_index(page_index)
        start = min(page_index * self.page_size, self.content_length)
        end = min((page_index + 1) * self.page_size, self.content_length)
        return start, end

    def page_ranges(self) -> Iterator[Tuple[int, int]]:
        for page_index in range(self.page_count):
            yield self.page_range(page_index)

def compute_layout(content_length: int, target_page_size: int = DEFAULT_TARGET_PAGE_SIZE) -> PageLayout:
    """
    Compute page boundaries for content of a given length
    Args:
        content_length: Number of characters in the content
        target_page_size: Desired number of characters per page
    Returns:
        PageLayout with at least one page, even for empty content
    """
    content_length = max(0, int(content_length))
    target_page_size = max(1, int(target_page_size))

    page_count = max(1, math.ceil(content_length / target_page_size))
    page_size = math.ceil(content_length / page_count)

    return PageLayout(content_length=content_length, page_count=page_count, page_size=page_size)

def layout_for_content(content: str, target_page_size: int | None = None) -> PageLayout:
    if target_page_size is None: target_page_size = settings.TARGET_PAGE_SIZE
    return compute_layout(len(content), target_page_size)

def page_content(content: str, layout: PageLayout, page_index: int) -> str:
    """Text of a single page"""
    start, end = layout.page_range(page_index)
    return content[start:end]
