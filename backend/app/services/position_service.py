"""
ReadTrack Position Service - conversions between percentage progress and pages
"""
import math

MIN_POSITION = 0.0
MAX_POSITION = 100.0

# absorbs float error so page starts always derive back to their own page
BOUNDARY_TOLERANCE = 1e-9
# scroll positions stay this far (in percent) below the next page start
PAGE_EDGE_MARGIN = 1e-6

def clamp_position(position: float) -> float:
    """
    Clamp a percentage into the valid progress range
    Args:
        position: Raw percentage, possibly out of range or NaN
    Returns:
        Percentage in [0, 100]; NaN maps to 0
    """
    try:
        position = float(position)
    except (TypeError, ValueError):
        return MIN_POSITION

    if math.isnan(position): return MIN_POSITION
    return max(MIN_POSITION, min(MAX_POSITION, position))

def page_index_from_position(position: float, page_count: int) -> int:
    """
    Page containing a percentage position
    Args:
        position: Overall progress (0-100)
        page_count: Number of pages in the layout
    Returns:
        Zero-based page index; position 100 maps to the last page
    """
    page_count = max(1, int(page_count))
    position = clamp_position(position)

    return min(page_count - 1, math.floor((position / 100) * page_count + BOUNDARY_TOLERANCE))

def position_from_page_index(page_index: int, page_count: int) -> float:
    """
    Percentage at the start of a page
    Args:
        page_index: Zero-based page index
        page_count: Number of pages in the layout
    Returns:
        Overall progress (0-100) anchored at the page start
    """
    page_count = max(1, int(page_count))
    page_index = max(0, min(page_count - 1, int(page_index)))

    return (page_index / page_count) * 100

def clamp_to_page(position: float, page_index: int, page_count: int) -> float:
    """
    Keep a position inside the percentage range of one page
    Args:
        position: Candidate overall progress
        page_index: Page the position must stay on
        page_count: Number of pages in the layout
    Returns:
        Position limited to [page start, next page start)
    """
    page_count = max(1, int(page_count))
    page_index = max(0, min(page_count - 1, int(page_index)))

    lower = position_from_page_index(page_index, page_count)
    position = max(clamp_position(position), lower)
    if page_index == page_count - 1: return position

    upper = ((page_index + 1) / page_count) * 100 - PAGE_EDGE_MARGIN
    position = max(lower, min(position, upper))
    while position > lower and page_index_from_position(position, page_count) > page_index:
        position = math.nextafter(position, lower)

    return position
