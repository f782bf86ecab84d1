"""
ReadTrack Reader Session Pydantic Models
"""
from typing import Optional
from pydantic import BaseModel, Field

class SliderInput(BaseModel):
    """Request model for a slider drag"""
    value: float = Field(..., description="Slider value in percent; clamped to 0-100")

class ScrollInput(BaseModel):
    """Request model for a scroll event of the current page"""
    scroll_top: float = Field(..., description="Viewport offset from the top of the page")
    scroll_height: float = Field(..., description="Full height of the page content")
    client_height: float = Field(..., description="Height of the viewport")

class ReaderView(BaseModel):
    """Response model for the state of a reading session"""
    session_id: str
    book_id: str
    title: str
    position: float
    completed: bool
    state: str
    current_page: int
    page_count: int
    page_content: str
    can_go_previous: bool
    can_go_next: bool
    completion_reached: bool = False
    save_pending: bool = False
    save_error: Optional[str] = None

class SessionClosedResponse(BaseModel):
    """Response model for a closed reading session"""
    session_id: str
    saved: bool
