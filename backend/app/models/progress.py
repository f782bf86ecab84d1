"""
ReadTrack Reading Progress Pydantic Models
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class ProgressUpdate(BaseModel):
    """Request model for a direct progress update"""
    current_position: float = Field(..., description="Overall progress percentage, clamped to 0-100")
    is_completed: bool = False

class ProgressResponse(BaseModel):
    """Response model for reading progress"""
    model_config = ConfigDict(from_attributes=True)

    book_id: str
    current_position: float
    is_completed: bool
    current_page: int
    page_count: int
    last_read_at: Optional[datetime] = None
