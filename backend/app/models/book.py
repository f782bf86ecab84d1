"""
ReadTrack Book Pydantic Models
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    """Request model for adding a book"""

    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    description: Optional[str] = None
    content: str = ""


class BookUpdate(BaseModel):
    """Request model for updating a book; omitted fields stay unchanged"""

    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None


class FavoriteUpdate(BaseModel):
    """Request model for marking a book as favorite"""

    is_favorite: bool


class FavoriteResponse(BaseModel):
    """Response model for a favorite change"""

    book_id: str
    is_favorite: bool
    message: str


class BookBase(BaseModel):
    """Base model for book data"""

    id: str
    title: str
    author: str
    description: Optional[str] = None


class BookListItem(BookBase):
    """Book item in list response"""

    content_length: int
    page_count: int
    current_position: float
    is_completed: bool
    is_favorite: bool = False
    last_read_at: Optional[datetime] = None


class BookListResponse(BaseModel):
    """Response model for listing books"""

    books: List[BookListItem]
    total: int


class BookResponse(BookListItem):
    """Response model for book creation and lookup"""

    message: Optional[str] = None
