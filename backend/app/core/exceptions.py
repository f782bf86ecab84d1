"""
ReadTrack Custom Exception Classes
"""
from fastapi import status

class ReadTrackException(Exception):
    """Base exception for ReadTrack application"""

    def __init__(
        self,
        detail: str = "An error occurred",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        self.detail = detail
        self.status_code = status_code
        super().__init__(self.detail)

class BookNotFoundException(ReadTrackException):
    """Exception raised when a requested book is not found"""

    def __init__(self, book_id: str):
        super().__init__(
            detail=f"Book with ID {book_id} not found",
            status_code=status.HTTP_404_NOT_FOUND
        )

class ReadingSessionNotFoundException(ReadTrackException):
    """Exception raised when a reading session is unknown or already closed"""

    def __init__(self, session_id: str):
        super().__init__(
            detail=f"Reading session {session_id} not found",
            status_code=status.HTTP_404_NOT_FOUND
        )

class ProgressStoreException(ReadTrackException):
    """Exception raised when reading progress cannot be persisted"""

    def __init__(self, detail: str = "Failed to save reading progress"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

class DatabaseException(ReadTrackException):
    """Exception raised when database operations fail"""

    def __init__(self, detail: str = "Database operation failed"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
