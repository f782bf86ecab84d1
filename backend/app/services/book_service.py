"""
ReadTrack Book Service - library access and reading material lookup
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Any, Optional, Tuple
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import BookNotFoundException
from app.db.models import Book, Favorite, ReadingProgress
from app.services.pagination_service import layout_for_content

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ReadingMaterial:
    """Everything a reading session needs to start"""
    book_id: str
    title: str
    content: str
    current_position: float
    is_completed: bool

class BookService:
    """Service for the book library and per-user progress listings"""

    def __init__(self):
        self.target_page_size = settings.TARGET_PAGE_SIZE
        logger.info(f"Book service initialised with target page size: {self.target_page_size}")

    def get_book(self, db: Session, book_id: str) -> Book:
        book = db.query(Book).filter(Book.id == book_id).first()
        if not book:
            raise BookNotFoundException(book_id)
        return book

    def create_book(self, db: Session, title: str, author: str, content: str, description: Optional[str] = None) -> Book:
        book = Book(title=title, author=author, content=content, description=description)
        db.add(book)
        db.commit()
        db.refresh(book)
        logger.info(f"Added book {book.id}: {book.title} ({len(content)} chars)")
        return book

    def delete_book(self, db: Session, book_id: str):
        book = self.get_book(db, book_id)
        db.delete(book)
        db.commit()
        logger.info(f"Deleted book {book_id}")

    def update_book(
        self,
        db: Session,
        book_id: str,
        title: Optional[str] = None,
        author: Optional[str] = None,
        description: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Book:
        """
        Update the given fields of a book
        Args:
            db: Database session
            book_id: ID of the book to update
            title, author, description, content: New values; None keeps the current one
        Returns:
            The updated book
        """
        book = self.get_book(db, book_id)

        if title is not None: book.title = title
        if author is not None: book.author = author
        if description is not None: book.description = description
        if content is not None:
            # stored positions are percentages and stay valid for the new layout
            book.content = content

        db.commit()
        db.refresh(book)
        logger.info(f"Updated book {book_id}: {book.title} ({len(book.content or '')} chars)")
        return book

    def set_favorite(self, db: Session, book_id: str, user_id: str, is_favorite: bool) -> bool:
        """Mark or unmark a book as favorite; repeating either is harmless"""
        self.get_book(db, book_id)
        favorite = self._favorite_for(db, book_id, user_id)

        if is_favorite and favorite is None:
            db.add(Favorite(user_id=user_id, book_id=book_id))
        elif not is_favorite and favorite is not None:
            db.delete(favorite)

        db.commit()
        logger.info(f"Book {book_id} favorite={is_favorite} for user {user_id}")
        return is_favorite

    def is_favorite(self, db: Session, book_id: str, user_id: str) -> bool:
        return self._favorite_for(db, book_id, user_id) is not None

    def _favorite_for(self, db: Session, book_id: str, user_id: str) -> Optional[Favorite]:
        return db.query(Favorite).filter(
            Favorite.book_id == book_id,
            Favorite.user_id == user_id
        ).first()

    def get_reading_material(self, db: Session, book_id: str, user_id: str) -> ReadingMaterial:
        """
        Load a book with the reader's stored progress
        Args:
            db: Database session
            book_id: ID of the book to open
            user_id: Reader identifier
        Returns:
            ReadingMaterial, defaulting to position 0 and not completed
        """
        book = self.get_book(db, book_id)
        progress = self._progress_for(db, book_id, user_id)

        return ReadingMaterial(
            book_id=str(book.id),
            title=str(book.title),
            content=book.content or "",
            current_position=progress.current_position if progress else 0.0,
            is_completed=bool(progress.is_completed) if progress else False,
        )

    def _progress_for(self, db: Session, book_id: str, user_id: str) -> Optional[ReadingProgress]:
        return db.query(ReadingProgress).filter(
            ReadingProgress.book_id == book_id,
            ReadingProgress.user_id == user_id
        ).first()

    def describe_book(self, book: Book, progress: Optional[ReadingProgress], is_favorite: bool = False) -> Dict[str, Any]:
        """Library listing entry of a book with the reader's progress"""
        layout = layout_for_content(book.content or "", self.target_page_size)
        return {
            "id": str(book.id),
            "title": str(book.title),
            "author": str(book.author),
            "description": book.description,
            "content_length": layout.content_length,
            "page_count": layout.page_count,
            "current_position": progress.current_position if progress else 0.0,
            "is_completed": bool(progress.is_completed) if progress else False,
            "is_favorite": bool(is_favorite),
            "last_read_at": progress.last_read_at if progress else None,
        }

    def list_books(self, db: Session, user_id: str, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        rows = self._library_query(db, user_id).order_by(Book.created_at.desc()).offset(skip).limit(limit).all()
        return self._describe_rows(rows)

    def list_completed(self, db: Session, user_id: str) -> List[Dict[str, Any]]:
        return self._list_by_completion(db, user_id, True)

    def list_in_progress(self, db: Session, user_id: str) -> List[Dict[str, Any]]:
        return self._list_by_completion(db, user_id, False)

    def list_favorites(self, db: Session, user_id: str) -> List[Dict[str, Any]]:
        """Favorite books of a reader, most recently marked first"""
        rows = (
            self._library_query(db, user_id)
            .filter(Favorite.id.isnot(None))
            .order_by(Favorite.created_at.desc())
            .all()
        )
        return self._describe_rows(rows)

    def _list_by_completion(self, db: Session, user_id: str, completed: bool) -> List[Dict[str, Any]]:
        rows = (
            self._library_query(db, user_id)
            .filter(ReadingProgress.id.isnot(None), ReadingProgress.is_completed == completed)
            .order_by(ReadingProgress.last_read_at.desc())
            .all()
        )
        return self._describe_rows(rows)

    def _describe_rows(self, rows: List[Tuple[Book, Optional[ReadingProgress], Optional[str]]]) -> List[Dict[str, Any]]:
        return [self.describe_book(book, progress, favorite_id is not None) for book, progress, favorite_id in rows]

    def _library_query(self, db: Session, user_id: str):
        return (
            db.query(Book, ReadingProgress, Favorite.id)
            .outerjoin(ReadingProgress, (ReadingProgress.book_id == Book.id) & (ReadingProgress.user_id == user_id))
            .outerjoin(Favorite, (Favorite.book_id == Book.id) & (Favorite.user_id == user_id))
        )

book_service = BookService()
