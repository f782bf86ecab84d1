"""
ReadTrack Book Management API Routes
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import ReadTrackException
from app.db.sqlite import get_db
from app.models.book import BookCreate, BookListResponse, BookListItem, BookResponse, BookUpdate, FavoriteResponse, FavoriteUpdate
from app.services.book_service import book_service
from app.services.progress_store import get_progress

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/", response_model=BookListResponse)
async def list_books(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    List all books in the library
    """
    try:
        books = book_service.list_books(db, settings.DEFAULT_USER_ID, skip=skip, limit=limit)
        book_items = [BookListItem(**book) for book in books]

        return BookListResponse(books=book_items, total=len(book_items))

    except Exception as e:
        logger.error(f"Failed to list books: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list books: {str(e)}"
        )

@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def add_book(book_create: BookCreate, db: Session = Depends(get_db)):
    """
    Add a book to the library
    """
    try:
        book = book_service.create_book(
            db,
            title=book_create.title,
            author=book_create.author,
            content=book_create.content,
            description=book_create.description
        )

        return BookResponse(**book_service.describe_book(book, None), message="Book added successfully")

    except Exception as e:
        logger.error(f"Failed to add book: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to add book: {str(e)}"
        )

@router.get("/completed/list", response_model=BookListResponse)
async def list_completed_books(db: Session = Depends(get_db)):
    """
    List books the reader has completed
    """
    try:
        books = [BookListItem(**book) for book in book_service.list_completed(db, settings.DEFAULT_USER_ID)]
        return BookListResponse(books=books, total=len(books))

    except Exception as e:
        logger.error(f"Failed to list completed books: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list completed books: {str(e)}"
        )

@router.get("/in-progress/list", response_model=BookListResponse)
async def list_in_progress_books(db: Session = Depends(get_db)):
    """
    List books the reader has started but not completed
    """
    try:
        books = [BookListItem(**book) for book in book_service.list_in_progress(db, settings.DEFAULT_USER_ID)]
        return BookListResponse(books=books, total=len(books))

    except Exception as e:
        logger.error(f"Failed to list in-progress books: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list in-progress books: {str(e)}"
        )

@router.get("/favorites/list", response_model=BookListResponse)
async def list_favorite_books(db: Session = Depends(get_db)):
    """
    List books the reader marked as favorite
    """
    try:
        books = [BookListItem(**book) for book in book_service.list_favorites(db, settings.DEFAULT_USER_ID)]
        return BookListResponse(books=books, total=len(books))

    except Exception as e:
        logger.error(f"Failed to list favorite books: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list favorite books: {str(e)}"
        )

@router.put("/favorite/{book_id}", response_model=FavoriteResponse)
async def set_favorite(book_id: str, favorite: FavoriteUpdate, db: Session = Depends(get_db)):
    """
    Mark or unmark a book as favorite
    """
    try:
        is_favorite = book_service.set_favorite(db, book_id, settings.DEFAULT_USER_ID, favorite.is_favorite)
        message = "Book added to favorites" if is_favorite else "Book removed from favorites"

        return FavoriteResponse(book_id=book_id, is_favorite=is_favorite, message=message)

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to update favorite: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update favorite: {str(e)}"
        )

@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: str, db: Session = Depends(get_db)):
    """
    Get information about a book
    """
    try:
        book = book_service.get_book(db, book_id)
        progress = get_progress(db, settings.DEFAULT_USER_ID, book_id)
        is_favorite = book_service.is_favorite(db, book_id, settings.DEFAULT_USER_ID)

        return BookResponse(**book_service.describe_book(book, progress, is_favorite))

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to get book: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get book: {str(e)}"
        )

@router.put("/{book_id}", response_model=BookResponse)
async def update_book(book_id: str, book_update: BookUpdate, db: Session = Depends(get_db)):
    """
    Update a book; new content repaginates it for the next reading session
    """
    try:
        book = book_service.update_book(
            db,
            book_id,
            title=book_update.title,
            author=book_update.author,
            description=book_update.description,
            content=book_update.content
        )
        user_id = settings.DEFAULT_USER_ID
        progress = get_progress(db, user_id, book_id)
        is_favorite = book_service.is_favorite(db, book_id, user_id)

        return BookResponse(**book_service.describe_book(book, progress, is_favorite), message="Book updated successfully")

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to update book: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update book: {str(e)}"
        )

@router.delete("/{book_id}")
async def delete_book(book_id: str, db: Session = Depends(get_db)):
    """
    Delete a book together with its reading progress
    """
    try:
        book_service.delete_book(db, book_id)
        return {"message": f"Book {book_id} deleted successfully"}

    except ReadTrackException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to delete book: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete book: {str(e)}"
        )
