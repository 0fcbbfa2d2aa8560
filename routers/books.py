import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

import crud, schemas
from database import get_db
from exceptions import BookNotFoundError, PersistenceError

router = APIRouter(prefix="/book", tags=["Books"])
logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "author", "publication")
# ids are stored as signed 64-bit integers
MAX_BOOK_ID = 2**63 - 1


def valid_book_id(book_id: str) -> int:
    if not (book_id.isascii() and book_id.isdigit()):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid book ID")

    parsed = int(book_id)
    if parsed <= 0 or parsed > MAX_BOOK_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid book ID")
    return parsed


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


# Get Books
@router.get("/", response_model=list[schemas.BookOut])
def get_books(db: Session = Depends(get_db)):
    try:
        return crud.get_all_books(db)
    except PersistenceError as exc:
        raise _server_error("Failed to retrieve books") from exc


# Get Book
@router.get("/{book_id}", response_model=schemas.BookOut)
def get_book(book_id: int = Depends(valid_book_id), db: Session = Depends(get_db)):
    try:
        return crud.get_book_by_id(db, book_id)
    except BookNotFoundError as exc:
        raise _not_found() from exc
    except PersistenceError as exc:
        raise _server_error("Failed to retrieve book") from exc


# Add Book
@router.post("/", response_model=schemas.BookOut, status_code=status.HTTP_201_CREATED)
def add_book(book: schemas.BookCreate, db: Session = Depends(get_db)):
    try:
        return crud.create_book(db, book)
    except PersistenceError as exc:
        raise _server_error("Failed to create book") from exc


@router.put("/{book_id}", response_model=schemas.BookOut)
def update_book(
    book: schemas.BookUpdate,
    book_id: int = Depends(valid_book_id),
    db: Session = Depends(get_db),
):
    try:
        db_book = crud.get_book_by_id(db, book_id)
    except BookNotFoundError as exc:
        raise _not_found() from exc
    except PersistenceError as exc:
        raise _server_error("Failed to retrieve book") from exc

    for field in UPDATABLE_FIELDS:
        value = getattr(book, field)
        if value:
            setattr(db_book, field, value)

    try:
        return crud.save_book(db, db_book)
    except PersistenceError as exc:
        raise _server_error("Failed to update book") from exc


@router.delete("/{book_id}", response_model=schemas.BookOut)
def delete_book(book_id: int = Depends(valid_book_id), db: Session = Depends(get_db)):
    try:
        deleted = crud.delete_book(db, book_id)
    except BookNotFoundError as exc:
        raise _not_found() from exc
    except PersistenceError as exc:
        raise _server_error("Failed to delete book") from exc

    logger.info("Deleted book %s", book_id)
    return deleted
