"""Book operations against an open session.

Each function runs one statement (delete runs a lookup first) and raises
exceptions from :mod:`exceptions` instead of returning sentinels.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models, schemas
from exceptions import BookNotFoundError, PersistenceError

logger = logging.getLogger(__name__)


def _live_books(db: Session):
    return db.query(models.Book).filter(models.Book.deleted_at.is_(None))


def create_book(db: Session, book: schemas.BookCreate) -> models.Book:
    new_book = models.Book(
        name=book.name,
        author=book.author,
        publication=book.publication,
    )
    try:
        db.add(new_book)
        db.commit()
        db.refresh(new_book)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to create book: %s", exc)
        raise PersistenceError("failed to create book") from exc
    return new_book


def get_all_books(db: Session) -> list[models.Book]:
    try:
        return _live_books(db).order_by(models.Book.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.error("Failed to list books: %s", exc)
        raise PersistenceError("failed to list books") from exc


def get_book_by_id(db: Session, book_id: int) -> models.Book:
    try:
        book = _live_books(db).filter(models.Book.id == book_id).first()
    except SQLAlchemyError as exc:
        logger.error("Failed to load book %s: %s", book_id, exc)
        raise PersistenceError(f"failed to load book {book_id}") from exc

    if book is None:
        raise BookNotFoundError(book_id)
    return book


def save_book(db: Session, book: models.Book) -> models.Book:
    """Write the record's in-memory state back to its row."""
    try:
        db.add(book)
        db.commit()
        db.refresh(book)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to save book %s: %s", book.id, exc)
        raise PersistenceError(f"failed to save book {book.id}") from exc
    return book


def delete_book(db: Session, book_id: int) -> schemas.BookOut:
    """Soft-delete a book and return it as it was before the delete.

    The lookup and the delete are separate statements; a concurrent delete
    in between goes unnoticed and the row is stamped again.
    """
    book = get_book_by_id(db, book_id)
    snapshot = schemas.BookOut.model_validate(book)

    try:
        book.deleted_at = func.now()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete book %s: %s", book_id, exc)
        raise PersistenceError(f"failed to delete book {book_id}") from exc
    return snapshot
