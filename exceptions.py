"""Errors raised by the persistence and entity layers.

Handlers translate these into HTTP responses; nothing below the router
knows about status codes.
"""


class BookstoreError(Exception):
    """Base class for all bookstore errors."""


class BookNotFoundError(BookstoreError):
    """No live book row matches the requested id."""

    def __init__(self, book_id: int):
        self.book_id = book_id
        super().__init__(f"book {book_id} not found")


class PersistenceError(BookstoreError):
    """A query or write against the database failed."""


class DatabaseConnectionError(PersistenceError):
    """The configured database could not be reached at startup."""
