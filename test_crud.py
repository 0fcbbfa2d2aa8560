import pytest
from sqlalchemy.exc import OperationalError

import crud, models, schemas
from database import Database
from exceptions import BookNotFoundError, DatabaseConnectionError, PersistenceError


def _book(name="Dune", author="Herbert", publication="Chilton"):
    return schemas.BookCreate(name=name, author=author, publication=publication)


def test_create_assigns_id(db_session):
    first = crud.create_book(db_session, _book())
    second = crud.create_book(db_session, _book(name="Children of Dune"))
    assert first.id is not None
    assert second.id > first.id
    assert first.created_at is not None
    assert first.deleted_at is None


def test_get_all_books_empty(db_session):
    assert crud.get_all_books(db_session) == []


def test_get_all_books_in_insertion_order(db_session):
    names = ["A", "B", "C"]
    for name in names:
        crud.create_book(db_session, _book(name=name))
    assert [book.name for book in crud.get_all_books(db_session)] == names


def test_get_book_by_id_missing(db_session):
    with pytest.raises(BookNotFoundError) as excinfo:
        crud.get_book_by_id(db_session, 12345)
    assert excinfo.value.book_id == 12345


def test_save_book_persists_changes(db_session):
    book = crud.create_book(db_session, _book())
    book.publication = "Ace"
    crud.save_book(db_session, book)

    db_session.expire_all()
    assert crud.get_book_by_id(db_session, book.id).publication == "Ace"


def test_delete_is_soft(db_session):
    book = crud.create_book(db_session, _book())
    book_id = book.id

    snapshot = crud.delete_book(db_session, book_id)
    assert snapshot.id == book_id
    assert snapshot.name == "Dune"
    assert snapshot.deleted_at is None

    with pytest.raises(BookNotFoundError):
        crud.get_book_by_id(db_session, book_id)
    assert crud.get_all_books(db_session) == []

    row = db_session.query(models.Book).filter(models.Book.id == book_id).one()
    assert row.deleted_at is not None


def test_delete_missing_book(db_session):
    with pytest.raises(BookNotFoundError):
        crud.delete_book(db_session, 99)


def test_query_failure_raises_persistence_error(db_session, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "query", broken_query)
    with pytest.raises(PersistenceError):
        crud.get_all_books(db_session)
    with pytest.raises(PersistenceError):
        crud.get_book_by_id(db_session, 1)


def test_create_failure_rolls_back(db_session, monkeypatch):
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with pytest.raises(PersistenceError):
        crud.create_book(db_session, _book())

    monkeypatch.undo()
    assert crud.get_all_books(db_session) == []


def test_delete_failure_rolls_back(db_session, monkeypatch):
    book = crud.create_book(db_session, _book())
    book_id = book.id

    def broken_commit():
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with pytest.raises(PersistenceError):
        crud.delete_book(db_session, book_id)

    monkeypatch.undo()
    live = crud.get_book_by_id(db_session, book_id)
    assert live.deleted_at is None


def test_connect_failure_is_fatal():
    database = Database("sqlite:////nonexistent-dir/for/sure/books.db")
    with pytest.raises(DatabaseConnectionError):
        database.connect()
    database.dispose()
