import pytest
from fastapi.testclient import TestClient

from database import Database
from main import create_app

TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def database():
    db = Database(TEST_DATABASE_URL)
    db.auto_migrate()
    yield db
    db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(database):
    app = create_app(database)
    with TestClient(app) as c:
        yield c
