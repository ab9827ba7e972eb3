"""Pytest fixtures: a file-backed SQLite catalogue and an API client bound to it."""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from bookstore.auth.security import create_access_token, hash_password
from bookstore.config import Settings, get_settings
from bookstore.main import app
from bookstore.storage import create_engine_for, get_session_factory, init_db, make_session_factory, unit_of_work
from bookstore.tables import BookRow, GenreRow, UserRow, utcnow


@pytest.fixture
def engine(tmp_path):
    engine = create_engine_for(f"sqlite:///{tmp_path / 'bookstore.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", jwt_secret="test-secret")


@pytest.fixture
def seeded(factory) -> SimpleNamespace:
    with unit_of_work(factory) as session:
        fiction = GenreRow(name="Fiction")
        poetry = GenreRow(name="Poetry")
        session.add_all([fiction, poetry])
        session.flush()

        dune = BookRow(title="Dune", writer="Frank Herbert", publisher="Chilton",
                       publication_year=1965, price=Decimal("10.00"), stock_quantity=5, genre_id=fiction.id)
        emma = BookRow(title="Emma", writer="Jane Austen", publisher="John Murray",
                       publication_year=1815, price=Decimal("25.50"), stock_quantity=2, genre_id=fiction.id)
        odes = BookRow(title="Odes", writer="John Keats", publisher="Taylor",
                       publication_year=1819, price=Decimal("7.00"), stock_quantity=0, genre_id=poetry.id)
        gone = BookRow(title="Gone", writer="Nobody", publisher="Void",
                       publication_year=2000, price=Decimal("3.00"), stock_quantity=10, genre_id=fiction.id,
                       deleted_at=utcnow())
        buyer = UserRow(username="buyer", email="buyer@example.com", password=hash_password("s3cret"))
        session.add_all([dune, emma, odes, gone, buyer])
        session.flush()

        return SimpleNamespace(
            fiction=fiction.id,
            poetry=poetry.id,
            dune=dune.id,
            emma=emma.id,
            odes=odes.id,
            gone=gone.id,
            user=buyer.id,
        )


@pytest.fixture
def client(factory, settings):
    app.dependency_overrides[get_session_factory] = lambda: factory
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(seeded, settings) -> dict:
    token = create_access_token(seeded.user, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def stock(factory):
    def _stock(book_id: str) -> int:
        with factory() as session:
            return session.get(BookRow, book_id).stock_quantity

    return _stock
