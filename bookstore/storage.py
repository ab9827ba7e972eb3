# bookstore/storage.py
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings
from .errors import PersistenceFailure
from .tables import Base


logger = logging.getLogger(__name__)

_session_factory: Optional[sessionmaker] = None


def create_engine_for(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are handed to worker threads; writers wait on the file lock.
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    # Committed rows stay readable after the session closes (responses are
    # built from them).
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def get_session_factory() -> sessionmaker:
    """FastAPI dependency returning the process-wide session factory."""
    global _session_factory
    if _session_factory is None:
        engine = create_engine_for(get_settings().database_url)
        init_db(engine)
        _session_factory = make_session_factory(engine)
    return _session_factory


@contextmanager
def unit_of_work(factory: sessionmaker) -> Iterator[Session]:
    """Run a block of writes as one transaction.

    Commits when the block exits cleanly and rolls everything back when
    it raises. Store errors are re-raised as ``PersistenceFailure`` so
    that callers never see driver details.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Unit of work aborted by the store: %s", exc)
        raise PersistenceFailure() from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def read_session(factory: sessionmaker) -> Iterator[Session]:
    """Session for read-only work; never commits."""
    session = factory()
    try:
        yield session
    except SQLAlchemyError as exc:
        logger.error("Read failed: %s", exc)
        raise PersistenceFailure() from exc
    finally:
        session.rollback()
        session.close()
