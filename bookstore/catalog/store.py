"""
Data access for the catalogue.

Every function takes an open SQLAlchemy ``Session`` and leaves
transaction boundaries to the caller (see ``storage.unit_of_work``).
Soft-deleted rows (``deleted_at`` set) are invisible to every lookup
here. Missing rows are reported as ``None``; conflicting writes (a
duplicate genre name, a live book with the same title, an unknown
genre) raise ``ValueError`` with a message suitable for the client.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.orm import Session, selectinload

from ..tables import BookRow, GenreRow, utcnow


# ---------------------------------------------------------------------------
# Books


def find_books_by_ids(session: Session, ids: Iterable[str]) -> Dict[str, BookRow]:
    """Resolve many book ids in a single query.

    Parameters
    ----------
    session : Session
        Open session.
    ids : Iterable[str]
        Book identifiers; duplicates are ignored.

    Returns
    -------
    Dict[str, BookRow]
        Live books keyed by id. Ids with no live book are simply absent
        from the mapping.
    """
    wanted = sorted(set(ids))
    if not wanted:
        return {}
    stmt = select(BookRow).where(BookRow.id.in_(wanted), BookRow.deleted_at.is_(None))
    return {book.id: book for book in session.scalars(stmt)}


def get_book(session: Session, book_id: str) -> Optional[BookRow]:
    stmt = (
        select(BookRow)
        .options(selectinload(BookRow.genre))
        .where(BookRow.id == book_id, BookRow.deleted_at.is_(None))
    )
    return session.scalars(stmt).first()


def _like_pattern(term: str) -> str:
    """Substring pattern for ``LIKE`` with ``%``, ``_`` and ``\\`` matched literally."""
    term = term.strip().lower()
    for ch in ("\\", "%", "_"):
        term = term.replace(ch, "\\" + ch)
    return f"%{term}%"


def _book_filters(search: Optional[str], genre_id: Optional[str], fields) -> list:
    clauses = [BookRow.deleted_at.is_(None)]
    if search:
        pattern = _like_pattern(search)
        clauses.append(or_(*[func.lower(col).like(pattern, escape="\\") for col in fields]))
    if genre_id:
        clauses.append(BookRow.genre_id == genre_id)
    return clauses


def search_books(
    session: Session,
    search: Optional[str] = None,
    genre_id: Optional[str] = None,
    order_by_title: Optional[str] = "desc",
    order_by_publish_date: Optional[str] = "asc",
    page: int = 1,
    limit: int = 10,
    search_publisher: bool = True,
) -> Tuple[List[BookRow], int]:
    """Filter, sort and paginate live books.

    Parameters
    ----------
    search : Optional[str]
        Case-insensitive substring matched against title and writer
        (and publisher unless ``search_publisher`` is false).
    genre_id : Optional[str]
        Restrict to one genre.
    order_by_title, order_by_publish_date : Optional[str]
        ``"asc"``/``"desc"``; applied in that order. When both are empty
        the newest books come first.
    page : int
        1-indexed page number.
    limit : int
        Page size.

    Returns
    -------
    Tuple[List[BookRow], int]
        The requested page and the number of matching books before
        pagination.
    """
    fields = [BookRow.title, BookRow.writer]
    if search_publisher:
        fields.append(BookRow.publisher)
    clauses = _book_filters(search, genre_id, fields)

    ordering = []
    if order_by_title:
        ordering.append(asc(BookRow.title) if order_by_title == "asc" else desc(BookRow.title))
    if order_by_publish_date:
        ordering.append(
            asc(BookRow.publication_year)
            if order_by_publish_date == "asc"
            else desc(BookRow.publication_year)
        )
    if not ordering:
        ordering.append(desc(BookRow.created_at))

    total = session.scalar(select(func.count()).select_from(BookRow).where(*clauses)) or 0
    stmt = (
        select(BookRow)
        .options(selectinload(BookRow.genre))
        .where(*clauses)
        .order_by(*ordering)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(session.scalars(stmt)), total


def _title_taken(session: Session, title: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(BookRow.id).where(BookRow.title == title, BookRow.deleted_at.is_(None))
    if exclude_id is not None:
        stmt = stmt.where(BookRow.id != exclude_id)
    return session.scalar(stmt) is not None


def create_book(session: Session, data: dict) -> BookRow:
    if _title_taken(session, data["title"]):
        raise ValueError("Book title already exists")
    if get_genre(session, data["genre_id"]) is None:
        raise ValueError("Invalid genre_id")
    now = utcnow()
    book = BookRow(created_at=now, updated_at=now, **data)
    session.add(book)
    session.flush()
    return book


def update_book(session: Session, book: BookRow, changes: dict) -> BookRow:
    if "title" in changes and _title_taken(session, changes["title"], exclude_id=book.id):
        raise ValueError("Book title already exists")
    if "genre_id" in changes and get_genre(session, changes["genre_id"]) is None:
        raise ValueError("Invalid genre_id")
    for field, value in changes.items():
        setattr(book, field, value)
    book.updated_at = utcnow()
    session.flush()
    return book


def soft_delete_book(session: Session, book: BookRow) -> None:
    now = utcnow()
    book.deleted_at = now
    book.updated_at = now
    session.flush()


# ---------------------------------------------------------------------------
# Genres


def get_genre(session: Session, genre_id: str) -> Optional[GenreRow]:
    stmt = select(GenreRow).where(GenreRow.id == genre_id, GenreRow.deleted_at.is_(None))
    return session.scalars(stmt).first()


def live_books_of(session: Session, genre: GenreRow) -> List[BookRow]:
    stmt = (
        select(BookRow)
        .options(selectinload(BookRow.genre))
        .where(BookRow.genre_id == genre.id, BookRow.deleted_at.is_(None))
        .order_by(BookRow.title)
    )
    return list(session.scalars(stmt))


def search_genres(
    session: Session,
    search: Optional[str] = None,
    order_by_name: str = "asc",
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[GenreRow], int]:
    clauses = [GenreRow.deleted_at.is_(None)]
    if search:
        clauses.append(func.lower(GenreRow.name).like(_like_pattern(search), escape="\\"))
    total = session.scalar(select(func.count()).select_from(GenreRow).where(*clauses)) or 0
    ordering = asc(GenreRow.name) if order_by_name == "asc" else desc(GenreRow.name)
    stmt = (
        select(GenreRow)
        .where(*clauses)
        .order_by(ordering)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(session.scalars(stmt)), total


def _genre_name_taken(session: Session, name: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(GenreRow.id).where(GenreRow.name == name, GenreRow.deleted_at.is_(None))
    if exclude_id is not None:
        stmt = stmt.where(GenreRow.id != exclude_id)
    return session.scalar(stmt) is not None


def create_genre(session: Session, name: str) -> GenreRow:
    if _genre_name_taken(session, name):
        raise ValueError("Genre already exists")
    now = utcnow()
    genre = GenreRow(name=name, created_at=now, updated_at=now)
    session.add(genre)
    session.flush()
    return genre


def update_genre(session: Session, genre: GenreRow, name: Optional[str]) -> GenreRow:
    if name is not None:
        if _genre_name_taken(session, name, exclude_id=genre.id):
            raise ValueError("Genre already exists")
        genre.name = name
    genre.updated_at = utcnow()
    session.flush()
    return genre


def soft_delete_genre(session: Session, genre: GenreRow) -> None:
    now = utcnow()
    genre.deleted_at = now
    genre.updated_at = now
    session.flush()
