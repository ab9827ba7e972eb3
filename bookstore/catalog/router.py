"""
Route definitions for the catalogue API.

Endpoints under /books:
- GET    /books                   : list books with search, genre filter and sorting
- GET    /books/{book_id}         : one book
- GET    /books/genre/{genre_id}  : books of one genre
- POST   /books                   : add a book (bearer)
- PATCH  /books/{book_id}         : edit a book (bearer)
- DELETE /books/{book_id}         : soft-delete a book (bearer)

Endpoints under /genre:
- GET    /genre                   : list genres
- GET    /genre/{genre_id}        : one genre with its books
- POST   /genre                   : add a genre (bearer)
- PATCH  /genre/{genre_id}        : rename a genre (bearer)
- DELETE /genre/{genre_id}        : soft-delete a genre (bearer)
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import sessionmaker
from typing_extensions import Literal

from ..auth import current_identity
from ..models import ApiResponse, PageMeta, PaginatedResponse
from ..storage import get_session_factory, read_session, unit_of_work
from . import store
from .schemas import (
    BookCreate,
    BookOut,
    BookStamp,
    BookUpdate,
    GenreCreate,
    GenreDetail,
    GenreOut,
    GenreUpdate,
)


logger = logging.getLogger(__name__)

SortOrder = Literal["asc", "desc"]

books_router = APIRouter(prefix="/books", tags=["books"])
genres_router = APIRouter(prefix="/genre", tags=["genres"])


# ---------------------------------------------------------------------------
# Books


@books_router.get("", response_model=PaginatedResponse[BookOut])
def list_books(
    page: int = Query(default=1, ge=1, description="Current page (1-indexed)"),
    limit: int = Query(default=10, ge=1, le=200, description="Page size"),
    search: Optional[str] = Query(default=None, description="Title, writer or publisher"),
    genre_id: Optional[str] = Query(default=None),
    orderByTitle: Optional[SortOrder] = Query(default="desc"),
    orderByPublishDate: Optional[SortOrder] = Query(default="asc"),
    factory: sessionmaker = Depends(get_session_factory),
) -> PaginatedResponse[BookOut]:
    with read_session(factory) as session:
        books, total = store.search_books(
            session,
            search=search,
            genre_id=genre_id,
            order_by_title=orderByTitle,
            order_by_publish_date=orderByPublishDate,
            page=page,
            limit=limit,
        )
        items = [BookOut.from_row(b) for b in books]
    return PaginatedResponse(
        message="Get all book successfully",
        data=items,
        meta=PageMeta.build(page, limit, total),
    )


@books_router.get("/genre/{genre_id}", response_model=PaginatedResponse[BookOut])
def list_books_by_genre(
    genre_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=200),
    search: Optional[str] = Query(default=None, description="Title or writer"),
    orderByTitle: Optional[SortOrder] = Query(default="desc"),
    orderByPublishDate: Optional[SortOrder] = Query(default="asc"),
    factory: sessionmaker = Depends(get_session_factory),
) -> PaginatedResponse[BookOut]:
    with read_session(factory) as session:
        if store.get_genre(session, genre_id) is None:
            raise HTTPException(status_code=404, detail="Genre not found")
        books, total = store.search_books(
            session,
            search=search,
            genre_id=genre_id,
            order_by_title=orderByTitle,
            order_by_publish_date=orderByPublishDate,
            page=page,
            limit=limit,
            search_publisher=False,
        )
        items = [BookOut.from_row(b) for b in books]
    return PaginatedResponse(
        message="Get all book by genre successfully",
        data=items,
        meta=PageMeta.build(page, limit, total),
    )


@books_router.get("/{book_id}", response_model=ApiResponse[BookOut])
def get_book(
    book_id: str,
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[BookOut]:
    with read_session(factory) as session:
        book = store.get_book(session, book_id)
        if book is None:
            raise HTTPException(status_code=404, detail="Book not found")
        data = BookOut.from_row(book)
    return ApiResponse(message="Get book detail successfully", data=data)


@books_router.post("", response_model=ApiResponse[BookStamp], status_code=201)
def create_book(
    req: BookCreate,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[BookStamp]:
    with unit_of_work(factory) as session:
        try:
            book = store.create_book(session, req.model_dump())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        data = BookStamp.model_validate(book)
    logger.info("Book %s added by %s", data.id, identity)
    return ApiResponse(message="Book added successfully", data=data)


@books_router.patch("/{book_id}", response_model=ApiResponse[BookStamp])
def update_book(
    book_id: str,
    req: BookUpdate,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[BookStamp]:
    changes = req.model_dump(exclude_unset=True)
    with unit_of_work(factory) as session:
        book = store.get_book(session, book_id)
        if book is None:
            raise HTTPException(status_code=404, detail="Book not found")
        try:
            store.update_book(session, book, changes)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        data = BookStamp.model_validate(book)
    logger.info("Book %s updated by %s (%s)", book_id, identity, ", ".join(sorted(changes)))
    return ApiResponse(message="Book updated successfully", data=data)


@books_router.delete("/{book_id}", response_model=ApiResponse[None])
def delete_book(
    book_id: str,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[None]:
    with unit_of_work(factory) as session:
        book = store.get_book(session, book_id)
        if book is None:
            raise HTTPException(status_code=404, detail="Book not found")
        store.soft_delete_book(session, book)
    logger.info("Book %s removed by %s", book_id, identity)
    return ApiResponse(message="Book removed successfully")


# ---------------------------------------------------------------------------
# Genres


@genres_router.get("", response_model=PaginatedResponse[GenreOut])
def list_genres(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=200),
    search: Optional[str] = Query(default=None),
    orderByName: SortOrder = Query(default="asc"),
    factory: sessionmaker = Depends(get_session_factory),
) -> PaginatedResponse[GenreOut]:
    with read_session(factory) as session:
        genres, total = store.search_genres(
            session, search=search, order_by_name=orderByName, page=page, limit=limit
        )
        items = [GenreOut.model_validate(g) for g in genres]
    return PaginatedResponse(
        message="Get all genre successfully",
        data=items,
        meta=PageMeta.build(page, limit, total),
    )


@genres_router.get("/{genre_id}", response_model=ApiResponse[GenreDetail])
def get_genre(
    genre_id: str,
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[GenreDetail]:
    with read_session(factory) as session:
        genre = store.get_genre(session, genre_id)
        if genre is None:
            raise HTTPException(status_code=404, detail="Genre not found")
        books = [BookOut.from_row(b) for b in store.live_books_of(session, genre)]
        data = GenreDetail(id=genre.id, name=genre.name, books=books)
    return ApiResponse(message="Get genre detail successfully", data=data)


@genres_router.post("", response_model=ApiResponse[GenreOut], status_code=201)
def create_genre(
    req: GenreCreate,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[GenreOut]:
    with unit_of_work(factory) as session:
        try:
            genre = store.create_genre(session, req.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        data = GenreOut.model_validate(genre)
    logger.info("Genre %s created by %s", data.id, identity)
    return ApiResponse(message="Genre created successfully", data=data)


@genres_router.patch("/{genre_id}", response_model=ApiResponse[GenreOut])
def update_genre(
    genre_id: str,
    req: GenreUpdate,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[GenreOut]:
    with unit_of_work(factory) as session:
        genre = store.get_genre(session, genre_id)
        if genre is None:
            raise HTTPException(status_code=404, detail="Genre not found")
        try:
            store.update_genre(session, genre, req.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        data = GenreOut.model_validate(genre)
    logger.info("Genre %s updated by %s", genre_id, identity)
    return ApiResponse(message="Genre updated successfully", data=data)


@genres_router.delete("/{genre_id}", response_model=ApiResponse[None])
def delete_genre(
    genre_id: str,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[None]:
    with unit_of_work(factory) as session:
        genre = store.get_genre(session, genre_id)
        if genre is None:
            raise HTTPException(status_code=404, detail="Genre not found")
        store.soft_delete_genre(session, genre)
    logger.info("Genre %s removed by %s", genre_id, identity)
    return ApiResponse(message="Genre removed successfully")
