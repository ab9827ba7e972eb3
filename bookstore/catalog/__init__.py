"""
Catalog package for the bookstore API.

This package contains schemas, data access helpers and route
definitions for books and genres. Reads are public; adding, editing and
removing entries requires a bearer token. ``store.find_books_by_ids`` is
also what the order validator uses to resolve order lines.
"""

from .router import books_router, genres_router  # noqa: F401
