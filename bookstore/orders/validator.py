"""
Order validation.

``validate_order`` resolves the books referenced by an order, checks
quantities against the stock visible right now and prices every line.
It never writes and takes no locks: stock may move before the order is
committed, so the committer re-checks everything inside its own
transaction. Validation only lets obviously bad orders fail fast.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Sequence, Tuple

from sqlalchemy.orm import Session

from ..catalog.store import find_books_by_ids
from ..errors import InsufficientStock, InvalidInput, ItemNotFound


CENT = Decimal("0.01")


@dataclass(frozen=True)
class ValidatedLine:
    book_id: str
    title: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(CENT)


@dataclass(frozen=True)
class ValidatedOrder:
    identity: str
    lines: Tuple[ValidatedLine, ...]
    total_price: Decimal
    total_quantity: int

    def demand(self) -> Dict[str, int]:
        """Units requested per book, summed over lines."""
        wanted: Dict[str, int] = {}
        for line in self.lines:
            wanted[line.book_id] = wanted.get(line.book_id, 0) + line.quantity
        return wanted


def _line_fields(line: Any) -> Tuple[Any, Any]:
    if isinstance(line, dict):
        return line.get("book_id"), line.get("quantity")
    return getattr(line, "book_id", None), getattr(line, "quantity", None)


def _is_positive_int(value: Any) -> bool:
    # bool is an int subclass; True is not a quantity
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def check_lines(identity: str, lines: Sequence[Any]) -> Tuple[Tuple[str, int], ...]:
    """Shape checks that need no database access.

    Returns the lines as ``(book_id, quantity)`` pairs in request order.
    """
    if not identity:
        raise InvalidInput("Unauthorized: no identity for this order")
    if not lines or isinstance(lines, (str, bytes)):
        raise InvalidInput("Items must be a non-empty list")

    parsed = []
    for line in lines:
        book_id, quantity = _line_fields(line)
        if not isinstance(book_id, str) or not book_id.strip():
            raise InvalidInput("Every item needs a book_id")
        if not _is_positive_int(quantity):
            raise InvalidInput(
                f"Quantity for {book_id} must be a positive integer", item_id=book_id
            )
        parsed.append((book_id.strip(), quantity))
    return tuple(parsed)


def validate_order(session: Session, identity: str, lines: Sequence[Any]) -> ValidatedOrder:
    """Resolve, check and price an order.

    Parameters
    ----------
    session : Session
        Session used for the single batch lookup of books.
    identity : str
        Authenticated user placing the order.
    lines : Sequence
        Items as mappings or objects with ``book_id`` and ``quantity``.

    Returns
    -------
    ValidatedOrder
        Lines in request order with the unit price seen now, plus the
        order total and unit count.

    Raises
    ------
    InvalidInput
        Empty list, missing ``book_id`` or a quantity that is not a
        positive integer. Raised before the database is touched.
    ItemNotFound
        A referenced book does not exist or was deleted.
    InsufficientStock
        Units requested for a book (over all of its lines) exceed its
        current stock.
    """
    parsed = check_lines(identity, lines)

    demand: Dict[str, int] = {}
    for book_id, quantity in parsed:
        demand[book_id] = demand.get(book_id, 0) + quantity

    books = find_books_by_ids(session, demand.keys())
    for book_id in demand:
        if book_id not in books:
            raise ItemNotFound(book_id)

    for book_id, wanted in demand.items():
        book = books[book_id]
        if wanted > book.stock_quantity:
            raise InsufficientStock(book_id, wanted, book.stock_quantity, title=book.title)

    validated = tuple(
        ValidatedLine(
            book_id=book_id,
            title=books[book_id].title,
            quantity=quantity,
            unit_price=Decimal(books[book_id].price).quantize(CENT),
        )
        for book_id, quantity in parsed
    )
    return ValidatedOrder(
        identity=identity,
        lines=validated,
        total_price=sum((line.subtotal for line in validated), Decimal("0.00")),
        total_quantity=sum(line.quantity for line in validated),
    )
