"""
Order commit.

``commit_order`` must run inside a ``storage.unit_of_work``: it takes the
stock, then writes the order and its items, and relies on the unit of
work to make all of it visible at once or not at all.

Stock is taken with one guarded ``UPDATE`` per book that only matches
while enough units are left, so two orders racing for the last copies
cannot both succeed whatever the interleaving. Books are updated in id
order so that concurrent orders lock rows in the same sequence.
"""

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..errors import StockConflict
from ..tables import BookRow, OrderItemRow, OrderRow, utcnow
from .validator import ValidatedOrder


logger = logging.getLogger(__name__)


def take_stock(session: Session, book_id: str, quantity: int) -> None:
    stmt = (
        update(BookRow)
        .where(
            BookRow.id == book_id,
            BookRow.deleted_at.is_(None),
            BookRow.stock_quantity >= quantity,
        )
        .values(stock_quantity=BookRow.stock_quantity - quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    if result.rowcount != 1:
        logger.info("Stock for %s no longer covers %s unit(s)", book_id, quantity)
        raise StockConflict(book_id, quantity)


def commit_order(session: Session, validated: ValidatedOrder) -> OrderRow:
    """Take stock and persist the order; returns it with its items loaded."""
    for book_id, quantity in sorted(validated.demand().items()):
        take_stock(session, book_id, quantity)

    order = OrderRow(user_id=validated.identity, created_at=utcnow())
    order.items = [
        OrderItemRow(
            book_id=line.book_id,
            position=position,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )
        for position, line in enumerate(validated.lines)
    ]
    session.add(order)
    session.flush()
    return order
