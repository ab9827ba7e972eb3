# bookstore/errors.py
"""
Errors raised while placing an order.

Each class carries the HTTP status it maps to and a stable ``kind``
string so the API layer can render a uniform error body. Errors that
concern a specific book keep its identifier in ``item_id`` so that the
client can correct the line and resubmit.
"""

from typing import Optional


class OrderError(Exception):
    """Base class for order placement failures."""

    status_code = 400
    kind = "order_error"
    retryable = False

    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.item_id = item_id

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message, "error": self.kind}
        if self.item_id is not None:
            body["item_id"] = self.item_id
        return body


class InvalidInput(OrderError):
    """Empty or malformed line list, or a quantity that is not a positive integer."""

    status_code = 400
    kind = "invalid_input"


class ItemNotFound(OrderError):
    status_code = 404
    kind = "item_not_found"

    def __init__(self, item_id: str):
        super().__init__(f"Book not found: {item_id}", item_id=item_id)


class InsufficientStock(OrderError):
    """Requested quantity exceeds the stock seen while validating."""

    status_code = 409
    kind = "insufficient_stock"
    retryable = True

    def __init__(self, item_id: str, requested: int, available: Optional[int] = None, title: Optional[str] = None):
        label = title or item_id
        if available is None:
            message = f"Insufficient stock for {label}: requested {requested}"
        else:
            message = f"Insufficient stock for {label}: requested {requested}, available {available}"
        super().__init__(message, item_id=item_id)
        self.requested = requested
        self.available = available


class StockConflict(InsufficientStock):
    """Stock was taken by a concurrent order between validation and commit.

    Resubmitting the order (which re-runs validation) is safe.
    """

    kind = "stock_conflict"

    def __init__(self, item_id: str, requested: int):
        super().__init__(item_id, requested)
        self.message = f"Stock for {item_id} changed while the order was being placed; please resubmit"
        self.args = (self.message,)


class PersistenceFailure(OrderError):
    """The store could not complete the unit of work.

    The message is deliberately generic; the underlying driver error is
    chained on ``__cause__`` and logged, never sent to clients.
    """

    status_code = 500
    kind = "persistence_failure"
    retryable = True

    def __init__(self, message: str = "Transaction failed, please try again later"):
        super().__init__(message)
