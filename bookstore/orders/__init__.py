"""
Purchase transactions.

``service.place_order`` is the single entry point for creating an
order: ``validator`` checks and prices the lines, ``committer`` takes
the stock and writes the order in one transaction.
"""

from .router import router as transactions_router  # noqa: F401
from .service import place_order  # noqa: F401
