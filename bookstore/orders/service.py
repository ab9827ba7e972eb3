"""
Order placement.

One ``OrderPlacement`` follows a single request through
``Received -> Validating -> Committing -> Committed | Rejected``.
Validation runs in a read-only session that is closed before the write
transaction starts; the commit runs in its own unit of work. Nothing is
retried here: a ``StockConflict`` goes back to the caller, who may
resubmit.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional, Sequence

from sqlalchemy.orm import sessionmaker

from ..errors import OrderError, PersistenceFailure
from ..storage import read_session, unit_of_work
from ..tables import OrderRow
from .committer import commit_order
from .validator import ValidatedOrder, validate_order


logger = logging.getLogger(__name__)


class PlacementState(str, enum.Enum):
    RECEIVED = "Received"
    VALIDATING = "Validating"
    COMMITTING = "Committing"
    COMMITTED = "Committed"
    REJECTED = "Rejected"


class OrderPlacement:
    def __init__(self, factory: sessionmaker, identity: str, lines: Sequence[Any]):
        self.factory = factory
        self.identity = identity
        self.lines = lines
        self.state = PlacementState.RECEIVED
        self.validated: Optional[ValidatedOrder] = None
        self.order: Optional[OrderRow] = None
        self.error: Optional[Exception] = None

    def _move(self, state: PlacementState) -> None:
        logger.info("[user=%s] %s -> %s", self.identity, self.state.value, state.value)
        self.state = state

    def _reject(self, error: OrderError) -> None:
        self.error = error
        self._move(PlacementState.REJECTED)
        if isinstance(error, PersistenceFailure):
            logger.error("[user=%s] order rejected: %s (%s)", self.identity, error.kind, error.__cause__)
        else:
            logger.warning("[user=%s] order rejected: %s: %s", self.identity, error.kind, error.message)

    def run(self) -> OrderRow:
        if self.state is not PlacementState.RECEIVED:
            raise RuntimeError(f"placement already ran (state={self.state.value})")
        try:
            self._move(PlacementState.VALIDATING)
            with read_session(self.factory) as session:
                self.validated = validate_order(session, self.identity, self.lines)

            self._move(PlacementState.COMMITTING)
            with unit_of_work(self.factory) as session:
                order = commit_order(session, self.validated)
        except OrderError as e:
            self._reject(e)
            raise
        except Exception as e:
            self.error = e
            self._move(PlacementState.REJECTED)
            logger.exception("[user=%s] order failed unexpectedly", self.identity)
            raise

        self.order = order
        self._move(PlacementState.COMMITTED)
        logger.info(
            "[user=%s] order %s committed: %s line(s), %s unit(s), total=%s",
            self.identity,
            order.id,
            len(self.validated.lines),
            self.validated.total_quantity,
            self.validated.total_price,
        )
        return order


def place_order(factory: sessionmaker, identity: str, lines: Sequence[Any]) -> OrderRow:
    """Validate and commit one order; raises an ``OrderError`` on rejection."""
    return OrderPlacement(factory, identity, lines).run()
