"""
Route definitions for purchase transactions.

Endpoints under /transactions (all require a bearer token):
- POST /                   : place an order
- GET  /                   : every order, newest first
- GET  /{transaction_id}   : one order with its items
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import selectinload, sessionmaker

from ..auth import current_identity
from ..models import ApiResponse
from ..storage import get_session_factory, read_session
from ..tables import OrderRow
from .schemas import CreateTransactionRequest, OrderOut
from .service import place_order


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=ApiResponse[OrderOut], status_code=201)
def create_transaction(
    req: CreateTransactionRequest,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[OrderOut]:
    # OrderError subclasses are rendered by the handler in main.py
    order = place_order(factory, identity, req.items)
    return ApiResponse(message="Transaction created successfully", data=OrderOut.model_validate(order))


@router.get("", response_model=ApiResponse[List[OrderOut]])
def list_transactions(
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[List[OrderOut]]:
    with read_session(factory) as session:
        orders = session.scalars(
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .order_by(OrderRow.created_at.desc())
        ).all()
        data = [OrderOut.model_validate(o) for o in orders]
    return ApiResponse(message="Get all transaction successfully", data=data)


@router.get("/{transaction_id}", response_model=ApiResponse[OrderOut])
def get_transaction(
    transaction_id: str,
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[OrderOut]:
    with read_session(factory) as session:
        order = session.scalars(
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .where(OrderRow.id == transaction_id)
        ).first()
        if order is None:
            raise HTTPException(status_code=404, detail="Transaction not found")
        data = OrderOut.model_validate(order)
    return ApiResponse(message="Get transaction detail successfully", data=data)
