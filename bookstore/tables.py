# bookstore/tables.py
"""
SQLAlchemy ORM models for the bookstore database.

Books and genres are soft-deleted (``deleted_at`` is set instead of
removing the row) so that past order items keep a valid reference.
Orders and their items are written once, by the order committer, and
never updated afterwards.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    orders = relationship("OrderRow", back_populates="user")


class GenreRow(Base):
    __tablename__ = "genres"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    books = relationship("BookRow", back_populates="genre")


class BookRow(Base):
    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_books_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_books_price_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False, index=True)
    writer = Column(String(255), nullable=False)
    publisher = Column(String(255), nullable=False)
    publication_year = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    genre_id = Column(String(36), ForeignKey("genres.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    genre = relationship("GenreRow", back_populates="books")


class OrderRow(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("UserRow", back_populates="orders")
    items = relationship(
        "OrderItemRow",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRow.position",
    )

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_price(self):
        return sum(item.subtotal for item in self.items)


class OrderItemRow(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Plain reference: a book may be soft-deleted after it was sold.
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("OrderRow", back_populates="items")
    book = relationship("BookRow")

    @property
    def subtotal(self):
        return self.unit_price * self.quantity
