"""Tests for order validation (read-only pre-checks and pricing)."""
from decimal import Decimal

import pytest

from bookstore.errors import InsufficientStock, InvalidInput, ItemNotFound, StockConflict
from bookstore.orders.validator import validate_order
from bookstore.storage import read_session


def _validate(factory, identity, lines):
    with read_session(factory) as session:
        return validate_order(session, identity, lines)


def test_prices_lines_and_totals(factory, seeded):
    order = _validate(factory, seeded.user, [
        {"book_id": seeded.dune, "quantity": 3},
        {"book_id": seeded.emma, "quantity": 2},
    ])

    assert [line.book_id for line in order.lines] == [seeded.dune, seeded.emma]
    assert order.lines[0].unit_price == Decimal("10.00")
    assert order.lines[1].subtotal == Decimal("51.00")
    assert order.total_price == Decimal("81.00")
    assert order.total_quantity == 5
    assert order.identity == seeded.user


def test_accepts_objects_with_attributes(factory, seeded):
    class Line:
        book_id = seeded.dune
        quantity = 1

    order = _validate(factory, seeded.user, [Line()])
    assert order.total_price == Decimal("10.00")


@pytest.mark.parametrize("quantity", [0, -1, 2.5, "3", True, None])
def test_rejects_non_positive_or_non_integer_quantity(factory, seeded, quantity):
    with pytest.raises(InvalidInput):
        _validate(factory, seeded.user, [{"book_id": seeded.dune, "quantity": quantity}])


def test_invalid_quantity_fails_before_any_lookup(seeded):
    class NoDatabase:
        def __getattr__(self, name):
            raise AssertionError("validator touched the database")

    with pytest.raises(InvalidInput):
        validate_order(NoDatabase(), seeded.user, [{"book_id": "whatever", "quantity": 0}])


@pytest.mark.parametrize("lines", [[], None])
def test_rejects_empty_line_list(factory, seeded, lines):
    with pytest.raises(InvalidInput):
        _validate(factory, seeded.user, lines)


def test_rejects_missing_identity(factory, seeded):
    with pytest.raises(InvalidInput):
        _validate(factory, "", [{"book_id": seeded.dune, "quantity": 1}])


def test_unknown_book_is_not_found(factory, seeded):
    with pytest.raises(ItemNotFound) as exc:
        _validate(factory, seeded.user, [
            {"book_id": seeded.dune, "quantity": 1},
            {"book_id": "no-such-book", "quantity": 1},
        ])
    assert exc.value.item_id == "no-such-book"
    assert exc.value.status_code == 404


def test_soft_deleted_book_is_not_found(factory, seeded):
    with pytest.raises(ItemNotFound) as exc:
        _validate(factory, seeded.user, [{"book_id": seeded.gone, "quantity": 1}])
    assert exc.value.item_id == seeded.gone


def test_quantity_above_stock_names_the_book(factory, seeded):
    with pytest.raises(InsufficientStock) as exc:
        _validate(factory, seeded.user, [{"book_id": seeded.emma, "quantity": 3}])

    err = exc.value
    assert not isinstance(err, StockConflict)
    assert err.item_id == seeded.emma
    assert err.requested == 3
    assert err.available == 2
    assert "Emma" in err.message


def test_out_of_stock_book(factory, seeded):
    with pytest.raises(InsufficientStock):
        _validate(factory, seeded.user, [{"book_id": seeded.odes, "quantity": 1}])


def test_repeated_book_is_checked_against_combined_demand(factory, seeded):
    with pytest.raises(InsufficientStock) as exc:
        _validate(factory, seeded.user, [
            {"book_id": seeded.emma, "quantity": 1},
            {"book_id": seeded.emma, "quantity": 2},
        ])
    assert exc.value.requested == 3


def test_exact_stock_is_allowed(factory, seeded, stock):
    order = _validate(factory, seeded.user, [{"book_id": seeded.dune, "quantity": 5}])
    assert order.total_quantity == 5
    # validation never writes
    assert stock(seeded.dune) == 5
