import pytest

from pdv.errors import InsufficientStockError, NotFoundError, ValidationError
from pdv.models import Product
from pdv.services import stock_ledger


def test_reserve_decrements(db_session, phone):
    product = stock_ledger.reserve(phone.id, 4)
    db_session.commit()

    assert product.quantity == 6
    assert db_session.get(Product, phone.id).quantity == 6


def test_reserve_whole_stock(db_session, phone):
    stock_ledger.reserve(phone.id, 10)
    db_session.commit()
    assert db_session.get(Product, phone.id).quantity == 0


def test_reserve_more_than_on_hand(db_session, phone):
    with pytest.raises(InsufficientStockError) as excinfo:
        stock_ledger.reserve(phone.id, 11)

    assert excinfo.value.details == {"product_id": phone.id, "requested_quantity": 11, "on_hand": 10}
    db_session.rollback()
    assert db_session.get(Product, phone.id).quantity == 10


def test_reserve_voided_product(db_session, phone):
    phone.void()
    db_session.commit()

    with pytest.raises(NotFoundError):
        stock_ledger.reserve(phone.id, 1)

    # restore path reserves regardless of the product's own state
    assert stock_ledger.reserve(phone.id, 1, active_only=False).quantity == 9


def test_reserve_missing_product(db_session):
    with pytest.raises(NotFoundError):
        stock_ledger.reserve(424242, 1)


def test_release_increments_even_when_voided(db_session, phone):
    phone.void()
    db_session.commit()

    stock_ledger.release(phone.id, 3)
    db_session.commit()

    assert db_session.get(Product, phone.id).quantity == 13


def test_release_missing_product(db_session):
    with pytest.raises(NotFoundError):
        stock_ledger.release(424242, 1)


@pytest.mark.parametrize("quantity", [0, -2, True])
def test_movements_require_positive_quantity(db_session, phone, quantity):
    with pytest.raises(ValidationError):
        stock_ledger.reserve(phone.id, quantity)
    with pytest.raises(ValidationError):
        stock_ledger.release(phone.id, quantity)


def test_set_on_hand(db_session, phone):
    stock_ledger.set_on_hand(phone, 42)
    db_session.commit()
    assert db_session.get(Product, phone.id).quantity == 42

    with pytest.raises(ValidationError):
        stock_ledger.set_on_hand(phone, -1)
