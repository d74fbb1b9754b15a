"""
Sale transaction tests.

Verifies:
- Commit reserves stock, snapshots prices and stores the pre-discount total
- Any failing item rolls the whole commit back
- Void gives stock back exactly once
- Restore re-reserves stock and can fail without partial effects
"""

import pytest

from pdv.errors import DuplicateItemError, InsufficientStockError, NotFoundError, ValidationError
from pdv.models import Product, Sale, SaleItem
from pdv.services import products_service, sales_service, user_service
from pdv.services.basket import BasketItem, SaleRequest


def basket(*items, payment_method="CASH", discount_percent=0):
    return SaleRequest(
        payment_method=payment_method,
        discount_percent=discount_percent,
        items=tuple(BasketItem(product_id=pid, quantity=qty) for pid, qty in items),
    )


def stock_of(db_session, product_id):
    return db_session.get(Product, product_id).quantity


# =============================================================================
# COMMIT
# =============================================================================


class TestCommit:

    def test_single_item_total_and_stock(self, db_session, seller, phone):
        sale = sales_service.commit_sale("seller", basket((phone.id, 2)))

        assert sale.total_cents == 350180
        assert sale.user_id == seller.id
        assert sale.is_active
        assert stock_of(db_session, phone.id) == 8

        items = db_session.query(SaleItem).filter_by(sale_id=sale.id).all()
        assert len(items) == 1
        assert items[0].quantity == 2
        assert items[0].unit_price_cents == 175090

    def test_multi_item_stock_moves_per_product(self, db_session, seller, phone, charger):
        sale = sales_service.commit_sale("seller", basket((phone.id, 3), (charger.id, 5)))

        assert sale.total_cents == 3 * 175090 + 5 * 9990
        assert stock_of(db_session, phone.id) == 7
        assert stock_of(db_session, charger.id) == 0

    def test_total_excludes_discount(self, db_session, seller, phone):
        sale = sales_service.commit_sale("seller", basket((phone.id, 2), discount_percent=10))

        assert sale.discount_percent == 10
        assert sale.total_cents == 350180

    def test_quantity_equal_to_stock_empties_product(self, db_session, seller, phone):
        sales_service.commit_sale("seller", basket((phone.id, 10)))
        assert stock_of(db_session, phone.id) == 0

    def test_price_snapshot_survives_price_change(self, db_session, seller, phone):
        sale = sales_service.commit_sale("seller", basket((phone.id, 1)))
        products_service.update_product(phone.id, {
            "description": "Samsung Galaxy S20",
            "quantity": 9,
            "price_cents": 199900,
        })

        details = sales_service.sale_details(sale.id)
        assert details["items"][0]["unit_price_cents"] == 175090
        assert db_session.get(Sale, sale.id).total_cents == 175090


class TestCommitRejected:

    def test_duplicate_products_rejected_before_stock_moves(self, db_session, seller, phone):
        with pytest.raises(DuplicateItemError):
            sales_service.commit_sale("seller", basket((phone.id, 2), (phone.id, 3)))

        assert stock_of(db_session, phone.id) == 10
        assert db_session.query(Sale).count() == 0

    def test_insufficient_stock_names_product(self, db_session, seller, phone):
        with pytest.raises(InsufficientStockError) as excinfo:
            sales_service.commit_sale("seller", basket((phone.id, 100)))

        assert excinfo.value.product_id == phone.id
        assert excinfo.value.details["on_hand"] == 10
        assert stock_of(db_session, phone.id) == 10

    def test_failure_midway_rolls_back_earlier_items(self, db_session, seller, phone, charger):
        with pytest.raises(InsufficientStockError) as excinfo:
            sales_service.commit_sale("seller", basket((charger.id, 3), (phone.id, 11)))

        assert excinfo.value.product_id == phone.id
        assert stock_of(db_session, charger.id) == 5
        assert stock_of(db_session, phone.id) == 10
        assert db_session.query(Sale).count() == 0
        assert db_session.query(SaleItem).count() == 0

    def test_unknown_product(self, db_session, seller, phone):
        with pytest.raises(NotFoundError):
            sales_service.commit_sale("seller", basket((phone.id, 1), (9999, 1)))

        assert stock_of(db_session, phone.id) == 10
        assert db_session.query(Sale).count() == 0

    def test_voided_product_cannot_be_sold(self, db_session, seller, phone):
        products_service.deactivate_product(phone.id)

        with pytest.raises(NotFoundError):
            sales_service.commit_sale("seller", basket((phone.id, 1)))

    def test_unknown_or_voided_seller(self, db_session, seller, phone):
        with pytest.raises(NotFoundError):
            sales_service.commit_sale("ghost", basket((phone.id, 1)))

        seller.void()
        db_session.commit()
        with pytest.raises(NotFoundError):
            sales_service.commit_sale("seller", basket((phone.id, 1)))

        assert stock_of(db_session, phone.id) == 10

    @pytest.mark.parametrize("request_kwargs", [
        {"discount_percent": 101},
        {"discount_percent": -1},
        {"payment_method": "CHEQUE"},
    ])
    def test_invalid_request(self, db_session, seller, phone, request_kwargs):
        with pytest.raises(ValidationError):
            sales_service.commit_sale("seller", basket((phone.id, 1), **request_kwargs))

    def test_zero_quantity(self, db_session, seller, phone):
        with pytest.raises(ValidationError):
            sales_service.commit_sale("seller", basket((phone.id, 0)))
        assert stock_of(db_session, phone.id) == 10


# =============================================================================
# VOID / RESTORE
# =============================================================================


class TestVoidAndRestore:

    def test_void_returns_stock_and_marks_everything(self, db_session, seller, phone):
        sale = sales_service.commit_sale("seller", basket((phone.id, 2)))
        sale_id = sale.id
        assert stock_of(db_session, phone.id) == 8

        sales_service.void_sale(sale_id)

        assert stock_of(db_session, phone.id) == 10
        voided = db_session.get(Sale, sale_id)
        assert voided.voided_at is not None
        items = db_session.query(SaleItem).filter_by(sale_id=sale_id).all()
        assert all(item.voided_at is not None for item in items)

    def test_second_void_fails_without_double_release(self, db_session, seller, phone):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 2))).id
        sales_service.void_sale(sale_id)

        with pytest.raises(NotFoundError):
            sales_service.void_sale(sale_id)

        assert stock_of(db_session, phone.id) == 10

    def test_void_then_restore_round_trip(self, db_session, seller, phone, charger):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 2), (charger.id, 1))).id

        sales_service.void_sale(sale_id)
        sales_service.restore_sale(sale_id)

        assert stock_of(db_session, phone.id) == 8
        assert stock_of(db_session, charger.id) == 4
        sale = sales_service.get_sale(sale_id, active=True)
        assert sale.total_cents == 2 * 175090 + 9990
        items = db_session.query(SaleItem).filter_by(sale_id=sale_id).all()
        assert all(item.is_active for item in items)

    def test_restore_active_sale_fails(self, db_session, seller, phone):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 2))).id

        with pytest.raises(NotFoundError):
            sales_service.restore_sale(sale_id)
        assert stock_of(db_session, phone.id) == 8

    def test_restore_fails_when_stock_consumed_meanwhile(self, db_session, seller, phone):
        first_id = sales_service.commit_sale("seller", basket((phone.id, 2))).id
        sales_service.void_sale(first_id)
        sales_service.commit_sale("seller", basket((phone.id, 9)))
        assert stock_of(db_session, phone.id) == 1

        with pytest.raises(InsufficientStockError) as excinfo:
            sales_service.restore_sale(first_id)

        assert excinfo.value.product_id == phone.id
        assert stock_of(db_session, phone.id) == 1
        assert sales_service.get_sale(first_id, active=False).voided_at is not None
        items = db_session.query(SaleItem).filter_by(sale_id=first_id).all()
        assert all(item.voided_at is not None for item in items)

    def test_restore_is_all_or_nothing_across_items(self, db_session, seller, phone, charger):
        first_id = sales_service.commit_sale("seller", basket((phone.id, 2), (charger.id, 3))).id
        sales_service.void_sale(first_id)
        sales_service.commit_sale("seller", basket((charger.id, 4)))

        with pytest.raises(InsufficientStockError):
            sales_service.restore_sale(first_id)

        # phone was reserved first and must have been rolled back
        assert stock_of(db_session, phone.id) == 10
        assert stock_of(db_session, charger.id) == 1

    def test_void_releases_stock_of_voided_product(self, db_session, seller, phone):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 2))).id
        products_service.deactivate_product(phone.id)

        sales_service.void_sale(sale_id)

        assert stock_of(db_session, phone.id) == 10


# =============================================================================
# QUERIES
# =============================================================================


class TestQueries:

    def test_get_sale_respects_state(self, db_session, seller, phone):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 1))).id

        assert sales_service.get_sale(sale_id, active=True).id == sale_id
        with pytest.raises(NotFoundError):
            sales_service.get_sale(sale_id, active=False)

    def test_list_sales_splits_active_and_voided(self, db_session, seller, phone):
        keep_id = sales_service.commit_sale("seller", basket((phone.id, 1))).id
        void_id = sales_service.commit_sale("seller", basket((phone.id, 1))).id
        sales_service.void_sale(void_id)

        active = sales_service.list_sales(active=True)
        voided = sales_service.list_sales(active=False)

        assert [s["id"] for s in active["items"]] == [keep_id]
        assert [s["id"] for s in voided["items"]] == [void_id]

    def test_list_sales_paginates(self, db_session, seller, phone):
        for _ in range(3):
            sales_service.commit_sale("seller", basket((phone.id, 1)))

        page = sales_service.list_sales(active=True, page=1, per_page=2)

        assert page["count"] == 2
        assert page["pagination"]["total"] == 3
        assert page["pagination"]["has_next"] is True

    def test_list_sales_by_date(self, db_session, seller, phone):
        sale = sales_service.commit_sale("seller", basket((phone.id, 1)))
        day = sale.created_at.date()

        assert [s.id for s in sales_service.list_sales_by_date(day)] == [sale.id]
        assert sales_service.list_sales_by_date(day, active=False) == []

    def test_details_projection(self, db_session, seller, phone, charger):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 2), (charger.id, 1))).id

        details = sales_service.sale_details(sale_id)

        assert details["seller_name"] == "Sam Seller"
        assert details["items"] == [
            {
                "product_id": phone.id,
                "description": "Samsung Galaxy S20",
                "quantity": 2,
                "unit_price_cents": 175090,
                "subtotal_cents": 350180,
            },
            {
                "product_id": charger.id,
                "description": "USB-C Charger",
                "quantity": 1,
                "unit_price_cents": 9990,
                "subtotal_cents": 9990,
            },
        ]

    def test_details_resolve_voided_records(self, db_session, seller, manager, phone):
        sale_id = sales_service.commit_sale("seller", basket((phone.id, 1))).id
        sales_service.void_sale(sale_id)
        products_service.deactivate_product(phone.id)
        user_service.deactivate_user("manager", seller.id)

        details = sales_service.sale_details(sale_id)

        assert details["seller_name"] == "Sam Seller"
        assert details["items"][0]["description"] == "Samsung Galaxy S20"

    def test_details_unknown_sale(self, db_session):
        with pytest.raises(NotFoundError):
            sales_service.sale_details(12345)
