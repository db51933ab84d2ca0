# Overview: Pytest coverage for the inventory ledger (products, sales, stats).

"""
Inventory Ledger Tests

Covers:
- sell(): stock decrement and sale snapshots in one unit of work
- Over-sells are rejected entirely, including when a concurrent sale
  consumed the stock after our read
- upsert_product validation (price > cost, non-negative stock, barcode
  uniqueness per shop) and derived profit margin
- low_stock and stats_for_period as pure functions
"""

from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import update

from barbershop.errors import ConflictError, InsufficientStock, PermissionDenied, ValidationError
from barbershop.models import Product, SaleRecord, AuditEvent
from barbershop.services import inventory_service, lifecycle_service, store
from barbershop.services.inventory_service import low_stock, stats_for_period, profit_margin
from barbershop.services.session_service import actor_from_user


class TestSell:
    """Stock and sales history stay consistent."""

    def test_sell_decrements_stock_and_records_sale(self, db_session, actor_a, product_a):
        sale = inventory_service.sell(actor_a, product_a.id, 3)

        assert sale.quantity == 3
        assert sale.cost_cents == 3000
        assert sale.price_cents == 6000
        assert sale.profit_cents == 3000
        assert sale.product_name == "Pomade"
        assert sale.sold_by == actor_a.user_id
        assert sale.shop_id == actor_a.shop_id

        product = db_session.get(Product, product_a.id)
        assert product.stock == 2

    def test_profit_is_exact_for_every_quantity(self, actor_a, product_a):
        for quantity in (1, 2):
            sale = inventory_service.sell(actor_a, product_a.id, quantity)
            assert sale.profit_cents == (2000 - 1000) * quantity

    def test_oversell_is_rejected_and_stock_unchanged(self, db_session, actor_a, product_a):
        inventory_service.sell(actor_a, product_a.id, 3)

        with pytest.raises(InsufficientStock) as exc_info:
            inventory_service.sell(actor_a, product_a.id, 10)

        assert exc_info.value.requested == 10
        assert exc_info.value.available == 2
        assert db_session.get(Product, product_a.id).stock == 2
        assert db_session.query(SaleRecord).count() == 1

    def test_selling_the_last_units(self, db_session, actor_a, product_a):
        inventory_service.sell(actor_a, product_a.id, 5)

        assert db_session.get(Product, product_a.id).stock == 0
        with pytest.raises(InsufficientStock):
            inventory_service.sell(actor_a, product_a.id, 1)

    def test_zero_or_negative_quantity_is_rejected(self, db_session, actor_a, product_a):
        with pytest.raises(InsufficientStock):
            inventory_service.sell(actor_a, product_a.id, 0)
        with pytest.raises(InsufficientStock):
            inventory_service.sell(actor_a, product_a.id, -2)
        assert db_session.get(Product, product_a.id).stock == 5

    def test_non_integer_quantity_is_a_validation_error(self, actor_a, product_a):
        with pytest.raises(ValidationError):
            inventory_service.sell(actor_a, product_a.id, "2.5")

    def test_concurrent_sale_consumed_stock_after_read(self, db_session, actor_a, product_a):
        """
        The product is read with stock 5, but another seller has already
        taken 4 units at write time. The conditional decrement must refuse a
        sale of 3 and write nothing.
        """
        db_session.get(Product, product_a.id)  # stale snapshot: stock 5
        db_session.execute(
            update(Product)
            .where(Product.id == product_a.id)
            .values(stock=1)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(InsufficientStock) as exc_info:
            inventory_service.sell(actor_a, product_a.id, 3)

        assert exc_info.value.available == 1
        assert db_session.query(SaleRecord).count() == 0

    def test_sale_writes_audit_event(self, db_session, actor_a, product_a):
        sale = inventory_service.sell(actor_a, product_a.id, 2)

        event = db_session.query(AuditEvent).filter_by(action="product.sold").one()
        assert event.entity_id == product_a.id
        assert str(sale.id) in event.note

    def test_active_barber_can_sell(self, barber_actor_a, product_a):
        sale = inventory_service.sell(barber_actor_a, product_a.id, 1)
        assert sale.sold_by_name == "Carlos Barber"

    def test_inactive_barber_cannot_sell(self, actor_a, barber_a, product_a):
        inactive = lifecycle_service.toggle_barber_active(actor_a, barber_a.id)
        with pytest.raises(PermissionDenied):
            inventory_service.sell(actor_from_user(inactive), product_a.id, 1)


class TestConditionalWrite:
    """store.update_if reports whether its precondition held."""

    def test_precondition_holds(self, db_session, actor_a, product_a):
        applied = store.update_if(
            "inventory", actor_a.shop_id, product_a.id,
            [Product.stock >= 2], {"stock": Product.stock - 2},
        )
        db_session.commit()
        assert applied is True
        assert db_session.get(Product, product_a.id).stock == 3

    def test_precondition_fails(self, db_session, actor_a, product_a):
        applied = store.update_if(
            "inventory", actor_a.shop_id, product_a.id,
            [Product.stock >= 6], {"stock": Product.stock - 6},
        )
        assert applied is False
        assert db_session.get(Product, product_a.id).stock == 5

    def test_other_shop_never_matches(self, actor_b, product_a):
        applied = store.update_if(
            "inventory", actor_b.shop_id, product_a.id, [], {"stock": 0},
        )
        assert applied is False


class TestUpsertProduct:

    def test_profit_margin_is_derived(self, product_a):
        assert product_a.profit_margin == 50.0

    def test_profit_margin_formula(self):
        assert profit_margin(1000, 3000) == 66.67
        assert profit_margin(0, 500) == 100.0

    def test_price_must_exceed_cost(self, actor_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(actor_a, {"name": "Gel", "cost_cents": 500, "price_cents": 500})

    def test_update_rechecks_price_against_stored_cost(self, actor_a, product_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(actor_a, {"price_cents": 900}, product_a.id)

    def test_negative_stock_rejected(self, actor_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(actor_a, {
                "name": "Gel", "cost_cents": 100, "price_cents": 200, "stock": -1,
            })

    def test_negative_min_stock_rejected(self, actor_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(actor_a, {
                "name": "Gel", "cost_cents": 100, "price_cents": 200, "min_stock": -1,
            })

    def test_unknown_category_rejected(self, actor_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(actor_a, {
                "name": "Gel", "cost_cents": 100, "price_cents": 200, "category": "snacks",
            })

    def test_duplicate_barcode_in_same_shop_conflicts(self, actor_a, product_a):
        with pytest.raises(ConflictError):
            inventory_service.upsert_product(actor_a, {
                "name": "Wax", "cost_cents": 100, "price_cents": 200, "barcode": "7790001",
            })

    def test_same_barcode_in_other_shop_is_fine(self, product_a, product_b):
        assert product_a.barcode == product_b.barcode

    def test_product_keeps_its_own_barcode_on_update(self, actor_a, product_a):
        updated = inventory_service.upsert_product(
            actor_a, {"barcode": "7790001", "description": "Strong hold"}, product_a.id
        )
        assert updated.description == "Strong hold"
        assert updated.updated_by == actor_a.user_id

    def test_update_recomputes_margin(self, actor_a, product_a):
        updated = inventory_service.upsert_product(actor_a, {"price_cents": 4000}, product_a.id)
        assert updated.profit_margin == 75.0

    def test_barbers_cannot_manage_products(self, barber_actor_a):
        with pytest.raises(PermissionDenied):
            inventory_service.upsert_product(barber_actor_a, {"name": "Gel", "cost_cents": 1, "price_cents": 2})

    def test_delete_keeps_sale_history(self, db_session, actor_a, product_a):
        sale = inventory_service.sell(actor_a, product_a.id, 1)
        inventory_service.delete_product(actor_a, product_a.id)

        assert db_session.get(Product, product_a.id) is None
        kept = db_session.get(SaleRecord, sale.id)
        assert kept.product_id is None
        assert kept.product_name == "Pomade"


class TestStockEdits:
    """Admin stock edits never undo a sale that committed after the admin's read."""

    def test_overwrite_after_concurrent_sale_conflicts(self, db_session, actor_a, product_a):
        seen = product_a.stock  # the admin's form was loaded at stock 5
        inventory_service.sell(actor_a, product_a.id, 3)

        with pytest.raises(ConflictError) as exc_info:
            inventory_service.upsert_product(
                actor_a, {"stock": 15, "expected_stock": seen}, product_a.id
            )

        assert exc_info.value.details == {"field": "stock", "stock": 2}
        assert db_session.get(Product, product_a.id).stock == 2

    def test_overwrite_with_current_level(self, db_session, actor_a, product_a):
        updated = inventory_service.upsert_product(
            actor_a, {"stock": 15, "expected_stock": 5, "min_stock": 2}, product_a.id
        )

        assert updated.stock == 15
        assert updated.min_stock == 2
        event = db_session.query(AuditEvent).filter_by(action="product.restocked").one()
        assert event.note == "stock 15"

    def test_overwrite_needs_expected_stock(self, db_session, actor_a, product_a):
        with pytest.raises(ValidationError) as exc_info:
            inventory_service.upsert_product(actor_a, {"stock": 15}, product_a.id)

        assert exc_info.value.details == {"field": "expected_stock"}
        assert db_session.get(Product, product_a.id).stock == 5

    def test_restock_keeps_concurrent_sale(self, db_session, actor_a, product_a):
        inventory_service.sell(actor_a, product_a.id, 3)

        updated = inventory_service.upsert_product(actor_a, {"restock": 10}, product_a.id)

        assert updated.stock == 12

    def test_negative_restock_below_zero(self, db_session, actor_a, product_a):
        with pytest.raises(InsufficientStock) as exc_info:
            inventory_service.upsert_product(actor_a, {"restock": -6}, product_a.id)

        assert exc_info.value.available == 5
        assert db_session.get(Product, product_a.id).stock == 5

    def test_stock_and_restock_together(self, actor_a, product_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(
                actor_a, {"stock": 1, "expected_stock": 5, "restock": 1}, product_a.id
            )

    def test_restock_on_create_rejected(self, actor_a):
        with pytest.raises(ValidationError):
            inventory_service.upsert_product(actor_a, {
                "name": "Gel", "cost_cents": 100, "price_cents": 200, "restock": 4,
            })


class TestConstraintRaces:
    """Constraint violations from a concurrent writer surface as ConflictError."""

    def test_barcode_taken_after_check(self, db_session, monkeypatch, actor_a, product_a):
        # The uniqueness check ran before the other product's insert was visible
        monkeypatch.setattr(store, "query", lambda *args, **kwargs: [])

        with pytest.raises(ConflictError) as exc_info:
            inventory_service.upsert_product(actor_a, {
                "name": "Wax", "cost_cents": 100, "price_cents": 200, "barcode": "7790001",
            })

        assert exc_info.value.details["field"] == "barcode"
        assert db_session.query(Product).filter_by(name="Wax").count() == 0

    def test_cost_raised_after_price_check(self, db_session, actor_a, product_a):
        db_session.get(Product, product_a.id)  # stale snapshot: cost 1000
        db_session.execute(
            update(Product)
            .where(Product.id == product_a.id)
            .values(cost_cents=1900)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(ConflictError):
            inventory_service.upsert_product(actor_a, {"price_cents": 1500}, product_a.id)

        assert db_session.get(Product, product_a.id).price_cents == 2000


class TestQueries:

    def test_search_and_category(self, actor_a, product_a):
        inventory_service.upsert_product(actor_a, {
            "name": "Cola", "category": "drinks", "cost_cents": 50, "price_cents": 150,
        })

        assert [p.name for p in inventory_service.list_products(actor_a, search="pom")] == ["Pomade"]
        assert [p.name for p in inventory_service.list_products(actor_a, category="drinks")] == ["Cola"]
        assert len(inventory_service.list_products(actor_a)) == 2

    def test_find_by_barcode(self, actor_a, actor_b, product_a, product_b):
        assert inventory_service.find_by_barcode(actor_a, "7790001").id == product_a.id
        assert inventory_service.find_by_barcode(actor_b, "7790001").id == product_b.id
        assert inventory_service.find_by_barcode(actor_a, "0000") is None

    def test_list_sales_range_is_end_exclusive(self, db_session, actor_a, product_a):
        sale = inventory_service.sell(actor_a, product_a.id, 1)
        created = sale.created_at

        assert len(inventory_service.list_sales(actor_a, start=created)) == 1
        assert inventory_service.list_sales(actor_a, end=created) == []


class TestPureDerivations:

    def _sale(self, product_id, name, quantity, price, profit, created_at):
        return SimpleNamespace(
            product_id=product_id, product_name=name, quantity=quantity,
            price_cents=price, profit_cents=profit, created_at=created_at,
        )

    def test_low_stock_includes_equal(self):
        products = [
            SimpleNamespace(name="a", stock=0, min_stock=0),
            SimpleNamespace(name="b", stock=2, min_stock=2),
            SimpleNamespace(name="c", stock=3, min_stock=2),
        ]
        assert [p.name for p in low_stock(products)] == ["a", "b"]

    def test_stats_for_period_is_end_exclusive(self):
        start = datetime(2026, 3, 1)
        end = datetime(2026, 4, 1)
        sales = [
            self._sale(1, "Pomade", 1, 2000, 1000, datetime(2026, 3, 1)),
            self._sale(1, "Pomade", 2, 4000, 2000, datetime(2026, 3, 31, 23, 59)),
            self._sale(2, "Cola", 1, 150, 100, datetime(2026, 4, 1)),
            self._sale(2, "Cola", 1, 150, 100, datetime(2026, 2, 28, 23, 59)),
        ]

        stats = stats_for_period(sales, start, end)

        assert stats.revenue_cents == 6000
        assert stats.profit_cents == 3000
        assert stats.count == 2
        assert stats.units == 3
        assert [p.product_name for p in stats.top_products] == ["Pomade"]

    def test_top_products_ranked_by_revenue(self):
        when = datetime(2026, 3, 5)
        sales = [
            self._sale(1, "Pomade", 1, 2000, 1000, when),
            self._sale(2, "Cola", 10, 1500, 1000, when),
            self._sale(3, "Comb", 1, 2500, 2000, when),
            self._sale(2, "Cola", 10, 1500, 1000, when),
        ]

        stats = stats_for_period(sales, top_n=2)

        assert [(p.product_name, p.revenue_cents) for p in stats.top_products] == [
            ("Cola", 3000),
            ("Comb", 2500),
        ]

    def test_stats_are_repeatable(self):
        sales = [self._sale(1, "Pomade", 1, 2000, 1000, datetime(2026, 3, 5))]
        assert stats_for_period(sales).to_dict() == stats_for_period(sales).to_dict()

    def test_inventory_stats_views(self, actor_a, product_a):
        inventory_service.sell(actor_a, product_a.id, 4)

        stats = inventory_service.inventory_stats(actor_a)

        assert stats["today"]["revenue_cents"] == 8000
        assert stats["month"]["count"] == 1
        assert stats["all_time"]["profit_cents"] == 4000
        assert stats["all_time"]["top_products"][0]["product_name"] == "Pomade"
        assert [p["name"] for p in stats["low_stock"]] == ["Pomade"]
