"""
Unit tests for the cart reconciliation engine and the sanitize step.

The engine runs against the in-memory FakeFirestore through the real
CartStore and ProductCatalog repositories.
"""
from decimal import Decimal

import pytest

from storefront.core.errors import InvalidInput, NotFound, StoreUnavailable
from storefront.model.cart import CartLine
from storefront.services.cart_engine import sanitize


def _line(pid, qty=1, price="10.00"):
    return CartLine(product_id=pid, quantity=qty, unit_price=Decimal(price))


class TestSanitize:
    """sanitize() restores the cart invariants on whatever was stored"""

    def test_missing_lines_yield_empty_cart(self):
        assert sanitize(None) == ([], 0)

    def test_non_list_is_dropped_entirely(self):
        assert sanitize({"product_id": "tee-001"}) == ([], 1)

    def test_malformed_entries_are_dropped(self):
        raw = [
            {"product_id": "tee-001", "quantity": 2, "unit_price": 19.99},
            {"product_id": "tee-002", "quantity": 0, "unit_price": 5},
            {"product_id": "tee-003", "quantity": -1, "unit_price": 5},
            {"product_id": "tee-004", "quantity": 1.5, "unit_price": 5},
            {"product_id": "tee-005", "quantity": True, "unit_price": 5},
            {"product_id": "bad id", "quantity": 1, "unit_price": 5},
            {"product_id": None, "quantity": 1, "unit_price": 5},
            {"product_id": "tee-006", "quantity": 1},
            {"product_id": "tee-007", "quantity": 1, "unit_price": -3},
            {"product_id": "tee-008", "quantity": 1, "unit_price": "NaN"},
            "tee-009",
        ]

        lines, dropped = sanitize(raw)

        assert [line.product_id for line in lines] == ["tee-001"]
        assert lines[0].quantity == 2
        assert lines[0].unit_price == Decimal("19.99")
        assert dropped == 10

    def test_duplicates_keep_first_occurrence(self):
        raw = [
            {"product_id": "a", "quantity": 1, "unit_price": 3},
            {"product_id": "b", "quantity": 4, "unit_price": 1},
            {"product_id": "a", "quantity": 9, "unit_price": 7},
        ]

        lines, dropped = sanitize(raw)

        assert [(line.product_id, line.quantity) for line in lines] == [("a", 1), ("b", 4)]
        assert lines[0].unit_price == Decimal("3")
        assert dropped == 1

    def test_unresolvable_products_are_dropped(self):
        lines, dropped = sanitize([_line("a"), _line("gone"), _line("b")], resolvable={"a", "b"})

        assert [line.product_id for line in lines] == ["a", "b"]
        assert dropped == 1

    def test_clean_input_is_unchanged(self):
        clean = [_line("a", 2), _line("b", 1)]

        lines, dropped = sanitize(clean)

        assert lines == clean
        assert dropped == 0


class TestFetch:

    def test_missing_cart_is_created_empty_and_persisted(self, engine, db):
        cart = engine.fetch("alice")

        assert cart.owner_id == "alice"
        assert cart.lines == []
        assert cart.total == Decimal("0.00")
        assert db.doc("carts", "alice")["lines"] == []

    def test_corrupt_document_is_sanitized_and_written_back(self, engine, db):
        # Arrange
        db.put("carts", "alice", {"owner_id": "alice", "lines": [
            {"product_id": "tee-001", "quantity": 2, "unit_price": 19.99},
            {"product_id": "tee-001", "quantity": 5, "unit_price": 1.0},
            {"product_id": "jeans-002", "quantity": 0, "unit_price": 49.5},
        ]})

        # Act
        cart = engine.fetch("alice")

        # Assert
        assert [(line.product_id, line.quantity) for line in cart.lines] == [("tee-001", 2)]
        stored = db.doc("carts", "alice")["lines"]
        assert stored == [{"product_id": "tee-001", "quantity": 2, "unit_price": 19.99}]

    def test_lines_of_deleted_products_are_dropped(self, engine, db):
        db.put("carts", "alice", {"owner_id": "alice", "lines": [
            {"product_id": "retired-99", "quantity": 1, "unit_price": 5.0},
            {"product_id": "never-existed", "quantity": 1, "unit_price": 5.0},
            {"product_id": "kids-hoodie", "quantity": 3, "unit_price": 25.0},
        ]})

        cart = engine.fetch("alice")

        assert [line.product_id for line in cart.lines] == ["kids-hoodie"]
        assert len(db.doc("carts", "alice")["lines"]) == 1

    def test_clean_cart_is_not_rewritten(self, engine, db):
        doc = {"owner_id": "alice", "last_modified": None, "lines": [
            {"product_id": "tee-001", "quantity": 1, "unit_price": 19.99},
        ]}
        db.put("carts", "alice", doc)

        engine.fetch("alice")

        # last_modified would be stamped by a save
        assert db.doc("carts", "alice") == doc


class TestAddOrIncrement:

    def test_first_add_snapshots_catalog_price(self, engine):
        cart = engine.add_or_increment("alice", "tee-001")

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 1
        assert cart.lines[0].unit_price == Decimal("19.99")
        assert cart.last_modified is not None

    def test_repeated_add_increments_the_single_line(self, engine):
        engine.add_or_increment("alice", "tee-001")
        cart = engine.add_or_increment("alice", "tee-001", 2)

        assert [(line.product_id, line.quantity) for line in cart.lines] == [("tee-001", 3)]

    def test_negative_delta_decrements(self, engine):
        engine.add_or_increment("alice", "tee-001", 3)
        cart = engine.add_or_increment("alice", "tee-001", -1)

        assert cart.find("tee-001").quantity == 2

    @pytest.mark.parametrize("delta", [-2, -5])
    def test_line_dropping_to_zero_or_below_is_removed(self, engine, db, delta):
        engine.add_or_increment("alice", "tee-001", 2)

        cart = engine.add_or_increment("alice", "tee-001", delta)

        assert cart.lines == []
        assert db.doc("carts", "alice")["lines"] == []

    @pytest.mark.parametrize("delta", [0, -1])
    def test_non_positive_delta_on_missing_line_is_a_no_op(self, engine, delta):
        engine.add_or_increment("alice", "jeans-002")

        # product not in the catalog either: no lookup happens, so no NotFound
        cart = engine.add_or_increment("alice", "never-existed", delta)

        assert [line.product_id for line in cart.lines] == ["jeans-002"]

    def test_zero_delta_on_existing_line_keeps_quantity(self, engine):
        engine.add_or_increment("alice", "tee-001", 2)

        cart = engine.add_or_increment("alice", "tee-001", 0)

        assert cart.find("tee-001").quantity == 2

    def test_unknown_product_is_not_found_and_cart_unchanged(self, engine, db):
        engine.add_or_increment("alice", "tee-001")

        with pytest.raises(NotFound):
            engine.add_or_increment("alice", "no-such-product")

        assert [line["product_id"] for line in db.doc("carts", "alice")["lines"]] == ["tee-001"]

    def test_soft_deleted_product_cannot_be_added(self, engine):
        with pytest.raises(NotFound):
            engine.add_or_increment("alice", "retired-99")

    @pytest.mark.parametrize("product_id", ["", "   ", "bad id", "a/b", "x" * 129, None, 42])
    def test_malformed_product_id_is_invalid(self, engine, product_id):
        with pytest.raises(InvalidInput):
            engine.add_or_increment("alice", product_id)

    @pytest.mark.parametrize("delta", ["2", 1.5, None, True])
    def test_non_integer_delta_is_invalid(self, engine, delta):
        with pytest.raises(InvalidInput):
            engine.add_or_increment("alice", "tee-001", delta)

    def test_pasted_invisible_characters_are_stripped(self, engine):
        cart = engine.add_or_increment("alice", "\u200btee-001\xa0 ")

        assert cart.lines[0].product_id == "tee-001"

    def test_increment_keeps_original_price_after_catalog_change(self, engine, db):
        # Arrange
        engine.add_or_increment("alice", "tee-001")
        db.data["products"]["tee-001"]["price"] = 29.99

        # Act
        cart = engine.add_or_increment("alice", "tee-001")

        # Assert
        assert cart.find("tee-001").quantity == 2
        assert cart.find("tee-001").unit_price == Decimal("19.99")
        assert cart.total == Decimal("39.98")

    def test_carts_are_isolated_per_owner(self, engine):
        engine.add_or_increment("alice", "tee-001")
        bob = engine.add_or_increment("bob", "jeans-002")

        assert [line.product_id for line in bob.lines] == ["jeans-002"]
        assert [line.product_id for line in engine.fetch("alice").lines] == ["tee-001"]


class TestSetQuantity:

    def test_sets_absolute_quantity(self, engine):
        engine.add_or_increment("alice", "tee-001", 4)

        cart = engine.set_quantity("alice", "tee-001", 2)

        assert cart.find("tee-001").quantity == 2

    def test_keeps_snapshot_price(self, engine, db):
        engine.add_or_increment("alice", "jeans-002")
        db.data["products"]["jeans-002"]["price"] = 10.0

        cart = engine.set_quantity("alice", "jeans-002", 3)

        assert cart.find("jeans-002").unit_price == Decimal("49.5")
        assert cart.total == Decimal("148.50")

    def test_missing_line_is_not_found_and_never_inserted(self, engine, db):
        with pytest.raises(NotFound):
            engine.set_quantity("alice", "tee-001", 2)

        assert db.doc("carts", "alice") is None

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_is_invalid(self, engine, quantity):
        engine.add_or_increment("alice", "tee-001")

        with pytest.raises(InvalidInput):
            engine.set_quantity("alice", "tee-001", quantity)

        assert engine.fetch("alice").find("tee-001").quantity == 1

    def test_malformed_product_id_is_invalid(self, engine):
        with pytest.raises(InvalidInput):
            engine.set_quantity("alice", "bad id", 1)


class TestRemoveAndClear:

    def test_remove_drops_whole_line(self, engine):
        engine.add_or_increment("alice", "tee-001", 5)
        engine.add_or_increment("alice", "kids-hoodie")

        cart = engine.remove("alice", "tee-001")

        assert [line.product_id for line in cart.lines] == ["kids-hoodie"]

    def test_remove_missing_line_is_not_found(self, engine):
        engine.add_or_increment("alice", "kids-hoodie")

        with pytest.raises(NotFound):
            engine.remove("alice", "tee-001")

    def test_clear_empties_and_persists(self, engine, db):
        engine.add_or_increment("alice", "tee-001")
        engine.add_or_increment("alice", "jeans-002")

        cart = engine.clear("alice")

        assert cart.lines == []
        assert db.doc("carts", "alice")["lines"] == []

    def test_clear_on_missing_cart_creates_it_empty(self, engine, db):
        engine.clear("zoe")

        assert db.doc("carts", "zoe")["lines"] == []


class TestTotals:

    def test_total_is_sum_of_snapshot_line_totals(self, engine):
        engine.add_or_increment("alice", "tee-001", 2)
        cart = engine.add_or_increment("alice", "jeans-002")

        assert cart.total == Decimal("89.48")
        assert cart.item_count == 3

    def test_populate_returns_current_catalog_entries(self, engine):
        cart = engine.add_or_increment("alice", "kids-hoodie")

        products = engine.populate(cart)

        assert set(products) == {"kids-hoodie"}
        assert products["kids-hoodie"].name == "Kids Hoodie"


class TestStoreFailures:

    def test_read_failure_is_store_unavailable(self, engine, db):
        db.fail = True

        with pytest.raises(StoreUnavailable):
            engine.fetch("alice")

    def test_failed_write_leaves_previous_state(self, engine, db, monkeypatch):
        engine.add_or_increment("alice", "tee-001")
        before = db.doc("carts", "alice")

        def broken_set(self, data):
            db.fail = True
            db.check()

        monkeypatch.setattr(type(db.collection("carts").document("alice")), "set", broken_set)

        with pytest.raises(StoreUnavailable):
            engine.add_or_increment("alice", "tee-001")

        assert db.doc("carts", "alice") == before


class TestCartProperties:

    def test_price_change_example(self, engine, db):
        # Arrange
        db.put("products", "p1", {"name": "P1", "price": 10.00, "is_deleted": False})

        # Act
        first = engine.add_or_increment("alice", "p1", 2)
        db.data["products"]["p1"]["price"] = 15.00
        second = engine.add_or_increment("alice", "p1", 1)

        # Assert
        assert (first.find("p1").quantity, first.find("p1").unit_price, first.total) == (
            2, Decimal("10"), Decimal("20.00"))
        assert (second.find("p1").quantity, second.find("p1").unit_price, second.total) == (
            3, Decimal("10"), Decimal("30.00"))

    @pytest.mark.parametrize("deltas", [[1], [3, 2], [1, 1, 1, 1], [5, -2, 4], [2, -1, 3, -2]])
    def test_quantity_is_sum_of_deltas(self, engine, db, deltas):
        for i, delta in enumerate(deltas):
            # every step sees a different catalog price
            db.data["products"]["tee-001"]["price"] = 19.99 + i
            cart = engine.add_or_increment("alice", "tee-001", delta)

        assert cart.find("tee-001").quantity == sum(deltas)
        assert cart.find("tee-001").unit_price == Decimal("19.99")

    def test_minus_five_on_quantity_three_removes_line(self, engine):
        engine.add_or_increment("alice", "tee-001", 3)

        cart = engine.add_or_increment("alice", "tee-001", -5)

        assert cart.find("tee-001") is None

    def test_second_remove_is_not_found(self, engine):
        engine.add_or_increment("alice", "tee-001")

        engine.remove("alice", "tee-001")
        with pytest.raises(NotFound):
            engine.remove("alice", "tee-001")

    def test_clear_then_fetch_is_empty(self, engine):
        engine.add_or_increment("alice", "tee-001", 4)
        engine.add_or_increment("alice", "kids-hoodie", 1)

        engine.clear("alice")
        cart = engine.fetch("alice")

        assert cart.lines == []
        assert cart.total == Decimal("0.00")

    def test_consecutive_fetches_are_identical(self, engine):
        engine.add_or_increment("alice", "tee-001", 2)
        engine.add_or_increment("alice", "jeans-002", 1)

        first = engine.fetch("alice")
        second = engine.fetch("alice")

        assert first.lines == second.lines
        assert first.total == second.total


class TestMutationsSanitizeFirst:
    """A stored cart is cleaned before any mutation is applied to it"""

    def test_increment_on_duplicated_lines_keeps_first(self, engine, db):
        # Arrange
        db.put("carts", "alice", {"owner_id": "alice", "lines": [
            {"product_id": "tee-001", "quantity": 2, "unit_price": 19.99},
            {"product_id": "tee-001", "quantity": 5, "unit_price": 1.0},
        ]})

        # Act
        cart = engine.add_or_increment("alice", "tee-001", 1)

        # Assert
        assert [(line.product_id, line.quantity) for line in cart.lines] == [("tee-001", 3)]
        assert db.doc("carts", "alice")["lines"] == [
            {"product_id": "tee-001", "quantity": 3, "unit_price": 19.99},
        ]

    def test_set_quantity_persists_cleaned_document(self, engine, db):
        db.put("carts", "alice", {"owner_id": "alice", "lines": [
            {"product_id": "jeans-002", "quantity": -4, "unit_price": 49.5},
            {"product_id": "tee-001", "quantity": 1, "unit_price": 19.99},
            "garbage",
        ]})

        engine.set_quantity("alice", "tee-001", 4)

        assert db.doc("carts", "alice")["lines"] == [
            {"product_id": "tee-001", "quantity": 4, "unit_price": 19.99},
        ]

    def test_remove_persists_cleaned_document(self, engine, db):
        db.put("carts", "alice", {"owner_id": "alice", "lines": [
            {"product_id": "tee-001", "quantity": 1, "unit_price": 19.99},
            {"product_id": "kids-hoodie", "quantity": 2},
            {"product_id": "jeans-002", "quantity": 1, "unit_price": 49.5},
        ]})

        engine.remove("alice", "tee-001")

        assert db.doc("carts", "alice")["lines"] == [
            {"product_id": "jeans-002", "quantity": 1, "unit_price": 49.5},
        ]

    def test_malformed_line_cannot_be_targeted(self, engine, db):
        db.put("carts", "alice", {"owner_id": "alice", "lines": [
            {"product_id": "kids-hoodie", "quantity": 0, "unit_price": 25.0},
        ]})

        with pytest.raises(NotFound):
            engine.set_quantity("alice", "kids-hoodie", 2)
