"""Tests for order business rules."""

from datetime import datetime, timezone

import pytest

from hostel_market.domain.models import (
    Order, OrderLine, OrderStatus, StatusHistoryEntry, SellerNotification,
    Identity, UserRole, compute_total, DELIVERY_CHARGE
)


def _order(status=OrderStatus.PENDING, sellers=("s1", "s2", "s1")):
    now = datetime.now(timezone.utc)
    lines = [
        OrderLine(product_id=f"p{i}", title=f"item {i}", price=10 * (i + 1), quantity=i + 1, seller_id=seller)
        for i, seller in enumerate(sellers)
    ]
    return Order(
        id="o1",
        buyer_id="b1",
        buyer_name="Buyer",
        buyer_email="b1@hostel.in",
        contact_number="123",
        hostel="Himalaya",
        room_number="101",
        payment_method="Cash",
        lines=lines,
        total_amount=compute_total(lines),
        status=status,
        status_history=[StatusHistoryEntry(status=OrderStatus.PENDING, changed_at=now, changed_by="system")],
        notifications=[SellerNotification(seller_id="s1", created_at=now)],
        created_at=now,
        updated_at=now,
    )


class TestOrderTotals:
    def test_total_includes_delivery_charge(self):
        order = _order()
        # 10*1 + 20*2 + 30*3
        assert order.total_amount == 140 + DELIVERY_CHARGE

    def test_delivery_charge_is_ten(self):
        assert DELIVERY_CHARGE == 10


class TestSellers:
    def test_distinct_sellers_in_first_appearance_order(self):
        assert _order().seller_ids() == ["s1", "s2"]

    def test_has_lines_from(self):
        order = _order()
        assert order.has_lines_from("s2")
        assert not order.has_lines_from("s3")

    def test_notification_for(self):
        order = _order()
        assert order.notification_for("s1").is_read is False
        assert order.notification_for("s2") is None


class TestSellerTransitions:
    @pytest.mark.parametrize(
        "current,requested,allowed",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED, True),
            (OrderStatus.CONFIRMED, OrderStatus.DELIVERED, True),
            (OrderStatus.PENDING, OrderStatus.DELIVERED, False),
            (OrderStatus.PENDING, OrderStatus.CANCELLED, False),
            (OrderStatus.CONFIRMED, OrderStatus.PENDING, False),
            (OrderStatus.CONFIRMED, OrderStatus.CONFIRMED, False),
            (OrderStatus.DELIVERED, OrderStatus.CONFIRMED, False),
            (OrderStatus.CANCELLED, OrderStatus.CONFIRMED, False),
        ],
    )
    def test_seller_transition_table(self, current, requested, allowed):
        assert _order(status=current).can_seller_move_to(requested) is allowed

    def test_active_statuses(self):
        assert _order(status=OrderStatus.CONFIRMED).is_active()
        assert not _order(status=OrderStatus.DELIVERED).is_active()


class TestVisibility:
    def test_buyer_sees_own_order(self):
        buyer = Identity(user_id="b1", email="b1@hostel.in", name="B", role=UserRole.BUYER)
        assert _order().is_visible_to(buyer)

    def test_stranger_does_not_see_order(self):
        stranger = Identity(user_id="x", email="x@hostel.in", name="X", role=UserRole.BUYER)
        assert not _order().is_visible_to(stranger)

    def test_seller_with_lines_sees_order(self):
        seller = Identity(user_id="s2", email="s2@hostel.in", name="S", role=UserRole.SELLER)
        assert _order().is_visible_to(seller)

    def test_admin_sees_everything(self):
        admin = Identity(user_id="a", email="a@hostel.in", name="A", role=UserRole.BUYER, is_admin=True)
        assert _order().is_visible_to(admin)
