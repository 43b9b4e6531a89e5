"""Tests for role-gated status transitions."""

import asyncio
from contextlib import asynccontextmanager

import pytest

from hostel_market.application.create_order import CreateOrderUseCase
from hostel_market.application.change_status import ChangeOrderStatusUseCase
from hostel_market.domain.models import OrderStatus, StatusHistoryEntry
from hostel_market.domain.exceptions import (
    UnauthorizedError, InvalidTransitionError, OrderNotFoundError, ConflictError
)


@pytest.fixture
async def order(uow, add_product, buyer, order_dto):
    chips = await add_product(seller_id="seller-1", quantity=5)
    return await CreateOrderUseCase(uow)(order_dto(buyer, (chips.id, 1)))


@pytest.fixture
def change_status(uow):
    return ChangeOrderStatusUseCase(uow)


class _RacingOrders:
    """Runs a competing transition right before the compare-and-set."""

    def __init__(self, orders, competitor):
        self._orders = orders
        self._competitor = competitor

    def __getattr__(self, name):
        return getattr(self._orders, name)

    async def compare_and_set_status(self, order_id, expected, entry):
        await self._competitor()
        return await self._orders.compare_and_set_status(order_id, expected, entry)


class RacingUnitOfWork:
    def __init__(self, inner, competitor):
        self._inner = inner
        self._competitor = competitor

    @asynccontextmanager
    async def __call__(self):
        async with self._inner() as tx:
            tx.orders = _RacingOrders(tx.orders, self._competitor)
            yield tx


async def _stored(uow, order_id):
    async with uow() as tx:
        return await tx.orders.get_by_id(order_id)


class TestSellerTransitions:
    async def test_seller_confirms_then_buyer_is_refused(self, uow, order, seller, buyer, change_status):
        updated = await change_status(order.id, seller, OrderStatus.CONFIRMED)

        assert updated.status == OrderStatus.CONFIRMED
        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.CONFIRMED
        assert [(e.status, e.changed_by) for e in stored.status_history] == [
            (OrderStatus.PENDING, "system"),
            (OrderStatus.CONFIRMED, seller.user_id),
        ]

        with pytest.raises(UnauthorizedError):
            await change_status(order.id, buyer, OrderStatus.DELIVERED)
        assert (await _stored(uow, order.id)).status == OrderStatus.CONFIRMED

    async def test_seller_delivers_confirmed_order(self, uow, order, seller, change_status):
        await change_status(order.id, seller, OrderStatus.CONFIRMED)
        await change_status(order.id, seller, OrderStatus.DELIVERED)

        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.DELIVERED
        assert len(stored.status_history) == 3

    @pytest.mark.parametrize("requested", [OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.PENDING])
    async def test_illegal_seller_transition_from_pending(self, uow, order, seller, change_status, requested):
        with pytest.raises(InvalidTransitionError):
            await change_status(order.id, seller, requested)

        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.PENDING
        assert len(stored.status_history) == 1

    async def test_seller_without_lines_is_unauthorized(self, uow, order, other_seller, change_status):
        with pytest.raises(UnauthorizedError):
            await change_status(order.id, other_seller, OrderStatus.CONFIRMED)
        assert (await _stored(uow, order.id)).status == OrderStatus.PENDING

    async def test_unknown_order_looks_like_foreign_order_to_seller(self, seller, change_status):
        with pytest.raises(UnauthorizedError):
            await change_status("missing", seller, OrderStatus.CONFIRMED)

    async def test_unknown_order_for_admin(self, admin, change_status):
        with pytest.raises(OrderNotFoundError):
            await change_status("missing", admin, OrderStatus.CANCELLED)

    async def test_unauthenticated_caller(self, order, change_status):
        with pytest.raises(UnauthorizedError):
            await change_status(order.id, None, OrderStatus.CONFIRMED)


class TestAdminTransitions:
    @pytest.mark.parametrize("before", [OrderStatus.PENDING, OrderStatus.CONFIRMED])
    async def test_admin_cancels_any_active_order(self, uow, order, seller, admin, change_status, before):
        if before == OrderStatus.CONFIRMED:
            await change_status(order.id, seller, OrderStatus.CONFIRMED)

        updated = await change_status(order.id, admin, OrderStatus.CANCELLED)

        assert updated.status == OrderStatus.CANCELLED
        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.CANCELLED
        assert stored.status_history[-1].changed_by == admin.email

    async def test_admin_overrides_terminal_state(self, uow, order, admin, change_status):
        await change_status(order.id, admin, OrderStatus.DELIVERED)
        await change_status(order.id, admin, OrderStatus.PENDING)

        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.PENDING
        assert [e.status for e in stored.status_history] == [
            OrderStatus.PENDING, OrderStatus.DELIVERED, OrderStatus.PENDING
        ]

    async def test_cancellation_does_not_restock(self, order, admin, change_status, get_product):
        product_id = order.lines[0].product_id
        before = (await get_product(product_id)).quantity

        await change_status(order.id, admin, OrderStatus.CANCELLED)

        assert (await get_product(product_id)).quantity == before


class TestConcurrency:
    async def test_stale_expected_status_is_rejected(self, uow, order, seller, change_status):
        await change_status(order.id, seller, OrderStatus.CONFIRMED)

        async with uow() as tx:
            entry = StatusHistoryEntry(
                status=OrderStatus.CANCELLED, changed_at=order.created_at, changed_by="admin@hostel.in"
            )
            assert await tx.orders.compare_and_set_status(order.id, OrderStatus.PENDING, entry) is False
            await tx.commit()

        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.CONFIRMED
        assert len(stored.status_history) == 2

    async def test_lost_race_raises_conflict(self, uow, order, seller, admin, change_status):
        async def competitor():
            await change_status(order.id, admin, OrderStatus.CANCELLED)

        with pytest.raises(ConflictError):
            await ChangeOrderStatusUseCase(RacingUnitOfWork(uow, competitor))(
                order.id, seller, OrderStatus.CONFIRMED
            )

        stored = await _stored(uow, order.id)
        assert stored.status == OrderStatus.CANCELLED
        assert [e.status for e in stored.status_history] == [OrderStatus.PENDING, OrderStatus.CANCELLED]

    async def test_parallel_confirmations_apply_once(self, uow, order, seller, change_status):
        results = await asyncio.gather(
            change_status(order.id, seller, OrderStatus.CONFIRMED),
            change_status(order.id, seller, OrderStatus.CONFIRMED),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], (ConflictError, InvalidTransitionError))
        stored = await _stored(uow, order.id)
        assert [e.status for e in stored.status_history] == [OrderStatus.PENDING, OrderStatus.CONFIRMED]
