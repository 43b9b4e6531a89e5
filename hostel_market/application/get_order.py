from hostel_market.domain.models import Order, Identity
from hostel_market.domain.exceptions import OrderNotFoundError


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, identity: Identity) -> Order:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
        # Чужой заказ выглядит так же, как несуществующий
        if not order or not order.is_visible_to(identity):
            raise OrderNotFoundError(f"Заказ {order_id} не найден")
        return order
