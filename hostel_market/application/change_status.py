import logging
from datetime import datetime, timezone

from hostel_market.domain.models import Order, OrderStatus, StatusHistoryEntry, Identity
from hostel_market.domain.exceptions import (
    OrderNotFoundError, UnauthorizedError, InvalidTransitionError, ConflictError
)


logger = logging.getLogger(__name__)


class ChangeOrderStatusUseCase:
    """Смена статуса заказа с проверкой роли.

    Администратор может выставить любой статус из любого. Продавец, у которого
    есть строки в заказе, может только pending -> confirmed и
    confirmed -> delivered. У покупателя прав на смену статуса нет.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, identity: Identity, new_status: OrderStatus) -> Order:
        if identity is None:
            raise UnauthorizedError("Требуется авторизация")
        if not identity.is_admin and not identity.is_seller:
            logger.warning(f"Покупатель {identity.user_id} пытался сменить статус заказа {order_id}")
            raise UnauthorizedError("Покупатель не может менять статус заказа")

        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                # Продавцу не сообщаем, существует ли чужой заказ
                if not identity.is_admin:
                    raise UnauthorizedError("В заказе нет ваших товаров")
                raise OrderNotFoundError(f"Заказ {order_id} не найден")

            if identity.is_admin:
                actor = identity.email
            else:
                if not order.has_lines_from(identity.user_id):
                    logger.warning(f"Продавец {identity.user_id} не участвует в заказе {order_id}")
                    raise UnauthorizedError("В заказе нет ваших товаров")
                if not order.can_seller_move_to(new_status):
                    raise InvalidTransitionError(order.status.value, new_status.value)
                actor = identity.user_id

            entry = StatusHistoryEntry(
                status=new_status,
                changed_at=datetime.now(timezone.utc),
                changed_by=actor,
            )
            # CAS: статус меняется, только если его никто не изменил параллельно
            updated = await uow.orders.compare_and_set_status(order_id, order.status, entry)
            if not updated:
                logger.warning(f"Статус заказа {order_id} изменен параллельно, ожидался {order.status.value}")
                raise ConflictError(f"Статус заказа {order_id} уже изменен, повторите запрос")
            await uow.commit()

        logger.info(f"Заказ {order_id}: {order.status.value} -> {new_status.value} ({actor})")
        return order.model_copy(update={
            "status": new_status,
            "status_history": [*order.status_history, entry],
            "updated_at": entry.changed_at,
        })
