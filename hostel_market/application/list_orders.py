import logging
from typing import List

from hostel_market.domain.models import Order, Identity, ACTIVE_STATUSES
from hostel_market.domain.exceptions import UnauthorizedError


logger = logging.getLogger(__name__)


class ListAdminOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, identity: Identity) -> List[Order]:
        if identity is None or not identity.is_admin:
            raise UnauthorizedError("Требуются права администратора")
        async with self._uow() as uow:
            return await uow.orders.list_all()


class ListSellerOrdersUseCase:
    """Активная очередь продавца.

    Возвращает заказы в статусах pending/confirmed, где есть товары продавца,
    и отмечает уведомления продавца по этим заказам прочитанными.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, identity: Identity) -> List[Order]:
        if identity is None or not identity.is_seller:
            raise UnauthorizedError("Заказы продавца доступны только продавцам")

        async with self._uow() as uow:
            orders = await uow.orders.list_for_seller(identity.user_id, ACTIVE_STATUSES)
            unread_ids = []
            for order in orders:
                notification = order.notification_for(identity.user_id)
                if notification is not None and not notification.is_read:
                    unread_ids.append(order.id)
            if unread_ids:
                marked = await uow.orders.mark_notifications_read(identity.user_id, unread_ids)
                await uow.commit()
                logger.info(f"Продавец {identity.user_id}: прочитано уведомлений {marked}")

        for order in orders:
            notification = order.notification_for(identity.user_id)
            if notification is not None:
                notification.is_read = True
        return orders


class ListBuyerOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, identity: Identity) -> List[Order]:
        if identity is None:
            raise UnauthorizedError("Требуется авторизация")
        async with self._uow() as uow:
            return await uow.orders.list_for_buyer(identity.user_id)


class CountUnreadNotificationsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, identity: Identity) -> int:
        if identity is None or not identity.is_seller:
            raise UnauthorizedError("Уведомления доступны только продавцам")
        async with self._uow() as uow:
            return await uow.orders.count_unread(identity.user_id, ACTIVE_STATUSES)
