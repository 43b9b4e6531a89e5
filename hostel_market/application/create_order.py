import logging
from pydantic import BaseModel
from datetime import datetime, timezone
import uuid

from hostel_market.domain.models import (
    Order, OrderLine, OrderStatus, StatusHistoryEntry, SellerNotification,
    Hostel, PaymentMethod, DELIVERY_CHARGE, SYSTEM_ACTOR, compute_total
)
from hostel_market.domain.exceptions import OrderValidationError
from hostel_market.application.inventory import InventoryLedger


logger = logging.getLogger(__name__)


class OrderLineDTO(BaseModel):
    product_id: str
    quantity: int


class CreateOrderDTO(BaseModel):
    buyer_id: str
    buyer_name: str
    buyer_email: str
    contact_number: str
    hostel: Hostel
    room_number: str
    payment_method: PaymentMethod
    lines: list[OrderLineDTO]


class CreateOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_data: CreateOrderDTO) -> Order:
        logger.info(f"Создание заказа для покупателя {order_data.buyer_id}, строк: {len(order_data.lines)}")

        # 1. Валидация
        if not order_data.contact_number.strip():
            raise OrderValidationError("Не указан контактный номер")
        if not order_data.room_number.strip():
            raise OrderValidationError("Не указан номер комнаты")
        if not order_data.lines:
            raise OrderValidationError("Заказ не содержит товаров")

        async with self._uow() as uow:
            # 2. Резервирование остатков
            ledger = InventoryLedger(uow.products)
            products = await ledger.reserve(
                (line.product_id, line.quantity) for line in order_data.lines
            )

            # 3. Снимок строк и расчет суммы
            lines = [
                OrderLine(
                    product_id=line.product_id,
                    title=products[line.product_id].title,
                    price=products[line.product_id].price,
                    quantity=line.quantity,
                    seller_id=products[line.product_id].seller_id,
                )
                for line in order_data.lines
            ]

            now = datetime.now(timezone.utc)
            order = Order(
                id=str(uuid.uuid4()),
                buyer_id=order_data.buyer_id,
                buyer_name=order_data.buyer_name,
                buyer_email=order_data.buyer_email,
                contact_number=order_data.contact_number.strip(),
                hostel=order_data.hostel,
                room_number=order_data.room_number.strip(),
                payment_method=order_data.payment_method,
                lines=lines,
                delivery_charge=DELIVERY_CHARGE,
                total_amount=compute_total(lines),
                status=OrderStatus.PENDING,
                status_history=[
                    StatusHistoryEntry(status=OrderStatus.PENDING, changed_at=now, changed_by=SYSTEM_ACTOR)
                ],
                notifications=[],
                created_at=now,
                updated_at=now,
            )
            # 4. Уведомления продавцам, по одному на продавца
            order.notifications = [
                SellerNotification(seller_id=seller_id, is_read=False, created_at=now)
                for seller_id in order.seller_ids()
            ]

            await uow.orders.create(order)
            await uow.commit()

        logger.info(
            f"Заказ создан: {order.id}, сумма {order.total_amount}, продавцов: {len(order.notifications)}"
        )
        return order
