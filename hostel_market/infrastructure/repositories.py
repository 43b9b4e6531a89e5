from collections import defaultdict
from typing import Optional, List, Iterable
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_market.domain.models import (
    Order, OrderLine, OrderStatus, StatusHistoryEntry, SellerNotification,
    Product, Hostel, PaymentMethod
)
from hostel_market.infrastructure.db_schema import (
    products_tbl, orders_tbl, order_lines_tbl, order_notifications_tbl, order_status_history_tbl
)
from hostel_market.application.interfaces import ProductRepository, OrderRepository


class SQLAlchemyProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        result = await self._session.execute(
            select(products_tbl).where(products_tbl.c.id == product_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_many(self, product_ids: Iterable[str]) -> dict[str, Product]:
        ids = list(product_ids)
        if not ids:
            return {}
        result = await self._session.execute(
            select(products_tbl).where(products_tbl.c.id.in_(ids))
        )
        return {row.id: self._to_domain(row) for row in result.fetchall()}

    async def create(self, product: Product) -> None:
        stmt = insert(products_tbl).values(
            id=product.id,
            title=product.title,
            description=product.description,
            price=product.price,
            quantity=product.quantity,
            image=product.image,
            hostel=product.hostel,
            seller_id=product.seller_id,
            seller_name=product.seller_name,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at
        )
        await self._session.execute(stmt)

    async def list_active(self, hostel: Optional[Hostel] = None, seller_id: Optional[str] = None) -> List[Product]:
        query = select(products_tbl).where(products_tbl.c.is_active.is_(True))
        if hostel:
            query = query.where(products_tbl.c.hostel == hostel)
        if seller_id:
            query = query.where(products_tbl.c.seller_id == seller_id)
        result = await self._session.execute(query.order_by(products_tbl.c.created_at.desc()))
        return [self._to_domain(row) for row in result.fetchall()]

    async def update(self, product_id: str, seller_id: str, values: dict) -> Optional[Product]:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id, products_tbl.c.seller_id == seller_id)
            .values(**values, updated_at=datetime.now(timezone.utc))
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(product_id)

    async def deactivate(self, product_id: str, seller_id: str) -> bool:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id, products_tbl.c.seller_id == seller_id)
            .values(is_active=False, updated_at=datetime.now(timezone.utc))
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def decrement_if_available(self, product_id: str, quantity: int) -> bool:
        """Атомарное списание: остаток уменьшается, только если его хватает"""
        stmt = (
            update(products_tbl)
            .where(
                products_tbl.c.id == product_id,
                products_tbl.c.is_active.is_(True),
                products_tbl.c.quantity >= quantity
            )
            .values(
                quantity=products_tbl.c.quantity - quantity,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def increment(self, product_id: str, seller_id: str, quantity: int) -> bool:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id, products_tbl.c.seller_id == seller_id)
            .values(
                quantity=products_tbl.c.quantity + quantity,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    def _to_domain(self, row) -> Product:
        """Трансформация DB → Domain"""
        return Product(
            id=row.id,
            title=row.title,
            description=row.description,
            price=row.price,
            quantity=row.quantity,
            image=row.image,
            hostel=Hostel(row.hostel),
            seller_id=row.seller_id,
            seller_name=row.seller_name,
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        orders = await self._to_domain(result.fetchall())
        return orders[0] if orders else None

    async def create(self, order: Order) -> None:
        await self._session.execute(
            insert(orders_tbl).values(
                id=order.id,
                buyer_id=order.buyer_id,
                buyer_name=order.buyer_name,
                buyer_email=order.buyer_email,
                contact_number=order.contact_number,
                hostel=order.hostel,
                room_number=order.room_number,
                payment_method=order.payment_method,
                delivery_charge=order.delivery_charge,
                total_amount=order.total_amount,
                status=order.status,
                created_at=order.created_at,
                updated_at=order.updated_at
            )
        )
        await self._session.execute(
            insert(order_lines_tbl),
            [
                {
                    "order_id": order.id,
                    "position": position,
                    "product_id": line.product_id,
                    "title": line.title,
                    "price": line.price,
                    "quantity": line.quantity,
                    "seller_id": line.seller_id,
                }
                for position, line in enumerate(order.lines)
            ]
        )
        if order.notifications:
            await self._session.execute(
                insert(order_notifications_tbl),
                [
                    {
                        "order_id": order.id,
                        "seller_id": n.seller_id,
                        "is_read": n.is_read,
                        "created_at": n.created_at,
                    }
                    for n in order.notifications
                ]
            )
        await self._session.execute(
            insert(order_status_history_tbl),
            [
                {
                    "order_id": order.id,
                    "status": entry.status,
                    "changed_at": entry.changed_at,
                    "changed_by": entry.changed_by,
                }
                for entry in order.status_history
            ]
        )

    async def list_all(self) -> List[Order]:
        result = await self._session.execute(
            select(orders_tbl).order_by(orders_tbl.c.created_at.desc())
        )
        return await self._to_domain(result.fetchall())

    async def list_for_buyer(self, buyer_id: str) -> List[Order]:
        result = await self._session.execute(
            select(orders_tbl)
            .where(orders_tbl.c.buyer_id == buyer_id)
            .order_by(orders_tbl.c.created_at.desc())
        )
        return await self._to_domain(result.fetchall())

    async def list_for_seller(self, seller_id: str, statuses: Iterable[OrderStatus]) -> List[Order]:
        seller_orders = select(order_lines_tbl.c.order_id).where(order_lines_tbl.c.seller_id == seller_id)
        result = await self._session.execute(
            select(orders_tbl)
            .where(
                orders_tbl.c.id.in_(seller_orders),
                orders_tbl.c.status.in_(list(statuses))
            )
            .order_by(orders_tbl.c.created_at.desc())
        )
        return await self._to_domain(result.fetchall())

    async def compare_and_set_status(
        self, order_id: str, expected: OrderStatus, entry: StatusHistoryEntry
    ) -> bool:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id, orders_tbl.c.status == expected)
            .values(status=entry.status, updated_at=entry.changed_at)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            return False

        await self._session.execute(
            insert(order_status_history_tbl).values(
                order_id=order_id,
                status=entry.status,
                changed_at=entry.changed_at,
                changed_by=entry.changed_by
            )
        )
        return True

    async def mark_notifications_read(self, seller_id: str, order_ids: Iterable[str]) -> int:
        ids = list(order_ids)
        if not ids:
            return 0
        stmt = (
            update(order_notifications_tbl)
            .where(
                order_notifications_tbl.c.seller_id == seller_id,
                order_notifications_tbl.c.order_id.in_(ids),
                order_notifications_tbl.c.is_read.is_(False)
            )
            .values(is_read=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    async def count_unread(self, seller_id: str, statuses: Iterable[OrderStatus]) -> int:
        result = await self._session.execute(
            select(func.count(orders_tbl.c.id))
            .select_from(
                orders_tbl.join(
                    order_notifications_tbl,
                    order_notifications_tbl.c.order_id == orders_tbl.c.id
                )
            )
            .where(
                order_notifications_tbl.c.seller_id == seller_id,
                order_notifications_tbl.c.is_read.is_(False),
                orders_tbl.c.status.in_(list(statuses))
            )
        )
        return result.scalar_one()

    async def _to_domain(self, rows) -> List[Order]:
        """Трансформация DB → Domain, дочерние записи грузятся пачкой"""
        if not rows:
            return []
        ids = [row.id for row in rows]

        lines = defaultdict(list)
        result = await self._session.execute(
            select(order_lines_tbl)
            .where(order_lines_tbl.c.order_id.in_(ids))
            .order_by(order_lines_tbl.c.order_id, order_lines_tbl.c.position)
        )
        for row in result.fetchall():
            lines[row.order_id].append(OrderLine(
                product_id=row.product_id,
                title=row.title,
                price=row.price,
                quantity=row.quantity,
                seller_id=row.seller_id
            ))

        notifications = defaultdict(list)
        result = await self._session.execute(
            select(order_notifications_tbl)
            .where(order_notifications_tbl.c.order_id.in_(ids))
            .order_by(order_notifications_tbl.c.order_id, order_notifications_tbl.c.created_at)
        )
        for row in result.fetchall():
            notifications[row.order_id].append(SellerNotification(
                seller_id=row.seller_id,
                is_read=row.is_read,
                created_at=row.created_at
            ))

        history = defaultdict(list)
        result = await self._session.execute(
            select(order_status_history_tbl)
            .where(order_status_history_tbl.c.order_id.in_(ids))
            .order_by(order_status_history_tbl.c.id)
        )
        for row in result.fetchall():
            history[row.order_id].append(StatusHistoryEntry(
                status=OrderStatus(row.status),
                changed_at=row.changed_at,
                changed_by=row.changed_by
            ))

        return [
            Order(
                id=row.id,
                buyer_id=row.buyer_id,
                buyer_name=row.buyer_name,
                buyer_email=row.buyer_email,
                contact_number=row.contact_number,
                hostel=Hostel(row.hostel),
                room_number=row.room_number,
                payment_method=PaymentMethod(row.payment_method),
                lines=lines[row.id],
                delivery_charge=row.delivery_charge,
                total_amount=row.total_amount,
                status=OrderStatus(row.status),
                status_history=history[row.id],
                notifications=notifications[row.id],
                created_at=row.created_at,
                updated_at=row.updated_at
            )
            for row in rows
        ]
