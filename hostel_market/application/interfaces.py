from abc import ABC, abstractmethod
from typing import Optional, List, Iterable
from hostel_market.domain.models import (
    Order, OrderStatus, Product, StatusHistoryEntry, Identity, Hostel
)


class ProductRepository(ABC):
    @abstractmethod
    async def get_by_id(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_many(self, product_ids: Iterable[str]) -> dict[str, Product]:
        pass

    @abstractmethod
    async def create(self, product: Product) -> None:
        pass

    @abstractmethod
    async def list_active(self, hostel: Optional[Hostel] = None, seller_id: Optional[str] = None) -> List[Product]:
        pass

    @abstractmethod
    async def update(self, product_id: str, seller_id: str, values: dict) -> Optional[Product]:
        pass

    @abstractmethod
    async def deactivate(self, product_id: str, seller_id: str) -> bool:
        pass

    @abstractmethod
    async def decrement_if_available(self, product_id: str, quantity: int) -> bool:
        pass

    @abstractmethod
    async def increment(self, product_id: str, seller_id: str, quantity: int) -> bool:
        pass


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def list_all(self) -> List[Order]:
        pass

    @abstractmethod
    async def list_for_buyer(self, buyer_id: str) -> List[Order]:
        pass

    @abstractmethod
    async def list_for_seller(self, seller_id: str, statuses: Iterable[OrderStatus]) -> List[Order]:
        pass

    @abstractmethod
    async def compare_and_set_status(
        self, order_id: str, expected: OrderStatus, entry: StatusHistoryEntry
    ) -> bool:
        pass

    @abstractmethod
    async def mark_notifications_read(self, seller_id: str, order_ids: Iterable[str]) -> int:
        pass

    @abstractmethod
    async def count_unread(self, seller_id: str, statuses: Iterable[OrderStatus]) -> int:
        pass


class IdentityProvider(ABC):
    @abstractmethod
    async def get_identity(self, token: str) -> Optional[Identity]:
        pass
