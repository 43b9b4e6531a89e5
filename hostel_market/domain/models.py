from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel


DELIVERY_CHARGE = 10
SYSTEM_ACTOR = "system"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)
TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

# Продавец может только подтвердить заказ и затем отметить доставку
SELLER_TRANSITIONS = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.DELIVERED,
}


class Hostel(str, Enum):
    HIMALAYA = "Himalaya"
    JANADHAR = "Janadhar"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    UPI = "UPI"


class UserRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"


class Identity(BaseModel):
    """Проверенный пользователь, пришедший от провайдера идентификации"""
    user_id: str
    email: str
    name: str
    role: UserRole
    is_admin: bool = False

    @property
    def is_seller(self) -> bool:
        return self.role == UserRole.SELLER


class Product(BaseModel):
    """Domain Entity — товар продавца"""
    id: str
    title: str
    description: str
    price: int
    quantity: int
    image: Optional[str] = None
    hostel: Hostel
    seller_id: str
    seller_name: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    def is_owned_by(self, seller_id: str) -> bool:
        return self.seller_id == seller_id


class OrderLine(BaseModel):
    """Value Object — снимок товара на момент заказа"""
    product_id: str
    title: str
    price: int
    quantity: int
    seller_id: str

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


class StatusHistoryEntry(BaseModel):
    status: OrderStatus
    changed_at: datetime
    changed_by: str


class SellerNotification(BaseModel):
    seller_id: str
    is_read: bool = False
    created_at: datetime


class Order(BaseModel):
    """Domain Entity — заказ"""
    id: str
    buyer_id: str
    buyer_name: str
    buyer_email: str
    contact_number: str
    hostel: Hostel
    room_number: str
    payment_method: PaymentMethod
    lines: list[OrderLine]
    delivery_charge: int = DELIVERY_CHARGE
    total_amount: int
    status: OrderStatus
    status_history: list[StatusHistoryEntry]
    notifications: list[SellerNotification]
    created_at: datetime
    updated_at: datetime

    def seller_ids(self) -> list[str]:
        """Продавцы в порядке первого появления в строках заказа"""
        seen = []
        for line in self.lines:
            if line.seller_id not in seen:
                seen.append(line.seller_id)
        return seen

    def has_lines_from(self, seller_id: str) -> bool:
        return any(line.seller_id == seller_id for line in self.lines)

    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def can_seller_move_to(self, new_status: OrderStatus) -> bool:
        """Бизнес-правило: pending -> confirmed, confirmed -> delivered"""
        return SELLER_TRANSITIONS.get(self.status) == new_status

    def is_visible_to(self, identity: Identity) -> bool:
        if identity.is_admin:
            return True
        if self.buyer_id == identity.user_id:
            return True
        return identity.is_seller and self.has_lines_from(identity.user_id)

    def notification_for(self, seller_id: str) -> Optional[SellerNotification]:
        for notification in self.notifications:
            if notification.seller_id == seller_id:
                return notification
        return None


def compute_total(lines: list[OrderLine]) -> int:
    return sum(line.subtotal for line in lines) + DELIVERY_CHARGE
