from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from hostel_market.domain.models import OrderStatus, Hostel, PaymentMethod


class OrderLineRequest(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)


class CreateOrderRequest(BaseModel):
    contact_number: str
    hostel: Hostel
    room_number: str
    payment_method: PaymentMethod
    items: list[OrderLineRequest]


class ChangeStatusRequest(BaseModel):
    status: OrderStatus


class OrderLineResponse(BaseModel):
    product_id: str
    title: str
    price: int
    quantity: int
    seller_id: str


class StatusHistoryResponse(BaseModel):
    status: OrderStatus
    changed_at: datetime
    changed_by: str


class NotificationResponse(BaseModel):
    seller_id: str
    is_read: bool
    created_at: datetime


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    buyer_name: str
    buyer_email: str
    contact_number: str
    hostel: Hostel
    room_number: str
    payment_method: PaymentMethod
    items: list[OrderLineResponse]
    delivery_charge: int
    total_amount: int
    status: OrderStatus
    status_history: list[StatusHistoryResponse]
    sellers_notified: list[NotificationResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order):
        return cls(
            id=order.id,
            buyer_id=order.buyer_id,
            buyer_name=order.buyer_name,
            buyer_email=order.buyer_email,
            contact_number=order.contact_number,
            hostel=order.hostel,
            room_number=order.room_number,
            payment_method=order.payment_method,
            items=[OrderLineResponse(**line.model_dump()) for line in order.lines],
            delivery_charge=order.delivery_charge,
            total_amount=order.total_amount,
            status=order.status,
            status_history=[StatusHistoryResponse(**e.model_dump()) for e in order.status_history],
            sellers_notified=[NotificationResponse(**n.model_dump()) for n in order.notifications],
            created_at=order.created_at,
            updated_at=order.updated_at
        )


class UnreadCountResponse(BaseModel):
    unread_count: int


class CreateProductRequest(BaseModel):
    title: str
    description: str
    price: int = Field(gt=0)
    quantity: int = Field(ge=0)
    image: Optional[str] = None
    hostel: Hostel


class UpdateProductRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, gt=0)
    image: Optional[str] = None
    hostel: Optional[Hostel] = None


class RestockRequest(BaseModel):
    amount: int = Field(gt=0)


class ProductResponse(BaseModel):
    id: str
    title: str
    description: str
    price: int
    quantity: int
    image: Optional[str] = None
    hostel: Hostel
    seller_id: str
    seller_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, product):
        return cls(**product.model_dump())


class ErrorResponse(BaseModel):
    detail: str
