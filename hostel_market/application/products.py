import logging
from datetime import datetime, timezone
from typing import Optional, List
import uuid
from pydantic import BaseModel

from hostel_market.domain.models import Product, Identity, Hostel
from hostel_market.domain.exceptions import (
    ProductNotFoundError, UnauthorizedError, OrderValidationError
)
from hostel_market.application.inventory import InventoryLedger


logger = logging.getLogger(__name__)


class CreateProductDTO(BaseModel):
    title: str
    description: str
    price: int
    quantity: int
    image: Optional[str] = None
    hostel: Hostel


class UpdateProductDTO(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = None
    image: Optional[str] = None
    hostel: Optional[Hostel] = None


def _require_seller(identity: Identity) -> None:
    if identity is None or not identity.is_seller:
        raise UnauthorizedError("Управлять товарами могут только продавцы")


class CreateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, identity: Identity, data: CreateProductDTO) -> Product:
        _require_seller(identity)
        if data.price <= 0:
            raise OrderValidationError("Цена должна быть положительной")
        if data.quantity < 0:
            raise OrderValidationError("Количество не может быть отрицательным")

        now = datetime.now(timezone.utc)
        product = Product(
            id=str(uuid.uuid4()),
            title=data.title,
            description=data.description,
            price=data.price,
            quantity=data.quantity,
            image=data.image,
            hostel=data.hostel,
            seller_id=identity.user_id,
            seller_name=identity.name,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        async with self._uow() as uow:
            await uow.products.create(product)
            await uow.commit()
        logger.info(f"Товар создан: {product.id} продавцом {identity.user_id}")
        return product


class ListProductsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, hostel: Optional[Hostel] = None, seller_id: Optional[str] = None) -> List[Product]:
        async with self._uow() as uow:
            return await uow.products.list_active(hostel=hostel, seller_id=seller_id)


class UpdateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str, identity: Identity, data: UpdateProductDTO) -> Product:
        _require_seller(identity)
        values = data.model_dump(exclude_none=True)
        if "price" in values and values["price"] <= 0:
            raise OrderValidationError("Цена должна быть положительной")

        async with self._uow() as uow:
            product = await uow.products.update(product_id, identity.user_id, values)
            if not product:
                raise ProductNotFoundError(product_id)
            await uow.commit()
        return product


class DeleteProductUseCase:
    """Мягкое удаление: товар пропадает из каталога, но остается в старых заказах"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str, identity: Identity) -> None:
        _require_seller(identity)
        async with self._uow() as uow:
            if not await uow.products.deactivate(product_id, identity.user_id):
                raise ProductNotFoundError(product_id)
            await uow.commit()
        logger.info(f"Товар {product_id} снят с продажи")


class RestockProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str, identity: Identity, amount: int) -> Product:
        _require_seller(identity)
        async with self._uow() as uow:
            product = await InventoryLedger(uow.products).restock(product_id, identity.user_id, amount)
            await uow.commit()
        return product
