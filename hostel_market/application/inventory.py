import logging
from typing import Iterable

from hostel_market.domain.models import Product
from hostel_market.domain.exceptions import (
    ProductNotFoundError, InsufficientStockError, OrderValidationError, UnauthorizedError
)
from hostel_market.application.interfaces import ProductRepository


logger = logging.getLogger(__name__)


class InventoryLedger:
    """Учет остатков товаров.

    Резервирование выполняется в два этапа: сначала проверяются все строки,
    затем остатки уменьшаются условным атомарным UPDATE. Ledger работает
    внутри единицы работы вызывающего кода, поэтому при проигранной гонке
    на любой строке откатывается весь заказ.
    """

    def __init__(self, products: ProductRepository):
        self._products = products

    async def reserve(self, lines: Iterable[tuple[str, int]]) -> dict[str, Product]:
        """Резервирует товары. Возвращает снимки товаров до списания."""
        requested: dict[str, int] = {}
        for product_id, quantity in lines:
            if quantity <= 0:
                raise OrderValidationError(f"Некорректное количество для товара {product_id}: {quantity}")
            requested[product_id] = requested.get(product_id, 0) + quantity

        # 1. Проверка всех строк до изменения остатков
        products = await self._products.get_many(requested.keys())
        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None or not product.is_active:
                logger.warning(f"Товар {product_id} не найден")
                raise ProductNotFoundError(product_id)
            if product.quantity < quantity:
                logger.warning(
                    f"Недостаточно товара {product_id}: доступно {product.quantity}, требуется {quantity}"
                )
                raise InsufficientStockError(product_id, product.quantity, quantity)

        # 2. Списание в порядке id, чтобы параллельные заказы блокировали строки одинаково
        for product_id, quantity in sorted(requested.items()):
            if not await self._products.decrement_if_available(product_id, quantity):
                current = await self._products.get_by_id(product_id)
                if current is None or not current.is_active:
                    logger.warning(f"Товар {product_id} снят с продажи во время резервирования")
                    raise ProductNotFoundError(product_id)
                available = current.quantity
                logger.warning(f"Гонка за товар {product_id}: доступно {available}, требуется {quantity}")
                raise InsufficientStockError(product_id, available, quantity)

        logger.info(f"Зарезервировано товаров: {len(requested)}")
        return products

    async def restock(self, product_id: str, seller_id: str, amount: int) -> Product:
        if amount <= 0:
            raise OrderValidationError("Количество для пополнения должно быть положительным")
        product = await self._products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if not product.is_owned_by(seller_id):
            raise UnauthorizedError("Пополнять можно только свои товары")
        await self._products.increment(product_id, seller_id, amount)
        logger.info(f"Товар {product_id} пополнен на {amount}")
        return product.model_copy(update={"quantity": product.quantity + amount})
