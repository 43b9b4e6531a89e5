class DomainException(Exception):
    pass


class OrderValidationError(DomainException):
    pass


class ProductNotFoundError(DomainException):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Товар {product_id} не найден")


class InsufficientStockError(DomainException):
    def __init__(self, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Недостаточно товара {product_id}. Доступно: {available}, требуется: {requested}"
        )


class UnauthorizedError(DomainException):
    pass


class InvalidTransitionError(DomainException):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Недопустимый переход статуса: {current} -> {requested}")


class OrderNotFoundError(DomainException):
    pass


class ConflictError(DomainException):
    pass


class IdentityServiceError(DomainException):
    pass
