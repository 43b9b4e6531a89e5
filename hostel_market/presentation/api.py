import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status

from hostel_market.database import AsyncSessionLocal
from hostel_market.presentation.schemas import (
    CreateOrderRequest, OrderResponse, ChangeStatusRequest, UnreadCountResponse,
    CreateProductRequest, UpdateProductRequest, RestockRequest, ProductResponse, ErrorResponse
)
from hostel_market.application.create_order import CreateOrderUseCase, CreateOrderDTO, OrderLineDTO
from hostel_market.application.change_status import ChangeOrderStatusUseCase
from hostel_market.application.get_order import GetOrderUseCase
from hostel_market.application.list_orders import (
    ListAdminOrdersUseCase, ListSellerOrdersUseCase, ListBuyerOrdersUseCase,
    CountUnreadNotificationsUseCase
)
from hostel_market.application.products import (
    CreateProductUseCase, ListProductsUseCase, UpdateProductUseCase,
    DeleteProductUseCase, RestockProductUseCase, CreateProductDTO, UpdateProductDTO
)
from hostel_market.application.interfaces import IdentityProvider
from hostel_market.domain.models import Identity, Hostel
from hostel_market.domain.exceptions import (
    OrderValidationError, ProductNotFoundError, InsufficientStockError, UnauthorizedError,
    InvalidTransitionError, OrderNotFoundError, ConflictError, IdentityServiceError
)
from hostel_market.infrastructure.unit_of_work import UnitOfWork
from hostel_market.infrastructure.http_clients import HTTPIdentityClient
from hostel_market.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_unit_of_work() -> UnitOfWork:
    return UnitOfWork(AsyncSessionLocal)


def get_identity_provider() -> IdentityProvider:
    return HTTPIdentityClient(settings.IDENTITY_BASE_URL, settings.API_TOKEN, settings.ADMIN_EMAIL)


async def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    provider: IdentityProvider = Depends(get_identity_provider)
) -> Identity:
    """Пользователь текущего запроса, передается в use case явно"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        identity = await provider.get_identity(authorization.removeprefix("Bearer ").strip())
    except IdentityServiceError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if not identity:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return identity


# Фабрики для создания use cases
def get_create_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return CreateOrderUseCase(uow)


def get_change_status_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return ChangeOrderStatusUseCase(uow)


def get_get_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetOrderUseCase(uow)


@router.post(
    "/orders",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def create_order(
    request: CreateOrderRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case)
):
    """Создать новый заказ"""
    try:
        dto = CreateOrderDTO(
            buyer_id=identity.user_id,
            buyer_name=identity.name,
            buyer_email=identity.email,
            contact_number=request.contact_number,
            hostel=request.hostel,
            room_number=request.room_number,
            payment_method=request.payment_method,
            lines=[OrderLineDTO(product_id=item.product_id, quantity=item.quantity) for item in request.items]
        )
        order = await use_case(dto)
        return OrderResponse.from_domain(order)

    except (OrderValidationError, InsufficientStockError, ProductNotFoundError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Ошибка создания заказа: {e}")
        raise HTTPException(status_code=503, detail=f"Service unavailable: {str(e)}")


@router.get("/orders", response_model=list[OrderResponse])
async def list_buyer_orders(
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """История заказов покупателя"""
    orders = await ListBuyerOrdersUseCase(uow)(identity)
    return [OrderResponse.from_domain(order) for order in orders]


@router.get("/admin/orders", response_model=list[OrderResponse], responses={403: {"model": ErrorResponse}})
async def list_admin_orders(
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Все заказы для администратора"""
    try:
        orders = await ListAdminOrdersUseCase(uow)(identity)
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return [OrderResponse.from_domain(order) for order in orders]


@router.get("/seller/orders", response_model=list[OrderResponse], responses={403: {"model": ErrorResponse}})
async def list_seller_orders(
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Активные заказы продавца, уведомления отмечаются прочитанными"""
    try:
        orders = await ListSellerOrdersUseCase(uow)(identity)
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return [OrderResponse.from_domain(order) for order in orders]


@router.get("/seller/notifications", response_model=UnreadCountResponse, responses={403: {"model": ErrorResponse}})
async def get_unread_notifications(
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    try:
        unread = await CountUnreadNotificationsUseCase(uow)(identity)
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return UnreadCountResponse(unread_count=unread)


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    use_case: GetOrderUseCase = Depends(get_get_order_use_case)
):
    """Получить заказ по ID"""
    try:
        order = await use_case(order_id, identity)
        return OrderResponse.from_domain(order)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Заказ не найден")


@router.put(
    "/orders/{order_id}/status",
    response_model=OrderResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse}
    }
)
async def change_order_status(
    order_id: str,
    request: ChangeStatusRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: ChangeOrderStatusUseCase = Depends(get_change_status_use_case)
):
    """Смена статуса заказа администратором или продавцом"""
    try:
        order = await use_case(order_id, identity, request.status)
        return OrderResponse.from_domain(order)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Заказ не найден")
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    hostel: Optional[Hostel] = None,
    seller_id: Optional[str] = None,
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Каталог активных товаров"""
    products = await ListProductsUseCase(uow)(hostel=hostel, seller_id=seller_id)
    return [ProductResponse.from_domain(product) for product in products]


@router.post(
    "/products",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def create_product(
    request: CreateProductRequest,
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    try:
        product = await CreateProductUseCase(uow)(identity, CreateProductDTO(**request.model_dump()))
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ProductResponse.from_domain(product)


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    try:
        product = await UpdateProductUseCase(uow)(product_id, identity, UpdateProductDTO(**request.model_dump()))
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    return ProductResponse.from_domain(product)


@router.delete("/products/{product_id}", responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def delete_product(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    try:
        await DeleteProductUseCase(uow)(product_id, identity)
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    return {"message": "Товар удален"}


@router.post(
    "/products/{product_id}/restock",
    response_model=ProductResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def restock_product(
    product_id: str,
    request: RestockRequest,
    identity: Identity = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    try:
        product = await RestockProductUseCase(uow)(product_id, identity, request.amount)
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    return ProductResponse.from_domain(product)
