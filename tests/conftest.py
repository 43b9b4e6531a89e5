"""Pytest fixtures for hostel_market tests."""

from datetime import datetime, timezone
import uuid

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from hostel_market.domain.models import Identity, Product, UserRole, Hostel
from hostel_market.infrastructure.db_schema import metadata
from hostel_market.infrastructure.unit_of_work import UnitOfWork
from hostel_market.application.create_order import CreateOrderDTO, OrderLineDTO


@pytest.fixture
async def session_factory(tmp_path):
    """SQLite database created from scratch for every test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory)


@pytest.fixture
def seller():
    return Identity(user_id="seller-1", email="seller1@hostel.in", name="Ravi", role=UserRole.SELLER)


@pytest.fixture
def other_seller():
    return Identity(user_id="seller-2", email="seller2@hostel.in", name="Meera", role=UserRole.SELLER)


@pytest.fixture
def buyer():
    return Identity(user_id="buyer-1", email="buyer1@hostel.in", name="Arjun", role=UserRole.BUYER)


@pytest.fixture
def admin():
    return Identity(
        user_id="admin-1", email="admin@hostel.in", name="Warden", role=UserRole.BUYER, is_admin=True
    )


@pytest.fixture
def add_product(uow):
    """Insert a product owned by the given seller and return it."""

    async def _add(seller_id="seller-1", title="Chips", price=20, quantity=3, is_active=True):
        now = datetime.now(timezone.utc)
        product = Product(
            id=str(uuid.uuid4()),
            title=title,
            description=f"{title} pack",
            price=price,
            quantity=quantity,
            hostel=Hostel.HIMALAYA,
            seller_id=seller_id,
            seller_name=f"name-{seller_id}",
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        async with uow() as tx:
            await tx.products.create(product)
            await tx.commit()
        return product

    return _add


@pytest.fixture
def get_product(uow):
    async def _get(product_id):
        async with uow() as tx:
            return await tx.products.get_by_id(product_id)

    return _get


@pytest.fixture
def order_dto():
    """Build a CreateOrderDTO from (product_id, quantity) pairs."""

    def _make(buyer, *lines, contact_number="9876543210", room_number="B-204"):
        return CreateOrderDTO(
            buyer_id=buyer.user_id,
            buyer_name=buyer.name,
            buyer_email=buyer.email,
            contact_number=contact_number,
            hostel=Hostel.HIMALAYA,
            room_number=room_number,
            payment_method="UPI",
            lines=[OrderLineDTO(product_id=product_id, quantity=quantity) for product_id, quantity in lines],
        )

    return _make
