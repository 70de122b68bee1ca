import os

# Settings are cached on first import; configure the environment before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENV_MODE"] = "development"
os.environ["DEBUG"] = "false"

from types import SimpleNamespace  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import fooddelivery.models  # noqa: E402,F401
from fooddelivery.core.config import get_settings  # noqa: E402
from fooddelivery.core.security import create_access_token, hash_password  # noqa: E402
from fooddelivery.database import Base, get_db  # noqa: E402
from fooddelivery.main import app  # noqa: E402
from fooddelivery.models import (  # noqa: E402
    Address,
    MenuItem,
    Restaurant,
    SpiceLevel,
    User,
    UserRole,
)

PASSWORD = "Password123"


@pytest_asyncio.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def api(session_maker):
    """HTTP client bound to the app, with the test database swapped in."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def _user(email: str, first: str, phone: str, role: UserRole) -> User:
    return User(
        email=email,
        password_hash=hash_password(PASSWORD),
        first_name=first,
        last_name="Tester",
        phone=phone,
        role=role,
    )


@pytest_asyncio.fixture
async def seed(session_maker):
    """
    Two customers, an owner, an admin, one restaurant with a small menu and
    a default address for the first customer.

    Menu: Biryani 100, Naan 100, Lassi 50 (all available) and an unavailable
    Kulfi at 70. Delivery fee 30.
    """
    async with session_maker() as session:
        customer = _user("john.doe@email.com", "John", "+91-9123456789", UserRole.CUSTOMER)
        other = _user("jane.smith@email.com", "Jane", "+91-9123456788", UserRole.CUSTOMER)
        owner = _user("owner@tastybites.com", "Owner", "+91-9876543210", UserRole.RESTAURANT_OWNER)
        stranger = _user("owner@elsewhere.com", "Stranger", "+91-9876543211", UserRole.RESTAURANT_OWNER)
        admin = _user("admin@fooddelivery.com", "Admin", "+91-9999999999", UserRole.ADMIN)
        session.add_all([customer, other, owner, stranger, admin])
        await session.flush()

        restaurant_address = Address(
            street="123 Food Street", city="Vellore", state="Tamil Nadu", zip_code="632014"
        )
        home = Address(
            user_id=customer.id,
            street="456 Customer Lane",
            city="Vellore",
            state="Tamil Nadu",
            zip_code="632014",
            is_default=True,
        )
        session.add_all([restaurant_address, home])
        await session.flush()

        restaurant = Restaurant(
            name="Tasty Bites",
            description="North Indian cuisine delivered fresh and hot",
            owner_id=owner.id,
            address_id=restaurant_address.id,
            cuisine_type=["North Indian", "Chinese"],
            delivery_fee=30.0,
            min_order=150.0,
            rating=4.5,
            open_time="10:00",
            close_time="23:00",
        )
        session.add(restaurant)
        await session.flush()

        biryani = MenuItem(restaurant_id=restaurant.id, name="Chicken Biryani", price=100.0,
                           category="Main Course", is_veg=False, spice_level=SpiceLevel.MEDIUM)
        naan = MenuItem(restaurant_id=restaurant.id, name="Garlic Naan", price=100.0,
                        category="Bread", is_veg=True)
        lassi = MenuItem(restaurant_id=restaurant.id, name="Sweet Lassi", price=50.0,
                         category="Drinks", is_veg=True)
        kulfi = MenuItem(restaurant_id=restaurant.id, name="Kulfi", price=70.0,
                         category="Dessert", is_veg=True, is_available=False)
        session.add_all([biryani, naan, lassi, kulfi])
        await session.commit()

        return SimpleNamespace(
            customer_id=customer.id,
            other_id=other.id,
            owner_id=owner.id,
            stranger_id=stranger.id,
            admin_id=admin.id,
            restaurant_id=restaurant.id,
            address_id=home.id,
            biryani_id=biryani.id,
            naan_id=naan.id,
            lassi_id=lassi.id,
            kulfi_id=kulfi.id,
        )


def auth_headers(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def enforce_sequence():
    settings = get_settings()
    settings.enforce_status_sequence = True
    yield settings
    settings.enforce_status_sequence = False


@pytest.fixture
def auth_for():
    return auth_headers
