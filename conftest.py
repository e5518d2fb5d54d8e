import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from chauffeur.main import app
from chauffeur.db.session import get_db
from chauffeur.models.base import Base
from chauffeur.models.user import User
from chauffeur.core.security import create_access_token, hash_password
from chauffeur.core.enums import UserRole


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def _create_user(session_factory, username: str, role: UserRole, password: str = "secret-pass") -> User:
    async with session_factory() as session:
        user = User(username=username, password_hash=hash_password(password), role=role)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def admin_user(session_factory):
    return await _create_user(session_factory, "admin", UserRole.ADMIN)


@pytest.fixture
async def staff_user(session_factory):
    return await _create_user(session_factory, "staff", UserRole.STAFF)


@pytest.fixture
def admin_headers(admin_user):
    token = create_access_token(str(admin_user.id), admin_user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff_headers(staff_user):
    token = create_access_token(str(staff_user.id), staff_user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def p2p_tiers():
    return [
        {"fromDistance": 0, "toDistance": 8, "price": 74.5, "kind": "fixed"},
        {"fromDistance": 8, "toDistance": 30, "price": 2.5, "kind": "per_mile"},
        {"fromDistance": 30, "toDistance": 40, "price": 2.0, "kind": "per_mile"},
    ]


@pytest.fixture
def create_vehicle_factory(test_client, admin_headers):
    async def _create_vehicle(category_name="Executive Saloon", **kwargs):
        data = {"categoryName": category_name, "numberOfPassengers": 3}
        data.update(kwargs)

        response = await test_client.post("/vehicles/", json=data, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_vehicle


@pytest.fixture
def create_pricing_factory(test_client, admin_headers, p2p_tiers):
    async def _create_pricing(vehicle_id, **kwargs):
        data = {
            "vehicleId": vehicle_id,
            "pricingType": "p2p",
            "displayVatInclusive": False,
            "pointToPoint": {
                "isActive": True,
                "distanceTiers": p2p_tiers,
                "afterDistanceThreshold": 40,
                "afterDistancePricePerMile": 2.5,
            },
            "extras": {"extraStopPrice": 10, "childSeatPrice": 5, "congestionCharge": 15},
        }
        data.update(kwargs)

        response = await test_client.post("/pricing/", json=data, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_pricing


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "crud: marks tests related to CRUD operations"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "locations: marks tests related to special locations"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
