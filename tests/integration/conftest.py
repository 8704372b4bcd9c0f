import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers tables on SQLModel.metadata
from src.depends import get_session, get_subscription_worker, get_subscription_scheduler
from src.worker.scheduler import SubscriptionScheduler
from src.worker.subscription_orders import SubscriptionOrderWorker


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Create an in-memory SQLite engine shared by every session of the test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def worker(session_factory):
    """Subscription order worker bound to the test database"""
    worker = SubscriptionOrderWorker(session_factory=session_factory)
    yield worker
    await worker.shutdown()


@pytest_asyncio.fixture
async def client(db_session, worker):
    """Create test client with database session and worker overrides"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)
    scheduler = SubscriptionScheduler(worker, interval_seconds=300)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_subscription_worker] = lambda: worker
    app.dependency_overrides[get_subscription_scheduler] = lambda: scheduler

    # ASGITransport does not run lifespan, so the periodic scheduler stays off
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
