import contextlib
import importlib.util
import os
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from petition_admin.admin.token_slot import MemoryTokenSlot
from petition_admin.core.dependency_container import DependencyContainer
from petition_admin.settings import Settings
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel


@pytest.fixture(autouse=True)
def override_settings_dependency():
    """AUTOUSE: Loads .env.test (if present) for the duration of a test, then
    restores the original environment.
    """
    project_root = Path(__file__).parent.parent
    original_environ = os.environ.copy()

    env_file_path = project_root / ".env.test"
    if env_file_path.exists():
        load_dotenv(dotenv_path=env_file_path, override=True)

    yield

    os.environ.clear()
    os.environ.update(original_environ)


# --- Mocked collaborators ---


@pytest.fixture
def mock_settings() -> MagicMock:
    """Provides a mock Settings instance."""
    settings = MagicMock(spec=Settings)
    settings.get_admin_session_hours.return_value = 24
    settings.get_admin_session_cookie_name.return_value = "admin_session_token"
    return settings


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Provides a mock SQLAlchemy AsyncSession instance."""
    session = AsyncMock(spec=AsyncSession)
    return session


@pytest.fixture
def mock_db_session_factory(mock_db_session: AsyncMock) -> MagicMock:
    """Provides a mock database session factory context manager."""
    mock_async_context_manager = AsyncMock()
    mock_async_context_manager.__aenter__.return_value = mock_db_session
    mock_async_context_manager.__aexit__.return_value = None

    return MagicMock(return_value=mock_async_context_manager)


@pytest.fixture
def mock_container(mock_settings: MagicMock, mock_db_session_factory: MagicMock) -> MagicMock:
    """Provides a mock DependencyContainer instance."""
    container = MagicMock(spec=DependencyContainer)
    container.settings = mock_settings
    container.db_session_factory = mock_db_session_factory
    return container


@pytest.fixture
def token_slot() -> MemoryTokenSlot:
    """An empty in-memory session token slot."""
    return MemoryTokenSlot()


# --- In-memory database ---


@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """In-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """In-memory SQLite async session for testing."""
    async_session_factory = async_sessionmaker(async_engine, expire_on_commit=False)

    async with async_session_factory() as session:
        yield session


# --- Application clients ---


@pytest.fixture()
def admin_client():
    """TestClient for the app backed by a fresh in-memory SQLite database.

    The engine is created inside the app's own event loop during startup so the
    whole request path (router, dependencies, service, CRUD) runs for real.
    """
    from fastapi.testclient import TestClient
    from petition_admin.main import app

    async def sqlite_initialize_dependencies(settings):
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        return DependencyContainer(settings=Settings(), db_session_factory=session_factory)

    with (
        patch("petition_admin.main.initialize_app_dependencies", sqlite_initialize_dependencies),
        patch("petition_admin.main.close_db_engine", AsyncMock()),
    ):
        with TestClient(app) as test_client:
            yield test_client


# --- Operator scripts ---


@pytest.fixture
def load_script():
    """Import a module from the top-level scripts/ directory by file name."""

    def _load(name: str):
        path = Path(__file__).parent.parent / "scripts" / f"{name}.py"
        spec = importlib.util.spec_from_file_location(f"petition_scripts_{name}", path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    return _load


@pytest.fixture
def script_db_session(mock_db_session: AsyncMock):
    """Stand-in for database_async.get_db_session yielding the mock session."""

    @contextlib.asynccontextmanager
    async def _get_db_session():
        yield mock_db_session

    return _get_db_session
