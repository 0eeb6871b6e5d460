import contextlib
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException, Request, status
from petition_admin.core.dependencies import (
    get_db_session,
    get_dependencies,
    get_settings,
    initialize_app_dependencies,
)
from petition_admin.core.dependency_container import DependencyContainer
from petition_admin.db.database_async import get_db_session as db_get_session
from starlette.datastructures import State


@pytest.fixture
def mock_request_with_state() -> Request:
    """Creates a mock Request object with a mock app.state."""
    request = AsyncMock(spec=Request)
    request.app = AsyncMock()
    request.app.state = State()
    return request


def test_get_dependencies_success(mock_request_with_state, mock_container):
    mock_request_with_state.app.state.dependencies = mock_container

    assert get_dependencies(mock_request_with_state) is mock_container


def test_get_dependencies_not_found(mock_request_with_state):
    """Test raising HTTPException when dependencies are not in request state."""
    with pytest.raises(HTTPException) as exc_info:
        get_dependencies(mock_request_with_state)

    assert exc_info.value.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "Application dependencies not initialized" in exc_info.value.detail


def test_get_settings(mock_container, mock_settings):
    assert get_settings(dependencies=mock_container) is mock_settings


@pytest.mark.asyncio
async def test_get_db_session_success(mock_container):
    mock_session = AsyncMock()

    @contextlib.asynccontextmanager
    async def mock_session_factory():
        yield mock_session

    mock_container.db_session_factory = mock_session_factory

    async_gen = get_db_session(dependencies=mock_container)
    session = await async_gen.__anext__()
    assert session is mock_session

    with pytest.raises(StopAsyncIteration):
        await async_gen.__anext__()


@pytest.mark.asyncio
async def test_get_db_session_rolls_back_on_error(mock_container):
    mock_session = AsyncMock()

    @contextlib.asynccontextmanager
    async def mock_session_factory():
        yield mock_session

    mock_container.db_session_factory = mock_session_factory

    async_gen = get_db_session(dependencies=mock_container)
    await async_gen.__anext__()
    with pytest.raises(ValueError):
        await async_gen.athrow(ValueError("handler failed"))

    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_db_session_no_factory(mock_container):
    """Test HTTPException when session factory is None."""
    mock_container.db_session_factory = None

    with pytest.raises(HTTPException) as exc_info:
        await get_db_session(dependencies=mock_container).__anext__()

    assert exc_info.value.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


@pytest.mark.asyncio
async def test_initialize_app_dependencies_success(mock_settings):
    with patch("petition_admin.core.dependencies.create_db_engine", new_callable=AsyncMock) as mock_create:
        container = await initialize_app_dependencies(mock_settings)

    mock_create.assert_awaited_once()
    assert isinstance(container, DependencyContainer)
    assert container.settings is mock_settings
    assert container.db_session_factory is db_get_session


@pytest.mark.asyncio
async def test_initialize_app_dependencies_db_failure(mock_settings):
    with patch(
        "petition_admin.core.dependencies.create_db_engine",
        new_callable=AsyncMock,
        side_effect=ConnectionError("no database"),
    ):
        with pytest.raises(RuntimeError, match="Failed to initialize database"):
            await initialize_app_dependencies(mock_settings)


def test_dependency_container_holds_collaborators(mock_settings):
    factory = MagicMock()

    container = DependencyContainer(settings=mock_settings, db_session_factory=factory)

    assert container.settings is mock_settings
    assert container.db_session_factory is factory
