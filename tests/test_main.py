from typing import cast
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


def test_read_root(admin_client: TestClient):
    """Test the root endpoint '/'."""
    response = admin_client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Petition admin is running."}


def test_health_check(admin_client: TestClient):
    """Test the health check endpoint '/health'."""
    response = admin_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lifespan_success_path(mocker, mock_container: MagicMock, mock_db_session: AsyncMock):
    """Startup stores the container and sweeps expired sessions; shutdown closes the engine."""
    mock_settings_instance = MagicMock()
    mocker.patch("petition_admin.main.Settings", return_value=mock_settings_instance)

    mock_initialize_dependencies = mocker.patch(
        "petition_admin.main.initialize_app_dependencies",
        new_callable=AsyncMock,
        return_value=mock_container,
    )
    mock_cleanup = mocker.patch(
        "petition_admin.main.admin_auth_service.cleanup_expired_sessions",
        new_callable=AsyncMock,
        return_value=0,
    )
    mock_close_db_engine = mocker.patch("petition_admin.main.close_db_engine")

    from petition_admin.main import app

    with TestClient(app) as client:
        mock_initialize_dependencies.assert_awaited_once_with(mock_settings_instance)

        current_app = cast(FastAPI, client.app)
        assert current_app.state.dependencies is mock_container
        mock_cleanup.assert_awaited_once_with(mock_db_session)

    mock_close_db_engine.assert_awaited_once()


def test_lifespan_startup_dependency_exception(mocker):
    """Lifespan wraps a dependency initialization failure and closes the engine."""
    mock_settings_instance = MagicMock()
    mocker.patch("petition_admin.main.Settings", return_value=mock_settings_instance)

    db_error_message = "DB engine boom during init!"
    mock_initialize_dependencies = mocker.patch(
        "petition_admin.main.initialize_app_dependencies",
        new_callable=AsyncMock,
        side_effect=RuntimeError(db_error_message),
    )
    mock_close_db_engine = mocker.patch("petition_admin.main.close_db_engine")

    from petition_admin.main import app

    expected_wrapper_error_match = (
        f"Application startup failed due to dependency initialization error: {db_error_message}"
    )

    with pytest.raises(RuntimeError, match=expected_wrapper_error_match):
        with TestClient(app):
            pass

    mock_initialize_dependencies.assert_awaited_once_with(mock_settings_instance)
    mock_close_db_engine.assert_awaited_once()
