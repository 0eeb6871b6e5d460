import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.core.dependency_container import DependencyContainer
from petition_admin.db.database_async import create_db_engine
from petition_admin.db.database_async import get_db_session as db_get_session
from petition_admin.settings import Settings

logger = logging.getLogger(__name__)

# --- Dependency Providers --- #


def get_dependencies(request: Request) -> DependencyContainer:
    """Dependency to retrieve the DependencyContainer from application state."""
    dependencies: DependencyContainer | None = getattr(request.app.state, "dependencies", None)
    if dependencies is None:
        logger.critical(
            "DependencyContainer not found in application state. "
            "This indicates a critical setup error in the application lifespan."
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error: Application dependencies not initialized.",
        )
    return dependencies


def get_settings(dependencies: DependencyContainer = Depends(get_dependencies)) -> Settings:
    """FastAPI dependency returning the application settings."""
    return dependencies.settings


async def get_db_session(
    dependencies: DependencyContainer = Depends(get_dependencies),
) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to get an async database session using the container's factory."""
    session_factory = dependencies.db_session_factory
    if session_factory is None:
        logger.critical("DB Session Factory not found in DependencyContainer.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error: Database session factory not available.",
        )

    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def initialize_app_dependencies(app_settings: Settings) -> DependencyContainer:
    """Initialize and configure core application dependencies.

    Creates the database engine and wraps the session factory and settings in a
    DependencyContainer.

    Args:
        app_settings: The application settings instance.

    Returns:
        A DependencyContainer instance populated with initialized dependencies.

    Raises:
        RuntimeError: If initialization of the database engine fails.
    """
    logger.info("Initializing core application dependencies...")

    try:
        await create_db_engine()
        logger.info("Main DB engine successfully created for DependencyContainer.")
    except Exception as db_exc:
        logger.critical(f"Failed to initialize database for DependencyContainer due to exception: {db_exc}")
        raise RuntimeError(f"Failed to initialize database for DependencyContainer: {db_exc}") from db_exc

    dependencies = DependencyContainer(
        settings=app_settings,
        db_session_factory=db_get_session,
    )
    logger.info("Dependency Container created successfully.")
    return dependencies
