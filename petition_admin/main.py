import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from petition_admin.admin.auth import admin_auth_service
from petition_admin.admin.router import router as admin_router
from petition_admin.core.dependencies import initialize_app_dependencies
from petition_admin.core.dependency_container import DependencyContainer
from petition_admin.core.logging import setup_logging
from petition_admin.db.database_async import close_db_engine
from petition_admin.settings import Settings

setup_logging()


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage the lifespan of the application resources.

    Initializes dependencies on startup, sweeps expired admin sessions once, and
    closes the database engine on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: After startup procedures are complete, allowing the application to run.

    Raises:
        RuntimeError: If critical application dependencies fail to initialize during startup.
    """
    logger.info("Application startup sequence initiated.")

    app_settings = Settings()
    logger.info("Settings loaded.")

    initialized_dependencies: DependencyContainer | None = None
    try:
        initialized_dependencies = await initialize_app_dependencies(app_settings)
        app.state.dependencies = initialized_dependencies
        logger.info("Core application dependencies initialized and stored in app state.")
    except Exception as init_exc:
        logger.critical(f"Fatal error during application dependency initialization: {init_exc}", exc_info=True)
        await close_db_engine()
        logger.info("DB Engine closed due to dependency initialization failure during startup.")
        raise RuntimeError(
            f"Application startup failed due to dependency initialization error: {init_exc}"
        ) from init_exc

    # Store errors are logged and swallowed by the sweep; startup continues regardless
    async with initialized_dependencies.db_session_factory() as db:
        await admin_auth_service.cleanup_expired_sessions(db)

    yield  # Application runs here

    logger.info("Application shutdown sequence initiated.")

    await close_db_engine()
    logger.info("Main DB Engine closed.")

    logger.info("Application shutdown complete.")


app = FastAPI(
    title="Petition Admin",
    description="Admin area of the petition site.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health", tags=["General"], status_code=200)
async def health_check():
    """Perform a basic health check.

    Returns:
        A dictionary indicating the application status.
    """
    return {"status": "ok"}


app.include_router(admin_router)


@app.get("/")
async def read_root():
    """Provide a simple root endpoint."""
    return {"message": "Petition admin is running."}
