# Dependency Injection Container.

from typing import AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.settings import Settings


class DependencyContainer:
    """Holds shared dependencies for the application.

    Request handlers reach settings and the database through this container so
    tests can swap either out in one place.
    """

    def __init__(
        self,
        settings: Settings,
        db_session_factory: Callable[[], AsyncContextManager[AsyncSession]],
    ) -> None:
        """
        Initializes the container.

        Args:
            settings: Application settings.
            db_session_factory: A factory function that returns an async context manager
                                yielding an SQLAlchemy AsyncSession.
        """
        self.settings = settings
        self.db_session_factory = db_session_factory
