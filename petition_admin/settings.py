import os
from typing import Optional

from dotenv import load_dotenv

# Load .env file variables into environment
load_dotenv(verbose=True)


class Settings:
    """Application configuration settings loaded from environment variables."""

    # --- Database Settings ---
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[int] = 5432

    # --- Admin Auth Settings ---
    ADMIN_SESSION_HOURS: int = 24
    ADMIN_SESSION_COOKIE: str = "admin_session_token"

    def get_database_url(self) -> Optional[str]:
        """Returns the primary DATABASE_URL, if set."""
        return os.getenv("DATABASE_URL")

    # --- Database settings Getters using os.getenv ---
    def get_postgres_user(self) -> str | None:
        return os.getenv("DB_USER")

    def get_postgres_password(self) -> str | None:
        return os.getenv("DB_PASSWORD")

    def get_postgres_db(self) -> str | None:
        return os.getenv("DB_NAME")

    def get_postgres_host(self) -> str | None:
        return os.getenv("DB_HOST")

    def get_postgres_port(self) -> int | None:
        """Returns the PostgreSQL port as an integer, or None if not set."""
        port_str = os.getenv("DB_PORT")
        if port_str is None:
            return None
        try:
            return int(port_str)
        except ValueError:
            raise ValueError("DB_PORT environment variable must be an integer.")

    # --- DB Pool Size Getters ---
    def get_main_db_pool_min_size(self) -> int:
        """Returns the minimum pool size for the main DB."""
        try:
            return int(os.getenv("MAIN_DB_POOL_MIN_SIZE", "1"))
        except ValueError:
            raise ValueError("MAIN_DB_POOL_MIN_SIZE environment variable must be an integer.")

    def get_main_db_pool_max_size(self) -> int:
        """Returns the maximum pool size for the main DB."""
        try:
            return int(os.getenv("MAIN_DB_POOL_MAX_SIZE", "10"))
        except ValueError:
            raise ValueError("MAIN_DB_POOL_MAX_SIZE environment variable must be an integer.")

    # --- Admin Auth Getters ---
    def get_admin_session_hours(self) -> int:
        """Returns how long a new admin session stays valid, in hours."""
        raw = os.getenv("ADMIN_SESSION_HOURS", str(self.ADMIN_SESSION_HOURS))
        try:
            hours = int(raw)
        except ValueError:
            raise ValueError("ADMIN_SESSION_HOURS environment variable must be an integer.")
        if hours <= 0:
            raise ValueError("ADMIN_SESSION_HOURS environment variable must be positive.")
        return hours

    def get_admin_session_cookie_name(self) -> str:
        """Returns the name of the cookie holding the admin session token."""
        return os.getenv("ADMIN_SESSION_COOKIE", self.ADMIN_SESSION_COOKIE)

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return os.getenv("LOG_LEVEL", default).upper()

    # --- App Server Settings ---
    def get_app_host(self, default: str = "0.0.0.0") -> str:  # nosec B104
        return os.getenv("PETITION_ADMIN_HOST", default)

    def get_app_port(self, default: int = 8000) -> int:
        port_str = os.getenv("PETITION_ADMIN_PORT")
        if port_str is None:
            return default
        try:
            return int(port_str)
        except ValueError:
            raise ValueError("PETITION_ADMIN_PORT environment variable must be an integer.")

    def get_app_reload(self, default: bool = False) -> bool:
        reload_str = os.getenv("PETITION_ADMIN_RELOAD")
        if reload_str is None:
            return default
        return reload_str.lower() == "true"

    # --- Database DSN Helper Properties using Getters ---
    @property
    def base_dsn(self) -> str:
        """Base DSN without a specific database name.
        Raises ValueError if required DB settings are missing.
        """
        user = self.get_postgres_user()
        password = self.get_postgres_password()
        host = self.get_postgres_host()
        port = self.get_postgres_port()

        if not all([user, password, host, port]):
            missing = [
                name
                for name, val in [("USER", user), ("PASSWORD", password), ("HOST", host), ("PORT", port)]
                if not val
            ]
            raise ValueError(f"Missing required database settings ({', '.join(missing)}) for base_dsn")

        return f"postgresql://{user}:{password}@{host}:{port}"

    def get_db_dsn(self, db_name: str | None = None) -> str:
        """Returns the DSN for a specific database name, or the default DB_NAME.
        Raises ValueError if required DB settings or the target db_name are missing.
        """
        target_db = db_name or self.get_postgres_db()
        if not target_db:
            raise ValueError("Missing target database name (either provide db_name or set DB_NAME env var)")
        return f"{self.base_dsn}/{target_db}"

    def get_run_mode(self) -> str:
        """Returns the run mode, defaulting to 'prod' if not set."""
        return os.getenv("RUN_MODE", "prod")

    def dev_mode(self) -> bool:
        """Returns True if the run mode is 'dev', False otherwise."""
        return self.get_run_mode() == "dev"
