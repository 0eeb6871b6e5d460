import logging
import os
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from petition_admin.db import AdminCredential, AdminSession  # noqa - Ensure models are registered
from sqlalchemy import create_engine
from sqlmodel import SQLModel

load_dotenv()

logger = logging.getLogger(__name__)

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Prioritize DATABASE_URL, then fall back to the individual DB_* variables
database_url = os.environ.get("DATABASE_URL")

final_db_url = None

if database_url:
    logger.info("Using DATABASE_URL for Alembic connection.")
    # Migrations run synchronously through psycopg
    if database_url.startswith("postgresql+asyncpg://"):
        final_db_url = database_url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    elif database_url.startswith("postgres://"):
        final_db_url = database_url.replace("postgres://", "postgresql+psycopg://", 1)
    elif database_url.startswith("postgresql://"):
        final_db_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    elif database_url.startswith("sqlite+aiosqlite://"):
        final_db_url = database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)
    else:
        final_db_url = database_url
elif os.environ.get("DB_USER") and os.environ.get("DB_PASSWORD") and os.environ.get("DB_NAME"):
    logger.warning("DATABASE_URL not set. Falling back to individual DB_* variables for Alembic.")
    postgres_user = os.environ.get("DB_USER")
    postgres_password = os.environ.get("DB_PASSWORD")
    postgres_host = os.environ.get("DB_HOST", "localhost")
    postgres_port = os.environ.get("DB_PORT", "5432")
    postgres_db = os.environ.get("DB_NAME")
    final_db_url = (
        f"postgresql+psycopg://{postgres_user}:{postgres_password}@{postgres_host}:{postgres_port}/{postgres_db}"
    )
else:
    raise ValueError(
        "Database connection requires either DATABASE_URL environment variable "
        "or DB_USER, DB_PASSWORD, and DB_NAME to be set."
    )


config.set_main_option("sqlalchemy.url", final_db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits SQL to the script output using only the URL, no DBAPI needed.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode over a synchronous connection."""
    connectable = create_engine(config.get_main_option("sqlalchemy.url"))

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
