from typing import Iterable, Optional


class PetitionDBException(Exception):
    """Base exception for failures reaching the admin credential and session store."""

    pass


class PetitionDBConfigurationError(PetitionDBException):
    """Raised when neither DATABASE_URL nor a complete set of DB_* variables is configured."""

    def __init__(self, message: str, missing_vars: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self.missing_vars = list(missing_vars or [])


class PetitionDBConnectionError(PetitionDBException):
    """Raised when the admin store's engine cannot be created.

    ``masked_url`` is the target URL with its password hidden, safe to log.
    """

    def __init__(self, message: str, masked_url: Optional[str] = None) -> None:
        super().__init__(message)
        self.masked_url = masked_url
