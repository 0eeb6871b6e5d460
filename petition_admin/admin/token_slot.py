"""Single-slot stores for the current admin session token."""

import abc
from typing import Optional

from fastapi import Request, Response


class TokenSlot(abc.ABC):
    """Holds at most one session token for one client."""

    @abc.abstractmethod
    def get(self) -> Optional[str]:
        pass

    @abc.abstractmethod
    def set(self, value: str) -> None:
        pass

    @abc.abstractmethod
    def clear(self) -> None:
        pass


class MemoryTokenSlot(TokenSlot):
    """Token slot kept in process memory. Used by scripts and tests."""

    def __init__(self, value: Optional[str] = None) -> None:
        self.value = value

    def get(self) -> Optional[str]:
        return self.value

    def set(self, value: str) -> None:
        self.value = value

    def clear(self) -> None:
        self.value = None


class CookieTokenSlot(TokenSlot):
    """Token slot backed by a browser cookie.

    Reads come from the incoming request. Writes are recorded and only reach the
    browser once ``apply`` is called on the outgoing response.
    """

    _UNCHANGED = object()

    def __init__(self, request: Request, cookie_name: str, max_age: int) -> None:
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = request.url.scheme == "https"
        self._value: Optional[str] = request.cookies.get(cookie_name)
        self._pending: object = self._UNCHANGED

    def get(self) -> Optional[str]:
        return self._value

    def set(self, value: str) -> None:
        self._value = value
        self._pending = value

    def clear(self) -> None:
        self._value = None
        self._pending = None

    @property
    def dirty(self) -> bool:
        return self._pending is not self._UNCHANGED

    def apply(self, response: Response) -> Response:
        """Write any pending change to ``response`` as a cookie update."""
        if self._pending is self._UNCHANGED:
            return response

        if self._pending is None:
            response.delete_cookie(key=self.cookie_name)
        else:
            response.set_cookie(
                key=self.cookie_name,
                value=str(self._pending),
                httponly=True,
                secure=self.secure,
                samesite="strict",
                max_age=self.max_age,
            )
        return response
