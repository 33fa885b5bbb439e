"""
Session Collaborator

The ledger does not authenticate anyone. It only needs to know whose
expenses it is reading and writing, so it asks a session for the
current owner id before every request.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionError(Exception):
    """Login failed."""
    pass


class AuthenticationRequiredError(SessionError):
    """An operation needed an owner but nobody is logged in."""

    def __init__(self, message: str = "Not logged in"):
        super().__init__(message)


class LoginCredentials(BaseModel):
    """What a user types into the login form."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class SessionInterface(ABC):
    """Contract the store needs from whatever handles login."""

    @property
    @abstractmethod
    def is_logged_in(self) -> bool:
        pass

    @property
    @abstractmethod
    def owner_id(self) -> Optional[str]:
        """Identity of the logged-in user, None when logged out."""
        pass

    @abstractmethod
    async def login(self, credentials: LoginCredentials) -> None:
        """
        Start a session.

        Raises:
            SessionError: If the credentials are rejected
        """
        pass

    @abstractmethod
    async def logout(self) -> None:
        pass

    def require_owner(self) -> str:
        """Return the owner id or raise AuthenticationRequiredError."""
        owner = self.owner_id
        if not self.is_logged_in or not owner:
            raise AuthenticationRequiredError()
        return owner


class InMemorySession(SessionInterface):
    """
    Session that checks credentials against a fixed email/password map.

    The email is used as the owner id. Pass `owner_id` to start
    already logged in (handy for scripts and tests).
    """

    def __init__(
        self,
        users: Optional[dict[str, str]] = None,
        owner_id: Optional[str] = None,
    ):
        self._users = {email.lower(): pw for email, pw in (users or {}).items()}
        self._owner_id = owner_id

    @property
    def is_logged_in(self) -> bool:
        return self._owner_id is not None

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    async def login(self, credentials: LoginCredentials) -> None:
        email = credentials.email.lower()
        if self._users.get(email) != credentials.password:
            raise SessionError("Invalid email or password")
        self._owner_id = email

    async def logout(self) -> None:
        self._owner_id = None
