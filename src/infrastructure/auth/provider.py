"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The caller identity extracted from a bearer token.

    ``id`` is the owner identifier stamped on every profile, bill and
    bill instance the caller creates.
    """

    id: UUID
    email: str
    display_name: Optional[str] = None


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the token's user, or None if the token is invalid or expired."""
        ...

    def create_token(self, user: TokenUser) -> str:
        """Issue a token for a user."""
        ...
