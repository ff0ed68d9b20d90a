"""Ownership guard shared by the CRUD services."""

from uuid import UUID

from core.exceptions import AuthenticationError, AuthorizationError


def require_owner(owner_id: UUID, user_id: UUID | None, action: str, entity: str) -> None:
    """Verify the caller owns the entity.

    A missing caller identity is reported as an authentication failure,
    never as a missing or foreign entity.

    Raises:
        AuthenticationError: If no caller identity was resolved.
        AuthorizationError: If the entity belongs to someone else.
    """
    if user_id is None:
        raise AuthenticationError()
    if owner_id != user_id:
        raise AuthorizationError(f"Unauthorized to {action} this {entity}")
