"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

DEFAULT_PROFILE_COLOR = "#3B82F6"


@dataclass
class Address:
    """Postal address of a profile."""

    street: str
    city: str
    country: str


@dataclass
class Profile:
    """A named grouping of bills (a property, a household) owned by one user."""

    user_id: UUID
    name: str
    address: Address
    id: UUID = field(default_factory=uuid4)
    color: str = DEFAULT_PROFILE_COLOR
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Normalize color to '#RRGGBB' upper case."""
        if not self.color.startswith("#"):
            self.color = f"#{self.color}"
        self.color = self.color.upper()
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass(frozen=True, slots=True)
class ProfileWithCount:
    """Read-only value object: a Profile bundled with its live bill count."""

    profile: Profile
    bill_count: int
