"""Bill domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class EBill:
    """Online account details for paying a bill."""

    link: str
    username: str
    password: str


@dataclass
class Bill:
    """A recurring obligation (e.g. "Electricity") attached to a profile."""

    user_id: UUID
    profile_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    e_bill: EBill | None = None
    due_day: int | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass(frozen=True, slots=True)
class BillWithCount:
    """Read-only value object: a Bill bundled with its live instance count."""

    bill: Bill
    instance_count: int
