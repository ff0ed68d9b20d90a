"""Bill instance domain entity."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from domain.entities.billing_period import BillingPeriod


@dataclass
class BillInstance:
    """One payable occurrence of a bill for a single billing period."""

    user_id: UUID
    bill_id: UUID
    period: str
    due_date: date
    amount: Decimal = Decimal("0.00")
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    is_paid: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def billing_period(self) -> BillingPeriod | None:
        """Parsed period, or None when the stored label is malformed."""
        return BillingPeriod.try_parse(self.period)

    def toggle_paid(self) -> None:
        self.is_paid = not self.is_paid
        self.updated_at = datetime.utcnow()


@dataclass(frozen=True, slots=True)
class BillInstanceView:
    """Read-only value object: an instance with its bill and profile labels."""

    instance: BillInstance
    bill_name: str
    profile_id: UUID | None
    profile_name: str
    profile_color: str
