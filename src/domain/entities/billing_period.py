"""Billing period value object."""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime

_ISO_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
_DISPLAY_PATTERN = re.compile(r"^([A-Za-z]+)\s+(\d{4})$")
_MONTHS_BY_NAME = {name.lower(): index for index, name in enumerate(calendar.month_name) if name}


@dataclass(frozen=True, order=True, slots=True)
class BillingPeriod:
    """A calendar month a bill instance is charged for.

    Stored and transported as ``YYYY-MM``. The human-readable ``Month YYYY``
    form is accepted on parse for labels written by older clients.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"Year out of range: {self.year}")

    @classmethod
    def parse(cls, label: str) -> "BillingPeriod":
        """Parse ``YYYY-MM`` or ``Month YYYY``; raise ValueError otherwise."""
        text = label.strip()

        match = _ISO_PATTERN.match(text)
        if match:
            return cls(int(match.group(1)), int(match.group(2)))

        match = _DISPLAY_PATTERN.match(text)
        if match:
            month = _MONTHS_BY_NAME.get(match.group(1).lower())
            if month:
                return cls(int(match.group(2)), month)

        raise ValueError(f"Unrecognised billing period: {label!r}")

    @classmethod
    def try_parse(cls, label: str | None) -> "BillingPeriod | None":
        """Like parse(), but returns None for missing or malformed labels."""
        if not label:
            return None
        try:
            return cls.parse(label)
        except ValueError:
            return None

    @classmethod
    def containing(cls, moment: date | datetime) -> "BillingPeriod":
        """The period that contains the given date or instant."""
        return cls(moment.year, moment.month)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def display(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def previous(self) -> "BillingPeriod":
        if self.month == 1:
            return BillingPeriod(self.year - 1, 12)
        return BillingPeriod(self.year, self.month - 1)

    def next(self) -> "BillingPeriod":
        if self.month == 12:
            return BillingPeriod(self.year + 1, 1)
        return BillingPeriod(self.year, self.month + 1)

    def day(self, day_of_month: int) -> date:
        """A date inside this period, clamped to the last day of the month."""
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, max(1, min(day_of_month, last_day)))

    def __str__(self) -> str:
        return self.label
