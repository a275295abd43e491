"""Domain model entities for donortrack.

These are pure data classes representing business concepts, independent of
database schema. Services and the import pipeline only ever see these; the
SQLAlchemy models stay behind the database layer.
"""

from dataclasses import dataclass
from datetime import datetime, date
from enum import Enum
from typing import Optional


class ProjectType(str, Enum):
    """Donation destination variants."""

    GENERAL = "general"
    CAMPAIGN = "campaign"
    SPONSORSHIP = "sponsorship"


class MatchType(str, Enum):
    """How a mapping rule pattern is compared against a description."""

    EXACT = "exact"
    CONTAINS = "contains"
    REGEX = "regex"


class UnmappedStatus(str, Enum):
    """Review status of a queued unmapped payment."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    IMPORTED = "imported"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Donor:
    """Donor domain entity."""

    id: int
    name: str
    email: str
    processor_customer_id: Optional[str]
    last_updated_at: Optional[datetime]
    created_at: datetime
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class Child:
    """Sponsored child domain entity."""

    id: int
    name: str
    bio: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Project:
    """Project domain entity."""

    id: int
    title: str
    project_type: ProjectType
    system: bool
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Sponsorship:
    """Sponsorship domain entity (donor pledges a monthly amount to a child)."""

    id: int
    donor_id: int
    child_id: int
    project_id: int
    monthly_amount: int
    start_date: Optional[date]
    end_date: Optional[date]
    created_at: datetime

    @property
    def active(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class Donation:
    """Donation domain entity. Amounts are integer minor units (cents)."""

    id: int
    donor_id: int
    amount: int
    date: date
    project_id: Optional[int]
    sponsorship_id: Optional[int]
    transaction_id: Optional[str]
    processor_customer_id: Optional[str]
    subscription_id: Optional[str]
    description: Optional[str]
    payment_method: str
    created_at: datetime


@dataclass(frozen=True)
class MappingRule:
    """Admin-defined rule routing a description to a project or child."""

    id: int
    pattern: str
    match_type: MatchType
    target_project_title: Optional[str]
    target_project_type: ProjectType
    child_name_template: Optional[str]
    priority: int
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class UnmappedPayment:
    """Payment row waiting for manual review."""

    id: int
    description: Optional[str]
    amount: int
    donor_name: Optional[str]
    donor_email: Optional[str]
    processor_customer_id: Optional[str]
    transaction_id: Optional[str]
    transaction_date: Optional[datetime]
    status: UnmappedStatus
    donation_id: Optional[int]
    created_at: datetime
    updated_at: datetime
