"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date, datetime

# Import entities directly; the domain package does not import services eagerly
from donortrack.domain.entities import (
    Donor,
    Child,
    Project,
    ProjectType,
    Sponsorship,
    Donation,
    MappingRule,
    MatchType,
    UnmappedPayment,
    UnmappedStatus,
)


class Database(ABC):
    """Abstract database interface for donortrack.

    Write methods commit immediately unless they run inside ``transaction()``,
    in which case they only flush and the whole block commits or rolls back
    together.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Run the enclosed writes atomically.

        Nested calls join the outermost transaction.
        """
        pass

    # Donor operations
    @abstractmethod
    def create_donor(
        self,
        name: str,
        email: str,
        processor_customer_id: Optional[str] = None,
        last_updated_at: Optional[datetime] = None,
        phone: Optional[str] = None,
        address_line1: Optional[str] = None,
        address_line2: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        country: Optional[str] = None,
    ) -> int:
        """Create a donor. Returns donor ID."""
        pass

    @abstractmethod
    def get_donor(self, donor_id: int) -> Optional[Donor]:
        """Get donor by ID."""
        pass

    @abstractmethod
    def find_donor_by_email(self, email: str) -> Optional[Donor]:
        """Find donor by email (case-insensitive)."""
        pass

    @abstractmethod
    def find_donor_by_customer_id(self, processor_customer_id: str) -> Optional[Donor]:
        """Find donor by payment processor customer ID."""
        pass

    @abstractmethod
    def update_donor(
        self,
        donor_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        processor_customer_id: Optional[str] = None,
        last_updated_at: Optional[datetime] = None,
        phone: Optional[str] = None,
        address_line1: Optional[str] = None,
        address_line2: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        country: Optional[str] = None,
    ) -> None:
        """Update donor fields. None values leave the stored field unchanged."""
        pass

    @abstractmethod
    def list_donors(self) -> list[Donor]:
        """List all donors."""
        pass

    # Child operations
    @abstractmethod
    def create_child(self, name: str, bio: Optional[str] = None) -> int:
        """Create a child. Returns child ID."""
        pass

    @abstractmethod
    def get_child(self, child_id: int) -> Optional[Child]:
        """Get child by ID."""
        pass

    @abstractmethod
    def find_child_by_name(self, name: str) -> Optional[Child]:
        """Find child by name (case-insensitive)."""
        pass

    @abstractmethod
    def list_children(self) -> list[Child]:
        """List all children."""
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self,
        title: str,
        project_type: ProjectType,
        system: bool = False,
        description: Optional[str] = None,
    ) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def find_project_by_title(
        self, title: str, project_type: Optional[ProjectType] = None
    ) -> Optional[Project]:
        """Find project by title (case-insensitive), optionally by type."""
        pass

    @abstractmethod
    def list_projects(self, project_type: Optional[ProjectType] = None) -> list[Project]:
        """List projects, optionally filtered by type."""
        pass

    @abstractmethod
    def get_project_donation_count(self, project_id: int) -> int:
        """Get count of donations associated with a project."""
        pass

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        """Delete a project."""
        pass

    # Sponsorship operations
    @abstractmethod
    def create_sponsorship(
        self,
        donor_id: int,
        child_id: int,
        project_id: int,
        monthly_amount: int,
        start_date: Optional[date] = None,
    ) -> int:
        """Create a sponsorship. Returns sponsorship ID."""
        pass

    @abstractmethod
    def get_sponsorship(self, sponsorship_id: int) -> Optional[Sponsorship]:
        """Get sponsorship by ID."""
        pass

    @abstractmethod
    def find_active_sponsorship(
        self, donor_id: int, child_id: int, monthly_amount: int
    ) -> Optional[Sponsorship]:
        """Find the active (no end date) sponsorship for donor, child and amount."""
        pass

    @abstractmethod
    def find_child_project_id(self, child_id: int) -> Optional[int]:
        """Return the project already used by any sponsorship of the child."""
        pass

    @abstractmethod
    def end_sponsorship(self, sponsorship_id: int, end_date: date) -> None:
        """Set a sponsorship's end date."""
        pass

    @abstractmethod
    def list_sponsorships(
        self,
        donor_id: Optional[int] = None,
        child_id: Optional[int] = None,
        project_id: Optional[int] = None,
        active_only: bool = False,
    ) -> list[Sponsorship]:
        """List sponsorships with optional filters."""
        pass

    # Donation operations
    @abstractmethod
    def create_donation(
        self,
        donor_id: int,
        amount: int,
        date: date,
        project_id: Optional[int] = None,
        sponsorship_id: Optional[int] = None,
        transaction_id: Optional[str] = None,
        processor_customer_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        description: Optional[str] = None,
        payment_method: str = "stripe",
    ) -> int:
        """Create a donation. Returns donation ID."""
        pass

    @abstractmethod
    def get_donation(self, donation_id: int) -> Optional[Donation]:
        """Get donation by ID."""
        pass

    @abstractmethod
    def donation_exists_for_transaction(self, transaction_id: str) -> bool:
        """Check if any donation carries the given processor transaction ID."""
        pass

    @abstractmethod
    def list_donations(
        self,
        donor_id: Optional[int] = None,
        project_id: Optional[int] = None,
        transaction_id: Optional[str] = None,
    ) -> list[Donation]:
        """List donations with optional filters."""
        pass

    # Mapping rule operations
    @abstractmethod
    def create_mapping_rule(
        self,
        pattern: str,
        match_type: MatchType,
        target_project_title: Optional[str],
        target_project_type: ProjectType,
        child_name_template: Optional[str] = None,
        priority: int = 0,
        active: bool = True,
    ) -> int:
        """Create a mapping rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_mapping_rule(self, rule_id: int) -> Optional[MappingRule]:
        """Get mapping rule by ID."""
        pass

    @abstractmethod
    def list_mapping_rules(self, active_only: bool = False) -> list[MappingRule]:
        """List mapping rules by descending priority, then insertion order."""
        pass

    @abstractmethod
    def set_mapping_rule_active(self, rule_id: int, active: bool) -> None:
        """Enable or disable a mapping rule."""
        pass

    # Unmapped payment operations
    @abstractmethod
    def create_unmapped_payment(
        self,
        amount: int,
        description: Optional[str] = None,
        donor_name: Optional[str] = None,
        donor_email: Optional[str] = None,
        processor_customer_id: Optional[str] = None,
        transaction_id: Optional[str] = None,
        transaction_date: Optional[datetime] = None,
    ) -> int:
        """Queue an unmapped payment. Returns its ID."""
        pass

    @abstractmethod
    def get_unmapped_payment(self, unmapped_id: int) -> Optional[UnmappedPayment]:
        """Get unmapped payment by ID."""
        pass

    @abstractmethod
    def find_unmapped_payment_by_transaction(
        self, transaction_id: str
    ) -> Optional[UnmappedPayment]:
        """Find unmapped payment by processor transaction ID."""
        pass

    @abstractmethod
    def update_unmapped_payment(
        self,
        unmapped_id: int,
        amount: Optional[int] = None,
        description: Optional[str] = None,
        donor_name: Optional[str] = None,
        donor_email: Optional[str] = None,
        processor_customer_id: Optional[str] = None,
        transaction_date: Optional[datetime] = None,
        status: Optional[UnmappedStatus] = None,
        donation_id: Optional[int] = None,
    ) -> None:
        """Update unmapped payment fields. None values leave fields unchanged."""
        pass

    @abstractmethod
    def list_unmapped_payments(
        self, status: Optional[UnmappedStatus] = None
    ) -> list[UnmappedPayment]:
        """List unmapped payments, optionally filtered by status."""
        pass
