"""Entity resolution for imported payments.

Idempotent find-or-create of the donor, child, sponsorship and project a
donation needs. Nothing here opens or commits a transaction; the payment
import service wraps a whole row's resolution in one.
"""

import re
from datetime import date, datetime
from typing import Callable, Optional

from donortrack.database.base import Database
from donortrack.domain.classifier import (
    Campaign,
    Classification,
    General,
    Sponsorship as SponsorshipClassification,
    canonicalize_name,
)
from donortrack.domain.entities import (
    Child,
    Donation,
    Donor,
    Project,
    ProjectType,
    Sponsorship,
)
from donortrack.domain.errors import ValidationError
from donortrack.domain.project import ProjectService
from donortrack.domain.sponsorship import SponsorshipService
from donortrack.domain.stripe_row import DonorAttributes
from donortrack.log_config import get_logger
from donortrack.utils.date_parser import utcnow

logger = get_logger(__name__)

ANONYMOUS_NAME = "Anonymous"
PLACEHOLDER_EMAIL_DOMAIN = "mailinator.com"
AUTO_CREATED_CHILD_BIO = "Auto-created from payment import"
EMAIL_PATTERN = re.compile(r"^[\w+\-.]+@[a-z\d\-]+(?:\.[a-z\d\-]+)*\.[a-z]+$", re.IGNORECASE)


def placeholder_email(name: Optional[str]) -> str:
    """Synthesize a deterministic email for a donor who supplied none.

    >>> placeholder_email("Jane Doe")
    'JaneDoe@mailinator.com'
    """
    cleaned = re.sub(r"[^\w.+-]", "", name or "") or ANONYMOUS_NAME
    return f"{cleaned}@{PLACEHOLDER_EMAIL_DOMAIN}"


def is_placeholder_email(email: str) -> bool:
    """Return True for emails synthesized by ``placeholder_email``."""
    return email.lower().endswith(f"@{PLACEHOLDER_EMAIL_DOMAIN}")


class EntityResolver:
    """Finds or creates the entities behind a donation."""

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        """Initialize entity resolver.

        Args:
            db: Database instance
            clock: Returns "now" as a naive UTC datetime (defaults to utcnow)
        """
        self.db = db
        self.clock = clock or utcnow
        self.project_service = ProjectService(db)
        self.sponsorship_service = SponsorshipService(db)

    def resolve_donor(self, attributes: DonorAttributes, transaction_date: datetime) -> Donor:
        """Find the donor by processor customer ID, then by email; create on a miss.

        An existing donor is only updated when ``transaction_date`` is newer
        than its ``last_updated_at``; blank incoming values never overwrite
        stored ones.

        Args:
            attributes: Payer identity and contact details
            transaction_date: Timestamp of the payment being imported

        Returns:
            Donor entity

        Raises:
            ValidationError: If a supplied email is malformed
        """
        name = (attributes.name or "").strip()
        email = (attributes.email or "").strip()
        if email and not EMAIL_PATTERN.match(email):
            raise ValidationError(f"Invalid email '{email}'")
        customer_id = attributes.processor_customer_id

        donor = None
        if customer_id:
            donor = self.db.find_donor_by_customer_id(customer_id)
        lookup_email = email or placeholder_email(name)
        if donor is None:
            donor = self.db.find_donor_by_email(lookup_email)

        if donor is None:
            donor_id = self.db.create_donor(
                name=name or ANONYMOUS_NAME,
                email=lookup_email,
                processor_customer_id=customer_id,
                last_updated_at=transaction_date,
                **attributes.contact_fields(),
            )
            logger.debug("donor_created", donor_id=donor_id)
            return self.db.get_donor(donor_id)

        updates = {}
        if customer_id and donor.processor_customer_id is None:
            updates["processor_customer_id"] = customer_id

        if donor.last_updated_at is None or transaction_date > donor.last_updated_at:
            updates["last_updated_at"] = transaction_date
            if name:
                updates["name"] = name
            updates.update(attributes.contact_fields())
            if (
                email
                and email.lower() != donor.email
                and is_placeholder_email(donor.email)
                and self.db.find_donor_by_email(email) is None
            ):
                updates["email"] = email

        if not updates:
            return donor

        self.db.update_donor(donor.id, **updates)
        logger.debug("donor_updated", donor_id=donor.id, fields=sorted(updates))
        return self.db.get_donor(donor.id)

    def resolve_child(self, name: str) -> Child:
        """Find a child by name (case-insensitive) or create one.

        Raises:
            ValidationError: If the name is blank
        """
        canonical = canonicalize_name(name or "")
        if not canonical:
            raise ValidationError("Child name cannot be blank")

        child = self.db.find_child_by_name(canonical)
        if child is not None:
            return child

        child_id = self.db.create_child(name=canonical, bio=AUTO_CREATED_CHILD_BIO)
        logger.debug("child_created", child_id=child_id, name=canonical)
        return self.db.get_child(child_id)

    def resolve_sponsorship(
        self,
        donor: Donor,
        child: Child,
        monthly_amount: int,
        start_date: Optional[date] = None,
    ) -> Sponsorship:
        """Reuse the active sponsorship for donor, child and amount, or create one."""
        existing = self.db.find_active_sponsorship(donor.id, child.id, monthly_amount)
        if existing is not None:
            return existing

        sponsorship = self.sponsorship_service.create_sponsorship(
            donor_id=donor.id,
            child_id=child.id,
            monthly_amount=monthly_amount,
            start_date=start_date,
        )
        logger.debug(
            "sponsorship_created",
            sponsorship_id=sponsorship.id,
            child_id=child.id,
            project_id=sponsorship.project_id,
        )
        return sponsorship

    def resolve_project(self, classification: Classification) -> Project:
        """Find or create the project a general or campaign payment goes to.

        Raises:
            ValidationError: For sponsorship classifications, which are routed
                through the child's sponsorship project instead
        """
        if isinstance(classification, SponsorshipClassification):
            raise ValidationError("Sponsorship payments are routed through the child's project")
        if isinstance(classification, Campaign):
            return self.project_service.find_or_create_project(
                classification.project_title, ProjectType.CAMPAIGN
            )
        if isinstance(classification, General):
            return self.project_service.find_or_create_project(
                classification.project_title, ProjectType.GENERAL
            )
        raise ValidationError(f"Unknown classification: {classification!r}")

    def create_donation(
        self,
        donor: Donor,
        amount: int,
        donation_date: Optional[date],
        project: Optional[Project] = None,
        sponsorship: Optional[Sponsorship] = None,
        transaction_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Donation:
        """Create a new donation. Donations are never deduplicated here.

        Raises:
            ValidationError: If the amount is not positive, the date is missing
                or in the future, or a sponsorship project has no sponsorship
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(f"Donation amount must be a positive number of cents, got {amount!r}")
        if donation_date is None:
            raise ValidationError("Donation date is required")
        if donation_date > self.clock().date():
            raise ValidationError(f"Donation date {donation_date.isoformat()} cannot be in the future")

        project_id = project.id if project is not None else None
        if sponsorship is not None and project_id is None:
            project_id = sponsorship.project_id
        if (
            project is not None
            and project.project_type == ProjectType.SPONSORSHIP
            and sponsorship is None
        ):
            raise ValidationError(
                f"Donations to sponsorship project '{project.title}' require a sponsorship"
            )

        donation_id = self.db.create_donation(
            donor_id=donor.id,
            amount=amount,
            date=donation_date,
            project_id=project_id,
            sponsorship_id=sponsorship.id if sponsorship is not None else None,
            transaction_id=transaction_id,
            processor_customer_id=donor.processor_customer_id,
            subscription_id=subscription_id,
            description=description,
        )
        return self.db.get_donation(donation_id)
