"""Sponsorship domain service."""

from datetime import date
from typing import Optional
from donortrack.database.base import Database
from donortrack.domain.entities import ProjectType, Sponsorship as SponsorshipEntity
from donortrack.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    child_not_found,
    donor_not_found,
    duplicate_active_sponsorship,
    sponsorship_not_found,
)
from donortrack.domain.project import ProjectService, sponsorship_project_title


class SponsorshipService:
    """Service for managing sponsorships.

    Every sponsorship of a child shares one project: the first sponsorship
    creates "Sponsor <Child Name>", later ones (any donor, any amount) reuse it.
    """

    def __init__(self, db: Database):
        """Initialize sponsorship service.

        Args:
            db: Database instance
        """
        self.db = db
        self.project_service = ProjectService(db)

    def get_sponsorship(self, sponsorship_id: int) -> Optional[SponsorshipEntity]:
        """Get sponsorship by ID."""
        return self.db.get_sponsorship(sponsorship_id)

    def list_sponsorships(
        self,
        donor_id: Optional[int] = None,
        child_id: Optional[int] = None,
        active_only: bool = False,
    ) -> list[SponsorshipEntity]:
        """List sponsorships with optional filters."""
        return self.db.list_sponsorships(donor_id=donor_id, child_id=child_id, active_only=active_only)

    def project_for_child(self, child_id: int, child_name: str) -> int:
        """Return the child's sponsorship project ID, creating the project if needed."""
        project_id = self.db.find_child_project_id(child_id)
        if project_id is not None:
            return project_id

        project = self.project_service.find_or_create_project(
            sponsorship_project_title(child_name),
            ProjectType.SPONSORSHIP,
        )
        return project.id

    def create_sponsorship(
        self,
        donor_id: int,
        child_id: int,
        monthly_amount: int,
        start_date: Optional[date] = None,
    ) -> SponsorshipEntity:
        """Create a sponsorship and attach it to the child's project.

        Args:
            donor_id: Sponsoring donor
            child_id: Sponsored child
            monthly_amount: Monthly pledge in minor units
            start_date: Optional explicit start date

        Returns:
            Sponsorship entity

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the donor or child does not exist
            ConflictError: If an identical active sponsorship already exists
        """
        if isinstance(monthly_amount, bool) or not isinstance(monthly_amount, int) or monthly_amount <= 0:
            raise ValidationError(f"Monthly amount must be a positive number of cents, got {monthly_amount!r}")

        donor = self.db.get_donor(donor_id)
        if donor is None:
            raise NotFoundError(donor_not_found(donor_id))
        child = self.db.get_child(child_id)
        if child is None:
            raise NotFoundError(child_not_found(child_id))

        if self.db.find_active_sponsorship(donor_id, child_id, monthly_amount) is not None:
            raise ConflictError(duplicate_active_sponsorship(child.name, donor.name))

        project_id = self.project_for_child(child.id, child.name)
        sponsorship_id = self.db.create_sponsorship(
            donor_id=donor_id,
            child_id=child_id,
            project_id=project_id,
            monthly_amount=monthly_amount,
            start_date=start_date,
        )
        return self.db.get_sponsorship(sponsorship_id)

    def end_sponsorship(self, sponsorship_id: int, end_date: date) -> None:
        """End an active sponsorship.

        Raises:
            NotFoundError: If the sponsorship does not exist
            ValidationError: If it has already ended or ends before it started
        """
        sponsorship = self.db.get_sponsorship(sponsorship_id)
        if sponsorship is None:
            raise NotFoundError(sponsorship_not_found(sponsorship_id))
        if not sponsorship.active:
            raise ValidationError(f"Sponsorship {sponsorship_id} has already ended")
        if sponsorship.start_date is not None and end_date < sponsorship.start_date:
            raise ValidationError("End date cannot be before the start date")

        self.db.end_sponsorship(sponsorship_id, end_date)
