"""Unmapped payment queue.

Payments whose description neither a mapping rule nor the classifier
recognizes are parked here instead of being guessed into a project. An
operator resolves them by hand, or adds a mapping rule and retries the queue.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from donortrack.database.base import Database
from donortrack.domain.classifier import General
from donortrack.domain.entities import (
    Donation,
    MatchType,
    ProjectType,
    UnmappedPayment,
    UnmappedStatus,
)
from donortrack.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    project_not_found,
    unmapped_payment_not_found,
)
from donortrack.domain.resolver import EntityResolver
from donortrack.domain.rules import MappingRuleService
from donortrack.domain.stripe_row import DonorAttributes, PaymentRow
from donortrack.log_config import get_logger
from donortrack.utils.date_parser import utcnow

logger = get_logger(__name__)

RESOLVABLE_STATUSES = (UnmappedStatus.PENDING, UnmappedStatus.REVIEWED)


@dataclass(frozen=True)
class RetrySummary:
    """Outcome of re-running the import over the pending queue."""

    imported_count: int
    remaining_count: int


def payment_row_for(payment: UnmappedPayment) -> PaymentRow:
    """Rebuild the payment row a queued payment was created from."""
    return PaymentRow(
        amount=payment.amount,
        description=payment.description,
        donor=DonorAttributes(
            name=payment.donor_name,
            email=payment.donor_email,
            processor_customer_id=payment.processor_customer_id,
        ),
        transaction_id=payment.transaction_id,
        transaction_date=payment.transaction_date,
    )


class UnmappedQueueService:
    """Service for the unmapped payment queue."""

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        """Initialize unmapped queue service.

        Args:
            db: Database instance
            clock: Returns "now" as a naive UTC datetime (defaults to utcnow)
        """
        self.db = db
        self.clock = clock or utcnow
        self.resolver = EntityResolver(db, clock=self.clock)
        self.rule_service = MappingRuleService(db)

    def get_payment(self, unmapped_id: int) -> Optional[UnmappedPayment]:
        """Get unmapped payment by ID."""
        return self.db.get_unmapped_payment(unmapped_id)

    def list_payments(self, status: Optional[UnmappedStatus] = None) -> list[UnmappedPayment]:
        """List queued payments, optionally filtered by status."""
        return self.db.list_unmapped_payments(status=status)

    def enqueue(self, row: PaymentRow) -> UnmappedPayment:
        """Queue a payment row, or refresh the entry already queued for it.

        Entries are keyed by transaction ID. A refreshed entry keeps its
        review status.
        """
        transaction_date = row.transaction_date or self.clock()
        existing = None
        if row.transaction_id:
            existing = self.db.find_unmapped_payment_by_transaction(row.transaction_id)

        if existing is not None:
            self.db.update_unmapped_payment(
                existing.id,
                amount=row.amount,
                description=row.description,
                donor_name=row.donor.name,
                donor_email=row.donor.email,
                processor_customer_id=row.donor.processor_customer_id,
                transaction_date=transaction_date,
            )
            return self.db.get_unmapped_payment(existing.id)

        unmapped_id = self.db.create_unmapped_payment(
            amount=row.amount,
            description=row.description,
            donor_name=row.donor.name,
            donor_email=row.donor.email,
            processor_customer_id=row.donor.processor_customer_id,
            transaction_id=row.transaction_id,
            transaction_date=transaction_date,
        )
        return self.db.get_unmapped_payment(unmapped_id)

    def _get_or_raise(self, unmapped_id: int) -> UnmappedPayment:
        payment = self.db.get_unmapped_payment(unmapped_id)
        if payment is None:
            raise NotFoundError(unmapped_payment_not_found(unmapped_id))
        return payment

    def resolve(
        self,
        unmapped_id: int,
        project_id: int,
        create_rule: bool = False,
        rule_priority: int = 0,
    ) -> Donation:
        """Import a queued payment into a project chosen by hand.

        Args:
            unmapped_id: Queued payment ID
            project_id: Target general or campaign project
            create_rule: Also store an exact-match rule for the description so
                future imports route it automatically
            rule_priority: Priority of the created rule

        Returns:
            The created donation

        Raises:
            NotFoundError: If the payment or project does not exist
            ValidationError: If the payment is not pending/reviewed, or the
                project is a sponsorship project
            ConflictError: If the transaction was imported in the meantime
        """
        payment = self._get_or_raise(unmapped_id)
        if payment.status not in RESOLVABLE_STATUSES:
            raise ValidationError(
                f"Unmapped payment {unmapped_id} is {payment.status.value} and cannot be resolved"
            )

        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        if project.project_type == ProjectType.SPONSORSHIP:
            raise ValidationError(
                f"Cannot resolve into sponsorship project '{project.title}'; add a sponsorship rule instead"
            )

        if payment.transaction_id and self.db.donation_exists_for_transaction(payment.transaction_id):
            raise ConflictError(f"Transaction {payment.transaction_id} has already been imported")

        row = payment_row_for(payment)
        transaction_date = row.transaction_date or self.clock()

        with self.db.transaction():
            donor = self.resolver.resolve_donor(row.donor, transaction_date)
            donation = self.resolver.create_donation(
                donor=donor,
                amount=payment.amount,
                donation_date=transaction_date.date(),
                project=project,
                transaction_id=payment.transaction_id,
                description=payment.description,
            )
            self.db.update_unmapped_payment(
                payment.id, status=UnmappedStatus.IMPORTED, donation_id=donation.id
            )
            if create_rule and payment.description and payment.description.strip():
                self.rule_service.create_rule(
                    pattern=payment.description.strip(),
                    target_project_title=project.title,
                    target_project_type=project.project_type,
                    match_type=MatchType.EXACT,
                    priority=rule_priority,
                )

        logger.info(
            "unmapped_resolved",
            unmapped_id=payment.id,
            project_id=project.id,
            donation_id=donation.id,
            rule_created=create_rule,
        )
        return donation

    def bulk_retry(self) -> RetrySummary:
        """Re-run the import over every pending entry with a fresh rule snapshot.

        Entries that are still unrecognized stay where they are; they are never
        queued a second time.
        """
        from donortrack.domain.payment_import import (
            ALREADY_IMPORTED,
            ImportStatus,
            PaymentImportService,
        )

        importer = PaymentImportService(self.db, clock=self.clock)
        imported = 0
        for payment in self.db.list_unmapped_payments(status=UnmappedStatus.PENDING):
            row = payment_row_for(payment)
            classification = importer.classify(row)
            if isinstance(classification, General) and not classification.recognized:
                continue

            result = importer.import_row(row)

            donation_id = None
            if result.status == ImportStatus.SUCCEEDED:
                donation_id = result.donations[0].id
            elif result.status == ImportStatus.SKIPPED and result.reason == ALREADY_IMPORTED:
                donation_id = self.db.list_donations(transaction_id=payment.transaction_id)[0].id

            if donation_id is not None:
                self.db.update_unmapped_payment(
                    payment.id, status=UnmappedStatus.IMPORTED, donation_id=donation_id
                )
                imported += 1

        remaining = len(self.db.list_unmapped_payments(status=UnmappedStatus.PENDING))
        logger.info("unmapped_retry_finished", imported=imported, remaining=remaining)
        return RetrySummary(imported_count=imported, remaining_count=remaining)

    def mark_reviewed(self, unmapped_id: int) -> None:
        """Flag a pending entry as looked at.

        Raises:
            NotFoundError: If the payment does not exist
            ValidationError: If the payment is not pending
        """
        payment = self._get_or_raise(unmapped_id)
        if payment.status != UnmappedStatus.PENDING:
            raise ValidationError(f"Unmapped payment {unmapped_id} is {payment.status.value}, not pending")
        self.db.update_unmapped_payment(unmapped_id, status=UnmappedStatus.REVIEWED)

    def ignore(self, unmapped_id: int) -> None:
        """Drop an entry from the queue without importing it.

        Raises:
            NotFoundError: If the payment does not exist
            ValidationError: If the payment was already imported
        """
        payment = self._get_or_raise(unmapped_id)
        if payment.status == UnmappedStatus.IMPORTED:
            raise ValidationError(f"Unmapped payment {unmapped_id} has already been imported")
        self.db.update_unmapped_payment(unmapped_id, status=UnmappedStatus.IGNORED)
