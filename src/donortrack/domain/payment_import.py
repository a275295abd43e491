"""Payment import domain service."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from donortrack.database.base import Database
from donortrack.domain.classifier import (
    Classification,
    General,
    Sponsorship as SponsorshipClassification,
    classify,
)
from donortrack.domain.entities import Donation, UnmappedPayment
from donortrack.domain.errors import ValidationError
from donortrack.domain.resolver import EntityResolver
from donortrack.domain.rules import MappingRuleEngine, MappingRuleService
from donortrack.domain.stripe_row import PaymentRow
from donortrack.domain.unmapped import UnmappedQueueService
from donortrack.log_config import get_logger
from donortrack.utils.date_parser import utcnow

logger = get_logger(__name__)

ALREADY_IMPORTED = "already imported"


class ImportStatus(str, Enum):
    """Outcome of importing a single payment row."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"
    UNMAPPED = "unmapped"


@dataclass(frozen=True)
class ImportResult:
    """Result of importing one row. Exactly one status applies."""

    status: ImportStatus
    donations: tuple[Donation, ...] = ()
    reason: Optional[str] = None
    errors: tuple[str, ...] = ()
    unmapped_payment: Optional[UnmappedPayment] = None

    @classmethod
    def succeeded(cls, donations: list[Donation]) -> "ImportResult":
        return cls(status=ImportStatus.SUCCEEDED, donations=tuple(donations))

    @classmethod
    def skipped(cls, reason: str) -> "ImportResult":
        return cls(status=ImportStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, *errors: str) -> "ImportResult":
        return cls(status=ImportStatus.FAILED, errors=tuple(errors))

    @classmethod
    def unmapped(cls, payment: UnmappedPayment) -> "ImportResult":
        return cls(status=ImportStatus.UNMAPPED, unmapped_payment=payment)

    @property
    def imported_count(self) -> int:
        """Number of donations the row produced."""
        return len(self.donations)


class PaymentImportService:
    """Imports one payment row end-to-end.

    Order of checks: row validation, status gate, idempotency gate,
    classification (mapping rules first, then the built-in classifier),
    unmapped routing, and finally entity resolution inside a single
    database transaction.
    """

    def __init__(
        self,
        db: Database,
        rules: Optional[MappingRuleEngine] = None,
        clock: Optional[Callable[[], datetime]] = None,
        failed_payment_recorder: Optional[Callable[[PaymentRow], None]] = None,
    ):
        """Initialize payment import service.

        Args:
            db: Database instance
            rules: Mapping rule snapshot (a fresh one is loaded when omitted)
            clock: Returns "now" as a naive UTC datetime (defaults to utcnow)
            failed_payment_recorder: Called with every row whose status is not
                "succeeded"
        """
        self.db = db
        self.clock = clock or utcnow
        self.rules = rules if rules is not None else MappingRuleService(db).load_engine()
        self.failed_payment_recorder = failed_payment_recorder
        self.resolver = EntityResolver(db, clock=self.clock)
        self.unmapped_queue = UnmappedQueueService(db, clock=self.clock)

    def classify(self, row: PaymentRow) -> Classification:
        """Classify a row: a matching mapping rule wins over the classifier."""
        rule_match = self.rules.find_rule(row.description)
        if rule_match is not None:
            return rule_match.to_classification()
        return classify(row.description, campaign_code=row.campaign_code)

    def validate_row(self, row: PaymentRow) -> None:
        """Check the row before anything is written.

        Raises:
            ValidationError: If the amount is not positive or the date is in the future
        """
        if isinstance(row.amount, bool) or not isinstance(row.amount, int) or row.amount <= 0:
            raise ValidationError(f"Amount must be positive, got {row.amount!r}")
        if row.transaction_date is not None and row.transaction_date > self.clock():
            raise ValidationError(
                f"Transaction date {row.transaction_date.isoformat()} is in the future"
            )

    def import_row(self, row: PaymentRow) -> ImportResult:
        """Import a single payment row.

        Never raises: every failure is reported as a failed ImportResult and
        leaves no partial writes behind.

        Args:
            row: Parsed payment row

        Returns:
            ImportResult
        """
        log = logger.bind(transaction_id=row.transaction_id)
        try:
            result = self._import_row(row)
        except Exception as e:
            log.warning("row_failed", error=str(e), error_type=type(e).__name__)
            return ImportResult.failed(str(e))

        if result.status == ImportStatus.SUCCEEDED:
            log.info("row_imported", donations=result.imported_count)
        elif result.status == ImportStatus.SKIPPED:
            log.info("row_skipped", reason=result.reason)
        elif result.status == ImportStatus.UNMAPPED:
            log.info("row_unmapped", unmapped_id=result.unmapped_payment.id, description=row.description)
        else:
            log.warning("row_failed", errors=list(result.errors))
        return result

    def _import_row(self, row: PaymentRow) -> ImportResult:
        if not row.succeeded:
            if self.failed_payment_recorder is not None:
                self.failed_payment_recorder(row)
            return ImportResult.skipped(f"status {row.status}")

        try:
            self.validate_row(row)
        except ValidationError as e:
            return ImportResult.failed(str(e))

        if row.transaction_id and self.db.donation_exists_for_transaction(row.transaction_id):
            return ImportResult.skipped(ALREADY_IMPORTED)

        classification = self.classify(row)
        if isinstance(classification, General) and not classification.recognized:
            return ImportResult.unmapped(self.unmapped_queue.enqueue(row))

        with self.db.transaction():
            donations = self._persist(row, classification)
        return ImportResult.succeeded(donations)

    def _persist(self, row: PaymentRow, classification: Classification) -> list[Donation]:
        transaction_date = row.transaction_date or self.clock()
        donor = self.resolver.resolve_donor(row.donor, transaction_date)

        if not isinstance(classification, SponsorshipClassification):
            project = self.resolver.resolve_project(classification)
            donation = self.resolver.create_donation(
                donor=donor,
                amount=row.amount,
                donation_date=transaction_date.date(),
                project=project,
                transaction_id=row.transaction_id,
                subscription_id=row.subscription_id,
                description=row.description,
            )
            return [donation]

        # Each child of a multi-child row gets its own donation for the full amount
        donations = []
        for child_name in classification.child_names:
            child = self.resolver.resolve_child(child_name)
            sponsorship = self.resolver.resolve_sponsorship(
                donor, child, row.amount, start_date=transaction_date.date()
            )
            donations.append(
                self.resolver.create_donation(
                    donor=donor,
                    amount=row.amount,
                    donation_date=transaction_date.date(),
                    sponsorship=sponsorship,
                    transaction_id=row.transaction_id,
                    subscription_id=row.subscription_id,
                    description=row.description,
                )
            )
        return donations
