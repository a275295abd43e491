"""Batch import of Stripe payment exports."""

import csv
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from donortrack.database.base import Database
from donortrack.domain.errors import ValidationError
from donortrack.domain.payment_import import ImportResult, ImportStatus, PaymentImportService
from donortrack.domain.rules import MappingRuleService
from donortrack.domain.stripe_row import PaymentRow, parse_stripe_row, sanitize_row
from donortrack.log_config import get_logger
from donortrack.utils.date_parser import utcnow

logger = get_logger(__name__)


@dataclass(frozen=True)
class RowError:
    """A row that failed to import."""

    row_number: Optional[int]
    message: str
    row_excerpt: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        if self.row_number is None:
            return self.message
        return f"Row {self.row_number}: {self.message}"


@dataclass
class BatchResult:
    """Aggregated counts for one batch run.

    ``imported_count`` counts donations, so a multi-child row adds more than
    one; the other counts are per row.
    """

    imported_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    unmapped_count: int = 0
    errors: list[RowError] = field(default_factory=list)

    def add_failure(self, row_number: Optional[int], message: str, row_excerpt: dict[str, Any]) -> None:
        self.failed_count += 1
        self.errors.append(RowError(row_number=row_number, message=message, row_excerpt=row_excerpt))

    def record(self, row_number: int, row: PaymentRow, result: ImportResult) -> None:
        """Fold one row's import result into the totals."""
        if result.status == ImportStatus.SUCCEEDED:
            self.imported_count += result.imported_count
        elif result.status == ImportStatus.SKIPPED:
            self.skipped_count += 1
        elif result.status == ImportStatus.UNMAPPED:
            self.unmapped_count += 1
        else:
            self.add_failure(row_number, "; ".join(result.errors), row.excerpt())


RawRow = Union[PaymentRow, Mapping[str, Any]]


class BatchImporter:
    """Drives the payment import over a sequence of rows.

    One mapping rule snapshot is taken per run. A failing row is recorded and
    the batch carries on.
    """

    def __init__(
        self,
        db: Database,
        clock: Optional[Callable[[], datetime]] = None,
        failed_payment_recorder: Optional[Callable[[PaymentRow], None]] = None,
    ):
        """Initialize batch importer.

        Args:
            db: Database instance
            clock: Returns "now" as a naive UTC datetime (defaults to utcnow)
            failed_payment_recorder: Passed on to the payment import service
        """
        self.db = db
        self.clock = clock or utcnow
        self.failed_payment_recorder = failed_payment_recorder
        self.rule_service = MappingRuleService(db)

    def _import_into(self, result: BatchResult, rows: Iterable[RawRow], start: int) -> None:
        service = PaymentImportService(
            self.db,
            rules=self.rule_service.load_engine(),
            clock=self.clock,
            failed_payment_recorder=self.failed_payment_recorder,
        )

        for row_number, raw in enumerate(rows, start=start):
            if isinstance(raw, PaymentRow):
                row = raw
            else:
                try:
                    row = parse_stripe_row(raw)
                except Exception as e:
                    logger.warning("row_failed", row_number=row_number, error=str(e))
                    result.add_failure(row_number, str(e), sanitize_row(raw))
                    continue

            result.record(row_number, row, service.import_row(row))

    def import_rows(self, rows: Iterable[RawRow], start: int = 1) -> BatchResult:
        """Import a sequence of rows.

        Args:
            rows: PaymentRow objects or raw Stripe export mappings
            start: Number of the first row, used in error reports

        Returns:
            BatchResult
        """
        result = BatchResult()
        self._import_into(result, rows, start)
        self._log_summary(result)
        return result

    def import_csv(self, csv_file_path: Union[str, Path]) -> BatchResult:
        """Import a Stripe payments CSV export.

        Args:
            csv_file_path: Path to the CSV file

        Returns:
            BatchResult. Rows are numbered from 2, the header being row 1.

        Raises:
            FileNotFoundError: If the CSV file doesn't exist
            ValidationError: If the file has no header row
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        result = BatchResult()
        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            try:
                if reader.fieldnames is None:
                    raise ValidationError("CSV file has no header row")
                self._import_into(result, reader, start=2)
            except (csv.Error, UnicodeDecodeError) as e:
                result.add_failure(None, f"CSV parsing error: {e}", {})

        self._log_summary(result, path=str(csv_path))
        return result

    def _log_summary(self, result: BatchResult, **context: Any) -> None:
        logger.info(
            "batch_finished",
            imported=result.imported_count,
            skipped=result.skipped_count,
            unmapped=result.unmapped_count,
            failed=result.failed_count,
            **context,
        )
