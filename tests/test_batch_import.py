"""Tests for batch import of Stripe exports."""

import csv

import pytest

from donortrack.domain.batch_import import BatchImporter
from donortrack.domain.errors import ValidationError

HEADER = [
    "Transaction ID",
    "Created Formatted",
    "Amount",
    "Status",
    "Description",
    "Cust Subscription Data Plan Nickname",
    "Billing Details Name",
    "Cust Email",
    "Billing Details Email",
    "Cust ID",
]


def write_export(path, rows):
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=HEADER)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


def export_row(transaction_id, description="Sponsorship for Sangwan", amount="30.00", **overrides):
    row = {
        "Transaction ID": transaction_id,
        "Created Formatted": "2025-01-15 09:30:00",
        "Amount": amount,
        "Status": "Succeeded",
        "Description": description,
        "Cust Subscription Data Plan Nickname": "",
        "Billing Details Name": "Jane Doe",
        "Cust Email": "jane@example.com",
        "Billing Details Email": "",
        "Cust ID": "cus_001",
    }
    row.update(overrides)
    return row


def test_row_isolation(batch_importer, temp_db, stripe_export_row):
    """One bad row is reported and the rest of the batch still imports."""
    rows = [
        stripe_export_row(**{"Transaction ID": f"ch_{i}", "Amount": "-5.00" if i == 5 else "30.00"})
        for i in range(1, 11)
    ]

    result = batch_importer.import_rows(rows)

    assert result.imported_count == 9
    assert result.failed_count == 1
    assert result.skipped_count == 0
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.row_number == 5
    assert "positive" in error.message
    assert error.row_excerpt["transaction_id"] == "ch_5"
    assert str(error).startswith("Row 5: ")
    assert len(temp_db.list_donations()) == 9


def test_reimport_is_idempotent(batch_importer, temp_db, stripe_export_row):
    rows = [stripe_export_row(**{"Transaction ID": f"ch_{i}"}) for i in range(1, 4)]

    first = batch_importer.import_rows(rows)
    second = batch_importer.import_rows(rows)

    assert first.imported_count == 3
    assert second.imported_count == 0
    assert second.skipped_count == first.imported_count
    assert len(temp_db.list_donations()) == 3
    assert len(temp_db.list_donors()) == 1
    assert len(temp_db.list_children()) == 1
    assert len(temp_db.list_sponsorships()) == 1


def test_unparseable_row_is_a_failure(batch_importer, stripe_export_row):
    result = batch_importer.import_rows([stripe_export_row(Amount="abc")], start=2)

    assert result.failed_count == 1
    error = result.errors[0]
    assert error.row_number == 2
    assert error.row_excerpt["amount"] == "abc"
    # Only diagnostic fields are kept
    assert set(error.row_excerpt) == {"amount", "name", "email", "description", "date", "status", "transaction_id"}


def test_mixed_outcomes(temp_db, clock, stripe_export_row, payment_row):
    recorded = []
    importer = BatchImporter(temp_db, clock=clock, failed_payment_recorder=recorded.append)

    result = importer.import_rows(
        [
            stripe_export_row(**{"Transaction ID": "ch_1", "Description": "Sponsorship for Sangwan, Mary"}),
            stripe_export_row(**{"Transaction ID": "ch_2", "Status": "Failed"}),
            stripe_export_row(**{"Transaction ID": "ch_3", "Description": "Special Christmas Appeal"}),
            payment_row(description="$100 - General Monthly Donation", amount=10000, transaction_id="ch_4"),
        ]
    )

    assert result.imported_count == 3
    assert result.skipped_count == 1
    assert result.unmapped_count == 1
    assert result.failed_count == 0
    assert [row.transaction_id for row in recorded] == ["ch_2"]


def test_rule_snapshot_taken_per_run(batch_importer, rule_service, stripe_export_row):
    row = stripe_export_row(**{"Transaction ID": "ch_1", "Description": "Special Christmas Appeal"})
    assert batch_importer.import_rows([row]).unmapped_count == 1

    rule_service.create_rule("Christmas", "Christmas Appeal")

    assert batch_importer.import_rows([row]).imported_count == 1


def test_nickname_preferred_over_description(batch_importer, temp_db, stripe_export_row):
    row = stripe_export_row(
        **{
            "Description": "Subscription creation",
            "Cust Subscription Data Plan Nickname": "Sponsorship for Sangwan",
        }
    )

    batch_importer.import_rows([row])

    assert [c.name for c in temp_db.list_children()] == ["Sangwan"]


def test_import_csv(batch_importer, temp_db, tmp_path):
    csv_path = write_export(
        tmp_path / "payments.csv",
        [
            export_row("ch_1"),
            export_row("ch_2", description="$100 - General Monthly Donation", amount="$100.00"),
            export_row("ch_3", amount="oops"),
        ],
    )

    result = batch_importer.import_csv(csv_path)

    assert result.imported_count == 2
    assert result.failed_count == 1
    # Header is row 1
    assert result.errors[0].row_number == 4
    amounts = sorted(d.amount for d in temp_db.list_donations())
    assert amounts == [3000, 10000]


def test_import_csv_with_bom(batch_importer, tmp_path):
    csv_path = tmp_path / "bom.csv"
    csv_path.write_text(
        "Transaction ID,Created Formatted,Amount,Status,Description,Billing Details Name,Cust Email\n"
        "ch_1,2025-01-15 09:30:00,30.00,Succeeded,Sponsor Sangwan,Jane Doe,jane@example.com\n",
        encoding="utf-8-sig",
    )

    result = batch_importer.import_csv(str(csv_path))

    assert result.imported_count == 1
    assert result.errors == []


def test_import_csv_missing_file(batch_importer, tmp_path):
    with pytest.raises(FileNotFoundError):
        batch_importer.import_csv(tmp_path / "missing.csv")


def test_import_csv_without_header(batch_importer, tmp_path):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("", encoding="utf-8")

    with pytest.raises(ValidationError):
        batch_importer.import_csv(csv_path)


def test_import_csv_malformed(batch_importer, tmp_path):
    """A CSV the reader cannot parse is reported as one error without a row number."""
    csv_path = tmp_path / "malformed.csv"
    huge = "x" * (csv.field_size_limit() + 10)
    csv_path.write_text(
        "Transaction ID,Created Formatted,Amount,Status,Description\n"
        f'ch_1,2025-01-15,30.00,Succeeded,"{huge}"\n',
        encoding="utf-8",
    )

    result = batch_importer.import_csv(csv_path)

    assert result.failed_count == 1
    assert result.errors[0].row_number is None
    assert result.errors[0].message.startswith("CSV parsing error: ")


def test_out_of_range_amount_does_not_abort_batch(batch_importer, temp_db, stripe_export_row):
    rows = [
        stripe_export_row(**{"Transaction ID": "t1"}),
        stripe_export_row(**{"Transaction ID": "t2", "Amount": "1e30"}),
        stripe_export_row(**{"Transaction ID": "t3"}),
    ]

    result = batch_importer.import_rows(rows)

    assert result.imported_count == 2
    assert result.failed_count == 1
    assert result.errors[0].row_number == 2
    assert result.errors[0].row_excerpt["transaction_id"] == "t2"
    assert {d.transaction_id for d in temp_db.list_donations()} == {"t1", "t3"}


def test_import_csv_invalid_utf8(batch_importer, tmp_path):
    """Bytes that are not UTF-8 are reported as one error instead of aborting the import."""
    csv_path = tmp_path / "latin1.csv"
    csv_path.write_bytes(
        b"Transaction ID,Created Formatted,Amount,Status,Description,Billing Details Name,Cust Email\n"
        b"ch_1,2025-01-15 09:30:00,30.00,Succeeded,Sponsor Sangwan,Jane Doe,jane@example.com\n"
        b"ch_2,2025-01-15 09:30:00,30.00,Succeeded,Sponsor Sangwan,Ren\xe9 Roe,rene@example.com\n"
    )

    result = batch_importer.import_csv(csv_path)

    assert result.errors[-1].row_number is None
    assert result.errors[-1].message.startswith("CSV parsing error: ")
