"""Shared pytest fixtures for donortrack tests."""

import tempfile
import os
from datetime import datetime
import pytest

from donortrack.database.factories import create_sqlite_database
from donortrack.domain.batch_import import BatchImporter
from donortrack.domain.payment_import import PaymentImportService
from donortrack.domain.project import ProjectService
from donortrack.domain.resolver import EntityResolver
from donortrack.domain.rules import MappingRuleService
from donortrack.domain.sponsorship import SponsorshipService
from donortrack.domain.stripe_row import DonorAttributes, PaymentRow
from donortrack.domain.unmapped import UnmappedQueueService
from donortrack.log_config import configure_logging

NOW = datetime(2025, 6, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Only warnings and errors reach stderr during tests."""
    configure_logging(log_level="WARNING")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that open their own connection
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A clock frozen at NOW."""
    return lambda: NOW


@pytest.fixture
def project_service(temp_db):
    return ProjectService(temp_db)


@pytest.fixture
def sponsorship_service(temp_db):
    return SponsorshipService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    return MappingRuleService(temp_db)


@pytest.fixture
def resolver(temp_db, clock):
    return EntityResolver(temp_db, clock=clock)


@pytest.fixture
def import_service(temp_db, clock):
    """PaymentImportService with an empty rule snapshot."""
    return PaymentImportService(temp_db, clock=clock)


@pytest.fixture
def unmapped_queue(temp_db, clock):
    return UnmappedQueueService(temp_db, clock=clock)


@pytest.fixture
def batch_importer(temp_db, clock):
    return BatchImporter(temp_db, clock=clock)


@pytest.fixture
def payment_row():
    """Factory for PaymentRow objects with sensible defaults."""

    def make(
        description="Sponsorship for Sangwan",
        amount=3000,
        transaction_id="ch_001",
        transaction_date=datetime(2025, 1, 15, 9, 30),
        name="Jane Doe",
        email="jane@example.com",
        customer_id="cus_001",
        **kwargs,
    ):
        return PaymentRow(
            amount=amount,
            description=description,
            donor=DonorAttributes(name=name, email=email, processor_customer_id=customer_id),
            transaction_id=transaction_id,
            transaction_date=transaction_date,
            **kwargs,
        )

    return make


@pytest.fixture
def stripe_export_row():
    """Factory for raw Stripe export rows as csv.DictReader yields them."""

    def make(**overrides):
        row = {
            "Amount": "30.00",
            "Description": "Sponsorship for Sangwan",
            "Cust Subscription Data Plan Nickname": "",
            "Billing Details Name": "Jane Doe",
            "Cust Email": "jane@example.com",
            "Billing Details Email": "",
            "Cust ID": "cus_001",
            "Cust Phone": "",
            "Transaction ID": "ch_001",
            "Created Formatted": "2025-01-15 09:30:00",
            "Status": "Succeeded",
            "Cust Subscription Data ID": "",
        }
        row.update(overrides)
        return row

    return make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
