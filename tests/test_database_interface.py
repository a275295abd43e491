"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from sqlalchemy.exc import IntegrityError

from donortrack.database.factories import create_sqlite_database
from donortrack.domain import entities


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_donor_returns_domain_model(self, temp_db):
        """Test that get_donor returns a domain Donor entity."""
        donor_id = temp_db.create_donor(name="Jane Doe", email=" Jane@Example.com ")

        donor = temp_db.get_donor(donor_id)

        assert isinstance(donor, entities.Donor)
        assert donor.id == donor_id
        assert donor.email == "jane@example.com"
        assert isinstance(donor.created_at, datetime)

    def test_find_donor_lookups(self, temp_db):
        donor_id = temp_db.create_donor(name="Jane", email="jane@example.com", processor_customer_id="cus_1")

        assert temp_db.find_donor_by_email("JANE@example.com").id == donor_id
        assert temp_db.find_donor_by_customer_id("cus_1").id == donor_id
        assert temp_db.find_donor_by_email("other@example.com") is None
        assert temp_db.find_donor_by_customer_id("cus_2") is None

    def test_donor_email_is_unique(self, temp_db):
        temp_db.create_donor(name="Jane", email="jane@example.com")

        with pytest.raises(IntegrityError):
            temp_db.create_donor(name="Jane Again", email="JANE@example.com")

    def test_update_donor_ignores_none(self, temp_db):
        donor_id = temp_db.create_donor(name="Jane", email="jane@example.com", city="Austin")

        temp_db.update_donor(donor_id, name="Jane Smith")

        donor = temp_db.get_donor(donor_id)
        assert donor.name == "Jane Smith"
        assert donor.city == "Austin"

    def test_find_child_by_name_is_case_insensitive(self, temp_db):
        child_id = temp_db.create_child(name="Sangwan")

        child = temp_db.find_child_by_name("sANGWAN")

        assert isinstance(child, entities.Child)
        assert child.id == child_id

    def test_project_lookup_and_delete(self, temp_db):
        project_id = temp_db.create_project(title="Building Fund", project_type=entities.ProjectType.GENERAL)

        project = temp_db.find_project_by_title("building fund")
        assert isinstance(project, entities.Project)
        assert project.id == project_id
        assert temp_db.find_project_by_title("Building Fund", entities.ProjectType.CAMPAIGN) is None
        assert temp_db.get_project_donation_count(project_id) == 0

        temp_db.delete_project(project_id)
        assert temp_db.get_project(project_id) is None

    def test_donation_exists_for_transaction(self, temp_db):
        donor_id = temp_db.create_donor(name="Jane", email="jane@example.com")
        donation_id = temp_db.create_donation(
            donor_id=donor_id, amount=1000, date=date(2025, 1, 15), transaction_id="ch_1"
        )

        assert temp_db.donation_exists_for_transaction("ch_1") is True
        assert temp_db.donation_exists_for_transaction("ch_2") is False
        donation = temp_db.get_donation(donation_id)
        assert isinstance(donation, entities.Donation)
        assert donation.payment_method == "stripe"
        assert [d.id for d in temp_db.list_donations(transaction_id="ch_1")] == [donation_id]

    def test_unmapped_payment_round_trip(self, temp_db):
        unmapped_id = temp_db.create_unmapped_payment(
            amount=5000, description="Special Christmas Appeal", transaction_id="ch_xmas"
        )

        payment = temp_db.find_unmapped_payment_by_transaction("ch_xmas")
        assert isinstance(payment, entities.UnmappedPayment)
        assert payment.id == unmapped_id
        assert payment.status == entities.UnmappedStatus.PENDING

        temp_db.update_unmapped_payment(unmapped_id, status=entities.UnmappedStatus.IGNORED)
        assert temp_db.list_unmapped_payments(entities.UnmappedStatus.PENDING) == []
        assert len(temp_db.list_unmapped_payments(entities.UnmappedStatus.IGNORED)) == 1

    def test_unmapped_transaction_id_is_unique(self, temp_db):
        temp_db.create_unmapped_payment(amount=5000, transaction_id="ch_xmas")

        with pytest.raises(IntegrityError):
            temp_db.create_unmapped_payment(amount=5000, transaction_id="ch_xmas")


class TestTransaction:
    """Tests for the transaction() context manager."""

    def test_commits_on_success(self, temp_db):
        with temp_db.transaction():
            temp_db.create_child(name="Sangwan")
            temp_db.create_child(name="Mary")

        assert len(temp_db.list_children()) == 2

    def test_rolls_back_on_error(self, temp_db):
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.create_child(name="Sangwan")
                raise RuntimeError("boom")

        assert temp_db.list_children() == []

    def test_nested_transactions_join_the_outer_one(self, temp_db):
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                with temp_db.transaction():
                    temp_db.create_child(name="Sangwan")
                raise RuntimeError("boom")

        assert temp_db.list_children() == []

    def test_changes_visible_to_other_connections_after_commit(self, temp_db):
        with temp_db.transaction():
            temp_db.create_child(name="Sangwan")

        other = create_sqlite_database(database_path=temp_db.database_path)
        try:
            assert [c.name for c in other.list_children()] == ["Sangwan"]
        finally:
            other.disconnect()
