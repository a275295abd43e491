"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the import pipeline keeps
working on frozen domain entities when the schema changes.
"""

from donortrack.domain import entities as domain
from donortrack.database.models import (
    Donor as ORMDonor,
    Child as ORMChild,
    Project as ORMProject,
    Sponsorship as ORMSponsorship,
    Donation as ORMDonation,
    MappingRule as ORMMappingRule,
    UnmappedPayment as ORMUnmappedPayment,
)


def donor_to_domain(orm_donor: ORMDonor) -> domain.Donor:
    """Convert SQLAlchemy Donor model to domain Donor entity."""
    return domain.Donor(
        id=orm_donor.id,
        name=orm_donor.name,
        email=orm_donor.email,
        processor_customer_id=orm_donor.processor_customer_id,
        last_updated_at=orm_donor.last_updated_at,
        created_at=orm_donor.created_at,
        phone=orm_donor.phone,
        address_line1=orm_donor.address_line1,
        address_line2=orm_donor.address_line2,
        city=orm_donor.city,
        state=orm_donor.state,
        zip_code=orm_donor.zip_code,
        country=orm_donor.country,
    )


def child_to_domain(orm_child: ORMChild) -> domain.Child:
    """Convert SQLAlchemy Child model to domain Child entity."""
    return domain.Child(
        id=orm_child.id,
        name=orm_child.name,
        bio=orm_child.bio,
        created_at=orm_child.created_at,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        title=orm_project.title,
        project_type=domain.ProjectType(orm_project.project_type),
        system=orm_project.system,
        description=orm_project.description,
        created_at=orm_project.created_at,
    )


def sponsorship_to_domain(orm_sponsorship: ORMSponsorship) -> domain.Sponsorship:
    """Convert SQLAlchemy Sponsorship model to domain Sponsorship entity."""
    return domain.Sponsorship(
        id=orm_sponsorship.id,
        donor_id=orm_sponsorship.donor_id,
        child_id=orm_sponsorship.child_id,
        project_id=orm_sponsorship.project_id,
        monthly_amount=orm_sponsorship.monthly_amount,
        start_date=orm_sponsorship.start_date,
        end_date=orm_sponsorship.end_date,
        created_at=orm_sponsorship.created_at,
    )


def donation_to_domain(orm_donation: ORMDonation) -> domain.Donation:
    """Convert SQLAlchemy Donation model to domain Donation entity."""
    return domain.Donation(
        id=orm_donation.id,
        donor_id=orm_donation.donor_id,
        amount=orm_donation.amount,
        date=orm_donation.date,
        project_id=orm_donation.project_id,
        sponsorship_id=orm_donation.sponsorship_id,
        transaction_id=orm_donation.transaction_id,
        processor_customer_id=orm_donation.processor_customer_id,
        subscription_id=orm_donation.subscription_id,
        description=orm_donation.description,
        payment_method=orm_donation.payment_method,
        created_at=orm_donation.created_at,
    )


def mapping_rule_to_domain(orm_rule: ORMMappingRule) -> domain.MappingRule:
    """Convert SQLAlchemy MappingRule model to domain MappingRule entity."""
    return domain.MappingRule(
        id=orm_rule.id,
        pattern=orm_rule.pattern,
        match_type=domain.MatchType(orm_rule.match_type),
        target_project_title=orm_rule.target_project_title,
        target_project_type=domain.ProjectType(orm_rule.target_project_type),
        child_name_template=orm_rule.child_name_template,
        priority=orm_rule.priority,
        active=orm_rule.active,
        created_at=orm_rule.created_at,
    )


def unmapped_payment_to_domain(orm_payment: ORMUnmappedPayment) -> domain.UnmappedPayment:
    """Convert SQLAlchemy UnmappedPayment model to domain UnmappedPayment entity."""
    return domain.UnmappedPayment(
        id=orm_payment.id,
        description=orm_payment.description,
        amount=orm_payment.amount,
        donor_name=orm_payment.donor_name,
        donor_email=orm_payment.donor_email,
        processor_customer_id=orm_payment.processor_customer_id,
        transaction_id=orm_payment.transaction_id,
        transaction_date=orm_payment.transaction_date,
        status=domain.UnmappedStatus(orm_payment.status),
        donation_id=orm_payment.donation_id,
        created_at=orm_payment.created_at,
        updated_at=orm_payment.updated_at,
    )
