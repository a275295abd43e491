"""SQLAlchemy models for donortrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Index,
    create_engine,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Donor(Base):
    """Donor model."""

    __tablename__ = "donors"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    # Stored lower-cased so the unique index is case-insensitive
    email = Column(String, unique=True, nullable=False)
    processor_customer_id = Column(String, unique=True, nullable=True)
    phone = Column(String, nullable=True)
    address_line1 = Column(String, nullable=True)
    address_line2 = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    country = Column(String, nullable=True)
    last_updated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    sponsorships = relationship("Sponsorship", back_populates="donor")
    donations = relationship("Donation", back_populates="donor")


class Child(Base):
    """Sponsored child model."""

    __tablename__ = "children"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    sponsorships = relationship("Sponsorship", back_populates="child")


class Project(Base):
    """Project model (donation destination)."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False, index=True)
    project_type = Column(String, default="general", nullable=False, index=True)
    system = Column(Boolean, default=False, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    sponsorships = relationship("Sponsorship", back_populates="project")
    donations = relationship("Donation", back_populates="project")


class Sponsorship(Base):
    """Sponsorship model linking one donor and one child."""

    __tablename__ = "sponsorships"

    id = Column(Integer, primary_key=True)
    donor_id = Column(Integer, ForeignKey("donors.id"), nullable=False, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    monthly_amount = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Only one active (end_date IS NULL) sponsorship per donor/child/amount
    __table_args__ = (
        Index(
            "uq_active_sponsorship",
            "donor_id",
            "child_id",
            "monthly_amount",
            unique=True,
            sqlite_where=text("end_date IS NULL"),
            postgresql_where=text("end_date IS NULL"),
        ),
    )

    # Relationships
    donor = relationship("Donor", back_populates="sponsorships")
    child = relationship("Child", back_populates="sponsorships")
    project = relationship("Project", back_populates="sponsorships")
    donations = relationship("Donation", back_populates="sponsorship")


class Donation(Base):
    """Donation model."""

    __tablename__ = "donations"

    id = Column(Integer, primary_key=True)
    donor_id = Column(Integer, ForeignKey("donors.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    date = Column(Date, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    sponsorship_id = Column(Integer, ForeignKey("sponsorships.id"), nullable=True, index=True)
    transaction_id = Column(String, nullable=True, index=True)
    processor_customer_id = Column(String, nullable=True)
    subscription_id = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    payment_method = Column(String, default="stripe", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    donor = relationship("Donor", back_populates="donations")
    project = relationship("Project", back_populates="donations")
    sponsorship = relationship("Sponsorship", back_populates="donations")


class MappingRule(Base):
    """Mapping rule model."""

    __tablename__ = "mapping_rules"

    id = Column(Integer, primary_key=True)
    pattern = Column(String, nullable=False)
    match_type = Column(String, default="contains", nullable=False)
    target_project_title = Column(String, nullable=True)
    target_project_type = Column(String, default="general", nullable=False)
    child_name_template = Column(String, nullable=True)
    priority = Column(Integer, default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class UnmappedPayment(Base):
    """Queued payment row that matched no rule."""

    __tablename__ = "unmapped_payments"

    id = Column(Integer, primary_key=True)
    description = Column(Text, nullable=True)
    amount = Column(Integer, nullable=False)
    donor_name = Column(String, nullable=True)
    donor_email = Column(String, nullable=True)
    processor_customer_id = Column(String, nullable=True)
    transaction_id = Column(String, unique=True, nullable=True)
    transaction_date = Column(DateTime, nullable=True)
    status = Column(String, default="pending", nullable=False, index=True)
    donation_id = Column(Integer, ForeignKey("donations.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    donation = relationship("Donation")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
