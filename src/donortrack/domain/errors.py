"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def donor_not_found(donor_id: int) -> str:
    """Return message for missing donor."""
    return f"Donor {donor_id} not found"


def child_not_found(child_id: int) -> str:
    """Return message for missing child."""
    return f"Child {child_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project by ID."""
    return f"Project {project_id} not found"


def project_title_not_found(title: str) -> str:
    """Return message for missing project by title."""
    return f"Project '{title}' not found"


def sponsorship_not_found(sponsorship_id: int) -> str:
    """Return message for missing sponsorship."""
    return f"Sponsorship {sponsorship_id} not found"


def mapping_rule_not_found(rule_id: int) -> str:
    """Return message for missing mapping rule."""
    return f"Mapping rule {rule_id} not found"


def unmapped_payment_not_found(unmapped_id: int) -> str:
    """Return message for missing unmapped payment."""
    return f"Unmapped payment {unmapped_id} not found"


def duplicate_active_sponsorship(child_name: str, donor_name: str) -> str:
    """Return message when an identical active sponsorship already exists."""
    return f"{child_name} is already actively sponsored by {donor_name}"


def project_delete_blocked(
    project_id: int, donation_count: int, system: bool, sponsorship_count: int = 0
) -> str:
    """Return message when a project cannot be deleted."""
    if system:
        return f"Cannot delete project {project_id}: it is a system project"
    if donation_count == 0 and sponsorship_count > 0:
        return (
            f"Cannot delete project {project_id}: it has "
            f"{sponsorship_count} sponsorship{'s' if sponsorship_count != 1 else ''}. "
            "Please end or reassign them first."
        )
    return (
        f"Cannot delete project {project_id}: it has "
        f"{donation_count} donation{'s' if donation_count != 1 else ''}. "
        "Please reassign or delete them first."
    )
