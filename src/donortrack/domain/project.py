"""Project domain service."""

from typing import Optional
from donortrack.database.base import Database
from donortrack.domain.classifier import GENERAL_PROJECT_TITLE
from donortrack.domain.entities import Project as ProjectEntity, ProjectType
from donortrack.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    project_delete_blocked,
    project_not_found,
)

MAX_TITLE_LENGTH = 100

# Catch-all projects created on demand and protected from deletion
SYSTEM_PROJECT_TITLES = frozenset({GENERAL_PROJECT_TITLE.lower()})


def normalize_title(title: str) -> str:
    """Collapse whitespace and truncate a project title."""
    return " ".join(title.split())[:MAX_TITLE_LENGTH]


def sponsorship_project_title(child_name: str) -> str:
    """Return the title of the project that collects a child's sponsorships."""
    return normalize_title(f"Sponsor {child_name}")


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: Database):
        """Initialize project service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        """Get project by ID."""
        return self.db.get_project(project_id)

    def get_project_by_title(self, title: str) -> Optional[ProjectEntity]:
        """Get project by title (case-insensitive)."""
        return self.db.find_project_by_title(normalize_title(title))

    def list_projects(self, project_type: Optional[ProjectType] = None) -> list[ProjectEntity]:
        """List projects, optionally filtered by type."""
        return self.db.list_projects(project_type=project_type)

    def find_or_create_project(
        self,
        title: str,
        project_type: ProjectType,
        description: Optional[str] = None,
    ) -> ProjectEntity:
        """Find a project by normalized title and type, creating it on a miss.

        Args:
            title: Project title (whitespace is collapsed, length capped)
            project_type: Project type
            description: Description used only when the project is created

        Returns:
            Project entity

        Raises:
            ValidationError: If the title is blank
        """
        if title is None or not title.strip():
            raise ValidationError("Project title cannot be blank")

        normalized = normalize_title(title)
        project_type = ProjectType(project_type)

        existing = self.db.find_project_by_title(normalized, project_type)
        if existing is not None:
            return existing

        system = project_type == ProjectType.GENERAL and normalized.lower() in SYSTEM_PROJECT_TITLES
        project_id = self.db.create_project(
            title=normalized,
            project_type=project_type,
            system=system,
            description=description,
        )
        return self.db.get_project(project_id)

    def general_project(self) -> ProjectEntity:
        """Return the catch-all "General Donation" project."""
        return self.find_or_create_project(GENERAL_PROJECT_TITLE, ProjectType.GENERAL)

    def delete_project(self, project_id: int) -> None:
        """Delete a project.

        Raises:
            NotFoundError: If the project does not exist
            DependencyError: If the project is a system project or has donations
                or sponsorships
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))

        donation_count = self.db.get_project_donation_count(project_id)
        sponsorship_count = len(self.db.list_sponsorships(project_id=project_id))
        if project.system or donation_count > 0 or sponsorship_count > 0:
            raise DependencyError(
                project_delete_blocked(project_id, donation_count, project.system, sponsorship_count)
            )

        self.db.delete_project(project_id)
