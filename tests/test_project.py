"""Tests for project management."""

from datetime import date

import pytest

from donortrack.domain.entities import ProjectType
from donortrack.domain.errors import DependencyError, NotFoundError, ValidationError
from donortrack.domain.project import normalize_title, sponsorship_project_title


def test_find_or_create_project(project_service):
    project = project_service.find_or_create_project("Building Fund", ProjectType.GENERAL, description="Roof")
    again = project_service.find_or_create_project("BUILDING fund", ProjectType.GENERAL)

    assert again.id == project.id
    assert project.description == "Roof"
    assert project.system is False


def test_same_title_different_type(project_service):
    general = project_service.find_or_create_project("Spring", ProjectType.GENERAL)
    campaign = project_service.find_or_create_project("Spring", ProjectType.CAMPAIGN)

    assert general.id != campaign.id


def test_blank_title_rejected(project_service):
    with pytest.raises(ValidationError):
        project_service.find_or_create_project("  ", ProjectType.GENERAL)


def test_general_project_is_system(project_service):
    project = project_service.general_project()

    assert project.title == "General Donation"
    assert project.system is True
    assert project_service.general_project().id == project.id


def test_list_projects_by_type(project_service):
    project_service.find_or_create_project("Building Fund", ProjectType.GENERAL)
    project_service.find_or_create_project("Campaign XMAS24", ProjectType.CAMPAIGN)

    assert [p.title for p in project_service.list_projects(ProjectType.CAMPAIGN)] == ["Campaign XMAS24"]
    assert len(project_service.list_projects()) == 2


def test_delete_project(project_service):
    project = project_service.find_or_create_project("Building Fund", ProjectType.GENERAL)

    project_service.delete_project(project.id)

    assert project_service.get_project(project.id) is None


def test_delete_system_project_blocked(project_service):
    project = project_service.general_project()

    with pytest.raises(DependencyError) as excinfo:
        project_service.delete_project(project.id)

    assert "system project" in str(excinfo.value)


def test_delete_project_with_donations_blocked(project_service, temp_db):
    project = project_service.find_or_create_project("Building Fund", ProjectType.GENERAL)
    donor_id = temp_db.create_donor(name="Jane", email="jane@example.com")
    temp_db.create_donation(donor_id=donor_id, amount=1000, date=date(2025, 1, 15), project_id=project.id)

    with pytest.raises(DependencyError) as excinfo:
        project_service.delete_project(project.id)

    assert "1 donation." in str(excinfo.value)


def test_delete_project_with_sponsorships_blocked(project_service, temp_db):
    project = project_service.find_or_create_project("Sponsor Sangwan", ProjectType.SPONSORSHIP)
    donor_id = temp_db.create_donor(name="Jane", email="jane@example.com")
    child_id = temp_db.create_child(name="Sangwan")
    temp_db.create_sponsorship(donor_id=donor_id, child_id=child_id, project_id=project.id, monthly_amount=3000)

    with pytest.raises(DependencyError) as excinfo:
        project_service.delete_project(project.id)

    assert "1 sponsorship." in str(excinfo.value)
    assert temp_db.get_project(project.id) is not None


def test_delete_missing_project(project_service):
    with pytest.raises(NotFoundError):
        project_service.delete_project(999)


def test_title_helpers():
    assert normalize_title("  Building   Fund ") == "Building Fund"
    assert len(normalize_title("x" * 120)) == 100
    assert sponsorship_project_title("Sangwan") == "Sponsor Sangwan"
