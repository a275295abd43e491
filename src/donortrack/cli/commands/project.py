"""Project management commands."""

import click
from donortrack.cli.error_handling import handle_domain_error
from donortrack.domain.entities import ProjectType
from donortrack.domain.project import ProjectService


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("list")
@click.option(
    "--type",
    "project_type",
    type=click.Choice([t.value for t in ProjectType], case_sensitive=False),
    help="Only list projects of this type",
)
@click.pass_context
def list_projects(ctx, project_type: str | None):
    """List projects."""
    db = ctx.obj["db"]
    service = ProjectService(db)

    projects = service.list_projects(ProjectType(project_type.lower()) if project_type else None)
    if not projects:
        click.echo("No projects found.")
        return

    click.echo("\nProjects:")
    click.echo("-" * 60)
    for p in projects:
        system = " [system]" if p.system else ""
        click.echo(f"ID: {p.id:3d} | {p.project_type.value:11s} | {p.title}{system}")


@project_group.command("create")
@click.argument("title")
@click.option(
    "--type",
    "project_type",
    type=click.Choice([ProjectType.GENERAL.value, ProjectType.CAMPAIGN.value], case_sensitive=False),
    default=ProjectType.GENERAL.value,
    help="Project type (default: general)",
)
@click.option("--description", help="Project description")
@click.pass_context
def create_project(ctx, title: str, project_type: str, description: str | None):
    """Create a project, or show the existing one with that title."""
    db = ctx.obj["db"]
    service = ProjectService(db)

    try:
        project = service.find_or_create_project(
            title, ProjectType(project_type.lower()), description=description
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Project '{project.title}' (ID: {project.id})")


@project_group.command("delete")
@click.argument("project_id", type=int)
@click.pass_context
def delete_project(ctx, project_id: int):
    """Delete a project without donations."""
    db = ctx.obj["db"]
    service = ProjectService(db)

    try:
        service.delete_project(project_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted project {project_id}")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
