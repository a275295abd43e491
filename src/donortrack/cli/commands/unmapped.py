"""Unmapped payment review commands."""

import click
from donortrack.cli.error_handling import handle_domain_error
from donortrack.domain.entities import UnmappedStatus
from donortrack.domain.errors import NotFoundError, project_title_not_found
from donortrack.domain.project import ProjectService
from donortrack.domain.unmapped import UnmappedQueueService
from donortrack.utils.amount_parser import format_minor_units


@click.group()
def unmapped_group():
    """Review payments that could not be mapped to a project."""
    pass


@unmapped_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in UnmappedStatus], case_sensitive=False),
    default=UnmappedStatus.PENDING.value,
    help="Only list payments with this status (default: pending)",
)
@click.pass_context
def list_unmapped(ctx, status: str):
    """List unmapped payments."""
    db = ctx.obj["db"]
    service = UnmappedQueueService(db)

    payments = service.list_payments(UnmappedStatus(status.lower()))
    if not payments:
        click.echo(f"No {status.lower()} unmapped payments.")
        return

    click.echo(f"\nUnmapped payments ({status.lower()}):")
    click.echo("-" * 80)
    for p in payments:
        when = p.transaction_date.date().isoformat() if p.transaction_date else "-"
        click.echo(
            f"ID: {p.id:3d} | {when} | {format_minor_units(p.amount):>10s} | "
            f"{p.donor_name or '-'} | {p.description or ''}"
        )


@unmapped_group.command("resolve")
@click.argument("unmapped_id", type=int)
@click.option("--project", "project_title", required=True, help="Title of the project to import into")
@click.option("--create-rule", is_flag=True, help="Route this description to the project from now on")
@click.option("--priority", type=int, default=0, help="Priority of the created rule (default: 0)")
@click.pass_context
def resolve_unmapped(ctx, unmapped_id: int, project_title: str, create_rule: bool, priority: int):
    """Import an unmapped payment into an existing project.

    Examples:
        donortrack unmapped resolve 3 --project "Building Fund"
        donortrack unmapped resolve 3 --project "Building Fund" --create-rule
    """
    db = ctx.obj["db"]
    service = UnmappedQueueService(db)
    project_service = ProjectService(db)

    try:
        project = project_service.get_project_by_title(project_title)
        if project is None:
            raise NotFoundError(project_title_not_found(project_title))
        donation = service.resolve(
            unmapped_id, project.id, create_rule=create_rule, rule_priority=priority
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Imported unmapped payment {unmapped_id} into '{project.title}' (donation ID: {donation.id})"
    )
    if create_rule:
        click.echo("Created an exact-match rule for its description")


@unmapped_group.command("retry")
@click.pass_context
def retry_unmapped(ctx):
    """Re-run the import for every pending payment using the current rules."""
    db = ctx.obj["db"]
    service = UnmappedQueueService(db)

    summary = service.bulk_retry()
    click.echo(f"Imported: {summary.imported_count}")
    click.echo(f"Still pending: {summary.remaining_count}")


@unmapped_group.command("review")
@click.argument("unmapped_id", type=int)
@click.pass_context
def review_unmapped(ctx, unmapped_id: int):
    """Mark a pending payment as reviewed."""
    db = ctx.obj["db"]
    service = UnmappedQueueService(db)

    try:
        service.mark_reviewed(unmapped_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Marked unmapped payment {unmapped_id} as reviewed")


@unmapped_group.command("ignore")
@click.argument("unmapped_id", type=int)
@click.pass_context
def ignore_unmapped(ctx, unmapped_id: int):
    """Ignore an unmapped payment so it is never imported."""
    db = ctx.obj["db"]
    service = UnmappedQueueService(db)

    try:
        service.ignore(unmapped_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Ignored unmapped payment {unmapped_id}")


def register_commands(cli):
    """Register unmapped payment commands with main CLI."""
    cli.add_command(unmapped_group, name="unmapped")
