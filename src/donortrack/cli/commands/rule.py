"""Mapping rule management commands."""

import click
from donortrack.cli.error_handling import handle_domain_error
from donortrack.domain.entities import MatchType, ProjectType
from donortrack.domain.rules import MappingRuleService


@click.group()
def rule_group():
    """Manage payment mapping rules."""
    pass


@rule_group.command("add")
@click.argument("pattern")
@click.option("--project", "project_title", help="Target project title (may use $1 for regex captures)")
@click.option(
    "--type",
    "project_type",
    type=click.Choice([t.value for t in ProjectType], case_sensitive=False),
    default=ProjectType.GENERAL.value,
    help="Target project type (default: general)",
)
@click.option(
    "--match",
    "match_type",
    type=click.Choice([m.value for m in MatchType], case_sensitive=False),
    default=MatchType.CONTAINS.value,
    help="How the pattern is compared to descriptions (default: contains)",
)
@click.option("--child", "child_template", help="Child name template for sponsorship rules (may use $1)")
@click.option("--priority", type=int, default=0, help="Higher priorities are checked first (default: 0)")
@click.pass_context
def add_rule(
    ctx,
    pattern: str,
    project_title: str | None,
    project_type: str,
    match_type: str,
    child_template: str | None,
    priority: int,
):
    """Add a mapping rule.

    Rules are checked before the built-in description classifier.

    Examples:
        donortrack rule add "Christmas Appeal" --project "Christmas Appeal"
        donortrack rule add "^Monthly gift for (\\w+)$" --match regex --type sponsorship --child '$1'
    """
    db = ctx.obj["db"]
    service = MappingRuleService(db)

    try:
        rule_id = service.create_rule(
            pattern=pattern,
            target_project_title=project_title,
            target_project_type=ProjectType(project_type.lower()),
            match_type=MatchType(match_type.lower()),
            child_name_template=child_template,
            priority=priority,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created rule {rule_id} ({match_type.lower()} '{pattern}')")


@rule_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include disabled rules")
@click.pass_context
def list_rules(ctx, show_all: bool):
    """List mapping rules in evaluation order."""
    db = ctx.obj["db"]
    service = MappingRuleService(db)

    rules = service.list_rules(active_only=not show_all)
    if not rules:
        click.echo("No mapping rules found.")
        return

    click.echo("\nMapping rules:")
    click.echo("-" * 80)
    for r in rules:
        target = r.child_name_template if r.target_project_type == ProjectType.SPONSORSHIP else r.target_project_title
        status = "" if r.active else " (disabled)"
        click.echo(
            f"ID: {r.id:3d} | {r.priority:4d} | {r.match_type.value:8s} | {r.pattern} -> "
            f"{r.target_project_type.value}: {target}{status}"
        )


@rule_group.command("disable")
@click.argument("rule_id", type=int)
@click.pass_context
def disable_rule(ctx, rule_id: int):
    """Disable a mapping rule."""
    db = ctx.obj["db"]
    service = MappingRuleService(db)

    try:
        service.deactivate_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Disabled rule {rule_id}")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
