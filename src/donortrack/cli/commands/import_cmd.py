"""Stripe export import command."""

import click
from donortrack.cli.error_handling import handle_domain_error
from donortrack.domain.batch_import import BatchImporter

MAX_ERRORS_SHOWN = 20


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_csv(ctx, csv_file: str):
    """Import payments from a Stripe payments CSV export.

    Re-importing the same export is safe: payments whose transaction ID was
    already imported are skipped.

    Examples:
        donortrack import payments.csv
    """
    db = ctx.obj["db"]
    importer = BatchImporter(db)

    try:
        result = importer.import_csv(csv_file)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported_count} donations")
    click.echo(f"  Skipped: {result.skipped_count} rows")
    click.echo(f"  Unmapped: {result.unmapped_count} rows")
    click.echo(f"  Failed: {result.failed_count} rows")
    if result.unmapped_count:
        click.echo("Run 'donortrack unmapped list' to review unmapped payments.")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors[:MAX_ERRORS_SHOWN]:
            click.echo(f"    {error}", err=True)
        if len(result.errors) > MAX_ERRORS_SHOWN:
            click.echo(f"    ... and {len(result.errors) - MAX_ERRORS_SHOWN} more", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
