"""CSV import commands."""

from pathlib import Path

import click
from moneytracker.cli.error_handling import handle_domain_error
from moneytracker.cli.user_resolution import notification_service, resolve_user_or_exit
from moneytracker.domain.csv_import import CSVImportService, generate_csv_template
from moneytracker.domain.user import UserService


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--user", "user_ref", required=True, help="Username or user ID")
@click.pass_context
def import_csv(ctx, csv_file: str, user_ref: str):
    """Import transactions from a CSV file.

    The file needs the columns Date, Description, Amount and Category;
    PaymentMethod and Notes are optional. Run 'csv-template' for an example.
    """
    db = ctx.obj["db"]
    user = resolve_user_or_exit(ctx, UserService(db), user_ref)
    service = CSVImportService(db, notifications=notification_service(ctx))

    try:
        result = service.import_csv(user.id, csv_file_path=csv_file)
        click.echo("\nImport complete:")
        click.echo(f"  Imported: {result.imported} transactions")
        click.echo(f"  Skipped: {result.skipped} rows")
        if result.errors:
            click.echo(f"  Errors: {len(result.errors)}")
            for error in result.errors:
                click.echo(f"    {error}", err=True)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)


@click.command("csv-template")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the template to a file")
def csv_template(output: str | None):
    """Print a CSV template for 'import'."""
    template = generate_csv_template()
    if output:
        Path(output).write_text(template, encoding="utf-8")
        click.echo(f"Template written to {output}")
    else:
        click.echo(template, nl=False)


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_csv)
    cli.add_command(csv_template)
