"""Mailbox scan commands."""

from concurrent.futures import TimeoutError as FutureTimeoutError

import click
from moneytracker.cli.user_resolution import ingestion_service, resolve_user_or_exit
from moneytracker.domain.email_ingestion import IngestionResult, RunState
from moneytracker.domain.runner import IngestionRunner
from moneytracker.domain.user import UserService


def print_result(username: str, result: IngestionResult) -> None:
    """Print a one-user run summary."""
    if result.state == RunState.NOT_CONFIGURED:
        click.echo(f"{username}: mail scanning not configured")
        return
    if result.state == RunState.FAILED:
        click.echo(
            f"{username}: failed while {result.failed_in.value}: {result.error}",
            err=True,
        )
    else:
        click.echo(f"{username}: scan complete")
    click.echo(f"  Scanned:   {result.scanned} unread emails")
    click.echo(f"  Added:     {result.persisted} transactions")
    click.echo(f"  Skipped:   {result.skipped} ({result.duplicates} already imported)")


@click.command("scan")
@click.argument("user_ref", metavar="USER")
@click.option("--timeout", type=float, help="Seconds to wait for the scan (default: from settings)")
@click.pass_context
def scan(ctx, user_ref: str, timeout: float | None):
    """Scan one user's mailbox for transaction emails now."""
    db = ctx.obj["db"]
    user_service = UserService(db)
    user = resolve_user_or_exit(ctx, user_service, user_ref)

    with IngestionRunner(ingestion_service(ctx), user_service) as runner:
        response = runner.trigger(user.id)
        if not response.started:
            click.echo(f"Error: {response.message}", err=True)
            ctx.exit(1)

        click.echo(response.message)
        try:
            result = runner.wait(response, timeout=timeout)
        except FutureTimeoutError:
            click.echo("Error: scan did not finish within the timeout; check notifications later", err=True)
            ctx.exit(1)

    if result is None:
        click.echo("Error: scan failed unexpectedly; see the log for details", err=True)
        ctx.exit(1)

    print_result(user.username, result)
    if result.state == RunState.FAILED:
        ctx.exit(1)


@click.command("scan-all")
@click.pass_context
def scan_all(ctx):
    """Scan every mail-enabled user's mailbox, one after another.

    Intended to be run periodically, e.g. from cron.
    """
    db = ctx.obj["db"]
    user_service = UserService(db)

    with IngestionRunner(ingestion_service(ctx), user_service) as runner:
        results = runner.run_scheduled()

    if not results:
        click.echo("No users have mail scanning enabled.")
        return

    for result in results:
        user = user_service.get_user(result.user_id)
        print_result(user.username if user else str(result.user_id), result)


def register_commands(cli):
    """Register scan commands with main CLI."""
    cli.add_command(scan)
    cli.add_command(scan_all)
