"""User management commands."""

import click
from moneytracker.cli.error_handling import handle_domain_error
from moneytracker.domain.user import UserService


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("username")
@click.option("--email", help="Address for notification emails")
@click.option("--timezone", help="IANA time zone, e.g. 'Asia/Kolkata' (default: UTC)")
@click.option(
    "--email-notifications/--no-email-notifications",
    default=True,
    help="Send notifications by email as well (default: on)",
)
@click.pass_context
def create_user(ctx, username: str, email: str | None, timezone: str | None, email_notifications: bool):
    """Create a new user.

    Examples:
        moneytracker user create alice --email alice@example.com
        moneytracker user create bob --timezone Asia/Kolkata --no-email-notifications
    """
    service = UserService(ctx.obj["db"])

    try:
        user_id = service.create_user(
            username=username,
            email=email,
            timezone=timezone,
            email_notifications_enabled=email_notifications,
        )
        click.echo(f"Created user '{username}' (ID: {user_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"])

    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 70)
    for u in users:
        mail = "on" if u.mail_account.enabled else "off"
        click.echo(f"ID: {u.id:3d} | {u.username:20s} | {u.timezone:15s} | Mail scan: {mail}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
