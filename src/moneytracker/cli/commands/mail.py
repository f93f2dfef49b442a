"""Mailbox configuration commands."""

import click
from moneytracker.cli.error_handling import handle_domain_error
from moneytracker.cli.user_resolution import resolve_user_or_exit
from moneytracker.domain.entities import MailConfig
from moneytracker.domain.user import UserService


def print_mail_config(config: MailConfig) -> None:
    """Print a mail configuration. The password is only reported as set or not."""
    click.echo(f"  Enabled:  {'yes' if config.enabled else 'no'}")
    click.echo(f"  Host:     {config.host or '-'}")
    click.echo(f"  Port:     {config.port}")
    click.echo(f"  Username: {config.username or '-'}")
    click.echo(f"  Password: {'set' if config.has_secret else 'not set'}")


@click.group()
def mail_group():
    """Configure mailbox scanning."""
    pass


@mail_group.command("config")
@click.argument("user_ref", metavar="USER")
@click.pass_context
def show_config(ctx, user_ref: str):
    """Show a user's mailbox settings."""
    service = UserService(ctx.obj["db"])
    user = resolve_user_or_exit(ctx, service, user_ref)

    click.echo(f"\nMail settings for {user.username}:")
    print_mail_config(service.get_mail_config(user.id))


@mail_group.command("set")
@click.argument("user_ref", metavar="USER")
@click.option("--host", help="IMAP server host, e.g. imap.gmail.com")
@click.option("--port", type=int, help="IMAP port (default: MONEYTRACKER_DEFAULT_IMAP_PORT, 993)")
@click.option("--username", help="Mailbox login")
@click.option("--password", help="Mailbox password or app password")
@click.option("--enable/--disable", "enabled", default=None, help="Switch scanning on or off")
@click.pass_context
def set_config(
    ctx,
    user_ref: str,
    host: str | None,
    port: int | None,
    username: str | None,
    password: str | None,
    enabled: bool | None,
):
    """Update a user's mailbox settings.

    Options left out keep their current value.

    Examples:
        moneytracker mail set alice --host imap.gmail.com --username alice@gmail.com --password app-pass --enable
        moneytracker mail set alice --port 143
    """
    service = UserService(ctx.obj["db"])
    user = resolve_user_or_exit(ctx, service, user_ref)

    try:
        config = service.update_mail_config(
            user.id, enabled=enabled, host=host, username=username, secret=password, port=port
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated mail settings for {user.username}:")
    print_mail_config(config)


@mail_group.command("disable")
@click.argument("user_ref", metavar="USER")
@click.pass_context
def disable(ctx, user_ref: str):
    """Switch mailbox scanning off. Stored credentials are kept."""
    service = UserService(ctx.obj["db"])
    user = resolve_user_or_exit(ctx, service, user_ref)

    service.disable_mail(user.id)
    click.echo(f"Mail scanning disabled for {user.username}")


@mail_group.command("status")
@click.argument("user_ref", metavar="USER")
@click.pass_context
def status(ctx, user_ref: str):
    """Show whether mailbox scanning can run for a user."""
    service = UserService(ctx.obj["db"])
    user = resolve_user_or_exit(ctx, service, user_ref)

    info = service.mail_status(user.id)
    click.echo(f"Enabled:    {'yes' if info['enabled'] else 'no'}")
    click.echo(f"Configured: {'yes' if info['configured'] else 'no'}")
    if info["host"]:
        click.echo(f"Mailbox:    {info['username']}@{info['host']}")


def register_commands(cli):
    """Register mail commands with main CLI."""
    cli.add_command(mail_group, name="mail")
