"""Notification commands."""

import click
from moneytracker.cli.error_handling import handle_domain_error
from moneytracker.cli.user_resolution import notification_service, resolve_user_or_exit
from moneytracker.domain.user import UserService


@click.group()
def notifications_group():
    """Read notifications."""
    pass


@notifications_group.command("list")
@click.argument("user_ref", metavar="USER")
@click.option("--unread", is_flag=True, help="Only unread notifications")
@click.pass_context
def list_notifications(ctx, user_ref: str, unread: bool):
    """List a user's notifications, newest first."""
    user = resolve_user_or_exit(ctx, UserService(ctx.obj["db"]), user_ref)
    service = notification_service(ctx)

    notifications = service.list_notifications(user.id, unread_only=unread)
    if not notifications:
        click.echo("No notifications.")
        return

    click.echo(f"\nNotifications ({service.unread_count(user.id)} unread):")
    for n in notifications:
        marker = " " if n.is_read else "*"
        created = n.created_at.strftime("%Y-%m-%d %H:%M") if n.created_at else ""
        click.echo(f"{marker} [{n.id}] {created} {n.title}: {n.message}")


@notifications_group.command("read")
@click.argument("user_ref", metavar="USER")
@click.argument("notification_id", type=int, required=False)
@click.option("--all", "mark_all", is_flag=True, help="Mark every notification read")
@click.pass_context
def mark_read(ctx, user_ref: str, notification_id: int | None, mark_all: bool):
    """Mark one notification, or all of them, as read."""
    user = resolve_user_or_exit(ctx, UserService(ctx.obj["db"]), user_ref)
    service = notification_service(ctx)

    if mark_all:
        count = service.mark_all_read(user.id)
        click.echo(f"Marked {count} notification{'s' if count != 1 else ''} read")
        return

    if notification_id is None:
        click.echo("Error: give a notification ID or --all", err=True)
        ctx.exit(1)

    try:
        service.mark_read(user.id, notification_id)
        click.echo(f"Marked notification {notification_id} read")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register notification commands with main CLI."""
    cli.add_command(notifications_group, name="notifications")
