"""Category management commands."""

import click
from moneytracker.cli.error_handling import handle_domain_error
from moneytracker.cli.user_resolution import resolve_user_or_exit
from moneytracker.domain.category import CategoryService
from moneytracker.domain.user import UserService


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--user", "user_ref", required=True, help="Username or user ID")
@click.pass_context
def list_categories(ctx, user_ref: str):
    """List a user's categories."""
    db = ctx.obj["db"]
    user = resolve_user_or_exit(ctx, UserService(db), user_ref)

    categories = CategoryService(db).list_categories(user.id)
    if not categories:
        click.echo("No categories found. They are created on first use by imports and email scans.")
        return

    click.echo(f"\nCategories for {user.username}:")
    for cat in categories:
        color = f" {cat.color_code}" if cat.color_code else ""
        click.echo(f"  {cat.name} (ID: {cat.id}){color}")


@category_group.command("create")
@click.argument("name")
@click.option("--user", "user_ref", required=True, help="Username or user ID")
@click.option("--description", help="Category description")
@click.option("--icon", "icon_name", help="Icon name")
@click.option("--color", "color_code", help="Color code, e.g. '#667eea'")
@click.pass_context
def create_category(
    ctx,
    name: str,
    user_ref: str,
    description: str | None,
    icon_name: str | None,
    color_code: str | None,
):
    """Create a new category."""
    db = ctx.obj["db"]
    user = resolve_user_or_exit(ctx, UserService(db), user_ref)

    try:
        category_id = CategoryService(db).create_category(
            user_id=user.id,
            name=name,
            description=description,
            icon_name=icon_name,
            color_code=color_code,
        )
        click.echo(f"Created category '{name.strip()}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("name")
@click.option("--user", "user_ref", required=True, help="Username or user ID")
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def delete_category(ctx, name: str, user_ref: str, yes: bool):
    """Delete a category that no transaction uses."""
    db = ctx.obj["db"]
    user = resolve_user_or_exit(ctx, UserService(db), user_ref)
    service = CategoryService(db)

    try:
        category = service.require_category_by_name(user.id, name)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete category '{category.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_category(user.id, category.id)
        click.echo(f"Deleted category '{category.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
