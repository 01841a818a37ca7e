"""CLI tools for ticket desk administration."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import create_database_engine, create_sessionmaker
from src.core.logging import setup_logging
from src.core.permissions import RoleName
from src.core.security import hash_password
from src.exceptions import AppException
from src.models.user import User
from src.repositories.role_repository import RoleRepository
from src.repositories.user_repository import UserRepository
from src.services.auth_service import check_password_strength
from src.services.permission_service import PermissionService
from src.services.saved_view_service import MigrationSummary, SavedViewService

T = TypeVar("T")


def run_in_session(work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run ``work`` with a fresh engine and session, disposing both afterwards."""

    async def runner() -> T:
        engine = create_database_engine()
        try:
            async with create_sessionmaker(engine)() as session:
                return await work(session)
        finally:
            await engine.dispose()

    try:
        return asyncio.run(runner())
    except AppException as e:
        raise click.ClickException(e.message) from e


@click.group()
def cli():
    """Ticket desk CLI tools."""
    setup_logging()


@cli.command()
def seed_permissions():
    """
    Create missing catalog permissions and default roles.

    Safe to run repeatedly: existing roles keep their current grants.

    Example:
        python -m src.cli seed-permissions
    """
    counts = run_in_session(lambda session: PermissionService(session).ensure_catalog())
    click.echo(f"✓ Permissions created: {counts['permissions']}")
    click.echo(f"✓ Roles created: {counts['roles']}")


@cli.command()
@click.option("--dry-run", is_flag=True, help="Report what would change without saving")
@click.option(
    "--preserve-unknown",
    is_flag=True,
    default=None,
    help="Keep filter keys outside the canonical shape",
)
def migrate_saved_views(dry_run: bool, preserve_unknown: bool | None):
    """
    Rewrite every saved view's filters into the canonical shape.

    Example:
        python -m src.cli migrate-saved-views --dry-run
    """
    summary: MigrationSummary = run_in_session(
        lambda session: SavedViewService(session).migrate_all_views(
            dry_run=dry_run, preserve_unknown=preserve_unknown
        )
    )
    prefix = "[dry run] " if summary.dry_run else ""
    click.echo(f"{prefix}Views scanned: {summary.total}")
    click.echo(f"{prefix}Views migrated: {summary.migrated}")
    click.echo(f"{prefix}Views unchanged: {summary.unchanged}")
    click.echo(f"{prefix}Views skipped: {summary.skipped}")


@cli.command()
@click.option("--email", required=True, help="Admin email address")
@click.option("--name", required=True, help="Display name")
@click.option("--password", required=True, prompt=True, hide_input=True, help="Password")
def create_admin(email: str, name: str, password: str):
    """
    Create a user holding the ADMIN primary role.

    Run seed-permissions first so the ADMIN role exists.

    Example:
        python -m src.cli create-admin --email "admin@example.com" --name "Admin"
    """

    async def work(session: AsyncSession) -> User:
        check_password_strength(password)
        user_repo = UserRepository(session)
        if await user_repo.email_exists(email):
            raise click.ClickException(f"User already exists: {email}")
        admin_role = await RoleRepository(session).get_by_name(RoleName.ADMIN.value)
        if admin_role is None:
            raise click.ClickException("ADMIN role not found; run seed-permissions first")

        user = await user_repo.add(
            User(email=email.lower(), name=name.strip(), password_hash=hash_password(password))
        )
        return await PermissionService(session).replace_user_roles(user.id, admin_role.id)

    user = run_in_session(work)
    click.echo(f"✓ Created admin: {user.email}")
    click.echo(f"  ID: {user.id}")


if __name__ == "__main__":
    cli()
