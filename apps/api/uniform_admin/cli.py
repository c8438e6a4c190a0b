"""CLI tools for uniform admin operations."""

import click

from uniform_admin.db.enums import Role
from uniform_admin.db.models import UrgentReason, User
from uniform_admin.db.session import SessionLocal

DEFAULT_URGENT_REASONS = [
    ("Event date", "Customer needs the uniforms for a fixed event date"),
    ("Key account", "Strategic customer"),
    ("Replacement order", "Replaces a defective or lost order"),
    ("Other", None),
]


@click.group()
def cli():
    """Uniform admin CLI tools."""
    pass


@cli.command()
@click.option("--email", required=True, help="User email")
@click.option("--name", default=None, help="Full name")
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.SALESPERSON.value,
    show_default=True,
)
def create_user(email: str, name: str | None, role: str):
    """
    Create a user with a role.

    Example:
        python -m uniform_admin.cli create-user --email "ana@example.com" --role admin
    """
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == email.lower()).first()
        if existing:
            click.echo(f"❌ User already exists: {email}")
            return

        user = User(email=email.lower(), full_name=name, role=role)
        db.add(user)
        db.commit()

        click.echo(f"✓ Created user: {email}")
        click.echo(f"  ID: {user.id}")
        click.echo(f"  Role: {role}")

    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User to mint a session token for")
def issue_token(email: str):
    """
    Print a session token (value of the uniform_session cookie).

    Example:
        python -m uniform_admin.cli issue-token --email "ana@example.com"
    """
    from uniform_admin.core.security import create_session_token

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not user.is_active:
            click.echo(f"❌ Active user not found: {email}")
            return
        click.echo(create_session_token(user.id, user.role, user.token_version))
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email to revoke sessions for")
def revoke_sessions(email: str):
    """
    Revoke all sessions for a user by bumping their token_version.

    Example:
        python -m uniform_admin.cli revoke-sessions --email "user@example.com"
    """
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user:
            click.echo(f"❌ User not found: {email}")
            return

        old_version = user.token_version
        user.token_version += 1
        db.commit()

        click.echo(f"✓ Revoked all sessions for {email}")
        click.echo(f"  Token version: {old_version} → {user.token_version}")

    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
def pending_counts():
    """Print pending request counts per kind."""
    from uniform_admin.services import approval_service

    db = SessionLocal()
    try:
        for kind, count in approval_service.get_pending_counts(db).items():
            click.echo(f"{kind:>16}: {count}")
    finally:
        db.close()


@cli.command()
def seed_urgent_reasons():
    """Insert the default urgent reasons that are not there yet."""
    db = SessionLocal()
    try:
        existing = {label for (label,) in db.query(UrgentReason.label).all()}
        added = 0
        for order, (label, description) in enumerate(DEFAULT_URGENT_REASONS):
            if label in existing:
                continue
            db.add(UrgentReason(label=label, description=description, display_order=order))
            added += 1
        db.commit()
        click.echo(f"✓ Added {added} urgent reason(s)")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
