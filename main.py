#!/usr/bin/env python3
"""
Asset tracker -- provisioning and server CLI.

Organizations and users are never created over HTTP. This CLI is the only
way to add them.

Usage:
  python main.py create-org --name "Acme Corp" --slug acme-corp
  python main.py create-user --email admin@acme.com --password s3cret --org acme-corp --role admin
  python main.py seed
  python main.py serve

Environment variables (see core/config.py):
  DATABASE_URL  SQLAlchemy URL of the database (default: sqlite:///./assettrack.db)
  JWT_SECRET    Token signing secret, at least 32 characters. Required.
  HOST / PORT   Bind address for `serve` (default: 127.0.0.1:5000)
  DEBUG         `serve` reloads on code changes when true
"""

import argparse
import re
import sys
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import EMAIL_PATTERN, ROLES, SLUG_PATTERN, Organization, User
from auth.store import UserStore
from auth.tokens import PASSWORD_MAX_BYTES, hash_password
from core.config import get_settings
from core.database import Database
from inventory.store import AssetStore

_EMAIL_RE = re.compile(EMAIL_PATTERN)
_SLUG_RE = re.compile(SLUG_PATTERN)

# Demo tenants: two organizations, each with one category and one admin.
_SEED_TENANTS = [
    {
        "name": "Acme Corp",
        "slug": "acme-corp",
        "category": "Hardware",
        "email": "admin@acme.com",
    },
    {
        "name": "Globex Corp",
        "slug": "globex",
        "category": "General",
        "email": "hank@globex.com",
    },
]
_SEED_PASSWORD = "password123"  # nosec B105 -- published demo credential


class ProvisioningError(Exception):
    """A provisioning request that cannot be carried out (bad input, duplicate, unknown org)."""


def provision_organization(store: UserStore, name: str, slug: str) -> str:
    """Create an organization and return its id.

    Raises ProvisioningError for a blank name, a slug that is not URL-safe,
    or a slug that is already taken.
    """
    name = name.strip()
    if not name:
        raise ProvisioningError("Organization name is required.")
    if not _SLUG_RE.match(slug):
        raise ProvisioningError(f"'{slug}' is not a valid slug. Use lowercase letters, digits and hyphens.")
    try:
        return store.create_organization(Organization(name=name, slug=slug))
    except IntegrityError as exc:
        raise ProvisioningError(f"An organization with slug '{slug}' already exists.") from exc


def provision_user(store: UserStore, email: str, password: str, org_slug: str, role: str = "member") -> str:
    """Create a user in the organization identified by org_slug and return the user id.

    The password is hashed before it reaches the store.
    """
    if not _EMAIL_RE.match(email):
        raise ProvisioningError(f"'{email}' is not a valid email address.")
    if not password:
        raise ProvisioningError("Password is required.")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ProvisioningError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes.")
    if role not in ROLES:
        raise ProvisioningError(f"Role must be one of: {', '.join(ROLES)}.")
    org = store.get_organization_by_slug(org_slug)
    if org is None:
        raise ProvisioningError(f"No organization with slug '{org_slug}'.")
    user = User(
        email=email,
        password=hash_password(password),
        organization_id=org.id,
        role=role,
    )
    try:
        return store.create_user(user)
    except IntegrityError as exc:
        raise ProvisioningError(f"A user with email '{email}' already exists.") from exc


def seed_demo_tenants(users: UserStore, assets: AssetStore) -> list[str]:
    """Create the demo tenants if missing. Safe to re-run.

    Returns a list of human-readable lines describing what was created.
    """
    created: list[str] = []
    for tenant in _SEED_TENANTS:
        org = users.get_organization_by_slug(tenant["slug"])
        if org is None:
            org_id = provision_organization(users, tenant["name"], tenant["slug"])
            created.append(f"organization {tenant['slug']}")
        else:
            org_id = org.id

        if tenant["category"] not in {c.name for c in assets.list_categories(org_id)}:
            assets.create_category(org_id, tenant["category"])
            created.append(f"category {tenant['category']} ({tenant['slug']})")

        if users.get_by_email(tenant["email"]) is None:
            provision_user(users, tenant["email"], _SEED_PASSWORD, tenant["slug"], role="admin")
            created.append(f"user {tenant['email']}")
    return created


def _open_database(url: Optional[str]) -> Database:
    return Database(url or get_settings().database_url)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="assettrack",
        description="Provision tenants and users, or run the asset tracker API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-org --name "Acme Corp" --slug acme-corp
  python main.py create-user --email admin@acme.com --password s3cret --org acme-corp --role admin
  python main.py seed
  DATABASE_URL=postgresql://user:pw@host/db python main.py serve
        """,
    )
    parser.add_argument(
        "--database-url",
        metavar="URL",
        default=None,
        help="Override DATABASE_URL for this command",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    org_p = sub.add_parser("create-org", help="Create an organization (tenant)")
    org_p.add_argument("--name", required=True, help="Display name, e.g. 'Acme Corp'")
    org_p.add_argument("--slug", required=True, help="Unique URL-safe key, e.g. acme-corp")

    user_p = sub.add_parser("create-user", help="Create a user inside an organization")
    user_p.add_argument("--email", required=True)
    user_p.add_argument("--password", required=True)
    user_p.add_argument("--org", required=True, metavar="SLUG", help="Slug of the owning organization")
    user_p.add_argument("--role", choices=ROLES, default="member")

    sub.add_parser("seed", help="Create the Acme Corp and Globex Corp demo tenants")
    sub.add_parser("serve", help="Run the API with uvicorn on HOST:PORT")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "serve":
        import uvicorn

        settings = get_settings()
        uvicorn.run("asgi:app", host=settings.host, port=settings.port, reload=settings.debug)
        return 0

    db = _open_database(args.database_url)
    users = UserStore(db)
    try:
        if args.command == "create-org":
            org_id = provision_organization(users, args.name, args.slug)
            print(f"Created organization {args.slug} ({org_id})")
        elif args.command == "create-user":
            user_id = provision_user(users, args.email, args.password, args.org, role=args.role)
            print(f"Created user {args.email} ({user_id}) in {args.org}")
        elif args.command == "seed":
            created = seed_demo_tenants(users, AssetStore(db))
            if created:
                for line in created:
                    print(f"  created {line}")
            else:
                print("  nothing to do, demo tenants already exist")
            print(f"Demo logins: admin@acme.com / {_SEED_PASSWORD}, hank@globex.com / {_SEED_PASSWORD}")
    except ProvisioningError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
