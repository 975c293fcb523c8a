"""
auth/store.py -- SQLAlchemy Core persistence layer for tenancy entities.

Pattern: Repository + Data Mapper (same as inventory/store.py).
UserStore is the repository for Organization and User records;
_row_to_org / _row_to_user are the mappers. Route and dependency code never
touches SQL directly.

Organizations and users are created only through provisioning (main.py).
There is no update path for User.organization_id -- a user's tenant is
fixed at creation.

Security:
  All queries use bound parameters. No f-strings in SQL.
  UNIQUE(email) and UNIQUE(slug) are enforced by the schema; create_* raise
  sqlalchemy.exc.IntegrityError on duplicates and callers decide how to
  report it.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import uuid

from auth.models import Organization, User
from core.database import Database, organizations, users


class UserStore:
    """Repository for Organization and User entities.

    Usage:
        store = UserStore(db)
        org_id = store.create_organization(Organization(name="Acme Corp", slug="acme-corp"))
        store.create_user(User(email="admin@acme.com", password=hash_password("pw"), organization_id=org_id))
        user = store.get_by_email("admin@acme.com")
    """

    def __init__(self, db: Database) -> None:
        self.engine = db.engine

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def create_organization(self, org: Organization) -> str:
        """Insert a new organization and return its assigned id.

        Raises sqlalchemy.exc.IntegrityError if the slug already exists.
        """
        org_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(organizations.insert().values(id=org_id, name=org.name, slug=org.slug))
            conn.commit()
        return org_id

    def get_organization_by_slug(self, slug: str) -> Organization | None:
        """Look up an organization by exact slug. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(organizations.select().where(organizations.c.slug == slug)).fetchone()
        return _row_to_org(row) if row is not None else None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> str:
        """Insert a new user and return its assigned id.

        user.password must already be a digest (auth.tokens.hash_password).
        Raises sqlalchemy.exc.IntegrityError if the email already exists or
        the organization does not.
        """
        user_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(
                users.insert().values(
                    id=user_id,
                    email=user.email,
                    password=user.password,
                    role=user.role,
                    organization_id=user.organization_id,
                )
            )
            conn.commit()
        return user_id

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_org(row) -> Organization:
    return Organization(id=row.id, name=row.name, slug=row.slug)


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password=row.password,
        role=row.role,
        organization_id=row.organization_id,
    )
