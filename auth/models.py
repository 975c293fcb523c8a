"""
auth/models.py -- Domain dataclasses for tenancy and authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in inventory/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLES = ("admin", "member")

# local@domain.tld, no whitespace, exactly one @ between the parts.
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

# Lowercase letters and digits in hyphen-separated runs, e.g. "acme-corp".
SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


@dataclass
class Organization:
    """A tenant. Root of data isolation; has no owner.

    id is None before the record is written to the database.
    """

    name: str
    slug: str  # unique, URL-safe
    id: str | None = None


@dataclass
class User:
    """A login identity belonging to exactly one Organization for its lifetime.

    password holds the bcrypt digest, never the plaintext. role is
    informational only; no access check reads it.
    """

    email: str
    password: str
    organization_id: str
    role: str = "member"  # "admin" | "member"
    id: str | None = None


@dataclass(frozen=True)
class AuthContext:
    """Verified identity attached to a request by the auth gate.

    Frozen so nothing downstream can swap the tenant after verification.
    org_id is the only scoping key asset operations accept.
    """

    user_id: str
    org_id: str
