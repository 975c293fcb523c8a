"""
inventory/models.py -- Domain dataclasses for tracked assets.

These are pure data containers with zero logic. Scoping and validation live
in inventory/service.py; SQL lives in inventory/store.py.
"""

from dataclasses import dataclass
from typing import Optional

ASSET_STATUSES = ("active", "maintenance", "retired")
DEFAULT_STATUS = "active"
DEFAULT_CATEGORY_NAME = "General"


@dataclass
class Category:
    """Classification bucket for assets, owned by one organization.

    id is None before the record is written to the database.
    """

    name: str
    organization_id: str
    id: Optional[str] = None


@dataclass
class Asset:
    """A tracked item owned by one organization.

    status is a flat enumeration -- any value may move to any other.
    category is filled in by store reads that join categories; it is None on
    a freshly built instance.

    id is None before the record is written to the database.
    """

    name: str
    serial_number: str
    organization_id: str
    category_id: str
    status: str = DEFAULT_STATUS  # "active" | "maintenance" | "retired"
    id: Optional[str] = None
    category: Optional[Category] = None
