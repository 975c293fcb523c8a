"""
inventory/service.py -- Tenant-scoped asset operations (list, create, update, delete).

AssetService is the only way the API touches assets. Every method takes the
caller's AuthContext and uses ctx.org_id as the scoping key; none of them
accepts an organization id from anywhere else.

Order of work in each mutation:
  1. Validate input. Nothing touches storage until the input is clean.
  2. Application-level conflict pre-check (serial number within the org).
  3. Write, scoped by org_id.
  4. Map storage uniqueness violations to Conflict. The pre-check in step 2
     only improves the common case; two concurrent creates can both pass it
     and the database constraint decides.

Not-found vs other-tenant: update and delete report NotFound whenever zero
rows match (id, org_id). They never reveal that the id exists elsewhere.
"""

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from auth.models import AuthContext
from core.errors import Conflict, InvalidInput, NotFound
from inventory.models import ASSET_STATUSES, DEFAULT_CATEGORY_NAME, DEFAULT_STATUS, Asset, Category
from inventory.store import AssetStore

logger = logging.getLogger("assettrack.inventory")

_DUPLICATE_SERIAL = "An asset with this serial number already exists."
_NOT_FOUND = "Asset not found."
_PATCH_FIELDS = ("name", "serial_number", "status")


def _clean_text(field: str, value: Any) -> str:
    """Return value stripped of surrounding whitespace, or raise InvalidInput."""
    if not isinstance(value, str):
        raise InvalidInput(f"{field} must be a string.")
    cleaned = value.strip()
    if not cleaned:
        raise InvalidInput(f"{field} is required.")
    return cleaned


def _check_status(value: Any) -> str:
    if value not in ASSET_STATUSES:
        raise InvalidInput(f"status must be one of: {', '.join(ASSET_STATUSES)}.")
    return value


class AssetService:
    """Scoped CRUD over assets for one storage backend.

    Usage:
        service = AssetService(AssetStore(db))
        asset = service.create(ctx, name="Laptop", serial_number="SN-1")
        service.update(ctx, asset.id, {"status": "maintenance"})
        service.delete(ctx, asset.id)
    """

    def __init__(self, store: AssetStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def resolve_default_category(self, org_id: str) -> Category:
        """Find any category owned by org_id, creating "General" if there is none.

        Find-first makes repeat calls reuse one category. Two concurrent first
        creates may each insert a "General"; that is tolerated.
        """
        category = self.store.get_default_category(org_id)
        if category is None:
            category = self.store.create_category(org_id, DEFAULT_CATEGORY_NAME)
            logger.info("Created default category %s for org %s", category.id, org_id)
        return category

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def list_assets(self, ctx: AuthContext) -> list[Asset]:
        return self.store.list_assets(ctx.org_id)

    def create(
        self,
        ctx: AuthContext,
        name: Any,
        serial_number: Any,
        status: Optional[str] = None,
    ) -> Asset:
        """Create an asset in the caller's organization.

        Raises InvalidInput for blank name/serial or an unknown status and
        Conflict if the serial number is already used in this organization.
        """
        name = _clean_text("name", name)
        serial_number = _clean_text("serialNumber", serial_number)
        status = DEFAULT_STATUS if status is None else _check_status(status)

        if self.store.find_by_serial(ctx.org_id, serial_number) is not None:
            raise Conflict(_DUPLICATE_SERIAL)

        category = self.resolve_default_category(ctx.org_id)
        asset = Asset(
            name=name,
            serial_number=serial_number,
            status=status,
            organization_id=ctx.org_id,
            category_id=category.id,
        )
        try:
            asset_id = self.store.create_asset(asset)
        except IntegrityError:
            # Lost a race against a concurrent create with the same serial.
            if self.store.find_by_serial(ctx.org_id, serial_number) is not None:
                raise Conflict(_DUPLICATE_SERIAL) from None
            raise
        logger.info("Asset %s created in org %s", asset_id, ctx.org_id)
        return self.store.get_asset(asset_id, ctx.org_id)

    def update(self, ctx: AuthContext, asset_id: str, changes: dict) -> Asset:
        """Apply a partial update to one asset in the caller's organization.

        changes maps any subset of name, serial_number, status to new values.
        Keys that are absent are left untouched; a key present with None is
        invalid.

        Raises InvalidInput, Conflict (serial used by another asset in this
        organization) or NotFound (no asset with this id in this organization).
        """
        unknown = set(changes) - set(_PATCH_FIELDS)
        if unknown:
            raise InvalidInput(f"Unknown fields: {', '.join(sorted(unknown))}.")
        if not changes:
            raise InvalidInput("At least one of name, serialNumber, status is required.")

        updates: dict[str, str] = {}
        if "name" in changes:
            updates["name"] = _clean_text("name", changes["name"])
        if "serial_number" in changes:
            updates["serial_number"] = _clean_text("serialNumber", changes["serial_number"])
        if "status" in changes:
            updates["status"] = _check_status(changes["status"])

        serial = updates.get("serial_number")
        if serial is not None and self.store.find_by_serial(ctx.org_id, serial, exclude_id=asset_id) is not None:
            raise Conflict(_DUPLICATE_SERIAL)

        try:
            updated = self.store.update_asset(asset_id, ctx.org_id, **updates)
        except IntegrityError:
            if serial is not None and self.store.find_by_serial(ctx.org_id, serial, exclude_id=asset_id) is not None:
                raise Conflict(_DUPLICATE_SERIAL) from None
            raise
        if not updated:
            raise NotFound(_NOT_FOUND)

        asset = self.store.get_asset(asset_id, ctx.org_id)
        if asset is None:
            # Deleted between the update and the re-read.
            raise NotFound(_NOT_FOUND)
        logger.info("Asset %s updated in org %s (%s)", asset_id, ctx.org_id, ", ".join(sorted(updates)))
        return asset

    def delete(self, ctx: AuthContext, asset_id: str) -> None:
        """Hard-delete one asset in the caller's organization. Raises NotFound if none matched."""
        if not self.store.delete_asset(asset_id, ctx.org_id):
            raise NotFound(_NOT_FOUND)
        logger.info("Asset %s deleted from org %s", asset_id, ctx.org_id)
