"""
inventory/store.py -- SQLAlchemy-backed persistence layer for categories and assets.

Pattern: Repository + Data Mapper. AssetStore is the repository; the
_row_to_* functions are the mappers (they translate raw DB rows into domain
dataclasses). Route handlers never touch SQL directly.

Tenant scoping: every asset method takes org_id and puts it in the WHERE
clause next to any id. There is deliberately no get/update/delete by asset
id alone -- an id from another tenant simply matches zero rows.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = AssetStore(db)
    category = store.create_category(org_id, "General")
    asset_id = store.create_asset(Asset(name="Laptop", serial_number="SN-1",
                                        organization_id=org_id, category_id=category.id))
    store.list_assets(org_id)
    store.delete_asset(asset_id, org_id)
"""

import uuid
from typing import Optional

from sqlalchemy import select

from core.database import Database, assets, categories
from inventory.models import Asset, Category

# Asset columns plus the joined category, used by every read that returns
# assets to a caller.
_ASSET_WITH_CATEGORY = select(
    assets,
    categories.c.name.label("category_name"),
    categories.c.organization_id.label("category_org_id"),
).select_from(assets.join(categories, assets.c.category_id == categories.c.id))

_UPDATABLE_FIELDS = {"name", "serial_number", "status"}


class CategoryOwnershipError(ValueError):
    """Raised when an asset would point at a category of another organization."""


class AssetStore:
    def __init__(self, db: Database) -> None:
        self.engine = db.engine

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_default_category(self, org_id: str) -> Optional[Category]:
        """Return one category owned by org_id, or None. Ordered by id so repeat calls agree."""
        with self.engine.connect() as conn:
            row = conn.execute(
                categories.select().where(categories.c.organization_id == org_id).order_by(categories.c.id).limit(1)
            ).fetchone()
        return _row_to_category(row) if row is not None else None

    def create_category(self, org_id: str, name: str) -> Category:
        """Insert a category for org_id and return it."""
        category_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(categories.insert().values(id=category_id, name=name, organization_id=org_id))
            conn.commit()
        return Category(id=category_id, name=name, organization_id=org_id)

    def list_categories(self, org_id: str) -> list[Category]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                categories.select().where(categories.c.organization_id == org_id).order_by(categories.c.name)
            ).fetchall()
        return [_row_to_category(r) for r in rows]

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def list_assets(self, org_id: str) -> list[Asset]:
        """Return every asset owned by org_id with its category embedded."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _ASSET_WITH_CATEGORY.where(assets.c.organization_id == org_id).order_by(assets.c.name, assets.c.id)
            ).fetchall()
        return [_row_to_asset(r) for r in rows]

    def get_asset(self, asset_id: str, org_id: str) -> Optional[Asset]:
        """Fetch one asset by (id, org_id). Returns None if no row matches both."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _ASSET_WITH_CATEGORY.where((assets.c.id == asset_id) & (assets.c.organization_id == org_id))
            ).fetchone()
        return _row_to_asset(row) if row is not None else None

    def find_by_serial(self, org_id: str, serial_number: str, exclude_id: Optional[str] = None) -> Optional[Asset]:
        """Look up an asset in org_id by exact serial number.

        exclude_id skips one asset -- PATCH uses it so an asset does not
        conflict with itself.
        """
        stmt = _ASSET_WITH_CATEGORY.where(
            (assets.c.organization_id == org_id) & (assets.c.serial_number == serial_number)
        )
        if exclude_id is not None:
            stmt = stmt.where(assets.c.id != exclude_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).fetchone()
        return _row_to_asset(row) if row is not None else None

    def create_asset(self, asset: Asset) -> str:
        """Insert a new asset and return its assigned id.

        The category ownership check and the insert share one transaction,
        so an asset is never written against another tenant's category.

        Raises CategoryOwnershipError if category_id does not belong to
        asset.organization_id. Raises sqlalchemy.exc.IntegrityError if the
        (organization_id, serial_number) pair already exists -- the caller
        maps that to a conflict.
        """
        asset_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            owner = conn.execute(
                select(categories.c.organization_id).where(categories.c.id == asset.category_id)
            ).scalar()
            if owner != asset.organization_id:
                conn.rollback()
                raise CategoryOwnershipError(
                    f"Category {asset.category_id} does not belong to organization {asset.organization_id}"
                )
            conn.execute(
                assets.insert().values(
                    id=asset_id,
                    name=asset.name,
                    serial_number=asset.serial_number,
                    status=asset.status,
                    organization_id=asset.organization_id,
                    category_id=asset.category_id,
                )
            )
            conn.commit()
        return asset_id

    def update_asset(self, asset_id: str, org_id: str, **fields) -> bool:
        """Update a subset of name, serial_number, status on one asset.

        Only the supplied keys are written. The WHERE clause requires both
        asset_id and org_id. Returns True if a row was updated, False if
        nothing matched the pair.

        Raises ValueError for keys outside the updatable set and
        sqlalchemy.exc.IntegrityError on a serial number collision.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown asset fields: {unknown!r}")
        if not fields:
            return False
        with self.engine.connect() as conn:
            result = conn.execute(
                assets.update()
                .where((assets.c.id == asset_id) & (assets.c.organization_id == org_id))
                .values(**fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_asset(self, asset_id: str, org_id: str) -> bool:
        """Hard-delete one asset matched by (asset_id, org_id). Returns True if deleted."""
        with self.engine.connect() as conn:
            result = conn.execute(
                assets.delete().where((assets.c.id == asset_id) & (assets.c.organization_id == org_id))
            )
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_category(row) -> Category:
    return Category(id=row.id, name=row.name, organization_id=row.organization_id)


def _row_to_asset(row) -> Asset:
    return Asset(
        id=row.id,
        name=row.name,
        serial_number=row.serial_number,
        status=row.status,
        organization_id=row.organization_id,
        category_id=row.category_id,
        category=Category(
            id=row.category_id,
            name=row.category_name,
            organization_id=row.category_org_id,
        ),
    )
