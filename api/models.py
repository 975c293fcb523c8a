"""
API request and response models for the asset tracker REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
inventory/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format is camelCase (serialNumber, organizationId, orgId). The models
use snake_case attributes with a camelCase alias generator, and
populate_by_name lets tests and internal callers use either form.

None of the request models has an organization field. Unknown keys in a
request body are ignored, so an organizationId sent by a client never
reaches a handler.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from auth.models import EMAIL_PATTERN
from inventory.models import Asset, Category

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AssetStatusEnum(str, Enum):
    active = "active"
    maintenance = "maintenance"
    retired = "retired"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    The email shape is checked here, before any storage lookup.
    """

    email: str = Field(min_length=1, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=255)


class LoginUser(BaseModel):
    model_config = ConfigDict(frozen=True, **_CAMEL)

    email: str
    org_id: str


class LoginResponse(BaseModel):
    """Response for a successful login. Never carries the password digest."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: LoginUser


# ---------------------------------------------------------------------------
# Assets -- requests
# ---------------------------------------------------------------------------


class AssetCreate(BaseModel):
    """Request body for POST /api/assets."""

    model_config = ConfigDict(str_strip_whitespace=True, **_CAMEL)

    name: str = Field(min_length=1, max_length=255)
    serial_number: str = Field(min_length=1, max_length=255)
    status: Optional[AssetStatusEnum] = None

    @model_validator(mode="after")
    def reject_null_status(self) -> "AssetCreate":
        # Omitted status means "active"; an explicit null is not a status.
        if "status" in self.model_fields_set and self.status is None:
            raise ValueError("Fields may not be null: status.")
        return self


class AssetPatch(BaseModel):
    """Request body for PATCH /api/assets/{id}.

    Partial update: only keys present in the body are applied. A key that is
    present must carry a real value -- null is rejected rather than treated
    as "leave unchanged".
    """

    model_config = ConfigDict(str_strip_whitespace=True, **_CAMEL)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    serial_number: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[AssetStatusEnum] = None

    @model_validator(mode="after")
    def require_fields(self) -> "AssetPatch":
        supplied = self.model_fields_set
        if not supplied:
            raise ValueError("At least one of name, serialNumber, status is required.")
        nulls = sorted(to_camel(f) for f in supplied if getattr(self, f) is None)
        if nulls:
            raise ValueError(f"Fields may not be null: {', '.join(nulls)}.")
        return self

    def changes(self) -> dict:
        """Return only the supplied fields, keyed by domain attribute name."""
        out: dict = {}
        for f in self.model_fields_set:
            value = getattr(self, f)
            out[f] = value.value if isinstance(value, AssetStatusEnum) else value
        return out


# ---------------------------------------------------------------------------
# Assets -- responses
# ---------------------------------------------------------------------------


class CategoryResponse(BaseModel):
    model_config = ConfigDict(frozen=True, **_CAMEL)

    id: str
    name: str
    organization_id: str

    @classmethod
    def from_category(cls, category: Category) -> "CategoryResponse":
        return cls(id=category.id, name=category.name, organization_id=category.organization_id)


class AssetResponse(BaseModel):
    """One asset with its category embedded."""

    model_config = ConfigDict(frozen=True, **_CAMEL)

    id: str
    name: str
    serial_number: str
    status: AssetStatusEnum
    organization_id: str
    category_id: str
    category: Optional[CategoryResponse] = None

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetResponse":
        """Build an AssetResponse from an inventory Asset.

        Factory Method -- the mapping lives here, colocated with the output
        model, rather than scattered across route handlers.
        """
        return cls(
            id=asset.id,
            name=asset.name,
            serial_number=asset.serial_number,
            status=asset.status,
            organization_id=asset.organization_id,
            category_id=asset.category_id,
            category=CategoryResponse.from_category(asset.category) if asset.category else None,
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx: a single human-readable string.

    Clients key off the HTTP status; there are no in-band error codes.
    """

    model_config = ConfigDict(frozen=True)

    error: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
