"""
api/routes/assets.py -- Tenant-scoped asset routes.

Routes:
  GET    /api/assets        -- list the caller's assets (category embedded)
  POST   /api/assets        -- create an asset in the caller's organization
  PATCH  /api/assets/{id}   -- partial update of one of the caller's assets
  DELETE /api/assets/{id}   -- hard-delete one of the caller's assets

Every route gets its AuthContext from require_auth_context. The
organization id comes from the verified token and nowhere else: request
models carry no organization field and path params carry only the asset id.

Handlers are thin. Validation beyond the request models, scoping, and
conflict detection live in inventory/service.AssetService; errors it raises
are translated to status codes by the AppError handler in api/main.py.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.models import AssetCreate, AssetPatch, AssetResponse, MessageResponse
from auth.dependencies import require_auth_context
from auth.models import AuthContext
from inventory.service import AssetService

# All asset routes require a valid bearer token.
# Router-level dependency applies to every route registered on this router;
# FastAPI caches it per request, so the per-handler Depends below does not
# verify the token twice.
router = APIRouter(dependencies=[Depends(require_auth_context)])


def _service(request: Request) -> AssetService:
    return request.app.state.asset_service


@router.get("/assets", response_model=list[AssetResponse])
def list_assets(
    request: Request,
    ctx: AuthContext = Depends(require_auth_context),
) -> list[AssetResponse]:
    """Return every asset owned by the caller's organization."""
    return [AssetResponse.from_asset(a) for a in _service(request).list_assets(ctx)]


@router.post("/assets", response_model=AssetResponse, status_code=201)
def create_asset(
    request: Request,
    body: AssetCreate,
    ctx: AuthContext = Depends(require_auth_context),
) -> AssetResponse:
    """Create an asset. status defaults to active; the category is resolved automatically."""
    asset = _service(request).create(
        ctx,
        name=body.name,
        serial_number=body.serial_number,
        status=body.status.value if body.status is not None else None,
    )
    return AssetResponse.from_asset(asset)


@router.patch("/assets/{asset_id}", response_model=AssetResponse)
def update_asset(
    request: Request,
    asset_id: UUID,
    body: AssetPatch,
    ctx: AuthContext = Depends(require_auth_context),
) -> AssetResponse:
    """Apply the supplied fields to one asset. Unsupplied fields are left as they are."""
    asset = _service(request).update(ctx, str(asset_id), body.changes())
    return AssetResponse.from_asset(asset)


@router.delete("/assets/{asset_id}", response_model=MessageResponse)
def delete_asset(
    request: Request,
    asset_id: UUID,
    ctx: AuthContext = Depends(require_auth_context),
) -> MessageResponse:
    """Delete one asset. 404 if it is not in the caller's organization."""
    _service(request).delete(ctx, str(asset_id))
    return MessageResponse(message="Asset deleted.")
