"""Admin photo-management endpoints with simple token auth."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, Field

from photobooth.api.dependencies import client_address, get_container
from photobooth.domain.rate_limits import (
    RATE_LIMITS,
    admin_identifier,
    login_identifier,
)

router = APIRouter(prefix="/admin", tags=["admin"])


class BulkDeleteRequest(BaseModel):
    """Body of a bulk photo deletion."""

    photo_ids: list[str] = Field(alias="photoIds")


async def require_admin(
    request: Request,
    x_admin_token: str | None = Header(default=None),
) -> str:
    """Ensure requests include a valid admin token and return it.

    Failed attempts count against the per-address login limit.
    """
    container = get_container(request)
    if not x_admin_token or x_admin_token != container.settings.admin_token:
        container.rate_limiter.check(
            login_identifier(client_address(request)), RATE_LIMITS["login"]
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_admin_token


async def limit_admin_mutations(
    request: Request, token: str = Depends(require_admin)
) -> None:
    """Apply the per-credential rate limit to admin mutations."""
    container = get_container(request)
    container.rate_limiter.check(admin_identifier(token), RATE_LIMITS["admin"])


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.delete(
    "/photos/{photo_id}",
    dependencies=[Depends(limit_admin_mutations)],
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_photo(photo_id: str, request: Request) -> None:
    """Delete one photo and its stored files."""
    container = get_container(request)
    await container.photo_service.delete_photo(photo_id)


@router.post("/photos/delete", dependencies=[Depends(limit_admin_mutations)])
async def delete_photos(
    body: BulkDeleteRequest, request: Request
) -> dict[str, int]:
    """Delete many photos, reporting how many succeeded and failed."""
    container = get_container(request)
    result = await container.photo_service.delete_photos(body.photo_ids)
    return {"deleted": result.deleted, "failed": result.failed}
