"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from nutrition_lookup.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token; no token configured means no access."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/providers", dependencies=[Depends(require_admin)])
async def list_providers(request: Request) -> dict[str, object]:
    """Return providers in the order text searches consult them."""
    container: AppContainer = request.app.state.container
    providers = container.search_service.providers
    return {"providers": [provider.source.value for provider in providers]}


@router.post("/cache/clear", dependencies=[Depends(require_admin)])
async def clear_cache(request: Request) -> dict[str, int]:
    """Drop cached search outcomes."""
    container: AppContainer = request.app.state.container
    return {"cleared": container.cache.clear()}
