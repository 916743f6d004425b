"""Request helpers shared by the API routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from photobooth.config import parse_client_ip

if TYPE_CHECKING:
    from photobooth.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def client_address(request: Request) -> str:
    """Return the caller address, honoring ``X-Forwarded-For``."""
    return parse_client_ip(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
    )
