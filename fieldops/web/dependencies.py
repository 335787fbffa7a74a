"""Shared dependencies for fieldops web routes.

Dependencies are injected using FastAPI's Depends() system.

Identity is resolved by the upstream auth gateway, which forwards the
authenticated user as ``X-User-Id`` and ``X-User-Role`` headers.

Usage:
    from fastapi import Depends
    from fieldops.web.dependencies import get_templates, require_roles

    @router.get("/page")
    async def page(
        request: Request,
        user: CurrentUser = Depends(require_roles(UserRole.OPS_MANAGER)),
        templates = Depends(get_templates),
    ):
        return templates.TemplateResponse(request, "page.html", {...})
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.templating import Jinja2Templates

from fieldops.models import CurrentUser, UserRole

# Global singleton for templates
_templates: Jinja2Templates | None = None


def get_templates() -> Jinja2Templates:
    """Get Jinja2Templates instance for rendering HTML templates.

    This is a singleton - the templates directory is only initialized once.
    """
    global _templates
    if _templates is None:
        _templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
    return _templates


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    """Resolve the signed-in user from gateway headers.

    Raises:
        HTTPException 401: headers missing or malformed
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return CurrentUser(user_id=UUID(x_user_id.strip()), role=UserRole(x_user_role.strip()))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        ) from None


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """Dependency factory allowing only the given roles (403 otherwise)."""
    allowed = set(roles)

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user

    return dependency


# Roles allowed to read reports, and the subset allowed to edit them
report_readers = require_roles(UserRole.OPS_MANAGER, UserRole.DIRECTOR)
report_editors = require_roles(UserRole.OPS_MANAGER)
