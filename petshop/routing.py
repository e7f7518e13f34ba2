"""
Route table and authorization gate.

Every endpoint is declared as a row of (method, path, roles, endpoint). The
table is turned into a FastAPI router where each route depends on the same
gate, which rejects the request before the endpoint runs when the caller's
role is not listed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends

from .auth import get_current_principal
from .domain.policy import Principal
from .models import Role
from .shared.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    roles: frozenset[Role]
    endpoint: Callable[..., Any]
    status_code: int = 200
    response_model: Optional[Any] = None
    summary: Optional[str] = None


def authorize(principal: Principal, roles: frozenset[Role]) -> Principal:
    """Single authorization gate: the caller's role must be one of `roles`"""
    if principal.role is None or principal.role not in roles:
        logger.warning(
            f"⚠️ User {principal.user_id} with role "
            f"{principal.role.value if principal.role else None} denied"
        )
        raise ForbiddenError()
    return principal


def require_roles(roles: frozenset[Role]):
    """Dependency enforcing `authorize` for a route"""

    async def gate(principal: Principal = Depends(get_current_principal)) -> Principal:
        return authorize(principal, roles)

    return gate


def build_router(prefix: str, tags: list[str], routes: list[Route]) -> APIRouter:
    """Create an APIRouter from a route table"""
    router = APIRouter(prefix=prefix, tags=tags)
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            response_model_exclude_unset=True,
            summary=route.summary,
            dependencies=[Depends(require_roles(route.roles))],
        )
    return router
