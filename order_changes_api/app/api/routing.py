"""
Ordered route tables.

Starlette matches routes in registration order, so a parametric path
such as ``/{order_change_id}`` registered before ``/user/{user_id}``
would swallow ``/user/...`` requests.  Endpoint modules therefore
declare their routes as a list of ``Route`` entries and build their
router with ``build_router``, which registers literal segments before
parametric ones regardless of the order of the list.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence, Tuple

from fastapi import APIRouter


@dataclass(frozen=True)
class Route:
    """One HTTP binding: method, path, handler and APIRouter options."""

    method: str
    path: str
    endpoint: Callable[..., Any]
    options: Dict[str, Any] = field(default_factory=dict)


def route_precedence(path: str) -> Tuple[int, ...]:
    """Sort key placing literal segments before parametric ones.

    Each segment maps to 0 when literal and 1 when it is a ``{param}``,
    so ``/user/{user_id}`` -> ``(0, 1)`` sorts before ``/{id}`` -> ``(1,)``.
    """
    segments = [segment for segment in path.split("/") if segment]
    return tuple(1 if segment.startswith("{") else 0 for segment in segments)


def build_router(routes: Sequence[Route]) -> APIRouter:
    """Create an APIRouter with ``routes`` registered in precedence order.

    The sort is stable: routes with equal precedence keep their
    declared order.
    """
    router = APIRouter()
    for route in sorted(routes, key=lambda r: route_precedence(r.path)):
        router.add_api_route(route.path, route.endpoint, methods=[route.method], **route.options)
    return router


def registered_paths(router: APIRouter) -> List[Tuple[str, str]]:
    """Return ``(method, path)`` pairs in matching order."""
    pairs = []
    for route in router.routes:
        for method in sorted(getattr(route, "methods", None) or ()):
            pairs.append((method, route.path))
    return pairs
