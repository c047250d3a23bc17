"""
Defines the API routers for a restbase application.
"""

from typing import List

from fastapi import APIRouter, Request

from restbase.api.registry import ResourceRegistry
from restbase.utils.logging import logger
from restbase.version import get_version_info

# System routes, mounted at the application root
system_router = APIRouter(tags=["System"])


@system_router.get("/health")
async def health_check(request: Request):
    registry = getattr(request.app.state, "registry", None)
    return {"status": "ok", "resources": registry.names() if registry is not None else []}


@system_router.get("/version")
async def version():
    return get_version_info()


def create_api_router(registry: ResourceRegistry) -> APIRouter:
    """Combine the routers of every registered resource.

    Args:
        registry: Registered resources

    Returns:
        Router to mount under the API prefix
    """
    api_router = APIRouter()
    names: List[str] = []
    for resource in registry:
        api_router.include_router(registry.build_router(resource))
        names.append(resource.name)

    logger.info(
        f"API router created with {len(names)} resource(s)",
        component="api",
        context={"resources": names},
    )
    return api_router
