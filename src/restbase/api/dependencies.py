"""
Dependencies for restbase resource routes.

Every resource router runs :func:`check_allowlist` and :func:`get_principal`
before its handlers. Handlers receive an explicit :class:`RequestContext`
and a SQLAlchemy session instead of reading request globals.
"""

import hmac
from dataclasses import dataclass, field
from typing import Generator, List, Optional, Tuple

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from restbase.api.guard import AllowlistGuard
from restbase.api.query import RequestParameters
from restbase.config import ApiConfig, RestBaseConfig, get_config
from restbase.constants import API_KEY_HEADER
from restbase.utils.errors import UnauthorizedError
from restbase.utils.logging import logger


@dataclass
class RequestContext:
    """What a handler needs to know about the current request."""

    host: str
    path: str
    base_url: str
    config: ApiConfig
    query_items: List[Tuple[str, str]] = field(default_factory=list)
    principal: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def params(self) -> RequestParameters:
        return RequestParameters.from_items(self.query_items)


def get_app_config(request: Request) -> RestBaseConfig:
    """Configuration of the app serving the request, or the global one."""
    config = getattr(request.app.state, "config", None)
    return config if config is not None else get_config()


def get_api_config(request: Request) -> ApiConfig:
    return get_app_config(request).api


async def check_allowlist(request: Request, api: ApiConfig = Depends(get_api_config)) -> None:
    """
    Reject requests whose Host header or path is not allowlisted.

    Raises:
        HostNotAllowedError: If the host or path is not allowed
    """
    guard = AllowlistGuard(api.allow_hosts, api.allow_paths)
    guard.check(request.headers.get("host", ""), request.url.path)


async def get_principal(
    api_key: Optional[str] = Header(None, alias=API_KEY_HEADER),
    api: ApiConfig = Depends(get_api_config),
) -> Optional[str]:
    """
    Authenticate the request by API key.

    Args:
        api_key: API key from the X-API-Key header
        api: API configuration

    Returns:
        The accepted API key, or None when authentication is disabled

    Raises:
        UnauthorizedError: If the key is missing or not accepted
    """
    if not api.auth_enabled:
        return None

    if not api_key:
        logger.warning("Missing API key", component="auth", operation="authenticate")
        raise UnauthorizedError("API key is required")

    if not any(hmac.compare_digest(api_key, accepted) for accepted in api.api_keys):
        logger.warning("Rejected API key", component="auth", operation="authenticate")
        raise UnauthorizedError("Invalid API key")

    return api_key


async def get_request_context(
    request: Request,
    api: ApiConfig = Depends(get_api_config),
    principal: Optional[str] = Depends(get_principal),
) -> RequestContext:
    """Build the :class:`RequestContext` for the current request."""
    return RequestContext(
        host=request.headers.get("host", ""),
        path=request.url.path,
        base_url=str(request.url.replace(query="")),
        config=api,
        query_items=list(request.query_params.multi_items()),
        principal=principal,
        request_id=getattr(request.state, "request_id", None),
    )


def get_session(request: Request) -> Generator[Session, None, None]:
    """
    Yield a session from the app's session factory and close it afterwards.

    Raises:
        RuntimeError: If the app was created without a database
    """
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        raise RuntimeError("No session factory configured on the application")

    session = factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# Common dependencies
allowlist_dependency = Depends(check_allowlist)
principal_dependency = Depends(get_principal)
