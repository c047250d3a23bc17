"""
Host and path allowlisting for restbase.
"""
from fnmatch import fnmatchcase
from typing import Sequence

from restbase.utils.errors import HostNotAllowedError
from restbase.utils.logging import logger


class AllowlistGuard:
    """Checks a request's Host header and path against allowlists.

    Host entries are compared verbatim, so ``localhost`` and
    ``localhost:8000`` are distinct. Path entries are glob patterns matched
    against the path without its leading slash; ``*`` spans ``/``.
    """

    def __init__(self, allowed_hosts: Sequence[str], allowed_paths: Sequence[str]):
        self.allowed_hosts = list(allowed_hosts)
        self.allowed_paths = list(allowed_paths)

    def host_allowed(self, host: str) -> bool:
        return host in self.allowed_hosts

    def path_allowed(self, path: str) -> bool:
        path = path.lstrip("/")
        return any(fnmatchcase(path, pattern.lstrip("/")) for pattern in self.allowed_paths)

    def check(self, host: str, path: str) -> None:
        """Raise :class:`HostNotAllowedError` unless both host and path are allowed."""
        if self.host_allowed(host) and self.path_allowed(path):
            return

        logger.warning(
            "Request rejected by allowlist",
            component="guard",
            operation="guard",
            context={"host": host, "path": path},
        )
        raise HostNotAllowedError(host, path)


def check(host: str, path: str, allowed_hosts: Sequence[str], allowed_paths: Sequence[str]) -> None:
    """Validate a host and path against allowlists.

    Args:
        host: Value of the Host header
        path: Request path
        allowed_hosts: Accepted Host header values
        allowed_paths: Accepted path glob patterns

    Raises:
        HostNotAllowedError: If the host or the path is not allowed
    """
    AllowlistGuard(allowed_hosts, allowed_paths).check(host, path)
