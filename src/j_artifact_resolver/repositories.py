"""Remote repository descriptors derived from a `RepositoryConfig`.

Descriptors are immutable and computed once per resolver; every resolution
call shares them read-only.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from j_artifact_resolver.config import Credentials, RepositoryConfig
from j_artifact_resolver.exceptions import CacheDirectoryUnavailableError

DEFAULT_CONTENT_TYPE = "default"


@dataclass(frozen=True)
class Authentication:
    """Username and password handed to a transport as one pair."""

    username: str
    password: str

    @classmethod
    def from_credentials(cls, credentials: Credentials | None) -> "Authentication | None":
        if credentials is None or not credentials.present:
            return None
        return cls(username=credentials.username or "", password=credentials.password or "")

    def as_tuple(self) -> tuple[str, str]:
        return (self.username, self.password)

    def __repr__(self) -> str:
        return f"Authentication(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ProxyDescriptor:
    protocol: str
    host: str
    port: int
    authentication: Authentication | None = None

    def url(self) -> str:
        """Return the proxy URL, with credentials embedded when present."""
        userinfo = ""
        if self.authentication is not None:
            username, password = self.authentication.as_tuple()
            userinfo = f"{quote(username, safe='')}:{quote(password, safe='')}@"
        return f"{self.protocol}://{userinfo}{self.host}:{self.port}"


@dataclass(frozen=True)
class RepositoryDescriptor:
    """A named remote repository as seen by the resolution engine."""

    id: str
    url: str
    content_type: str = DEFAULT_CONTENT_TYPE
    proxy: ProxyDescriptor | None = None
    authentication: Authentication | None = None


def build_proxy_descriptor(config: RepositoryConfig) -> ProxyDescriptor | None:
    """Return the proxy descriptor for `config`, or None when no proxy is enabled."""
    if not config.proxy_enabled:
        return None
    proxy = config.proxy
    return ProxyDescriptor(
        protocol=proxy.protocol,
        host=proxy.host,
        port=proxy.port,
        authentication=Authentication.from_credentials(proxy.credentials),
    )


def build_repository_descriptors(config: RepositoryConfig) -> tuple[RepositoryDescriptor, ...]:
    """Build one descriptor per configured remote repository, in order.

    All repositories share a single proxy descriptor (and thus a single proxy
    `Authentication`). Repository credentials are attached separately and are
    never replaced by proxy credentials.
    """
    proxy = build_proxy_descriptor(config)
    descriptors: list[RepositoryDescriptor] = []
    for name, remote in config.remote_repositories.items():
        descriptors.append(
            RepositoryDescriptor(
                id=name,
                url=remote.url,
                proxy=proxy,
                authentication=Authentication.from_credentials(remote.credentials),
            )
        )
    return tuple(descriptors)


def ensure_local_repository(path: str | Path | None) -> Path:
    """Create the local repository directory tree if it is missing.

    A directory created concurrently by another thread or process is fine.

    Raises:
        CacheDirectoryUnavailableError: If the path is unset, or the
            directory does not exist after the creation attempt.
    """
    if path is None or not str(path).strip():
        raise CacheDirectoryUnavailableError("Local repository path cannot be empty")
    local = Path(path).expanduser()
    try:
        local.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        if not local.is_dir():
            raise CacheDirectoryUnavailableError(
                f"Unable to create directory for local repository: {local}"
            ) from exc
    return local
