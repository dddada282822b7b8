"""Repository configuration module.

Describes the local repository, the named remote repositories and the
network settings (proxy, timeouts, offline mode) used during resolution.
Configuration can be read from environment variables.
"""
from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_LOCAL_REPOSITORY = str(Path.home() / ".m2" / "repository")
CENTRAL_ID = "central"
CENTRAL_URL = "https://repo.maven.apache.org/maven2"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_INTERVAL_RE = re.compile(r"^interval:(\d+)$")


@dataclass(frozen=True)
class UpdatePolicy:
    """How long a cached snapshot stays fresh.

    `interval` is in seconds; None means cached files never go stale.
    Release versions are never re-checked, whatever the policy.
    """

    name: str
    interval: float | None

    @classmethod
    def parse(cls, value: str | None) -> "UpdatePolicy":
        """Parse `always`, `daily`, `never` or `interval:<minutes>`.

        Raises:
            ValueError: For any other value.
        """
        raw = (value or "daily").strip().lower()
        if raw == "always":
            return cls(raw, 0.0)
        if raw == "daily":
            return cls(raw, 24 * 60 * 60.0)
        if raw == "never":
            return cls(raw, None)
        m = _INTERVAL_RE.match(raw)
        if m:
            return cls(raw, int(m.group(1)) * 60.0)
        raise ValueError(f"Unsupported update policy: {value!r}")

    def is_stale(self, path: Path, now: float | None = None) -> bool:
        if self.interval is None:
            return False
        current = time.time() if now is None else now
        return current - path.stat().st_mtime >= self.interval


class Credentials(BaseModel):
    """A username/password pair for a repository or a proxy."""

    model_config = ConfigDict(frozen=True)

    username: str | None = None
    password: str | None = None

    @property
    def present(self) -> bool:
        """True only when both the username and the password are set."""
        return bool(self.username) and bool(self.password)


class RemoteRepository(BaseModel):
    """Location of a remote repository, e.g. `https://my.repo.com/maven2`."""

    model_config = ConfigDict(frozen=True)

    url: str
    credentials: Credentials | None = None


class ProxySettings(BaseModel):
    """Proxy used to reach remote repositories."""

    model_config = ConfigDict(frozen=True)

    protocol: str = "http"
    host: str | None = None
    port: int = 0
    non_proxy_hosts: str | None = None
    credentials: Credentials | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.host) and self.port > 0

    @property
    def has_credentials(self) -> bool:
        return self.credentials is not None and self.credentials.present


class RepositoryConfig(BaseModel):
    """Configuration container for artifact resolution.

    Attributes:
        local_repository: Directory used as local cache; created on demand.
        remote_repositories: Named remote repositories, tried in insertion order.
        offline: When true no network access is attempted.
        proxy: Optional proxy settings.
        connect_timeout: Connect timeout in milliseconds (None: engine default,
            0: no timeout).
        request_timeout: Request timeout in milliseconds (None: engine default,
            0: no timeout).
        resolve_descriptor: Also resolve the artifact's pom alongside the binary.
        snapshot_update_policy: How often snapshots are re-checked remotely:
            "always", "daily", "never" or "interval:<minutes>".
    """

    model_config = ConfigDict(frozen=True)

    local_repository: str = DEFAULT_LOCAL_REPOSITORY
    remote_repositories: dict[str, RemoteRepository] = Field(default_factory=dict)
    offline: bool = False
    proxy: ProxySettings | None = None
    connect_timeout: int | None = Field(default=None, ge=0)
    request_timeout: int | None = Field(default=None, ge=0)
    resolve_descriptor: bool = False
    snapshot_update_policy: str = "daily"

    @field_validator("snapshot_update_policy")
    @classmethod
    def check_update_policy(cls, value: str) -> str:
        UpdatePolicy.parse(value)
        return value

    @property
    def repository_names(self) -> list[str]:
        return list(self.remote_repositories)

    @property
    def proxy_enabled(self) -> bool:
        return self.proxy is not None and self.proxy.enabled

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RepositoryConfig":
        """Create configuration from environment variables.

        Environment variables:
            JRES_LOCAL_REPOSITORY: Local repository path (default: ~/.m2/repository)
            JRES_REMOTE_REPOSITORIES: Comma separated `name=url` pairs
                (default: Maven Central as "central")
            JRES_REPO_<NAME>_USERNAME / JRES_REPO_<NAME>_PASSWORD: Repository credentials
            JRES_OFFLINE: "true" to disable network access
            JRES_PROXY_PROTOCOL, JRES_PROXY_HOST, JRES_PROXY_PORT: Proxy location
            JRES_PROXY_NON_PROXY_HOSTS: Hosts bypassing the proxy, e.g. "localhost|*.corp"
            JRES_PROXY_USERNAME / JRES_PROXY_PASSWORD: Proxy credentials
            JRES_CONNECT_TIMEOUT, JRES_REQUEST_TIMEOUT: Timeouts in milliseconds
            JRES_RESOLVE_DESCRIPTOR: "true" to also resolve the pom
            JRES_SNAPSHOT_UPDATE_POLICY: Snapshot update policy (default: "daily")
        """
        env = os.environ if environ is None else environ

        remotes = parse_remote_repositories(env.get("JRES_REMOTE_REPOSITORIES", ""))
        if not remotes:
            remotes = {CENTRAL_ID: CENTRAL_URL}

        remote_repositories: dict[str, RemoteRepository] = {}
        for name, url in remotes.items():
            key = _env_key(name)
            credentials = Credentials(
                username=env.get(f"JRES_REPO_{key}_USERNAME"),
                password=env.get(f"JRES_REPO_{key}_PASSWORD"),
            )
            remote_repositories[name] = RemoteRepository(
                url=url,
                credentials=credentials if credentials.present else None,
            )

        proxy = None
        if env.get("JRES_PROXY_HOST"):
            proxy_credentials = Credentials(
                username=env.get("JRES_PROXY_USERNAME"),
                password=env.get("JRES_PROXY_PASSWORD"),
            )
            proxy = ProxySettings(
                protocol=env.get("JRES_PROXY_PROTOCOL", "http"),
                host=env.get("JRES_PROXY_HOST"),
                port=int(env.get("JRES_PROXY_PORT", "0")),
                non_proxy_hosts=env.get("JRES_PROXY_NON_PROXY_HOSTS"),
                credentials=proxy_credentials if proxy_credentials.present else None,
            )

        return cls(
            local_repository=env.get("JRES_LOCAL_REPOSITORY", DEFAULT_LOCAL_REPOSITORY),
            remote_repositories=remote_repositories,
            offline=_flag(env.get("JRES_OFFLINE")),
            proxy=proxy,
            connect_timeout=_optional_int(env.get("JRES_CONNECT_TIMEOUT")),
            request_timeout=_optional_int(env.get("JRES_REQUEST_TIMEOUT")),
            resolve_descriptor=_flag(env.get("JRES_RESOLVE_DESCRIPTOR")),
            snapshot_update_policy=env.get("JRES_SNAPSHOT_UPDATE_POLICY", "daily"),
        )


def parse_remote_repositories(value: str) -> dict[str, str]:
    """Parse `name=url,name=url` into an ordered mapping.

    Raises:
        ValueError: If an entry is not of the form `name=url`.
    """
    repos: dict[str, str] = {}
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, url = entry.partition("=")
        if not sep or not name.strip() or not url.strip():
            raise ValueError(f"Invalid remote repository entry {entry!r}, expected name=url")
        repos[name.strip()] = url.strip()
    return repos


def _env_key(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name).upper()


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


def _optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)
