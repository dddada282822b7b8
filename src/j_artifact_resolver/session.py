"""Per-call resolution sessions.

A session binds a configuration snapshot to a local repository manager, a
proxy selector and the timeout settings for exactly one resolution call.
Sessions are cheap and never shared between calls.
"""
from __future__ import annotations

import fnmatch
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from j_artifact_resolver import layout
from j_artifact_resolver.config import RepositoryConfig, UpdatePolicy
from j_artifact_resolver.models import Coordinate
from j_artifact_resolver.repositories import (
    ProxyDescriptor,
    RepositoryDescriptor,
    build_proxy_descriptor,
)

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = "resolver.connectTimeout"
REQUEST_TIMEOUT = "resolver.requestTimeout"
DEFAULT_CONNECT_TIMEOUT = 10_000
DEFAULT_REQUEST_TIMEOUT = 1_800_000


class LocalRepositoryManager:
    """Maps coordinates to files inside the local repository."""

    def __init__(self, basedir: str | Path) -> None:
        self.basedir = Path(basedir)

    def path_of(self, coordinate: Coordinate) -> Path:
        return self.basedir / layout.artifact_path(coordinate)

    def find(self, coordinate: Coordinate) -> Path | None:
        """Return the cached file for `coordinate`, or None if it is not cached."""
        path = self.path_of(coordinate)
        return path if path.is_file() else None

    def __repr__(self) -> str:
        return f"LocalRepositoryManager({str(self.basedir)!r})"


class ProxySelector:
    """Selects a proxy per repository, honouring non-proxy host patterns.

    Patterns are separated by `|` or `,` and may use `*` wildcards, e.g.
    `localhost|127.*|*.internal.example.com`. Matching ignores case.
    """

    def __init__(self) -> None:
        self._proxies: list[tuple[ProxyDescriptor, list[str]]] = []

    def add(self, proxy: ProxyDescriptor, non_proxy_hosts: str | None = None) -> "ProxySelector":
        patterns = [
            p.strip().lower()
            for p in re.split(r"[|,]", non_proxy_hosts or "")
            if p.strip()
        ]
        self._proxies.append((proxy, patterns))
        return self

    def select(self, repository: RepositoryDescriptor) -> ProxyDescriptor | None:
        host = (urlsplit(repository.url).hostname or "").lower()
        if not host:
            return None
        for proxy, patterns in self._proxies:
            if any(fnmatch.fnmatchcase(host, pattern) for pattern in patterns):
                continue
            return proxy
        return None


@dataclass
class ResolutionSession:
    local_repository: LocalRepositoryManager
    offline: bool = False
    proxy_selector: ProxySelector | None = None
    update_policy: UpdatePolicy = field(default_factory=lambda: UpdatePolicy.parse("daily"))
    config_properties: dict[str, Any] = field(default_factory=dict)

    def get_int(self, key: str, default: int) -> int:
        value = self.config_properties.get(key)
        return default if value is None else int(value)

    @property
    def connect_timeout(self) -> int:
        return self.get_int(CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT)

    @property
    def request_timeout(self) -> int:
        return self.get_int(REQUEST_TIMEOUT, DEFAULT_REQUEST_TIMEOUT)

    def proxy_for(self, repository: RepositoryDescriptor) -> ProxyDescriptor | None:
        """Return the proxy to use for `repository`.

        The session's selector wins over the proxy attached to the descriptor.
        """
        if self.proxy_selector is not None:
            return self.proxy_selector.select(repository)
        return repository.proxy


def new_session(config: RepositoryConfig) -> ResolutionSession:
    """Create a fresh session for one resolution call."""
    properties: dict[str, Any] = {}
    if config.connect_timeout is not None:
        properties[CONNECT_TIMEOUT] = config.connect_timeout
    if config.request_timeout is not None:
        properties[REQUEST_TIMEOUT] = config.request_timeout

    proxy_selector = None
    proxy = build_proxy_descriptor(config)
    if proxy is not None:
        proxy_selector = ProxySelector().add(proxy, config.proxy.non_proxy_hosts)

    session = ResolutionSession(
        local_repository=LocalRepositoryManager(Path(config.local_repository).expanduser()),
        offline=config.offline,
        proxy_selector=proxy_selector,
        update_policy=UpdatePolicy.parse(config.snapshot_update_policy),
        config_properties=properties,
    )
    logger.debug(
        "New session: local=%s offline=%s proxy=%s",
        session.local_repository.basedir,
        session.offline,
        proxy is not None,
    )
    return session
