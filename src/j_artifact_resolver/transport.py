"""Transporters fetch single resources from one remote repository.

`file://` repositories are read straight from disk; `http://` and
`https://` repositories go through a `requests.Session` carrying the
repository's authentication, the selected proxy and the session timeouts.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import requests

from j_artifact_resolver.exceptions import ResourceNotFoundError, TransferError
from j_artifact_resolver.repositories import ProxyDescriptor, RepositoryDescriptor
from j_artifact_resolver.session import ResolutionSession

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
USER_AGENT = "j-artifact-resolver/0.1"


def _seconds(millis: int) -> float | None:
    return millis / 1000.0 if millis > 0 else None


class Transporter:
    """Fetches resources addressed by layout-relative paths."""

    def __init__(self, repository: RepositoryDescriptor) -> None:
        self.repository = repository

    def get(self, resource: str, destination: Path) -> None:
        """Write `resource` to `destination`.

        Raises:
            ResourceNotFoundError: If the repository does not hold the resource.
            TransferError: For any other failure.
        """
        raise NotImplementedError

    def fetch(self, resource: str) -> bytes:
        """Return the content of a small resource such as metadata."""
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "Transporter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class FileTransporter(Transporter):
    def __init__(self, repository: RepositoryDescriptor, basedir: Path) -> None:
        super().__init__(repository)
        self.basedir = basedir

    def _source(self, resource: str) -> Path:
        source = self.basedir / resource
        if not source.is_file():
            raise ResourceNotFoundError(
                f"Could not find {resource} in {self.repository.id} ({self.repository.url})",
                repository=self.repository.id,
            )
        return source

    def get(self, resource: str, destination: Path) -> None:
        source = self._source(resource)
        try:
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise TransferError(
                f"Could not copy {resource} from {self.repository.id}: {exc}",
                repository=self.repository.id,
            ) from exc

    def fetch(self, resource: str) -> bytes:
        source = self._source(resource)
        try:
            return source.read_bytes()
        except OSError as exc:
            raise TransferError(
                f"Could not read {resource} from {self.repository.id}: {exc}",
                repository=self.repository.id,
            ) from exc


class HttpTransporter(Transporter):
    def __init__(
        self,
        repository: RepositoryDescriptor,
        *,
        proxy: ProxyDescriptor | None,
        connect_timeout: int,
        request_timeout: int,
    ) -> None:
        super().__init__(repository)
        self.base_url = repository.url.rstrip("/")
        # requests wants seconds; the configuration is in milliseconds, 0 meaning no limit.
        self.timeout = (_seconds(connect_timeout), _seconds(request_timeout))
        self.proxy = proxy
        self._http = requests.Session()
        # Only the resolver configuration decides about proxies and credentials.
        self._http.trust_env = False
        self._http.headers["User-Agent"] = USER_AGENT
        if repository.authentication is not None:
            self._http.auth = repository.authentication.as_tuple()
        if proxy is not None:
            proxy_url = proxy.url()
            self._http.proxies = {"http": proxy_url, "https": proxy_url}

    def _request(self, resource: str) -> requests.Response:
        url = f"{self.base_url}/{resource}"
        logger.debug("GET %s (proxy=%s)", url, self.proxy is not None)
        try:
            response = self._http.get(url, stream=True, timeout=self.timeout)
        except requests.Timeout as exc:
            raise TransferError(
                f"Timed out fetching {url} from {self.repository.id}",
                repository=self.repository.id,
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            raise TransferError(
                f"Could not transfer {url} from {self.repository.id}: {exc}",
                repository=self.repository.id,
            ) from exc

        if response.status_code == 404:
            response.close()
            raise ResourceNotFoundError(
                f"Could not find {url} in {self.repository.id}",
                repository=self.repository.id,
            )
        if response.status_code >= 400:
            response.close()
            raise TransferError(
                f"Could not transfer {url} from {self.repository.id}: "
                f"status code {response.status_code} {response.reason or ''}".rstrip(),
                repository=self.repository.id,
            )
        return response

    def get(self, resource: str, destination: Path) -> None:
        response = self._request(resource)
        try:
            with open(destination, "wb") as fh:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
        except requests.RequestException as exc:
            raise TransferError(
                f"Transfer of {resource} from {self.repository.id} interrupted: {exc}",
                repository=self.repository.id,
            ) from exc
        finally:
            response.close()

    def fetch(self, resource: str) -> bytes:
        response = self._request(resource)
        try:
            return response.content
        except requests.RequestException as exc:
            raise TransferError(
                f"Transfer of {resource} from {self.repository.id} interrupted: {exc}",
                repository=self.repository.id,
            ) from exc
        finally:
            response.close()

    def close(self) -> None:
        self._http.close()


def new_transporter(repository: RepositoryDescriptor, session: ResolutionSession) -> Transporter:
    """Create the transporter matching the repository URL scheme.

    Raises:
        TransferError: If the scheme is not supported.
    """
    parts = urlsplit(repository.url)
    scheme = parts.scheme.lower()
    if scheme == "file":
        return FileTransporter(repository, Path(url2pathname(parts.path)))
    if scheme in ("http", "https"):
        return HttpTransporter(
            repository,
            proxy=session.proxy_for(repository),
            connect_timeout=session.connect_timeout,
            request_timeout=session.request_timeout,
        )
    raise TransferError(
        f"No transporter available for {repository.id} ({repository.url})",
        repository=repository.id,
    )
