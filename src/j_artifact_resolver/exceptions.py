"""Custom exceptions for J-Artifact Resolver."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from j_artifact_resolver.engine import ArtifactResult
    from j_artifact_resolver.models import Coordinate


class ResolverError(Exception):
    """Base exception for J-Artifact Resolver."""


class InvalidCoordinateError(ResolverError, ValueError):
    """Raised when a required coordinate field is blank."""


class CacheDirectoryUnavailableError(ResolverError):
    """Raised when the local repository directory cannot be created."""


class MetadataParseError(ResolverError):
    """Raised when a maven-metadata.xml document cannot be parsed."""


class TransferError(ResolverError):
    """Raised when a transporter fails to fetch a resource."""

    def __init__(self, message: str, *, repository: str | None = None) -> None:
        super().__init__(message)
        self.repository = repository


class ResourceNotFoundError(TransferError):
    """Raised when a repository does not hold the requested resource."""


class ArtifactBatchResolutionError(ResolverError):
    """Raised by the engine when at least one request of a batch failed.

    Carries every result of the batch, successful or not.
    """

    def __init__(self, results: Sequence["ArtifactResult"]) -> None:
        self.results = list(results)
        failed = [r for r in self.results if not r.resolved]
        lines = [f"{len(failed)} of {len(self.results)} artifact(s) could not be resolved"]
        for result in failed:
            reasons = "; ".join(str(exc) for exc in result.exceptions) or "not found"
            lines.append(f"{result.request.artifact}: {reasons}")
        super().__init__("\n".join(lines))


class ArtifactResolutionError(ResolverError):
    """Raised when a valid coordinate could not be resolved.

    Attributes:
        coordinate: The coordinate that was requested.
        repositories: Names of every configured remote repository, in order.
        cause: The underlying engine failure.
    """

    def __init__(
        self,
        coordinate: "Coordinate",
        repositories: Sequence[str],
        cause: BaseException,
    ) -> None:
        self.coordinate = coordinate
        self.repositories = list(repositories)
        self.cause = cause
        noun = "repositories" if len(self.repositories) > 1 else "repository"
        super().__init__(
            f"failed to resolve {coordinate}. "
            f"Configured remote {noun}: [{', '.join(self.repositories)}]\n"
            f"Caused by: {cause}"
        )
