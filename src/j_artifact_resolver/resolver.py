"""Resolve a coordinate to a file in the local repository.

`ArtifactResolver` locates an artifact in the local repository, downloading
the latest update from a remote repository if necessary. When
`RepositoryConfig.resolve_descriptor` is set the artifact's pom is resolved
and cached as well.
"""
from __future__ import annotations

import logging

from j_artifact_resolver.config import RepositoryConfig
from j_artifact_resolver.engine import (
    RUNTIME,
    ArtifactKind,
    ArtifactRequest,
    ResolutionEngine,
    select,
)
from j_artifact_resolver.exceptions import ArtifactBatchResolutionError, ArtifactResolutionError
from j_artifact_resolver.models import (
    DESCRIPTOR_EXTENSION,
    Coordinate,
    ResolvedArtifact,
    validate_coordinate,
)
from j_artifact_resolver.repositories import build_repository_descriptors, ensure_local_repository
from j_artifact_resolver.session import new_session

logger = logging.getLogger(__name__)


class ArtifactResolver:
    """Resolves coordinates under one `RepositoryConfig`.

    Repository descriptors are built once on construction; every call to
    `resolve` builds its own session, so one resolver can be shared between
    threads.
    """

    def __init__(self, config: RepositoryConfig, engine: ResolutionEngine | None = None) -> None:
        """Create a resolver, creating the local repository directory if needed.

        Args:
            config: Local/remote repositories, proxy and network settings.
            engine: Resolution engine to delegate to (default: a new `ResolutionEngine`).

        Raises:
            CacheDirectoryUnavailableError: If the local repository cannot be created.
        """
        self.config = config
        logger.debug("Local repository: %s", config.local_repository)
        logger.debug("Remote repositories: %s", ",".join(config.repository_names))
        ensure_local_repository(config.local_repository)
        self.repositories = build_repository_descriptors(config)
        self.engine = engine or ResolutionEngine()

    def resolve(self, coordinate: Coordinate) -> ResolvedArtifact:
        """Resolve `coordinate` and return its location in the local repository.

        Raises:
            InvalidCoordinateError: If a required coordinate field is blank.
            ArtifactResolutionError: If the artifact (or its pom, when
                requested) could not be resolved.
        """
        validate_coordinate(coordinate)
        session = new_session(self.config)

        requests: list[ArtifactRequest] = []
        if self.config.resolve_descriptor:
            requests.append(
                ArtifactRequest(
                    artifact=coordinate.with_extension(DESCRIPTOR_EXTENSION),
                    repositories=self.repositories,
                    context=RUNTIME,
                    kind=ArtifactKind.DESCRIPTOR,
                )
            )
        requests.append(
            ArtifactRequest(
                artifact=coordinate.with_extension(coordinate.extension),
                repositories=self.repositories,
                context=RUNTIME,
                kind=ArtifactKind.PRIMARY,
            )
        )

        try:
            results = self.engine.resolve_artifacts(session, requests)
        except ArtifactBatchResolutionError as exc:
            raise ArtifactResolutionError(coordinate, self.config.repository_names, exc) from exc

        primary = select(results, ArtifactKind.PRIMARY)
        descriptor_path = None
        if self.config.resolve_descriptor:
            descriptor_path = select(results, ArtifactKind.DESCRIPTOR).path

        return ResolvedArtifact(
            coordinate=coordinate,
            path=primary.path,
            repository=primary.repository,
            descriptor_path=descriptor_path,
        )


def resolve(coordinate: Coordinate, config: RepositoryConfig) -> ResolvedArtifact:
    """Resolve `coordinate` with a one-off resolver built from `config`.

    The coordinate is validated before the local repository is touched.
    """
    validate_coordinate(coordinate)
    return ArtifactResolver(config).resolve(coordinate)
