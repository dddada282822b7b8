"""Artifact resolution engine.

Resolves batches of artifact requests: the local repository is consulted
first, then each remote repository in order. Snapshots are re-checked
according to the session's update policy. Downloads land in a temporary
file next to their target and are renamed into place, so concurrent
resolutions of the same artifact never observe a partial file.
"""
from __future__ import annotations

import enum
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from j_artifact_resolver import layout
from j_artifact_resolver.exceptions import (
    ArtifactBatchResolutionError,
    MetadataParseError,
    ResourceNotFoundError,
    TransferError,
)
from j_artifact_resolver.metadata import parse_snapshot_metadata
from j_artifact_resolver.models import Coordinate
from j_artifact_resolver.repositories import RepositoryDescriptor
from j_artifact_resolver.session import ResolutionSession
from j_artifact_resolver.transport import Transporter, new_transporter

logger = logging.getLogger(__name__)

LOCAL_REPOSITORY_ID = "local"
RUNTIME = "runtime"

TransporterFactory = Callable[[RepositoryDescriptor, ResolutionSession], Transporter]


class ArtifactKind(str, enum.Enum):
    DESCRIPTOR = "descriptor"
    PRIMARY = "primary"


@dataclass(frozen=True)
class ArtifactRequest:
    """One artifact to resolve against an ordered list of repositories."""

    artifact: Coordinate
    repositories: tuple[RepositoryDescriptor, ...]
    context: str = RUNTIME
    kind: ArtifactKind = ArtifactKind.PRIMARY


@dataclass
class ArtifactResult:
    """Outcome of one request; `path` is None when resolution failed."""

    request: ArtifactRequest
    path: Path | None = None
    repository: str | None = None
    exceptions: list[Exception] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.path is not None

    @property
    def kind(self) -> ArtifactKind:
        return self.request.kind


class ResolutionEngine:
    """Stateless; one instance can serve concurrent batches."""

    def __init__(self, transporter_factory: TransporterFactory = new_transporter) -> None:
        self._transporter_factory = transporter_factory

    def resolve_artifacts(
        self,
        session: ResolutionSession,
        requests: Iterable[ArtifactRequest],
    ) -> list[ArtifactResult]:
        """Resolve every request of a batch.

        Returns:
            One result per request, in request order.

        Raises:
            ArtifactBatchResolutionError: If any request could not be resolved.
        """
        transporters: dict[str, Transporter] = {}
        try:
            results = [self._resolve(session, request, transporters) for request in requests]
        finally:
            for transporter in transporters.values():
                transporter.close()

        if any(not result.resolved for result in results):
            raise ArtifactBatchResolutionError(results)
        return results

    def _resolve(
        self,
        session: ResolutionSession,
        request: ArtifactRequest,
        transporters: dict[str, Transporter],
    ) -> ArtifactResult:
        artifact = request.artifact
        result = ArtifactResult(request=request)

        local = session.local_repository.find(artifact)
        if local is not None and not self._is_stale(session, artifact, local):
            logger.debug("Resolved %s from local repository: %s", artifact, local)
            result.path = local
            result.repository = LOCAL_REPOSITORY_ID
            return result

        if session.offline:
            if local is not None:
                logger.debug("Offline, using cached %s: %s", artifact, local)
                result.path = local
                result.repository = LOCAL_REPOSITORY_ID
            else:
                result.exceptions.append(
                    ResourceNotFoundError(
                        f"Cannot access remote repositories in offline mode and {artifact} "
                        "has not been downloaded from them before"
                    )
                )
            return result

        if not request.repositories and local is None:
            result.exceptions.append(
                ResourceNotFoundError(
                    f"{artifact} is not in the local repository and no remote "
                    "repositories are configured"
                )
            )
            return result

        for repository in request.repositories:
            try:
                transporter = self._transporter(session, repository, transporters)
                path = self._download(session, artifact, repository, transporter)
            except (TransferError, OSError) as exc:
                logger.debug("Could not resolve %s from %s: %s", artifact, repository.id, exc)
                result.exceptions.append(exc)
                continue
            result.path = path
            result.repository = repository.id
            return result

        if local is not None:
            logger.warning("Could not update %s, using cached copy %s", artifact, local)
            result.path = local
            result.repository = LOCAL_REPOSITORY_ID
        return result

    @staticmethod
    def _is_stale(session: ResolutionSession, artifact: Coordinate, path: Path) -> bool:
        # Releases and timestamped snapshots never change once deployed.
        if not artifact.is_base_snapshot:
            return False
        return session.update_policy.is_stale(path)

    def _transporter(
        self,
        session: ResolutionSession,
        repository: RepositoryDescriptor,
        transporters: dict[str, Transporter],
    ) -> Transporter:
        transporter = transporters.get(repository.id)
        if transporter is None:
            transporter = self._transporter_factory(repository, session)
            transporters[repository.id] = transporter
        return transporter

    def _download(
        self,
        session: ResolutionSession,
        artifact: Coordinate,
        repository: RepositoryDescriptor,
        transporter: Transporter,
    ) -> Path:
        remote_version = artifact.version
        if artifact.is_base_snapshot:
            remote_version = self._snapshot_version(artifact, repository, transporter)

        target = session.local_repository.path_of(artifact)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=target.parent)
        os.close(fd)
        tmp_path = Path(tmp)
        try:
            transporter.get(layout.artifact_path(artifact, remote_version), tmp_path)
            os.replace(tmp_path, target)
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.info("Downloaded %s from %s (%s)", artifact, repository.id, repository.url)
        return target

    @staticmethod
    def _snapshot_version(
        artifact: Coordinate,
        repository: RepositoryDescriptor,
        transporter: Transporter,
    ) -> str:
        """Map a `-SNAPSHOT` version to the timestamped version deployed remotely.

        Falls back to the plain snapshot version when the repository has no
        usable metadata (e.g. a locally installed snapshot layout).
        """
        try:
            content = transporter.fetch(layout.metadata_path(artifact))
        except ResourceNotFoundError:
            logger.debug("No snapshot metadata for %s in %s", artifact, repository.id)
            return artifact.version
        try:
            metadata = parse_snapshot_metadata(content, artifact.version)
        except MetadataParseError as exc:
            logger.warning("Ignoring invalid metadata in %s: %s", repository.id, exc)
            return artifact.version
        return (
            metadata.remote_version(artifact.classifier_or_empty, artifact.extension)
            or artifact.version
        )


def select(results: Sequence[ArtifactResult], kind: ArtifactKind) -> ArtifactResult:
    """Return the result tagged `kind`.

    Raises:
        LookupError: If the batch held no request of that kind.
    """
    for result in results:
        if result.kind is kind:
            return result
    raise LookupError(f"No {kind.value} result in batch")
