"""Pydantic models for artifact coordinates and resolution results."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from j_artifact_resolver.exceptions import InvalidCoordinateError


SNAPSHOT = "SNAPSHOT"
DEFAULT_EXTENSION = "jar"
DESCRIPTOR_EXTENSION = "pom"

_TIMESTAMP_RE = re.compile(r"^(.*-)?([0-9]{8}\.[0-9]{6}-[0-9]+)$")


class Coordinate(BaseModel):
    """Maven coordinates (GroupId, ArtifactId, Version, Classifier, Extension).

    Blank values are accepted on construction; use `validate_coordinate` to
    reject them before any I/O happens.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version: str
    classifier: str | None = None
    extension: str = DEFAULT_EXTENSION

    @classmethod
    def from_string(cls, value: str) -> "Coordinate":
        """Parse `groupId:artifactId[:extension[:classifier]]:version`.

        Raises:
            InvalidCoordinateError: If the string has the wrong number of segments.
        """
        parts = value.strip().split(":")
        if len(parts) == 3:
            group_id, artifact_id, version = parts
            return cls(group_id=group_id, artifact_id=artifact_id, version=version)
        if len(parts) == 4:
            group_id, artifact_id, extension, version = parts
            return cls(
                group_id=group_id,
                artifact_id=artifact_id,
                extension=extension,
                version=version,
            )
        if len(parts) == 5:
            group_id, artifact_id, extension, classifier, version = parts
            return cls(
                group_id=group_id,
                artifact_id=artifact_id,
                extension=extension,
                classifier=classifier or None,
                version=version,
            )
        raise InvalidCoordinateError(
            f"Invalid coordinate {value!r}: expected "
            "groupId:artifactId[:extension[:classifier]]:version"
        )

    @property
    def classifier_or_empty(self) -> str:
        return self.classifier or ""

    @property
    def is_base_snapshot(self) -> bool:
        """True for `-SNAPSHOT` versions, which resolve to the latest timestamped build."""
        return self.version.endswith(SNAPSHOT)

    @property
    def base_version(self) -> str:
        """Return the version with a snapshot timestamp folded back to SNAPSHOT.

        `1.0-20240102.030405-7` becomes `1.0-SNAPSHOT`; other versions are
        returned unchanged.
        """
        m = _TIMESTAMP_RE.match(self.version)
        if m is None:
            return self.version
        return f"{m.group(1) or ''}{SNAPSHOT}"

    def with_extension(self, extension: str) -> "Coordinate":
        """Return a copy addressing a sibling file (e.g. the pom) of this artifact."""
        return self.model_copy(
            update={"extension": extension, "classifier": self.classifier_or_empty}
        )

    def blank_fields(self) -> list[str]:
        """Return the Maven names of required fields that are blank."""
        checks = [
            ("groupId", self.group_id),
            ("artifactId", self.artifact_id),
            ("extension", self.extension),
            ("version", self.version),
        ]
        return [name for name, value in checks if not (value or "").strip()]

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


def validate_coordinate(coordinate: Coordinate) -> None:
    """Fail fast when a required coordinate field is blank.

    Raises:
        InvalidCoordinateError: Naming the first blank field.
    """
    blank = coordinate.blank_fields()
    if blank:
        raise InvalidCoordinateError(f"{blank[0]} must not be blank.")


class ResolvedArtifact(BaseModel):
    """A coordinate together with the local file that backs it."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    path: Path
    repository: str = Field(default="local")
    descriptor_path: Path | None = None
