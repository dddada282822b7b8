"""Maven 2 repository layout.

Paths are relative, `/` separated, and shared by the local repository and
every remote repository.
"""
from __future__ import annotations

from j_artifact_resolver.models import Coordinate


METADATA_FILE = "maven-metadata.xml"


def artifact_file_name(coordinate: Coordinate, version: str | None = None) -> str:
    """Return e.g. `hello-1.0.0.jar` or `hello-1.0.0-sources.jar`.

    Args:
        coordinate: The artifact.
        version: Version to embed in the file name; defaults to the
            coordinate's own version (remote snapshots pass the timestamped one).
    """
    name = f"{coordinate.artifact_id}-{version or coordinate.version}"
    if coordinate.classifier:
        name += f"-{coordinate.classifier}"
    return f"{name}.{coordinate.extension}"


def version_directory(coordinate: Coordinate) -> str:
    group_path = coordinate.group_id.replace(".", "/")
    return f"{group_path}/{coordinate.artifact_id}/{coordinate.base_version}"


def artifact_path(coordinate: Coordinate, version: str | None = None) -> str:
    return f"{version_directory(coordinate)}/{artifact_file_name(coordinate, version)}"


def metadata_path(coordinate: Coordinate) -> str:
    """Return the path of the version-level metadata used for snapshots."""
    return f"{version_directory(coordinate)}/{METADATA_FILE}"
