"""Parse version-level maven-metadata.xml files using lxml.

Only the snapshot section is read: it maps a `-SNAPSHOT` version to the
timestamped file names actually deployed to a remote repository.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from lxml import etree

from j_artifact_resolver.exceptions import MetadataParseError
from j_artifact_resolver.models import SNAPSHOT


def _text_first(node: etree._Element, xpath_expr: str) -> str | None:
    """Get text of the first matching element using namespace-agnostic XPath."""
    found = node.xpath(xpath_expr)
    if not found:
        return None
    first = found[0]
    if isinstance(first, etree._Element):
        text = (first.text or "").strip()
        return text or None
    return None


@dataclass(frozen=True)
class SnapshotMetadata:
    """Snapshot information for one `-SNAPSHOT` version.

    Attributes:
        version: The base version, e.g. `1.0-SNAPSHOT`.
        timestamp: Legacy `<snapshot><timestamp>` value, if any.
        build_number: Legacy `<snapshot><buildNumber>` value, if any.
        snapshot_versions: `(classifier, extension) -> value` from
            `<snapshotVersions>`; classifier is "" when absent.
    """

    version: str
    timestamp: str | None = None
    build_number: str | None = None
    snapshot_versions: dict[tuple[str, str], str] = field(default_factory=dict)

    def remote_version(self, classifier: str, extension: str) -> str | None:
        """Return the timestamped version for a file, or None if unknown."""
        value = self.snapshot_versions.get((classifier, extension))
        if value:
            return value
        if self.timestamp and self.build_number and self.version.endswith(SNAPSHOT):
            return self.version[: -len(SNAPSHOT)] + f"{self.timestamp}-{self.build_number}"
        return None


def parse_snapshot_metadata(content: bytes, version: str) -> SnapshotMetadata:
    """Parse a version-level maven-metadata.xml document.

    Args:
        content: Raw XML bytes.
        version: The base version the metadata was fetched for.

    Raises:
        MetadataParseError: If the XML cannot be parsed.
    """
    try:
        parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=False)
        root = etree.fromstring(content, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise MetadataParseError(f"Failed to parse maven-metadata.xml for {version}") from exc

    versioning = "/*[local-name()='metadata']/*[local-name()='versioning']"
    timestamp = _text_first(
        root, f"{versioning}/*[local-name()='snapshot']/*[local-name()='timestamp']"
    )
    build_number = _text_first(
        root, f"{versioning}/*[local-name()='snapshot']/*[local-name()='buildNumber']"
    )

    snapshot_versions: dict[tuple[str, str], str] = {}
    nodes = root.xpath(
        f"{versioning}/*[local-name()='snapshotVersions']/*[local-name()='snapshotVersion']"
    )
    for node in nodes:
        extension = _text_first(node, "./*[local-name()='extension']")
        value = _text_first(node, "./*[local-name()='value']")
        if extension is None or value is None:
            continue
        classifier = _text_first(node, "./*[local-name()='classifier']") or ""
        snapshot_versions[(classifier, extension)] = value

    return SnapshotMetadata(
        version=version,
        timestamp=timestamp,
        build_number=build_number,
        snapshot_versions=snapshot_versions,
    )
