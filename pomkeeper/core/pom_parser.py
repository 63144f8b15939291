"""
POM descriptor parsing for pomkeeper.

:class:`PomModelExtractor` turns POM text into an immutable
:class:`~pomkeeper.models.pom.PomModel`. Parsing goes through
:mod:`defusedxml` since POM files are untrusted input. Both namespaced
(``xmlns="http://maven.apache.org/POM/4.0.0"``) and bare ``<project>``
documents are accepted.

Only the project-level ``<dependencies>`` are extracted; dependencies
declared inside ``<build><plugins>`` or ``<profiles>`` are ignored, and
``dependencyManagement`` entries go into the managed-version table
instead of the declaration list.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, Iterable, List, Optional, Tuple

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from pomkeeper.exceptions import MalformedDescriptor
from pomkeeper.models.pom import (
    DependencyDeclaration,
    ParentReference,
    PomModel,
    coordinate_key,
)
from pomkeeper.utils.logger import get_logger

logger = get_logger("pom_parser")

_ROOT_TAG = "project"


class PomModelExtractor:
    """Extract a :class:`PomModel` from POM text.

    The extractor holds no state between calls; extracting the same text
    twice yields equal models.

    Example:
        >>> model = PomModelExtractor().extract(pom_text)
        >>> [str(d) for d in model.dependencies]
        ['org.slf4j:slf4j-api:2.0.9', 'junit:junit:${junit.version}']
    """

    def extract(self, text: str, *, source: str = "<string>") -> PomModel:
        """Parse *text* into a :class:`PomModel`.

        Args:
            text: Raw POM XML.
            source: Label used in error messages (usually the file path).

        Raises:
            MalformedDescriptor: The text is empty, not well-formed XML, or
                its root element is not ``project``.
        """
        root = self._parse_root(text, source)
        ns = _namespace(root)

        parent = self._extract_parent(root, ns)
        group_id = _child_text(root, "groupId", ns)
        artifact_id = _child_text(root, "artifactId", ns)
        version = _child_text(root, "version", ns)

        properties = self._extract_properties(root, ns)
        _seed_builtin_properties(properties, group_id, artifact_id, version, parent)

        model = PomModel(
            group_id=group_id or (parent.group_id if parent else None),
            artifact_id=artifact_id,
            version=version or (parent.version if parent else None),
            packaging=_child_text(root, "packaging", ns),
            parent=parent,
            properties=properties,
            managed_versions=self._extract_managed_versions(root, ns),
            dependencies=tuple(self._extract_dependencies(root, ns)),
            licenses=tuple(self._extract_licenses(root, ns)),
        )

        logger.debug(
            "Extracted %s: %d dependencies, %d managed, %d properties",
            source,
            len(model.dependencies),
            len(model.managed_versions),
            len(model.properties),
        )
        return model

    def is_valid(self, text: str) -> bool:
        """Return True if *text* is a well-formed POM with a ``project`` root."""
        try:
            self._parse_root(text, "<string>")
        except MalformedDescriptor:
            return False
        return True

    @staticmethod
    def filter_declarations(
        declarations: Iterable[DependencyDeclaration],
        include_non_primary: bool = True,
    ) -> List[DependencyDeclaration]:
        """Drop ``provided``, ``test`` and optional declarations on request.

        Args:
            declarations: Declarations in POM order.
            include_non_primary: When True every declaration is kept.

        Returns:
            Remaining declarations, order preserved.
        """
        result: List[DependencyDeclaration] = []

        for declaration in declarations:
            if not include_non_primary:
                scope = declaration.effective_scope
                if scope == "provided":
                    logger.debug("Skipping provided dependency %s", declaration.key)
                    continue
                if scope == "test":
                    logger.debug("Skipping test dependency %s", declaration.key)
                    continue
                if declaration.optional:
                    logger.debug("Skipping optional dependency %s", declaration.key)
                    continue
            result.append(declaration)

        return result

    # ------------------------------------------------------------------
    # Section extraction
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_root(text: str, source: str) -> ET.Element:
        if not text or not text.strip():
            raise MalformedDescriptor(
                "POM descriptor is empty",
                source=source,
                reason="empty document",
            )

        try:
            root = fromstring(text)
        except ET.ParseError as exc:
            raise MalformedDescriptor(
                "POM descriptor is not well-formed XML",
                source=source,
                reason=str(exc),
            ) from exc
        except DefusedXmlException as exc:
            raise MalformedDescriptor(
                "POM descriptor uses forbidden XML constructs",
                source=source,
                reason=str(exc),
            ) from exc

        if _local_name(root.tag) != _ROOT_TAG:
            raise MalformedDescriptor(
                f"Expected <project> root element, found <{_local_name(root.tag)}>",
                source=source,
                reason="wrong root element",
            )
        return root

    @staticmethod
    def _extract_parent(root: ET.Element, ns: str) -> Optional[ParentReference]:
        element = root.find(f"{ns}parent")
        if element is None:
            return None

        return ParentReference(
            group_id=_child_text(element, "groupId", ns),
            artifact_id=_child_text(element, "artifactId", ns),
            version=_child_text(element, "version", ns),
            relative_path=_child_text(element, "relativePath", ns),
        )

    @staticmethod
    def _extract_properties(root: ET.Element, ns: str) -> Dict[str, str]:
        properties: Dict[str, str] = {}
        element = root.find(f"{ns}properties")
        if element is None:
            return properties

        for child in element:
            if not isinstance(child.tag, str):
                continue  # comments and processing instructions
            properties[_local_name(child.tag)] = (child.text or "").strip()

        return properties

    @staticmethod
    def _extract_managed_versions(root: ET.Element, ns: str) -> Dict[str, Optional[str]]:
        managed: Dict[str, Optional[str]] = {}

        for element in root.findall(f"{ns}dependencyManagement/{ns}dependencies/{ns}dependency"):
            group_id = _child_text(element, "groupId", ns)
            artifact_id = _child_text(element, "artifactId", ns)
            if not artifact_id:
                continue
            managed[coordinate_key(group_id, artifact_id)] = _child_text(element, "version", ns)

        return managed

    @staticmethod
    def _extract_dependencies(root: ET.Element, ns: str) -> List[DependencyDeclaration]:
        declarations: List[DependencyDeclaration] = []

        for element in root.findall(f"{ns}dependencies/{ns}dependency"):
            artifact_id = _child_text(element, "artifactId", ns)
            if not artifact_id:
                logger.debug("Skipping dependency without artifactId")
                continue

            optional = (_child_text(element, "optional", ns) or "").lower() == "true"

            declarations.append(
                DependencyDeclaration(
                    group_id=_child_text(element, "groupId", ns) or "",
                    artifact_id=artifact_id,
                    version=_child_text(element, "version", ns),
                    scope=_child_text(element, "scope", ns),
                    optional=optional,
                    type=_child_text(element, "type", ns),
                    classifier=_child_text(element, "classifier", ns),
                    raw_xml=_serialize(element),
                )
            )

        return declarations

    @staticmethod
    def _extract_licenses(root: ET.Element, ns: str) -> List[str]:
        names: List[str] = []
        for element in root.findall(f"{ns}licenses/{ns}license"):
            name = _child_text(element, "name", ns)
            if name:
                names.append(name)
        return names


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _namespace(root: ET.Element) -> str:
    """Return ``"{uri}"`` for a namespaced root, else ``""``."""
    if root.tag.startswith("{"):
        return root.tag[: root.tag.index("}") + 1]
    return ""


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str, ns: str) -> Optional[str]:
    """Stripped text of a direct child, ``None`` when absent or blank."""
    child = element.find(f"{ns}{name}")
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _serialize(element: ET.Element) -> str:
    return ET.tostring(element, encoding="unicode").strip()


def _seed_builtin_properties(
    properties: Dict[str, str],
    group_id: Optional[str],
    artifact_id: Optional[str],
    version: Optional[str],
    parent: Optional[ParentReference],
) -> None:
    """Add Maven's built-in ``project.*`` properties unless declared."""
    parent_group = parent.group_id if parent else None
    parent_version = parent.version if parent else None

    builtins: Tuple[Tuple[str, Optional[str]], ...] = (
        ("project.groupId", group_id or parent_group),
        ("project.artifactId", artifact_id),
        ("project.version", version or parent_version),
        ("project.parent.groupId", parent_group),
        ("project.parent.artifactId", parent.artifact_id if parent else None),
        ("project.parent.version", parent_version),
    )

    for name, value in builtins:
        if value is not None and name not in properties:
            properties[name] = value
