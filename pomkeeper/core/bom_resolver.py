"""
Effective-version resolution for dependency declarations.

:class:`ManagedVersionResolver` decides which version a declaration really
uses. A declared version is taken as-is after property substitution.
Without one, the tiers below are tried strictly in order and the first that
yields a version wins:

1. parent inheritance for umbrella groups (e.g. Spring Boot starters);
2. the POM's own ``dependencyManagement`` table;
3. the build tool, when a project directory is available;
4. an estimate naming the governing BOM (never a version);
5. unresolved.

Failures inside a tier are logged and fall through to the next tier; they
never abort the analysis.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from pomkeeper.constants import (
    DEFAULT_INHERIT_GROUP_PREFIXES,
    MANAGED_BY_BOM,
    SPRING_BOOT_GROUP_ID,
)
from pomkeeper.core.external import (
    ExternalResolutionCache,
    ExternalVersionResolver,
    PathLike,
)
from pomkeeper.core.properties import PropertyResolver, has_placeholder
from pomkeeper.exceptions import (
    ExternalToolUnavailable,
    UnresolvedManagedVersion,
    UnresolvedProperty,
)
from pomkeeper.models.pom import (
    DependencyDeclaration,
    ParentReference,
    PomModel,
)
from pomkeeper.models.resolution import ResolutionOutcome
from pomkeeper.utils.logger import get_dependency_logger, get_logger

logger = get_logger("bom_resolver")


def bom_hint(parent: ParentReference) -> str:
    """Describe the BOM that governs versions through *parent*.

    Examples:
        >>> bom_hint(ParentReference("org.springframework.boot",
        ...                          "spring-boot-starter-parent", "3.2.0"))
        'MANAGED_BY_BOM (Spring Boot 3.2.0)'
        >>> bom_hint(ParentReference("com.acme", "platform", "7"))
        'MANAGED_BY_BOM (com.acme:platform)'
    """
    if parent.group_id == SPRING_BOOT_GROUP_ID and "spring-boot" in (parent.artifact_id or ""):
        return f"{MANAGED_BY_BOM} (Spring Boot {parent.version})"
    return f"{MANAGED_BY_BOM} ({parent.group_id}:{parent.artifact_id})"


class ManagedVersionResolver:
    """Resolve the effective version of each dependency declaration.

    Args:
        external: Build-tool resolver used when a project directory is
            given. ``None`` disables the external tier.
        cache: Cache of externally resolved versions, per directory.
        inherit_group_prefixes: Group-id prefixes whose version follows
            the parent POM's version.
    """

    def __init__(
        self,
        external: Optional[ExternalVersionResolver] = None,
        cache: Optional[ExternalResolutionCache] = None,
        inherit_group_prefixes: Sequence[str] = DEFAULT_INHERIT_GROUP_PREFIXES,
    ) -> None:
        self.external = external
        self.cache = cache if cache is not None else ExternalResolutionCache()
        self.inherit_group_prefixes = tuple(inherit_group_prefixes)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_properties(
        self,
        model: PomModel,
        directory: Optional[PathLike] = None,
    ) -> PropertyResolver:
        """Build the property resolver for one analysis run.

        POM properties come first; build-tool project properties are added
        without overwriting them when a directory and an external resolver
        are both available.
        """
        resolver = PropertyResolver(model.properties)
        if directory is None or self.external is None:
            return resolver

        try:
            external = self.external.get_project_properties(directory)
        except ExternalToolUnavailable as exc:
            logger.warning("Build-tool properties unavailable: %s", exc)
            return resolver

        logger.debug("Merging %d build-tool properties", len(external))
        return resolver.merge(external)

    def resolve(
        self,
        declaration: DependencyDeclaration,
        properties: PropertyResolver,
        parent: Optional[ParentReference] = None,
        managed_versions: Optional[Mapping[str, Optional[str]]] = None,
        directory: Optional[PathLike] = None,
    ) -> ResolutionOutcome:
        """Determine the effective version of *declaration*."""
        log = get_dependency_logger(logger, declaration.key)

        if declaration.version:
            try:
                return self._resolve_declared(declaration.version, properties)
            except UnresolvedProperty as exc:
                log.info("%s; trying managed versions", exc)

        if self._inherits_parent_version(declaration, parent):
            assert parent is not None and parent.version is not None
            log.debug("version inherited from parent %s", parent)
            return ResolutionOutcome.parent_inherited(parent.version, str(parent))

        managed = managed_versions or {}
        if declaration.key in managed:
            try:
                version = self._resolve_managed(declaration.key, managed[declaration.key], properties)
            except UnresolvedManagedVersion as exc:
                log.info("%s", exc)
            else:
                log.debug("managed version %s", version)
                return ResolutionOutcome.managed_table(version, managed[declaration.key])

        if directory is not None and self.external is not None:
            version = self._resolve_external(declaration, directory)
            if version:
                return ResolutionOutcome.externally_resolved(version, str(directory))

        if parent is not None and parent.is_complete:
            hint = bom_hint(parent)
            log.debug("estimated as %s", hint)
            return ResolutionOutcome.estimated(hint)

        log.warning("no version could be resolved")
        return ResolutionOutcome.unresolved("no version declared or managed")

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_declared(version: str, properties: PropertyResolver) -> ResolutionOutcome:
        if not has_placeholder(version):
            return ResolutionOutcome.literal(version)
        return ResolutionOutcome.property_resolved(properties.resolve_strict(version), version)

    def _inherits_parent_version(
        self,
        declaration: DependencyDeclaration,
        parent: Optional[ParentReference],
    ) -> bool:
        if parent is None or not parent.version:
            return False
        return any(declaration.group_id.startswith(prefix) for prefix in self.inherit_group_prefixes)

    @staticmethod
    def _resolve_managed(
        key: str,
        raw_version: Optional[str],
        properties: PropertyResolver,
    ) -> str:
        if not raw_version:
            raise UnresolvedManagedVersion(
                f"Managed entry for {key} declares no version",
                coordinate=key,
            )

        try:
            return properties.resolve_strict(raw_version)
        except UnresolvedProperty as exc:
            raise UnresolvedManagedVersion(
                f"Managed version of {key} is unresolved: {exc.message}",
                coordinate=key,
                managed_version=raw_version,
            ) from exc

    def _resolve_external(
        self,
        declaration: DependencyDeclaration,
        directory: PathLike,
    ) -> Optional[str]:
        assert self.external is not None
        log = get_dependency_logger(logger, declaration.key)

        cached = self.cache.lookup(directory, declaration.group_id, declaration.artifact_id)
        if cached:
            log.debug("externally resolved (cached) %s", cached)
            return cached

        try:
            version = self.external.resolve_managed_version(
                declaration.group_id,
                declaration.artifact_id,
                directory,
            )
        except ExternalToolUnavailable as exc:
            log.info("build tool unavailable: %s", exc)
            return None

        if not version:
            log.debug("build tool reported no version")
            return None

        self.cache.seed(directory, declaration.group_id, declaration.artifact_id, version)
        log.debug("externally resolved %s", version)
        return version
