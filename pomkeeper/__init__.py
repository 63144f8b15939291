"""
pomkeeper: Maven dependency drift analysis

pomkeeper reads a Maven project descriptor (``pom.xml``) and reports, for
every declared dependency, the effective version Maven would use and how
far that version lags the newest release published on Maven Central.

Features include:
    • Property placeholder substitution (``${spring.version}``)
    • Parent, ``dependencyManagement`` and BOM-aware version resolution
    • Optional ground-truth resolution by invoking Maven itself
    • Tolerant version comparison and release-distance estimation
    • Table, plain-text and JSON reports
"""

from __future__ import annotations

from pomkeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "pomkeeper Contributors"
__license__ = "Apache-2.0"
__url__ = "https://github.com/pomkeeper/pomkeeper"
__description__ = "Maven POM dependency resolution and version drift analysis."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

from pomkeeper.core import PomAnalyzer, PomModelExtractor  # noqa: E402

__all__ = [
    "__version__",
    "PomAnalyzer",
    "PomModelExtractor",
]
