"""Project type classification for asset bundles."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .base import Analyzer
from .utils import find_package_manifest, load_node_dependencies
from ..models import AssetBundle, ProjectType, Signal


class ProjectTypeAnalyzer(Analyzer):
    """Tags a bundle with an advisory project type.

    Runtime dependencies in package.json are checked first, then build-tool
    config file names. The tag never changes how a bundle is synthesized.
    """

    FRAMEWORK_MARKERS: Sequence[Tuple[str, ProjectType]] = (
        ("next", ProjectType.NEXT),
        ("react", ProjectType.REACT),
        ("vue", ProjectType.VUE),
    )
    CONFIG_MARKERS: Sequence[Tuple[str, ProjectType]] = (
        ("next.config", ProjectType.NEXT),
        ("vite.config", ProjectType.VITE),
    )

    def supports(self, bundle: AssetBundle) -> bool:
        return True

    def analyze(self, bundle: AssetBundle) -> Iterable[Signal]:
        project_type = self.classify(bundle)
        return [
            Signal(
                name="project.type",
                value=project_type.value,
                source="project_type",
                metadata={"manifest": find_package_manifest(bundle)},
            )
        ]

    def classify(self, bundle: AssetBundle) -> ProjectType:
        dependencies = set(load_node_dependencies(bundle)["dependencies"])
        for marker, project_type in self.FRAMEWORK_MARKERS:
            if marker in dependencies:
                return project_type

        paths: List[str] = bundle.paths()
        for fragment, project_type in self.CONFIG_MARKERS:
            if any(fragment in path for path in paths):
                return project_type

        return ProjectType.STATIC


def classify(bundle: AssetBundle) -> ProjectType:
    """Return the advisory project type for ``bundle``."""
    return ProjectTypeAnalyzer().classify(bundle)
