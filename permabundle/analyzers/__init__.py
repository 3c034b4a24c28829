"""Built-in analyzers and selection by configured name."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from ..config import ConfigError
from .base import Analyzer
from .inventory import InventoryAnalyzer
from .project_type import ProjectTypeAnalyzer, classify

ANALYZERS: Dict[str, Callable[[], Analyzer]] = {
    "project_type": ProjectTypeAnalyzer,
    "inventory": InventoryAnalyzer,
}


def discover_analyzers(enabled: Sequence[str] | None = None) -> List[Analyzer]:
    """Instantiate analyzers in registry order.

    ``enabled`` restricts the result to the named analyzers; ``None`` runs all
    of them and an empty sequence runs none. Unknown names raise ConfigError.
    """
    if enabled is None:
        return [factory() for factory in ANALYZERS.values()]

    wanted = {name.strip().lower() for name in enabled}
    unknown = wanted - ANALYZERS.keys()
    if unknown:
        raise ConfigError(
            f"Unknown analyzers requested: {', '.join(sorted(unknown))}; "
            f"available: {', '.join(ANALYZERS)}"
        )
    return [factory() for name, factory in ANALYZERS.items() if name in wanted]


__all__ = [
    "ANALYZERS",
    "Analyzer",
    "InventoryAnalyzer",
    "ProjectTypeAnalyzer",
    "classify",
    "discover_analyzers",
]
