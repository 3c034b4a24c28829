"""Asset inventory analyzer."""

from __future__ import annotations

from collections import Counter
from pathlib import PurePosixPath
from typing import Iterable

from .base import Analyzer
from ..models import AssetBundle, Signal


class InventoryAnalyzer(Analyzer):
    """Summarises bundle contents by suffix and total text size."""

    def supports(self, bundle: AssetBundle) -> bool:
        return bool(len(bundle))

    def analyze(self, bundle: AssetBundle) -> Iterable[Signal]:
        counts = Counter(
            PurePosixPath(path).suffix.lower() or "(none)" for path in bundle.paths()
        )
        total_bytes = sum(len(content.encode("utf-8")) for _, content in bundle.items())
        ordered = [suffix for suffix, _ in counts.most_common()]
        return [
            Signal(
                name="assets.inventory",
                value=", ".join(f"{suffix}: {counts[suffix]}" for suffix in ordered),
                source="inventory",
                metadata={
                    "files": len(bundle),
                    "counts": dict(counts),
                    "total_bytes": total_bytes,
                },
            )
        ]
