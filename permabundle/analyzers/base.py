"""Base classes for analyzer plugins."""

from abc import ABC, abstractmethod
from typing import Iterable

from ..models import AssetBundle, Signal


class Analyzer(ABC):
    """Contract for analyzers that emit informational signals from a bundle."""

    @abstractmethod
    def supports(self, bundle: AssetBundle) -> bool:
        """Return True when this analyzer should run for the bundle."""

    @abstractmethod
    def analyze(self, bundle: AssetBundle) -> Iterable[Signal]:
        """Produce structured signals describing the bundle."""
