"""Ordered fallback chains over interchangeable acquisition attempts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from ..errors import AcquisitionError
from ..logging import get_logger

T = TypeVar("T")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """One way of obtaining a resource; receives the per-attempt timeout."""

    name: str
    run: Callable[[Optional[float]], T]


class AcquisitionStrategy(Generic[T]):
    """Tries attempts in order and returns the first accepted result.

    Each attempt runs exactly once. A raised exception or a rejected result
    moves on to the next attempt; only exhausting the list is fatal.
    """

    def __init__(
        self,
        attempts: Sequence[Attempt[T]],
        *,
        timeout: Optional[float] = None,
        accept: Callable[[T], bool] | None = None,
        description: str = "resource",
        logger: logging.Logger | None = None,
    ) -> None:
        self.attempts = list(attempts)
        self.timeout = timeout
        self.accept = accept
        self.description = description
        self.logger = logger or get_logger("acquisition")

    def run(self) -> T:
        failures: List[str] = []
        for attempt in self.attempts:
            self.logger.debug("Trying %s via %s", self.description, attempt.name)
            try:
                result = attempt.run(self.timeout)
            except Exception as exc:  # each attempt is isolated; failures are aggregated below
                self.logger.warning("Attempt %s failed: %s", attempt.name, exc)
                failures.append(f"{attempt.name}: {exc}")
                continue
            if self.accept is not None and not self.accept(result):
                self.logger.warning("Attempt %s returned an unusable payload", attempt.name)
                failures.append(f"{attempt.name}: unusable payload")
                continue
            self.logger.debug("Fetched %s via %s", self.description, attempt.name)
            return result

        raise AcquisitionError(
            f"Failed to fetch {self.description} from all available sources", failures
        )


__all__ = ["AcquisitionStrategy", "Attempt"]
