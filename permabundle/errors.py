"""Error taxonomy for bundling, acquisition and deployment."""

from __future__ import annotations

from typing import List, Sequence


class BundleError(RuntimeError):
    """Base class for failures surfaced to permabundle callers."""


class ArchiveError(BundleError):
    """Raised when the supplied bytes are not a readable ZIP archive."""


class EmptyBundleError(BundleError):
    """Raised when no usable text assets remain after extraction."""


class NoContentError(BundleError):
    """Raised when synthesis cannot produce any document."""


class AcquisitionError(BundleError):
    """Raised when every attempt of an acquisition strategy failed."""

    def __init__(self, message: str, failures: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.failures: List[str] = list(failures)


class InvalidRepositoryError(AcquisitionError):
    """Raised for repository identifiers that are not owner/repo pairs."""


class InvalidUrlError(AcquisitionError):
    """Raised for page URLs that are not absolute http(s) URLs."""


class UnsupportedFileError(BundleError):
    """Raised when a single-file upload has an unsupported suffix."""


class NoHtmlContentError(BundleError):
    """Raised when an MHTML document carries no HTML part."""


class SizeExceededError(BundleError):
    """Raised when the synthesized document is larger than the deploy ceiling."""

    def __init__(self, size_kb: float, limit_kb: float) -> None:
        super().__init__(
            f"HTML file size ({size_kb:.2f}KB) exceeds the {limit_kb:.0f}KB limit. "
            "Please use a smaller project."
        )
        self.size_kb = size_kb
        self.limit_kb = limit_kb


class DeployError(BundleError):
    """Raised when the deploy endpoint rejects or fails a submission."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


__all__ = [
    "AcquisitionError",
    "ArchiveError",
    "BundleError",
    "DeployError",
    "EmptyBundleError",
    "InvalidRepositoryError",
    "InvalidUrlError",
    "NoContentError",
    "NoHtmlContentError",
    "SizeExceededError",
    "UnsupportedFileError",
]
