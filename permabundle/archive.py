"""Extraction of text assets from ZIP archives."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import DEFAULT_TEXT_SUFFIXES
from .errors import ArchiveError, EmptyBundleError
from .logging import get_logger
from .models import AssetBundle


class ArchiveReader:
    """Builds an asset bundle from every text-like entry of a ZIP archive.

    Entries are decoded concurrently on a thread pool. A decode failure only
    drops the offending entry; the bundle is assembled after every entry has
    finished, in archive order, so the result does not depend on scheduling.
    """

    def __init__(
        self,
        text_suffixes: Sequence[str] = DEFAULT_TEXT_SUFFIXES,
        *,
        max_workers: int = 8,
        allow_empty: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.text_suffixes = tuple(suffix.lower() for suffix in text_suffixes)
        self.max_workers = max(1, max_workers)
        self.allow_empty = allow_empty
        self.logger = logger or get_logger("archive")

    def is_text_asset(self, path: str) -> bool:
        return path.lower().endswith(self.text_suffixes)

    def extract_text_assets(self, data: bytes) -> AssetBundle:
        """Return the decoded text entries of ``data`` as an asset bundle."""
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as exc:
            raise ArchiveError(f"Archive is not a valid ZIP file: {exc}") from exc

        with archive:
            entries = [info for info in archive.infolist() if self._admits(info)]
            self.logger.debug("Archive holds %d text entries", len(entries))
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                decoded = list(pool.map(lambda info: self._decode(archive, info), entries))

        bundle = AssetBundle.from_pairs(_successful(decoded))
        if not len(bundle) and not self.allow_empty:
            raise EmptyBundleError("No processable files found in the archive")
        self.logger.info("Extracted %d of %d text entries", len(bundle), len(entries))
        return bundle

    def _admits(self, info: zipfile.ZipInfo) -> bool:
        if info.is_dir():
            return False
        return self.is_text_asset(info.filename)

    def _decode(
        self, archive: zipfile.ZipFile, info: zipfile.ZipInfo
    ) -> Optional[Tuple[str, str]]:
        try:
            raw = archive.read(info)
            return info.filename, raw.decode("utf-8-sig")
        except (
            UnicodeDecodeError,
            zipfile.BadZipFile,
            RuntimeError,
            OSError,
            EOFError,
            zlib.error,
        ) as exc:
            self.logger.warning("Failed to read file %s: %s", info.filename, exc)
            return None


def _successful(
    decoded: Iterable[Optional[Tuple[str, str]]]
) -> List[Tuple[str, str]]:
    return [item for item in decoded if item is not None]


__all__ = ["ArchiveReader"]
