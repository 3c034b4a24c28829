"""GitHub repository archive acquisition."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Sequence

from ..config import DEFAULT_RELAYS
from ..errors import InvalidRepositoryError
from ..logging import get_logger
from .base import AcquisitionStrategy, Attempt
from .http import Fetcher, fetch, route_urls

_NAME = r"[A-Za-z0-9_.-]+"
_GITHUB_URL_RE = re.compile(rf"^https?://(?:www\.)?github\.com/({_NAME})/({_NAME})$", re.IGNORECASE)
_IDENTIFIER_RE = re.compile(rf"^({_NAME})/({_NAME})$")

_ZIP_MAGIC = b"PK"
_ARCHIVE_HEADERS = {"Accept": "application/zip, application/octet-stream, */*"}


@dataclass(frozen=True)
class RepositoryRef:
    """Owner/repository pair identifying a public GitHub repository."""

    owner: str
    repo: str

    def archive_urls(self) -> List[str]:
        """Default-branch zipball first, then the main and master branch archives."""
        base = f"https://github.com/{self.owner}/{self.repo}/archive/refs/heads"
        return [
            f"https://api.github.com/repos/{self.owner}/{self.repo}/zipball",
            f"{base}/main.zip",
            f"{base}/master.zip",
        ]

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repository(value: str) -> RepositoryRef:
    """Parse ``owner/repo`` or a github.com repository URL."""
    cleaned = value.strip().split("?", 1)[0].split("#", 1)[0].rstrip("/")
    match = _GITHUB_URL_RE.match(cleaned) or _IDENTIFIER_RE.match(cleaned)
    if not match:
        raise InvalidRepositoryError(f"Invalid GitHub repository identifier: {value!r}")
    owner, repo = match.group(1), match.group(2)
    if repo.lower().endswith(".git"):
        repo = repo[:-4]
    if owner in {".", ".."} or repo in {"", ".", ".."}:
        raise InvalidRepositoryError(f"Invalid GitHub repository identifier: {value!r}")
    return RepositoryRef(owner=owner, repo=repo)


def looks_like_repository(value: str) -> bool:
    try:
        parse_repository(value)
    except InvalidRepositoryError:
        return False
    return True


def is_zip_payload(payload: bytes) -> bool:
    return bool(payload) and payload.startswith(_ZIP_MAGIC)


class GithubArchiveSource:
    """Downloads a repository archive through direct and relayed URLs."""

    def __init__(
        self,
        fetcher: Fetcher = fetch,
        *,
        relays: Sequence[str] = DEFAULT_RELAYS,
        direct: bool = True,
        timeout: Optional[float] = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.relays = list(relays)
        self.direct = direct
        self.timeout = timeout
        self.logger = logger or get_logger("acquisition.github")

    def attempts(self, ref: RepositoryRef) -> List[Attempt[bytes]]:
        attempts: List[Attempt[bytes]] = []
        for archive_url in ref.archive_urls():
            for label, url in route_urls(archive_url, self.relays, direct=self.direct):
                attempts.append(Attempt(name=f"{archive_url} ({label})", run=partial(self._download, url)))
        return attempts

    def fetch_archive(self, identifier: str | RepositoryRef) -> bytes:
        """Return archive bytes for ``identifier``; raises AcquisitionError when exhausted."""
        ref = identifier if isinstance(identifier, RepositoryRef) else parse_repository(identifier)
        self.logger.info("Fetching archive for %s", ref)
        strategy: AcquisitionStrategy[bytes] = AcquisitionStrategy(
            self.attempts(ref),
            timeout=self.timeout,
            accept=is_zip_payload,
            description=f"repository {ref}",
            logger=self.logger,
        )
        payload = strategy.run()
        self.logger.info("Fetched %d bytes for %s", len(payload), ref)
        return payload

    def _download(self, url: str, timeout: Optional[float]) -> bytes:
        return self.fetcher(url, headers=_ARCHIVE_HEADERS, timeout=timeout)


__all__ = [
    "GithubArchiveSource",
    "RepositoryRef",
    "is_zip_payload",
    "looks_like_repository",
    "parse_repository",
]
