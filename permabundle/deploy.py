"""Deploy endpoint client and artifact size ceiling."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .config import DEFAULT_DEPLOY_ENDPOINT
from .errors import DeployError, SizeExceededError
from .logging import get_logger

DEFAULT_MAX_SIZE_KB = 3000.0


@dataclass
class DeployResult:
    """Response of the deploy endpoint."""

    success: bool
    links: List[str] = field(default_factory=list)
    error: Optional[str] = None


def measure_kb(html: str) -> float:
    """Return the UTF-8 size of ``html`` in kilobytes."""
    return len(html.encode("utf-8")) / 1024


def ensure_within_limit(html: str, max_size_kb: float = DEFAULT_MAX_SIZE_KB) -> float:
    """Return the artifact size, raising SizeExceededError above ``max_size_kb``."""
    size_kb = measure_kb(html)
    if size_kb > max_size_kb:
        raise SizeExceededError(size_kb, max_size_kb)
    return size_kb


class DeployClient:
    """Submits synthesized documents to the deploy endpoint as JSON."""

    def __init__(
        self,
        endpoint: str = DEFAULT_DEPLOY_ENDPOINT,
        *,
        timeout: Optional[float] = 60.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.logger = logger or get_logger("deploy")

    def submit(self, html: str) -> DeployResult:
        """POST ``html`` and return the parsed response.

        Transport failures and non-success statuses raise DeployError. A
        response with ``success: false`` is returned as-is so callers decide
        how to report it.
        """
        data = json.dumps({"html": html}).encode("utf-8")
        request = Request(
            self.endpoint,
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        self.logger.info("Submitting %.2fKB to %s", measure_kb(html), self.endpoint)

        try:
            with urlopen(request, timeout=self.timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            raise DeployError(f"Deployment failed with status: {exc.code}") from exc
        except URLError as exc:
            raise DeployError(f"Deployment failed: {exc.reason}") from exc
        except (TimeoutError, OSError) as exc:
            raise DeployError(f"Deployment failed: {exc}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DeployError("Deploy endpoint returned invalid JSON") from exc

        result = _parse_result(payload)
        self.logger.debug("Deploy endpoint answered success=%s with %d links", result.success, len(result.links))
        return result


def _parse_result(payload: Any) -> DeployResult:
    if not isinstance(payload, dict):
        raise DeployError("Deploy endpoint returned an unexpected payload")
    links = payload.get("links") or []
    if isinstance(links, str):
        links = [links]
    if not isinstance(links, list):
        raise DeployError("Deploy endpoint returned malformed links")
    reason = payload.get("error") or payload.get("message")
    return DeployResult(
        success=bool(payload.get("success")),
        links=[str(link) for link in links],
        error=str(reason) if reason else None,
    )


__all__ = [
    "DEFAULT_MAX_SIZE_KB",
    "DeployClient",
    "DeployResult",
    "ensure_within_limit",
    "measure_kb",
]
