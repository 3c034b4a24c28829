"""Thin urllib wrapper used by every remote acquisition attempt."""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 permabundle"

Fetcher = Callable[..., bytes]


class FetchError(RuntimeError):
    """Raised when a single HTTP request fails or returns a non-success status."""


def fetch(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """GET ``url`` and return the response body."""
    request_headers: Dict[str, str] = {"User-Agent": USER_AGENT}
    if headers:
        request_headers.update(headers)
    request = Request(url, headers=request_headers, method="GET")
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            status = getattr(response, "status", 200)
            if status is not None and not 200 <= int(status) < 300:
                raise FetchError(f"{url} returned status {status}")
            return response.read()
    except HTTPError as exc:
        raise FetchError(f"{url} returned status {exc.code}") from exc
    except URLError as exc:
        raise FetchError(f"{url} failed: {exc.reason}") from exc
    except (TimeoutError, OSError) as exc:
        raise FetchError(f"{url} failed: {exc}") from exc


def route_urls(
    url: str,
    relays: Sequence[str],
    *,
    direct: bool = True,
    direct_first: bool = True,
) -> List[Tuple[str, str]]:
    """Return ``(label, url)`` pairs for reaching ``url`` directly and via relays.

    Relays are URL prefixes that take the percent-encoded target appended.
    """
    relayed = [(f"relay {relay}", f"{relay}{quote(url, safe='')}") for relay in relays]
    if not direct:
        return relayed
    direct_route = [("direct", url)]
    return direct_route + relayed if direct_first else relayed + direct_route


__all__ = ["FetchError", "Fetcher", "USER_AGENT", "fetch", "route_urls"]
