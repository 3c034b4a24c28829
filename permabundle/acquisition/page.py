"""Live page acquisition for URL mode."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import quote, urljoin, urlparse

from ..config import DEFAULT_RELAYS
from ..errors import AcquisitionError, InvalidUrlError
from ..logging import get_logger
from ..markup import IMG_TAG_RE, LINK_TAG_RE, parse_attributes, stylesheet_href
from .base import AcquisitionStrategy, Attempt
from .http import FetchError, Fetcher, fetch, route_urls

Renderer = Callable[[str, Optional[float]], str]

_HTML_HEADERS = {"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"}
_CSS_HEADERS = {"Accept": "text/css,*/*;q=0.1"}
_RESOURCE_HINTS = {"preload", "prefetch", "dns-prefetch", "preconnect"}
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)
_SRC_ATTR_RE = re.compile(r"""(\bsrc\s*=\s*)(?:"([^"]*)"|'([^']*)'|([^\s>"']+))""", re.IGNORECASE)


def validate_url(url: str) -> str:
    """Return the stripped URL when it is an absolute http(s) URL."""
    cleaned = url.strip()
    parsed = urlparse(cleaned)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidUrlError(f"Invalid URL format: {url!r}")
    return cleaned


def decode_body(payload: bytes) -> str:
    return payload.decode("utf-8-sig", errors="replace")


def strip_resource_hints(html: str) -> str:
    """Drop resource-hint links and font stylesheet links from rendered markup."""

    def _filter(match: re.Match[str]) -> str:
        attributes = parse_attributes(match.group(0))
        rel_tokens = set(attributes.get("rel", "").lower().split())
        if rel_tokens & _RESOURCE_HINTS:
            return ""
        if "fonts" in attributes.get("href", ""):
            return ""
        return match.group(0)

    return LINK_TAG_RE.sub(_filter, html)


def absolutize_images(html: str, base_url: str) -> str:
    """Rewrite relative ``<img src>`` values against ``base_url``."""

    def _rewrite_src(match: re.Match[str]) -> str:
        value = next(group for group in match.groups()[1:] if group is not None)
        if not value or value.startswith(("http:", "https:", "data:", "//")):
            return match.group(0)
        return f'{match.group(1)}"{urljoin(base_url, value)}"'

    def _rewrite_tag(match: re.Match[str]) -> str:
        return _SRC_ATTR_RE.sub(_rewrite_src, match.group(0), count=1)

    return IMG_TAG_RE.sub(_rewrite_tag, html)


class RenderServiceRenderer:
    """Asks remote rendering services for fully rendered markup.

    ``services`` are URL templates containing ``{url}``, which receives the
    percent-encoded page URL. Services are tried in order.
    """

    def __init__(
        self,
        services: Sequence[str],
        fetcher: Fetcher = fetch,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.services = list(services)
        self.fetcher = fetcher
        self.logger = logger or get_logger("acquisition.render")

    def __call__(self, url: str, timeout: Optional[float]) -> str:
        encoded = quote(url, safe="")
        attempts = [
            Attempt(
                name=service.split("?", 1)[0],
                run=partial(self._render, service.format(url=encoded)),
            )
            for service in self.services
        ]
        strategy: AcquisitionStrategy[str] = AcquisitionStrategy(
            attempts,
            timeout=timeout,
            accept=lambda html: "<html" in html.lower(),
            description=f"rendered page {url}",
            logger=self.logger,
        )
        return strategy.run()

    def _render(self, service_url: str, timeout: Optional[float]) -> str:
        return decode_body(self.fetcher(service_url, headers=_HTML_HEADERS, timeout=timeout))


class PageSource:
    """Fetches a page's markup, preferring a renderer over raw fetches.

    Raw markup is enhanced by inlining its stylesheets, each fetched through
    its own relay chain, and by making relative image sources absolute.
    """

    def __init__(
        self,
        fetcher: Fetcher = fetch,
        renderer: Renderer | None = None,
        *,
        relays: Sequence[str] = DEFAULT_RELAYS,
        direct: bool = True,
        timeout: Optional[float] = 30.0,
        max_workers: int = 4,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.renderer = renderer
        self.relays = list(relays)
        self.direct = direct
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.logger = logger or get_logger("acquisition.page")

    def fetch_page(self, url: str) -> str:
        """Return the best available markup for ``url``."""
        target = validate_url(url)
        attempts: List[Attempt[str]] = []
        if self.renderer is not None:
            attempts.append(Attempt(name="renderer", run=partial(self._rendered, target)))
        # Relays first, then the plain URL.
        for label, route in route_urls(target, self.relays, direct=self.direct, direct_first=False):
            attempts.append(Attempt(name=label, run=partial(self._raw, target, route)))

        strategy: AcquisitionStrategy[str] = AcquisitionStrategy(
            attempts,
            timeout=self.timeout,
            accept=lambda html: bool(html.strip()),
            description=f"page {target}",
            logger=self.logger,
        )
        return strategy.run()

    def enhance(self, html: str, base_url: str) -> str:
        """Inline fetchable stylesheets and absolutize image sources."""
        return absolutize_images(self.inline_stylesheets(html, base_url), base_url)

    def inline_stylesheets(self, html: str, base_url: str) -> str:
        links: List[Tuple[str, str]] = []
        for match in LINK_TAG_RE.finditer(html):
            href = stylesheet_href(match.group(0))
            if href:
                links.append((match.group(0), urljoin(base_url, href)))
        if not links:
            return html

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            contents = list(pool.map(self.fetch_stylesheet, [css_url for _, css_url in links]))

        fetched = [
            (tag, css_url, css)
            for (tag, css_url), css in zip(links, contents)
            if css is not None
        ]
        if not fetched:
            return html

        for tag, _, _ in fetched:
            html = html.replace(tag, "", 1)
        block = "<style>\n" + "\n\n".join(
            f"/* Fetched from: {css_url} */\n{css}" for _, css_url, css in fetched
        ) + "\n</style>"
        self.logger.debug("Inlined %d of %d stylesheets", len(fetched), len(links))

        head_close = _HEAD_CLOSE_RE.search(html)
        if head_close is None:
            return block + html
        return html[: head_close.start()] + block + html[head_close.start():]

    def fetch_stylesheet(self, css_url: str) -> Optional[str]:
        """Return stylesheet text, or None when every route failed."""
        attempts = [
            Attempt(name=label, run=partial(self._stylesheet, route))
            for label, route in route_urls(css_url, self.relays, direct=self.direct, direct_first=False)
        ]
        strategy: AcquisitionStrategy[str] = AcquisitionStrategy(
            attempts,
            timeout=self.timeout,
            accept=lambda css: bool(css.strip()),
            description=f"stylesheet {css_url}",
            logger=self.logger,
        )
        try:
            return strategy.run()
        except AcquisitionError as exc:
            self.logger.warning("Skipping stylesheet %s: %s", css_url, exc)
            return None

    def _rendered(self, url: str, timeout: Optional[float]) -> str:
        if self.renderer is None:
            raise FetchError("no renderer configured")
        html = self.renderer(url, timeout)
        if "<html" not in html.lower():
            raise FetchError("renderer returned no HTML document")
        return strip_resource_hints(html)

    def _raw(self, url: str, route: str, timeout: Optional[float]) -> str:
        html = decode_body(self.fetcher(route, headers=_HTML_HEADERS, timeout=timeout))
        if not html.strip():
            return html
        return self.enhance(html, url)

    def _stylesheet(self, route: str, timeout: Optional[float]) -> str:
        return decode_body(self.fetcher(route, headers=_CSS_HEADERS, timeout=timeout))


__all__ = [
    "PageSource",
    "RenderServiceRenderer",
    "Renderer",
    "absolutize_images",
    "strip_resource_hints",
    "validate_url",
]
