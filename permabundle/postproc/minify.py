"""Text-level minification for synthesized documents."""

from __future__ import annotations

import re
from typing import Callable, Sequence, Tuple

_HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_CSS_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
# Not token aware: "//" inside string literals is stripped too. Scheme
# separators (https://) and quoted protocol-relative values ("//cdn") are kept.
_LINE_COMMENT_RE = re.compile(r"""(?<![:"'=])//.*""")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")
_INTER_TAG_WHITESPACE_RE = re.compile(r">\s+<")


class HtmlOptimizer:
    """Strips comments and redundant whitespace from an HTML document.

    Passes are textual and run in a fixed order; comment removal must come
    before whitespace collapsing. The whole sequence repeats until the output
    stops changing, so ``optimize`` is idempotent and never grows its input.
    """

    PASSES: Sequence[Tuple[str, Callable[[str], str]]] = (
        ("html-comments", lambda text: _HTML_COMMENT_RE.sub("", text)),
        ("css-comments", lambda text: _CSS_COMMENT_RE.sub("", text)),
        ("line-comments", lambda text: _LINE_COMMENT_RE.sub("", text)),
        ("whitespace", lambda text: _WHITESPACE_RUN_RE.sub(" ", text)),
        ("inter-tag", lambda text: _INTER_TAG_WHITESPACE_RE.sub("><", text)),
        ("trim", lambda text: text.strip()),
    )

    def optimize(self, html: str) -> str:
        current = html
        while True:
            result = current
            for _, transform in self.PASSES:
                result = transform(result)
            if result == current:
                return result
            current = result


def normalize_quotes(html: str) -> str:
    """Replace every double quote with a single quote."""
    return html.replace('"', "'")


def optimize(html: str) -> str:
    """Return the minified form of ``html``."""
    return HtmlOptimizer().optimize(html)


__all__ = ["HtmlOptimizer", "normalize_quotes", "optimize"]
