"""Single-file HTML synthesis from an asset bundle."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

from jinja2 import TemplateError

from .errors import EmptyBundleError, NoContentError
from .failsafe import (
    SCRIPT_SUFFIXES,
    STYLE_SUFFIXES,
    assets_with_suffix,
    build_placeholder_document,
    in_excluded_dir,
)
from .logging import get_logger
from .markup import (
    DEPENDENCY_TAG_RE,
    extract_title,
    is_external,
    parse_attributes,
    reference_from_tag,
    split_regions,
    strip_stray_tags,
    strip_title,
)
from .models import AssetBundle, Reference
from .postproc.minify import HtmlOptimizer, normalize_quotes as _normalize_quotes
from .rendering import render
from .resolver import ReferenceResolver

HTML_SUFFIXES = (".html", ".htm")
ENTRY_NAME = "index.html"


class HtmlSynthesizer:
    """Produces one self-contained, minified HTML document from a bundle.

    The entry document's stylesheet and script references are replaced with
    inline blocks; remaining stylesheets and scripts are appended once unless
    their content already appears in the inlined markup.
    """

    def __init__(
        self,
        resolver: ReferenceResolver | None = None,
        optimizer: HtmlOptimizer | None = None,
        *,
        on_empty_bundle: str = "fail",
        normalize_quotes: bool = False,
        exclude_dirs: Sequence[str] = ("node_modules",),
        skip_minified_scripts: bool = True,
        default_title: str = "Deployed Project",
        logger: logging.Logger | None = None,
    ) -> None:
        if on_empty_bundle not in {"fail", "placeholder"}:
            raise ValueError(f"Unknown empty-bundle policy: {on_empty_bundle}")
        self.resolver = resolver or ReferenceResolver()
        self.optimizer = optimizer or HtmlOptimizer()
        self.on_empty_bundle = on_empty_bundle
        self.normalize_quotes = normalize_quotes
        self.exclude_dirs = tuple(exclude_dirs)
        self.skip_minified_scripts = skip_minified_scripts
        self.default_title = default_title
        self.logger = logger or get_logger("synthesizer")

    def select_entry(self, bundle: AssetBundle) -> Optional[str]:
        """Return the entry document path, preferring paths ending in index.html."""
        html_paths = [path for path in bundle.paths() if path.lower().endswith(HTML_SUFFIXES)]
        if not html_paths:
            return None
        included = [path for path in html_paths if not in_excluded_dir(path, self.exclude_dirs)]
        for candidates in (included, html_paths):
            for path in candidates:
                if path.lower().endswith(ENTRY_NAME):
                    return path
        return (included or html_paths)[0]

    def synthesize(self, bundle: AssetBundle, *, normalize_quotes: Optional[bool] = None) -> str:
        """Return the final document for ``bundle``."""
        return self.finalize(self.assemble(bundle), normalize_quotes=normalize_quotes)

    def assemble(self, bundle: AssetBundle) -> str:
        """Return the unoptimized document for ``bundle``."""
        if not len(bundle):
            if self.on_empty_bundle == "fail":
                raise EmptyBundleError("Cannot synthesize a document from an empty bundle")
            self.logger.warning("Bundle is empty; producing placeholder document")
            return self._placeholder(bundle)

        entry_path = self.select_entry(bundle)
        if entry_path is None:
            self.logger.info("No HTML entry among %d files; producing placeholder document", len(bundle))
            return self._placeholder(bundle)

        self.logger.debug("Using %s as entry document", entry_path)
        document = bundle.get(entry_path) or ""
        head, body = split_regions(document)
        head = self.inline_references(head, bundle)
        body = self.inline_references(body, bundle)

        styles = self._unreferenced(bundle, STYLE_SUFFIXES, head, body)
        scripts = self._unreferenced(bundle, SCRIPT_SUFFIXES, head, body)
        if self.skip_minified_scripts:
            scripts = [asset for asset in scripts if ".min." not in asset["path"]]
        self.logger.debug(
            "Appending %d unreferenced stylesheets and %d scripts", len(styles), len(scripts)
        )

        return render(
            "document.html.j2",
            title=extract_title(document) or self.default_title,
            styles=styles,
            head=strip_title(strip_stray_tags(head)).strip(),
            body=strip_stray_tags(body).strip(),
            scripts=scripts,
        )

    def finalize(self, html: str, *, normalize_quotes: Optional[bool] = None) -> str:
        """Apply optimisation and, when enabled, quote normalisation.

        ``normalize_quotes`` overrides the instance setting for one call.
        """
        optimized = self.optimizer.optimize(html)
        if normalize_quotes is None:
            normalize_quotes = self.normalize_quotes
        if normalize_quotes:
            optimized = _normalize_quotes(optimized)
        return optimized

    def inline_references(self, markup: str, bundle: AssetBundle) -> str:
        """Replace every resolvable link/script tag in ``markup`` with inline content."""

        def _replace(match: re.Match[str]) -> str:
            tag = match.group(0)
            reference = reference_from_tag(tag)
            if reference is None:
                return tag
            if is_external(reference.value):
                self.logger.debug("Keeping external reference %s", reference.value)
                return tag
            path = self.resolver.resolve(reference.value, bundle)
            if path is None:
                self.logger.warning("Could not resolve %s reference %s", reference.kind, reference.value)
                return tag
            return _inline_block(reference, path, bundle.get(path) or "")

        return DEPENDENCY_TAG_RE.sub(_replace, markup)

    def _unreferenced(
        self,
        bundle: AssetBundle,
        suffixes: Sequence[str],
        head: str,
        body: str,
    ) -> List[Dict[str, str]]:
        return [
            asset
            for asset in assets_with_suffix(bundle, suffixes, self.exclude_dirs)
            if asset["content"] not in head and asset["content"] not in body
        ]

    def _placeholder(self, bundle: AssetBundle) -> str:
        try:
            return build_placeholder_document(
                bundle, title=self.default_title, exclude_dirs=self.exclude_dirs
            )
        except TemplateError as exc:
            raise NoContentError(f"Placeholder document could not be rendered: {exc}") from exc


def _inline_block(reference: Reference, path: str, content: str) -> str:
    opening_attributes = parse_attributes(reference.tag.split(">", 1)[0] + ">")
    if reference.kind == Reference.STYLESHEET:
        media = opening_attributes.get("media", "").strip()
        opening = f'<style media="{media}">' if media and media != "all" else "<style>"
        return f"{opening}\n/* {path} */\n{content}\n</style>"
    script_type = opening_attributes.get("type", "").strip()
    opening = f'<script type="{script_type}">' if script_type else "<script>"
    return f"{opening}\n// {path}\n{content}\n</script>"


def synthesize(bundle: AssetBundle) -> str:
    """Synthesize ``bundle`` with default settings."""
    return HtmlSynthesizer().synthesize(bundle)


__all__ = ["HtmlSynthesizer", "synthesize"]
