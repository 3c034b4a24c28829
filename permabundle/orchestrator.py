"""Pipeline orchestration for the bundle and deploy flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .acquisition.files import (
    ARCHIVE_FILE_SUFFIXES,
    HTML_FILE_SUFFIXES,
    MHTML_FILE_SUFFIXES,
    classify_upload,
    decode_text,
    extract_mhtml_html,
)
from .acquisition.github import GithubArchiveSource, looks_like_repository
from .acquisition.page import PageSource, RenderServiceRenderer
from .analyzers import Analyzer, discover_analyzers
from .archive import ArchiveReader
from .config import PermabundleConfig, default_config, load_config
from .deploy import DeployClient, DeployResult, ensure_within_limit
from .errors import BundleError, DeployError
from .logging import get_logger
from .models import AssetBundle, BundleResult, ProjectType, SourceKind, Signal
from .resolver import ReferenceResolver
from .synthesizer import HtmlSynthesizer

# Quote normalisation applies to markup taken as-is, not to synthesized archives.
_QUOTE_DEFAULTS = {
    SourceKind.ARCHIVE: False,
    SourceKind.GITHUB: False,
    SourceKind.URL: True,
    SourceKind.FILE: True,
}

_UPLOAD_SUFFIXES = HTML_FILE_SUFFIXES + MHTML_FILE_SUFFIXES + ARCHIVE_FILE_SUFFIXES


@dataclass
class DeployOutcome:
    """Result of bundling and submitting a document."""

    bundle: BundleResult
    links: List[str] = field(default_factory=list)


class Orchestrator:
    """Coordinates acquisition, synthesis and deployment for each source kind."""

    def __init__(
        self,
        config: PermabundleConfig | None = None,
        *,
        reader: ArchiveReader | None = None,
        synthesizer: HtmlSynthesizer | None = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
        github_source: GithubArchiveSource | None = None,
        page_source: PageSource | None = None,
        deploy_client: DeployClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or default_config()
        bundle_cfg = self.config.bundle
        acquisition_cfg = self.config.acquisition
        deploy_cfg = self.config.deploy

        self.reader = reader or ArchiveReader(
            bundle_cfg.text_suffixes,
            max_workers=bundle_cfg.max_workers,
            allow_empty=bundle_cfg.on_empty_bundle == "placeholder",
        )
        self.synthesizer = synthesizer or HtmlSynthesizer(
            ReferenceResolver(),
            on_empty_bundle=bundle_cfg.on_empty_bundle,
            exclude_dirs=bundle_cfg.exclude_dirs,
            skip_minified_scripts=bundle_cfg.skip_minified_scripts,
            default_title=bundle_cfg.default_title,
        )
        self.analyzers = (
            list(analyzers) if analyzers is not None else discover_analyzers(bundle_cfg.analyzers)
        )
        self.github_source = github_source or GithubArchiveSource(
            relays=acquisition_cfg.relays,
            direct=acquisition_cfg.direct,
            timeout=acquisition_cfg.timeout,
        )
        renderer = None
        if acquisition_cfg.render_services:
            renderer = RenderServiceRenderer(acquisition_cfg.render_services)
        self.page_source = page_source or PageSource(
            renderer=renderer,
            relays=acquisition_cfg.relays,
            direct=acquisition_cfg.direct,
            timeout=acquisition_cfg.timeout,
        )
        self.deploy_client = deploy_client or DeployClient(
            deploy_cfg.endpoint, timeout=deploy_cfg.timeout
        )
        self.logger = logger or get_logger("orchestrator")

    @classmethod
    def from_config_path(cls, config_path: str | Path | None = None) -> "Orchestrator":
        """Build an orchestrator from ``.permabundle.yml`` (defaults to the cwd)."""
        path = Path(config_path) if config_path is not None else Path.cwd()
        return cls(load_config(path))

    def bundle_archive(self, data: bytes, *, source: SourceKind = SourceKind.ARCHIVE) -> BundleResult:
        """Synthesize one document from ZIP archive bytes."""
        self.logger.info("Bundling %s archive (%d bytes)", source.value, len(data))
        bundle = self.reader.extract_text_assets(data)
        signals = self._execute_analyzers(bundle)
        html = self.synthesizer.synthesize(bundle, normalize_quotes=self._normalize_quotes(source))
        result = BundleResult(
            html=html,
            source=source,
            project_type=_project_type(signals),
            entry_path=self.synthesizer.select_entry(bundle),
            signals=signals,
        )
        self.logger.info(
            "Synthesized %.2fKB from %d files (entry: %s)",
            result.size_kb,
            len(bundle),
            result.entry_path or "placeholder",
        )
        return result

    def bundle_github(self, identifier: str) -> BundleResult:
        """Download a public repository archive and synthesize it."""
        payload = self.github_source.fetch_archive(identifier)
        return self.bundle_archive(payload, source=SourceKind.GITHUB)

    def bundle_url(self, url: str) -> BundleResult:
        """Capture a live page and optimize its markup."""
        html = self.page_source.fetch_page(url)
        return self.bundle_markup(html, source=SourceKind.URL)

    def bundle_file(self, filename: str, payload: bytes) -> BundleResult:
        """Bundle an uploaded ``.html``, ``.mhtml`` or ``.zip`` file."""
        kind = classify_upload(filename)
        self.logger.info("Bundling uploaded %s file %s", kind, filename)
        if kind == "archive":
            return self.bundle_archive(payload)
        if kind == "mhtml":
            html = extract_mhtml_html(payload)
        else:
            html = decode_text(payload)
        return self.bundle_markup(html, source=SourceKind.FILE)

    def bundle_markup(self, html: str, *, source: SourceKind = SourceKind.FILE) -> BundleResult:
        """Optimize a complete HTML document without synthesis."""
        optimized = self.synthesizer.finalize(html, normalize_quotes=self._normalize_quotes(source))
        return BundleResult(html=optimized, source=source)

    def bundle_source(self, source: str) -> BundleResult:
        """Bundle a local file path, GitHub identifier or page URL."""
        path = Path(source).expanduser()
        if path.is_file():
            return self.bundle_file(path.name, path.read_bytes())
        if path.suffix.lower() in _UPLOAD_SUFFIXES and not source.startswith(("http://", "https://")):
            raise FileNotFoundError(f"File not found: {source}")
        if looks_like_repository(source):
            return self.bundle_github(source)
        if source.strip().lower().startswith(("http://", "https://")):
            return self.bundle_url(source)
        raise BundleError(
            f"Cannot determine how to bundle {source!r}; "
            "expected a file path, owner/repo identifier or http(s) URL"
        )

    def check_size(self, html: str) -> float:
        """Return the size in KB, raising SizeExceededError above the ceiling."""
        return ensure_within_limit(html, self.config.deploy.max_size_kb)

    def deploy(self, html: str) -> DeployResult:
        """Submit ``html`` after the size check; unsuccessful responses raise DeployError."""
        size_kb = self.check_size(html)
        self.logger.debug("Artifact size %.2fKB within %.0fKB limit", size_kb, self.config.deploy.max_size_kb)
        result = self.deploy_client.submit(html)
        if not result.success:
            raise DeployError(result.error or "Deployment failed")
        self.logger.info("Deployed to %d links", len(result.links))
        return result

    def deploy_bundle(self, result: BundleResult) -> DeployOutcome:
        deployed = self.deploy(result.html)
        return DeployOutcome(bundle=result, links=deployed.links)

    def _normalize_quotes(self, source: SourceKind) -> bool:
        configured = self.config.bundle.normalize_quotes
        if configured is not None:
            return configured
        return _QUOTE_DEFAULTS[source]

    def _execute_analyzers(self, bundle: AssetBundle) -> List[Signal]:
        signals: List[Signal] = []
        for analyzer in self.analyzers:
            if not analyzer.supports(bundle):
                continue
            self.logger.debug("Running analyzer %s", analyzer.__class__.__name__)
            signals.extend(analyzer.analyze(bundle))
        return signals


def _project_type(signals: Sequence[Signal]) -> Optional[ProjectType]:
    for signal in signals:
        if signal.name == "project.type":
            return ProjectType(signal.value)
    return None


__all__ = ["DeployOutcome", "Orchestrator"]
