"""Remote and uploaded content acquisition."""

from .base import AcquisitionStrategy, Attempt
from .files import classify_upload, extract_mhtml_html
from .github import GithubArchiveSource, RepositoryRef, looks_like_repository, parse_repository
from .http import FetchError, fetch, route_urls
from .page import PageSource, RenderServiceRenderer, validate_url

__all__ = [
    "AcquisitionStrategy",
    "Attempt",
    "FetchError",
    "GithubArchiveSource",
    "PageSource",
    "RenderServiceRenderer",
    "RepositoryRef",
    "classify_upload",
    "extract_mhtml_html",
    "fetch",
    "looks_like_repository",
    "parse_repository",
    "route_urls",
    "validate_url",
]
