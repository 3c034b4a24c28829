"""Post-processing of synthesized documents."""

from .minify import HtmlOptimizer, normalize_quotes, optimize

__all__ = ["HtmlOptimizer", "normalize_quotes", "optimize"]
