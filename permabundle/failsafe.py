"""Placeholder document for bundles that carry no markup entry."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, List, Sequence

from .models import AssetBundle
from .rendering import render

STYLE_SUFFIXES = (".css",)
SCRIPT_SUFFIXES = (".js",)


def build_placeholder_document(
    bundle: AssetBundle,
    *,
    title: str = "Deployed Project",
    exclude_dirs: Sequence[str] = ("node_modules",),
) -> str:
    """Return a skeleton document listing every bundle path.

    Stylesheets and scripts outside excluded directories are embedded so the
    page still carries the project's code. Rendering has no failure mode.
    """
    return render(
        "placeholder.html.j2",
        title=title,
        paths=bundle.paths(),
        styles=assets_with_suffix(bundle, STYLE_SUFFIXES, exclude_dirs),
        scripts=assets_with_suffix(bundle, SCRIPT_SUFFIXES, exclude_dirs),
    )


def assets_with_suffix(
    bundle: AssetBundle,
    suffixes: Sequence[str],
    exclude_dirs: Sequence[str],
) -> List[Dict[str, str]]:
    """Return ``{"path", "content"}`` records for matching, non-excluded files."""
    return [
        {"path": path, "content": content}
        for path, content in bundle.items()
        if path.lower().endswith(tuple(suffixes)) and not in_excluded_dir(path, exclude_dirs)
    ]


def in_excluded_dir(path: str, exclude_dirs: Sequence[str]) -> bool:
    parents = PurePosixPath(path).parts[:-1]
    return any(part in exclude_dirs for part in parents)


__all__ = ["assets_with_suffix", "build_placeholder_document", "in_excluded_dir"]
