"""Shared helper utilities for analyzer implementations."""

from __future__ import annotations

import json
from typing import Dict, List, Optional

from ..models import AssetBundle

_MANIFEST_NAME = "package.json"


def find_package_manifest(bundle: AssetBundle) -> Optional[str]:
    """Return the shallowest package.json path in the bundle, if any."""
    candidates = [
        path
        for path in bundle.paths()
        if path == _MANIFEST_NAME or path.endswith(f"/{_MANIFEST_NAME}")
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda path: path.count("/"))


def load_node_dependencies(bundle: AssetBundle) -> Dict[str, List[str]]:
    """Return Node.js dependencies separated into runtime/dev lists."""
    empty: Dict[str, List[str]] = {"dependencies": [], "devDependencies": []}
    manifest_path = find_package_manifest(bundle)
    if manifest_path is None:
        return empty

    try:
        data = json.loads(bundle.get(manifest_path) or "")
    except json.JSONDecodeError:
        return empty
    if not isinstance(data, dict):
        return empty

    def _extract(key: str) -> List[str]:
        deps = data.get(key, {})
        if isinstance(deps, dict):
            return sorted(deps.keys())
        return []

    return {
        "dependencies": _extract("dependencies"),
        "devDependencies": _extract("devDependencies"),
    }


__all__ = ["find_package_manifest", "load_node_dependencies"]
