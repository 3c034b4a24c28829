"""Resolution of declared asset references against an asset bundle."""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple

from .markup import is_external
from .models import AssetBundle

_FIRST_SEGMENT_RE = re.compile(r"^[^/]*/")

MatchRule = Callable[[str, str], bool]


def _strip_first_segment(path: str, reference: str) -> bool:
    return _FIRST_SEGMENT_RE.sub("", path, count=1) == reference


def _ends_with(path: str, reference: str) -> bool:
    return path.endswith(reference)


def _contains_without_dot_slash(path: str, reference: str) -> bool:
    trimmed = reference[2:] if reference.startswith("./") else reference
    return bool(trimmed) and trimmed in path


def _contains_without_slashes(path: str, reference: str) -> bool:
    trimmed = reference.replace("/", "")
    return bool(trimmed) and trimmed in path


class ReferenceResolver:
    """Maps an href/src value to at most one bundle path.

    Rules run in order and the first rule with any matching key wins; within
    a rule, keys are tried in bundle order. Later rules are strictly more
    permissive, so their order must not change.
    """

    RULES: Sequence[Tuple[str, MatchRule]] = (
        ("strip-first-segment", _strip_first_segment),
        ("suffix", _ends_with),
        ("contains-relative", _contains_without_dot_slash),
        ("contains-flattened", _contains_without_slashes),
    )

    def resolve(self, reference: str, bundle: AssetBundle) -> Optional[str]:
        """Return the bundle path that ``reference`` points at, or None."""
        match = self.explain(reference, bundle)
        return match[0] if match else None

    def explain(self, reference: str, bundle: AssetBundle) -> Optional[Tuple[str, str]]:
        """Return ``(path, rule name)`` for the winning match, or None."""
        cleaned = _clean_reference(reference)
        if not cleaned or is_external(cleaned) or cleaned.startswith("data:"):
            return None

        paths: List[str] = bundle.paths()
        for name, rule in self.RULES:
            for path in paths:
                if rule(path, cleaned):
                    return path, name
        return None


def _clean_reference(reference: str) -> str:
    cleaned = reference.strip()
    for separator in ("?", "#"):
        cleaned = cleaned.split(separator, 1)[0]
    return cleaned


def resolve(reference: str, bundle: AssetBundle) -> Optional[str]:
    """Resolve ``reference`` against ``bundle`` with the default rule order."""
    return ReferenceResolver().resolve(reference, bundle)


__all__ = ["ReferenceResolver", "resolve"]
