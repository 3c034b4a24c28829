"""Core data models shared across permabundle components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class ProjectType(str, Enum):
    """Advisory project kind derived from an asset bundle."""

    NEXT = "next"
    REACT = "react"
    VUE = "vue"
    VITE = "vite"
    STATIC = "static"


class SourceKind(str, Enum):
    """Acquisition path that produced the markup being bundled."""

    ARCHIVE = "archive"
    GITHUB = "github"
    URL = "url"
    FILE = "file"


@dataclass(frozen=True)
class AssetBundle:
    """Ordered path -> text mapping extracted from a project's files.

    Paths are archive-relative and slash separated. The bundle is treated as
    read-only once built; callers should construct a new one instead of
    mutating ``files``.
    """

    files: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_pairs(cls, pairs: Mapping[str, str] | List[Tuple[str, str]]) -> "AssetBundle":
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        return cls(files={path: content for path, content in items})

    def paths(self) -> List[str]:
        return list(self.files)

    def items(self) -> List[Tuple[str, str]]:
        return list(self.files.items())

    def get(self, path: str) -> Optional[str]:
        return self.files.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __iter__(self) -> Iterator[str]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class Reference:
    """A stylesheet or script dependency declared by the entry document."""

    kind: str
    value: str
    tag: str

    STYLESHEET = "stylesheet"
    SCRIPT = "script"


@dataclass
class Signal:
    """Structured fact emitted by analyzers for informational use."""

    name: str
    value: str
    source: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BundleResult:
    """Synthesized document plus the facts gathered while producing it."""

    html: str
    source: SourceKind
    project_type: Optional[ProjectType] = None
    entry_path: Optional[str] = None
    signals: List[Signal] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        return len(self.html.encode("utf-8"))

    @property
    def size_kb(self) -> float:
        return self.size_bytes / 1024
