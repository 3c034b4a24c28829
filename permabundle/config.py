"""Configuration loading for permabundle (.permabundle.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".permabundle.yml"

DEFAULT_TEXT_SUFFIXES: tuple[str, ...] = (
    ".html",
    ".htm",
    ".css",
    ".js",
    ".json",
    ".txt",
    ".md",
    ".xml",
    ".svg",
    ".ts",
    ".tsx",
    ".jsx",
    ".vue",
    ".php",
)

DEFAULT_RELAYS: tuple[str, ...] = (
    "https://api.allorigins.win/raw?url=",
    "https://corsproxy.io/?",
)

DEFAULT_DEPLOY_ENDPOINT = "https://aoile-backend.onrender.com/deploy"

ENV_DEPLOY_ENDPOINT = "PERMABUNDLE_DEPLOY_ENDPOINT"
ENV_TIMEOUT = "PERMABUNDLE_TIMEOUT"
ENV_MAX_SIZE_KB = "PERMABUNDLE_MAX_SIZE_KB"

_EMPTY_BUNDLE_POLICIES = {"fail", "placeholder"}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BundleConfig:
    """Synthesis and optimisation settings."""

    on_empty_bundle: str = "fail"
    normalize_quotes: Optional[bool] = None
    text_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_TEXT_SUFFIXES))
    exclude_dirs: List[str] = field(default_factory=lambda: ["node_modules"])
    skip_minified_scripts: bool = True
    max_workers: int = 8
    default_title: str = "Deployed Project"
    analyzers: Optional[List[str]] = None


@dataclass
class AcquisitionConfig:
    """Remote fetch settings shared by the GitHub and URL sources."""

    timeout: float = 30.0
    direct: bool = True
    relays: List[str] = field(default_factory=lambda: list(DEFAULT_RELAYS))
    render_services: List[str] = field(default_factory=list)


@dataclass
class DeployConfig:
    """Deploy endpoint and artifact ceiling."""

    endpoint: str = DEFAULT_DEPLOY_ENDPOINT
    timeout: float = 60.0
    max_size_kb: float = 3000.0


@dataclass
class PermabundleConfig:
    """Represents the settings defined in .permabundle.yml."""

    root: Path
    bundle: BundleConfig = field(default_factory=BundleConfig)
    acquisition: AcquisitionConfig = field(default_factory=AcquisitionConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)


def load_config(config_path: Path) -> PermabundleConfig:
    """Load configuration from disk, applying environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = PermabundleConfig(
        root=root,
        bundle=_parse_bundle(_as_dict(data.get("bundle"))),
        acquisition=_parse_acquisition(_as_dict(data.get("acquisition"))),
        deploy=_parse_deploy(_as_dict(data.get("deploy"))),
    )
    _apply_env_overrides(config)
    return config


def default_config() -> PermabundleConfig:
    """Return defaults rooted at the current directory, with env overrides applied."""
    config = PermabundleConfig(root=Path.cwd())
    _apply_env_overrides(config)
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _parse_bundle(data: Dict[str, Any]) -> BundleConfig:
    config = BundleConfig()
    if not data:
        return config

    policy = _as_str(data.get("on_empty_bundle"))
    if policy is not None:
        policy = policy.strip().lower()
        if policy not in _EMPTY_BUNDLE_POLICIES:
            raise ConfigError(
                f"bundle.on_empty_bundle must be one of {sorted(_EMPTY_BUNDLE_POLICIES)}, got '{policy}'"
            )
        config.on_empty_bundle = policy

    if "normalize_quotes" in data:
        config.normalize_quotes = _as_bool(data.get("normalize_quotes"))

    suffixes = _as_str_list(data.get("text_suffixes"))
    if suffixes:
        config.text_suffixes = [_normalise_suffix(suffix) for suffix in suffixes]

    if "exclude_dirs" in data:
        config.exclude_dirs = _as_str_list(data.get("exclude_dirs"))

    skip_minified = _as_bool(data.get("skip_minified_scripts"))
    if skip_minified is not None:
        config.skip_minified_scripts = skip_minified

    max_workers = _as_int(data.get("max_workers"))
    if max_workers is not None and max_workers > 0:
        config.max_workers = max_workers

    title = _as_str(data.get("default_title"))
    if title:
        config.default_title = title

    if data.get("analyzers") is not None:
        config.analyzers = [name.strip().lower() for name in _as_str_list(data.get("analyzers"))]

    return config


def _parse_acquisition(data: Dict[str, Any]) -> AcquisitionConfig:
    config = AcquisitionConfig()
    if not data:
        return config

    timeout = _as_float(data.get("timeout"))
    if timeout is not None and timeout > 0:
        config.timeout = timeout

    direct = _as_bool(data.get("direct"))
    if direct is not None:
        config.direct = direct

    if "relays" in data:
        config.relays = _as_str_list(data.get("relays"))

    config.render_services = _as_str_list(data.get("render_services"))
    return config


def _parse_deploy(data: Dict[str, Any]) -> DeployConfig:
    config = DeployConfig()
    if not data:
        return config

    endpoint = _as_str(data.get("endpoint"))
    if endpoint:
        config.endpoint = endpoint

    timeout = _as_float(data.get("timeout"))
    if timeout is not None and timeout > 0:
        config.timeout = timeout

    max_size = _as_float(data.get("max_size_kb"))
    if max_size is not None and max_size > 0:
        config.max_size_kb = max_size

    return config


def _apply_env_overrides(config: PermabundleConfig) -> None:
    endpoint = os.getenv(ENV_DEPLOY_ENDPOINT)
    if endpoint:
        config.deploy.endpoint = endpoint

    timeout = _as_float(os.getenv(ENV_TIMEOUT))
    if timeout is not None and timeout > 0:
        config.acquisition.timeout = timeout

    max_size = _as_float(os.getenv(ENV_MAX_SIZE_KB))
    if max_size is not None and max_size > 0:
        config.deploy.max_size_kb = max_size


def _normalise_suffix(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AcquisitionConfig",
    "BundleConfig",
    "ConfigError",
    "DeployConfig",
    "PermabundleConfig",
    "default_config",
    "load_config",
]
