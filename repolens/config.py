"""Configuration loading for repolens (.repolens.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".repolens.yml"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".java",)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitHubConfig:
    """Remote repository access settings."""

    token: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class AnalysisConfig:
    """Which files take part in an analysis run."""

    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class RepoLensConfig:
    """Represents the settings defined in .repolens.yml."""

    root: Path
    github: GitHubConfig = field(default_factory=GitHubConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)


def default_config() -> RepoLensConfig:
    return RepoLensConfig(root=Path.cwd())


def load_config(config_path: Path) -> RepoLensConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RepoLensConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.token = _as_str(github_data.get("token"))
        api_url = _as_str(github_data.get("api_url"))
        if api_url:
            github.api_url = api_url.rstrip("/")
        timeout = _as_float(github_data.get("request_timeout"))
        if timeout is not None:
            if timeout <= 0:
                raise ConfigError("github.request_timeout must be positive")
            github.request_timeout = timeout

    analysis = AnalysisConfig()
    analysis_data = _as_dict(data.get("analysis"))
    if analysis_data:
        extensions = _as_str_list(analysis_data.get("extensions"))
        if extensions:
            analysis.extensions = tuple(_normalise_extension(ext) for ext in extensions)
        analysis.exclude_paths = _as_str_list(analysis_data.get("exclude_paths"))

    return RepoLensConfig(root=root, github=github, analysis=analysis)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip()
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


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
