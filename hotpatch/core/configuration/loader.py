from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hotpatch.core.patch_engine.config import PatchEngineConfig


# ──────────────────────────────────────────────────────────────────────────────
# Errors
# ──────────────────────────────────────────────────────────────────────────────
class ConfigError(RuntimeError):
    pass


# ──────────────────────────────────────────────────────────────────────────────
# Path resolution
# ──────────────────────────────────────────────────────────────────────────────
@dataclass
class ConfigPaths:
    repo_root: Path
    config_dir: Path
    settings_path: Path

    @staticmethod
    def detect() -> "ConfigPaths":
        """
        Detect the project root by walking upward from this file to a directory
        holding both /config and /hotpatch. Falls back to the current directory.
        """
        cur = Path(__file__).resolve()
        root = None
        for _ in range(12):
            if (cur / "config").is_dir() and (cur / "hotpatch").is_dir():
                root = cur
                break
            if cur.parent == cur:
                break
            cur = cur.parent
        repo_root = (root or Path.cwd()).resolve()
        config_dir = (repo_root / "config").resolve()
        return ConfigPaths(
            repo_root=repo_root,
            config_dir=config_dir,
            settings_path=config_dir / "hotpatch.yml",
        )


# ──────────────────────────────────────────────────────────────────────────────
# YAML helper
# ──────────────────────────────────────────────────────────────────────────────
def read_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; a missing file reads as {}."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"YAML file is not a mapping: {path}")
    return data


def _section(data: Dict[str, Any], name: str, path: Path) -> Dict[str, Any]:
    sec = data.get(name) or {}
    if not isinstance(sec, dict):
        raise ConfigError(f"'{name}' must be a mapping in {path}")
    return sec


# ──────────────────────────────────────────────────────────────────────────────
# Settings (config/hotpatch.yml)
# ──────────────────────────────────────────────────────────────────────────────
@dataclass
class ProbeDefaults:
    timeout: float = 10.0
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class Settings:
    patch_engine: PatchEngineConfig = field(default_factory=PatchEngineConfig.defaults)
    probes: ProbeDefaults = field(default_factory=ProbeDefaults)
    log_tag: str = "hotpatch"
    source: Optional[Path] = None


def get_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings and normalize them into a stable shape:

      patch_engine: {encoding, atomic_writes, context_lines}
      probes:       {timeout, headers}
      logging:      {tag}

    An explicit `path` must exist. Without one, config/hotpatch.yml is used
    when present, otherwise defaults. HOTPATCH_* env vars override the
    patch_engine section.
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Settings file not found: {path}")
        settings_path = path
    else:
        settings_path = ConfigPaths.detect().settings_path
    data = read_yaml(settings_path)

    try:
        engine = PatchEngineConfig.from_mapping(_section(data, "patch_engine", settings_path)).with_env()
    except ValueError as e:
        raise ConfigError(f"{e} ({settings_path})")

    probes_raw = _section(data, "probes", settings_path)
    try:
        timeout = float(probes_raw.get("timeout", ProbeDefaults.timeout))
    except (TypeError, ValueError):
        raise ConfigError(f"probes.timeout must be a number ({settings_path})")
    if timeout <= 0:
        raise ConfigError(f"probes.timeout must be positive ({settings_path})")
    headers = probes_raw.get("headers") or {}
    if not isinstance(headers, dict):
        raise ConfigError(f"probes.headers must be a mapping ({settings_path})")

    tag = _section(data, "logging", settings_path).get("tag") or "hotpatch"

    return Settings(
        patch_engine=engine,
        probes=ProbeDefaults(timeout=timeout, headers={str(k): str(v) for k, v in headers.items()}),
        log_tag=str(tag),
        source=settings_path if settings_path.exists() else None,
    )


__all__ = ["ConfigError", "ConfigPaths", "ProbeDefaults", "Settings", "get_settings", "read_yaml"]
