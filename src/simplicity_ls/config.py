from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".simplicity-ls.json"
ENV_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class DiagnosticSettings:
    enabled: bool = True
    source: str = "simplicity-ls"


@dataclass
class CompletionSettings:
    builtins: bool = True
    modules: bool = True


@dataclass
class HoverSettings:
    enabled: bool = True


@dataclass
class SimplicityLSConfig:
    workspace_root: Path
    diagnostics: DiagnosticSettings = field(default_factory=DiagnosticSettings)
    completion: CompletionSettings = field(default_factory=CompletionSettings)
    hover: HoverSettings = field(default_factory=HoverSettings)

    @classmethod
    def default(cls, workspace_root: Path) -> "SimplicityLSConfig":
        return cls(workspace_root=workspace_root)


def load_config(workspace_root: Path) -> Tuple[SimplicityLSConfig, List[str]]:
    """Read ``.simplicity-ls.json`` from the workspace root.

    Problems never fail the load: they come back as warnings alongside a
    config that falls back to defaults for the affected keys.
    """
    config = SimplicityLSConfig.default(workspace_root)
    path = workspace_root / CONFIG_FILENAME
    if not path.exists():
        log.debug("No config file at %s", path)
        return config, []

    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        return config, [f"Failed to parse {path}: {exc}"]
    except OSError as exc:
        return config, [f"Failed to read {path}: {exc}"]
    if not isinstance(raw, dict):
        return config, [f"{path} must contain a JSON object"]

    warnings: list[str] = []
    data = _substitute(raw, warnings)
    apply_settings(config, data, warnings)
    return config, warnings


def apply_settings(config: SimplicityLSConfig, data: Dict[str, Any], warnings: List[str]) -> None:
    """Overlay camelCase settings (file or client options) onto ``config``."""
    diagnostics = _section(data, "diagnostics", warnings)
    config.diagnostics.enabled = _bool(diagnostics, "enabled", config.diagnostics.enabled, warnings)
    source = diagnostics.get("source")
    if isinstance(source, str) and source:
        config.diagnostics.source = source
    elif source is not None:
        warnings.append("diagnostics.source must be a non-empty string")

    completion = _section(data, "completion", warnings)
    config.completion.builtins = _bool(completion, "builtins", config.completion.builtins, warnings)
    config.completion.modules = _bool(completion, "modules", config.completion.modules, warnings)

    hover = _section(data, "hover", warnings)
    config.hover.enabled = _bool(hover, "enabled", config.hover.enabled, warnings)


def _section(data: Dict[str, Any], key: str, warnings: List[str]) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        warnings.append(f"{key} must be an object")
        return {}
    return value


def _bool(section: Dict[str, Any], key: str, default: bool, warnings: List[str]) -> bool:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    warnings.append(f"{key} must be a boolean, got {value!r}")
    return default


def _substitute(value: Any, warnings: List[str]) -> Any:
    if isinstance(value, dict):
        return {k: _substitute(v, warnings) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute(v, warnings) for v in value]
    if not isinstance(value, str):
        return value

    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        env_value = os.environ.get(name)
        if env_value is None:
            missing.append(name)
            return match.group(0)
        return env_value

    substituted = ENV_VAR_RE.sub(_replace, value)
    if missing:
        # Unresolved values fall back to the default for their key.
        warnings.extend(f"Environment variable {name} is not set" for name in missing)
        return None
    return substituted
