"""changecheck configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (CHANGECHECK_DEFINITION, CHANGECHECK_STATE_DIR,
                             CHANGECHECK_EDITOR, CHANGECHECK_CHANGE_URL)
  3. Per-project changecheck.yaml  (current working directory)
  4. Global ~/.changecheck/config.yaml
  5. Hardcoded defaults

Relative storage paths are resolved against the directory of the config file
that set them. links.change_url_template must be an http(s) URL.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".changecheck"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "changecheck.yaml"

DEFAULT_CHANGE_URL_TEMPLATE = (
    "https://servicenow.example.com/change_request.do?sysparm_query=number={id}"
)

# Known top-level sections — unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["storage", "links", "editor"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StorageCfg:
    """Where the checklist definition and per-change states live (storage:)."""

    definition: Path = field(default_factory=lambda: _GLOBAL_CONFIG_DIR / "checklist.json")
    state_dir: Path = field(default_factory=lambda: _GLOBAL_CONFIG_DIR / "state")


@dataclass
class LinksCfg:
    """Change-request link settings (links:).

    Attributes:
        change_url_template: URL with an ``{id}`` placeholder. A
            ``changeUrlTemplate`` in the checklist definition takes precedence.
    """

    change_url_template: str = DEFAULT_CHANGE_URL_TEMPLATE


@dataclass
class EditorCfg:
    """External editor for the definition and state files (editor:)."""

    command: str | None = None


@dataclass
class ChangecheckConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    storage: StorageCfg = field(default_factory=StorageCfg)
    links: LinksCfg = field(default_factory=LinksCfg)
    editor: EditorCfg = field(default_factory=EditorCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _validate_change_url_template(template: str) -> None:
    """Raise ConfigError unless *template* is an http(s) URL."""
    if not template.startswith(("http://", "https://")):
        raise ConfigError(
            f"links.change_url_template must be an http(s) URL: '{template}'\n"
            "  Example: links.change_url_template: "
            "https://servicenow.example.com/change_request.do?sysparm_query=number={id}"
        )


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _resolve_paths(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Anchor relative storage paths in *data* to *base_dir*."""
    storage = data.get("storage")
    if not isinstance(storage, dict):
        return data
    resolved = dict(storage)
    for key in ("definition", "state_dir"):
        if resolved.get(key):
            p = Path(str(resolved[key])).expanduser()
            resolved[key] = str(p if p.is_absolute() else base_dir / p)
    return {**data, "storage": resolved}


def _cfg_from_dict(data: dict[str, Any]) -> ChangecheckConfig:
    """Build a *ChangecheckConfig* from a merged raw YAML dict."""
    cfg = ChangecheckConfig()

    if "storage" in data:
        s = data["storage"] or {}
        cfg.storage = StorageCfg(
            definition=Path(s["definition"]) if s.get("definition") else cfg.storage.definition,
            state_dir=Path(s["state_dir"]) if s.get("state_dir") else cfg.storage.state_dir,
        )

    if "links" in data:
        lk = data["links"] or {}
        cfg.links = LinksCfg(
            change_url_template=str(lk.get("change_url_template") or cfg.links.change_url_template),
        )

    if "editor" in data:
        ed = data["editor"] or {}
        cfg.editor = EditorCfg(command=ed.get("command") or cfg.editor.command)

    return cfg


def _apply_env_overrides(cfg: ChangecheckConfig) -> ChangecheckConfig:
    """Apply CHANGECHECK_* environment variable overrides."""
    if definition := os.environ.get("CHANGECHECK_DEFINITION"):
        cfg.storage.definition = Path(definition).expanduser()
    if state_dir := os.environ.get("CHANGECHECK_STATE_DIR"):
        cfg.storage.state_dir = Path(state_dir).expanduser()
    if editor := os.environ.get("CHANGECHECK_EDITOR"):
        cfg.editor.command = editor
    if template := os.environ.get("CHANGECHECK_CHANGE_URL"):
        cfg.links.change_url_template = template
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ChangecheckConfig:
    """Load and return a merged *ChangecheckConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *changecheck.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *ChangecheckConfig* with env var overrides applied.

    Raises:
        ConfigError: If a config file is not a mapping, or the change URL
            template is not an http(s) URL.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, _resolve_paths(raw_global, global_path.parent))

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, _resolve_paths(raw_project, search_dir))

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate_change_url_template(cfg.links.change_url_template)

    return cfg


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.changecheck/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# changecheck global configuration.\n"
            "# Relative paths are resolved against this directory.\n"
            "\n"
            "storage:\n"
            "  definition: checklist.json\n"
            "  state_dir: state\n"
            "\n"
            "links:\n"
            f"  change_url_template: \"{DEFAULT_CHANGE_URL_TEMPLATE}\"\n"
            "\n"
            "# editor:\n"
            "#   command: code --wait\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
