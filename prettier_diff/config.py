"""
Configuration — loads settings from .prettier-diff.yaml, environment
variables, and built-in defaults (in that priority order: CLI args > env >
YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "prettier_command": "npx prettier",
    "diff_base": None,
    "extensions": [],
    "markers": False,
    "log_dir": None,
    "progress": True,
}

# Config file search locations
_CONFIG_FILENAMES = [".prettier-diff.yaml", ".prettier-diff.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _split_extensions(value) -> list[str]:
    """Normalize ``"ts, .js"`` or ``["ts", ".js"]`` to ``["ts", "js"]``."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        return []
    return [item.strip().lstrip(".") for item in items if item.strip().lstrip(".")]


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .prettier-diff.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.PRETTIER_COMMAND = _get("PRETTIER_DIFF_COMMAND", "prettier_command",
                                     _DEFAULTS["prettier_command"])
        self.DIFF_BASE = _get("PRETTIER_DIFF_COMMIT", "diff_base",
                              _DEFAULTS["diff_base"])
        self.EXTENSIONS: list[str] = _get("PRETTIER_DIFF_EXTENSIONS", "extensions",
                                          _DEFAULTS["extensions"],
                                          cast=_split_extensions)
        self.USE_MARKERS = _get_bool("PRETTIER_DIFF_MARKERS", "markers",
                                     _DEFAULTS["markers"])
        self.LOG_DIR = _get("PRETTIER_DIFF_LOG_DIR", "log_dir",
                            _DEFAULTS["log_dir"])
        self.SHOW_PROGRESS = _get_bool("PRETTIER_DIFF_PROGRESS", "progress",
                                       _DEFAULTS["progress"])

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
