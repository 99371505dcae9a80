import logging
import os
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

ROOT_ENV = "TUFFOUS_ROOT"
LOG_ENV = "TUFFOUS_LOG"

TUFFOUS_DIRNAME = ".tuffous"
TODOS_DIRNAME = "todos"
CONFIG_NAME = "config.yaml"
CACHE_NAME = "cache.json"

RESULT_CAP = 1024
INDENT = 3

DEFAULTS: dict[str, object] = {
    "result_cap": RESULT_CAP,
    "indent": INDENT,
    "color": True,
    "log_level": "WARNING",
}


def resolve_root(root: Path | str | None = None) -> Path:
    """Explicit root, then $TUFFOUS_ROOT, then the working directory."""
    if root is not None:
        return Path(root)
    env = os.environ.get(ROOT_ENV)
    if env:
        return Path(env)
    return Path.cwd()


def tuffous_dir(root: Path) -> Path:
    return root / TUFFOUS_DIRNAME


def todos_dir(root: Path) -> Path:
    return tuffous_dir(root) / TODOS_DIRNAME


def cache_path(root: Path) -> Path:
    return tuffous_dir(root) / CACHE_NAME


class Config:
    """Per-store config manager backed by .tuffous/config.yaml."""

    _data: dict[str, object]

    def __init__(self, root: Path | str | None = None) -> None:
        self.path = tuffous_dir(resolve_root(root)) / CONFIG_NAME
        self._data = {}
        self._load()

    def _load(self) -> None:
        """Load config from disk."""
        if not self.path.exists():
            self._data = {}
            return
        try:
            with self.path.open() as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("ignoring unreadable config %s: %s", self.path, e)
            data = {}
        self._data = data if isinstance(data, dict) else {}

    def _save(self) -> None:
        """Persist config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def get(self, key: str, default: object = None) -> object:
        """Get config value, falling back to the built-in default."""
        if default is None:
            default = DEFAULTS.get(key)
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        """Set config value and persist."""
        self._data[key] = value
        self._save()

    def result_cap(self) -> int:
        return _positive_int(self.get("result_cap"), RESULT_CAP)

    def indent(self) -> int:
        return _positive_int(self.get("indent"), INDENT)

    def color(self) -> bool:
        return bool(self.get("color"))

    def log_level(self) -> str:
        env = os.environ.get(LOG_ENV)
        if env:
            return env.upper()
        return str(self.get("log_level")).upper()


def _positive_int(val: object, fallback: int) -> int:
    try:
        n = int(val)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    return n if n > 0 else fallback
