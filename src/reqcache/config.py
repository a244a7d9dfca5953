"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for reqcache:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.reqcache/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~reqcache.models.GlobalConfig`
  JSON file storing defaults (cache switch, snapshot location, log path,
  transport settings).
* **Project config** -- An optional ``./reqcache.json`` holding a partial
  config that is layered over the global one.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  overrides, environment variables, project-local config, and global config
  into the final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a truncated config behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from reqcache.exceptions import ConfigError
from reqcache.models import GlobalConfig

_APP_NAME = "reqcache"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "reqcache.json"
_SNAPSHOT_DIRNAME = "snapshot"

ENV_BASE_URL = "REQCACHE_BASE_URL"
ENV_LOG = "REQCACHE_LOG"
ENV_CACHE = "REQCACHE_CACHE"

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/reqcache/`` (default ``~/.config/reqcache/``).
    On macOS/Windows: ``~/.reqcache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Default home of saved cache snapshots. Its contents can be deleted at
    any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/reqcache/`` (default ``~/.cache/reqcache/``).
    On macOS/Windows: ``~/.reqcache/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/reqcache/`` (default ``~/.local/share/reqcache/``).
    On macOS/Windows: ``~/.reqcache/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_snapshot_path(config: Optional[GlobalConfig] = None) -> Path:
    """Return where ``save_cache``/``load_cache`` operate when no path is given.

    Uses ``cache.snapshot_path`` from *config* when set, otherwise
    ``<cache_dir>/snapshot``.
    """
    if config is not None and config.cache.snapshot_path:
        return Path(config.cache.snapshot_path).expanduser()
    return get_cache_dir() / _SNAPSHOT_DIRNAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~reqcache.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./reqcache.json``.

    The file holds a partial config with the same shape as
    :class:`~reqcache.models.GlobalConfig`, e.g.
    ``{"request": {"base_url": "https://api.example.com"}}``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into a copy of *base*."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _parse_switch(value: str, source: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"Expected on/off value for {source}, got: {value!r}")


# --- Precedence resolution ---


def resolve_config(
    base_url: Optional[str] = None,
    log_path: Optional[str] = None,
    cache_enabled: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. Explicit arguments (``base_url``, ``log_path``, ``cache_enabled``)
        2. Environment variables (``REQCACHE_BASE_URL``, ``REQCACHE_LOG``,
           ``REQCACHE_CACHE``)
        3. Project config (``./reqcache.json``)
        4. User config (``~/.config/reqcache/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is malformed.
    """
    global_cfg = load_global_config()

    project = load_project_config()
    if project is not None:
        try:
            global_cfg = GlobalConfig.model_validate(
                _merge(global_cfg.model_dump(mode="json"), project)
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        global_cfg.request.base_url = env_base_url
    env_log = os.environ.get(ENV_LOG)
    if env_log:
        global_cfg.log.path = env_log
    env_cache = os.environ.get(ENV_CACHE)
    if env_cache:
        global_cfg.cache.enabled = _parse_switch(env_cache, ENV_CACHE)

    if base_url is not None:
        global_cfg.request.base_url = base_url
    if log_path is not None:
        global_cfg.log.path = log_path
    if cache_enabled is not None:
        global_cfg.cache.enabled = cache_enabled

    return global_cfg
