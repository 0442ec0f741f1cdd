"""Where shopcache keeps its settings, and how they are resolved.

Two directories are used:

* the config directory holds ``config.json`` (a
  :class:`~shopcache.models.GlobalConfig`);
* the cache directory holds the default disk store.

On Linux and the BSDs they follow ``$XDG_CONFIG_HOME`` and
``$XDG_CACHE_HOME``. Elsewhere both live under ``~/.shopcache/``.

:func:`resolve_config` layers ``SHOPCACHE_*`` environment variables over the
file, and :func:`resolve_credential` turns a token source such as
``env:SHOPIFY_ACCESS_TOKEN`` into the access token itself.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from shopcache.exceptions import ConfigError
from shopcache.models import GlobalConfig

_APP_NAME = "shopcache"
_CONFIG_FILENAME = "config.json"

_ENV_STORE_BACKEND = "SHOPCACHE_STORE_BACKEND"
_ENV_STORE_DIR = "SHOPCACHE_STORE_DIR"
_ENV_TOKEN_SOURCE = "SHOPCACHE_TOKEN_SOURCE"


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: str) -> Path:
    """Return (and create) an application directory.

    *xdg_default* is relative to the home directory and used when *xdg_var*
    is unset; *fallback* is relative to ``~/.shopcache`` on other platforms.
    """
    if _is_xdg_platform():
        base = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/shopcache`` (``~/.config/shopcache``), or ``~/.shopcache``."""
    return _app_dir("XDG_CONFIG_HOME", ".config", "")


def get_cache_dir() -> Path:
    """``$XDG_CACHE_HOME/shopcache`` (``~/.cache/shopcache``), or ``~/.shopcache/cache``.

    The default disk store lives in ``store/`` below this directory.
    """
    return _app_dir("XDG_CACHE_HOME", ".cache", "cache")


def _replace_file(path: Path, text: str) -> None:
    """Write *text* to *path* so readers see either the old or the new file.

    The temporary file is created beside *path* so :func:`os.replace` is a
    rename within one filesystem.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``, or return the defaults when there is none.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = _config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        # JSONDecodeError and pydantic's ValidationError are both ValueErrors.
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    _replace_file(_config_path(), json.dumps(config.model_dump(mode="json"), indent=2) + "\n")


def resolve_config(token_source: Optional[str] = None) -> GlobalConfig:
    """Return the effective configuration.

    Highest precedence first: the *token_source* argument (the
    ``--token-source`` flag), ``SHOPCACHE_TOKEN_SOURCE``,
    ``SHOPCACHE_STORE_BACKEND`` and ``SHOPCACHE_STORE_DIR``, then
    ``config.json``, then the model defaults.

    Raises:
        ConfigError: If ``config.json`` is invalid or
            ``SHOPCACHE_STORE_BACKEND`` names an unknown backend.
    """
    config = load_global_config()

    backend = os.environ.get(_ENV_STORE_BACKEND)
    if backend:
        if backend not in ("disk", "memory"):
            raise ConfigError(
                f"Unknown store backend '{backend}' (source: {_ENV_STORE_BACKEND})"
            )
        config.store.backend = backend  # type: ignore[assignment]

    config.store.directory = os.environ.get(_ENV_STORE_DIR) or config.store.directory
    config.token_source = (
        token_source or os.environ.get(_ENV_TOKEN_SOURCE) or config.token_source
    )
    return config


def resolve_credential(source: str) -> str:
    """Return the access token named by *source*.

    ``env:NAME`` reads an environment variable, ``file:PATH`` reads a file
    (surrounding whitespace stripped), and ``prompt`` asks on the terminal.

    Raises:
        ConfigError: If the token cannot be read from *source*.
    """
    scheme, _, target = source.partition(":")

    if scheme == "env" and target:
        token = os.environ.get(target)
        if token is None:
            raise ConfigError(f"Environment variable '{target}' is not set (source: {source})")
        return token

    if scheme == "file" and target:
        path = Path(target).expanduser()
        if not path.is_file():
            raise ConfigError(f"Token file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read token file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for the access token: stdin is not a TTY")
        return getpass.getpass("Shop access token: ")

    raise ConfigError(f"Unknown token source: {source}")
