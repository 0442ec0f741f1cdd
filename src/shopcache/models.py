"""Pydantic configuration models shared across shopcache modules.

These models are serialised as JSON in the user's config directory by
:func:`~shopcache.config.save_global_config` and read back by
:func:`~shopcache.config.load_global_config`:

* :class:`RequestConfig` -- HTTP settings for the shop fetch.
* :class:`StoreConfig` -- which persistent store backs the cache.
* :class:`OutputConfig` -- default output format for the CLI.
* :class:`GlobalConfig` -- the top-level document holding all of the above.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class RequestConfig(BaseModel):
    """HTTP request settings applied to every shop fetch."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class StoreConfig(BaseModel):
    """Persistent store settings.

    ``disk`` is shared between processes on the same host; ``memory`` lives
    only as long as the process and is mostly useful for testing.
    """

    backend: Literal["disk", "memory"] = Field(
        default="disk", description="Store backend: disk, memory"
    )
    directory: Optional[str] = Field(
        default=None,
        description="Directory for the disk store (default: <cache_dir>/store)",
    )
    ttl_seconds: Optional[int] = Field(
        default=None, description="Entry expiry in seconds; None keeps entries forever"
    )


class OutputConfig(BaseModel):
    """Default output format preferences."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format when neither --json nor --plain is given"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/shopcache/config.json``.

    Environment variables override individual fields; see
    :func:`~shopcache.config.resolve_config`.
    """

    token_source: str = Field(
        default="env:SHOPIFY_ACCESS_TOKEN",
        description="Credential source for the access token: env:VAR, file:/path, prompt",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
