"""Shared test fixtures for shopcache.

Provides a fake shop API built on :class:`httpx.MockTransport`, in-memory
stores, isolated XDG config directories, and output reset between tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from shopcache.output import OutputFormat, OutputManager, reset_output, set_output
from shopcache.store import MemoryStore


ACME = {"name": "Acme", "domain": "acme.myshopify.com"}


class FakeShopAPI:
    """Stand-in for ``https://<domain>/admin/shop.json``.

    Answers with ``status`` and ``{"shop": payload}`` unless ``body`` or
    ``raise_error`` is set. ``headers`` are sent along with a raw ``body``.
    Every request is recorded in ``requests``.
    """

    def __init__(self, payload: Optional[dict[str, Any]] = None, status: int = 200) -> None:
        self.payload = dict(ACME) if payload is None else payload
        self.status = status
        self.body: Optional[bytes] = None
        self.headers: dict[str, str] = {}
        self.raise_error: Optional[Callable[[httpx.Request], Exception]] = None
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error(request)
        if self.body is not None:
            return httpx.Response(self.status, headers=self.headers, content=self.body)
        return httpx.Response(
            self.status,
            headers={"content-type": "application/json"},
            content=json.dumps({"shop": self.payload}).encode("utf-8"),
        )

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager caches sys.stdout/sys.stderr at creation time; CliRunner
    swaps those streams, so a fresh manager is needed per test.
    """
    yield
    reset_output()


@pytest.fixture
def shop_api() -> FakeShopAPI:
    return FakeShopAPI()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless OutputManager so debug lines reach stderr."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and the default disk store to ``tmp_path``.

    Sets the XDG base directories to subdirectories of ``tmp_path``, forces
    the XDG layout, and clears SHOPCACHE_* environment variables.
    """
    monkeypatch.setattr("shopcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

    for var in [
        "SHOPCACHE_STORE_BACKEND",
        "SHOPCACHE_STORE_DIR",
        "SHOPCACHE_TOKEN_SOURCE",
        "SHOPIFY_ACCESS_TOKEN",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
