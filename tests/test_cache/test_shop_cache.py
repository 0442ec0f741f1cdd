"""Tests for ShopCache: memoization, invalidation, fetch, and error mapping."""

from __future__ import annotations

import json
import threading
from typing import Optional

import httpx
import pytest

from shopcache.cache import AttributesResult, ShopCache
from shopcache.exceptions import (
    DecodeError,
    ErrorKind,
    RequestError,
    StoreError,
    TransportError,
)
from shopcache.exit_codes import EXIT_AUTH_FAILURE, EXIT_UPSTREAM_ERROR
from shopcache.store import DiskStore, MemoryStore


DOMAIN = "acme.myshopify.com"
TOKEN = "shpat_test_token"
KEY = "shops:acme.myshopify.com:attributes"
ACME = {"name": "Acme", "domain": "acme.myshopify.com"}


def _make_shop(shop_api, store, domain: str = DOMAIN) -> ShopCache:
    return ShopCache(domain, TOKEN, store=store, http_client=shop_api.client())


def _serve_corrupt_gzip(shop_api) -> None:
    shop_api.headers = {"content-encoding": "gzip"}
    shop_api.body = b"not-gzip-at-all"


# ---------------------------------------------------------------------------
# Identity and keys
# ---------------------------------------------------------------------------


class TestIdentity:
    def test_identity_properties(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        assert shop.myshopify_domain == DOMAIN
        assert shop.access_token == TOKEN

    def test_namespace(self, shop_api, memory_store) -> None:
        assert _make_shop(shop_api, memory_store).namespace == "shops:acme.myshopify.com"
        assert ShopCache.namespace_for("b.myshopify.com") == "shops:b.myshopify.com"

    def test_attributes_stored_under_shop_key(self, shop_api, memory_store) -> None:
        _make_shop(shop_api, memory_store).attributes()
        assert json.loads(memory_store.get(KEY)) == ACME


# ---------------------------------------------------------------------------
# Upstream request
# ---------------------------------------------------------------------------


class TestFetch:
    def test_request_shape(self, shop_api, memory_store) -> None:
        _make_shop(shop_api, memory_store).attributes()

        request = shop_api.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "https://acme.myshopify.com/admin/shop.json"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["X-Shopify-Access-Token"] == TOKEN

    def test_envelope_is_unwrapped(self, shop_api, memory_store) -> None:
        # Scenario A
        assert _make_shop(shop_api, memory_store).attributes() == {
            "name": "Acme",
            "domain": "acme.myshopify.com",
        }

    def test_builds_client_from_request_config_when_none_injected(
        self, shop_api, memory_store, monkeypatch
    ) -> None:
        seen = []

        def fake_build(config):
            seen.append(config)
            return shop_api.client()

        monkeypatch.setattr("shopcache.cache.shop.build_http_client", fake_build)
        shop = ShopCache(DOMAIN, TOKEN, store=memory_store)

        assert shop.attributes() == ACME
        assert seen[0].timeout == 30
        assert seen[0].verify_ssl is True


# ---------------------------------------------------------------------------
# Two-tier caching (P1, P2, P3, P5, Scenario C)
# ---------------------------------------------------------------------------


class TestMemoization:
    def test_successive_calls_fetch_once(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        shop.attributes()
        shop.attributes()
        assert shop_api.calls == 1

    def test_memo_hit_does_not_touch_store(self, shop_api) -> None:
        class CountingStore(MemoryStore):
            gets = 0

            def get(self, key):
                CountingStore.gets += 1
                return super().get(key)

        shop = _make_shop(shop_api, CountingStore())
        shop.attributes()
        shop.attributes()
        shop.attributes()
        assert CountingStore.gets == 1

    def test_returned_mapping_cannot_mutate_cache(self, shop_api, memory_store) -> None:
        shop_api.payload = {"name": "Acme", "features": ["a"]}
        shop = _make_shop(shop_api, memory_store)

        first = shop.attributes()
        first["name"] = "Mutated"
        first["features"].append("b")

        assert shop.attributes() == {"name": "Acme", "features": ["a"]}

    def test_pre_existing_entry_served_without_fetch(self, shop_api, memory_store) -> None:
        # Scenario C
        memory_store.set(KEY, json.dumps({"name": "Cached"}).encode("utf-8"))
        assert _make_shop(shop_api, memory_store).attributes() == {"name": "Cached"}
        assert shop_api.calls == 0

    def test_fresh_instance_reads_back_stored_value(self, shop_api, tmp_path) -> None:
        shop_api.payload = {"name": "Acme", "plan": {"tier": 3, "trial": False}, "tags": ["x"]}
        with DiskStore(tmp_path / "store") as store:
            original = _make_shop(shop_api, store).attributes()

        with DiskStore(tmp_path / "store") as store:
            again = _make_shop(shop_api, store).attributes()

        assert again == original
        assert shop_api.calls == 1

    def test_other_domains_do_not_share_entries(self, shop_api, memory_store) -> None:
        _make_shop(shop_api, memory_store).attributes()
        _make_shop(shop_api, memory_store, domain="other.myshopify.com").attributes()
        assert shop_api.calls == 2


class TestInvalidation:
    def test_clear_drops_memo_and_entry(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        shop.attributes()
        shop.clear()

        assert shop._attributes is None
        assert KEY not in memory_store

    def test_attributes_after_clear_fetches_once(self, shop_api, memory_store) -> None:
        memory_store.set(KEY, json.dumps({"name": "Stale"}).encode("utf-8"))
        shop = _make_shop(shop_api, memory_store)
        assert shop.attributes() == {"name": "Stale"}

        shop.clear()
        assert shop.attributes() == ACME
        assert shop_api.calls == 1

    def test_clear_without_entry_is_harmless(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        shop.clear()
        shop.clear()
        assert shop_api.calls == 0

    def test_refresh_fetches_exactly_once_with_both_tiers_warm(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        shop.attributes()
        shop_api.payload = {"name": "Acme Renamed"}

        assert shop.refresh_attributes() == {"name": "Acme Renamed"}
        assert shop_api.calls == 2
        assert shop.attributes() == {"name": "Acme Renamed"}
        assert shop_api.calls == 2

    def test_refresh_on_cold_instance_fetches_once(self, shop_api, memory_store) -> None:
        memory_store.set(KEY, b'{"name":"Stale"}')
        assert _make_shop(shop_api, memory_store).refresh_attributes() == ACME
        assert shop_api.calls == 1
        assert json.loads(memory_store.get(KEY)) == ACME


# ---------------------------------------------------------------------------
# Failures (P4, Scenario B)
# ---------------------------------------------------------------------------


class TestUpstreamErrors:
    def test_500_writes_nothing_and_is_retried_next_call(self, shop_api, memory_store) -> None:
        shop_api.status = 500
        shop = _make_shop(shop_api, memory_store)

        with pytest.raises(RequestError) as exc_info:
            shop.attributes()
        assert exc_info.value.status_code == 500
        assert len(memory_store) == 0
        assert shop._attributes is None

        shop_api.status = 200
        assert shop.attributes() == ACME
        assert shop_api.calls == 2

    def test_402_carries_status(self, shop_api, memory_store) -> None:
        # Scenario B
        shop_api.status = 402
        shop = _make_shop(shop_api, memory_store)

        with pytest.raises(RequestError) as exc_info:
            shop.attributes()

        assert exc_info.value.status_code == 402
        assert exc_info.value.kind == ErrorKind.UPSTREAM_STATUS
        assert exc_info.value.exit_code == EXIT_UPSTREAM_ERROR
        assert "invalid response code 402" in str(exc_info.value)
        assert len(memory_store) == 0
        assert shop._attributes is None

    def test_401_maps_to_auth_exit_code(self, shop_api, memory_store) -> None:
        shop_api.status = 401
        with pytest.raises(RequestError) as exc_info:
            _make_shop(shop_api, memory_store).attributes()
        assert exc_info.value.exit_code == EXIT_AUTH_FAILURE

    @pytest.mark.parametrize("status", [201, 204, 301, 304])
    def test_any_non_200_is_a_failure(self, shop_api, memory_store, status: int) -> None:
        shop_api.status = status
        shop_api.body = b""
        with pytest.raises(RequestError):
            _make_shop(shop_api, memory_store).attributes()
        assert len(memory_store) == 0

    def test_no_retry_on_failure(self, shop_api, memory_store) -> None:
        shop_api.status = 503
        with pytest.raises(RequestError):
            _make_shop(shop_api, memory_store).attributes()
        assert shop_api.calls == 1

    def test_refresh_failure_leaves_both_tiers_empty(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        shop.attributes()
        shop_api.status = 500

        with pytest.raises(RequestError):
            shop.refresh_attributes()
        assert shop._attributes is None
        assert KEY not in memory_store


class TestTransportErrors:
    def test_connect_error_is_wrapped(self, shop_api, memory_store) -> None:
        shop_api.raise_error = lambda request: httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            _make_shop(shop_api, memory_store).attributes()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.kind == ErrorKind.TRANSPORT
        assert len(memory_store) == 0

    def test_timeout_is_a_transport_error_not_a_miss(self, shop_api, memory_store) -> None:
        memory_store.set("unrelated", b"1")
        shop_api.raise_error = lambda request: httpx.ReadTimeout("timed out", request=request)
        shop = _make_shop(shop_api, memory_store)

        with pytest.raises(TransportError, match="timed out"):
            shop.attributes()
        assert KEY not in memory_store
        assert shop._attributes is None

    def test_other_request_errors_are_transport_errors(self, shop_api, memory_store) -> None:
        shop_api.raise_error = lambda request: httpx.TooManyRedirects("redirect loop", request=request)

        with pytest.raises(TransportError) as exc_info:
            _make_shop(shop_api, memory_store).attributes()
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)


class TestDecodeErrors:
    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b'{"shop": ',
            b"[]",
            b'{"shops": {"name": "Acme"}}',
            b'{"shop": null}',
            b'{"shop": ["Acme"]}',
            b"\xff\xfe\x00",
        ],
    )
    def test_bad_bodies_raise_decode_error(self, shop_api, memory_store, body: bytes) -> None:
        shop_api.body = body
        shop = _make_shop(shop_api, memory_store)

        with pytest.raises(DecodeError):
            shop.attributes()
        assert len(memory_store) == 0
        assert shop._attributes is None

    def test_corrupt_content_encoding_is_a_decode_error(self, shop_api, memory_store) -> None:
        _serve_corrupt_gzip(shop_api)
        shop = _make_shop(shop_api, memory_store)

        with pytest.raises(DecodeError) as exc_info:
            shop.attributes()
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
        assert len(memory_store) == 0
        assert shop._attributes is None

    def test_stored_non_object_is_rejected(self, shop_api, memory_store) -> None:
        memory_store.set(KEY, b'["not", "a", "shop"]')
        with pytest.raises(DecodeError):
            _make_shop(shop_api, memory_store).attributes()
        assert shop_api.calls == 0


class TestStoreErrors:
    def test_get_failure_propagates_without_fetch(self, shop_api) -> None:
        class BrokenStore(MemoryStore):
            def get(self, key):
                raise StoreError("disk full")

        with pytest.raises(StoreError):
            _make_shop(shop_api, BrokenStore()).attributes()
        assert shop_api.calls == 0

    def test_set_failure_returns_value_and_memoizes(self, shop_api) -> None:
        class ReadOnlyStore(MemoryStore):
            def set(self, key, value):
                raise StoreError("read-only")

        shop = _make_shop(shop_api, ReadOnlyStore())
        assert shop.attributes() == ACME
        assert shop.attributes() == ACME
        assert shop_api.calls == 1


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


class TestResult:
    def test_ok_result(self, shop_api, memory_store) -> None:
        result = _make_shop(shop_api, memory_store).result()
        assert isinstance(result, AttributesResult)
        assert result.ok
        assert result.kind is None
        assert result.value == ACME
        assert result.unwrap() == ACME

    def test_upstream_failure_result(self, shop_api, memory_store) -> None:
        shop_api.status = 402
        result = _make_shop(shop_api, memory_store).result()

        assert not result.ok
        assert result.kind == ErrorKind.UPSTREAM_STATUS
        assert result.value is None
        assert isinstance(result.error, RequestError)
        assert result.error.status_code == 402
        with pytest.raises(RequestError):
            result.unwrap()

    @pytest.mark.parametrize(
        "configure, kind",
        [
            (lambda api: setattr(api, "body", b"garbage"), ErrorKind.DECODE),
            (_serve_corrupt_gzip, ErrorKind.DECODE),
            (
                lambda api: setattr(
                    api, "raise_error", lambda r: httpx.ConnectTimeout("slow", request=r)
                ),
                ErrorKind.TRANSPORT,
            ),
        ],
    )
    def test_failure_kinds(self, shop_api, memory_store, configure, kind) -> None:
        configure(shop_api)
        assert _make_shop(shop_api, memory_store).result().kind == kind

    def test_unwrap_of_empty_result_raises(self) -> None:
        with pytest.raises(ValueError, match="neither a value nor an error"):
            AttributesResult().unwrap()

    def test_refresh_result_fetches(self, shop_api, memory_store) -> None:
        shop = _make_shop(shop_api, memory_store)
        shop.attributes()
        assert shop.result(refresh=True).ok
        assert shop_api.calls == 2


# ---------------------------------------------------------------------------
# Concurrency (Scenario D)
# ---------------------------------------------------------------------------


class TestConcurrentMisses:
    def test_two_instances_may_both_fetch_and_last_write_wins(self) -> None:
        writes: list[bytes] = []
        write_lock = threading.Lock()

        class RecordingStore(MemoryStore):
            def set(self, key, value):
                with write_lock:
                    super().set(key, value)
                    writes.append(value)

        store = RecordingStore()
        barrier = threading.Barrier(2, timeout=10)
        counter = iter(range(2))
        counter_lock = threading.Lock()

        def handler(request: httpx.Request) -> httpx.Response:
            # Both requests must be in flight together.
            barrier.wait()
            with counter_lock:
                n = next(counter)
            return httpx.Response(200, json={"shop": {"name": "Acme", "fetch": n}})

        results: list[dict] = []
        errors: list[Optional[BaseException]] = []

        def worker() -> None:
            client = httpx.Client(transport=httpx.MockTransport(handler))
            try:
                results.append(ShopCache(DOMAIN, TOKEN, store=store, http_client=client).attributes())
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)
            finally:
                client.close()

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=15)

        assert errors == []
        assert sorted(r["fetch"] for r in results) == [0, 1]
        assert len(writes) == 2
        assert store.get(KEY) == writes[-1]
