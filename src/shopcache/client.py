"""HTTP transport for the shop fetch.

:func:`build_http_client` turns a :class:`~shopcache.models.RequestConfig`
into an :class:`httpx.Client`. Redirects are not followed: the shop
endpoint answers 200 or the fetch fails with the status it got.
"""

from __future__ import annotations

from typing import Optional

import httpx

from shopcache.models import RequestConfig


def build_http_client(
    config: Optional[RequestConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an :class:`httpx.Client` configured for shop requests.

    Args:
        config: Timeout and TLS verification settings. Defaults apply when
            ``None``.
        transport: Optional transport override, e.g. :class:`httpx.MockTransport`.
    """
    config = config or RequestConfig()
    return httpx.Client(
        timeout=config.timeout,
        verify=config.verify_ssl,
        follow_redirects=False,
        transport=transport,
    )
