"""Page-source handler fetching target URLs over HTTP."""

from __future__ import annotations

from typing import Mapping

import httpx

from .errors import ExecutorTimeoutError, ExecutorUpstreamError
from .interfaces import ModeHandlerPort

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class HttpSourceHandler(ModeHandlerPort):
    """Handler for mode `source` returning the raw page body of `url`."""

    def __init__(
        self,
        request_timeout_seconds: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize page-source handler.

        Args:
            request_timeout_seconds: Total request timeout in seconds.
            user_agent: User-Agent header sent with every request.
            transport: Optional transport override used by tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the timeout is not positive.
        """

        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._timeout = httpx.Timeout(request_timeout_seconds, connect=10.0)
        self._headers = {"User-Agent": user_agent}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def handler_mode(self) -> str:
        return "source"

    def handler_is_ready(self) -> bool:
        return self._client is not None

    async def handler_startup(self) -> None:
        if self._client is None:
            self._client = self._handler_build_client(proxy_url=None)

    async def handler_shutdown(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def handler_run(self, payload: Mapping[str, object]) -> dict[str, object]:
        """Fetch `payload["url"]`, through `payload["proxy"]` when present.

        Args:
            payload: Job payload with `url` and optional `proxy`.

        Returns:
            dict[str, object]: `{"source": <response text>}`.

        Raises:
            ExecutorUpstreamError: Raised on transport failures and non-2xx responses.
            ExecutorTimeoutError: Raised when the request times out.
            RuntimeError: Raised when the handler has not been started.
        """

        if self._client is None:
            raise RuntimeError("source handler is not started")

        url = str(payload.get("url", ""))
        proxy_url = handler_build_proxy_url(payload.get("proxy"))
        try:
            if proxy_url is None:
                response = await self._client.get(url)
            else:
                async with self._handler_build_client(proxy_url=proxy_url) as proxied_client:
                    response = await proxied_client.get(url)
        except httpx.TimeoutException as error:
            raise ExecutorTimeoutError(f"timed out fetching {url}", mode="source") from error
        except httpx.HTTPError as error:
            raise ExecutorUpstreamError(f"cannot fetch {url}: {error}", mode="source") from error

        if response.status_code >= 400:
            raise ExecutorUpstreamError(f"{url} answered HTTP {response.status_code}", mode="source")
        return {"source": response.text}

    def _handler_build_client(self, proxy_url: str | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers=self._headers,
            follow_redirects=True,
            transport=self._transport,
            proxy=proxy_url,
        )


def handler_build_proxy_url(proxy: object) -> str | None:
    """Build an HTTP proxy URL from a `{host, port, username?, password?}` mapping.

    Args:
        proxy: Proxy mapping from the job payload, or None.

    Returns:
        str | None: Proxy URL, or None when no proxy is configured.
    """

    if not isinstance(proxy, Mapping) or not proxy.get("host"):
        return None

    credentials = ""
    if proxy.get("username"):
        credentials = f"{proxy['username']}:{proxy.get('password') or ''}@"
    return f"http://{credentials}{proxy['host']}:{proxy['port']}"
