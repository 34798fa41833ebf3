"""
REST HTTP client for the agent backend and the history service.
"""

from typing import Any, Optional

import httpx

from usbmkt_agent.errors import ResponseShapeError, TransportError

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_USER_AGENT = "usbmkt-agent/0.1.0"
SESSION_HEADER = "X-Session-ID"


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def _headers(session_id: Optional[str]) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if session_id:
            headers[SESSION_HEADER] = session_id
        return headers

    @staticmethod
    def _unwrap(json_data: Any) -> Any:
        """Unwrap a ``{ "status": "success", "data": <actual_data> }`` envelope if present."""
        if isinstance(json_data, dict) and "status" in json_data and "data" in json_data:
            return json_data["data"]
        return json_data

    async def get(
        self, path: str, params: Optional[dict[str, str]] = None, session_id: Optional[str] = None,
    ) -> Any:
        return await self._request("GET", path, params=params, headers=self._headers(session_id))

    async def post(
        self, path: str, body: Optional[dict[str, Any]] = None, session_id: Optional[str] = None,
    ) -> Any:
        return await self._request("POST", path, json=body, headers=self._headers(session_id))

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}", code="network_error")
        if resp.status_code >= 400:
            raise TransportError(
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                code="http_error",
                status_code=resp.status_code,
            )
        try:
            return self._unwrap(resp.json())
        except ValueError as e:
            raise ResponseShapeError(f"Reply from {path} is not JSON: {e}")

    async def close(self) -> None:
        await self._client.aclose()
