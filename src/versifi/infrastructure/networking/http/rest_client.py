"""
Signed REST Client

Async REST client for the Versifi API built on aiohttp with msgspec JSON.

Key Features:
- Connection pooling and session reuse with aiohttp
- msgspec encoding of request structs and typed decoding of responses
- Just-in-time HMAC-SHA256 request signatures
- Optional binding of outgoing connections to a local source address
- Venue error bodies decoded into VersifiAPIError

Signature payload: the url-encoded query string (keys sorted, no leading
``?``) for GET/DELETE, the exact JSON body bytes for POST/PUT.

Note: no retries and no rate limiting; order placement is not idempotent.
"""

import asyncio
import urllib.parse
from typing import Any, Dict, Optional, Type

import aiohttp
import msgspec

from versifi.config.structs import Credentials, RestConfig
from versifi.infrastructure.exceptions.exchange import (
    ExchangeConnectionRestError,
    ExchangeRestError,
    ExchangeTimeoutError,
    raise_for_status,
)
from versifi.infrastructure.logging import get_exchange_logger, HFTLoggerInterface, LoggingTimer
from .signer import Signer
from .structs import HTTPMethod, API_KEY_HEADER, API_SIGN_HEADER


def encode_query(params: Optional[Dict[str, Any]]) -> str:
    """Url-encode params with sorted keys; None values are dropped."""
    if not params:
        return ""
    items = sorted((k, _query_value(v)) for k, v in params.items() if v is not None)
    return urllib.parse.urlencode(items)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, 'value'):  # Enum members
        return str(value.value)
    return str(value)


class RestClient:
    """
    Signed REST API client.

    One aiohttp session per client, created lazily and closed by ``close()``
    or by leaving the async context.
    """

    def __init__(
        self,
        config: Optional[RestConfig] = None,
        credentials: Optional[Credentials] = None,
        logger: Optional[HFTLoggerInterface] = None,
    ):
        self.config = config or RestConfig()
        self.base_url = self.config.base_url.rstrip('/')
        self.credentials = credentials
        self._signer = Signer(credentials.secret_key) if credentials else None

        self._session: Optional[aiohttp.ClientSession] = None
        self.logger = logger or get_exchange_logger('versifi', 'rest')

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=100,
                ttl_dns_cache=300,
                keepalive_timeout=60,
                local_addr=(self.config.local_addr, 0) if self.config.local_addr else None,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers={
                    'User-Agent': self.config.user_agent,
                    'Content-Type': 'application/json',
                    'Accept': 'application/json',
                },
            )
        return self._session

    def sign_request(self, method: HTTPMethod, query: str, body: bytes) -> Dict[str, str]:
        """Authentication headers for a signed request."""
        if self._signer is None or not self.credentials.is_configured():
            raise ExchangeRestError(401, "API credentials are required for signed requests")
        payload = body if method.signs_body else query.encode('utf-8')
        return {
            API_KEY_HEADER: self.credentials.api_key,
            API_SIGN_HEADER: self._signer.sign(payload),
        }

    async def request(
        self,
        method: HTTPMethod,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Any = None,
        signed: bool = True,
        response_type: Optional[Type] = None,
    ) -> Any:
        """
        Execute an HTTP request.

        Args:
            method: HTTP method
            endpoint: Path below base_url, e.g. ``/v2/orders``
            params: Query parameters; None values are not sent
            json_data: Body, a msgspec Struct or plain JSON-able object
            signed: Add API key and signature headers
            response_type: Decode the body into this type instead of builtins

        Returns:
            Decoded body, or None for an empty body (204)

        Raises:
            VersifiAPIError: Venue error body on status >= 400
            ExchangeRestError: Other HTTP failures
        """
        session = await self._ensure_session()

        query = encode_query(params)
        url = f"{self.base_url}{endpoint}"
        if query:
            url = f"{url}?{query}"
        body = msgspec.json.encode(json_data) if json_data is not None else b""

        headers = self.sign_request(method, query, body) if signed else {}

        if self.config.debug:
            self.logger.debug("REST request", method=method.value, url=url, body=body.decode('utf-8'))

        with LoggingTimer(self.logger, "rest_request", method=method.value, endpoint=endpoint):
            try:
                async with session.request(method.value, url, data=body or None, headers=headers) as response:
                    raw = await response.read()
                    status = response.status
            except asyncio.TimeoutError as e:
                raise ExchangeTimeoutError(408, f"Request timed out: {method.value} {endpoint}") from e
            except aiohttp.ClientError as e:
                raise ExchangeConnectionRestError(503, f"Connection failed: {e}") from e

        if self.config.debug:
            self.logger.debug("REST response", status=status, body=raw[:1000].decode('utf-8', 'replace'))

        if status >= 400:
            self._raise_error(status, raw)

        if not raw:
            return None
        try:
            if response_type is not None:
                return msgspec.json.decode(raw, type=response_type)
            return msgspec.json.decode(raw)
        except msgspec.DecodeError as e:
            raise ExchangeRestError(status, f"Invalid JSON response: {raw[:100]!r}") from e

    def _raise_error(self, status: int, raw: bytes) -> None:
        text = raw.decode('utf-8', 'replace')
        try:
            body = msgspec.json.decode(raw) if raw else None
        except msgspec.DecodeError:
            body = None
        self.logger.error("REST request failed", status=status, body=text[:500])
        raise_for_status(status, body, text)

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.GET, endpoint, params=params, **kwargs)

    async def post(self, endpoint: str, json_data: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.POST, endpoint, json_data=json_data, **kwargs)

    async def put(self, endpoint: str, json_data: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.PUT, endpoint, json_data=json_data, **kwargs)

    async def delete(self, endpoint: str, params: Optional[Dict[str, Any]] = None,
                     json_data: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.DELETE, endpoint, params=params, json_data=json_data, **kwargs)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self.logger.info("RestClient closed")
        self._session = None
