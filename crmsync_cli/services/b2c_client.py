"""
B2C Commerce HTTP client

One httpx.AsyncClient per invocation plus URL builders for the OCAPI Data
API and WebDAV folders.
"""

from typing import Any, Optional, Type, Union

import httpx

from crmsync_cli.config.settings import Settings
from crmsync_cli.constants import USER_AGENT
from crmsync_cli.exceptions import B2CRequestError, StageError
from crmsync_cli.models.deployment import ArtifactScope, AuthToken
from crmsync_cli.models.environment import EnvironmentDefinition


def response_payload(response: httpx.Response) -> Any:
    """Decoded JSON body, falling back to text."""
    try:
        return response.json()
    except ValueError:
        return response.text


def fault_message(payload: Any) -> str:
    """Extract the OCAPI fault message from a response payload."""
    if isinstance(payload, dict):
        fault = payload.get("fault") or {}
        if fault.get("message"):
            return fault["message"]
        if payload.get("error_description"):
            return payload["error_description"]
        if payload.get("error"):
            return str(payload["error"])
    return str(payload)[:500] if payload else "no response body"


class B2CClient:
    """
    Async HTTP access to one B2C Commerce instance.

    Use as an async context manager; the underlying connection pool is
    closed on exit.
    """

    def __init__(
        self,
        environment: EnvironmentDefinition,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.environment = environment
        self.settings = settings
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "B2CClient":
        kwargs = {
            "headers": {"User-Agent": USER_AGENT},
            "transport": self._transport,
        }
        # Leave httpx's own default in place unless configured
        if self.settings.b2c.request_timeout is not None:
            kwargs["timeout"] = self.settings.b2c.request_timeout
        self._client = httpx.AsyncClient(**kwargs)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        return False

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("B2CClient must be used inside 'async with'")
        return self._client

    @property
    def base_url(self) -> str:
        return f"https://{self.environment.b2c_host_name}"

    def ocapi_url(self, path: str) -> str:
        """OCAPI Data API URL for a resource path."""
        version = self.settings.b2c.ocapi_version
        return f"{self.base_url}/s/-/dw/data/{version}/{path.lstrip('/')}"

    def webdav_url(self, scope: ArtifactScope, file_name: str) -> str:
        """WebDAV URL receiving an archive of the given scope."""
        if scope is ArtifactScope.CODE:
            folder = self.settings.b2c.webdav_code_path
        else:
            folder = self.settings.b2c.webdav_impex_path
        return f"{self.base_url}{folder}/{file_name}"

    async def request(
        self,
        method: str,
        url: str,
        error_cls: Type[Union[StageError, B2CRequestError]],
        token: Optional[AuthToken] = None,
        expected: tuple[int, ...] = (),
        **kwargs,
    ) -> httpx.Response:
        """
        Issue one request, mapping transport failures and non-2xx
        responses onto the caller's error type.

        Args:
            method: HTTP method
            url: Absolute URL
            error_cls: StageError subclass inside the pipeline, B2CRequestError elsewhere
            token: Bearer token to attach
            expected: Extra non-2xx status codes to return instead of raising
            **kwargs: Passed through to httpx

        Returns:
            httpx.Response
        """
        headers = dict(kwargs.pop("headers", {}) or {})
        if token is not None:
            headers["Authorization"] = token.authorization_header

        try:
            response = await self.http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise error_cls(
                f"{method} {url} failed",
                context=f"{type(e).__name__}: {e}",
                payload=str(e),
            ) from e

        if response.is_success or response.status_code in expected:
            return response

        payload = response_payload(response)
        raise error_cls(
            fault_message(payload),
            context=f"{method} {url}",
            status_code=response.status_code,
            payload=payload,
        )
