"""Shared async HTTP gateway for all client components."""

import logging
from typing import Any, List, Optional

import httpx

from .exceptions import ApiError

logger = logging.getLogger(__name__)


class Navigator:
    """Current location of the application."""

    def __init__(self, path: str = "/"):
        self.path = path
        self.history: List[str] = [path]

    def go(self, path: str) -> None:
        self.path = path
        self.history.append(path)


def decode(response: httpx.Response) -> Any:
    """Decoded JSON body, the raw text when it is not JSON, None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpGateway:
    """
    Async HTTP client shared by every component.

    Any 401 response, for any request, sends the application to the login
    view; the error is still raised to the caller.
    """

    def __init__(
        self,
        base_url: str,
        navigator: Navigator,
        login_path: str = "/login",
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._navigator = navigator
        self._login_path = login_path
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            event_hooks={"response": [self._redirect_on_unauthorized]},
        )

    async def _redirect_on_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            logger.info(f"Unauthorized {response.request.method} {response.request.url.path}, going to login")
            self._navigator.go(self._login_path)

    async def request(self, method: str, url: str, **kwargs) -> Any:
        """Make HTTP request and return the decoded response body."""
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return decode(response)
        except httpx.HTTPStatusError as e:
            data = decode(e.response)
            message = str(e)
            if isinstance(data, dict) and data.get("error"):
                message = str(data["error"])
            logger.debug(f"{method} {url} failed: {e.response.status_code} {message}")
            raise ApiError(e.response.status_code, message, data) from e
        except httpx.RequestError as e:
            logger.debug(f"{method} {url} failed: {e}")
            raise ApiError(0, f"Connection error: {e}") from e

    async def get(self, url: str, **kwargs) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> Any:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> Any:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        await self.client.aclose()
