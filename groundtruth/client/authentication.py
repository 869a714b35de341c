"""Authentication gateway."""

import logging
from typing import Any, Optional, Union

from .config import Endpoints
from .exceptions import ApiError, AuthenticationError
from .http import HttpGateway
from .session import Session

logger = logging.getLogger(__name__)


class Authentication:
    """Logs users in and out and keeps the session in step with the server."""

    def __init__(self, http: HttpGateway, session: Session, endpoints: Endpoints):
        self._http = http
        self._session = session
        self._endpoints = endpoints

    def _create_session(self, user: dict) -> None:
        tenants = user.get("tenants")
        tenant = tenants[0] if isinstance(tenants, list) and tenants else None
        self._session.create(user.get("username"), tenant)

    async def check_status(self) -> Any:
        """Ask the server who is logged in and store it in the session."""
        data = await self._http.get(self._endpoints.auth)
        self._create_session(data or {})
        return data

    async def get_current_user(self) -> Union[str, Any]:
        """The session username if there is one, otherwise the server's answer."""
        logger.debug("get_current_user")
        if self._session.username:
            return self._session.username
        return await self.check_status()

    def is_authenticated(self) -> bool:
        return bool(self._session.username)

    async def login(self, username: str, password: str) -> Any:
        """
        Log in.

        Raises:
            AuthenticationError: when the server answers 400 or 401.

        Any other error response is returned as is.
        """
        try:
            data = await self._http.post(
                self._endpoints.auth, json={"username": username, "password": password}
            )
        except ApiError as e:
            if e.status_code in (400, 401):
                raise AuthenticationError("Invalid username or password") from e
            logger.warning(f"Login failed: {e}")
            return e.data

        self._create_session(data or {})
        logger.info(f"Logged in as {username}")
        return data

    async def logout(self) -> None:
        """Log out; the local session is cleared even when the request fails."""
        try:
            await self._http.post(f"{self._endpoints.auth}/logout")
        finally:
            self._session.destroy()

    @property
    def username(self) -> Optional[str]:
        return self._session.username
