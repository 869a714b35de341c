"""Version checker - compares this build with the published version feed."""

import logging
from typing import Optional

from .alerts import Alert, AlertBus
from .config import VersionInfo
from .exceptions import ApiError, VersionCheckError
from .http import HttpGateway

logger = logging.getLogger(__name__)

CURRENT = "current"
OLD = "old"
DEVELOPMENT = "development"

ALERT_ID = "version-status"


def compare_versions(local: str, remote: str) -> str:
    """Plain string comparison; "0.0.10" sorts before "0.0.9"."""
    if remote > local:
        return OLD
    if remote == local:
        return CURRENT
    return DEVELOPMENT


class VersionChecker:
    """Looks up the latest published version and warns once if this build differs."""

    def __init__(
        self,
        http: HttpGateway,
        alerts: AlertBus,
        version_info: VersionInfo,
        versions_url: str
    ):
        self._http = http
        self._alerts = alerts
        self._version_info = version_info
        self._versions_url = versions_url
        self.informed = False

    async def get_current(self) -> dict:
        """First entry of the feed, or {}."""
        try:
            data = await self._http.get(self._versions_url, params={"current": "true"})
        except ApiError as e:
            detail = e.data if e.data is not None else e.message
            raise VersionCheckError(f"Unable to get current version: {detail}") from e

        logger.debug(f"Got versions {data}")
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0]
        return {}

    async def _remote_version(self) -> str:
        current = await self.get_current()
        version = current.get("version")
        if not version:
            raise VersionCheckError("Current Version unknown")
        return str(version)

    async def is_current(self) -> bool:
        return await self._remote_version() == self._version_info.version

    async def get_status(self) -> str:
        """One of "old", "current" or "development"."""
        return compare_versions(self._version_info.version, await self._remote_version())

    async def alert(self) -> Optional[Alert]:
        """On the first call only, raise an info alert unless this build is current."""
        if self.informed:
            return None
        self.informed = True

        remote = await self._remote_version()
        status = compare_versions(self._version_info.version, remote)
        if status == CURRENT:
            return None

        local = self._version_info.version
        if status == OLD:
            alert = Alert(
                id=ALERT_ID,
                level="info",
                title="New version available",
                text=f"Version {remote} is available; you are running {local}.",
                dismissable=True,
                link=self._version_info.download,
            )
        else:
            alert = Alert(
                id=ALERT_ID,
                level="info",
                title="Development version",
                text=f"You are running {local} ({self._version_info.state}), ahead of the published {remote}.",
                dismissable=True,
            )
        self._alerts.add(alert)
        logger.info(f"Version {local} is {status} (published: {remote})")
        return alert
