"""Client configuration."""

from dataclasses import dataclass, field
from typing import Optional
import os


@dataclass
class Endpoints:
    """Paths of the backend resources, relative to the API base url."""

    auth: str = "/api/authenticate"
    texts: str = "/api"
    classes: str = "/api"
    content: str = "/api"
    classifier: str = "/api"
    import_csv: str = "/api/import/csv"
    versions: str = "https://ibmwatson-nlc-status.mybluemix.net/api/v1/versions"


@dataclass
class VersionInfo:
    """The version of this build."""

    version: str = "0.0.2"
    state: str = "beta"
    scope: str = "Beta Update 1"
    download: str = "https://hub.jazz.net/project/wdctools/ibmwatson-nlc-groundtruth"


@dataclass
class ClientConfig:
    """Configuration for the ground truth API client."""

    # API settings
    api_base_url: str = "http://localhost:9000"
    api_timeout_sec: float = 30

    # Polling settings
    poll_interval_sec: float = 5.0

    # Resource queries ask for the first range_limit items only
    range_limit: int = 10000

    # Where a 401 sends the user
    login_path: str = "/login"

    endpoints: Endpoints = field(default_factory=Endpoints)
    version_info: VersionInfo = field(default_factory=VersionInfo)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create config from environment variables."""
        endpoints = Endpoints()
        versions_url = os.getenv("VERSIONS_URL")
        if versions_url:
            endpoints.versions = versions_url
        return cls(
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:9000"),
            api_timeout_sec=float(os.getenv("API_TIMEOUT_SEC", "30")),
            poll_interval_sec=float(os.getenv("POLL_INTERVAL_SEC", "5.0")),
            endpoints=endpoints,
        )


# Global config instance
_config: Optional[ClientConfig] = None


def get_config() -> ClientConfig:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = ClientConfig.from_env()
    return _config


def set_config(config: ClientConfig) -> None:
    """Set the global config instance."""
    global _config
    _config = config
