"""Application state management."""

from typing import Optional

import httpx

from .alerts import AlertBus
from .authentication import Authentication
from .classifiers import ClassifiersView
from .config import ClientConfig, get_config
from .http import HttpGateway, Navigator
from .nlc import NlcClient
from .resources import Classes, Content, Texts
from .session import Session
from .versions import VersionChecker


class ClientState:
    """
    Owns the session, alert bus and HTTP gateway and wires every client
    component to the same instances.

    Usage:
        async with ClientState() as state:
            await state.auth.login("user", "secret")
            classes = await state.classes.query()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or get_config()
        endpoints = self.config.endpoints

        self.session = Session()
        self.alerts = AlertBus()
        self.navigator = Navigator()
        self.http = HttpGateway(
            self.config.api_base_url,
            self.navigator,
            login_path=self.config.login_path,
            timeout=self.config.api_timeout_sec,
            transport=transport,
        )

        self.auth = Authentication(self.http, self.session, endpoints)
        self.classes = Classes(self.http, self.session, endpoints.classes, self.config.range_limit)
        self.texts = Texts(self.http, self.session, endpoints.texts, self.config.range_limit)
        self.content = Content(self.http, self.session, endpoints.content)
        self.nlc = NlcClient(self.http, self.session, endpoints)
        self.versions = VersionChecker(self.http, self.alerts, self.config.version_info, endpoints.versions)

    def classifiers_view(self) -> ClassifiersView:
        return ClassifiersView(self.nlc, self.alerts, self.config.poll_interval_sec)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "ClientState":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
