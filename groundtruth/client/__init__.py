"""Async client for the ground truth API."""

from .alerts import Alert, AlertBus
from .authentication import Authentication
from .classifiers import Classifier, ClassifiersView
from .config import ClientConfig, Endpoints, VersionInfo, get_config, set_config
from .exceptions import ApiError, AuthenticationError, ClientError, VersionCheckError
from .http import HttpGateway, Navigator
from .nlc import NlcClient, PollHandle
from .resources import Classes, Content, ResourceClient, Texts
from .session import Session
from .state import ClientState
from .versions import VersionChecker

__all__ = [
    "Alert",
    "AlertBus",
    "ApiError",
    "Authentication",
    "AuthenticationError",
    "Classes",
    "Classifier",
    "ClassifiersView",
    "ClientConfig",
    "ClientError",
    "ClientState",
    "Content",
    "Endpoints",
    "HttpGateway",
    "Navigator",
    "NlcClient",
    "PollHandle",
    "ResourceClient",
    "Session",
    "Texts",
    "VersionChecker",
    "VersionCheckError",
    "VersionInfo",
    "get_config",
    "set_config",
]
