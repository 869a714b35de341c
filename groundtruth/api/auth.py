"""Authentication against the classifier service.

Users log in with their classifier service credentials. Both strategies
(HTTP Basic on any request, and a form login that stores the user in the
signed session cookie) check the credentials by calling the classifier
service's authenticated endpoint; a 200 means the credentials are valid.
The password is kept, encrypted, in the session so later classifier calls
can be made on the user's behalf.
"""

import base64
import binascii
import hashlib
import logging
from itertools import cycle
from typing import Optional

import requests
from fastapi import Depends, Request

from groundtruth.api.credentials import ServiceCredentials, get_classifier_credentials
from groundtruth.api.errors import AuthenticationRequired, GroundTruthError, SessionError
from groundtruth.config import get_global_config

logger = logging.getLogger(__name__)

SESSION_KEY = "user"
LOGIN_FAILED = "Username and password not recognised."


class PasswordCipher:
    """Reversible keyed transform for passwords held in the session cookie."""

    def __init__(self, secret: str):
        self._key = hashlib.sha256(secret.encode("utf-8")).digest()

    def _xor(self, data: bytes) -> bytes:
        return bytes(b ^ k for b, k in zip(data, cycle(self._key)))

    def encrypt(self, plain: str) -> str:
        return base64.urlsafe_b64encode(self._xor(plain.encode("utf-8"))).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            raw = base64.b64decode(token.encode("ascii"), altchars=b"-_", validate=True)
            return self._xor(raw).decode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise SessionError("Invalid session") from e


class CredentialVerifier:
    """Checks a username/password pair against the classifier service."""

    def __init__(
        self,
        credentials: ServiceCredentials,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._credentials = credentials
        self._timeout = timeout
        self._session = session or requests.Session()
        self._logger = logger or logging.getLogger(__name__)

    def verify(self, username: str, password: str) -> bool:
        if not self._credentials:
            self._logger.error("Classifier service credentials are not configured")
            return False

        url = f"{self._credentials.url.rstrip('/')}/{self._credentials.version}/classifiers"
        try:
            response = self._session.get(url, auth=(username, password), timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            self._logger.warning(f"Unable to reach classifier service: {e}")
            return False

        if response.status_code != 200:
            self._logger.info(f"Rejected credentials for {username} ({response.status_code})")
            return False
        return True


def make_user(username: str, password: str) -> dict:
    """A user's tenants are just their own username."""
    return {"username": username, "password": password, "tenants": [username]}


def user_payload(user: dict) -> dict:
    """The user as returned to clients."""
    return {"username": user["username"], "tenants": list(user["tenants"])}


def serialize_user(user: Optional[dict], cipher: PasswordCipher) -> dict:
    """Session form of a user, with the password encrypted."""
    if not user or not user.get("username"):
        raise SessionError("User not found")
    return {"username": user["username"], "password": cipher.encrypt(user.get("password", ""))}


def deserialize_user(data: Optional[dict], cipher: PasswordCipher) -> dict:
    if not data or not data.get("username"):
        raise SessionError("User not found")
    return make_user(data["username"], cipher.decrypt(data.get("password", "")))


def login_user(request: Request, user: dict, cipher: PasswordCipher) -> None:
    request.session[SESSION_KEY] = serialize_user(user, cipher)


def logout_user(request: Request) -> bool:
    """Drop the user from the session; returns whether one was logged in."""
    return request.session.pop(SESSION_KEY, None) is not None


def session_user(request: Request, cipher: PasswordCipher) -> Optional[dict]:
    if SESSION_KEY not in request.session:
        return None
    return deserialize_user(request.session[SESSION_KEY], cipher)


def parse_basic_auth(header: Optional[str]) -> Optional[tuple]:
    """Return (username, password) from a Basic Authorization header."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "basic" or not token:
        return None
    try:
        decoded = base64.b64decode(token.strip()).decode("utf-8")
    except (binascii.Error, ValueError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep or not username:
        return None
    return username, password


def authenticate(username: Optional[str], password: Optional[str], verifier: CredentialVerifier) -> dict:
    """Form login strategy."""
    if not username or not password:
        raise GroundTruthError("Missing credentials", 400)
    if not verifier.verify(username, password):
        raise AuthenticationRequired(LOGIN_FAILED)
    return make_user(username, password)


def basic_user(request: Request, verifier: CredentialVerifier) -> Optional[dict]:
    """Basic strategy; None when no (valid) Authorization header is sent."""
    credentials = parse_basic_auth(request.headers.get("authorization"))
    if credentials is None:
        return None
    username, password = credentials
    if not verifier.verify(username, password):
        return None
    return make_user(username, password)


# ============ Dependencies ============

_cipher: Optional[PasswordCipher] = None
_http_session: Optional[requests.Session] = None


def get_cipher() -> PasswordCipher:
    global _cipher
    if _cipher is None:
        _cipher = PasswordCipher(get_global_config().get('secrets.session'))
    return _cipher


def get_http_session() -> requests.Session:
    """Connection pool shared by every call to the classifier service."""
    global _http_session
    if _http_session is None:
        _http_session = requests.Session()
    return _http_session


def close_http_session() -> None:
    global _http_session
    if _http_session is not None:
        _http_session.close()
        _http_session = None


def get_verifier(session: requests.Session = Depends(get_http_session)) -> CredentialVerifier:
    return CredentialVerifier(
        get_classifier_credentials(),
        timeout=get_global_config().get_float('http.timeout_sec', 30),
        session=session,
    )


def current_user(
    request: Request,
    cipher: PasswordCipher = Depends(get_cipher),
    verifier: CredentialVerifier = Depends(get_verifier)
) -> Optional[dict]:
    """The session user, else the Basic auth user, else None."""
    user = session_user(request, cipher)
    if user is None:
        user = basic_user(request, verifier)
    return user


def require_user(user: Optional[dict] = Depends(current_user)) -> dict:
    if user is None:
        raise AuthenticationRequired("Authentication required")
    return user


def require_tenant(tenant: str, user: dict = Depends(require_user)) -> str:
    """Path dependency checking the user may access the tenant."""
    if tenant not in user["tenants"]:
        raise GroundTruthError(f"No access to tenant {tenant}", 403)
    return tenant
