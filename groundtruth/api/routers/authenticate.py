"""Authenticate router - login, session check and logout."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from groundtruth.api.auth import (
    CredentialVerifier,
    PasswordCipher,
    authenticate,
    current_user,
    get_cipher,
    get_verifier,
    login_user,
    logout_user,
    user_payload,
)
from groundtruth.api.errors import AuthenticationRequired, GroundTruthError
from groundtruth.api.schemas.auth import LoginRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/authenticate", tags=["authenticate"])


@router.get("", response_model=UserResponse)
def check(user: Optional[dict] = Depends(current_user)):
    """Return the logged in user."""
    if user is None:
        raise AuthenticationRequired("Not logged in")
    return user_payload(user)


@router.post("", response_model=UserResponse)
def login(
    body: LoginRequest,
    request: Request,
    cipher: PasswordCipher = Depends(get_cipher),
    verifier: CredentialVerifier = Depends(get_verifier)
):
    """Log in with classifier service credentials."""
    user = authenticate(body.username, body.password, verifier)
    login_user(request, user, cipher)
    logger.info(f"User {user['username']} logged in")
    return user_payload(user)


@router.post("/logout")
def logout(request: Request):
    """End the session."""
    if not logout_user(request):
        raise GroundTruthError("Not logged in", 400)
    return Response(status_code=200)
