"""JWT validation for the voice WebSocket."""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import WebSocket
from jose import JWTError, jwt

from cli.config_models import AuthConfig

logger = structlog.get_logger()

# RFC 6455 policy violation
WS_POLICY_VIOLATION = 1008


class AuthError(Exception):
    """Token missing, invalid or without a subject."""


@dataclass
class SessionUser:
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


def token_from_websocket(websocket: WebSocket) -> Optional[str]:
    """`token` query param first, then an `Authorization: Bearer` header."""
    token = websocket.query_params.get("token")
    if token:
        return token
    header = websocket.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def decode_token(token: Optional[str], secret: Optional[str], algorithm: str = "HS256") -> SessionUser:
    """Decode a JWT into the session user. Raises AuthError."""
    if not token:
        raise AuthError("missing token")
    if not secret:
        raise AuthError("JWT secret not configured")
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        raise AuthError(f"invalid token: {e}") from e
    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("invalid token: missing sub")
    return SessionUser(id=str(user_id), name=payload.get("name"), email=payload.get("email"))


def authenticate_websocket(websocket: WebSocket, auth: AuthConfig) -> SessionUser:
    return decode_token(token_from_websocket(websocket), auth.secret(), auth.algorithm)
