"""
Firebase ID token verification and the per-request trust context.

The subject identifier used to scope every storage call comes from the
verified claim set only. Client payloads are scrubbed of owner fields
before they are forwarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from gateway.config import Settings
from gateway.errors import AuthenticationMissing, AuthenticationRejected

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

# Columns the server owns on every record.
SERVER_MANAGED_FIELDS = ("id", "created_at", "updated_at")


class TokenVerificationError(Exception):
    """Raised by a verifier when the identity provider rejects a token."""


class TokenVerifier(Protocol):
    """Verifies an identity-provider token and returns its claims."""

    def verify(self, token: str) -> dict:
        ...


@dataclass(frozen=True)
class Principal:
    """The authenticated end user."""

    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    display_name: Optional[str] = None
    phone_number: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: dict) -> "Principal":
        uid = claims.get("uid") or claims.get("sub")
        if not uid:
            raise TokenVerificationError("Token has no subject identifier")
        return cls(
            uid=uid,
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            display_name=claims.get("name") or None,
            phone_number=claims.get("phone_number") or None,
        )

    def default_display_name(self) -> Optional[str]:
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return None


def extract_bearer_token(header: Optional[str]) -> str:
    if not header or not header.startswith(BEARER_PREFIX):
        raise AuthenticationMissing()
    return header[len(BEARER_PREFIX):].strip()


def authenticate(header: Optional[str], verifier: TokenVerifier) -> Principal:
    """
    Turn an Authorization header into a verified Principal.

    A missing or malformed header fails before the verifier is called.
    Verification failures are terminal for the request.
    """
    token = extract_bearer_token(header)
    try:
        claims = verifier.verify(token)
        return Principal.from_claims(claims)
    except TokenVerificationError as exc:
        logger.warning("Token verification error: %s", exc)
        raise AuthenticationRejected(details=str(exc)) from exc


def scrub_client_fields(values: dict, protected: Iterable[str]) -> dict:
    """Drop owner and server-managed keys from a client payload."""
    blocked = set(protected) | set(SERVER_MANAGED_FIELDS)
    return {key: value for key, value in values.items() if key not in blocked}


@dataclass
class InMemoryTokenVerifier:
    """Token table for development and tests."""

    tokens: dict = field(default_factory=dict)

    def issue(
        self,
        token: str,
        uid: str,
        *,
        email: Optional[str] = None,
        email_verified: bool = False,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> dict:
        claims = {
            "uid": uid,
            "sub": uid,
            "email": email,
            "email_verified": email_verified,
            "name": name,
            "phone_number": phone_number,
        }
        self.tokens[token] = claims
        return claims

    def revoke(self, token: str) -> None:
        self.tokens.pop(token, None)

    def verify(self, token: str) -> dict:
        claims = self.tokens.get(token)
        if claims is None:
            raise TokenVerificationError("Firebase ID token has invalid signature")
        return dict(claims)


def _build_credential(settings: Settings) -> credentials.Base:
    if not settings.has_firebase_service_account:
        return credentials.ApplicationDefault()
    client_email = settings.firebase_client_email or ""
    service_account = {
        "type": "service_account",
        "project_id": settings.firebase_project_id,
        "private_key_id": settings.firebase_private_key_id,
        "private_key": settings.firebase_private_key,
        "client_email": client_email,
        "client_id": settings.firebase_client_id,
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
        "client_x509_cert_url": (
            "https://www.googleapis.com/robot/v1/metadata/x509/"
            + client_email.replace("@", "%40")
        ),
    }
    return credentials.Certificate(service_account)


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, settings: Settings, app_name: str = "gateway"):
        self.check_revoked = settings.firebase_check_revoked
        try:
            self._app = firebase_admin.get_app(app_name)
        except ValueError:
            options = {}
            if settings.firebase_project_id:
                options["projectId"] = settings.firebase_project_id
            self._app = firebase_admin.initialize_app(
                _build_credential(settings), options, name=app_name
            )
            logger.info("Firebase Admin initialized (app=%s)", app_name)

    def verify(self, token: str) -> dict:
        try:
            return firebase_auth.verify_id_token(
                token, app=self._app, check_revoked=self.check_revoked
            )
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise TokenVerificationError(str(exc)) from exc
