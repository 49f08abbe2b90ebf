"""
Shared-secret authentication for the ``/v1`` gate.

The gateway authenticates callers with a single shared secret. Token
checking sits behind the ``TokenValidator`` protocol so a different scheme
can be dropped in without touching the routing layer.
"""
import hmac
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from fastapi import Request

from dream_gateway.api.errors import Unauthorized
from dream_gateway.config.settings import Settings


@dataclass(frozen=True)
class Principal:
    """Authenticated caller. ``anonymous`` is set when no token was sent."""

    subject: str
    anonymous: bool = False


ANONYMOUS = Principal(subject="anonymous", anonymous=True)


class TokenValidator(Protocol):
    def validate(self, token: str) -> Optional[Principal]:
        """Return the caller for ``token``, or None to reject it."""
        ...


class SharedSecretValidator:
    """Accepts any of a fixed set of shared secrets."""

    def __init__(self, secrets: Iterable[str]):
        self._secrets = tuple(s for s in secrets if s)

    def validate(self, token: str) -> Optional[Principal]:
        if not token:
            return None
        for secret in self._secrets:
            if hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8")):
                return Principal(subject="shared-secret")
        return None


@dataclass(frozen=True)
class AuthPolicy:
    """What the ``/v1`` gate enforces."""

    validator: TokenValidator
    required: bool = True
    fallback_header: Optional[str] = "X-Auth-Token"

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthPolicy":
        secrets = [settings.backend_auth_token]
        if not settings.auth_required:
            # Local convenience: the development token is accepted when auth is optional
            secrets.append(settings.dev_auth_token)
        return cls(
            validator=SharedSecretValidator(secrets),
            required=settings.auth_required,
            fallback_header=settings.auth_fallback_header or None,
        )


def parse_bearer_token(value: Optional[str]) -> str:
    """Extract ``<token>`` from ``Bearer <token>``; empty string otherwise."""
    if not value:
        return ""
    parts = value.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ""
    return parts[1].strip()


def resolve_token(request: Request, fallback_header: Optional[str]) -> str:
    token = parse_bearer_token(request.headers.get("authorization"))
    if not token and fallback_header:
        token = (request.headers.get(fallback_header) or "").strip()
    return token


def authenticate(token: str, policy: AuthPolicy) -> Principal:
    """
    Apply the gate to a resolved token.

    Mandatory mode rejects anything the validator does not accept.
    Optional mode lets tokenless callers through but still rejects a token
    that does not validate.

    Raises:
        Unauthorized: when the token is missing (mandatory) or invalid
    """
    if not token:
        if policy.required:
            raise Unauthorized()
        return ANONYMOUS

    principal = policy.validator.validate(token)
    if principal is None:
        raise Unauthorized()
    return principal
