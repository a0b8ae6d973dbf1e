from typing import Optional

from fastapi import Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from ..constants import ANONYMOUS_CALLER_KEY, CALLER_KEY_LENGTH, RateLimitScope
from ..utils.hashing import sha256_hex
from ..utils.rate_limit import get_rate_limiter

bearer_scheme = HTTPBearer(auto_error=False)


class Credential(BaseModel):
    """OAuth access token forwarded by the session provider."""
    access_token: str

    @property
    def caller_key(self) -> str:
        # Fingerprint only, the token itself never leaves this object.
        return sha256_hex(self.access_token)[:CALLER_KEY_LENGTH]


def caller_key(credential: Optional[Credential]) -> str:
    if credential is None or not credential.access_token:
        return ANONYMOUS_CALLER_KEY
    return credential.caller_key


async def get_optional_credential(
    authorization: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Credential]:
    if authorization is None or not authorization.credentials.strip():
        return None
    return Credential(access_token=authorization.credentials.strip())


async def require_credential(
    credential: Optional[Credential] = Depends(get_optional_credential),
) -> Credential:
    """
    Vérifie la présence du jeton d'accès dans le header Authorization.
    Sans jeton, la requête est rejetée en 401.
    """
    if credential is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credential


def enforce_rate_limit(scope: RateLimitScope, credential: Optional[Credential], response: Response) -> None:
    """
    Apply the sliding-window limit of an endpoint family to the caller.

    Called from route handlers once the request is authenticated and
    validated, so rejected requests never consume budget. Denied callers get
    a 429 with a Retry-After header in whole seconds; admitted callers see
    the remaining budget in X-RateLimit-Remaining.
    """
    decision = get_rate_limiter(scope.value).allow(caller_key(credential))
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
            headers={"Retry-After": str(decision.retry_after)},
        )
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
