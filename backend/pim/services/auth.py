"""
PIM Backend — Auth Resolver
============================

What:  Turns a request into a verified user identity, or UnauthorizedError.
How:   1. Take the token from `Authorization: Bearer <token>`; if there is no
          bearer header, take it from the session cookie.
       2. Verify it with python-jose: signature, a mandatory `exp`, `nbf`, and `iss`/`aud`
          when configured. Unverified decoding is never attempted.
       3. Read the user id from the first claim present in the configured
          list (default: sub, uid, user_id).
Who:   `get_current_user` is a FastAPI dependency on every resource route.
       The AuthResolver instance is built by create_app() and stored on
       app.state, next to the Database.

Key configuration:
    AUTH_JWT_SECRET      → HS* tokens from our own auth service
    AUTH_JWT_PUBLIC_KEY  → RS*/ES* ID tokens from an identity provider
    With neither set, every request fails with 401.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import Request
from jose import JWTError, jwt

from pim.config import Settings
from pim.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Identity:
    """The authenticated caller. `user_id` scopes every repository call."""
    user_id: str


class AuthResolver:

    def __init__(self, settings: Settings):
        self.key = settings.auth_verification_key
        self.algorithms: List[str] = settings.auth_jwt_algorithms_list
        self.issuer = settings.auth_jwt_issuer
        self.audience = settings.auth_jwt_audience
        self.cookie_name = settings.auth_cookie_name
        self.user_id_claims: List[str] = settings.auth_user_id_claims_list

    def extract_token(
        self,
        authorization: Optional[str],
        cookie_token: Optional[str],
    ) -> str:
        """
        Bearer header first, then cookie.

        Raises:
            UnauthorizedError: neither source carries a token
        """
        if authorization and authorization[: len(BEARER_PREFIX)].lower() == BEARER_PREFIX:
            token = authorization[len(BEARER_PREFIX):].strip()
            if token:
                return token
        if cookie_token and cookie_token.strip():
            return cookie_token.strip()
        raise UnauthorizedError(reason="missing credentials")

    def decode(self, token: str) -> Dict[str, Any]:
        if not self.key:
            raise UnauthorizedError(reason="no verification key configured")
        try:
            return jwt.decode(
                token,
                self.key,
                algorithms=self.algorithms,
                issuer=self.issuer,
                audience=self.audience,
                options={
                    "verify_aud": self.audience is not None,
                    "require_exp": True,
                    "require_aud": self.audience is not None,
                    "require_iss": self.issuer is not None,
                },
            )
        except JWTError as e:
            raise UnauthorizedError(reason=f"invalid token: {e}") from e

    def identity_from_claims(self, claims: Dict[str, Any]) -> Identity:
        for claim in self.user_id_claims:
            value = claims.get(claim)
            if value is not None and str(value).strip():
                return Identity(user_id=str(value).strip())
        raise UnauthorizedError(reason="token has no user id claim")

    def verify(self, token: str) -> Identity:
        return self.identity_from_claims(self.decode(token))

    def resolve(self, request: Request) -> Identity:
        token = self.extract_token(
            request.headers.get("Authorization"),
            request.cookies.get(self.cookie_name),
        )
        return self.verify(token)


async def get_current_user(request: Request) -> Identity:
    """
    FastAPI dependency: the verified caller of the current request.

    Example usage in a route:
        @router.get("/notes")
        async def list_notes(identity: Identity = Depends(get_current_user)):
            ...
    """
    resolver: AuthResolver = request.app.state.auth_resolver
    try:
        identity = resolver.resolve(request)
    except UnauthorizedError as e:
        logger.info("Rejected request to %s: %s", request.url.path, e.reason)
        raise
    request.state.user_id = identity.user_id
    return identity
