from typing import Any, Dict

import jwt
from pydantic import ValidationError

from common.core.config import settings
from common.core.exceptions import Unauthorized
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.auth.providers.interface import IdentityProviderInterface
from packages.auth.providers.models import IdentityClaims, IdentityProvider

logger = get_logger(__name__)


class JWTIdentityProvider(IdentityProviderInterface):
    """Verifies HMAC-signed JWTs issued by the auth frontend"""

    def __init__(self):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.audience = settings.jwt_audience
        self.issuer = settings.jwt_issuer

    @trace_span
    async def verify_token(self, token: str) -> IdentityClaims:
        payload = self._decode(token)
        try:
            return IdentityClaims(
                subject=payload["sub"],
                email=payload["email"],
                full_name=payload.get("name"),
            )
        except (KeyError, ValidationError) as e:
            logger.info(f"Token missing required claims: {e}")
            raise Unauthorized(f"Token missing required claims: {e}") from e

    def get_provider_name(self) -> IdentityProvider:
        return IdentityProvider.JWT

    def _decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "require": ["sub", "exp"],
                    "verify_aud": self.audience is not None,
                    "verify_iss": self.issuer is not None,
                },
            )
        except jwt.ExpiredSignatureError as e:
            raise Unauthorized("Token has expired", detail="Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected bearer token: {e}")
            raise Unauthorized(f"Invalid token: {e}") from e
