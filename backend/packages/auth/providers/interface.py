from abc import ABC, abstractmethod

from packages.auth.providers.models import IdentityClaims, IdentityProvider


class IdentityProviderInterface(ABC):
    """Interface for bearer token verification"""

    @abstractmethod
    async def verify_token(self, token: str) -> IdentityClaims:
        """Verify the token and return its claims. Raises Unauthorized."""
        pass

    @abstractmethod
    def get_provider_name(self) -> IdentityProvider:
        """Get the provider name"""
        pass
