"""Factory for creating singleton identity provider instances."""

from typing import Dict
from packages.auth.providers.interface import IdentityProviderInterface
from packages.auth.providers.models import IdentityProvider
from packages.auth.providers.jwt_provider import JWTIdentityProvider


class IdentityProviderFactory:
    """Factory for creating and managing identity provider singletons."""

    _instances: Dict[IdentityProvider, IdentityProviderInterface] = {}

    @classmethod
    def get_provider(cls, provider: IdentityProvider) -> IdentityProviderInterface:
        """Get or create a singleton instance of the specified provider."""
        if provider not in cls._instances:
            cls._instances[provider] = cls._create_provider(provider)

        return cls._instances[provider]

    @classmethod
    def _create_provider(cls, provider: IdentityProvider) -> IdentityProviderInterface:
        if provider == IdentityProvider.JWT:
            return JWTIdentityProvider()
        raise ValueError(f"Unsupported identity provider: {provider}. Supported: JWT.")


def get_identity_provider(provider: IdentityProvider) -> IdentityProviderInterface:
    return IdentityProviderFactory.get_provider(provider)
