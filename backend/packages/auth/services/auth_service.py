from sqlalchemy.exc import IntegrityError

from packages.auth.providers.models import IdentityClaims, IdentityProvider
from packages.auth.providers.factory import get_identity_provider
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.services.subscription_service import SubscriptionService
from packages.users.services.user_service import UserService
from packages.users.models.domain.user import User, UserCreateModel
from common.core.otel_axiom_exporter import trace_span, get_logger


logger = get_logger(__name__)


class AuthService:
    """Turns a bearer token into a local user, creating and provisioning it on first sight"""

    def __init__(self, provider: IdentityProvider = IdentityProvider.JWT):
        self.user_service = UserService()
        self.subscription_service = SubscriptionService()
        self.identity_provider = get_identity_provider(provider)

    @trace_span
    async def authenticate_user_from_token(self, token: str) -> AuthenticatedUser:
        claims = await self.identity_provider.verify_token(token)

        user = await self.user_service.get_by_auth_subject(claims.subject)
        if not user:
            user = await self._create_user(claims)

        if not await self.subscription_service.is_provisioned(user):
            await self._provision_billing(user)

        return AuthenticatedUser(user_id=user.id, email=user.email)

    async def _create_user(self, claims: IdentityClaims) -> User:
        logger.info("Creating new user", extra={"auth_subject": claims.subject})
        try:
            return await self.user_service.create_user(
                UserCreateModel(
                    email=claims.email,
                    full_name=claims.full_name,
                    auth_subject=claims.subject,
                )
            )
        except IntegrityError:
            # A concurrent first request created it
            user = await self.user_service.get_by_auth_subject(claims.subject)
            if user is None:
                raise
            logger.info(
                f"User {user.id} was created concurrently, reusing it",
                extra={"user_id": user.id, "auth_subject": claims.subject},
            )
            return user

    @trace_span
    async def _provision_billing(self, user: User) -> None:
        """Create the Stripe customer and FREE subscription for the user."""
        try:
            await self.subscription_service.provision_billing(user)
        except Exception as e:
            # Log but don't fail login; provisioning is retried on the next sign-in
            logger.error(
                f"Failed to provision billing for user {user.id}: {e}",
                extra={"user_id": user.id, "error": str(e)},
            )
