from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "meterbill"
    api_version: str = "0.1.0"
    debug: bool = False

    # Database Components
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "meterbill"
    db_pool_size: int = 10
    db_pool_overflow: int = 5

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # OpenTelemetry
    otel_service_name: str = "meterbill-api"
    otel_service_version: str = "0.1.0"

    # Axiom (exporters are only attached when a token is present)
    axiom_token: Optional[str] = None
    axiom_dataset: Optional[str] = None

    # Rate limiting
    rate_limit_storage_uri: str = "memory://"

    # Identity - bearer JWTs issued by the auth frontend
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = None
    jwt_issuer: Optional[str] = None

    # Frontend base URL, used for checkout and portal redirects
    client_url: str = "http://localhost:3000"

    # Billing - Stripe (payments)
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    # Stripe price IDs for plan tiers
    stripe_price_id_free: str = ""
    stripe_price_id_pro: str = ""
    stripe_price_id_business: str = ""

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Auto-select CORS origins based on environment."""
        if self.environment == Environment.LOCAL:
            return [
                "http://localhost:3000",
                "http://localhost:5173",
            ]
        return [self.client_url]


settings = Settings()
