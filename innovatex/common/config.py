"""Central environment-driven settings for the payment proxy.

The process loads this once at startup. Gateway credentials are only ever read
from the environment (or a local `.env` file), never from source.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


CASHFREE_PRODUCTION_URL = "https://api.cashfree.com/pg"
CASHFREE_SANDBOX_URL = "https://sandbox.cashfree.com/pg"


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-proxy"
    log_level: str = "INFO"
    cashfree_app_id: str
    cashfree_secret_key: str
    cashfree_api_env: str = "sandbox"
    cashfree_api_version: str = "2022-09-01"
    cashfree_timeout_seconds: float = 10.0
    order_id_prefix: str = "INNOVATEX-SVR"
    order_currency: str = "INR"
    frontend_url: str = "http://localhost:5173"
    return_url: str | None = None
    cors_origins: str = ""
    host: str = "0.0.0.0"
    port: int = 4000
    redis_url: str = "redis://localhost:6379/0"
    redis_timeout_seconds: float = 0.5
    trusted_proxy_count: int = 0
    rate_limit_max_requests: int = 20
    rate_limit_window_seconds: int = 900
    idempotency_ttl_seconds: int = 86400
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://localhost:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cashfree_base_url(self) -> str:
        """Gateway base URL; anything other than `production` means sandbox."""

        if self.cashfree_api_env.strip().lower() == "production":
            return CASHFREE_PRODUCTION_URL
        return CASHFREE_SANDBOX_URL

    def allowed_origins(self) -> list[str]:
        origins = [origin.strip().rstrip("/") for origin in self.cors_origins.split(",") if origin.strip()]
        if self.frontend_url:
            frontend = self.frontend_url.rstrip("/")
            if frontend not in origins:
                origins.append(frontend)
        return origins or ["*"]


settings = CommonSettings()
