"""Startup-time helpers for safe config logging."""

import os

from innovatex.common.config import settings
from innovatex.common.logging import logger


def _safe_env(name: str) -> str:
    """Return env value with simple redaction for secret-like variable names."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(secret in name for secret in ["KEY", "SECRET", "PASSWORD", "TOKEN"]):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name, "gateway": settings.cashfree_base_url}
    for key in keys:
        config[key] = _safe_env(key)
    logger.info("startup_config=%s", config)
    if not settings.cashfree_app_id or not settings.cashfree_secret_key:
        logger.warning("cashfree credentials are empty; create-order calls will be rejected upstream")
