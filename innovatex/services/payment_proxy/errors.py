"""Error types surfaced to API callers as `{"message": ...}` bodies."""


MISSING_ORDER_DETAILS = "Missing required order details."
GATEWAY_DEFAULT_MESSAGE = "Failed to create payment session."
INTERNAL_ERROR_MESSAGE = "Internal Server Error"
RATE_LIMIT_MESSAGE = "Too many requests, please try again after 15 minutes."


class PaymentProxyError(Exception):
    """Base error carrying the HTTP status and client-facing message."""

    status_code = 500
    message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class OrderValidationError(PaymentProxyError):
    status_code = 400
    message = MISSING_ORDER_DETAILS


class GatewayError(PaymentProxyError):
    """Gateway answered but refused the order; status is relayed."""

    status_code = 502
    message = GATEWAY_DEFAULT_MESSAGE


class GatewayUnavailableError(PaymentProxyError):
    """Gateway unreachable or answered with something unparseable."""


class RateLimitExceededError(PaymentProxyError):
    status_code = 429
    message = RATE_LIMIT_MESSAGE
