"""Cashfree create-order forwarding.

Builds the gateway payload from a validated request, performs exactly one
outbound call, and maps the outcome onto the proxy's error types. Nothing is
retried or stored.
"""

from time import time

import httpx

from innovatex.common.config import CommonSettings
from innovatex.common.logging import logger, order_id_ctx
from innovatex.common.metrics import (
    gateway_latency_seconds,
    payment_order_failure_total,
    payment_order_requests_total,
    payment_order_success_total,
)
from innovatex.services.payment_proxy.errors import GatewayError, GatewayUnavailableError
from innovatex.services.payment_proxy.schemas import CreatePaymentOrderRequest, GatewayOrderPayload

# Cashfree substitutes this placeholder in return URLs.
ORDER_ID_PLACEHOLDER = "{order_id}"


class PaymentOrderService:
    """Forwards create-order requests to the configured gateway environment."""

    def __init__(
        self,
        config: CommonSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.service_name = config.service_name

    def new_order_id(self) -> str:
        return f"{self.config.order_id_prefix}-{int(time() * 1000)}"

    def return_url(self, req: CreatePaymentOrderRequest) -> str:
        """Client-supplied URL, else RETURN_URL, else `<FRONTEND_URL>/success`."""

        base = None
        if req.order_meta is not None and req.order_meta.return_url:
            base = req.order_meta.return_url
        base = base or self.config.return_url or f"{self.config.frontend_url.rstrip('/')}/success"
        if ORDER_ID_PLACEHOLDER in base:
            return base
        separator = "&" if "?" in base else "?"
        return f"{base}{separator}order_id={ORDER_ID_PLACEHOLDER}"

    def build_payload(self, req: CreatePaymentOrderRequest) -> GatewayOrderPayload:
        order_meta = req.order_meta.model_dump(exclude_none=True) if req.order_meta is not None else {}
        order_meta["return_url"] = self.return_url(req)
        return GatewayOrderPayload(
            order_id=req.order_id or self.new_order_id(),
            order_amount=float(req.order_amount),
            order_currency=(req.order_currency or self.config.order_currency).upper(),
            customer_details=req.customer_details.model_dump(exclude_none=True),
            order_meta=order_meta,
        )

    def headers(self, trace_id: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-client-id": self.config.cashfree_app_id,
            "x-client-secret": self.config.cashfree_secret_key,
            "x-api-version": self.config.cashfree_api_version,
            "x-request-id": trace_id,
        }

    async def create_order(self, req: CreatePaymentOrderRequest, trace_id: str) -> dict:
        """Create one gateway order and return the gateway body verbatim.

        Raises `GatewayError` when the gateway refuses the order and
        `GatewayUnavailableError` on transport or decoding failures.
        """

        payload = self.build_payload(req)
        order_id_ctx.set(payload.order_id)
        payment_order_requests_total.labels(service=self.service_name).inc()

        try:
            with gateway_latency_seconds.labels(service=self.service_name).time():
                async with httpx.AsyncClient(
                    timeout=self.config.cashfree_timeout_seconds,
                    transport=self.transport,
                ) as client:
                    resp = await client.post(
                        f"{self.config.cashfree_base_url}/orders",
                        headers=self.headers(trace_id),
                        json=payload.model_dump(),
                    )
        except httpx.HTTPError as exc:
            payment_order_failure_total.labels(service=self.service_name, reason="network").inc()
            logger.exception("gateway request failed: %s", exc)
            raise GatewayUnavailableError() from exc

        try:
            data = resp.json()
        except ValueError as exc:
            if resp.is_success:
                payment_order_failure_total.labels(service=self.service_name, reason="decode").inc()
                logger.error("gateway returned undecodable body status=%s", resp.status_code)
                raise GatewayUnavailableError() from exc
            data = None

        if not resp.is_success or not isinstance(data, dict) or data.get("type") == "error":
            if resp.is_success and not isinstance(data, dict):
                payment_order_failure_total.labels(service=self.service_name, reason="decode").inc()
                logger.error("gateway returned non-object body status=%s", resp.status_code)
                raise GatewayUnavailableError()
            message = str(data["message"]) if isinstance(data, dict) and data.get("message") else None
            status_code = resp.status_code if not resp.is_success else 502
            payment_order_failure_total.labels(service=self.service_name, reason="gateway").inc()
            logger.error("gateway rejected order status=%s body=%s", resp.status_code, data)
            raise GatewayError(message=message, status_code=status_code)

        payment_order_success_total.labels(service=self.service_name).inc()
        logger.info("gateway order created status=%s", resp.status_code)
        return data
