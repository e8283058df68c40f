"""Ports to collaborators outside the kernel: payment gateway and notifications."""

from insurance_kernel.external.notifications import (
    LoggingNotificationSender,
    NotificationSender,
)
from insurance_kernel.external.payment_gateway import (
    GatewayResult,
    MockPaymentGateway,
    PaymentGateway,
)

__all__ = [
    "GatewayResult",
    "LoggingNotificationSender",
    "MockPaymentGateway",
    "NotificationSender",
    "PaymentGateway",
]
