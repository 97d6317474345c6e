"""Domain layer - session, payment and notification types."""

from payment_session.domain.exceptions import (
    ChannelDispatchError,
    CurrencyMismatchError,
    DomainError,
    MissingBuyerInfoError,
    StateMissingError,
)
from payment_session.domain.models import (
    BuyerInfo,
    FlowControlState,
    Money,
    NotificationPayloadKey,
    NotificationTopic,
    PaymentRecord,
    SecurityContext,
    SessionContext,
    Transaction,
    TransactionCountClass,
)


__all__ = [
    "BuyerInfo",
    "ChannelDispatchError",
    "CurrencyMismatchError",
    "DomainError",
    "FlowControlState",
    "MissingBuyerInfoError",
    "Money",
    "NotificationPayloadKey",
    "NotificationTopic",
    "PaymentRecord",
    "SecurityContext",
    "SessionContext",
    "StateMissingError",
    "Transaction",
    "TransactionCountClass",
]
