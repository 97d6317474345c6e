"""Application layer - attempt governance and completion notifications."""

from payment_session.application.attempt_governor import AttemptGovernor
from payment_session.application.notification_assembler import (
    BUYER_RECEIPT_TOPICS,
    NotificationAssembler,
    select_topic,
)
from payment_session.application.ports import (
    NotificationChannel,
    SecurityContextProvider,
    SessionStore,
)


__all__ = [
    "BUYER_RECEIPT_TOPICS",
    "AttemptGovernor",
    "NotificationAssembler",
    "NotificationChannel",
    "SecurityContextProvider",
    "SessionStore",
    "select_topic",
]
