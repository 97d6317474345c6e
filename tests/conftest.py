"""Shared pytest fixtures for payment session tests."""

from collections.abc import Mapping
from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from payment_session.domain.exceptions import ChannelDispatchError
from payment_session.domain.models import (
    BuyerInfo,
    FlowControlState,
    Money,
    NotificationTopic,
    PaymentRecord,
    SecurityContext,
    SessionContext,
    Transaction,
)
from payment_session.infrastructure.redis_client import RedisClient


@dataclass
class SentNotification:
    payload: dict[str, str]
    recipient_id: str
    topic: NotificationTopic
    security_context: SecurityContext | None


class InMemoryNotificationChannel:
    """Notification channel storing sent notifications for inspection."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[SentNotification] = []
        self._error = error

    async def send_notification(
        self,
        payload: Mapping[str, str],
        recipient_id: str,
        topic: NotificationTopic,
        security_context: SecurityContext | None,
    ) -> None:
        if self._error is not None:
            raise self._error
        self.sent.append(SentNotification(dict(payload), recipient_id, topic, security_context))


class StaticSecurityContextProvider:
    """Security-context provider returning a fixed context for one attribute name."""

    def __init__(self, key: str, context: SecurityContext | None) -> None:
        self.key = key
        self.context = context
        self.requested: list[str] = []

    def get_attribute(self, key: str) -> SecurityContext | None:
        self.requested.append(key)
        return self.context if key == self.key else None


@pytest.fixture
def buyer() -> BuyerInfo:
    """Create sample buyer."""
    return BuyerInfo(name="Mogambo", account_id=1539671732305563784)


@pytest.fixture
def session(buyer: BuyerInfo) -> SessionContext:
    """Create session with empty flow-control state and buyer info."""
    return SessionContext(
        session_id="session-001",
        flow_control=FlowControlState(),
        buyer=buyer,
    )


@pytest.fixture
def security_context() -> SecurityContext:
    """Create sample serialized security context."""
    return SecurityContext(token="eyJzdWIiOiJidXllci0wMDEifQ==")


@pytest.fixture
def security_context_provider(security_context: SecurityContext) -> StaticSecurityContextProvider:
    """Create provider serving the sample security context."""
    return StaticSecurityContextProvider("SECURITY_CONTEXT", security_context)


@pytest.fixture
def channel() -> InMemoryNotificationChannel:
    """Create in-memory notification channel."""
    return InMemoryNotificationChannel()


@pytest.fixture
def failing_channel() -> InMemoryNotificationChannel:
    """Create notification channel whose deliveries always fail."""
    return InMemoryNotificationChannel(
        error=ChannelDispatchError("single_payment_buyer_receipt", "1539671732305563784", "broker unavailable"),
    )


@pytest.fixture
def single_transaction_payment() -> PaymentRecord:
    """Create payment with one transaction and a zero aggregate amount."""
    return PaymentRecord(
        payment_id="payment-001",
        transactions=(Transaction(id="txn-001", amount=Money(0)),),
        amount=Money(0),
    )


@pytest.fixture
def multi_transaction_payment() -> PaymentRecord:
    """Create payment with three USD transactions."""
    return PaymentRecord.create(
        [
            Transaction(id="txn-001", amount=Money(1000, "USD")),
            Transaction(id="txn-002", amount=Money(2550, "USD")),
            Transaction(id="txn-003", amount=Money(450, "USD")),
        ]
    )


@pytest.fixture
def empty_payment() -> PaymentRecord:
    """Create payment without transactions."""
    return PaymentRecord(payment_id="payment-000", transactions=(), amount=Money(0))


@pytest.fixture
def mock_redis_client() -> AsyncMock:
    """Create mock RedisClient wrapping a mock redis connection."""
    client = AsyncMock(spec=RedisClient)
    client.client = AsyncMock()
    return client
