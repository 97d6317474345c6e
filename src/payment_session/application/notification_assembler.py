from collections.abc import MutableMapping
from types import MappingProxyType

import structlog

from payment_session.application.ports import NotificationChannel, SecurityContextProvider
from payment_session.config import settings
from payment_session.domain.exceptions import MissingBuyerInfoError
from payment_session.domain.models import (
    BuyerInfo,
    NotificationPayloadKey,
    NotificationTopic,
    PaymentRecord,
    SecurityContext,
    SessionContext,
    TransactionCountClass,
)
from payment_session.infrastructure.metrics import (
    NOTIFICATIONS_DISPATCHED_TOTAL,
    NOTIFICATIONS_FAILED_TOTAL,
    track_dispatch_duration,
)


logger = structlog.get_logger()


BUYER_RECEIPT_TOPICS = MappingProxyType(
    {
        TransactionCountClass.NONE: NotificationTopic.EMPTY_PAYMENT_BUYER_RECEIPT,
        TransactionCountClass.SINGLE: NotificationTopic.SINGLE_PAYMENT_BUYER_RECEIPT,
        TransactionCountClass.MULTIPLE: NotificationTopic.MULTI_PAYMENT_BUYER_RECEIPT,
    }
)


def select_topic(payment: PaymentRecord) -> NotificationTopic:
    return BUYER_RECEIPT_TOPICS[TransactionCountClass.from_count(payment.transaction_count)]


class NotificationAssembler:
    """Builds the buyer receipt for a completed payment and dispatches it once."""

    def __init__(
        self,
        channel: NotificationChannel,
        security_context_provider: SecurityContextProvider,
        security_context_attribute: str | None = None,
    ) -> None:
        self._channel = channel
        self._security_context_provider = security_context_provider
        self._security_context_attribute = security_context_attribute or settings.security_context_attribute

    async def send_completion_notification(
        self,
        session: SessionContext,
        payment: PaymentRecord,
        scratch_payload: MutableMapping[str, str],
    ) -> None:
        """
        Populate ``scratch_payload`` and hand it to the notification channel.

        The payload ends up holding exactly the three ``NotificationPayloadKey``
        entries; anything the caller left in it beforehand is discarded. Buyer
        info is checked before the payload is touched. Channel failures are not
        retried and propagate unchanged.
        """
        buyer = self._require_buyer(session)
        topic = select_topic(payment)
        recipient_id = str(buyer.account_id)

        log = logger.bind(
            session_id=session.session_id,
            payment_id=payment.payment_id,
            topic=topic.value,
            recipient_id=recipient_id,
        )

        scratch_payload.clear()
        scratch_payload[NotificationPayloadKey.BUYER_NAME] = buyer.name
        scratch_payload[NotificationPayloadKey.PAYMENT_AMOUNT] = str(payment.amount)
        scratch_payload[NotificationPayloadKey.IS_MULTI_TRANSACTION] = (
            "true" if payment.transaction_count > 1 else "false"
        )

        security_context = self._security_context_provider.get_attribute(self._security_context_attribute)
        if security_context is None:
            log.warning("security_context_unset", attribute=self._security_context_attribute)

        try:
            await self._dispatch(scratch_payload, recipient_id, topic, security_context)
        except Exception as e:
            NOTIFICATIONS_FAILED_TOTAL.labels(topic=topic.value).inc()
            log.error("completion_notification_failed", error=str(e))
            raise

        NOTIFICATIONS_DISPATCHED_TOTAL.labels(topic=topic.value).inc()
        log.info(
            "completion_notification_dispatched",
            transaction_count=payment.transaction_count,
        )

    @track_dispatch_duration
    async def _dispatch(
        self,
        payload: MutableMapping[str, str],
        recipient_id: str,
        topic: NotificationTopic,
        security_context: SecurityContext | None,
    ) -> None:
        await self._channel.send_notification(payload, recipient_id, topic, security_context)

    def _require_buyer(self, session: SessionContext) -> BuyerInfo:
        buyer = session.buyer
        if buyer is None:
            raise MissingBuyerInfoError(session.session_id, ("name", "account_id"))

        missing = tuple(
            name
            for name, value in (("name", buyer.name), ("account_id", buyer.account_id))
            if value is None or value == ""
        )
        if missing:
            raise MissingBuyerInfoError(session.session_id, missing)
        return buyer
