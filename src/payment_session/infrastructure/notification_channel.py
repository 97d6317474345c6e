import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError
from ulid import ULID

from payment_session.config import settings
from payment_session.domain.exceptions import ChannelDispatchError
from payment_session.domain.models import NotificationTopic, SecurityContext


logger = structlog.get_logger()


class KafkaNotificationChannel:
    """
    Publishes buyer notifications to Kafka/Redpanda.

    One message per call, keyed by recipient so a buyer's receipts stay
    ordered within a partition. The producer is idempotent with ``acks="all"``;
    delivery failures surface as ``ChannelDispatchError`` and are not retried here.
    """

    def __init__(
        self,
        brokers: str | None = None,
        topic_prefix: str | None = None,
    ) -> None:
        self._brokers = brokers or settings.redpanda_brokers
        self._topic_prefix = topic_prefix or settings.kafka_topic_prefix
        self._producer: AIOKafkaProducer | None = None

    def topic_name(self, topic: NotificationTopic) -> str:
        return f"{self._topic_prefix}.{topic.value}"

    async def start(self) -> None:
        self._producer = AIOKafkaProducer(
            bootstrap_servers=self._brokers,
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            key_serializer=lambda k: k.encode("utf-8") if k else None,
            acks="all",
            enable_idempotence=True,
        )
        await self._producer.start()
        logger.info("notification_channel_started", brokers=self._brokers, topic_prefix=self._topic_prefix)

    async def stop(self) -> None:
        if self._producer:
            await self._producer.stop()
            self._producer = None
        logger.info("notification_channel_stopped")

    async def send_notification(
        self,
        payload: Mapping[str, str],
        recipient_id: str,
        topic: NotificationTopic,
        security_context: SecurityContext | None,
    ) -> None:
        if not self._producer:
            raise ChannelDispatchError(topic.value, recipient_id, "producer not started")

        kafka_topic = self.topic_name(topic)
        message = build_message(payload, recipient_id, topic, security_context)

        try:
            await self._producer.send_and_wait(topic=kafka_topic, key=recipient_id, value=message)
        except KafkaError as e:
            logger.error(
                "notification_publish_failed",
                event_id=message["event_id"],
                topic=kafka_topic,
                error=str(e),
            )
            raise ChannelDispatchError(topic.value, recipient_id, str(e)) from e

        logger.info(
            "notification_published",
            event_id=message["event_id"],
            topic=kafka_topic,
            recipient_id=recipient_id,
        )


def build_message(
    payload: Mapping[str, str],
    recipient_id: str,
    topic: NotificationTopic,
    security_context: SecurityContext | None,
) -> dict[str, Any]:
    return {
        "event_id": str(ULID()),
        "topic": topic.value,
        "recipient_id": recipient_id,
        "payload": {str(key): value for key, value in payload.items()},
        "security_context": security_context.token if security_context else None,
        "timestamp": datetime.now(UTC).isoformat(),
    }
