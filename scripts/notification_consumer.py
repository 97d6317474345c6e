#!/usr/bin/env python3
"""Sample consumer for buyer receipt notifications.

Subscribes to the three buyer receipt topics and logs every notification
it receives, standing in for the downstream messaging service.
"""
import asyncio
import json
import signal
from typing import Any

import structlog
from aiokafka import AIOKafkaConsumer
from aiokafka.errors import KafkaError

from payment_session.config import settings
from payment_session.domain.models import NotificationPayloadKey, NotificationTopic
from payment_session.logging import configure_logging


logger = structlog.get_logger()

GROUP_ID = "sample-buyer-receipts"

TOPICS = [f"{settings.kafka_topic_prefix}.{topic.value}" for topic in NotificationTopic]


async def process_notification(topic: str, message: dict[str, Any]) -> None:
    """Log a received buyer receipt, flagging messages without a full payload."""
    payload = message.get("payload") or {}
    missing = [key.value for key in NotificationPayloadKey if key.value not in payload]

    if missing:
        logger.warning(
            "malformed_notification_received",
            topic=topic,
            event_id=message.get("event_id"),
            missing_keys=missing,
        )
        return

    logger.info(
        "buyer_receipt_received",
        topic=topic,
        event_id=message.get("event_id"),
        recipient_id=message.get("recipient_id"),
        buyer_name=payload[NotificationPayloadKey.BUYER_NAME.value],
        amount=payload[NotificationPayloadKey.PAYMENT_AMOUNT.value],
        multi_transaction=payload[NotificationPayloadKey.IS_MULTI_TRANSACTION.value] == "true",
    )


async def consume_notifications() -> None:
    consumer = AIOKafkaConsumer(
        *TOPICS,
        bootstrap_servers=settings.redpanda_brokers,
        group_id=GROUP_ID,
        auto_offset_reset="earliest",
        enable_auto_commit=True,
        value_deserializer=lambda m: json.loads(m.decode("utf-8")),
    )

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("shutdown_signal_received")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await consumer.start()
        logger.info("consumer_started", topics=TOPICS, group_id=GROUP_ID, brokers=settings.redpanda_brokers)

        while not shutdown_event.is_set():
            try:
                result = await asyncio.wait_for(
                    consumer.getmany(timeout_ms=1000, max_records=100),
                    timeout=2.0,
                )
            except TimeoutError:
                continue
            except KafkaError as e:
                logger.error("kafka_error", error=str(e))
                await asyncio.sleep(1)
                continue

            for topic_partition, messages in result.items():
                for msg in messages:
                    await process_notification(topic_partition.topic, msg.value)
    finally:
        await consumer.stop()
        logger.info("consumer_stopped")


async def main() -> None:
    configure_logging(level=settings.log_level, log_format=settings.log_format)
    logger.info("notification_consumer_starting")
    await consume_notifications()


if __name__ == "__main__":
    asyncio.run(main())
