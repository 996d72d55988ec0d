import logging

import aio_pika

logger = logging.getLogger(__name__)

EXCHANGE_NAME = "domain_events"
APP_ID = "quickfix-booking"


class RabbitPublisher:
    def __init__(self, url: str = ""):
        self.url = url
        self.enabled = bool(url)
        self._connection: aio_pika.abc.AbstractRobustConnection | None = None
        self._channel: aio_pika.abc.AbstractChannel | None = None
        self._exchange: aio_pika.abc.AbstractExchange | None = None

    async def connect(self):
        if not self.enabled:
            return

        if self._connection and not self._connection.is_closed:
            return

        try:
            self._connection = await aio_pika.connect_robust(self.url)
            self._channel = await self._connection.channel()
            self._exchange = await self._channel.declare_exchange(
                EXCHANGE_NAME,
                aio_pika.ExchangeType.TOPIC,
                durable=True,
            )
        except Exception as e:
            logger.warning("RabbitMQ connect failed: %s", e)
            self._connection = None
            self._channel = None
            self._exchange = None
            raise

    async def publish(self, routing_key: str, message_body: str, message_id: str | None = None):
        """Publish one JSON event. Errors propagate to the caller, which decides whether they matter."""
        if not self.enabled:
            return

        await self.connect()

        msg = aio_pika.Message(
            body=message_body.encode("utf-8"),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            message_id=message_id,
            type=routing_key,
            app_id=APP_ID,
        )
        await self._exchange.publish(msg, routing_key=routing_key)
        logger.debug("Published %s (%s)", routing_key, message_id)

    async def close(self):
        try:
            if self._connection and not self._connection.is_closed:
                await self._connection.close()
        finally:
            self._connection = None
            self._channel = None
            self._exchange = None
