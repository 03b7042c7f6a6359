"""
RabbitMQ Event Publisher
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

import pika

from storefront.config import settings
from storefront.schemas.order import OrderEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publisher for sending order events to RabbitMQ"""

    def __init__(self, enabled: Optional[bool] = None):
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE
        self.routing_key = settings.RABBITMQ_ROUTING_KEY
        self.status_routing_key = settings.RABBITMQ_STATUS_ROUTING_KEY
        self.enabled = settings.EVENTS_ENABLED if enabled is None else enabled

    def build_event(self, event_type: str, data: Dict) -> OrderEvent:
        return OrderEvent(
            event_type=event_type,
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=settings.SERVICE_NAME,
            data=data
        )

    def publish_order_created(self, order_data: Dict) -> bool:
        """
        Publish OrderCreated event to RabbitMQ

        Args:
            order_data: Order data to publish

        Returns:
            True if published successfully, False otherwise
        """
        return self._publish(self.build_event("OrderCreated", order_data), self.routing_key, mandatory=True)

    def publish_order_status_changed(self, order_data: Dict) -> bool:
        """
        Publish OrderStatusChanged event to RabbitMQ

        Args:
            order_data: Order data including old and new status

        Returns:
            True if published successfully, False otherwise
        """
        return self._publish(
            self.build_event("OrderStatusChanged", order_data), self.status_routing_key, mandatory=False
        )

    def _publish(self, event: OrderEvent, routing_key: str, mandatory: bool) -> bool:
        if not self.enabled:
            logger.debug("Event publishing disabled, dropping %s", event.event_type,
                         extra={"event_id": event.event_id})
            return False

        try:
            connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            try:
                channel = connection.channel()

                channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )

                # Enable publisher confirms
                channel.confirm_delivery()

                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key,
                    body=json.dumps(event.model_dump(), default=str),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Persistent message
                        content_type='application/json',
                        correlation_id=event.event_id
                    ),
                    mandatory=mandatory
                )
            finally:
                connection.close()

            logger.info("Event published: %s", event.event_type, extra={"event_id": event.event_id})
            return True

        except pika.exceptions.UnroutableError:
            logger.warning("Event %s could not be routed to any queue", event.event_type,
                           extra={"event_id": event.event_id})
            return False
        except pika.exceptions.AMQPError:
            logger.exception("Error publishing %s event", event.event_type,
                             extra={"event_id": event.event_id})
            return False


def get_event_publisher() -> EventPublisher:
    """FastAPI dependency returning the event publisher"""
    return EventPublisher()
