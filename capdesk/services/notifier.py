"""Observer notification built on a private pypubsub publisher."""

import logging
from typing import Any, Callable, Dict
from pubsub.core import Publisher

logger = logging.getLogger(__name__)


def _event_listener_proto(event):
    """Listener prototype for notifier topics: one ``event`` argument."""


class _Subscription:
    """Callable wrapper registered with pypubsub for one subscriber.

    pypubsub only keeps weak references to listeners, so the notifier holds
    these wrappers strongly until unsubscribed. One wrapper per subscribe call
    keeps repeated subscriptions of the same callback independent.
    """

    def __init__(self, callback: Callable[[Any], None], topic: str):
        self.callback = callback
        self.topic = topic

    def __call__(self, event):
        try:
            self.callback(event)
        except Exception:
            logger.exception(f"Observer {self.callback!r} failed on topic {self.topic}")


class EventNotifier:
    """Publishes events to subscribers of a single topic.

    Each notifier owns its own pypubsub ``Publisher`` so that two ledgers (or
    two coordinators) in one process never share observers.
    """

    def __init__(self, topic: str):
        """Initialize notifier.

        Args:
            topic: Topic name events are published under
        """
        self.topic = topic
        self._publisher = Publisher()
        self._publisher.getTopicMgr().getOrCreateTopic(topic, _event_listener_proto)
        self._subscriptions: Dict[int, _Subscription] = {}
        self._next_token = 0
        logger.debug(f"EventNotifier initialized with topic: {topic}")

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a callback invoked with ``event`` on every publish.

        Args:
            callback: Callable taking one positional event argument

        Returns:
            Zero-argument callable removing this subscription
        """
        subscription = _Subscription(callback, self.topic)
        token = self._next_token
        self._next_token += 1
        self._subscriptions[token] = subscription
        self._publisher.subscribe(subscription, self.topic)

        def unsubscribe() -> None:
            removed = self._subscriptions.pop(token, None)
            if removed is not None:
                self._publisher.unsubscribe(removed, self.topic)

        return unsubscribe

    def publish(self, event: Any) -> None:
        """Deliver an event to all current subscribers."""
        self._publisher.sendMessage(self.topic, event=event)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
