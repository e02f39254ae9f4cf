"""
Publish/subscribe between the cart and whatever displays it.

A notification only says *that* something changed (user id and kind of
change); subscribers re-fetch instead of trusting a payload that may already
be stale.
"""
import logging

from blinker import Namespace

log = logging.getLogger(__name__)

CART_CHANGED = "cart-changed"
ORDER_PLACED = "order-placed"


class EventBus:
    def __init__(self):
        self._signals = Namespace()

    def subscribe(self, name, receiver):
        # strong refs: lambdas and bound methods of short-lived views must survive
        self._signals.signal(name).connect(receiver, weak=False)
        return receiver

    def unsubscribe(self, name, receiver):
        self._signals.signal(name).disconnect(receiver)

    def publish(self, name, sender=None, **info):
        """Fire and forget: a failing subscriber never fails the publisher."""
        for receiver in list(self._signals.signal(name).receivers_for(sender)):
            try:
                receiver(sender, **info)
            except Exception:
                log.exception("subscriber for %s failed", name)
