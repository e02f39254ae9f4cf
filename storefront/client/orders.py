import logging
from typing import List

from storefront.client.schemas import Order, OrderDetail, SellerOrderDetail
from storefront.client.session import guarded
from storefront.lifecycle import allowed_transitions, check_transition

log = logging.getLogger(__name__)


class OrderTracker:
    """Customer view of their own orders."""

    def __init__(self, ctx):
        self.ctx = ctx

    @property
    def session(self):
        return self.ctx.session

    @guarded()
    def list_orders(self) -> List[Order]:
        return [Order.model_validate(o) for o in self.ctx.api.user_orders(self.session.user_id) or []]

    @guarded()
    def get_order(self, order_id) -> OrderDetail:
        return OrderDetail.model_validate(self.ctx.api.order_details(order_id))


class SellerOrders:
    """Orders that contain the seller's products, seen through the seller's items only."""

    def __init__(self, ctx):
        self.ctx = ctx

    @property
    def session(self):
        return self.ctx.session

    @guarded(role="seller")
    def list_orders(self) -> List[Order]:
        return [Order.model_validate(o) for o in self.ctx.api.seller_orders(self.session.user_id) or []]

    @guarded(role="seller")
    def get_order(self, order_id) -> SellerOrderDetail:
        return SellerOrderDetail.model_validate(
            self.ctx.api.seller_order_details(order_id, self.session.user_id)
        )

    @staticmethod
    def status_options(detail: SellerOrderDetail) -> List[str]:
        """Next statuses to offer for the order as last confirmed by the backend."""
        return allowed_transitions(detail.order.status)

    @guarded(role="seller")
    def update_status(self, detail: SellerOrderDetail, new_status) -> SellerOrderDetail:
        """Request a transition and return the backend-confirmed detail.

        ``detail`` is never modified; an illegal request raises
        ``InvalidTransition`` before any call, and a concurrent change by another
        seller raises it from the backend.
        """
        current = detail.order.status
        target = check_transition(current, new_status)
        data = self.ctx.api.update_order_status(detail.order.id, target.value, expected_status=current)
        confirmed = SellerOrderDetail.model_validate(data)
        log.info("order %s: %s -> %s", confirmed.order.id, current, confirmed.order.status)
        return confirmed
