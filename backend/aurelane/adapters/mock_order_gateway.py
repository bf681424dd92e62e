import time
from typing import Dict


class OrderRejected(Exception):
    """Raised when the order backend refuses to create the order."""
    pass


class MockOrderGateway:
    """
    Stand-in for the storefront backend's order endpoint.
    create_order returns {orderId, status, total} with ORD<epoch millis> ids.
    """

    def __init__(self, delay_ms: int = 0, force_reject: bool = False):
        self.delay_seconds = delay_ms / 1000.0
        self.force_reject = force_reject
        self.created: list = []

    def create_order(self, order_request: Dict) -> Dict:
        """
        Args:
            order_request: payload built by the checkout service.

        Raises:
            OrderRejected: when the gateway is configured to refuse orders.
        """
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        if self.force_reject:
            raise OrderRejected("Simulated order rejection")

        order_id = f"ORD{int(time.time() * 1000)}"
        # ids are millisecond-based; bump on collisions within the same instance
        while any(o["orderId"] == order_id for o in self.created):
            order_id = f"ORD{int(order_id[3:]) + 1}"

        resp = {
            "orderId": order_id,
            "status": "placed",
            "total": order_request.get("summary", {}).get("total"),
        }
        self.created.append(resp)
        return resp

    def health_check(self) -> bool:
        return True
