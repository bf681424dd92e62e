from decimal import Decimal
from typing import Dict

from aurelane.adapters.mock_order_gateway import OrderRejected
from aurelane.models.line_item import discount_to_fields
from aurelane.schemas.cart_schema import CheckoutDetails
from aurelane.services.cart_store import CartStore
from aurelane.services.pricing import effective_price, line_total
from aurelane.utils.logger import get_logger

logger = get_logger(__name__)


class CheckoutException(Exception):
    pass


def _money(v: Decimal) -> str:
    return str(v)


class CheckoutService:
    def __init__(self, store: CartStore, gateway):
        self.store = store
        self.gateway = gateway

    def build_order_request(self, details: CheckoutDetails) -> Dict:
        """
        Order-creation payload from the current cart snapshot and its summary.
        Money values are decimal strings at full precision.
        """
        items = []
        for it in self.store.items:
            discount, discount_type = discount_to_fields(it.discount)
            items.append(
                {
                    "gemId": it.id,
                    "name": it.name,
                    "category": it.category,
                    "quantity": it.quantity,
                    "unitPrice": _money(it.unit_price),
                    "discount": _money(discount) if discount is not None else None,
                    "discountType": discount_type,
                    "effectivePrice": _money(effective_price(it)),
                    "lineTotal": _money(line_total(it)),
                }
            )

        totals = self.store.compute_totals()
        summary = self.store.summary()
        return {
            "items": items,
            "totals": {k: _money(v) if isinstance(v, Decimal) else v for k, v in totals.as_dict().items()},
            "summary": {k: _money(v) if isinstance(v, Decimal) else v for k, v in summary.as_dict().items()},
            "customer": {
                "firstName": details.first_name,
                "lastName": details.last_name,
                "email": details.email,
                "phone": details.phone,
            },
            "shippingAddress": {
                "address": details.address,
                "city": details.city,
                "state": details.state,
                "pincode": details.pincode,
            },
            "paymentMethod": details.payment_method,
            "orderNotes": details.order_notes,
        }

    def place_order(self, details: CheckoutDetails) -> Dict:
        """
        Hand the cart to the order gateway. The cart is cleared only once the
        gateway confirms the order; a rejection leaves it untouched.
        """
        if len(self.store) == 0:
            raise CheckoutException("Cart is empty")

        request = self.build_order_request(details)
        try:
            resp = self.gateway.create_order(request)
        except OrderRejected as e:
            logger.warning("Order rejected by gateway: %s", e)
            raise CheckoutException("Failed to place order: " + str(e))

        self.store.clear()
        logger.info("Order %s placed, cart cleared", resp.get("orderId"))
        return resp
