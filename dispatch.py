"""
Courier assignment for deliveries.

The store does the distance work: the restaurant's address coordinates are
handed to a ``$geoNear`` query over the trackers, and the deliveryman behind
the closest one gets the delivery.
"""
import logging
from typing import Any, Optional

from context import DomainContext

logger = logging.getLogger(__name__)


def find_nearest_courier(context: DomainContext, restaurant_id: Any) -> Optional[dict]:
    restaurant = context.restaurants.find_with_address(restaurant_id)
    if not restaurant or not isinstance(restaurant.get("address"), dict):
        logger.warning("Restaurant %s has no address to dispatch from", restaurant_id)
        return None
    address = restaurant["address"]
    tracker = context.trackers.find_nearest(address["longitude"], address["latitude"])
    if not tracker:
        return None
    return tracker["employee"]


def assign_courier(context: DomainContext, delivery: dict) -> Optional[dict]:
    """Give ``delivery`` to the deliveryman closest to the order's restaurant.

    Returns the updated delivery, or None when no courier could be found.
    """
    order = context.orders.find_by_id(delivery["order"])
    if not order:
        return None
    courier = find_nearest_courier(context, order["restaurant"])
    if courier is None:
        logger.warning("No courier available for delivery %s", delivery["_id"])
        return None
    updated = context.deliveries.update_employee(delivery["_id"], courier["_id"])
    context.orders.update_delivery_man(order["_id"], courier["_id"])
    logger.info("Assigned delivery %s to courier %s", delivery["_id"], courier["_id"])
    return updated
