from typing import Any, List, Optional

from database import Repository, to_object_id


class OrderRepository(Repository):
    """Orders embed their line items as ``{type, item, quantity}`` sub-documents."""

    collection_name = "orders"
    references = ("customer", "restaurant", "promotion", "preparer", "delivery_man")

    def find_by_customer(self, customer_id: Any) -> List[dict]:
        oid = to_object_id(customer_id)
        if oid is None:
            return []
        return self.find_many({"customer": oid}, sort=[("created_at", -1)])

    def find_by_restaurant(self, restaurant_id: Any) -> List[dict]:
        oid = to_object_id(restaurant_id)
        if oid is None:
            return []
        return self.find_many({"restaurant": oid}, sort=[("created_at", -1)])

    def update_status(self, _id: Any, status: str) -> Optional[dict]:
        return self.update_by_id(_id, {"status": status})

    def update_delivery_man(self, _id: Any, employee_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"delivery_man": employee_id})

    def update_preparer(self, _id: Any, employee_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"preparer": employee_id})

    def _prepare(self, payload: dict) -> dict:
        payload = super()._prepare(payload)
        if "items" in payload:
            payload["items"] = [
                dict(item, item=self._reference("items.item", item["item"])) for item in payload["items"]
            ]
        return payload
