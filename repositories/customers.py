from typing import Any, Optional

from database import Repository, to_object_id


class CustomerRepository(Repository):
    collection_name = "customers"
    references = ("user", "orders", "session")

    def find_by_account(self, user_id: Any) -> Optional[dict]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return self.find_one({"user": oid})

    def add_order(self, _id: Any, order_id: Any) -> Optional[dict]:
        return self.push(_id, "orders", order_id)

    def remove_order(self, _id: Any, order_id: Any) -> Optional[dict]:
        return self.pull(_id, "orders", order_id)

    def update_session(self, _id: Any, session_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"session": session_id})

    def hydrate(self, customer: Optional[dict]) -> Optional[dict]:
        if customer is None:
            return None
        customer = dict(customer)
        self._embed(customer, "user", "users")
        if isinstance(customer.get("user"), dict):
            customer["user"].pop("password_hash", None)
        return customer
