from typing import Any, List, Optional

from database import Repository, to_object_id


class EmployeeRepository(Repository):
    collection_name = "employees"
    references = ("user", "restaurant", "session", "tracker")

    def find_by_account(self, user_id: Any) -> Optional[dict]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return self.find_one({"user": oid})

    def find_by_email(self, email: str) -> Optional[dict]:
        if not email:
            return None
        account = self.db["users"].find_one({"email": email}, {"_id": 1})
        if not account:
            return None
        return self.find_one({"user": account["_id"]})

    def find_by_restaurant(self, restaurant_id: Any) -> List[dict]:
        oid = to_object_id(restaurant_id)
        if oid is None:
            return []
        return self.find_many({"restaurant": oid})

    def delete_by_email(self, email: str) -> Optional[dict]:
        employee = self.find_by_email(email)
        if not employee:
            return None
        return self.delete_by_id(employee["_id"])

    def update_tracker(self, _id: Any, tracker_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"tracker": tracker_id})

    def update_restaurant(self, _id: Any, restaurant_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"restaurant": restaurant_id})

    def update_session(self, _id: Any, session_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"session": session_id})

    def hydrate(self, employee: Optional[dict]) -> Optional[dict]:
        """Employee with its account embedded, password hash left out."""
        if employee is None:
            return None
        employee = dict(employee)
        self._embed(employee, "user", "users")
        if isinstance(employee.get("user"), dict):
            employee["user"].pop("password_hash", None)
        return employee
