from datetime import datetime, timezone
from typing import Any, Optional

from database import Repository, to_object_id


class DeliveryRepository(Repository):
    collection_name = "deliveries"
    references = ("order", "customer", "employee")

    def find_by_order(self, order_id: Any) -> Optional[dict]:
        oid = to_object_id(order_id)
        if oid is None:
            return None
        return self.find_one({"order": oid})

    def update_status(self, _id: Any, status: str) -> Optional[dict]:
        fields = {"status": status}
        if status == "delivered":
            fields["actual_delivery"] = datetime.now(timezone.utc)
        return self.update_by_id(_id, fields)

    def update_employee(self, _id: Any, employee_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"employee": employee_id})

    def update_estimated_delivery(self, _id: Any, estimated_delivery: datetime) -> Optional[dict]:
        return self.update_by_id(_id, {"estimated_delivery": estimated_delivery})

    def update_actual_delivery(self, _id: Any, actual_delivery: datetime) -> Optional[dict]:
        return self.update_by_id(_id, {"actual_delivery": actual_delivery})
