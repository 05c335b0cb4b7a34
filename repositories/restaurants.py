from typing import Any, Optional

from database import Repository


class RestaurantRepository(Repository):
    collection_name = "restaurants"
    references = ("address", "responsible", "employees")

    def update_responsible(self, _id: Any, employee_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"responsible": employee_id})

    def add_employee(self, _id: Any, employee_id: Any) -> Optional[dict]:
        return self.add_to_set(_id, "employees", employee_id)

    def remove_employee(self, _id: Any, employee_id: Any) -> Optional[dict]:
        return self.pull(_id, "employees", employee_id)

    def find_with_address(self, _id: Any) -> Optional[dict]:
        restaurant = self.find_by_id(_id)
        if restaurant is None:
            return None
        return self._embed(restaurant, "address", "addresses")
