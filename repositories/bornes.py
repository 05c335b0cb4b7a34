from typing import Any, List, Optional

from database import Repository, to_object_id


class BorneRepository(Repository):
    collection_name = "bornes"
    references = ("restaurant",)

    def find_by_restaurant(self, restaurant_id: Any) -> List[dict]:
        oid = to_object_id(restaurant_id)
        if oid is None:
            return []
        return self.find_many({"restaurant": oid})

    def update_status(self, _id: Any, status: str) -> Optional[dict]:
        return self.update_by_id(_id, {"status": status})
