from typing import Any, List, Optional

from database import Repository, to_object_id


class ProductRepository(Repository):
    collection_name = "products"
    references = ("category", "promotion")

    def find_by_name(self, name: str) -> Optional[dict]:
        return self.find_one({"name": name})

    def find_by_category(self, category_id: Any) -> List[dict]:
        oid = to_object_id(category_id)
        if oid is None:
            return []
        return self.find_many({"category": oid}, sort=[("name", 1)])

    def update_promotion(self, _id: Any, promotion_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"promotion": promotion_id})

    def remove_promotion(self, _id: Any) -> Optional[dict]:
        return self.unset(_id, "promotion")

    def find_with_promotion(self, _id: Any) -> Optional[dict]:
        product = self.find_by_id(_id)
        if product is None:
            return None
        return self._embed(product, "promotion", "promotions")
