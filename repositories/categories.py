from typing import Any, Optional

from database import Repository


class CategoryRepository(Repository):
    collection_name = "categories"
    references = ("promotion", "products")

    def add_product(self, _id: Any, product_id: Any) -> Optional[dict]:
        return self.push(_id, "products", product_id)

    def remove_product(self, _id: Any, product_id: Any) -> Optional[dict]:
        return self.pull(_id, "products", product_id)

    def update_promotion(self, _id: Any, promotion_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"promotion": promotion_id})

    def find_with_products(self, _id: Any) -> Optional[dict]:
        category = self.find_by_id(_id)
        if category is None:
            return None
        return self._embed_many(category, "products", "products")
