from typing import Any, Optional

from database import Repository


class MenuRepository(Repository):
    collection_name = "menus"
    references = ("products", "promotion")

    def add_product(self, _id: Any, product_id: Any) -> Optional[dict]:
        return self.push(_id, "products", product_id)

    def remove_product(self, _id: Any, product_id: Any) -> Optional[dict]:
        return self.pull(_id, "products", product_id)

    def update_promotion(self, _id: Any, promotion_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"promotion": promotion_id})

    def find_with_products(self, _id: Any) -> Optional[dict]:
        menu = self.find_by_id(_id)
        if menu is None:
            return None
        self._embed_many(menu, "products", "products")
        return self._embed(menu, "promotion", "promotions")
