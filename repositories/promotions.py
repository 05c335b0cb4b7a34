from datetime import datetime, timezone
from typing import Any, List, Optional

from database import Repository


class PromotionRepository(Repository):
    collection_name = "promotions"
    references = ("restaurant", "responsible")

    def update_promotion(self, _id: Any, promotion: dict) -> Optional[dict]:
        return self.update_by_id(_id, promotion)

    def find_active(self, at: Optional[datetime] = None) -> List[dict]:
        at = at or datetime.now(timezone.utc)
        # the store keeps naive UTC datetimes
        if at.tzinfo is not None:
            at = at.astimezone(timezone.utc).replace(tzinfo=None)
        return self.find_many({"start_date": {"$lte": at}, "end_date": {"$gte": at}}, sort=[("end_date", 1)])
