from typing import Any, List, Optional

from database import Repository, to_object_id


class ChatRepository(Repository):
    collection_name = "chats"
    references = ("delivery", "author")

    def find_by_delivery(self, delivery_id: Any) -> List[dict]:
        oid = to_object_id(delivery_id)
        if oid is None:
            return []
        return self.find_many({"delivery": oid}, sort=[("created_at", 1)])

    def mark_read(self, _id: Any, is_read: bool = True) -> Optional[dict]:
        return self.update_by_id(_id, {"is_read": is_read})
