import secrets
from typing import Optional

from database import Repository


class SessionRepository(Repository):
    """Sessions carry a random ``token``; clients present it as the bearer credential."""

    collection_name = "sessions"
    references = ("user", "employee")

    def create_for_employee(self, employee_id: str) -> dict:
        return self.create({"employee": employee_id, "token": secrets.token_urlsafe(32)})

    def create_for_account(self, user_id: str) -> dict:
        return self.create({"user": user_id, "token": secrets.token_urlsafe(32)})

    def find_active(self, token: str) -> Optional[dict]:
        if not token:
            return None
        return self.find_one({"token": token})
