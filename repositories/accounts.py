from typing import Any, Optional

from database import Repository
from security import verify_password


class AccountRepository(Repository):
    collection_name = "users"
    references = ("address",)

    def find_by_email(self, email: str) -> Optional[dict]:
        if not email:
            return None
        return self.find_one({"email": email})

    def find_valid(self, email: str, password: str) -> Optional[dict]:
        account = self.find_by_email(email)
        if not account or not verify_password(password, account.get("password_hash", "")):
            return None
        return account

    def update_password(self, _id: Any, password_hash: str) -> Optional[dict]:
        return self.update_by_id(_id, {"password_hash": password_hash})

    def update_address(self, _id: Any, address_id: str) -> Optional[dict]:
        return self.update_by_id(_id, {"address": address_id})

    @staticmethod
    def without_secrets(account: Optional[dict]) -> Optional[dict]:
        if account is None:
            return None
        return {k: v for k, v in account.items() if k != "password_hash"}
