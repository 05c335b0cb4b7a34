"""
Runtime configuration

Values come from the environment (or a .env file next to the process) and are
read once when the API starts.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class Settings(BaseModel):
    database_url: Optional[str] = Field(None, description="MongoDB connection URI")
    database_name: Optional[str] = Field(None, description="Database holding every collection")
    port: int = 8000
    admin_email: str = "root@esgiking.fr"
    admin_password: str = "root"
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    def require_database(self) -> None:
        if not self.database_url or not self.database_name:
            raise RuntimeError("Database not configured. Set DATABASE_URL and DATABASE_NAME environment variables.")


def get_settings() -> Settings:
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        database_name=os.getenv("DATABASE_NAME"),
        port=int(os.getenv("PORT", 8000)),
        admin_email=os.getenv("ADMIN_EMAIL", "root@esgiking.fr"),
        admin_password=os.getenv("ADMIN_PASSWORD", "root"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
