# settings.py
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables
load_dotenv()


class Settings(BaseModel):
    DATABASE_URL: str = "sqlite:///./comments.db"
    SIMILARITY_THRESHOLD: float = 0.85
    MATCH_WINDOW_DAYS: int = 90
    REQUIRE_TOPIC_MATCH: bool = True
    CORS_ORIGINS: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./comments.db"),
        SIMILARITY_THRESHOLD=float(os.getenv("SIMILARITY_THRESHOLD", "0.85")),
        MATCH_WINDOW_DAYS=int(os.getenv("MATCH_WINDOW_DAYS", "90")),
        REQUIRE_TOPIC_MATCH=os.getenv("REQUIRE_TOPIC_MATCH", "true").lower() == "true",
        CORS_ORIGINS=[o.strip() for o in origins.split(",") if o.strip()],
    )
