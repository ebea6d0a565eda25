# config.py
import os
from dotenv import load_dotenv

# Load .env into environment variables
load_dotenv()

# Async URL for the databases package, sync URL for create_all at startup
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./pharmadesk.db")
DATABASE_URL1 = os.getenv("DATABASE_URL1", "sqlite:///./pharmadesk.db")

# JWT settings
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PROD")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Preflight responses are cached by browsers for this many seconds
CORS_MAX_AGE = int(os.getenv("CORS_MAX_AGE", "3600"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def check_database_urls(url: str, sync_url: str) -> None:
    if not url or not sync_url:
        raise RuntimeError("DATABASE_URL and DATABASE_URL1 is not set in your environment")
