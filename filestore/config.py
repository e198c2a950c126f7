import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Charge le .env situé à la racine du projet, où que soit lancé Python
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env")


class Settings(BaseModel):
    FILESTORE_MAX_WORKERS: int = int(os.getenv("FILESTORE_MAX_WORKERS", "4"))
    FILESTORE_JSON_INDENT: int = int(os.getenv("FILESTORE_JSON_INDENT", "2"))  # 0 => compact
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Basic logging setup for applications embedding the store."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
